"""Level and handler setup for the ``auditdesk`` logger hierarchy.

Modules log through ``logging.getLogger(__name__)``. This module only decides
the level of the package logger and, when the host application has not set
up logging itself, attaches a console handler.

Environment overrides (win over the in-app debug toggle):
    AUDITDESK_LOG_LEVEL  level name or number
    AUDITDESK_DEBUG      truthy value forces DEBUG
"""

from __future__ import annotations

import logging
import os
from typing import IO, Optional

PACKAGE_LOGGER = "auditdesk"
LEVEL_ENV = "AUDITDESK_LOG_LEVEL"
DEBUG_ENV = "AUDITDESK_DEBUG"

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_TRUTHY = {"1", "true", "yes", "on"}

log = logging.getLogger(__name__)


def env_level() -> Optional[int]:
    """Return the level forced through the environment, if any."""
    raw = (os.getenv(LEVEL_ENV) or "").strip()
    if raw:
        if raw.isdigit():
            return int(raw)
        level = logging.getLevelName(raw.upper())
        if isinstance(level, int):
            return level
        log.warning("Ignoring unknown %s=%r", LEVEL_ENV, raw)
    if (os.getenv(DEBUG_ENV) or "").strip().lower() in _TRUTHY:
        return logging.DEBUG
    return None


def apply_debug_preference(debug: bool) -> int:
    """Set the package logger level from the debug toggle.

    Returns the effective level.
    """
    forced = env_level()
    if forced is not None:
        level = forced
    else:
        level = logging.DEBUG if debug else logging.INFO
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    return level


def configure_logging(debug: bool = False, stream: Optional[IO[str]] = None) -> int:
    """Attach a console handler to the package logger once, then set its level.

    No handler is added when the root logger already has one, so hosts that
    configure logging keep control of the output format.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)
    return apply_debug_preference(debug)


__all__ = ["apply_debug_preference", "configure_logging", "env_level"]
