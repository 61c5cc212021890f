from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping

from ..domain.pagination import DEFAULT_MAX_PAGES_TO_SHOW
from ..domain.view_state import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MIN_PAGE_SIZE

DEFAULT_DEBOUNCE_MS = 300


@dataclass(frozen=True)
class ListSettings:
    """Typed list behaviour settings shared by the feature view models."""

    page_size: int = DEFAULT_PAGE_SIZE
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    max_pages_to_show: int = DEFAULT_MAX_PAGES_TO_SHOW
    persist_selection_across_pages: bool = False

    def __post_init__(self) -> None:
        if not MIN_PAGE_SIZE <= self.page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be within [{MIN_PAGE_SIZE}, {MAX_PAGE_SIZE}].")
        if self.debounce_ms < 0:
            raise ValueError("debounce_ms must be non-negative.")
        if self.max_pages_to_show < 1:
            raise ValueError("max_pages_to_show must be at least 1.")

    # ------------------------------------------------------------------
    def apply_dict(self, payload: Mapping[str, Any]) -> "ListSettings":
        """Return a copy with flat ``payload`` keys applied."""
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed = {f.name for f in fields(self)}
        unknown = set(payload.keys()) - allowed
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for key in ("page_size", "debounce_ms", "max_pages_to_show"):
            if key in payload:
                updates[key] = _coerce_int(key, payload[key])
        if "persist_selection_across_pages" in payload:
            updates["persist_selection_across_pages"] = _coerce_bool(
                payload["persist_selection_across_pages"]
            )
        return replace(self, **updates) if updates else self

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ListSettings":
        return cls().apply_dict(payload)

    def to_dict(self) -> dict:
        return asdict(self)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer.")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} must be an integer.") from exc
    raise ValueError(f"{name} must be an integer.")


__all__ = ["DEFAULT_DEBOUNCE_MS", "ListSettings"]
