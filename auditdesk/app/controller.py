"""View-model lifecycle wiring for the feature list views.

This module owns one :class:`~auditdesk.viewmodels.list_vm.ListVM` per
mounted feature view. Presentation code calls ``mount`` when a feature tab is
shown and ``unmount`` when it is hidden; the returned payload can be handed
back to ``mount`` to restore the view where the user left it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..domain.schema import FeatureLike, feature_key
from ..domain.view_state import FeatureKey
from ..utils.logging import apply_debug_preference
from ..viewmodels.feature_vms import build_list_vm
from ..viewmodels.list_settings import ListSettings
from ..viewmodels.list_vm import ListVM
from .timers import TimerScheduler, TimerSource

log = logging.getLogger(__name__)


class FeatureViewsController:
    """Create, cache and tear down feature view models on a shared scheduler.

    Call chain:
        The shell creates one instance at startup with its UI timer source
        (Tk ``after``/``after_cancel``, an asyncio loop, or a manual clock)
        and forwards tab changes to ``mount``/``unmount``.
    """

    def __init__(
        self,
        timers: TimerSource | TimerScheduler,
        *,
        settings: Optional[ListSettings] = None,
        settings_by_feature: Optional[Mapping[FeatureLike, ListSettings]] = None,
        debug_logging: Optional[bool] = None,
    ) -> None:
        """Initialize the controller.

        Args:
            timers: Timer source or ready scheduler shared by all view models.
            settings: Default list settings for every feature.
            settings_by_feature: Optional per-feature overrides.
            debug_logging: In-app debug toggle for the package loggers;
                ``None`` leaves their level untouched.
        """
        self.scheduler = timers if isinstance(timers, TimerScheduler) else TimerScheduler.from_source(timers)
        self.settings = settings or ListSettings()
        self._settings_by_feature: Dict[FeatureKey, ListSettings] = {
            feature_key(key): value for key, value in (settings_by_feature or {}).items()
        }
        self._views: Dict[FeatureKey, ListVM] = {}
        if debug_logging is not None:
            self.set_debug_logging(debug_logging)

    def set_debug_logging(self, enabled: bool) -> int:
        """Apply the debug toggle; environment overrides still win."""
        level = apply_debug_preference(bool(enabled))
        log.debug("Effective log level: %s", logging.getLevelName(level))
        return level

    def settings_for(self, feature: FeatureLike) -> ListSettings:
        return self._settings_by_feature.get(feature_key(feature), self.settings)

    def mount(self, feature: FeatureLike, restored: Optional[Mapping[str, Any]] = None) -> ListVM:
        """Return the feature's view model, creating it with defaults if needed.

        A ``restored`` payload is applied only when the view model is created;
        invalid payloads are logged and the defaults are kept.
        """
        key = feature_key(feature)
        vm = self._views.get(key)
        if vm is not None:
            return vm
        vm = build_list_vm(key, self.scheduler, settings=self.settings_for(key))
        if restored is not None:
            vm.restore(dict(restored))
        self._views[key] = vm
        log.debug("Mounted %s view", key.value)
        return vm

    def get(self, feature: FeatureLike) -> Optional[ListVM]:
        return self._views.get(feature_key(feature))

    def is_mounted(self, feature: FeatureLike) -> bool:
        return feature_key(feature) in self._views

    def unmount(self, feature: FeatureLike) -> Optional[Dict[str, Any]]:
        """Close the feature's view model and return its saved payload."""
        key = feature_key(feature)
        vm = self._views.pop(key, None)
        if vm is None:
            return None
        payload = vm.to_dict()
        vm.close()
        log.debug("Unmounted %s view", key.value)
        return payload

    def close_all(self) -> Dict[FeatureKey, Dict[str, Any]]:
        """Unmount every view (app shutdown) and cancel remaining timers."""
        payloads: Dict[FeatureKey, Dict[str, Any]] = {}
        for key in list(self._views.keys()):
            payload = self.unmount(key)
            if payload is not None:
                payloads[key] = payload
        self.scheduler.cancel_all()
        return payloads


__all__ = ["FeatureViewsController"]
