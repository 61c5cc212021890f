"""Feature-specific list view models carrying transient UI flags.

Each subclass binds :class:`ListVM` to one feature schema and adds the
commands the feature view exposes besides paging, searching and filtering:
the device form modal, the security check progress bar, and the report
generation progress and schedule modal.
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from ..app.timers import TimerScheduler
from ..domain.schema import FeatureLike, feature_key
from ..domain.view_state import (
    DeviceViewState,
    FeatureKey,
    ListViewState,
    ReportViewState,
    SecurityViewState,
)
from .list_settings import ListSettings
from .list_vm import ListVM


def _clamp_progress(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


class DevicesVM(ListVM):
    """Device inventory list with the create/edit form modal."""

    def __init__(
        self,
        scheduler: TimerScheduler,
        *,
        settings: Optional[ListSettings] = None,
        state: Optional[DeviceViewState] = None,
    ) -> None:
        super().__init__(FeatureKey.DEVICES, scheduler, settings=settings, state=state)

    @property
    def is_form_modal_open(self) -> bool:
        return self.state.is_form_modal_open  # type: ignore[attr-defined]

    @property
    def editing_id(self) -> Optional[str]:
        return self.state.editing_id  # type: ignore[attr-defined]

    def open_form(self, editing_id: Optional[str] = None) -> None:
        """Open the device form; ``editing_id`` selects edit instead of create."""
        self._set_flags(is_form_modal_open=True, editing_id=editing_id)

    def close_form(self) -> None:
        self._set_flags(is_form_modal_open=False, editing_id=None)


class SecurityVM(ListVM):
    """Security issue list with check-run progress."""

    def __init__(
        self,
        scheduler: TimerScheduler,
        *,
        settings: Optional[ListSettings] = None,
        state: Optional[SecurityViewState] = None,
    ) -> None:
        super().__init__(FeatureKey.SECURITY, scheduler, settings=settings, state=state)

    @property
    def is_running_checks(self) -> bool:
        return self.state.is_running_checks  # type: ignore[attr-defined]

    @property
    def check_progress(self) -> float:
        return self.state.check_progress  # type: ignore[attr-defined]

    def start_checks(self) -> None:
        self._set_flags(is_running_checks=True, check_progress=0.0)

    def update_check_progress(self, percent: float) -> None:
        """Record check progress; values outside 0..100 are clamped."""
        self._set_flags(check_progress=_clamp_progress(percent))

    def finish_checks(self) -> None:
        self._set_flags(is_running_checks=False)


class ReportsVM(ListVM):
    """Report list with generation progress and the schedule modal."""

    def __init__(
        self,
        scheduler: TimerScheduler,
        *,
        settings: Optional[ListSettings] = None,
        state: Optional[ReportViewState] = None,
    ) -> None:
        super().__init__(FeatureKey.REPORTS, scheduler, settings=settings, state=state)

    @property
    def is_generating(self) -> bool:
        return self.state.is_generating  # type: ignore[attr-defined]

    @property
    def generation_progress(self) -> float:
        return self.state.generation_progress  # type: ignore[attr-defined]

    def start_generation(self) -> None:
        self._set_flags(is_generating=True, generation_progress=0.0)

    def update_generation_progress(self, percent: float) -> None:
        self._set_flags(generation_progress=_clamp_progress(percent))

    def finish_generation(self) -> None:
        self._set_flags(is_generating=False)

    def open_schedule_modal(self) -> None:
        self._set_flags(is_schedule_modal_open=True)

    def close_schedule_modal(self) -> None:
        self._set_flags(is_schedule_modal_open=False)


FEATURE_VMS: Dict[FeatureKey, Type[ListVM]] = {
    FeatureKey.DEVICES: DevicesVM,
    FeatureKey.SECURITY: SecurityVM,
    FeatureKey.REPORTS: ReportsVM,
}


def build_list_vm(
    feature: FeatureLike,
    scheduler: TimerScheduler,
    *,
    settings: Optional[ListSettings] = None,
    state: Optional[ListViewState] = None,
) -> ListVM:
    """Create the view model class registered for ``feature``."""
    vm_cls = FEATURE_VMS[feature_key(feature)]
    return vm_cls(scheduler, settings=settings, state=state)  # type: ignore[call-arg,arg-type]


__all__ = ["DevicesVM", "FEATURE_VMS", "ReportsVM", "SecurityVM", "build_list_vm"]
