from __future__ import annotations

from typing import List, Optional, Tuple

from auditdesk.app.timers import ManualTimerSource, TimerScheduler
from auditdesk.viewmodels.feature_vms import build_list_vm
from auditdesk.viewmodels.list_settings import ListSettings
from auditdesk.viewmodels.list_vm import ChangeKind, ListVM, ViewStateChange


def make_list_vm(
    feature: str = "devices",
    *,
    settings: Optional[ListSettings] = None,
) -> Tuple[ListVM, ManualTimerSource, List[ViewStateChange]]:
    """Build a view model on a manual clock and record its notifications."""
    clock = ManualTimerSource()
    vm = build_list_vm(feature, TimerScheduler.from_source(clock), settings=settings)
    events: List[ViewStateChange] = []
    vm.subscribe(events.append)
    return vm, clock, events


def kinds(events: List[ViewStateChange]) -> List[ChangeKind]:
    return [event.kind for event in events]


__all__ = ["kinds", "make_list_vm"]
