"""ViewModel package for list view state and command surfaces.

Call context:
    ``auditdesk.app.controller`` mounts one concrete view model per feature
    view; presentation code binds pager, search box, filter and selection
    widgets to its commands and renders from its snapshots.

Dependencies:
    Modules in this package depend on domain types and the app timer
    primitives only. Data fetching and rendering remain outside.

Responsibilities:
    - Expose list view state and command intent methods.
    - Derive pager and query snapshots for collaborators.
    - Keep MVVM boundaries explicit by avoiding transport or persistence logic.
"""

from .feature_vms import DevicesVM, ReportsVM, SecurityVM, build_list_vm
from .list_settings import ListSettings
from .list_vm import ChangeKind, ListVM, PagerSnapshot, QuerySnapshot, ViewStateChange

__all__ = [
    "ChangeKind",
    "DevicesVM",
    "ListSettings",
    "ListVM",
    "PagerSnapshot",
    "QuerySnapshot",
    "ReportsVM",
    "SecurityVM",
    "ViewStateChange",
    "build_list_vm",
]
