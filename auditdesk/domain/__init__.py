"""Domain package exports: view-state models, schema helpers, pagination."""

from .errors import FieldIssue, ValidationError
from .pagination import (
    ELLIPSIS,
    PageWindowEntry,
    PaginationResult,
    compute_pagination,
    plan_page_window,
)
from .schema import (
    ValidationResult,
    ViewStateSchema,
    parse,
    safe_parse,
    serialize,
    validate_filters,
)
from .view_state import (
    DateRange,
    DeviceFilters,
    DeviceViewState,
    FeatureKey,
    ListViewState,
    ReportFilters,
    ReportViewState,
    SecurityFilters,
    SecurityViewState,
)

__all__ = [
    "ELLIPSIS",
    "DateRange",
    "DeviceFilters",
    "DeviceViewState",
    "FeatureKey",
    "FieldIssue",
    "ListViewState",
    "PageWindowEntry",
    "PaginationResult",
    "ReportFilters",
    "ReportViewState",
    "SecurityFilters",
    "SecurityViewState",
    "ValidationError",
    "ValidationResult",
    "ViewStateSchema",
    "compute_pagination",
    "parse",
    "plan_page_window",
    "safe_parse",
    "serialize",
    "validate_filters",
]
