"""Typed view-state models for the list-backed features.

Each feature (devices, security issues, reports) owns one view-state model and
one filter model. Models are frozen pydantic records: Python code uses
snake_case attributes, persisted payloads use the camelCase keys of the
desktop front-end. Older payload keys (``limit``, ``selectedDeviceIds``,
``selectedIssueIds``, ``editingDevice``) are still accepted on input.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    StrictBool,
    StrictInt,
    ValidationInfo,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

SortDirection = Literal["asc", "desc"]
SORT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20

# floats refuse str and bool input; ints are accepted
Progress = Annotated[float, Strict()]


class FeatureKey(str, Enum):
    """List-backed features that own a view state."""

    DEVICES = "devices"
    SECURITY = "security"
    REPORTS = "reports"

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------
class FilterModel(BaseModel):
    """Base for per-feature filters: every field optional, unknown keys rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    def active(self) -> Dict[str, Any]:
        """Return the applied filters as a camelCase JSON-ready mapping."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def is_empty(self) -> bool:
        return not self.active()


class DateRange(BaseModel):
    """Inclusive date window; both bounds are required."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True)

    start_date: datetime
    end_date: datetime

    @field_validator("end_date")
    @classmethod
    def _not_before_start(cls, value: datetime, info: ValidationInfo) -> datetime:
        start = info.data.get("start_date")
        if start is None:
            return value
        try:
            inverted = start > value
        except TypeError as exc:
            raise ValueError("startDate and endDate must both be timezone-aware or both naive") from exc
        if inverted:
            raise ValueError("Start date must be before or equal to end date")
        return value


class DeviceFilters(FilterModel):
    device_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("deviceType", "type", "device_type"),
        serialization_alias="deviceType",
    )
    vendor: Optional[str] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None


class SecurityFilters(FilterModel):
    severity: Optional[str] = None
    status: Optional[str] = None
    device_id: Optional[str] = None
    check_type: Optional[str] = None
    date_range: Optional[DateRange] = None


class ReportFilters(FilterModel):
    type: Optional[str] = None
    status: Optional[str] = None
    format: Optional[str] = None


# ---------------------------------------------------------------------------
# View states
# ---------------------------------------------------------------------------
class ListViewState(BaseModel):
    """Fields shared by every list-backed feature."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    current_page: StrictInt = Field(1, ge=1)
    page_size: StrictInt = Field(
        DEFAULT_PAGE_SIZE,
        ge=MIN_PAGE_SIZE,
        le=MAX_PAGE_SIZE,
        validation_alias=AliasChoices("pageSize", "limit", "page_size"),
        serialization_alias="pageSize",
    )
    search_query: str = ""
    sort_by: str = Field("name", min_length=1)
    sort_direction: SortDirection = "asc"
    selected_ids: FrozenSet[str] = Field(
        default_factory=frozenset,
        validation_alias=AliasChoices(
            "selectedIds", "selectedDeviceIds", "selectedIssueIds", "selected_ids"
        ),
        serialization_alias="selectedIds",
    )
    is_selection_mode: StrictBool = False

    @field_serializer("selected_ids")
    def _serialize_selected_ids(self, value: FrozenSet[str]) -> List[str]:
        return sorted(value)

    @field_validator("filters", mode="before", check_fields=False)
    @classmethod
    def _missing_filters(cls, value: Any) -> Any:
        return {} if value is None else value


class DeviceViewState(ListViewState):
    filters: DeviceFilters = Field(default_factory=DeviceFilters)
    sort_by: str = Field("name", min_length=1)
    sort_direction: SortDirection = "asc"
    is_form_modal_open: StrictBool = False
    editing_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("editingId", "editingDevice", "editing_id"),
        serialization_alias="editingId",
    )


class SecurityViewState(ListViewState):
    filters: SecurityFilters = Field(default_factory=SecurityFilters)
    sort_by: str = Field("checkedAt", min_length=1)
    sort_direction: SortDirection = "desc"
    is_running_checks: StrictBool = False
    check_progress: Progress = Field(0.0, ge=0, le=100)


class ReportViewState(ListViewState):
    filters: ReportFilters = Field(default_factory=ReportFilters)
    sort_by: str = Field("createdAt", min_length=1)
    sort_direction: SortDirection = "desc"
    is_generating: StrictBool = False
    generation_progress: Progress = Field(0.0, ge=0, le=100)
    is_schedule_modal_open: StrictBool = False


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "MIN_PAGE_SIZE",
    "SORT_DIRECTIONS",
    "DateRange",
    "DeviceFilters",
    "DeviceViewState",
    "FeatureKey",
    "FilterModel",
    "ListViewState",
    "ReportFilters",
    "ReportViewState",
    "SecurityFilters",
    "SecurityViewState",
    "SortDirection",
]
