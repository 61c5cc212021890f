"""Paginated list view model shared by the device, security and report views.

Call context:
    Presentation code forwards pager clicks, keystrokes, filter/sort widgets
    and row checkboxes to one :class:`ListVM` per mounted feature. The data
    fetcher subscribes to changes, reads :meth:`ListVM.query_snapshot` to
    build its request, and reports back through ``loading_started``,
    ``data_loaded`` and ``loading_finished``.

Responsibilities:
    - Own the feature's validated view state (single writer).
    - Debounce search input; only settled queries reset the page.
    - Keep derived pagination metadata in sync with the backing row count.
    - Notify subscribers synchronously after every successful mutation.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..app.debouncer import Debouncer
from ..app.timers import TimerScheduler
from ..domain.errors import ValidationError
from ..domain.pagination import (
    PageWindowEntry,
    PaginationResult,
    clamp_page,
    compute_pagination,
    plan_page_window,
    total_pages_for,
)
from ..domain.schema import FeatureLike, ValidationResult, evolve, feature_key, schema_for, serialize
from ..domain.view_state import FilterModel, ListViewState
from .list_settings import ListSettings

log = logging.getLogger(__name__)

_channel_ids = itertools.count(1)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, set, frozenset)):
        return len(value) == 0
    return False


class ChangeKind(str, Enum):
    """What a :class:`ViewStateChange` notification is about."""

    PAGE = "page"
    PAGE_SIZE = "page_size"
    QUERY_INPUT = "query_input"
    QUERY = "query"
    FILTERS = "filters"
    FILTER_ERROR = "filter_error"
    SORT = "sort"
    SELECTION = "selection"
    PAGINATION = "pagination"
    LOADING = "loading"
    FLAGS = "flags"
    RESTORED = "restored"


@dataclass(frozen=True)
class ViewStateChange:
    kind: ChangeKind
    state: ListViewState


Listener = Callable[[ViewStateChange], None]


@dataclass(frozen=True)
class QuerySnapshot:
    """Read-only request parameters for the data fetcher."""

    current_page: int
    page_size: int
    search_query: str
    filters: Dict[str, Any]
    sort_by: str
    sort_direction: str

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.page_size


@dataclass(frozen=True)
class PagerSnapshot:
    """Read-only pager rendering state."""

    pages_to_show: Tuple[PageWindowEntry, ...]
    can_go_next: bool
    can_go_prev: bool
    is_loading: bool
    current_page: int
    total_pages: Optional[int]


class ListVM:
    """View model for one paginated, searchable, filterable list."""

    def __init__(
        self,
        feature: FeatureLike,
        scheduler: TimerScheduler,
        *,
        settings: Optional[ListSettings] = None,
        state: Optional[ListViewState] = None,
    ) -> None:
        """Create the view model with a default (or given) view state.

        Args:
            feature: Feature key selecting the view-state schema.
            scheduler: Timer scheduler used for query debouncing.
            settings: List behaviour settings; defaults when omitted.
            state: Already validated state to start from.
        """
        self.feature = feature_key(feature)
        self.settings = settings or ListSettings()
        self._schema = schema_for(self.feature)
        if state is None:
            state = evolve(self._schema.defaults(), page_size=self.settings.page_size)
        elif type(state) is not self._schema.state_model:
            raise ValueError(
                f"{self.feature.value} view expects {self._schema.state_model.__name__}, "
                f"got {type(state).__name__}."
            )
        self._state: ListViewState = state
        self._pagination: Optional[PaginationResult] = None
        self._is_loading = False
        self._closed = False
        self._explicit_selection_mode = state.is_selection_mode and not state.selected_ids
        self._loaded_ids: Optional[FrozenSet[str]] = None
        self._listeners: List[Listener] = []

        self.search_input: str = state.search_query
        self.filter_errors: Dict[str, str] = {}
        self._debouncer: Debouncer[str] = Debouncer(
            scheduler,
            self.settings.debounce_ms,
            channel=f"{self.feature.value}.query.{next(_channel_ids)}",
            on_settle=self._on_query_settled,
            initial=state.search_query,
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def state(self) -> ListViewState:
        return self._state

    @property
    def current_page(self) -> int:
        return self._state.current_page

    @property
    def pagination(self) -> Optional[PaginationResult]:
        """Derived metadata; ``None`` until the first ``data_loaded``."""
        return self._pagination

    @property
    def total_pages(self) -> Optional[int]:
        return self._pagination.total_pages if self._pagination else None

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def selected_ids(self) -> FrozenSet[str]:
        return self._state.selected_ids

    @property
    def is_selection_mode(self) -> bool:
        return self._state.is_selection_mode

    @property
    def query_pending(self) -> bool:
        return self._debouncer.pending

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns an unsubscribe() handle."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def query_snapshot(self) -> QuerySnapshot:
        state = self._state
        return QuerySnapshot(
            current_page=state.current_page,
            page_size=state.page_size,
            search_query=state.search_query,
            filters=self._filters().active(),
            sort_by=state.sort_by,
            sort_direction=state.sort_direction,
        )

    def pager_snapshot(self) -> PagerSnapshot:
        pagination = self._pagination
        if pagination is None:
            pages: Tuple[PageWindowEntry, ...] = ()
        else:
            pages = tuple(
                plan_page_window(
                    self._state.current_page,
                    pagination.total_pages,
                    self.settings.max_pages_to_show,
                )
            )
        return PagerSnapshot(
            pages_to_show=pages,
            can_go_next=bool(pagination and pagination.has_next_page) and not self._is_loading,
            can_go_prev=bool(pagination and pagination.has_prev_page) and not self._is_loading,
            is_loading=self._is_loading,
            current_page=self._state.current_page,
            total_pages=pagination.total_pages if pagination else None,
        )

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------
    def set_page(self, page: int) -> bool:
        """Go to ``page``. Returns False when the request was dropped.

        Requests outside ``[1, total_pages]`` and requests arriving while a
        fetch is in flight are ignored rather than clamped or queued.
        """
        if self._closed:
            return False
        if self._is_loading:
            log.debug("%s: page %s dropped while loading", self.feature.value, page)
            return False
        page = int(page)
        total_pages = self.total_pages
        if page < 1 or (total_pages is not None and page > total_pages):
            log.debug("%s: page %s outside [1, %s] ignored", self.feature.value, page, total_pages)
            return False
        if page == self._state.current_page:
            return False
        self._move_to_page(page)
        self._notify(ChangeKind.PAGE)
        return True

    def next_page(self) -> bool:
        if self._pagination is None or not self._pagination.has_next_page:
            return False
        return self.set_page(self._state.current_page + 1)

    def prev_page(self) -> bool:
        if self._state.current_page <= 1:
            return False
        return self.set_page(self._state.current_page - 1)

    def set_page_size(self, page_size: int) -> ValidationResult[int]:
        """Change rows per page (1..100); resets to the first page."""
        if self._closed:
            return ValidationResult.success(self._state.page_size)
        if page_size == self._state.page_size:
            return ValidationResult.success(page_size)
        try:
            self._apply(page_size=page_size, **self._first_page_changes())
        except ValidationError as exc:
            log.info("%s: rejected page size %r: %s", self.feature.value, page_size, exc)
            return ValidationResult.failure(exc)
        if self._pagination is not None:
            self._refresh_pagination(self._pagination.total_count)
        self._notify(ChangeKind.PAGE_SIZE)
        return ValidationResult.success(self._state.page_size)

    def data_loaded(
        self, total_count: int, item_ids: Optional[Iterable[str]] = None
    ) -> Optional[PaginationResult]:
        """Record a finished fetch: row total and (optionally) the loaded row ids.

        Ignored after ``close()``; returns the last pagination in that case.
        """
        if self._closed:
            return self._pagination
        if item_ids is not None:
            self._loaded_ids = frozenset(str(item) for item in item_ids)
            if not self.settings.persist_selection_across_pages:
                kept = self._state.selected_ids & self._loaded_ids
                if kept != self._state.selected_ids:
                    self._set_selection(kept)
                    self._notify(ChangeKind.SELECTION)
        return self.recompute_pagination(total_count)

    def recompute_pagination(
        self, total_count: int, page_size: Optional[int] = None
    ) -> Optional[PaginationResult]:
        """Recompute derived pagination; clamp the page if it no longer exists."""
        if self._closed:
            return self._pagination
        if page_size is not None and page_size != self._state.page_size:
            self._apply(page_size=page_size)
        page = clamp_page(
            self._state.current_page, total_pages_for(total_count, self._state.page_size)
        )
        page_changed = page != self._state.current_page
        if page_changed:
            log.debug(
                "%s: page %s clamped to %s after total changed",
                self.feature.value,
                self._state.current_page,
                page,
            )
            self._move_to_page(page)
        self._refresh_pagination(total_count)
        self._notify(ChangeKind.PAGINATION)
        if page_changed:
            self._notify(ChangeKind.PAGE)
        return self._pagination

    def loading_started(self) -> None:
        self._set_loading(True)

    def loading_finished(self) -> None:
        self._set_loading(False)

    # ------------------------------------------------------------------
    # Search / filters / sort
    # ------------------------------------------------------------------
    def set_query(self, text: Optional[str]) -> None:
        """Show ``text`` immediately; apply it once typing settles."""
        if self._closed:
            return
        text = "" if text is None else str(text)
        if text != self.search_input:
            self.search_input = text
            self._notify(ChangeKind.QUERY_INPUT)
        self._debouncer.observe(text)

    def flush_query(self) -> bool:
        """Apply pending search input now (e.g. on Enter)."""
        return self._debouncer.flush()

    def set_filter(self, key: str, value: Any) -> ValidationResult[FilterModel]:
        """Set one filter (``None``, ``""`` or an empty list removes it) and go to page 1."""
        candidate = self._filters().model_dump(by_alias=True, exclude_none=True)
        name = self._filter_key(key)
        if _is_blank(value):
            candidate.pop(name, None)
        else:
            candidate[name] = value
        return self._apply_filters(candidate)

    def set_filters(self, filters: Optional[Dict[str, Any]]) -> ValidationResult[FilterModel]:
        """Replace all filters at once."""
        return self._apply_filters(dict(filters or {}))

    def clear_filters(self) -> None:
        self._apply_filters({})

    def set_sort(self, field: str, direction: str = "asc") -> ValidationResult[ListViewState]:
        """Change sort order; the current page is kept."""
        if self._closed:
            return ValidationResult.success(self._state)
        if field == self._state.sort_by and direction == self._state.sort_direction:
            return ValidationResult.success(self._state)
        try:
            self._apply(sort_by=field, sort_direction=direction)
        except ValidationError as exc:
            log.info("%s: rejected sort %r %r: %s", self.feature.value, field, direction, exc)
            return ValidationResult.failure(exc)
        self._notify(ChangeKind.SORT)
        return ValidationResult.success(self._state)

    def toggle_sort(self, field: str) -> ValidationResult[ListViewState]:
        """Flip direction when re-sorting by the current field, else sort ascending."""
        if field == self._state.sort_by:
            direction = "desc" if self._state.sort_direction == "asc" else "asc"
        else:
            direction = "asc"
        return self.set_sort(field, direction)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def toggle_selection(self, item_id: str) -> bool:
        """Select or deselect a row. Returns False if the id is not loaded."""
        if self._closed:
            return False
        item_id = str(item_id)
        if self._loaded_ids is not None and item_id not in self._loaded_ids:
            log.debug("%s: ignoring selection of unloaded row %s", self.feature.value, item_id)
            return False
        selected = set(self._state.selected_ids)
        if item_id in selected:
            selected.remove(item_id)
        else:
            selected.add(item_id)
        self._set_selection(frozenset(selected))
        self._notify(ChangeKind.SELECTION)
        return True

    def select_all(self, item_ids: Iterable[str]) -> None:
        if self._closed:
            return
        ids = frozenset(str(item) for item in item_ids)
        if self._loaded_ids is not None:
            ids &= self._loaded_ids
        if self.settings.persist_selection_across_pages:
            ids |= self._state.selected_ids
        self._set_selection(ids)
        self._notify(ChangeKind.SELECTION)

    def clear_selection(self) -> None:
        if self._closed:
            return
        self._explicit_selection_mode = False
        self._set_selection(frozenset())
        self._notify(ChangeKind.SELECTION)

    def enter_selection_mode(self) -> None:
        """Show row checkboxes before anything is selected."""
        if self._closed or self._state.is_selection_mode:
            return
        self._explicit_selection_mode = True
        self._set_selection(self._state.selected_ids)
        self._notify(ChangeKind.SELECTION)

    def exit_selection_mode(self) -> None:
        self.clear_selection()

    # ------------------------------------------------------------------
    # Persistence boundary
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-serializable view state payload."""
        return serialize(self._state)

    def restore(self, payload: Optional[Dict[str, Any]]) -> ValidationResult[ListViewState]:
        """Replace the state from a saved payload.

        Invalid payloads leave the current (last known good) state in place.
        """
        if self._closed:
            return ValidationResult.success(self._state)
        result = self._schema.safe_parse(payload)
        if not result.ok:
            log.warning("%s: saved view state rejected: %s", self.feature.value, result.error)
            return result
        state = result.unwrap()
        if state.selected_ids and not state.is_selection_mode:
            state = evolve(state, is_selection_mode=True)
        self._state = state
        self._explicit_selection_mode = state.is_selection_mode and not state.selected_ids
        self._loaded_ids = None
        self.filter_errors = {}
        self.search_input = state.search_query
        self._debouncer.reset(state.search_query)
        if self._pagination is not None:
            self.recompute_pagination(self._pagination.total_count)
        self._notify(ChangeKind.RESTORED)
        return ValidationResult.success(self._state)

    def close(self) -> None:
        """Tear down: cancel pending query settlement and drop listeners."""
        if self._closed:
            return
        self._debouncer.close()
        self._closed = True
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Feature flags (used by the feature subclasses)
    # ------------------------------------------------------------------
    def _set_flags(self, **changes: Any) -> None:
        if self._closed:
            return
        if all(getattr(self._state, name) == value for name, value in changes.items()):
            return
        self._apply(**changes)
        self._notify(ChangeKind.FLAGS)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _apply(self, **changes: Any) -> None:
        state = evolve(self._state, **changes)
        if state.current_page != self._state.current_page:
            # rows of the previous page are no longer loaded
            self._loaded_ids = None
        self._state = state

    def _filters(self) -> FilterModel:
        return getattr(self._state, "filters")

    def _first_page_changes(self) -> Dict[str, Any]:
        """Changes that accompany a reset to page 1 (selection is page scoped)."""
        changes: Dict[str, Any] = {"current_page": 1}
        if self._state.current_page != 1:
            changes.update(self._selection_changes_for_page_change())
        return changes

    def _selection_changes_for_page_change(self) -> Dict[str, Any]:
        if self.settings.persist_selection_across_pages or not self._state.selected_ids:
            return {}
        return {"selected_ids": frozenset(), "is_selection_mode": self._explicit_selection_mode}

    def _move_to_page(self, page: int) -> None:
        self._apply(current_page=page, **self._selection_changes_for_page_change())
        if self._pagination is not None:
            self._refresh_pagination(self._pagination.total_count)

    def _refresh_pagination(self, total_count: int) -> None:
        self._pagination = compute_pagination(total_count, self._state.page_size, self._state.current_page)

    def _set_selection(self, selected: FrozenSet[str]) -> None:
        if selected:
            self._explicit_selection_mode = False
        self._apply(
            selected_ids=selected,
            is_selection_mode=bool(selected) or self._explicit_selection_mode,
        )

    def _set_loading(self, loading: bool) -> None:
        if self._closed or self._is_loading == loading:
            return
        self._is_loading = loading
        self._notify(ChangeKind.LOADING)

    def _on_query_settled(self, text: str) -> None:
        if self._closed:
            log.debug("%s: stale query settlement discarded", self.feature.value)
            return
        if text == self._state.search_query:
            return
        page_changed = self._state.current_page != 1
        self._apply(search_query=text, **self._first_page_changes())
        if self._pagination is not None:
            self._refresh_pagination(self._pagination.total_count)
        log.debug("%s: query settled %r", self.feature.value, text)
        self._notify(ChangeKind.QUERY)
        if page_changed:
            self._notify(ChangeKind.PAGE)

    def _apply_filters(self, candidate: Dict[str, Any]) -> ValidationResult[FilterModel]:
        result = self._schema.validate_filters(candidate)
        if self._closed:
            return result
        if not result.ok:
            self.filter_errors = result.error.messages()  # type: ignore[union-attr]
            log.info("%s: filter change rejected: %s", self.feature.value, result.error)
            self._notify(ChangeKind.FILTER_ERROR)
            return result
        had_errors = bool(self.filter_errors)
        self.filter_errors = {}
        filters = result.unwrap()
        if filters == self._filters():
            if had_errors:
                self._notify(ChangeKind.FILTER_ERROR)
            return result
        self._apply(filters=filters, **self._first_page_changes())
        if self._pagination is not None:
            self._refresh_pagination(self._pagination.total_count)
        self._notify(ChangeKind.FILTERS)
        return result

    def _filter_key(self, key: str) -> str:
        """Map a camelCase, legacy or snake_case filter key to its payload key."""
        for name, info in self._schema.filter_model.model_fields.items():
            aliases = {name, info.alias, info.serialization_alias}
            choices = getattr(info.validation_alias, "choices", None)
            if choices:
                aliases.update(choice for choice in choices if isinstance(choice, str))
            elif isinstance(info.validation_alias, str):
                aliases.add(info.validation_alias)
            if key in aliases:
                return info.serialization_alias or info.alias or name
        # unknown keys are rejected by the filter schema
        return key

    def _notify(self, kind: ChangeKind) -> None:
        event = ViewStateChange(kind=kind, state=self._state)
        for listener in list(self._listeners):
            listener(event)


__all__ = [
    "ChangeKind",
    "ListVM",
    "Listener",
    "PagerSnapshot",
    "QuerySnapshot",
    "ViewStateChange",
]
