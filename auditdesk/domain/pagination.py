"""Pagination math and the pager page-window planner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Union

from .view_state import MAX_PAGE_SIZE, MIN_PAGE_SIZE

ELLIPSIS: Literal["ellipsis"] = "ellipsis"
"""Marker for an elided run of page numbers inside a page window."""

PageWindowEntry = Union[int, Literal["ellipsis"]]
DEFAULT_MAX_PAGES_TO_SHOW = 3


@dataclass(frozen=True)
class PaginationResult:
    """Derived pagination metadata for one loaded result set."""

    total_count: int
    current_page: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    def __post_init__(self) -> None:
        if self.total_count < 0:
            raise ValueError("PaginationResult.total_count cannot be negative.")
        if self.total_pages < 0:
            raise ValueError("PaginationResult.total_pages cannot be negative.")


def total_pages_for(total_count: int, page_size: int) -> int:
    """Return ``ceil(total_count / page_size)``; 0 when there are no rows."""
    if isinstance(total_count, bool) or not isinstance(total_count, int):
        raise TypeError("total_count must be an integer.")
    if total_count < 0:
        raise ValueError("total_count cannot be negative.")
    if not MIN_PAGE_SIZE <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be within [{MIN_PAGE_SIZE}, {MAX_PAGE_SIZE}].")
    return -(-total_count // page_size)


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp ``page`` into ``[1, max(1, total_pages)]``."""
    return max(1, min(int(page), max(1, int(total_pages))))


def compute_pagination(total_count: int, page_size: int, current_page: int) -> PaginationResult:
    total_pages = total_pages_for(total_count, page_size)
    return PaginationResult(
        total_count=total_count,
        current_page=current_page,
        total_pages=total_pages,
        has_next_page=current_page < total_pages,
        has_prev_page=current_page > 1,
    )


def plan_page_window(
    current_page: int,
    total_pages: int,
    max_pages_to_show: int = DEFAULT_MAX_PAGES_TO_SHOW,
) -> List[PageWindowEntry]:
    """Compute the page numbers and ellipsis markers a pager should render.

    A window of at most ``max_pages_to_show`` pages is centred on
    ``current_page`` and re-anchored when it would run past the last page.
    The first and last page are always present; an ellipsis separates them
    from the window unless the pages are adjacent.

    Examples:
        >>> plan_page_window(1, 10)
        [1, 2, 3, 'ellipsis', 10]
        >>> plan_page_window(10, 10)
        [1, 'ellipsis', 8, 9, 10]
        >>> plan_page_window(1, 0)
        []
    """
    if max_pages_to_show < 1:
        raise ValueError("max_pages_to_show must be at least 1.")
    if total_pages < 0:
        raise ValueError("total_pages cannot be negative.")

    half = max_pages_to_show // 2
    start_page = max(1, current_page - half)
    end_page = min(total_pages, start_page + max_pages_to_show - 1)

    # Near the end the window is short; slide it back.
    if end_page - start_page + 1 < max_pages_to_show:
        start_page = max(1, end_page - max_pages_to_show + 1)

    pages: List[PageWindowEntry] = []
    if start_page > 1:
        pages.append(1)
        if start_page > 2:
            pages.append(ELLIPSIS)

    pages.extend(range(start_page, end_page + 1))

    if end_page < total_pages:
        if end_page < total_pages - 1:
            pages.append(ELLIPSIS)
        pages.append(total_pages)
    return pages


__all__ = [
    "DEFAULT_MAX_PAGES_TO_SHOW",
    "ELLIPSIS",
    "PageWindowEntry",
    "PaginationResult",
    "clamp_page",
    "compute_pagination",
    "plan_page_window",
    "total_pages_for",
]
