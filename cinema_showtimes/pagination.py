"""Fixed-size paging over the filtered showtime list."""

import math
from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of results."""

    items: List[T]
    total_pages: int
    page: int  # 1-based


def total_pages_for(count: int, page_size: int) -> int:
    """Number of pages needed for `count` items; never less than one."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, math.ceil(count / page_size))


def paginate(items: Sequence[T], page_size: int, page: int) -> Page[T]:
    """
    Slice a sequence into the requested page.

    The page number is not clamped: a page beyond the end yields no items.
    Callers re-derive the page number after every filter change
    (see clamp_page).

    Args:
        items: Filtered, ordered sequence
        page_size: Items per page
        page: 1-based page number

    Returns:
        Page with the slice and the total page count
    """
    total_pages = total_pages_for(len(items), page_size)
    if page < 1:
        return Page(items=[], total_pages=total_pages, page=page)
    start = (page - 1) * page_size
    return Page(items=list(items[start:start + page_size]), total_pages=total_pages, page=page)


def clamp_page(page: int, total_pages: int) -> int:
    """Pull a page number back into [1, total_pages]."""
    return min(max(1, page), max(1, total_pages))
