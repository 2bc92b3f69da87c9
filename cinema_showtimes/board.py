"""
Showtime management board.

The single logical writer a presentation layer talks to: it owns the filter
state, the page number and the view lens, and re-derives the listing after
every confirmed mutation.
"""

from typing import List, Optional

from .base_directory import BaseShowtimeDirectory
from .clock import Clock, SystemClock
from .collection import ShowtimeCollection
from .filters import SUNDAY, FilterEngine, FilterStats
from .lifecycle import LifecycleManager, ViewMode
from .models import ExpirySweepResult, OperationResult, Showtime, ShowtimeFilters
from .pagination import Page, clamp_page, paginate, total_pages_for
from .selection import SelectionManager


class ShowtimeBoard:
    """Filtered, paged and selectable view over the showtime collection."""

    PAGE_SIZE = 10

    def __init__(
        self,
        directory: BaseShowtimeDirectory,
        clock: Optional[Clock] = None,
        page_size: int = PAGE_SIZE,
        first_weekday: int = SUNDAY,
        use_server_sweep: bool = True,
        collection: Optional[ShowtimeCollection] = None,
    ):
        """
        Wire the components together.

        Args:
            directory: Remote showtime service
            clock: Source of "now" (injectable for tests)
            page_size: Rows per page
            first_weekday: First day of the week (0=Monday ... 6=Sunday)
            use_server_sweep: Use the service's bulk hide-expired endpoint
            collection: Pre-built collection (defaults to an empty one)
        """
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.clock = clock or SystemClock()
        self.page_size = page_size
        self.collection = collection or ShowtimeCollection(directory, clock=self.clock)
        self.engine = FilterEngine(first_weekday=first_weekday)
        self.lifecycle = LifecycleManager(directory, self.collection, self.clock, use_server_sweep)
        self.selection = SelectionManager(directory, self.collection)
        self.filters = ShowtimeFilters()
        self.page = 1

    # Filter state; every change goes back to the first page

    def set_filters(self, filters: ShowtimeFilters) -> None:
        self.filters = filters
        self.page = 1
        self._sync_selection()

    def update_search(self, search: str) -> None:
        self.set_filters(self.filters.with_search(search))

    def update_date_filter(self, date_filter: str) -> None:
        self.set_filters(self.filters.with_date_filter(date_filter))

    def update_custom_date(self, custom_date) -> None:
        self.set_filters(self.filters.with_custom_date(custom_date))

    def update_status_filter(self, status_filter: str) -> None:
        self.set_filters(self.filters.with_status_filter(status_filter))

    def clear_filters(self) -> None:
        self.set_filters(self.filters.cleared())

    def clear_date_filter(self) -> None:
        self.set_filters(self.filters.date_cleared())

    def toggle_view(self) -> ViewMode:
        mode = self.lifecycle.toggle_view()
        self.page = 1
        self._sync_selection()
        return mode

    # Derived views

    def filtered(self) -> List[Showtime]:
        """Filter output before the view lens."""
        return self.engine.filter(self.collection.showtimes, self.filters, self.clock.now())

    def listing(self) -> List[Showtime]:
        """Rows shown in the table, across all pages."""
        return self.lifecycle.apply_view(self.filtered())

    def total_pages(self) -> int:
        return total_pages_for(len(self.listing()), self.page_size)

    def current_page(self) -> Page[Showtime]:
        return paginate(self.listing(), self.page_size, self.page)

    def page_ids(self) -> List[int]:
        return [s.id for s in self.current_page().items]

    def stats(self) -> FilterStats:
        return self.engine.stats(self.collection.showtimes, self.listing())

    def go_to_page(self, page: int) -> int:
        self.page = clamp_page(page, self.total_pages())
        self._sync_selection()
        return self.page

    def _reclamp(self) -> None:
        self.page = clamp_page(self.page, self.total_pages())
        self._sync_selection()

    def _sync_selection(self) -> None:
        # Only ids rendered on the active page may stay selected
        self.selection.retain(self.page_ids())

    # Selection

    def toggle_selection(self, showtime_id: int) -> bool:
        return self.selection.toggle(showtime_id)

    def select_all_visible(self) -> None:
        self.selection.select_all_visible(self.page_ids())

    # Mutations; the page is pulled back into range once they settle

    async def refresh(self) -> bool:
        ok = await self.collection.refresh()
        self._reclamp()
        return ok

    async def set_status(self, showtime_id: int, new_status: str) -> OperationResult:
        result = await self.lifecycle.set_status(showtime_id, new_status)
        self._reclamp()
        return result

    async def hide_expired(self) -> ExpirySweepResult:
        result = await self.lifecycle.hide_expired(self.clock.now())
        self._reclamp()
        return result

    async def delete_one(self, showtime_id: int) -> OperationResult:
        result = await self.selection.delete_one(showtime_id)
        self._reclamp()
        return result

    async def delete_selected(self) -> OperationResult:
        visible = set(self.page_ids())
        result = await self.selection.bulk_delete([i for i in self.selection.selected if i in visible])
        self._reclamp()
        return result
