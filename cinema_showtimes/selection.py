"""Bulk selection of showtimes on the visible page."""

import asyncio
from typing import FrozenSet, Iterable, List, Optional, Set

from loguru import logger

from .api_client import describe_error
from .base_directory import BaseShowtimeDirectory
from .collection import ShowtimeCollection
from .models import OperationResult

DELETE_FAILED = "Could not delete the showtime."
NOTHING_SELECTED = "Select at least one showtime first."


class SelectionManager:
    """
    Tracks the ids ticked in the showtime table.

    The selection is scoped to the rendered page and is cleared whenever the
    collection is fully refreshed.
    """

    def __init__(self, directory: BaseShowtimeDirectory, collection: ShowtimeCollection):
        """
        Initialize an empty selection.

        Args:
            directory: Remote showtime service
            collection: Local copy of the showtimes
        """
        self.directory = directory
        self.collection = collection
        self._selected: Set[int] = set()
        collection.on_refresh(self.clear)

    @property
    def selected(self) -> FrozenSet[int]:
        return frozenset(self._selected)

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, showtime_id: int) -> bool:
        return showtime_id in self._selected

    def toggle(self, showtime_id: int) -> bool:
        """
        Add or remove one id.

        Returns:
            True if the id is selected afterwards
        """
        if showtime_id in self._selected:
            self._selected.discard(showtime_id)
            return False
        self._selected.add(showtime_id)
        return True

    def select_all_visible(self, page_ids: Iterable[int]) -> None:
        """
        Header-checkbox behaviour.

        If every id on the current page is already selected the selection is
        cleared; otherwise exactly the current page's ids are selected, never
        the rest of the filtered result.
        """
        page = set(page_ids)
        if page <= self._selected:
            self._selected = set()
        else:
            self._selected = page

    def retain(self, page_ids: Iterable[int]) -> None:
        """Drop every selected id that is not rendered on the current page."""
        self._selected.intersection_update(page_ids)

    def clear(self) -> None:
        self._selected = set()

    async def delete_one(self, showtime_id: int) -> OperationResult:
        """
        Delete a single showtime.

        On success the id leaves the selection and the collection is
        refreshed; on failure nothing changes locally.
        """
        try:
            await self.directory.delete(showtime_id)
        except Exception as e:
            message = describe_error(e, DELETE_FAILED)
            logger.warning(f"[Selection] Deleting {showtime_id} failed: {message}")
            return OperationResult(False, message, [showtime_id])

        self._selected.discard(showtime_id)
        logger.info(f"[Selection] Deleted showtime {showtime_id}")
        await self.collection.refresh()
        return OperationResult(True)

    async def bulk_delete(self, ids: Optional[Iterable[int]] = None) -> OperationResult:
        """
        Delete several showtimes with one concurrent call per id.

        The aggregate fails if any call fails. Deletions already applied by
        the service are not rolled back; a full refresh runs afterwards in
        every case so the local list converges to the service's state.

        Args:
            ids: Ids to delete (defaults to the current selection)

        Returns:
            OperationResult listing the ids whose delete call failed
        """
        targets: List[int] = sorted(self._selected if ids is None else set(ids))
        if not targets:
            return OperationResult(False, NOTHING_SELECTED)

        logger.debug(f"[Selection] Deleting {len(targets)} showtimes")
        # Waits for every call to settle instead of stopping at the first failure
        results = await asyncio.gather(
            *(self.directory.delete(i) for i in targets),
            return_exceptions=True,
        )
        failed = []
        message = None
        for showtime_id, result in zip(targets, results):
            if isinstance(result, Exception):
                failed.append(showtime_id)
                message = message or describe_error(result, DELETE_FAILED)
        if not failed:
            self._selected.difference_update(targets)

        await self.collection.refresh()

        if failed:
            logger.warning(f"[Selection] Bulk delete: {len(failed)} of {len(targets)} failed: {message}")
            return OperationResult(False, message, failed)
        logger.info(f"[Selection] Deleted {len(targets)} showtimes")
        return OperationResult(True)
