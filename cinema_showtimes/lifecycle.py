"""
Showtime status transitions.

Moves showtimes between Scheduled and Hidden, either one at a time or
through the expiry sweep, and keeps the local collection in step with the
service.
"""

import asyncio
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence

from loguru import logger

from .api_client import describe_error
from .base_directory import BaseShowtimeDirectory
from .clock import Clock, SystemClock
from .collection import ShowtimeCollection
from .models import ExpirySweepResult, OperationResult, Showtime, ShowtimeStatus

STATUS_CHANGE_FAILED = "Could not change the showtime status."
HIDE_EXPIRED_FAILED = "Could not hide expired showtimes."


class ViewMode(str, Enum):
    """Coarse listing lens: only Scheduled or only Hidden showtimes."""

    SCHEDULED = "Scheduled"
    HIDDEN = "Hidden"


class LifecycleManager:
    """Requests status transitions from the service and mirrors them locally."""

    def __init__(
        self,
        directory: BaseShowtimeDirectory,
        collection: ShowtimeCollection,
        clock: Optional[Clock] = None,
        use_server_sweep: bool = True,
    ):
        """
        Initialize the manager.

        Args:
            directory: Remote showtime service
            collection: Local copy of the showtimes
            clock: Source of "now" for the expiry sweep
            use_server_sweep: Use the service's bulk hide-expired endpoint
                instead of one update call per expired showtime
        """
        self.directory = directory
        self.collection = collection
        self.clock = clock or SystemClock()
        self.use_server_sweep = use_server_sweep
        self.view_mode = ViewMode.SCHEDULED

    async def set_status(self, showtime_id: int, new_status: str) -> OperationResult:
        """
        Change the status of one showtime.

        The local record is only touched once the service confirmed the change.

        Args:
            showtime_id: Showtime identifier
            new_status: "Scheduled" or "Hidden"

        Returns:
            OperationResult; on failure the collection is unchanged

        Raises:
            ValueError: If new_status is not a recognized status
        """
        try:
            status = ShowtimeStatus(new_status)
        except ValueError:
            raise ValueError(f"Unsupported showtime status: {new_status!r}") from None

        if self.collection.get(showtime_id) is None:
            return OperationResult(False, f"Showtime {showtime_id} not found.", [showtime_id])

        try:
            await self.directory.update(showtime_id, {"Status": status.value})
        except Exception as e:
            message = describe_error(e, STATUS_CHANGE_FAILED)
            logger.warning(f"[Lifecycle] Status change of {showtime_id} to {status.value} failed: {message}")
            return OperationResult(False, message, [showtime_id])

        # Re-read: the collection may have been refreshed while waiting
        showtime = self.collection.get(showtime_id)
        if showtime is not None:
            showtime.status = status
        logger.info(f"[Lifecycle] Showtime {showtime_id} is now {status.value}")
        return OperationResult(True)

    def expired_candidates(self, now: datetime) -> List[Showtime]:
        """
        Scheduled showtimes whose start instant lies before `now`.

        This uses the start time, whereas the "expired" filter category uses
        the end time. Both rules are kept as they are.
        """
        return [
            s for s in self.collection
            if s.status == ShowtimeStatus.SCHEDULED and s.start_at() < now
        ]

    async def _hide_one_by_one(self, ids: Sequence[int]) -> List[int]:
        # Waits for every call to settle instead of stopping at the first failure
        results = await asyncio.gather(
            *(self.directory.update(i, {"Status": ShowtimeStatus.HIDDEN.value}) for i in ids),
            return_exceptions=True,
        )
        failed = []
        for showtime_id, result in zip(ids, results):
            if isinstance(result, Exception):
                logger.warning(f"[Lifecycle] Hiding {showtime_id} failed: {describe_error(result)}")
                failed.append(showtime_id)
        return failed

    async def hide_expired(self, now: Optional[datetime] = None) -> ExpirySweepResult:
        """
        Hide every Scheduled showtime that has already started.

        Local statuses flip immediately; the follow-up refresh, which always
        runs, replaces them with what the service actually stored.

        Args:
            now: Reference instant (defaults to the clock)

        Returns:
            ExpirySweepResult with the ids the sweep targeted
        """
        now = now or self.clock.now()
        candidates = self.expired_candidates(now)
        hidden_ids = {s.id for s in candidates}
        for showtime in candidates:
            showtime.status = ShowtimeStatus.HIDDEN
        logger.debug(f"[Lifecycle] Expiry sweep at {now.isoformat()} targets {len(hidden_ids)} showtimes")

        failed_ids: List[int] = []
        message = None
        if self.use_server_sweep:
            try:
                await self.directory.hide_expired_on_server()
            except Exception as e:
                message = describe_error(e, HIDE_EXPIRED_FAILED)
                failed_ids = sorted(hidden_ids)
        elif hidden_ids:
            failed_ids = await self._hide_one_by_one(sorted(hidden_ids))
            if failed_ids:
                message = f"{HIDE_EXPIRED_FAILED} {len(failed_ids)} of {len(hidden_ids)} failed."

        await self.collection.refresh()

        if message:
            logger.warning(f"[Lifecycle] Expiry sweep failed: {message}")
            return ExpirySweepResult(False, message, failed_ids, hidden_ids=hidden_ids)
        logger.info(f"[Lifecycle] Expiry sweep hid {len(hidden_ids)} showtimes")
        return ExpirySweepResult(True, hidden_ids=hidden_ids)

    def toggle_view(self) -> ViewMode:
        """Flip the listing lens between Scheduled and Hidden."""
        if self.view_mode == ViewMode.SCHEDULED:
            self.view_mode = ViewMode.HIDDEN
        else:
            self.view_mode = ViewMode.SCHEDULED
        return self.view_mode

    def apply_view(self, showtimes: Sequence[Showtime]) -> List[Showtime]:
        """Keep only the showtimes whose status matches the current lens."""
        return [s for s in showtimes if s.status == self.view_mode.value]
