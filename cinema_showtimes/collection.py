"""The locally held copy of the showtime collection."""

from datetime import datetime
from typing import Callable, Iterator, List, Optional

from loguru import logger

from .api_client import describe_error
from .base_directory import BaseShowtimeDirectory
from .clock import Clock, SystemClock
from .directory import MediaDirectory, dedupe_by_id
from .models import Showtime

REFRESH_FAILED = "Could not load the showtime list. Please try again."


class ShowtimeCollection:
    """
    Owns the showtimes fetched from the directory service.

    A failed refresh keeps the last known good list and records a message
    in last_error; refresh() can simply be called again to retry.
    """

    def __init__(
        self,
        directory: BaseShowtimeDirectory,
        media: Optional[MediaDirectory] = None,
        load_media: bool = False,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize an empty collection.

        Args:
            directory: Remote showtime service
            media: Lookup used to fill missing movie/room names
            load_media: Rebuild the lookup from the service on every refresh
            clock: Source of refresh timestamps
        """
        self.directory = directory
        self.media = media or MediaDirectory()
        self.load_media = load_media
        self.clock = clock or SystemClock()
        self.last_error: Optional[str] = None
        self.last_refreshed: Optional[datetime] = None
        self._showtimes: List[Showtime] = []
        self._listeners: List[Callable[[], None]] = []

    def __len__(self) -> int:
        return len(self._showtimes)

    def __iter__(self) -> Iterator[Showtime]:
        return iter(self._showtimes)

    @property
    def showtimes(self) -> List[Showtime]:
        return self._showtimes

    def get(self, showtime_id: int) -> Optional[Showtime]:
        for showtime in self._showtimes:
            if showtime.id == showtime_id:
                return showtime
        return None

    def on_refresh(self, listener: Callable[[], None]) -> None:
        """Register a callback run after every full collection replacement."""
        self._listeners.append(listener)

    def replace(self, showtimes: List[Showtime]) -> None:
        """Swap in a new full collection (enriched, de-duplicated)."""
        self._showtimes = dedupe_by_id(self.media.enrich(s) for s in showtimes)
        for listener in self._listeners:
            listener()

    async def _reload_media(self) -> None:
        try:
            movies = await self.directory.list_movies()
            rooms = await self.directory.list_rooms()
        except Exception as e:
            # Names are cosmetic; keep the previous lookup tables
            logger.warning(f"[Collection] Could not load movie/room names: {e}")
            return
        self.media = MediaDirectory.from_records(movies, rooms)

    async def refresh(self) -> bool:
        """
        Re-fetch the whole collection from the service.

        Returns:
            True on success, False if the last known good list was kept
        """
        try:
            fetched = await self.directory.list()
        except Exception as e:
            self.last_error = describe_error(e, REFRESH_FAILED)
            logger.warning(f"[Collection] Refresh failed, keeping {len(self._showtimes)} showtimes: {self.last_error}")
            return False

        if self.load_media:
            await self._reload_media()

        self.replace(fetched)
        self.last_error = None
        self.last_refreshed = self.clock.now()
        logger.debug(f"[Collection] Loaded {len(self._showtimes)} showtimes")
        return True
