"""Base class for showtime directory services."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .models import Showtime


class BaseShowtimeDirectory(ABC):
    """Abstract remote source of truth for showtime records."""

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - release transport resources."""
        await self.close()

    async def close(self) -> None:
        """Release transport resources; nothing to do by default."""
        pass

    @abstractmethod
    async def list(self) -> List[Showtime]:
        """
        Fetch every showtime visible to the current user.

        Returns:
            List of Showtime objects

        Raises:
            ShowtimeApiError: If the request fails
        """
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Showtime:
        """
        Create a showtime.

        Args:
            data: Backend field values

        Returns:
            The created Showtime
        """
        pass

    @abstractmethod
    async def update(self, showtime_id: int, data: Dict[str, Any]) -> Optional[Showtime]:
        """
        Update fields of a showtime.

        Args:
            showtime_id: Showtime identifier
            data: Backend field values to change (e.g. {"Status": "Hidden"})

        Returns:
            The updated Showtime as stored by the service, or None when the
            service does not echo the record
        """
        pass

    @abstractmethod
    async def delete(self, showtime_id: int) -> None:
        """
        Delete a showtime.

        Args:
            showtime_id: Showtime identifier
        """
        pass

    @abstractmethod
    async def hide_expired_on_server(self) -> None:
        """Ask the service to hide every Scheduled showtime that has started."""
        pass

    async def list_movies(self) -> List[Dict[str, Any]]:
        """Movie records used to fill display names; none by default."""
        return []

    async def list_rooms(self) -> List[Dict[str, Any]]:
        """Room records used to fill display names; none by default."""
        return []
