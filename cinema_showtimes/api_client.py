"""REST client for the remote showtime service."""

from typing import Any, Dict, Iterable, List, Optional

import httpx
from loguru import logger

from .base_directory import BaseShowtimeDirectory
from .models import Showtime

GENERIC_ERROR = "Showtime service request failed. Please try again."
SESSION_EXPIRED = "Your session has expired. Please sign in again."
FORBIDDEN = "You do not have permission to perform this action."


class ShowtimeApiError(Exception):
    """A request to the showtime service failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def extract_error_message(response: httpx.Response, fallback: str = GENERIC_ERROR) -> str:
    """
    Pull the most descriptive message out of an error response.

    Prefers the service's "message" field, then "error", then the fallback.
    """
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return fallback


def describe_error(error: Exception, fallback: str = GENERIC_ERROR) -> str:
    """
    Turn a failed call into the text surfaced to the user.

    Args:
        error: Exception raised by a directory call
        fallback: Message used when the error carries none

    Returns:
        Human-readable message
    """
    if isinstance(error, ShowtimeApiError):
        if error.status_code == 401:
            return SESSION_EXPIRED
        if error.status_code == 403:
            return FORBIDDEN
        return error.message or fallback
    return str(error) or fallback


def _records_from(payload: Any, keys: Iterable[str]) -> List[Dict[str, Any]]:
    if isinstance(payload, list):
        return [r for r in payload if isinstance(r, dict)]
    if isinstance(payload, dict):
        for key in keys:
            if isinstance(payload.get(key), list):
                return [r for r in payload[key] if isinstance(r, dict)]
    return []


def _flatten_showtimes(payload: Any) -> List[Dict[str, Any]]:
    """Accept flat lists as well as room payloads grouped by date."""
    if isinstance(payload, dict) and isinstance(payload.get("dates"), list):
        records = []
        room_name = payload.get("room_name")
        for group in payload["dates"]:
            if not isinstance(group, dict):
                continue
            for record in group.get("showtimes") or []:
                record = dict(record)
                record.setdefault("Show_Date", group.get("date"))
                if room_name and not record.get("Room_Name"):
                    record["Room_Name"] = room_name
                records.append(record)
        return records
    return _records_from(payload, ("showtimes", "data"))


def parse_showtimes(payload: Any) -> List[Showtime]:
    """
    Parse a list response into Showtime objects, skipping malformed records.

    Args:
        payload: Decoded JSON body

    Returns:
        List of Showtime objects
    """
    showtimes = []
    for record in _flatten_showtimes(payload):
        try:
            showtimes.append(Showtime.from_dict(record))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"[API] Skipping malformed showtime record: {e}")
    return showtimes


def _single_showtime(payload: Any) -> Optional[Showtime]:
    if isinstance(payload, dict):
        for key in ("showtime", "data"):
            if isinstance(payload.get(key), dict):
                payload = payload[key]
                break
        try:
            return Showtime.from_dict(payload)
        except (KeyError, TypeError, ValueError):
            return None
    return None


class ShowtimeApiClient(BaseShowtimeDirectory):
    """Showtime directory backed by the cinema REST API."""

    TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client with an HTTP connection pool.

        Args:
            base_url: Root URL of the API (e.g. "https://cinema.example/api/")
            token: Bearer token sent with every request
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            headers=headers,
            timeout=timeout or self.TIMEOUT,
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        """
        Perform a request and decode its JSON body.

        Raises:
            ShowtimeApiError: On transport errors and non-2xx responses
        """
        logger.debug(f"[API] {method} {path}")
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"[API] {method} {path} failed: {e}")
            raise ShowtimeApiError(str(e) or fallback) from e

        if response.is_error:
            message = extract_error_message(response, fallback)
            logger.warning(f"[API] {method} {path} -> {response.status_code}: {message}")
            raise ShowtimeApiError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def list(self) -> List[Showtime]:
        payload = await self._request("GET", "showtimes", "Could not load showtimes.")
        return parse_showtimes(payload)

    async def list_by_room(self, room_id: int) -> List[Showtime]:
        """Fetch the showtimes of one room (grouped-by-date payload)."""
        payload = await self._request(
            "GET", f"showtimes/room/{room_id}", f"Could not load showtimes for room {room_id}."
        )
        return parse_showtimes(payload)

    async def create(self, data: Dict[str, Any]) -> Showtime:
        payload = await self._request("POST", "showtimes", "Could not create showtime.", json=data)
        showtime = _single_showtime(payload)
        if showtime is None:
            raise ShowtimeApiError("Showtime service returned no record for the created showtime.")
        return showtime

    async def update(self, showtime_id: int, data: Dict[str, Any]) -> Optional[Showtime]:
        payload = await self._request(
            "PUT", f"showtimes/{showtime_id}", f"Could not update showtime {showtime_id}.", json=data
        )
        return _single_showtime(payload)

    async def delete(self, showtime_id: int) -> None:
        await self._request("DELETE", f"showtimes/{showtime_id}", f"Could not delete showtime {showtime_id}.")

    async def hide_expired_on_server(self) -> None:
        await self._request("POST", "showtimes/hide-expired", "Could not hide expired showtimes.")

    async def list_movies(self) -> List[Dict[str, Any]]:
        payload = await self._request("GET", "movies", "Could not load movies.")
        return _records_from(payload, ("movies", "data"))

    async def list_rooms(self) -> List[Dict[str, Any]]:
        payload = await self._request("GET", "cinema-rooms", "Could not load cinema rooms.")
        return _records_from(payload, ("rooms", "data"))
