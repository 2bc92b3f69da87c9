"""Movie and room lookups that fill the display fields of showtimes."""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from .models import Showtime


@dataclass
class MovieInfo:
    """Display data for a movie."""

    name: str
    duration: Optional[int] = None  # in minutes


class MediaDirectory:
    """Resolves movie and room references to display names."""

    def __init__(self, movies: Optional[Dict[int, MovieInfo]] = None, rooms: Optional[Dict[int, str]] = None):
        self.movies: Dict[int, MovieInfo] = movies or {}
        self.rooms: Dict[int, str] = rooms or {}

    @classmethod
    def from_records(
        cls,
        movies: Iterable[Dict[str, Any]] = (),
        rooms: Iterable[Dict[str, Any]] = (),
    ) -> "MediaDirectory":
        """
        Build the lookup tables from backend movie and room records.

        Args:
            movies: Records with Movie_ID, Movie_Name and Duration
            rooms: Records with Cinema_Room_ID and Room_Name

        Returns:
            MediaDirectory instance
        """
        movie_map = {
            int(m["Movie_ID"]): MovieInfo(name=m.get("Movie_Name") or "", duration=m.get("Duration"))
            for m in movies
            if m.get("Movie_ID") is not None
        }
        room_map = {
            int(r["Cinema_Room_ID"]): r.get("Room_Name") or ""
            for r in rooms
            if r.get("Cinema_Room_ID") is not None
        }
        return cls(movies=movie_map, rooms=room_map)

    def resolve_movie(self, movie_id: Optional[int]) -> Optional[MovieInfo]:
        if movie_id is None:
            return None
        return self.movies.get(int(movie_id))

    def resolve_room(self, room_id: Optional[int]) -> Optional[str]:
        if room_id is None:
            return None
        return self.rooms.get(int(room_id))

    def enrich(self, showtime: Showtime) -> Showtime:
        """
        Return a copy with missing display fields filled in.

        Names already present on the record win over the lookup tables.
        """
        movie = self.resolve_movie(showtime.movie_id)
        room_name = showtime.room_name or self.resolve_room(showtime.room_id)
        return replace(
            showtime,
            room_name=room_name,
            movie_name=showtime.movie_name or (movie.name if movie else None),
            movie_duration=showtime.movie_duration or (movie.duration if movie else None),
        )


def dedupe_by_id(showtimes: Iterable[Showtime]) -> List[Showtime]:
    """Keep the first occurrence of every showtime id, preserving order."""
    seen = set()
    unique = []
    for showtime in showtimes:
        if showtime.id not in seen:
            seen.add(showtime.id)
            unique.append(showtime)
    return unique
