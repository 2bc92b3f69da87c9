"""Storage for showtime collection snapshots."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from .models import Showtime


@dataclass
class ShowtimeSnapshot:
    """The showtime collection as it was at a point in time."""

    timestamp: str
    showtimes: List[Showtime] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "showtimes": [s.to_dict() for s in self.showtimes],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShowtimeSnapshot":
        """Create ShowtimeSnapshot instance from dictionary."""
        return cls(
            timestamp=data["timestamp"],
            showtimes=[Showtime.from_dict(s) for s in data.get("showtimes", [])],
        )


class SnapshotStore:
    """Handles saving and loading the last known good collection."""

    def __init__(self, storage_dir: str = "state"):
        """
        Initialize storage.

        Args:
            storage_dir: Directory to store state files
        """
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.snapshot_file = self.storage_dir / "showtimes_snapshot.json"

    def save_snapshot(self, showtimes: List[Showtime], timestamp: Optional[datetime] = None) -> None:
        """
        Save the current collection to file.

        Args:
            showtimes: Showtimes to save
            timestamp: Time of the snapshot (defaults to now)
        """
        snapshot = ShowtimeSnapshot(
            timestamp=(timestamp or datetime.now()).isoformat(),
            showtimes=list(showtimes),
        )

        with open(self.snapshot_file, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, ensure_ascii=False, indent=2)

    def load_snapshot(self) -> Optional[ShowtimeSnapshot]:
        """
        Load the latest snapshot from file.

        Returns:
            ShowtimeSnapshot or None if the file is missing or unreadable
        """
        if not self.snapshot_file.exists():
            return None

        try:
            with open(self.snapshot_file, "r", encoding="utf-8") as f:
                data = json.load(f)
                return ShowtimeSnapshot.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"[Storage] Error loading snapshot: {e}")
            return None

    @staticmethod
    def compare_statuses(
        old_snapshot: Optional[ShowtimeSnapshot], new_showtimes: List[Showtime]
    ) -> Dict[int, str]:
        """
        Find showtimes whose status differs from the previous snapshot.

        Args:
            old_snapshot: Previous snapshot (can be None)
            new_showtimes: Current showtimes

        Returns:
            Mapping of showtime id to its new status
        """
        if not old_snapshot:
            return {}

        old_statuses = {s.id: s.status for s in old_snapshot.showtimes}
        return {
            s.id: getattr(s.status, "value", s.status)
            for s in new_showtimes
            if s.id in old_statuses and old_statuses[s.id] != s.status
        }
