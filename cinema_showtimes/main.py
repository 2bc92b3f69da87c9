"""Main script for the expired showtime sweep."""

import asyncio
import sys
import traceback
from typing import Optional

from .api_client import ShowtimeApiClient
from .base_directory import BaseShowtimeDirectory
from .board import ShowtimeBoard
from .clock import Clock, SystemClock
from .collection import ShowtimeCollection
from .config import Settings, load_settings
from .storage import SnapshotStore


async def main(
    settings: Optional[Settings] = None,
    directory: Optional[BaseShowtimeDirectory] = None,
    clock: Optional[Clock] = None,
    storage_dir: Optional[str] = None,
) -> int:
    """
    Fetch the showtimes, hide every started Scheduled one and report.

    Args:
        settings: Configuration (defaults to load_settings())
        directory: Showtime service (defaults to the REST client)
        clock: Source of "now"
        storage_dir: Directory for snapshot files (overrides settings)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        print("🎬 Starting expired showtime sweep...")

        settings = settings or load_settings()
        clock = clock or SystemClock()
        if directory is None:
            directory = ShowtimeApiClient(settings.api_url, settings.api_token, settings.timeout)

        async with directory:
            collection = ShowtimeCollection(directory, load_media=True, clock=clock)
            board = ShowtimeBoard(
                directory,
                clock=clock,
                page_size=settings.page_size,
                first_weekday=settings.first_weekday,
                use_server_sweep=settings.use_server_sweep,
                collection=collection,
            )
            store = SnapshotStore(storage_dir or settings.state_dir)
            previous_snapshot = store.load_snapshot()

            print("📥 Fetching showtimes...")
            if await board.refresh():
                print(f"✅ Found {len(collection)} showtimes")
            else:
                print(f"❌ {collection.last_error}")
                if not previous_snapshot:
                    return 1
                print(f"📂 Continuing with snapshot from {previous_snapshot.timestamp}")
                collection.replace(previous_snapshot.showtimes)

            print("🧹 Hiding showtimes that have already started...")
            result = await board.hide_expired()
            if result.success:
                print(f"✅ {len(result.hidden_ids)} showtime(s) hidden")
            else:
                print(f"❌ Sweep failed: {result.message}")

            changes = store.compare_statuses(previous_snapshot, collection.showtimes)
            if changes:
                print(f"🔄 {len(changes)} status change(s) since the last run")

            stats = board.stats()
            print(f"📊 {stats.total} total, {stats.scheduled} scheduled, {stats.hidden} hidden")

            if collection.last_error is None:
                store.save_snapshot(collection.showtimes, clock.now())
                print("💾 Snapshot saved")

            print("\n✨ Sweep complete!")
            return 0 if result.success else 1

    except Exception as e:
        print(f"\n❌ Fatal error: {e}", file=sys.stderr)
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
