"""Entry point for the expired showtime sweep."""

import asyncio
import sys

from .main import main


def run() -> None:
    """Run the sweep and exit with its status code."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
