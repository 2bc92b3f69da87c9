"""Settings read from the environment (and a .env file, if present)."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .filters import SUNDAY


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, cast):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


@dataclass
class Settings:
    """Runtime configuration of the showtime tools."""

    api_url: str
    api_token: Optional[str] = None
    timeout: float = 30.0
    page_size: int = 10
    first_weekday: int = SUNDAY
    use_server_sweep: bool = True
    state_dir: str = "state"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env_file: Optional path of a .env file to load first

    Returns:
        Settings instance

    Raises:
        ValueError: If SHOWTIME_API_URL is missing or a number is malformed
    """
    load_dotenv(env_file)

    api_url = os.getenv("SHOWTIME_API_URL")
    if not api_url:
        raise ValueError("SHOWTIME_API_URL environment variable not set")

    page_size = _env_number("SHOWTIME_PAGE_SIZE", 10, int)
    if page_size < 1:
        raise ValueError(f"SHOWTIME_PAGE_SIZE must be positive, got {page_size}")
    first_weekday = _env_number("SHOWTIME_FIRST_WEEKDAY", SUNDAY, int)
    if not 0 <= first_weekday <= 6:
        raise ValueError(f"SHOWTIME_FIRST_WEEKDAY must be between 0 and 6, got {first_weekday}")

    return Settings(
        api_url=api_url,
        api_token=os.getenv("SHOWTIME_API_TOKEN") or None,
        timeout=_env_number("SHOWTIME_API_TIMEOUT", 30.0, float),
        page_size=page_size,
        first_weekday=first_weekday,
        use_server_sweep=_env_bool("SHOWTIME_SERVER_SWEEP", True),
        state_dir=os.getenv("SHOWTIME_STATE_DIR") or "state",
    )
