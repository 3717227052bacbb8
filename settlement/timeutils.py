"""Timezone-aware time utilities for the game."""

import datetime
from zoneinfo import ZoneInfo
from .config import TIMEZONE


def get_timezone():
    """Get the timezone object for the game."""
    return ZoneInfo(TIMEZONE)


def now() -> datetime.datetime:
    """Get current timezone-aware datetime."""
    return datetime.datetime.now(get_timezone())


def now_ms() -> int:
    """Get the current wall-clock time in milliseconds."""
    return int(now().timestamp() * 1000)


def format_clock(timestamp_ms: int) -> str:
    """Local wall-clock time of a millisecond timestamp, like `14:05 PST`."""
    moment = datetime.datetime.fromtimestamp(timestamp_ms / 1000, get_timezone())
    return moment.strftime("%H:%M %Z")


def ms_until(deadline_ms: int, current_ms: int) -> int:
    """Milliseconds left until a deadline, never negative."""
    return max(0, deadline_ms - current_ms)


def format_duration(ms: int) -> str:
    """Format a millisecond span as a short human string like `1m 05s`."""
    total_seconds = max(0, int(ms // 1000))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {seconds:02d}s"
    return f"{seconds}s"
