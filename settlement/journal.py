"""The settlement's game log."""

import uuid
from typing import List

from .config import MAX_LOG_ENTRIES
from .models import LogEntry


def add_log_entry(log: List[LogEntry], message: str, icon: str, now: int = 0) -> List[LogEntry]:
    """Return a new log with the entry first, trimmed to the maximum size."""
    entry = LogEntry(id=f"{now}-{uuid.uuid4().hex[:8]}", message=message, icon=icon)
    return [entry] + list(log[:MAX_LOG_ENTRIES - 1])
