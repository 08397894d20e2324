"""Shared utility functions."""
import time
from datetime import datetime, timezone


def now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def elapsed_ms(started: float) -> float:
    """Milliseconds since *started*, a ``time.perf_counter()`` reading."""
    return (time.perf_counter() - started) * 1000
