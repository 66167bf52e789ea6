"""Unix-timestamp utilities. The core never reads the wall clock itself."""

from datetime import UTC, datetime


def format_timestamp(timestamp: int) -> str:
    """Render a Unix timestamp as an ISO-8601 UTC string (for logs and display)."""
    return datetime.fromtimestamp(timestamp, tz=UTC).isoformat()


def time_until_end(end_time: int, now: int) -> int:
    """Seconds remaining until end_time, never negative."""
    return max(0, end_time - now)
