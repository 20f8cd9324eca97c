from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Returns the current timezone-aware UTC time."""
    return datetime.now(UTC)


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end."""
    return (end - start).total_seconds() / 60
