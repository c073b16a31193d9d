"""Time source for domain timestamps.

The engine takes a Clock so tests can pin lifecycle timestamps.
"""

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def epoch_ms(at: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch for at (default: now)."""
    return int((at or utc_now()).timestamp() * 1000)
