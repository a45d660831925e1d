"""UTC datetime utilities and the injectable clock type."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

# Anything that returns an aware "now". Engine components take one of these
# instead of calling utc_now() directly so tests can move time.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class FixedClock:
    """Manually advanced clock for tests and replays."""

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self._now = start

    def __call__(self) -> datetime:
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when

    def advance(self, **delta: float) -> datetime:
        """Move forward by timedelta keyword args, e.g. advance(hours=2)."""
        self._now = self._now + timedelta(**delta)
        return self._now
