"""Injectable time and randomness sources."""

import random
from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time, timezone-aware in the local zone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock:
    """Frozen clock for tests and replays. Advance it explicitly."""

    def __init__(self, current: datetime):
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta) -> None:
        """Move the clock forward, e.g. ``clock.advance(hours=2)``."""
        self.current = self.current + timedelta(**delta)


class ZeroRandom(random.Random):
    """Random source that always returns 0.0, disabling exploration noise."""

    def random(self) -> float:
        return 0.0
