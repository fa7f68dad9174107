"""Clock sources. The booking core never calls datetime.now() directly."""
from datetime import datetime, timedelta


class SystemClock:
    """Local wall-clock time, truncated to seconds."""

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)


class FixedClock:
    """Clock frozen at a given instant. Used in tests and replays."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime):
        self._instant = instant

    def advance(self, **kwargs):
        """Move the clock forward, e.g. ``clock.advance(hours=2)``."""
        self._instant = self._instant + timedelta(**kwargs)
