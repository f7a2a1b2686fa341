"""Running bounds of observed event timestamps."""

from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)


def to_millis(timestamp: datetime) -> int:
    """Milliseconds since the Unix epoch, rounded down."""
    return (timestamp - EPOCH) // ONE_MS


def duration_millis(delta: timedelta) -> int:
    """Whole milliseconds in delta, truncated toward zero."""
    whole = abs(delta) // ONE_MS
    return whole if delta >= timedelta(0) else -whole


class TimeOrigin:
    """Tracks the smallest and largest timestamp seen during ingestion."""

    def __init__(self):
        self._smallest: datetime | None = None
        self._largest: datetime | None = None

    def observe(self, timestamp: datetime) -> None:
        if self._smallest is None or timestamp < self._smallest:
            self._smallest = timestamp
        if self._largest is None or timestamp > self._largest:
            self._largest = timestamp

    @property
    def is_empty(self) -> bool:
        return self._smallest is None

    def bounds(self) -> tuple[datetime, datetime]:
        """Return (smallest, largest); both the Unix epoch if nothing was observed."""
        if self._smallest is None or self._largest is None:
            return EPOCH, EPOCH
        return self._smallest, self._largest

    def total_ms(self) -> int:
        """Width of the observed window in whole milliseconds, never negative."""
        smallest, largest = self.bounds()
        return max(0, to_millis(largest) - to_millis(smallest))
