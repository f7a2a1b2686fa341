"""Correlates start, progress and response events into one span per request."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator

from trace_waterfall.parser import LogEvent


@dataclass
class Span:
    method: str
    uri: str
    start_at: datetime
    duration: timedelta = timedelta(0)
    status: int | None = None
    request_size: str | None = None
    response_size: str | None = None


class SpanStore:
    """Spans keyed by connection id, then request id.

    Iteration follows the natural ordering of the keys (connection ids as
    strings, request ids as integers), whatever order the lines came in.
    """

    def __init__(self):
        self._spans: dict[str, dict[int, Span]] = {}

    def record(self, event: LogEvent) -> Span:
        """Create the span for the event's key, or merge the event into it."""
        spans_for_connection = self._spans.setdefault(event.connection_id, {})
        span = spans_for_connection.get(event.request_id)

        if span is None:
            span = Span(
                method=event.method,
                uri=event.uri,
                start_at=event.timestamp,
                status=event.status,
                request_size=event.request_size,
                response_size=event.response_size,
            )
            spans_for_connection[event.request_id] = span
            return span

        # Measured from the first event seen, so the last event wins.
        span.duration = event.timestamp - span.start_at
        if event.status is not None and event.status >= 0:
            span.status = event.status
        if event.request_size:
            span.request_size = event.request_size
        if event.response_size:
            span.response_size = event.response_size
        return span

    def get(self, connection_id: str, request_id: int) -> Span | None:
        return self._spans.get(connection_id, {}).get(request_id)

    def connections(self) -> list[str]:
        return sorted(self._spans)

    def __iter__(self) -> Iterator[tuple[str, int, Span]]:
        for connection_id in sorted(self._spans):
            spans_for_connection = self._spans[connection_id]
            for request_id in sorted(spans_for_connection):
                yield connection_id, request_id, spans_for_connection[request_id]

    def __len__(self) -> int:
        return sum(len(spans) for spans in self._spans.values())
