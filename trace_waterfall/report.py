"""Report assembly — turns the final span store into timeline rows."""

import re
from collections import Counter
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from trace_waterfall.origin import TimeOrigin, duration_millis, to_millis
from trace_waterfall.spans import SpanStore

# urlsplit() drops these, which would shift offsets into the raw string
_REWRITTEN_BY_URLSPLIT_RE = re.compile(r"^[\x00-\x20]|[\t\r\n]")


@dataclass(frozen=True)
class ReportRow:
    connection_id: str
    request_id: int
    status: int | None
    status_family: int
    method: str
    host: str
    path: str
    request_size: str | None
    response_size: str | None
    start_at: int   # ms since the time origin
    duration: int   # ms


@dataclass
class Report:
    end_at: int = 0
    rows: list[ReportRow] = field(default_factory=list)

    def slowest(self, n: int = 5) -> list[ReportRow]:
        """The n longest spans, longest first; ties keep store order."""
        return sorted(self.rows, key=lambda row: row.duration, reverse=True)[:n]

    def status_counts(self) -> dict[int, int]:
        """Number of rows per status family, 0 meaning no status."""
        return dict(sorted(Counter(row.status_family for row in self.rows).items()))


def status_family(status: int | None) -> int:
    """Hundreds digit of an HTTP status; 0 when absent or not positive."""
    if status is None or status <= 0:
        return 0
    return status // 100


def split_uri(uri: str) -> tuple[str, str]:
    """Split an absolute URI into (host, path).

    The path runs from the first character after the authority to the end of
    the string, query and fragment included. Anything that is not an absolute
    `scheme://authority` URI yields ("", ""), as does one carrying a leading
    control character or space, or a tab or line break anywhere.
    """
    if _REWRITTEN_BY_URLSPLIT_RE.search(uri):
        return "", ""
    try:
        parts = urlsplit(uri)
        host = parts.hostname
    except ValueError:
        return "", ""
    if not parts.scheme or not host or not uri[len(parts.scheme):].startswith("://"):
        return "", ""

    path_start = len(parts.scheme) + len("://") + len(parts.netloc)
    return host, uri[path_start:]


def assemble_report(store: SpanStore, origin: TimeOrigin) -> Report:
    """Build one row per span, in store order, with offsets relative to the origin."""
    smallest, _ = origin.bounds()
    origin_ms = to_millis(smallest)

    rows = []
    for connection_id, request_id, span in store:
        host, path = split_uri(span.uri)
        rows.append(ReportRow(
            connection_id=connection_id,
            request_id=request_id,
            status=span.status,
            status_family=status_family(span.status),
            method=span.method,
            host=host,
            path=path,
            request_size=span.request_size,
            response_size=span.response_size,
            start_at=max(0, to_millis(span.start_at) - origin_ms),
            duration=duration_millis(span.duration),
        ))

    return Report(end_at=origin.total_ms(), rows=rows)
