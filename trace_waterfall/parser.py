"""Log line parser — recognizes HTTP client `send` events inside a sync loop.

A matching line looks like::

    2024-05-02T09:12:01.123456Z DEBUG matrix_sdk::http_client: ...
        > sync_once{conn_id="room-list"} > send{request_id="REQ-7" method=POST
        uri="https://example.org/sync" request_size="1.2 KiB"} ... status=200
        response_size="4 KiB"

`request_size`, `status` and `response_size` are each optional. They belong
to different moments of a request's life (sent, answered, body read), but the
parser reports whichever are present without telling them apart.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime

from trace_waterfall.config import Config

logger = logging.getLogger(__name__)

_TZ_COMPACT_RE = re.compile(r"([+-]\d{2})(\d{2})$")
_FRACTION_RE = re.compile(r"\.(\d+)")


@dataclass(frozen=True)
class LogEvent:
    timestamp: datetime
    connection_id: str
    request_id: int
    method: str
    uri: str
    request_size: str | None = None
    status: int | None = None
    response_size: str | None = None


def build_pattern(config: Config | None = None) -> re.Pattern:
    """Compile the line grammar for the configured scope and operation markers."""
    config = config or Config()
    return re.compile(
        # Datetime of the line, validated later by parse_datetime()
        r"(?P<datetime>\d{4}-\d{2}-\d{2}T\S+)"
        r".*" + re.escape(config.scope_marker)
        + r".*>\s" + re.escape(config.operation)
        + r"\{" + re.escape(config.connection_field) + r'="(?P<connection_id>[^"]+)"\}'
        + r"\s>\ssend\{"
        + r'request_id="' + re.escape(config.request_id_prefix) + r'(?P<request_id>\d+)"'
        + r"\smethod=(?P<method>\S+)"
        + r'\suri="(?P<uri>[^"]+)"'
        + r'(.*\srequest_size="(?P<request_size>[^"]+)")?'
        + r"(.*\sstatus=(?P<status>\d{1,3})\b)?"
        + r'(.*\sresponse_size="(?P<response_size>[^"]+)")?'
    )


SYNC_PATTERN = build_pattern()


def parse_datetime(text: str) -> datetime | None:
    """Parse an ISO 8601 timestamp carrying a UTC offset. Returns None on failure.

    Accepts `Z`, `+HH:MM` and `+HHMM` offsets and any number of fractional
    second digits (truncated to microseconds). Naive timestamps are rejected.
    """
    s = text.strip()
    if s[-1:] in ("Z", "z"):
        s = s[:-1] + "+00:00"
    s = _TZ_COMPACT_RE.sub(r"\1:\2", s)
    s = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s, count=1)
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return None
    return dt


def parse_line(line: str, pattern: re.Pattern = SYNC_PATTERN) -> LogEvent | None:
    """Parse a single log line into a LogEvent. Returns None for unrelated lines."""
    match = pattern.search(line)
    if not match:
        return None

    timestamp = parse_datetime(match.group("datetime"))
    if timestamp is None:
        logger.debug("Skipping line with malformed datetime %r", match.group("datetime"))
        return None

    status = None
    status_str = match.group("status")
    if status_str is not None:
        try:
            status = int(status_str)
        except ValueError:
            logger.debug("Dropping unparseable status %r", status_str)

    return LogEvent(
        timestamp=timestamp,
        connection_id=match.group("connection_id"),
        request_id=int(match.group("request_id")),
        method=match.group("method"),
        uri=match.group("uri"),
        request_size=match.group("request_size") or None,
        status=status,
        response_size=match.group("response_size") or None,
    )
