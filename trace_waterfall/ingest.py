"""Single-pass ingestion — feeds log lines through the parser into the span store."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from trace_waterfall.origin import TimeOrigin
from trace_waterfall.parser import SYNC_PATTERN, LogEvent, parse_line
from trace_waterfall.spans import SpanStore

logger = logging.getLogger(__name__)


@dataclass
class IngestStats:
    lines_analysed: int = 0
    lines_matched: int = 0


class Ingestor:
    """Run-scoped state threaded through the ingestion loop."""

    def __init__(self, pattern: re.Pattern = SYNC_PATTERN):
        self.pattern = pattern
        self.stats = IngestStats()
        self.origin = TimeOrigin()
        self.store = SpanStore()

    def feed(self, line: str) -> LogEvent | None:
        """Process one line. Returns the event it carried, if any."""
        self.stats.lines_analysed += 1
        event = parse_line(line, self.pattern)
        if event is None:
            return None

        self.stats.lines_matched += 1
        self.origin.observe(event.timestamp)
        self.store.record(event)
        return event


def ingest(lines: Iterable[str], pattern: re.Pattern = SYNC_PATTERN) -> Ingestor:
    """Consume every line and return the populated Ingestor."""
    ingestor = Ingestor(pattern)
    for line in lines:
        ingestor.feed(line)
    logger.info(
        "Ingested %d lines, %d matched, %d spans",
        ingestor.stats.lines_analysed, ingestor.stats.lines_matched, len(ingestor.store),
    )
    return ingestor
