"""Generator-based log file reading with per-line UTF-8 decoding."""

from typing import Generator


class LogReadError(Exception):
    """A line of the log could not be decoded."""

    def __init__(self, filepath: str, line_number: int, reason: str):
        self.filepath = filepath
        self.line_number = line_number
        super().__init__(f"Failed to read line #{line_number} of {filepath}: {reason}")


def read_lines(filepath: str) -> Generator[tuple[int, str], None, None]:
    """Yield (line_number, line) for each line in a file, numbering from 1.

    Lines are decoded one by one so a bad byte sequence is reported against
    the exact line that carries it. Raises LogReadError on such a line.
    """
    with open(filepath, "rb") as f:
        for line_number, raw in enumerate(f, start=1):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise LogReadError(filepath, line_number, str(e)) from e
            yield line_number, line.rstrip("\r\n")
