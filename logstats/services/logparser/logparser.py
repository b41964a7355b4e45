from __future__ import annotations

import gzip
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TextIO

from .constants import LOG_DATETIME_FORMAT, log_line_pattern
from .schemas import LogRecord, ParsedDateTime


logger = logging.getLogger(__name__)


@contextmanager
def open_log_file(log_path: Path | str) -> Iterator[TextIO]:
    """Open a plain or gzip compressed log file for reading text lines.

    Raises:
        OSError: If the file cannot be opened.
    """
    path = Path(log_path)
    if path.suffix == ".gz":
        handle = gzip.open(path, "rt", encoding="utf-8", errors="replace")
    else:
        handle = open(path, "r", encoding="utf-8", errors="replace")
    try:
        yield handle
    finally:
        handle.close()


def parse_datetime(raw: str) -> ParsedDateTime | None:
    """Parse ``10/Oct/2024:13:55:36 +0200`` keeping the local wall-clock time."""
    try:
        dt = datetime.strptime(raw, LOG_DATETIME_FORMAT)
    except ValueError:
        return None
    return ParsedDateTime(
        date=dt.strftime("%Y-%m-%d"),
        hour=dt.hour,
        timestamp=dt.strftime("%Y-%m-%d %H:%M:%S"),
    )


class LogParser:
    """Parses access log lines into LogRecord objects.

    Keeps count of matched and unmatched lines for the per-file summary.
    """

    def __init__(self) -> None:
        self.parsed_lines: int = 0
        self.skipped_lines: int = 0

    def reset_counters(self) -> None:
        """Reset line counters before a new file."""
        self.parsed_lines = 0
        self.skipped_lines = 0

    def parse_line(self, line: str) -> LogRecord | None:
        """Parse a raw log line.

        Returns:
            LogRecord if the line matches the log format, None otherwise.
        """
        matched = log_line_pattern().match(line.rstrip("\r\n"))
        if not matched:
            logger.debug("Skipping unmatched line: '%s'", line.strip())
            self.skipped_lines += 1
            return None

        datadict = matched.groupdict()
        moment = parse_datetime(datadict["datetime"])
        if moment is None:
            logger.debug("Skipping line with invalid date: '%s'", datadict["datetime"])
            self.skipped_lines += 1
            return None

        self.parsed_lines += 1
        return LogRecord(
            host=datadict["host"],
            ip=datadict["ip"],
            datetime=datadict["datetime"],
            method=datadict["method"],
            url=datadict["url"],
            protocol=datadict["protocol"],
            status=datadict["status"],
            bytes=int(datadict["bytes"]),
            referer=datadict["referer"],
            user_agent=datadict["ua"],
            moment=moment,
            speed=datadict["speed"] or "",
            cache=datadict["cache"] or "",
        )
