"""Log parser module - parsing and classification only, no persistence."""
from .classifier import classify
from .logparser import LogParser, open_log_file, parse_datetime
from .schemas import ClassifiedRequest, LogRecord, ParsedDateTime

__all__ = [
    "LogParser",
    "ClassifiedRequest",
    "LogRecord",
    "ParsedDateTime",
    "classify",
    "open_log_file",
    "parse_datetime",
]
