"""Logging configuration for the importer.

The five verbosity levels map onto standard logging levels. Per-file
summaries are logged at the custom ``COMPLETE`` level, which sits
between INFO and WARNING.
"""
from __future__ import annotations

import logging
import logging.config

from logstats.config.settings import Verbosity

COMPLETE = 25
logging.addLevelName(COMPLETE, "COMPLETE")

SILENT = logging.CRITICAL + 10

VERBOSITY_LEVELS: dict[str, int] = {
    "silent": SILENT,
    "errors": logging.ERROR,
    "complete": COMPLETE,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class MemoryLogHandler(logging.Handler):
    """Collects formatted messages when the importer is embedded in another process."""

    def __init__(self, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        if message:
            self.messages.append(message)


def configure_logging(verbosity: Verbosity = "complete", interactive: bool = True) -> MemoryLogHandler | None:
    """Configure the ``logstats`` logger tree.

    Args:
        verbosity: One of silent, errors, complete, info, debug.
        interactive: Log to the console when True, otherwise collect messages in memory.

    Returns:
        The in-memory handler when not interactive, else None.
    """
    level = VERBOSITY_LEVELS[verbosity]
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "logstats": {
                "level": level,
                "handlers": ["console"] if interactive else [],
                "propagate": False,
            },
        },
    })
    if interactive:
        return None

    handler = MemoryLogHandler(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.getLogger("logstats").addHandler(handler)
    return handler
