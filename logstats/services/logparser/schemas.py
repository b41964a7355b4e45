"""Schemas for parsed log data - pure data, no persistence concerns."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParsedDateTime:
    """Local date and time of a request as written in the log line."""

    date: str  # YYYY-MM-DD
    hour: int
    timestamp: str  # YYYY-MM-DD HH:MM:SS


@dataclass
class LogRecord:
    """One access log line split into its fields."""

    host: str
    ip: str
    datetime: str
    method: str
    url: str
    protocol: str
    status: str
    bytes: int
    referer: str
    user_agent: str
    moment: ParsedDateTime
    speed: str = ""
    cache: str = ""


@dataclass(frozen=True)
class ClassifiedRequest:
    """Coarse classification of a request used as counter keys."""

    status_class: str
    url_type: str
    url: str
    speed_bucket: str
    slow: bool = False
