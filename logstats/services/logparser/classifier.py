"""Request classification: status class, URL type and speed bucket."""
from __future__ import annotations

import math

from .constants import (
    SPEED_BUCKETS,
    SPEED_BUCKET_MAX,
    SPEED_BUCKET_ZERO,
    SPEED_SLOW_LIMIT,
    URL_TYPE_IMAGES,
    URL_TYPE_OTHER,
    URL_TYPE_PAGE,
    URL_TYPE_PREFIXES,
)
from .schemas import ClassifiedRequest, LogRecord


def status_class(status: str | int) -> str:
    """``404`` -> ``4xx``."""
    return f"{str(status)[0]}xx"


def url_type(raw_url: str) -> tuple[str, str]:
    """Classify a request path by prefix.

    The query string is dropped. Images are reduced to their file name.

    Returns:
        tuple of (url_type, url)
    """
    url = raw_url.split("?", 1)[0]
    for prefix, kind in URL_TYPE_PREFIXES:
        if url.startswith(prefix):
            if kind == URL_TYPE_IMAGES:
                url = url.rsplit("/", 1)[-1]
            return kind, url
    if "." not in url:
        return URL_TYPE_PAGE, url
    return URL_TYPE_OTHER, url


def speed_bucket(speed: str | float | None) -> tuple[str, bool]:
    """Bucket a response time in seconds.

    Returns:
        tuple of (bucket label, is_slow)
    """
    try:
        value = float(speed) if speed else 0.0
    except ValueError:
        value = 0.0

    if value == 0:
        return SPEED_BUCKET_ZERO, False
    for limit, label in SPEED_BUCKETS:
        if value < limit:
            return label, False
    if value < SPEED_SLOW_LIMIT:
        return f"{math.floor(value)}.0", True
    return SPEED_BUCKET_MAX, False


def classify(record: LogRecord) -> ClassifiedRequest:
    """Derive the counter keys of a parsed record."""
    kind, url = url_type(record.url)
    bucket, slow = speed_bucket(record.speed)
    return ClassifiedRequest(
        status_class=status_class(record.status),
        url_type=kind,
        url=url,
        speed_bucket=bucket,
        slow=slow,
    )
