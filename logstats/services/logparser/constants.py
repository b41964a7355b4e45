import re
from functools import lru_cache


LOG_DATETIME_FORMAT = "%d/%b/%Y:%H:%M:%S %z"

# (prefix, url type) in priority order
URL_TYPE_PREFIXES: tuple[tuple[str, str], ...] = (
    ("/media/images/", "images"),
    ("/media/", "media"),
    ("/gfx/", "gfx"),
    ("/css/", "css"),
    ("/js/", "js"),
    ("/fonts/", "font"),
)
URL_TYPE_PAGE = "page"
URL_TYPE_OTHER = "other"
URL_TYPE_IMAGES = "images"

# (upper bound, bucket label) for responses faster than one second
SPEED_BUCKETS: tuple[tuple[float, str], ...] = (
    (0.02, "0.02"),
    (0.04, "0.04"),
    (0.06, "0.06"),
    (0.08, "0.08"),
    (0.1, "0.1"),
    (0.2, "0.2"),
    (0.4, "0.4"),
    (0.6, "0.6"),
    (0.8, "0.8"),
    (1.0, "1.0"),
)
SPEED_BUCKET_ZERO = "0.00"
SPEED_BUCKET_MAX = "5.0+"
SPEED_SLOW_LIMIT = 5.0


@lru_cache
def log_line_pattern() -> re.Pattern[str]:
    """Access log line: host ip - [datetime] "method url protocol" status bytes "referer" "ua" [speed] [cache]."""
    return re.compile(
        r'^(?P<host>\S+) '
        r'(?P<ip>\S+) - '
        r'\[(?P<datetime>[^\]]*)\] "'
        r'(?P<method>\S+) '
        r'(?P<url>\S+) '
        r'(?P<protocol>[^"]*)" '
        r'(?P<status>\d{3}) '
        r'(?P<bytes>\d+) "'
        r'(?P<referer>[^"]*)" "'
        r'(?P<ua>[^"]*)" ?'
        r'(?P<speed>\d+\.\d+)? ?'
        r'(?P<cache>.+?)?$'
    )
