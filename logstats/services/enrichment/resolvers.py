"""External lookups: GeoIP country resolution and user-agent parsing."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Callable

from geoip2.database import Reader
from geoip2.errors import AddressNotFoundError
from IPy import IP
from user_agents import parse as parse_ua

from logstats.domain.cache.models import BotClient, BrowserClient, ClientInfo

logger = logging.getLogger(__name__)

UNKNOWN_COUNTRY = "--"

# Address types without a meaningful location
UNROUTABLE_IP_TYPES = frozenset({
    "PRIVATE",
    "LOOPBACK",
    "RESERVED",
    "LINKLOCAL",
    "UNSPECIFIED",
    "CARRIER_GRADE_NAT",
    "ULA",
    "MULTICAST",
    "SITE-LOCAL",
})


def create_reader(path: Path | str) -> Reader | None:
    """Create a GeoIP2 Reader instance."""
    try:
        return Reader(str(path))
    except Exception:
        logger.exception("Failed to create GeoIP2 Reader for path: %s", path)
        return None


@lru_cache(maxsize=1024)
def get_ip_type(ip: str) -> str:
    """Get the IP type of the given IP address.

    If the IP address is invalid, return an empty string.
    """
    try:
        return IP(ip).iptype()
    except ValueError:
        logger.debug("Invalid IP address %s.", ip)
        return ""


class CountryResolver:
    """Resolves an IP address to an ISO country code using a GeoIP2 database.

    Works with both country and city databases. Unroutable, invalid and
    unknown addresses resolve to ``UNKNOWN_COUNTRY``.
    """

    def __init__(self, reader: Reader | None) -> None:
        self.reader = reader
        self._lookup: Callable | None = None
        if reader is not None:
            database_type = reader.metadata().database_type
            self._lookup = reader.city if "City" in database_type else reader.country
            logger.debug("GeoIP database type: %s", database_type)
        else:
            logger.error("No GeoIP database available, all countries resolve to %s", UNKNOWN_COUNTRY)

    @classmethod
    def from_path(cls, path: Path | str) -> "CountryResolver":
        return cls(create_reader(path))

    def __call__(self, ip: str) -> str:
        ip_type = get_ip_type(ip)
        if not ip_type or ip_type in UNROUTABLE_IP_TYPES:
            logger.debug("IP type %s (%s) has no country.", ip_type, ip)
            return UNKNOWN_COUNTRY
        if self._lookup is None:
            return UNKNOWN_COUNTRY
        try:
            response = self._lookup(ip)
        except (AddressNotFoundError, ValueError) as e:
            logger.debug("GeoIP lookup failed for %s: %s", ip, e)
            return UNKNOWN_COUNTRY
        return response.country.iso_code or UNKNOWN_COUNTRY

    def close(self) -> None:
        if self.reader is not None:
            self.reader.close()


def truncate_version(version: str) -> str:
    """``120.0.6099.71`` -> ``120.0``."""
    parts = version.split(".")
    if len(parts) > 2:
        return ".".join(parts[:2])
    return version


def device_type(user_agent) -> str:
    if user_agent.is_tablet:
        return "tablet"
    if user_agent.is_mobile:
        return "mobile"
    if user_agent.is_pc:
        return "desktop"
    return "other"


def parse_user_agent(user_agent: str) -> ClientInfo:
    """Parse a raw user-agent string into a bot or browser client."""
    ua = parse_ua(user_agent)
    if ua.is_bot:
        return BotClient(
            browser_name=ua.browser.family or "",
            browser_version=ua.browser.version_string or "",
        )
    return BrowserClient(
        device_type=device_type(ua),
        browser_name=ua.browser.family or "",
        browser_version=truncate_version(ua.browser.version_string or ""),
        os_name=ua.os.family or "",
        os_version=truncate_version(ua.os.version_string or ""),
    )
