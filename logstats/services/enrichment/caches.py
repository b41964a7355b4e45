"""Size-capped lookup caches in front of the country and user-agent resolvers."""
from __future__ import annotations

import hashlib
import logging
from typing import Callable, Generic, TypeVar

from logstats.domain.cache.models import ClientEntry, ClientInfo, CountryEntry

logger = logging.getLogger(__name__)

E = TypeVar("E", CountryEntry, ClientEntry)


def hash_key(*parts: str) -> str:
    """Short stable hash used for user-agent and visitor keys."""
    return hashlib.blake2b(
        "".join(parts).encode("utf-8", errors="replace"), digest_size=8
    ).hexdigest()


class LookupCache(Generic[E]):
    """Memoizes an external lookup and keeps the most recently seen keys.

    ``dirty`` is set when an entry is added and cleared after a save.
    ``touched`` is set when an entry is added and cleared after a trim.
    """

    def __init__(self, entries: dict[str, E] | None = None, *, max_size: int) -> None:
        self.entries: dict[str, E] = entries if entries is not None else {}
        self.max_size = max_size
        self.dirty: bool = False
        self.touched: bool = False

    def __len__(self) -> int:
        return len(self.entries)

    def reset(self, entries: dict[str, E]) -> None:
        """Replace all entries, clearing the dirty and touched flags."""
        self.entries = entries
        self.dirty = False
        self.touched = False

    def lookup_or_create(self, key: str, timestamp: str, create: Callable[[], E]) -> E:
        """Return the entry for ``key``, creating it with ``create`` on a miss.

        On a hit the last-seen time moves forward to ``timestamp`` if newer.
        """
        entry = self.entries.get(key)
        if entry is not None:
            if timestamp > entry.last_seen:
                entry.last_seen = timestamp
            return entry

        entry = create()
        self.entries[key] = entry
        self.dirty = True
        self.touched = True
        return entry

    def trim(self) -> None:
        """Keep the ``max_size`` most recently seen entries."""
        self.touched = False
        if len(self.entries) <= self.max_size:
            return
        ordered = sorted(self.entries.items(), key=lambda item: item[1].last_seen, reverse=True)
        dropped = len(ordered) - self.max_size
        self.entries = dict(ordered[: self.max_size])
        logger.debug("%s trimmed, %d entries dropped", type(self).__name__, dropped)


class IdentityCache(LookupCache[CountryEntry]):
    """IP address -> country code."""

    def __init__(
        self,
        resolver: Callable[[str], str],
        entries: dict[str, CountryEntry] | None = None,
        *,
        max_size: int = 5000,
    ) -> None:
        super().__init__(entries, max_size=max_size)
        self.resolver = resolver

    def country(self, ip: str, timestamp: str) -> str:
        entry = self.lookup_or_create(
            ip, timestamp, lambda: CountryEntry(country_code=self.resolver(ip), last_seen=timestamp)
        )
        return entry.country_code


class ClientCache(LookupCache[ClientEntry]):
    """User-agent hash -> parsed client."""

    def __init__(
        self,
        resolver: Callable[[str], ClientInfo],
        entries: dict[str, ClientEntry] | None = None,
        *,
        max_size: int = 500,
    ) -> None:
        super().__init__(entries, max_size=max_size)
        self.resolver = resolver

    def client(self, user_agent: str, timestamp: str) -> ClientInfo:
        entry = self.lookup_or_create(
            hash_key(user_agent),
            timestamp,
            lambda: ClientEntry(client=self.resolver(user_agent), last_seen=timestamp),
        )
        return entry.client
