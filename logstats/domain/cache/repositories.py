"""Repository for the country, client and retention cache files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

from logstats.domain.cache.models import ClientEntry, CountryEntry, RetentionTable, RetentionVisitor
from logstats.domain.storage import CorruptFileError, read_mapping, write_mapping

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheRepository:
    """Loads and saves the three auxiliary caches.

    A missing file loads as an empty cache. A corrupt file is reported and
    also loads as empty, so the import can go on with a cold cache.

    Example:
        repo = CacheRepository(Path("var/cache"))
        countries = repo.load_countries()
        ...
        repo.save_countries(countries)
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        countries_file: str = "stats-1-countries.cache.json",
        browsers_file: str = "stats-1-browsers.cache.json",
        retention_file: str = "stats-1-retention.cache.json",
    ) -> None:
        self.cache_dir = cache_dir
        self.countries_path = cache_dir / countries_file
        self.browsers_path = cache_dir / browsers_file
        self.retention_path = cache_dir / retention_file

    def _load(self, path: Path, decode: Callable[[dict[str, Any]], T]) -> T | None:
        try:
            data = read_mapping(path)
        except CorruptFileError as e:
            logger.error("Cache file ignored, %s", e)
            return None
        if data is None:
            return None
        try:
            return decode(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error("Cache file ignored, invalid entry in %s: %s", path, e)
            return None

    def load_countries(self) -> dict[str, CountryEntry]:
        entries = self._load(
            self.countries_path,
            lambda data: {ip: CountryEntry.from_dict(entry) for ip, entry in data.items()},
        )
        return entries or {}

    def load_browsers(self) -> dict[str, ClientEntry]:
        entries = self._load(
            self.browsers_path,
            lambda data: {key: ClientEntry.from_dict(entry) for key, entry in data.items()},
        )
        return entries or {}

    def load_retention(self) -> RetentionTable:
        table = self._load(
            self.retention_path,
            lambda data: {
                day: {visitor: RetentionVisitor.from_dict(entry) for visitor, entry in visitors.items()}
                for day, visitors in data.items()
            },
        )
        return table or {}

    def save_countries(self, entries: dict[str, CountryEntry]) -> None:
        logger.debug("Writing cache: %s", self.countries_path)
        write_mapping(self.countries_path, {ip: entry.to_dict() for ip, entry in entries.items()})

    def save_browsers(self, entries: dict[str, ClientEntry]) -> None:
        logger.debug("Writing cache: %s", self.browsers_path)
        write_mapping(self.browsers_path, {key: entry.to_dict() for key, entry in entries.items()})

    def save_retention(self, table: RetentionTable) -> None:
        logger.debug("Writing cache: %s", self.retention_path)
        write_mapping(
            self.retention_path,
            {
                day: {visitor: entry.to_dict() for visitor, entry in visitors.items()}
                for day, visitors in table.items()
            },
        )
