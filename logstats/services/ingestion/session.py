"""In-memory state shared by all files of one import run."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from logstats.config.settings import CacheSettings
from logstats.domain.cache.models import ClientInfo
from logstats.domain.cache.repositories import CacheRepository
from logstats.services.enrichment.caches import ClientCache, IdentityCache
from logstats.services.retention.tracker import RetentionTracker

logger = logging.getLogger(__name__)


@dataclass
class ImportSession:
    """The three caches, loaded once and persisted after each file."""

    countries: IdentityCache
    clients: ClientCache
    retention: RetentionTracker

    @classmethod
    def load(
        cls,
        repo: CacheRepository,
        country_resolver: Callable[[str], str],
        ua_resolver: Callable[[str], ClientInfo],
        settings: CacheSettings | None = None,
    ) -> "ImportSession":
        settings = settings or CacheSettings()
        session = cls(
            countries=IdentityCache(
                country_resolver, repo.load_countries(), max_size=settings.countries_max
            ),
            clients=ClientCache(ua_resolver, repo.load_browsers(), max_size=settings.browsers_max),
            retention=RetentionTracker(
                repo.load_retention(),
                max_visitors=settings.retention_visitors_max,
                window_days=settings.retention_days,
            ),
        )
        logger.debug(
            "Caches loaded: %d countries, %d browsers, %d retention days",
            len(session.countries),
            len(session.clients),
            len(session.retention.table),
        )
        return session

    def trim(self, anchor: str) -> None:
        """Trim the caches that gained entries since their last trim."""
        if self.countries.touched:
            self.countries.trim()
        if self.clients.touched:
            self.clients.trim()
        if self.retention.touched:
            self.retention.trim(anchor)

    def discard_changes(self, repo: CacheRepository) -> None:
        """Reload the caches as last saved, dropping what an aborted file added."""
        logger.info("Discarding unsaved cache changes")
        self.countries.reset(repo.load_countries())
        self.clients.reset(repo.load_browsers())
        self.retention.reset(repo.load_retention())

    def save(self, repo: CacheRepository, anchor: str) -> None:
        """Trim and write the caches that gained entries since the last save."""
        if self.countries.dirty:
            self.countries.trim()
            repo.save_countries(self.countries.entries)
            self.countries.dirty = False
        if self.clients.dirty:
            self.clients.trim()
            repo.save_browsers(self.clients.entries)
            self.clients.dirty = False
        if self.retention.dirty:
            self.retention.trim(anchor)
            repo.save_retention(self.retention.table)
            self.retention.dirty = False
