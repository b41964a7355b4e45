"""Accumulation of enriched requests into the daily stats tree.

Each request updates three tiers in one pass:
- grand totals
- totals per visitor class (people or bots)
- a breakdown per dimension (country for people, bot name for bots, plus
  an aggregate ``total``) split by status class, URL type and URL
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from logstats.domain.cache.models import BotClient, BrowserClient, ClientInfo
from logstats.domain.stats.models import (
    TOTAL_KEY,
    BucketStats,
    ClientStats,
    DeviceStats,
    StatsTree,
    TotalStats,
    VersionStats,
    increment,
)
from logstats.services.logparser.schemas import ClassifiedRequest

logger = logging.getLogger(__name__)

VISITOR_CLASS_PEOPLE = "ppl"
VISITOR_CLASS_BOT = "bot"


@dataclass
class EnrichedRequest:
    """A classified request with everything the counters are keyed by."""

    request: ClassifiedRequest
    hour: int
    size: int
    cache: str
    client: ClientInfo
    country_code: str
    new_visitor: bool = False
    new_url_visitor: bool = False
    retention_dates: list[str] = field(default_factory=list)

    @property
    def visitor_class(self) -> str:
        return VISITOR_CLASS_BOT if isinstance(self.client, BotClient) else VISITOR_CLASS_PEOPLE


class StatsAccumulator:
    """Adds enriched requests to a StatsTree.

    Example:
        accumulator = StatsAccumulator(StatsTree(date="2024-01-01"))
        accumulator.add(enriched)
    """

    def __init__(self, stats: StatsTree) -> None:
        self.stats = stats

    def add(self, enriched: EnrichedRequest) -> None:
        """Update every counter the request contributes to."""
        self._add_totals(self.stats.total, enriched, with_slow=True)

        if isinstance(enriched.client, BotClient):
            self._add_bot(enriched, enriched.client)
        else:
            self._add_people(enriched, enriched.client)

    def _add_totals(self, totals: TotalStats, enriched: EnrichedRequest, *, with_slow: bool = False) -> None:
        request = enriched.request
        if enriched.new_visitor:
            totals.visitor += 1
        totals.hit += 1
        increment(totals.u_type, request.url_type)
        increment(totals.status, request.status_class)
        increment(totals.size, TOTAL_KEY, enriched.size)
        increment(totals.size, request.url_type, enriched.size)
        increment(totals.cache, enriched.cache)
        increment(totals.speed, request.speed_bucket)
        if with_slow and request.slow:
            increment(totals.slow.setdefault(request.url_type, {}), request.url)

    def _add_bucket(self, bucket: BucketStats, enriched: EnrichedRequest) -> None:
        if enriched.new_visitor:
            bucket.visitor += 1
        bucket.hit += 1
        bucket.size += enriched.size
        bucket.hour[enriched.hour] += 1
        increment(bucket.cache, enriched.cache)

        url = bucket.url_stats(enriched.request.url)
        if enriched.new_url_visitor:
            url.visitor += 1
        url.hit += 1
        url.size += enriched.size
        increment(url.cache, enriched.cache)

    def _add_bot(self, enriched: EnrichedRequest, client: BotClient) -> None:
        bots = self.stats.bot
        self._add_totals(bots.total, enriched)

        request = enriched.request
        self._add_bucket(
            bots.dimension(TOTAL_KEY).bucket(request.status_class, request.url_type), enriched
        )
        bucket = bots.dimension(client.browser_name).bucket(request.status_class, request.url_type)
        self._add_bucket(bucket, enriched)
        increment(bucket.version, client.browser_version)

    def _add_people(self, enriched: EnrichedRequest, client: BrowserClient) -> None:
        people = self.stats.ppl
        self._add_totals(people.total, enriched)

        request = enriched.request
        for country_code in (TOTAL_KEY, enriched.country_code):
            dimension = people.dimension(country_code)
            bucket = dimension.bucket(request.status_class, request.url_type)
            self._add_bucket(bucket, enriched)
            if dimension.ua is None:
                dimension.ua = ClientStats()
            self._add_client(dimension.ua, client)

            url = bucket.url_stats(request.url)
            for day in enriched.retention_dates:
                increment(bucket.retention, day)
                increment(url.retention, day)

    @staticmethod
    def _add_client(stats: ClientStats, client: BrowserClient) -> None:
        increment(stats.type, client.device_type)
        increment(stats.os, client.os_name)

        device = stats.device.setdefault(client.device_type, DeviceStats())
        browser = device.browser.setdefault(client.browser_name, VersionStats())
        browser.total += 1
        increment(browser.version, client.browser_version)
        os_stats = device.os.setdefault(client.os_name, VersionStats())
        os_stats.total += 1
        increment(os_stats.version, client.os_version)
