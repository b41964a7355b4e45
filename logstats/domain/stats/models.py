"""Daily statistics tree.

Layout of a serialized tree::

    date, linesParsed
    total                     grand totals (TotalStats, with slow log)
    ppl.total / bot.total     totals per visitor class (TotalStats)
    ppl.cc[country|total]     DimensionStats with client breakdown
    bot.name[name|total]      DimensionStats
    DimensionStats.status[status class][url type] -> BucketStats
    BucketStats.url[url]      -> UrlStats

Field names are serialized in camelCase.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HOURS_PER_DAY = 24
TOTAL_KEY = "total"


def increment(counter: dict[str, int], key: str, amount: int = 1) -> None:
    counter[key] = counter.get(key, 0) + amount


class StatsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UrlStats(StatsModel):
    visitor: int = 0
    hit: int = 0
    size: int = 0
    cache: dict[str, int] = Field(default_factory=dict)
    retention: dict[str, int] = Field(default_factory=dict)


class BucketStats(StatsModel):
    """Counters for one dimension, status class and URL type."""

    visitor: int = 0
    hit: int = 0
    size: int = 0
    hour: list[int] = Field(default_factory=lambda: [0] * HOURS_PER_DAY)
    cache: dict[str, int] = Field(default_factory=dict)
    version: dict[str, int] = Field(default_factory=dict)
    retention: dict[str, int] = Field(default_factory=dict)
    url: dict[str, UrlStats] = Field(default_factory=dict)

    def url_stats(self, url: str) -> UrlStats:
        if url not in self.url:
            self.url[url] = UrlStats()
        return self.url[url]


class VersionStats(StatsModel):
    total: int = 0
    version: dict[str, int] = Field(default_factory=dict)


class DeviceStats(StatsModel):
    """Browser and OS histograms for one device type."""

    browser: dict[str, VersionStats] = Field(default_factory=dict)
    os: dict[str, VersionStats] = Field(default_factory=dict)


class ClientStats(StatsModel):
    """Device type and OS histograms plus per-device breakdown."""

    type: dict[str, int] = Field(default_factory=dict)
    os: dict[str, int] = Field(default_factory=dict)
    device: dict[str, DeviceStats] = Field(default_factory=dict)


class DimensionStats(StatsModel):
    status: dict[str, dict[str, BucketStats]] = Field(default_factory=dict)
    ua: ClientStats | None = None

    def bucket(self, status_class: str, url_type: str) -> BucketStats:
        by_type = self.status.setdefault(status_class, {})
        if url_type not in by_type:
            by_type[url_type] = BucketStats()
        return by_type[url_type]


class TotalStats(StatsModel):
    visitor: int = 0
    hit: int = 0
    u_type: dict[str, int] = Field(default_factory=dict)
    status: dict[str, int] = Field(default_factory=dict)
    size: dict[str, int] = Field(default_factory=dict)
    cache: dict[str, int] = Field(default_factory=dict)
    speed: dict[str, int] = Field(default_factory=dict)
    slow: dict[str, dict[str, int]] = Field(default_factory=dict)


class PeopleStats(StatsModel):
    total: TotalStats = Field(default_factory=TotalStats)
    cc: dict[str, DimensionStats] = Field(default_factory=dict)

    def dimension(self, country_code: str) -> DimensionStats:
        if country_code not in self.cc:
            self.cc[country_code] = DimensionStats(ua=ClientStats())
        return self.cc[country_code]


class BotStats(StatsModel):
    total: TotalStats = Field(default_factory=TotalStats)
    name: dict[str, DimensionStats] = Field(default_factory=dict)

    def dimension(self, bot_name: str) -> DimensionStats:
        if bot_name not in self.name:
            self.name[bot_name] = DimensionStats()
        return self.name[bot_name]


class StatsTree(StatsModel):
    """All counters of one calendar day."""

    date: str
    lines_parsed: int = 0
    total: TotalStats = Field(default_factory=TotalStats)
    ppl: PeopleStats = Field(default_factory=PeopleStats)
    bot: BotStats = Field(default_factory=BotStats)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
