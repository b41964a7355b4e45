"""Tests for the stats accumulator."""

import pytest

from logstats.domain.cache.models import BotClient, BrowserClient
from logstats.domain.stats.models import StatsTree
from logstats.services.aggregation.service import EnrichedRequest, StatsAccumulator
from logstats.services.logparser.schemas import ClassifiedRequest

FIREFOX = BrowserClient(
    device_type="desktop",
    browser_name="Firefox",
    browser_version="121.0",
    os_name="Linux",
    os_version="6.1",
)
GOOGLEBOT = BotClient(browser_name="Googlebot", browser_version="2.1")


def enriched(
    client=FIREFOX,
    *,
    status_class: str = "2xx",
    url_type: str = "page",
    url: str = "/about",
    speed_bucket: str = "0.04",
    slow: bool = False,
    hour: int = 10,
    size: int = 500,
    cache: str = "HIT",
    country_code: str = "US",
    new_visitor: bool = True,
    new_url_visitor: bool = True,
    retention_dates: list[str] | None = None,
) -> EnrichedRequest:
    return EnrichedRequest(
        request=ClassifiedRequest(
            status_class=status_class,
            url_type=url_type,
            url=url,
            speed_bucket=speed_bucket,
            slow=slow,
        ),
        hour=hour,
        size=size,
        cache=cache,
        client=client,
        country_code=country_code,
        new_visitor=new_visitor,
        new_url_visitor=new_url_visitor,
        retention_dates=retention_dates or [],
    )


@pytest.fixture
def accumulator() -> StatsAccumulator:
    return StatsAccumulator(StatsTree(date="2024-01-01"))


def test_grand_totals(accumulator: StatsAccumulator) -> None:
    accumulator.add(enriched())
    accumulator.add(enriched(url_type="css", url="/css/a", size=100, new_visitor=False, cache=""))

    total = accumulator.stats.total
    assert total.visitor == 1
    assert total.hit == 2
    assert total.u_type == {"page": 1, "css": 1}
    assert total.status == {"2xx": 2}
    assert total.size == {"total": 600, "page": 500, "css": 100}
    assert total.cache == {"HIT": 1, "": 1}
    assert total.speed == {"0.04": 2}


def test_slow_log_only_in_grand_total(accumulator: StatsAccumulator) -> None:
    accumulator.add(enriched(speed_bucket="2.0", slow=True))
    accumulator.add(enriched(speed_bucket="3.0", slow=True, new_visitor=False))
    assert accumulator.stats.total.slow == {"page": {"/about": 2}}
    assert accumulator.stats.ppl.total.slow == {}


def test_people_tiers(accumulator: StatsAccumulator) -> None:
    accumulator.add(enriched(hour=23))
    people = accumulator.stats.ppl

    assert people.total.hit == 1
    assert people.total.visitor == 1
    assert accumulator.stats.bot.total.hit == 0
    assert set(people.cc) == {"total", "US"}

    for key in ("total", "US"):
        bucket = people.cc[key].status["2xx"]["page"]
        assert bucket.hit == 1
        assert bucket.visitor == 1
        assert bucket.size == 500
        assert bucket.hour[23] == 1
        assert sum(bucket.hour) == 1
        assert bucket.cache == {"HIT": 1}
        url = bucket.url["/about"]
        assert (url.hit, url.visitor, url.size) == (1, 1, 500)
        assert url.cache == {"HIT": 1}


def test_people_client_breakdown(accumulator: StatsAccumulator) -> None:
    accumulator.add(enriched())
    accumulator.add(enriched(new_visitor=False))
    ua = accumulator.stats.ppl.cc["US"].ua

    assert ua.type == {"desktop": 2}
    assert ua.os == {"Linux": 2}
    browser = ua.device["desktop"].browser["Firefox"]
    assert browser.total == 2
    assert browser.version == {"121.0": 2}
    os_stats = ua.device["desktop"].os["Linux"]
    assert os_stats.total == 2
    assert os_stats.version == {"6.1": 2}


def test_url_visitor_only_on_new_retention_entry(accumulator: StatsAccumulator) -> None:
    accumulator.add(enriched())
    accumulator.add(enriched(new_visitor=False, new_url_visitor=False))
    url = accumulator.stats.ppl.cc["US"].status["2xx"]["page"].url["/about"]
    assert url.hit == 2
    assert url.visitor == 1


def test_retention_counters(accumulator: StatsAccumulator) -> None:
    accumulator.add(enriched(retention_dates=["2023-12-30", "2024-01-01"]))
    for key in ("total", "US"):
        bucket = accumulator.stats.ppl.cc[key].status["2xx"]["page"]
        assert bucket.retention == {"2023-12-30": 1, "2024-01-01": 1}
        assert bucket.url["/about"].retention == {"2023-12-30": 1, "2024-01-01": 1}


def test_bot_tiers(accumulator: StatsAccumulator) -> None:
    accumulator.add(enriched(GOOGLEBOT, status_class="4xx", url_type="other", url="/x.php"))
    bots = accumulator.stats.bot

    assert bots.total.hit == 1
    assert accumulator.stats.ppl.total.hit == 0
    assert set(bots.name) == {"total", "Googlebot"}

    named = bots.name["Googlebot"].status["4xx"]["other"]
    assert named.hit == 1
    assert named.version == {"2.1": 1}
    assert named.url["/x.php"].hit == 1
    assert bots.name["total"].status["4xx"]["other"].version == {}
    assert bots.name["Googlebot"].ua is None


def test_bot_ignores_retention(accumulator: StatsAccumulator) -> None:
    accumulator.add(enriched(GOOGLEBOT, retention_dates=["2024-01-01"]))
    assert accumulator.stats.bot.name["total"].status["2xx"]["page"].retention == {}


def test_counters_accumulate_on_loaded_tree() -> None:
    stats = StatsTree(date="2024-01-01")
    StatsAccumulator(stats).add(enriched())
    restored = StatsTree.model_validate(stats.to_dict())
    StatsAccumulator(restored).add(enriched(new_visitor=False))
    assert restored.total.hit == 2
    assert restored.ppl.cc["US"].status["2xx"]["page"].hit == 2
