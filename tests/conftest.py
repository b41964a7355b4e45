import os
from pathlib import Path
from typing import Callable

import pytest

from logstats.domain.cache.models import BotClient, BrowserClient, ClientInfo
from logstats.domain.cache.repositories import CacheRepository
from logstats.domain.stats.repositories import StatsRepository
from logstats.services.ingestion import ImportSession, LogImportService

TESTS_DIR = Path(__file__).parent

@pytest.fixture(scope="session", autouse=True)
def baseline_settings_env():
    """Provide baseline env vars so tests are not affected by local .env.

    Pydantic-settings precedence: init args > env vars > .env > defaults.
    Setting these ensures stable defaults regardless of any .env present.
    """
    os.environ.update({
        # App
        "APP_NAME": "logstats",
        "APP_VERSION": "0.1.0",
        "APP_DEBUG": "false",
        # Directories
        "DIR_LOG": "var/logs",
        "DIR_STATS": "var/stats",
        "DIR_CACHE": "var/cache",
        # Caches
        "CACHE_COUNTRIES_MAX": "5000",
        "CACHE_BROWSERS_MAX": "500",
        "CACHE_RETENTION_VISITORS_MAX": "5000",
        "CACHE_RETENTION_DAYS": "7",
        "CACHE_TRIM_INTERVAL": "1000",
        # Import
        "IMPORT_RESUME": "true",
        "IMPORT_VERBOSITY": "complete",
        "IMPORT_INTERACTIVE": "true",
    })

@pytest.fixture(autouse=True)
def refresh_settings_cache():
    """Clear settings cache so env changes take effect per test."""
    from logstats.config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

class FakeCountryResolver:
    """Country lookup by table, counting calls."""

    def __init__(self, countries: dict[str, str] | None = None, default: str = "DE") -> None:
        self.countries = countries or {"1.2.3.4": "US", "5.6.7.8": "FR"}
        self.default = default
        self.calls: list[str] = []

    def __call__(self, ip: str) -> str:
        self.calls.append(ip)
        return self.countries.get(ip, self.default)

class FakeUserAgentParser:
    """Any user agent containing 'bot' is a bot named after the agent string."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def __call__(self, user_agent: str) -> ClientInfo:
        self.calls.append(user_agent)
        if "bot" in user_agent.lower():
            return BotClient(browser_name=user_agent, browser_version="2.1")
        return BrowserClient(
            device_type="desktop",
            browser_name="Firefox",
            browser_version="121.0",
            os_name="Linux",
            os_version="6.1",
        )

@pytest.fixture
def country_resolver() -> FakeCountryResolver:
    return FakeCountryResolver()

@pytest.fixture
def ua_parser() -> FakeUserAgentParser:
    return FakeUserAgentParser()

@pytest.fixture
def make_line() -> Callable[..., str]:
    """Build an access log line in the expected format."""
    def _make_line(
        ip: str = "1.2.3.4",
        ua: str = "X",
        url: str = "/about",
        status: int = 200,
        size: int = 512,
        dt: str = "01/Jan/2024:10:15:00 +0100",
        speed: str = "0.035",
        cache: str = "HIT",
        host: str = "example.com",
    ) -> str:
        line = f'{host} {ip} - [{dt}] "GET {url} HTTP/1.1" {status} {size} "-" "{ua}"'
        if speed:
            line += f" {speed}"
        if cache:
            line += f" {cache}"
        return line + "\n"
    return _make_line

@pytest.fixture
def cache_repo(tmp_path: Path) -> CacheRepository:
    return CacheRepository(tmp_path / "cache")

@pytest.fixture
def stats_repo(tmp_path: Path) -> StatsRepository:
    return StatsRepository(tmp_path / "stats")

@pytest.fixture
def session(cache_repo: CacheRepository, country_resolver, ua_parser) -> ImportSession:
    return ImportSession.load(cache_repo, country_resolver, ua_parser)

@pytest.fixture
def import_service(session: ImportSession, cache_repo: CacheRepository, stats_repo: StatsRepository) -> LogImportService:
    return LogImportService(session, cache_repo, stats_repo)

@pytest.fixture
def load_valid_log() -> list[str]:
    """Load the contents of the valid log file."""
    with open(TESTS_DIR / "valid_access_log.txt", "r", encoding="utf-8") as f:
        return f.readlines()

@pytest.fixture
def load_invalid_logs() -> list[str]:
    """Load the contents of the invalid log file."""
    with open(TESTS_DIR / "invalid_logs.txt", "r", encoding="utf-8") as f:
        return f.readlines()
