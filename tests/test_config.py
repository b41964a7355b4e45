"""Tests for configuration management."""

import logging
from pathlib import Path

import pytest

from logstats.config import CacheSettings, GeoIPSettings, ImportSettings, Settings, get_settings
from logstats.config.logging_config import COMPLETE, MemoryLogHandler, configure_logging


def test_default_settings():
    """Test default settings are loaded correctly."""
    settings = Settings()

    assert settings.name == "logstats"
    assert settings.version == "0.1.0"
    assert settings.debug is False


def test_environment_override(monkeypatch):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("APP_NAME", "Custom Name")
    monkeypatch.setenv("APP_DEBUG", "true")

    settings = Settings()

    assert settings.name == "Custom Name"
    assert settings.debug is True


def test_directory_settings():
    settings = Settings()

    assert settings.dirs.log == Path("var/logs")
    assert settings.dirs.stats == Path("var/stats")
    assert settings.dirs.cache == Path("var/cache")


def test_cache_settings():
    """Test cache limits and file names."""
    settings = Settings()

    assert settings.cache.countries_max == 5000
    assert settings.cache.browsers_max == 500
    assert settings.cache.retention_visitors_max == 5000
    assert settings.cache.retention_days == 7
    assert settings.cache.countries_file == "stats-1-countries.cache.json"
    assert settings.cache.browsers_file == "stats-1-browsers.cache.json"
    assert settings.cache.retention_file == "stats-1-retention.cache.json"


@pytest.mark.parametrize(
    ("field", "message"),
    [("retention_days", "retention_days must be at least 1"), ("trim_interval", "trim_interval must be at least 1")],
)
def test_cache_settings_limits(field, message):
    with pytest.raises(ValueError, match=message):
        CacheSettings(**{field: 0})


def test_import_settings():
    settings = Settings()

    assert settings.importer.resume is True
    assert settings.importer.verbosity == "complete"
    assert settings.importer.interactive is True


def test_import_settings_invalid_verbosity():
    with pytest.raises(ValueError):
        ImportSettings(verbosity="loud")


def test_geoip_settings(tmp_path):
    """Test GeoIP configuration."""
    test_db = tmp_path / "test_geoip.mmdb"
    test_db.touch()

    settings = Settings(geoip=GeoIPSettings(db_path=test_db, validate_db_path=True))
    assert settings.geoip.db_path == test_db


def test_geoip_missing_file():
    """Test GeoIP validation fails for missing file when validation is enabled."""
    with pytest.raises(ValueError, match="GeoIP database file not found"):
        GeoIPSettings(
            db_path=Path("/nonexistent/file.mmdb"),
            validate_db_path=True  # Enable validation
        )


def test_settings_caching():
    """Test that get_settings returns cached instance."""
    settings1 = get_settings()
    settings2 = get_settings()

    # Should be the same instance due to @lru_cache
    assert settings1 is settings2


def test_nested_settings_override(monkeypatch):
    """Test overriding nested settings via environment variables."""
    monkeypatch.setenv("DIR_STATS", "/srv/stats")
    monkeypatch.setenv("CACHE_COUNTRIES_MAX", "100")
    monkeypatch.setenv("IMPORT_RESUME", "false")
    monkeypatch.setenv("IMPORT_VERBOSITY", "debug")

    settings = Settings()

    assert settings.dirs.stats == Path("/srv/stats")
    assert settings.cache.countries_max == 100
    assert settings.importer.resume is False
    assert settings.importer.verbosity == "debug"


@pytest.fixture
def restore_logstats_logger():
    """Undo configure_logging so later tests can capture records."""
    yield
    root = logging.getLogger("logstats")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.mark.usefixtures("restore_logstats_logger")
def test_configure_logging_interactive():
    assert configure_logging("info", interactive=True) is None

    root = logging.getLogger("logstats")
    assert root.level == logging.INFO
    assert len(root.handlers) == 1
    assert root.propagate is False


@pytest.mark.usefixtures("restore_logstats_logger")
def test_configure_logging_collects_messages():
    """Messages at or above the verbosity level are collected in memory."""
    handler = configure_logging("complete", interactive=False)
    assert isinstance(handler, MemoryLogHandler)

    logger = logging.getLogger("logstats.services.ingestion.service")
    logger.info("not collected")
    logger.log(COMPLETE, "access.log lines read: %d/%d", 3, 4)
    logger.error("Stats file error")

    assert handler.messages == ["access.log lines read: 3/4", "Stats file error"]


@pytest.mark.usefixtures("restore_logstats_logger")
def test_configure_logging_silent():
    handler = configure_logging("silent", interactive=False)

    logging.getLogger("logstats.domain").error("not collected")

    assert handler.messages == []


def test_complete_level_name():
    assert logging.getLevelName(COMPLETE) == "COMPLETE"
