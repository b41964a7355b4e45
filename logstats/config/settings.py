from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


Verbosity = Literal["silent", "errors", "complete", "info", "debug"]


class DirectorySettings(BaseSettings):
    """Directory configuration settings."""

    model_config = SettingsConfigDict(env_prefix="DIR_", env_file=".env", extra="ignore")

    log: Path = Field(default=Path("var/logs"), description="Directory holding the access logs to import")
    stats: Path = Field(default=Path("var/stats"), description="Directory the daily stats files are written to")
    cache: Path = Field(default=Path("var/cache"), description="Directory holding the lookup and retention caches")


class GeoIPSettings(BaseSettings):
    """GeoIP database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="GEOIP_", env_file=".env", extra="ignore")

    db_path: Path = Field(
        default=Path("data/GeoLite2-Country.mmdb"),
        description="Path to GeoIP2/GeoLite2 country or city database file",
    )
    validate_db_path: bool = Field(
        default=False,
        description="Validate that the GeoIP database file exists (set to True for production)"
    )

    @model_validator(mode="after")
    def validate_geoip_db_exists(self) -> "GeoIPSettings":
        """Ensure GeoIP database file exists if validation is enabled."""
        if self.validate_db_path and not self.db_path.exists():
            raise ValueError(f"GeoIP database file not found: {self.db_path}")
        return self


class CacheSettings(BaseSettings):
    """Size limits and file names of the auxiliary caches."""

    model_config = SettingsConfigDict(env_prefix="CACHE_", env_file=".env", extra="ignore")

    countries_max: int = Field(default=5000, description="Maximum number of IPs kept in the country cache")
    browsers_max: int = Field(default=500, description="Maximum number of user agents kept in the client cache")
    retention_visitors_max: int = Field(
        default=5000,
        description="Maximum number of visitors kept per day in the retention cache",
    )
    retention_days: int = Field(
        default=7,
        description="Number of days (including the processed day) kept in the retention cache",
    )
    trim_interval: int = Field(default=1000, description="Trim the caches every N processed lines")
    countries_file: str = Field(default="stats-1-countries.cache.json")
    browsers_file: str = Field(default="stats-1-browsers.cache.json")
    retention_file: str = Field(default="stats-1-retention.cache.json")

    @model_validator(mode="after")
    def validate_limits(self) -> "CacheSettings":
        """Ensure limits are usable."""
        if self.retention_days < 1:
            raise ValueError("retention_days must be at least 1")
        if self.trim_interval < 1:
            raise ValueError("trim_interval must be at least 1")
        return self


class ImportSettings(BaseSettings):
    """Log import configuration settings."""

    model_config = SettingsConfigDict(env_prefix="IMPORT_", env_file=".env", extra="ignore")

    resume: bool = Field(
        default=True,
        description="Skip lines already counted by a previous run over the same file (uses linesParsed).",
    )
    verbosity: Verbosity = Field(default="complete", description="Amount of progress output")
    interactive: bool = Field(
        default=True,
        description="Print messages to the console. When False, messages are collected in memory.",
    )


class Settings(BaseSettings):
    """Main application settings.

    Configuration precedence (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values

    Example .env file:
        DIR_LOG=/var/log/nginx/daily
        DIR_STATS=/srv/stats
        GEOIP_DB_PATH=/data/GeoLite2-Country.mmdb
        IMPORT_VERBOSITY=info
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    name: str = Field(default="logstats", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Log at debug level regardless of IMPORT_VERBOSITY")

    dirs: DirectorySettings = Field(default_factory=DirectorySettings)
    geoip: GeoIPSettings = Field(default_factory=GeoIPSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    importer: ImportSettings = Field(default_factory=ImportSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Use this function throughout the application to access settings.
    """
    return Settings()
