"""Configuration module for logstats."""

from logstats.config.settings import (
    CacheSettings,
    DirectorySettings,
    GeoIPSettings,
    ImportSettings,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "CacheSettings",
    "DirectorySettings",
    "GeoIPSettings",
    "ImportSettings",
]
