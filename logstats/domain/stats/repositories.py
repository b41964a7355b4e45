"""Repository for the daily stats files."""
from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from logstats.domain.stats.models import StatsTree
from logstats.domain.storage import CorruptFileError, PersistenceError, read_mapping, write_mapping

logger = logging.getLogger(__name__)

STATS_FILE_SUFFIX = ".stats.json.gz"


class StatsFileError(PersistenceError):
    """Stats file cannot be used as the baseline for a day."""


class StatsRepository:
    """One gzip compressed stats file per day, named ``<date>.stats.json.gz``."""

    def __init__(self, stats_dir: Path) -> None:
        self.stats_dir = stats_dir

    def path_for(self, day: str) -> Path:
        return self.stats_dir / f"{day}{STATS_FILE_SUFFIX}"

    def load(self, day: str) -> StatsTree:
        """Load the stats of ``day``, or a fresh tree when none were saved yet.

        Raises:
            StatsFileError: If the file is corrupt or belongs to another day.
        """
        path = self.path_for(day)
        try:
            data = read_mapping(path, compressed=True)
        except CorruptFileError as e:
            raise StatsFileError(str(e)) from e

        if data is None:
            return StatsTree(date=day)

        logger.debug("Reading stats file: %s", path)
        try:
            stats = StatsTree.model_validate(data)
        except ValidationError as e:
            raise StatsFileError(f"invalid stats in {path}: {e.error_count()} errors") from e

        if stats.date != day:
            raise StatsFileError(
                f"parsing log for: {day} and existing stats are for: {stats.date} on {path}"
            )
        return stats

    def save(self, stats: StatsTree) -> Path:
        path = self.path_for(stats.date)
        logger.info("Saving stats: %s", path)
        write_mapping(path, stats.to_dict(), compressed=True)
        return path
