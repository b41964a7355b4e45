"""Log import service - turns one day's access log into a stats file.

This service orchestrates:
- Line parsing and classification via LogParser
- Country and client lookups via the session caches
- Retention marks via RetentionTracker
- Counter updates via StatsAccumulator
- Loading and saving of the day's stats and of the caches
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from logstats.config.logging_config import COMPLETE
from logstats.domain.cache.models import BotClient
from logstats.domain.cache.repositories import CacheRepository
from logstats.domain.stats.repositories import StatsFileError, StatsRepository
from logstats.services.aggregation.service import EnrichedRequest, StatsAccumulator
from logstats.services.enrichment.caches import hash_key
from logstats.services.logparser.classifier import classify
from logstats.services.logparser.constants import URL_TYPE_PAGE
from logstats.services.logparser.logparser import LogParser, open_log_file
from logstats.services.logparser.schemas import LogRecord

from .session import ImportSession

logger = logging.getLogger(__name__)

RETENTION_STATUS_CLASS = "2xx"


def visitor_key(record: LogRecord) -> str:
    return hash_key(record.ip, record.user_agent)


@dataclass
class ImportResult:
    """Line counts of one imported file."""

    log_path: Path
    date: str | None = None
    lines_total: int = 0
    lines_read: int = 0
    skipped_head: int = 0
    skipped_tail: int = 0
    other_dates: int = 0
    stats_path: Path | None = None


class LogImportService:
    """Imports access log files, one calendar day per file.

    Files share the session caches, so they should be imported in
    chronological order.

    Example:
        session = ImportSession.load(cache_repo, CountryResolver.from_path(db), parse_user_agent)
        service = LogImportService(session, cache_repo, StatsRepository(Path("var/stats")))
        service.import_files(sorted(Path("var/logs").iterdir()))
    """

    def __init__(
        self,
        session: ImportSession,
        cache_repo: CacheRepository,
        stats_repo: StatsRepository,
        *,
        parser: LogParser | None = None,
        resume: bool = True,
        trim_interval: int = 1000,
    ) -> None:
        """Initialize the log import service.

        Args:
            session: Caches shared by all imported files.
            cache_repo: Repository the caches are saved to after each file.
            stats_repo: Repository for the daily stats files.
            parser: LogParser instance for parsing log lines.
            resume: Skip lines already counted in the day's stats (linesParsed).
            trim_interval: Trim the caches every N processed lines.
        """
        self.session = session
        self.cache_repo = cache_repo
        self.stats_repo = stats_repo
        self.parser = parser or LogParser()
        self.resume = resume
        self.trim_interval = trim_interval

    def import_directory(self, log_dir: Path) -> list[ImportResult | None]:
        """Import every file in ``log_dir`` sorted by name."""
        if not log_dir.is_dir():
            logger.error("Log directory %s does not exist.", log_dir)
            return []
        paths = sorted(path for path in log_dir.iterdir() if path.is_file())
        if not paths:
            logger.warning("No log files found in %s", log_dir)
        return self.import_files(paths)

    def import_files(self, log_paths: Iterable[Path | str]) -> list[ImportResult | None]:
        return [self.import_log_file(Path(log_path)) for log_path in log_paths]

    def import_log_file(self, log_path: Path) -> ImportResult | None:
        """Import one log file.

        Returns:
            ImportResult, or None when the file was aborted (unreadable,
            first line not in log format, unusable stats file, failed save).
        """
        result = ImportResult(log_path=log_path)
        day_visitors: set[str] = set()
        accumulator: StatsAccumulator | None = None
        self.parser.reset_counters()

        try:
            with open_log_file(log_path) as log_file:
                logger.info("Reading log: %s", log_path)
                for line in log_file:
                    result.lines_total += 1

                    record = self.parser.parse_line(line)
                    if record is None:
                        result.skipped_tail += 1
                        if accumulator is None:
                            logger.error(
                                "First line of %s does not match the log format, file skipped", log_path
                            )
                            return None
                        continue

                    if accumulator is None:
                        result.date = record.moment.date
                        accumulator = StatsAccumulator(self.stats_repo.load(result.date))
                        self.session.retention.trim(result.date)

                    stats = accumulator.stats
                    if self.resume and result.lines_total <= stats.lines_parsed:
                        result.skipped_head += 1
                        if record.moment.date == result.date:
                            day_visitors.add(visitor_key(record))
                        continue

                    if record.moment.date != result.date:
                        result.other_dates += 1
                        continue

                    accumulator.add(self._enrich(record, day_visitors))
                    result.lines_read += 1

                    if result.lines_read % self.trim_interval == 0:
                        self.session.trim(result.date)
        except StatsFileError as e:
            logger.error("Stats file error, %s", e)
            return None
        except (OSError, EOFError) as e:
            logger.error("Could not read the log file: %s (%s)", log_path, e)
            self.session.discard_changes(self.cache_repo)
            return None

        if accumulator is None:
            logger.info("Log file %s is empty", log_path)
            return result

        logger.log(
            COMPLETE,
            "%s lines read: %d/%d. Skipped head: %d. Skipped tail: %d. Other dates: %d",
            log_path.name,
            result.lines_read,
            result.lines_total,
            result.skipped_head,
            result.skipped_tail,
            result.other_dates,
        )

        stats = accumulator.stats
        if self.resume and result.lines_total < stats.lines_parsed:
            logger.warning(
                "Log %s has %d lines but %d were already parsed for %s, file was probably rotated",
                log_path,
                result.lines_total,
                stats.lines_parsed,
                result.date,
            )

        # Caches are written only after the stats
        try:
            if result.lines_read:
                stats.lines_parsed = result.lines_total
                result.stats_path = self.stats_repo.save(stats)
            self.session.save(self.cache_repo, result.date)
        except OSError as e:
            logger.error("Could not save the results of %s: %s", log_path, e)
            self.session.discard_changes(self.cache_repo)
            return None
        return result

    def _enrich(self, record: LogRecord, day_visitors: set[str]) -> EnrichedRequest:
        request = classify(record)
        moment = record.moment
        country_code = self.session.countries.country(record.ip, moment.timestamp)
        client = self.session.clients.client(record.user_agent, moment.timestamp)

        visitor = visitor_key(record)
        new_visitor = visitor not in day_visitors
        day_visitors.add(visitor)

        retention = self.session.retention
        new_url_visitor = False
        if request.url_type == URL_TYPE_PAGE and request.status_class == RETENTION_STATUS_CLASS:
            new_url_visitor = retention.mark_page_view(moment.date, visitor, request.url)

        retention_dates: list[str] = []
        if not isinstance(client, BotClient):
            retention_dates = retention.dates_with_mark(visitor, request.url)

        return EnrichedRequest(
            request=request,
            hour=moment.hour,
            size=record.bytes,
            cache=record.cache,
            client=client,
            country_code=country_code,
            new_visitor=new_visitor,
            new_url_visitor=new_url_visitor,
            retention_dates=retention_dates,
        )
