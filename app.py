from __future__ import annotations

import argparse
from pathlib import Path

from dotenv import load_dotenv

from logstats.config.logging_config import configure_logging
from logstats.config.settings import get_settings
from logstats.domain.cache.repositories import CacheRepository
from logstats.domain.stats.repositories import StatsRepository
from logstats.services.enrichment.resolvers import CountryResolver, parse_user_agent
from logstats.services.ingestion import ImportSession, LogImportService

load_dotenv()


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    arg_parser = argparse.ArgumentParser(
        prog=settings.name, description="Aggregate daily access logs into stats files."
    )
    arg_parser.add_argument(
        "logs",
        nargs="*",
        type=Path,
        help="Log files to import, in chronological order. Defaults to every file in DIR_LOG.",
    )
    arg_parser.add_argument("--version", action="version", version=f"%(prog)s {settings.version}")
    args = arg_parser.parse_args(argv)

    verbosity = "debug" if settings.debug else settings.importer.verbosity
    configure_logging(verbosity, settings.importer.interactive)

    cache_repo = CacheRepository(
        settings.dirs.cache,
        countries_file=settings.cache.countries_file,
        browsers_file=settings.cache.browsers_file,
        retention_file=settings.cache.retention_file,
    )
    country_resolver = CountryResolver.from_path(settings.geoip.db_path)
    try:
        session = ImportSession.load(cache_repo, country_resolver, parse_user_agent, settings.cache)
        service = LogImportService(
            session,
            cache_repo,
            StatsRepository(settings.dirs.stats),
            resume=settings.importer.resume,
            trim_interval=settings.cache.trim_interval,
        )
        if args.logs:
            results = service.import_files(args.logs)
        else:
            results = service.import_directory(settings.dirs.log)
    finally:
        country_resolver.close()

    return 0 if all(result is not None for result in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
