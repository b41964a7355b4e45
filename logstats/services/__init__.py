"""Services layer - parsing, enrichment, aggregation and import."""
from .ingestion import ImportSession, LogImportService
from .logparser import LogParser

__all__ = ["ImportSession", "LogImportService", "LogParser"]
