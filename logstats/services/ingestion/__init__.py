from .service import ImportResult, LogImportService
from .session import ImportSession

__all__ = ["ImportResult", "ImportSession", "LogImportService"]
