"""Per-day record of which pages each visitor has already been counted for."""
from __future__ import annotations

import logging
from datetime import date, timedelta

from logstats.domain.cache.models import RetentionTable, RetentionVisitor

logger = logging.getLogger(__name__)


def window_start(anchor: str, days: int) -> str:
    """First day of a ``days`` long window ending on ``anchor`` (both YYYY-MM-DD)."""
    return (date.fromisoformat(anchor) - timedelta(days=days - 1)).isoformat()


class RetentionTracker:
    """Tracks page views per day and visitor.

    A page view is counted once per day, visitor and URL. The marks of
    earlier days tell whether a visitor came back to the same URL.

    Example:
        tracker = RetentionTracker()
        tracker.mark_page_view("2024-01-02", visitor, "/about")   # True
        tracker.mark_page_view("2024-01-02", visitor, "/about")   # False
        tracker.dates_with_mark(visitor, "/about")                # ["2024-01-02"]
    """

    def __init__(
        self,
        table: RetentionTable | None = None,
        *,
        max_visitors: int = 5000,
        window_days: int = 7,
    ) -> None:
        self.table: RetentionTable = table if table is not None else {}
        self.max_visitors = max_visitors
        self.window_days = window_days
        self.dirty: bool = False
        self.touched: bool = False

    def mark_page_view(self, day: str, visitor: str, url: str) -> bool:
        """Mark ``url`` as viewed by ``visitor`` on ``day``.

        Returns:
            True if this is a new mark, False if it was already counted.
        """
        visitors = self.table.setdefault(day, {})
        entry = visitors.get(visitor)
        if entry is None:
            entry = visitors[visitor] = RetentionVisitor()
        elif url in entry.urls:
            return False

        entry.urls[url] = None
        entry.pages += 1
        self.dirty = True
        self.touched = True
        return True

    def dates_with_mark(self, visitor: str, url: str) -> list[str]:
        """Days in the table on which ``visitor`` was counted for ``url``."""
        return [
            day
            for day, visitors in self.table.items()
            if visitor in visitors and url in visitors[visitor].urls
        ]

    def reset(self, table: RetentionTable) -> None:
        self.table = table
        self.dirty = False
        self.touched = False

    def trim(self, anchor: str) -> None:
        """Drop days before the window ending on ``anchor`` and cap visitors per day.

        Visitors with the most pages are kept.
        """
        self.touched = False
        oldest = window_start(anchor, self.window_days)
        for day in list(self.table):
            if day < oldest:
                del self.table[day]
                logger.debug("Retention for %s dropped", day)
                continue
            visitors = self.table[day]
            if len(visitors) > self.max_visitors:
                ordered = sorted(visitors.items(), key=lambda item: item[1].pages, reverse=True)
                self.table[day] = dict(ordered[: self.max_visitors])
