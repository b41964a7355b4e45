from .cache.models import BotClient, BrowserClient, ClientEntry, CountryEntry, RetentionVisitor
from .stats.models import StatsTree

__all__ = [
    "BotClient",
    "BrowserClient",
    "ClientEntry",
    "CountryEntry",
    "RetentionVisitor",
    "StatsTree",
]
