"""Stats aggregation."""
from .service import EnrichedRequest, StatsAccumulator

__all__ = ["EnrichedRequest", "StatsAccumulator"]
