"""Enrichment of requests with country and client information."""
from .caches import ClientCache, IdentityCache, LookupCache, hash_key
from .resolvers import UNKNOWN_COUNTRY, CountryResolver, parse_user_agent

__all__ = [
    "ClientCache",
    "IdentityCache",
    "LookupCache",
    "CountryResolver",
    "UNKNOWN_COUNTRY",
    "hash_key",
    "parse_user_agent",
]
