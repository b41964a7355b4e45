"""Visitor retention tracking."""
from .tracker import RetentionTracker

__all__ = ["RetentionTracker"]
