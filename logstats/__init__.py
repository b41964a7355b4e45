"""Incremental aggregation of daily access logs into statistics trees."""
