"""Store layer.

This package reads known observation timestamps from the append-only
store and appends the deduplicated batch for each run.
"""
