"""Timestamp formatting shared by the write and dedup paths.

Observation timestamps are compared as formatted strings, so every
module that writes or matches them goes through this one routine.
"""

from __future__ import annotations

from datetime import datetime, tzinfo

from core.constants import TIMESTAMP_FORMAT


def format_timestamp(instant: datetime) -> str:
    """Render an observation timestamp in canonical store form.

    Args:
        instant: Naive local observation instant.

    Returns:
        ``YYYY/MM/DD HH:MM`` text.
    """
    return instant.strftime(TIMESTAMP_FORMAT)


def format_fetch_timestamp(instant: datetime) -> str:
    """Render the run-level fetch timestamp as ISO-8601 with offset."""
    return instant.isoformat(timespec="seconds")


def run_clock(zone: tzinfo) -> datetime:
    """Return the run-start wall-clock instant in the given zone."""
    return datetime.now(zone)
