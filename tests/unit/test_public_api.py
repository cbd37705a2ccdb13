"""Unit tests for the public SDK import surface."""

from __future__ import annotations

import reservoir_sync


def test_public_api_exports_resolve() -> None:
    """Every name in __all__ should be importable from the SDK module."""
    missing = [name for name in reservoir_sync.__all__ if not hasattr(reservoir_sync, name)]

    assert missing == []


def test_public_api_normalizes_rows() -> None:
    """SDK callers can normalize rows without touching internal packages."""
    rows = [["03/10", "24:00", "12.3", "100", "--", "--", "--", "5.0", "4.8", "0.0", "0.0"]]

    result = reservoir_sync.normalize_rows(rows, 2026)

    assert result.observations[0].timestamp.day == 11
