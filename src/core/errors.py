"""Reservoir-sync exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Run-fatal errors carry the pipeline phase that failed so trigger
surfaces can report acquisition, shape, and sync failures apart.
"""

from __future__ import annotations


class ReservoirSyncError(Exception):
    """Base exception for all reservoir-sync failures."""

    phase = "internal"


class ConfigError(ReservoirSyncError):
    """Raised for invalid runtime configuration."""

    phase = "config"


class DependencyError(ReservoirSyncError):
    """Raised when an optional runtime dependency is missing."""

    phase = "config"


class SourceProfileError(ReservoirSyncError):
    """Raised for invalid or unsupported source profile files."""

    phase = "config"


class AcquisitionError(ReservoirSyncError):
    """Raised when the rendering session or page navigation fails."""

    phase = "acquisition"


class ContentShapeError(ReservoirSyncError):
    """Raised when rendered content does not match the expected source."""

    phase = "shape"


class SyncError(ReservoirSyncError):
    """Raised when the store read or append fails."""

    phase = "sync"


class RowParseError(ReservoirSyncError):
    """Raised for a single table row that cannot be normalized.

    Always recovered by the normalizer; the row is skipped.
    """

    phase = "normalize"

    def __init__(self, reason: str, detail: str = "") -> None:
        super().__init__(f"{reason}: {detail}" if detail else reason)
        self.reason = reason
