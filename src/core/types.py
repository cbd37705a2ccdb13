"""Shared typed models.

This module defines immutable data models passed between acquisition,
normalization, synchronization, and trigger layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from core.constants import DEFAULT_MIN_COLUMNS, MEASUREMENT_FIELDS
from core.errors import ConfigError

RawRow = Sequence[str]


@dataclass(frozen=True)
class RawGrid:
    """Unprocessed table cell text extracted from a rendered page.

    Attributes:
        rows: Body rows, each an ordered sequence of cell strings.
        page_text: Visible text of the rendered page, used for identity checks.
    """

    rows: tuple[tuple[str, ...], ...]
    page_text: str = ""

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[object]], page_text: str = "") -> "RawGrid":
        """Build a grid from loosely typed cell rows."""
        return cls(
            rows=tuple(tuple("" if cell is None else str(cell) for cell in row) for row in rows),
            page_text=page_text,
        )


@dataclass(frozen=True)
class Observation:
    """One normalized, timestamped reservoir reading.

    Measurement fields are kept as the rendered text, including
    placeholder tokens such as ``--``.
    """

    timestamp: datetime
    water_level: str
    storage_volume: str
    utilization_rate: str
    effective_rate: str
    flood_rate: str
    inflow: str
    outflow: str
    rain_10min: str
    rain_accum: str

    def measurements(self) -> tuple[str, ...]:
        """Return the nine measurement fields in canonical column order."""
        return tuple(getattr(self, field_name) for field_name in MEASUREMENT_FIELDS)


@dataclass(frozen=True)
class NormalizerOptions:
    """Points of variation between source table layouts.

    Attributes:
        min_columns: Rows with fewer cells are dropped.
        serial_dates: Whether bare integers in the date cell are day serials.
    """

    min_columns: int = DEFAULT_MIN_COLUMNS
    serial_dates: bool = True

    def __post_init__(self) -> None:
        if self.min_columns < DEFAULT_MIN_COLUMNS:
            raise ConfigError(
                f"Invalid min_columns {self.min_columns}: rows need at least "
                f"{DEFAULT_MIN_COLUMNS} cells for date, time, and measurements."
            )


@dataclass(frozen=True)
class RowSkip:
    """A source row dropped during normalization."""

    row_index: int
    reason: str


@dataclass(frozen=True)
class NormalizationResult:
    """Normalizer output in source row order."""

    observations: tuple[Observation, ...]
    skipped: tuple[RowSkip, ...]


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one deduplicating append.

    Attributes:
        batch: Observations appended, ascending by timestamp.
        existing_count: Number of timestamps already known to the store.
    """

    batch: tuple[Observation, ...]
    existing_count: int

    @property
    def appended_count(self) -> int:
        return len(self.batch)


@dataclass(frozen=True)
class SyncReport:
    """Summary of one full pipeline run.

    Attributes:
        started_at: Run-start wall-clock instant in the configured zone.
        fetched_at: Fetch timestamp written with every appended row.
        row_count: Raw table rows read from the page.
        normalized_count: Observations produced by the normalizer.
        skipped_count: Rows dropped by the normalizer.
        appended_count: Rows appended to the store.
    """

    started_at: datetime
    fetched_at: str
    row_count: int
    normalized_count: int
    skipped_count: int
    appended_count: int

    def to_payload(self) -> dict[str, object]:
        """Render the report as a JSON-compatible success payload."""
        return {
            "success": True,
            "rows": self.appended_count,
            "row_count": self.row_count,
            "normalized_count": self.normalized_count,
            "skipped_count": self.skipped_count,
            "fetched_at": self.fetched_at,
        }
