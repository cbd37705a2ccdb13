"""Row normalization for merged-cell telemetry tables.

The upstream table paints the date cell only on the first row of each
day and leaves it blank on the rows that follow. This module scans rows
left to right, carrying the last seen date forward, and turns each row
into a timestamped observation. Per-row problems skip the row; only
page-level problems fail the run.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from core.constants import MEASUREMENT_FIELDS, ROLLOVER_TIME_PREFIX
from core.errors import ContentShapeError, RowParseError
from core.logging_config import get_logger
from core.types import (
    NormalizationResult,
    NormalizerOptions,
    Observation,
    RawGrid,
    RawRow,
    RowSkip,
)
from transforms.serial_date import is_serial_date, serial_to_month_day

_LOGGER = get_logger(__name__)
_DATE_CELL = 0
_TIME_CELL = 1
_FIRST_MEASUREMENT_CELL = 2


def ensure_content_shape(grid: RawGrid, page_marker: str) -> None:
    """Fail the run when rendered content is not the expected source.

    Args:
        grid: Raw grid read from the rendered page.
        page_marker: Text required on the page; empty disables the check.

    Raises:
        ContentShapeError: If the table is empty or the marker is absent.
    """
    if not grid.rows:
        raise ContentShapeError(
            "Rendered table is empty: no body rows were found. "
            "Check the table selector and that the page finished loading."
        )
    if page_marker and page_marker not in grid.page_text:
        raise ContentShapeError(
            f"Rendered page does not contain marker '{page_marker}'. "
            "The source URL may point at a different station or an error page."
        )


def normalize_rows(
    rows: Iterable[RawRow],
    year: int,
    options: NormalizerOptions | None = None,
) -> NormalizationResult:
    """Convert raw table rows into observations in source order.

    Args:
        rows: Raw rows as rendered, top to bottom.
        year: Calendar year applied to every ``month/day`` date.
        options: Table-layout variations.

    Returns:
        Observations plus a record of every skipped row.
    """
    resolved_options = options or NormalizerOptions()
    normalizer = _RowNormalizer(year, resolved_options)
    observations: list[Observation] = []
    skipped: list[RowSkip] = []
    for row_index, row in enumerate(rows):
        try:
            observations.append(normalizer.normalize(row))
        except RowParseError as error:
            _LOGGER.warning(
                "row_skipped", row_index=row_index, reason=error.reason, detail=str(error)
            )
            skipped.append(RowSkip(row_index=row_index, reason=error.reason))
    return NormalizationResult(observations=tuple(observations), skipped=tuple(skipped))


class _RowNormalizer:
    """Carry-forward date state for one normalization run."""

    def __init__(self, year: int, options: NormalizerOptions) -> None:
        self._year = year
        self._options = options
        self._current_date: str | None = None

    def normalize(self, row: RawRow) -> Observation:
        if len(row) < self._options.min_columns:
            raise RowParseError(
                "short_row", f"{len(row)} cells, expected at least {self._options.min_columns}"
            )
        record_date = self._resolve_date(row[_DATE_CELL].strip())
        timestamp = self._build_timestamp(record_date, row[_TIME_CELL].strip())
        last_cell = _FIRST_MEASUREMENT_CELL + len(MEASUREMENT_FIELDS)
        measurements = [cell.strip() for cell in row[_FIRST_MEASUREMENT_CELL:last_cell]]
        return Observation(timestamp, *measurements)

    def _resolve_date(self, date_cell: str) -> str:
        if date_cell:
            if self._options.serial_dates and is_serial_date(date_cell):
                self._current_date = serial_to_month_day(date_cell)
            else:
                self._current_date = date_cell
        if self._current_date is None:
            raise RowParseError("missing_date", "no date cell seen before this row")
        return self._current_date

    def _build_timestamp(self, record_date: str, raw_time: str) -> datetime:
        if not raw_time:
            raise RowParseError("missing_time")
        day_offset = 0
        if raw_time.startswith(ROLLOVER_TIME_PREFIX):
            raw_time = "00:" + raw_time[len(ROLLOVER_TIME_PREFIX):]
            day_offset = 1
        try:
            parsed = datetime.strptime(f"{self._year}/{record_date} {raw_time}", "%Y/%m/%d %H:%M")
        except ValueError as error:
            raise RowParseError(
                "invalid_timestamp", f"date '{record_date}' time '{raw_time}': {error}"
            ) from error
        return parsed + timedelta(days=day_offset)
