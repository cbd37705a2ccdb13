"""Deduplicating synchronizer.

This module selects the observations an append-only store has not seen
yet and appends them in ascending timestamp order. Duplicates are
detected by formatted timestamp text, the same form written to the
store, so the store's key column can be compared directly.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, Protocol, Sequence

from core.logging_config import get_logger
from core.timestamps import format_timestamp
from core.types import Observation, SyncResult

_LOGGER = get_logger(__name__)


class Store(Protocol):
    """Append-only timestamped log the synchronizer writes to."""

    def query_existing_timestamps(self) -> set[str]:
        """Return formatted timestamps already present in the store."""

    def append_rows(self, rows: Sequence[Sequence[str]]) -> None:
        """Append rows after the last existing row."""


def select_append_batch(
    observations: Iterable[Observation],
    existing_timestamps: AbstractSet[str],
) -> list[Observation]:
    """Select new observations in ascending timestamp order.

    Args:
        observations: Normalized observations in any order.
        existing_timestamps: Formatted timestamps already stored.

    Returns:
        Observations whose timestamp text is unknown, one per timestamp,
        sorted ascending. Ties keep their input order.
    """
    batch: list[Observation] = []
    seen_timestamps: set[str] = set()
    for observation in sorted(observations, key=lambda item: item.timestamp):
        timestamp_text = format_timestamp(observation.timestamp)
        if timestamp_text in existing_timestamps or timestamp_text in seen_timestamps:
            continue
        seen_timestamps.add(timestamp_text)
        batch.append(observation)
    return batch


def build_sheet_rows(batch: Iterable[Observation], fetched_at: str) -> list[list[str]]:
    """Lay out store rows: fetch time, observation time, nine measurements."""
    return [
        [fetched_at, format_timestamp(observation.timestamp), *observation.measurements()]
        for observation in batch
    ]


def sync_observations(
    observations: Sequence[Observation],
    store: Store,
    fetched_at: str,
) -> SyncResult:
    """Append observations the store has not seen yet.

    Args:
        observations: Normalized observations from the current run.
        store: Target store; queried fresh on every call.
        fetched_at: Run-level fetch timestamp written with each row.

    Returns:
        The appended batch and the size of the existing key set.

    Raises:
        SyncError: If the store read or append fails.
    """
    existing_timestamps = store.query_existing_timestamps()
    batch = select_append_batch(observations, existing_timestamps)
    if batch:
        store.append_rows(build_sheet_rows(batch, fetched_at))
    _LOGGER.info(
        "sync_completed",
        candidate_count=len(observations),
        existing_count=len(existing_timestamps),
        appended_count=len(batch),
    )
    return SyncResult(batch=tuple(batch), existing_count=len(existing_timestamps))
