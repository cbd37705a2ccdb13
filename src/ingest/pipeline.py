"""Sync orchestration for one pipeline run.

This module coordinates session lease, page acquisition, shape checks,
row normalization, and the deduplicating append for a single run.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, tzinfo
from typing import Callable

from core.config import SyncConfig
from core.errors import ReservoirSyncError
from core.logging_config import get_logger
from core.source_profile import SourceProfile, resolve_source_profile
from core.timestamps import format_fetch_timestamp, run_clock
from core.types import NormalizationResult, SyncReport, SyncResult
from ingest.acquisition import AcquisitionGate
from ingest.renderer import PlaywrightRenderer, Renderer
from ingest.session_manager import SessionManager
from store.sheet_store import GoogleSheetStore
from store.synchronizer import Store, sync_observations
from transforms.row_normalizer import ensure_content_shape, normalize_rows

_LOGGER = get_logger(__name__)

Clock = Callable[[tzinfo], datetime]


class SyncPipelineRunner:
    """Runner holding the collaborators shared across runs."""

    def __init__(
        self,
        profile: SourceProfile,
        renderer: Renderer,
        session_manager: SessionManager,
        store: Store,
        zone: tzinfo,
        clock: Clock = run_clock,
        gate: AcquisitionGate | None = None,
    ) -> None:
        self._profile = profile
        self._session_manager = session_manager
        self._store = store
        self._zone = zone
        self._clock = clock
        self._gate = gate or AcquisitionGate(renderer, profile)

    @property
    def session_manager(self) -> SessionManager:
        return self._session_manager

    async def run(self) -> SyncReport:
        """Execute one run and return its report.

        Runs are serialized from session lease through store append.

        Raises:
            AcquisitionError: If the session or page render fails.
            ContentShapeError: If the page is not the expected source.
            SyncError: If the store read or append fails.
        """
        started_at = self._clock(self._zone)
        fetched_at = format_fetch_timestamp(started_at)
        try:
            # Store read and append stay inside the lease: one run at a time.
            async with self._session_manager.lease() as session:
                grid = await self._gate.acquire(session)
                ensure_content_shape(grid, self._profile.page_marker)
                normalized = normalize_rows(grid.rows, started_at.year, self._profile.normalizer)
                sync_result = await asyncio.to_thread(
                    sync_observations, normalized.observations, self._store, fetched_at
                )
        except ReservoirSyncError as error:
            _LOGGER.error("sync_run_failed", phase=error.phase, error=str(error))
            raise
        report = _build_report(started_at, fetched_at, len(grid.rows), normalized, sync_result)
        _LOGGER.info(
            "sync_run_completed",
            row_count=report.row_count,
            normalized_count=report.normalized_count,
            skipped_count=report.skipped_count,
            appended_count=report.appended_count,
        )
        return report

    async def close(self) -> None:
        """Dispose the shared rendering session."""
        await self._session_manager.dispose()


def build_pipeline_runner(
    config: SyncConfig,
    profile: SourceProfile | None = None,
) -> SyncPipelineRunner:
    """Wire the Playwright renderer and Google Sheets store from config.

    Args:
        config: Runtime configuration.
        profile: Optional source profile; defaults to the configured one.

    Returns:
        Runner ready for repeated runs.

    Raises:
        ConfigError: If the store configuration is incomplete.
        SourceProfileError: If the configured profile file is invalid.
    """
    resolved_profile = profile or resolve_source_profile(config.profile_path)
    renderer = PlaywrightRenderer(headless=config.headless)
    session_manager = SessionManager(renderer, resolved_profile.retry)
    return SyncPipelineRunner(
        profile=resolved_profile,
        renderer=renderer,
        session_manager=session_manager,
        store=GoogleSheetStore(config),
        zone=config.zone(),
    )


async def run_sync_once(config: SyncConfig, profile: SourceProfile | None = None) -> SyncReport:
    """Run the pipeline once and release the browser afterwards."""
    runner = build_pipeline_runner(config, profile)
    try:
        return await runner.run()
    finally:
        await runner.close()


def _build_report(
    started_at: datetime,
    fetched_at: str,
    row_count: int,
    normalized: NormalizationResult,
    sync_result: SyncResult,
) -> SyncReport:
    return SyncReport(
        started_at=started_at,
        fetched_at=fetched_at,
        row_count=row_count,
        normalized_count=len(normalized.observations),
        skipped_count=len(normalized.skipped),
        appended_count=sync_result.appended_count,
    )
