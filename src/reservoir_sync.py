"""Public SDK surface for reservoir-sync.

This module provides a stable import path for library users.
It re-exports the pipeline entry points and typed models.
"""

from __future__ import annotations

from core.config import SyncConfig
from core.errors import (
    AcquisitionError,
    ContentShapeError,
    ReservoirSyncError,
    SyncError,
)
from core.retry import RetryPolicy
from core.source_profile import SourceProfile, load_source_profile
from core.types import NormalizerOptions, Observation, RawGrid, SyncReport
from ingest.pipeline import SyncPipelineRunner, build_pipeline_runner, run_sync_once
from store.synchronizer import select_append_batch
from transforms.row_normalizer import ensure_content_shape, normalize_rows

__all__ = [
    "AcquisitionError",
    "ContentShapeError",
    "NormalizerOptions",
    "Observation",
    "RawGrid",
    "ReservoirSyncError",
    "RetryPolicy",
    "SourceProfile",
    "SyncConfig",
    "SyncError",
    "SyncPipelineRunner",
    "SyncReport",
    "build_pipeline_runner",
    "ensure_content_shape",
    "load_source_profile",
    "normalize_rows",
    "run_sync_once",
    "select_append_batch",
]
