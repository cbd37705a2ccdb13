"""Offline normalization command for saved raw grids.

Reads a JSON grid dump, either a list of rows or an object with
``rows`` and optional ``page_text``, and prints one JSON observation
per line.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from core.config import SyncConfig
from core.errors import ContentShapeError, ReservoirSyncError
from core.source_profile import resolve_source_profile
from core.timestamps import format_timestamp, run_clock
from core.types import Observation, RawGrid
from transforms.row_normalizer import ensure_content_shape, normalize_rows


def add_normalize_command(subparsers: Any) -> None:
    """Register normalize subcommand."""
    parser = subparsers.add_parser(
        "normalize",
        help="Normalize a saved raw grid JSON file and print observations",
    )
    parser.add_argument("grid_file", help="Path to raw grid JSON file")
    parser.add_argument("--year", type=int, help="Calendar year (defaults to the current year)")
    parser.add_argument(
        "--check-shape",
        action="store_true",
        help="Fail when the grid is empty or the page marker is missing",
    )


def run_normalize_command(config: SyncConfig, args: argparse.Namespace) -> int:
    """Normalize a grid file and print observations as JSON lines."""
    try:
        profile = resolve_source_profile(config.profile_path)
        grid = load_grid_file(args.grid_file)
        if args.check_shape:
            ensure_content_shape(grid, profile.page_marker)
    except ReservoirSyncError as error:
        print(f"normalize_error={error}")
        return 1
    year = args.year if args.year is not None else run_clock(config.zone()).year
    result = normalize_rows(grid.rows, year, profile.normalizer)
    for observation in result.observations:
        print(json.dumps(_observation_payload(observation), ensure_ascii=False))
    print(f"normalized={len(result.observations)} skipped={len(result.skipped)}")
    return 0


def load_grid_file(grid_file: str) -> RawGrid:
    """Load a raw grid dump.

    Args:
        grid_file: JSON file path.

    Returns:
        Parsed raw grid.

    Raises:
        ContentShapeError: If the file is missing or not a grid payload.
    """
    grid_path = Path(grid_file).expanduser()
    try:
        payload = json.loads(grid_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise ContentShapeError(f"Failed to read raw grid at {grid_path}: {error}.") from error
    page_text = ""
    if isinstance(payload, dict):
        page_text = str(payload.get("page_text", ""))
        payload = payload.get("rows")
    if not isinstance(payload, list) or not all(isinstance(row, list) for row in payload):
        raise ContentShapeError(
            f"Invalid raw grid at {grid_path}: expected a list of cell lists."
        )
    return RawGrid.from_rows(payload, page_text)


def _observation_payload(observation: Observation) -> dict[str, str]:
    return {
        "timestamp": format_timestamp(observation.timestamp),
        "water_level": observation.water_level,
        "storage_volume": observation.storage_volume,
        "utilization_rate": observation.utilization_rate,
        "effective_rate": observation.effective_rate,
        "flood_rate": observation.flood_rate,
        "inflow": observation.inflow,
        "outflow": observation.outflow,
        "rain_10min": observation.rain_10min,
        "rain_accum": observation.rain_accum,
    }
