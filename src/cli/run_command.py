"""One-shot sync command wiring for the reservoir-sync CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

from core.config import SyncConfig
from core.errors import ReservoirSyncError
from ingest.pipeline import run_sync_once


def add_run_command(subparsers: Any) -> None:
    """Register run subcommand."""
    subparsers.add_parser(
        "run",
        help="Render the source page once and append new observations",
    )


def run_run_command(config: SyncConfig, args: argparse.Namespace) -> int:
    """Execute one sync run and print its JSON report."""
    try:
        report = asyncio.run(run_sync_once(config))
    except ReservoirSyncError as error:
        payload = {"success": False, "phase": error.phase, "message": str(error)}
        print(json.dumps(payload, ensure_ascii=False))
        return 1
    print(json.dumps(report.to_payload(), ensure_ascii=False))
    return 0
