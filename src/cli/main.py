"""Reservoir-sync CLI entry points.
This module exposes commands to run one sync, serve the HTTP trigger,
and normalize a saved raw grid offline.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from cli.normalize_command import add_normalize_command, run_normalize_command
from cli.run_command import add_run_command, run_run_command
from cli.serve_command import add_serve_command, run_serve_command
from core.config import SyncConfig


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="reservoir-sync",
        description="Sync rendered reservoir telemetry into an append-only sheet",
    )
    parser.add_argument("--profile", help="Override RESERVOIR_SYNC_PROFILE for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_run_command(subparsers)
    add_serve_command(subparsers)
    add_normalize_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the reservoir-sync CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.profile)
    if args.command == "run":
        return run_run_command(config, args)
    if args.command == "serve":
        return run_serve_command(config, args)
    if args.command == "normalize":
        return run_normalize_command(config, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(profile_path: str | None) -> SyncConfig:
    """Build runtime config with optional profile override."""
    config = SyncConfig.from_env()
    if profile_path:
        config = replace(config, profile_path=Path(profile_path).expanduser())
    return config
