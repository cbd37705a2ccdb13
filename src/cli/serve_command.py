"""HTTP trigger command wiring for the reservoir-sync CLI."""

from __future__ import annotations

import argparse
from typing import Any

from core.config import SyncConfig
from ingest.pipeline import build_pipeline_runner
from serve.http_server import SyncServer


def add_serve_command(subparsers: Any) -> None:
    """Register serve subcommand."""
    parser = subparsers.add_parser(
        "serve",
        help="Serve /sync, /health, and /logs endpoints",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Listen address")
    parser.add_argument("--port", type=int, help="Listen port (defaults to PORT)")
    parser.add_argument(
        "--no-warm-up",
        action="store_true",
        help="Do not launch the browser until the first sync request",
    )


def run_serve_command(config: SyncConfig, args: argparse.Namespace) -> int:
    """Serve until interrupted."""
    runner = build_pipeline_runner(config)
    port = args.port if args.port is not None else config.port
    server = SyncServer(runner, host=args.host, port=port)
    server.start(warm_up=not args.no_warm_up)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()
    return 0
