"""HTTP trigger server.

Request threads hand work to one background asyncio loop that owns the
pipeline runner and its browser session, so every run uses the same
session under the session manager's lock.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
import threading
from typing import Any
from urllib.parse import urlparse

from core.errors import ReservoirSyncError
from core.logging_config import get_logger, recent_log_events
from ingest.pipeline import SyncPipelineRunner

_LOGGER = get_logger(__name__)
_HEALTH_TIMEOUT_SECONDS = 5.0
_SHUTDOWN_TIMEOUT_SECONDS = 30.0
_SYNC_PATHS = frozenset({"/sync", "/unazuki"})


class SyncServer:
    """Threaded HTTP server bound to a background event loop."""

    def __init__(
        self,
        runner: SyncPipelineRunner,
        host: str = "0.0.0.0",
        port: int = 3000,
    ) -> None:
        self._runner = runner
        self._loop = asyncio.new_event_loop()
        self._loop_thread = threading.Thread(
            target=self._loop.run_forever, name="sync-event-loop", daemon=True
        )
        self._httpd = ThreadingHTTPServer((host, port), _build_handler(self))

    @property
    def port(self) -> int:
        return int(self._httpd.server_address[1])

    def start(self, warm_up: bool = True) -> None:
        """Start the event loop and optionally launch the browser early."""
        self._loop_thread.start()
        _LOGGER.info("server_started", port=self.port)
        if warm_up:
            asyncio.run_coroutine_threadsafe(self._runner.session_manager.warm_up(), self._loop)

    def serve_forever(self) -> None:
        self._httpd.serve_forever()

    def shutdown(self) -> None:
        """Stop serving, dispose the browser, and stop the loop."""
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._loop_thread.is_alive():
            closing = asyncio.run_coroutine_threadsafe(self._runner.close(), self._loop)
            closing.result(timeout=_SHUTDOWN_TIMEOUT_SECONDS)
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._loop_thread.join(timeout=_SHUTDOWN_TIMEOUT_SECONDS)
        _LOGGER.info("server_stopped")

    def trigger_sync(self) -> tuple[int, dict[str, Any]]:
        """Run the pipeline once and build the HTTP response payload."""
        future = asyncio.run_coroutine_threadsafe(self._runner.run(), self._loop)
        try:
            report = future.result()
        except ReservoirSyncError as error:
            return 500, {"success": False, "phase": error.phase, "message": str(error)}
        except Exception as error:
            _LOGGER.error("sync_request_failed", error=repr(error))
            return 500, {"success": False, "phase": "internal", "message": str(error)}
        return 200, report.to_payload()

    def health(self) -> dict[str, Any]:
        """Report whether a browser session is currently alive."""
        future = asyncio.run_coroutine_threadsafe(_session_alive(self._runner), self._loop)
        return {
            "status": "ok",
            "session_alive": future.result(timeout=_HEALTH_TIMEOUT_SECONDS),
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }


async def _session_alive(runner: SyncPipelineRunner) -> bool:
    return runner.session_manager.is_alive()


def _build_handler(server: SyncServer) -> type[BaseHTTPRequestHandler]:
    """Build a request handler class bound to one server."""

    class _SyncRequestHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            path = urlparse(self.path).path.rstrip("/") or "/"
            if path in _SYNC_PATHS:
                status, payload = server.trigger_sync()
                self._write_json(status, payload)
            elif path == "/health":
                self._write_json(200, server.health())
            elif path == "/logs":
                self._write_json(200, recent_log_events())
            else:
                self._write_json(404, {"success": False, "message": f"Unknown path {path}"})

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            _LOGGER.debug("http_request", line=format % args)

        def _write_json(self, status: int, payload: Any) -> None:
            body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

    return _SyncRequestHandler
