"""Unit tests for CLI command handling."""

from __future__ import annotations

from datetime import datetime
import json
from pathlib import Path

import pytest

from cli.main import main
from core.config import SyncConfig
from core.errors import AcquisitionError
from core.source_profile import SourceProfile
from core.types import SyncReport
from tests.fixture_paths import fixture_path


@pytest.fixture(autouse=True)
def _no_profile_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RESERVOIR_SYNC_PROFILE", raising=False)
    monkeypatch.delenv("RESERVOIR_SYNC_TIMEZONE", raising=False)
    monkeypatch.delenv("PORT", raising=False)


def test_cli_normalize_prints_observations(capsys: pytest.CaptureFixture[str]) -> None:
    """Normalize should print one JSON line per observation and a summary."""
    grid_file = str(fixture_path("raw/reservoir_grid.json"))

    exit_code = main(["normalize", grid_file, "--year", "2026", "--check-shape"])
    lines = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert lines[-1] == "normalized=5 skipped=2"
    first = json.loads(lines[0])
    rollover = json.loads(lines[2])
    assert first["timestamp"] == "2026/03/10 23:40" and first["water_level"] == "12.3"
    assert rollover["timestamp"] == "2026/03/11 00:00" and rollover["rain_accum"] == "0.5"


def test_cli_normalize_rejects_wrong_page(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Shape checking should fail for a page without the marker."""
    grid_file = tmp_path / "grid.json"
    grid_file.write_text(json.dumps({"page_text": "404", "rows": [["03/10"]]}), encoding="utf-8")

    exit_code = main(["normalize", str(grid_file), "--check-shape"])

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("normalize_error=")


def test_cli_normalize_rejects_invalid_grid_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A grid file that is not a list of rows should be reported."""
    grid_file = tmp_path / "grid.json"
    grid_file.write_text('{"rows": "03/10"}', encoding="utf-8")

    exit_code = main(["normalize", str(grid_file)])

    assert exit_code == 1
    assert "expected a list of cell lists" in capsys.readouterr().out


def test_cli_normalize_applies_profile_override(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """The global --profile option should change normalizer behavior."""
    grid_file = str(fixture_path("raw/reservoir_grid.json"))
    profile = str(fixture_path("profiles/valid_profile.yaml"))

    exit_code = main(["--profile", profile, "normalize", grid_file, "--year", "2026"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip().splitlines()[-1] == "normalized=0 skipped=7"


def test_cli_run_prints_success_payload(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Run should print the report payload and exit zero."""

    async def _fake_run(config: SyncConfig, profile: SourceProfile | None = None) -> SyncReport:
        return SyncReport(
            started_at=datetime(2026, 3, 10, 9, 25),
            fetched_at="2026-03-10T09:25:00+09:00",
            row_count=3,
            normalized_count=2,
            skipped_count=1,
            appended_count=2,
        )

    monkeypatch.setattr("cli.run_command.run_sync_once", _fake_run)

    exit_code = main(["run"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["success"] is True and payload["rows"] == 2


def test_cli_run_reports_failed_phase(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Run failures should name the phase and exit non-zero."""

    async def _fake_run(config: SyncConfig, profile: SourceProfile | None = None) -> SyncReport:
        raise AcquisitionError("browser did not start")

    monkeypatch.setattr("cli.run_command.run_sync_once", _fake_run)

    exit_code = main(["run"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload == {
        "success": False,
        "phase": "acquisition",
        "message": "browser did not start",
    }
