"""Unit tests for the Google Sheets store."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest

from core.config import SyncConfig
from core.errors import ConfigError, SyncError
from store.sheet_store import GoogleSheetStore, build_sheets_service


class _FakeRequest:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error

    def execute(self) -> Any:
        if self._error is not None:
            raise self._error
        return self._response


class _FakeValues:
    def __init__(self, column: list[list[str]], error: Exception | None = None) -> None:
        self.column = column
        self.error = error
        self.get_calls: list[dict[str, Any]] = []
        self.append_calls: list[dict[str, Any]] = []

    def get(self, **kwargs: Any) -> _FakeRequest:
        self.get_calls.append(kwargs)
        return _FakeRequest({"values": self.column}, self.error)

    def append(self, **kwargs: Any) -> _FakeRequest:
        self.append_calls.append(kwargs)
        return _FakeRequest({"updates": {}}, self.error)


class _FakeService:
    def __init__(self, values: _FakeValues) -> None:
        self._values = values

    def spreadsheets(self) -> "_FakeService":
        return self

    def values(self) -> _FakeValues:
        return self._values


def _config(**overrides: Any) -> SyncConfig:
    config = SyncConfig(
        sheet_id="sheet-123",
        sheet_name="FlowData",
        client_email=None,
        private_key=None,
        credentials_file=None,
        value_input_option="RAW",
        timezone="Asia/Tokyo",
        profile_path=None,
        headless=True,
        port=3000,
    )
    return replace(config, **overrides)


def test_store_requires_sheet_id() -> None:
    """A store without a target spreadsheet should be rejected."""
    with pytest.raises(ConfigError, match="GOOGLE_SHEET_ID"):
        GoogleSheetStore(_config(sheet_id=None), service=object())


def test_query_existing_timestamps_reads_timestamp_column() -> None:
    """Existing keys come from column B with blank cells dropped."""
    values = _FakeValues([["観測日時"], ["2026/03/10 09:00"], [], [" 2026/03/10 09:10 "], [""]])
    store = GoogleSheetStore(_config(), service=_FakeService(values))

    timestamps = store.query_existing_timestamps()

    assert timestamps == {"観測日時", "2026/03/10 09:00", "2026/03/10 09:10"}
    assert values.get_calls == [
        {
            "spreadsheetId": "sheet-123",
            "range": "FlowData!B:B",
            "valueRenderOption": "FORMATTED_VALUE",
        }
    ]


def test_append_rows_inserts_below_existing_data() -> None:
    """Appends should target the tab with the configured input option."""
    values = _FakeValues([])
    store = GoogleSheetStore(_config(), _FakeService(values))
    rows = [["2026-03-10T09:25:00+09:00", "2026/03/10 09:00", "12.3"]]

    store.append_rows(rows)

    assert values.append_calls == [
        {
            "spreadsheetId": "sheet-123",
            "range": "FlowData!A1",
            "valueInputOption": "RAW",
            "insertDataOption": "INSERT_ROWS",
            "body": {"values": rows},
        }
    ]


def test_user_entered_appends_keep_timestamp_column_textual() -> None:
    """Parsed input mode should quote the timestamp so read-back matches."""
    values = _FakeValues([])
    store = GoogleSheetStore(_config(value_input_option="USER_ENTERED"), _FakeService(values))

    store.append_rows([["2026-03-10T09:25:00+09:00", "2026/03/10 09:00", "12.3"]])

    (call,) = values.append_calls
    assert call["valueInputOption"] == "USER_ENTERED"
    assert call["body"] == {
        "values": [["2026-03-10T09:25:00+09:00", "'2026/03/10 09:00", "12.3"]]
    }


def test_api_failures_become_sync_errors() -> None:
    """Client errors on read or append should surface as sync errors."""
    values = _FakeValues([], error=RuntimeError("HttpError 403"))
    store = GoogleSheetStore(_config(), service=_FakeService(values))

    with pytest.raises(SyncError, match="HttpError 403"):
        store.query_existing_timestamps()
    with pytest.raises(SyncError, match="No rows were written"):
        store.append_rows([["a", "b"]])


def test_build_sheets_service_requires_credentials() -> None:
    """Without a credentials file or inline key, building the client fails."""
    pytest.importorskip("googleapiclient")

    with pytest.raises(ConfigError, match="credentials not found"):
        build_sheets_service(_config())


def test_build_sheets_service_rejects_missing_credentials_file(tmp_path: Path) -> None:
    """An unreadable credentials file is a configuration problem."""
    pytest.importorskip("googleapiclient")
    missing = tmp_path / "missing.json"

    with pytest.raises(ConfigError, match="Invalid Google service-account credentials"):
        build_sheets_service(_config(credentials_file=missing))
