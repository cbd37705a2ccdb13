"""Google Sheets store.

This module reads the observation-timestamp column of a worksheet and
appends new rows beneath existing data using a service account.
"""

from __future__ import annotations

from typing import Any, Sequence

from core.config import SyncConfig
from core.constants import (
    SHEETS_SCOPES,
    SHEETS_TOKEN_URI,
    TEXT_LITERAL_PREFIX,
    TIMESTAMP_COLUMN_LETTER,
)
from core.errors import ConfigError, DependencyError, SyncError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class GoogleSheetStore:
    """Append-only store backed by one worksheet tab."""

    def __init__(self, config: SyncConfig, service: Any | None = None) -> None:
        """Create a store for the configured sheet.

        Args:
            config: Runtime config with sheet id, tab, and credentials.
            service: Optional prebuilt Sheets API service.

        Raises:
            ConfigError: If no sheet id is configured.
        """
        if not config.sheet_id:
            raise ConfigError(
                "GOOGLE_SHEET_ID is not set. Set it to the target spreadsheet id."
            )
        self._config = config
        self._service = service

    def query_existing_timestamps(self) -> set[str]:
        """Read the formatted observation timestamps already in the sheet.

        Raises:
            SyncError: If the Sheets API call fails.
        """
        column_range = (
            f"{self._config.sheet_name}!{TIMESTAMP_COLUMN_LETTER}:{TIMESTAMP_COLUMN_LETTER}"
        )
        try:
            response = (
                self._values()
                .get(
                    spreadsheetId=self._config.sheet_id,
                    range=column_range,
                    valueRenderOption="FORMATTED_VALUE",
                )
                .execute()
            )
        except Exception as error:
            raise SyncError(
                f"Failed to read existing timestamps from {column_range}: {error}. "
                "Check sheet id, tab name, and service-account access."
            ) from error
        timestamps = {
            str(row[0]).strip() for row in response.get("values", []) if row and str(row[0]).strip()
        }
        _LOGGER.info("existing_timestamps_read", count=len(timestamps))
        return timestamps

    def append_rows(self, rows: Sequence[Sequence[str]]) -> None:
        """Append rows after the last non-empty row of the tab.

        Raises:
            SyncError: If the Sheets API call fails.
        """
        try:
            self._values().append(
                spreadsheetId=self._config.sheet_id,
                range=f"{self._config.sheet_name}!A1",
                valueInputOption=self._config.value_input_option,
                insertDataOption="INSERT_ROWS",
                body={"values": [self._encode_row(row) for row in rows]},
            ).execute()
        except Exception as error:
            raise SyncError(
                f"Failed to append {len(rows)} rows to {self._config.sheet_name}: {error}. "
                "No rows were written; rerun to retry the same batch."
            ) from error
        _LOGGER.info("rows_appended", count=len(rows), sheet_name=self._config.sheet_name)

    def _encode_row(self, row: Sequence[str]) -> list[str]:
        values = list(row)
        # USER_ENTERED parses dates; a leading quote keeps column B as literal text.
        if self._config.value_input_option == "USER_ENTERED" and len(values) > 1:
            values[1] = TEXT_LITERAL_PREFIX + values[1]
        return values

    def _values(self) -> Any:
        if self._service is None:
            self._service = build_sheets_service(self._config)
        return self._service.spreadsheets().values()


def build_sheets_service(config: SyncConfig) -> Any:
    """Create a Sheets v4 API service from service-account credentials.

    Args:
        config: Runtime config with a credentials file or inline key.

    Returns:
        Google API client service object.

    Raises:
        DependencyError: If the Google client libraries are missing.
        ConfigError: If credentials are missing or invalid.
    """
    try:
        from google.oauth2 import service_account
        from googleapiclient.discovery import build
    except ImportError as error:
        raise DependencyError(
            "Google Sheets support requires google-api-python-client and google-auth. "
            "Install both to sync observations."
        ) from error
    try:
        if config.credentials_file is not None:
            credentials = service_account.Credentials.from_service_account_file(
                str(config.credentials_file), scopes=list(SHEETS_SCOPES)
            )
        elif config.client_email and config.private_key:
            credentials = service_account.Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "client_email": config.client_email,
                    "private_key": config.private_key,
                    "token_uri": SHEETS_TOKEN_URI,
                },
                scopes=list(SHEETS_SCOPES),
            )
        else:
            raise ConfigError(
                "Google credentials not found. Set GOOGLE_CREDENTIALS_FILE, or "
                "GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY."
            )
    except (OSError, ValueError) as error:
        raise ConfigError(f"Invalid Google service-account credentials: {error}.") from error
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)
