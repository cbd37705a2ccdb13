"""Runtime configuration model for reservoir-sync.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.constants import (
    DEFAULT_PORT,
    DEFAULT_SHEET_NAME,
    DEFAULT_TIMEZONE,
    DEFAULT_VALUE_INPUT_OPTION,
    SUPPORTED_VALUE_INPUT_OPTIONS,
)
from core.errors import ConfigError


@dataclass(frozen=True)
class SyncConfig:
    """Validated runtime configuration.

    Attributes:
        sheet_id: Target spreadsheet id; only the store requires it.
        sheet_name: Worksheet tab receiving appended rows.
        client_email: Service-account email for inline credentials.
        private_key: Service-account private key for inline credentials.
        credentials_file: Optional service-account JSON file.
        value_input_option: Sheets value input option for appends.
        timezone: IANA zone name used for the run clock.
        profile_path: Optional YAML source profile path.
        headless: Whether the browser runs headless.
        port: HTTP listen port for the trigger surface.
    """

    sheet_id: str | None
    sheet_name: str
    client_email: str | None
    private_key: str | None
    credentials_file: Path | None
    value_input_option: str
    timezone: str
    profile_path: Path | None
    headless: bool
    port: int

    @classmethod
    def from_env(cls) -> "SyncConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ConfigError: If environment values are invalid.
        """
        credentials_file = os.getenv("GOOGLE_CREDENTIALS_FILE")
        profile_path = os.getenv("RESERVOIR_SYNC_PROFILE")
        return cls(
            sheet_id=os.getenv("GOOGLE_SHEET_ID") or None,
            sheet_name=os.getenv("RESERVOIR_SYNC_SHEET_NAME", DEFAULT_SHEET_NAME),
            client_email=os.getenv("GOOGLE_CLIENT_EMAIL") or None,
            private_key=_unescape_private_key(os.getenv("GOOGLE_PRIVATE_KEY")),
            credentials_file=Path(credentials_file).expanduser() if credentials_file else None,
            value_input_option=_parse_value_input_option(
                os.getenv("RESERVOIR_SYNC_VALUE_INPUT", DEFAULT_VALUE_INPUT_OPTION)
            ),
            timezone=_parse_timezone(os.getenv("RESERVOIR_SYNC_TIMEZONE", DEFAULT_TIMEZONE)),
            profile_path=Path(profile_path).expanduser() if profile_path else None,
            headless=_parse_bool(
                "RESERVOIR_SYNC_HEADLESS", os.getenv("RESERVOIR_SYNC_HEADLESS", "true")
            ),
            port=_parse_port(os.getenv("PORT", str(DEFAULT_PORT))),
        )

    def zone(self) -> ZoneInfo:
        """Return the configured run-clock zone."""
        return ZoneInfo(self.timezone)


def _unescape_private_key(raw_value: str | None) -> str | None:
    """Turn literal ``\\n`` sequences from env files into newlines."""
    if not raw_value:
        return None
    return raw_value.replace("\\n", "\n")


def _parse_value_input_option(raw_value: str) -> str:
    normalized_value = raw_value.strip().upper()
    if normalized_value not in SUPPORTED_VALUE_INPUT_OPTIONS:
        supported_rows = ", ".join(SUPPORTED_VALUE_INPUT_OPTIONS)
        raise ConfigError(
            f"Invalid RESERVOIR_SYNC_VALUE_INPUT value '{raw_value}'. "
            f"Use one of: {supported_rows}."
        )
    return normalized_value


def _parse_timezone(raw_value: str) -> str:
    try:
        ZoneInfo(raw_value)
    except (ZoneInfoNotFoundError, ValueError) as error:
        raise ConfigError(
            f"Invalid RESERVOIR_SYNC_TIMEZONE value '{raw_value}': {error}. "
            "Set an IANA zone name such as Asia/Tokyo."
        ) from error
    return raw_value


def _parse_bool(name: str, raw_value: str) -> bool:
    normalized_value = raw_value.strip().lower()
    if normalized_value in {"1", "true", "yes", "on"}:
        return True
    if normalized_value in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"Invalid {name} value '{raw_value}': expected true or false.")


def _parse_port(raw_value: str) -> int:
    """Parse the listen port environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed port number.

    Raises:
        ConfigError: If value is not an integer in the TCP port range.
    """
    try:
        port = int(raw_value)
    except ValueError as error:
        raise ConfigError(
            f"Invalid PORT value: expected integer, got '{raw_value}'. "
            "Set PORT to a numeric value."
        ) from error
    if not 0 <= port <= 65535:
        raise ConfigError(f"Invalid PORT value {port}: expected 0-65535.")
    return port
