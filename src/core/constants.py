"""Core constants used across reservoir-sync modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_SOURCE_URL = (
    "https://www.river.go.jp/kawabou/pcfull/tm?kbn=2&itmkndCd=7&ofcCd=21556&obsCd=6"
)
DEFAULT_PAGE_MARKER = "宇奈月"
DEFAULT_READY_MARKER = "dataLoaded"
DEFAULT_TABLE_SELECTOR = "table"
DEFAULT_MIN_COLUMNS = 11
DEFAULT_NAVIGATION_TIMEOUT_SECONDS = 60.0
DEFAULT_READY_BUDGET_SECONDS = 10.0
DEFAULT_READY_POLL_INTERVAL_SECONDS = 0.1
DEFAULT_GRACE_SECONDS = 3.0
DEFAULT_RETRY_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 5.0
DEFAULT_SHEET_NAME = "FlowData"
DEFAULT_VALUE_INPUT_OPTION = "RAW"
SUPPORTED_VALUE_INPUT_OPTIONS = ("RAW", "USER_ENTERED")
DEFAULT_TIMEZONE = "Asia/Tokyo"
DEFAULT_PORT = 3000
DEFAULT_LOG_BUFFER_SIZE = 500
SHEETS_SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)
SHEETS_TOKEN_URI = "https://oauth2.googleapis.com/token"
TIMESTAMP_COLUMN_LETTER = "B"
TEXT_LITERAL_PREFIX = "'"
SERIAL_DATE_EPOCH = (1899, 12, 30)
SERIAL_DATE_MAX_DIGITS = 6
TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M"
ROLLOVER_TIME_PREFIX = "24:"
MEASUREMENT_FIELDS = (
    "water_level",
    "storage_volume",
    "utilization_rate",
    "effective_rate",
    "flood_rate",
    "inflow",
    "outflow",
    "rain_10min",
    "rain_accum",
)
BROWSER_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-zygote",
    "--single-process",
)
