"""Spreadsheet serial-date conversion.

Some table renders encode the date cell as a day count from the
classic spreadsheet origin instead of a ``month/day`` string.
"""

from __future__ import annotations

from datetime import date, timedelta

from core.constants import SERIAL_DATE_EPOCH, SERIAL_DATE_MAX_DIGITS

_EPOCH = date(*SERIAL_DATE_EPOCH)


def is_serial_date(cell_text: str) -> bool:
    """Return whether a date cell holds a small positive day serial.

    Args:
        cell_text: Stripped date cell text.

    Returns:
        True for bare digit strings without a ``/`` separator.
    """
    if not cell_text.isdigit() or not cell_text.isascii():
        return False
    return len(cell_text) <= SERIAL_DATE_MAX_DIGITS and int(cell_text) > 0


def serial_to_date(serial: int) -> date:
    """Convert a day serial to a calendar date using the 1899-12-30 origin."""
    return _EPOCH + timedelta(days=serial)


def serial_to_month_day(cell_text: str) -> str:
    """Convert serial date text to a zero-padded ``MM/DD`` string.

    Args:
        cell_text: Digit string accepted by :func:`is_serial_date`.

    Returns:
        Month and day of the converted date.
    """
    return serial_to_date(int(cell_text)).strftime("%m/%d")
