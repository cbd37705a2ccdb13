"""Unit tests for structured logging and the diagnostic buffer."""

from __future__ import annotations

from core.constants import DEFAULT_LOG_BUFFER_SIZE
from core.logging_config import clear_log_events, get_logger, recent_log_events


def test_logged_events_are_buffered_with_fields() -> None:
    """Each event should be retrievable with level and keyword fields."""
    clear_log_events()
    logger = get_logger("tests.logging")

    logger.warning("row_skipped", row_index=4, reason="short_row")

    event = recent_log_events()[-1]
    assert (event["event"], event["level"], event["row_index"], event["reason"]) == (
        "row_skipped",
        "warning",
        4,
        "short_row",
    )


def test_buffer_keeps_only_most_recent_events() -> None:
    """The buffer should drop the oldest events past its bound."""
    clear_log_events()
    logger = get_logger("tests.logging")

    for index in range(DEFAULT_LOG_BUFFER_SIZE + 10):
        logger.info("tick", index=index)

    events = recent_log_events()
    assert len(events) == DEFAULT_LOG_BUFFER_SIZE and events[0]["index"] == 10
