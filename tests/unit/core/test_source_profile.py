"""Unit tests for YAML source profile loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.constants import DEFAULT_SOURCE_URL
from core.errors import SourceProfileError
from core.source_profile import load_source_profile, resolve_source_profile
from tests.fixture_paths import fixture_path


def test_resolve_without_path_returns_builtin_profile() -> None:
    """No profile path should yield the built-in reservoir page profile."""
    profile = resolve_source_profile(None)

    assert profile.url == DEFAULT_SOURCE_URL
    assert profile.normalizer.min_columns == 11 and profile.normalizer.serial_dates is True
    assert (profile.retry.max_attempts, profile.retry.delay_seconds) == (3, 5.0)


def test_load_source_profile_reads_all_fields() -> None:
    """Profile values should override defaults field by field."""
    profile = load_source_profile(str(fixture_path("profiles/valid_profile.yaml")))

    assert profile.url == "https://example.test/reservoir"
    assert profile.page_marker == "Example Dam" and profile.ready_marker == "refreshDone"
    assert profile.normalizer.min_columns == 12 and profile.normalizer.serial_dates is False
    assert (profile.ready_budget_seconds, profile.grace_seconds) == (4.0, 2.5)
    assert profile.ready_poll_interval_seconds == 0.1
    assert (profile.retry.max_attempts, profile.retry.delay_seconds) == (5, 1.0)


def test_load_source_profile_rejects_unknown_fields() -> None:
    """Unknown keys should fail instead of being ignored."""
    with pytest.raises(SourceProfileError, match="sort_order"):
        load_source_profile(str(fixture_path("profiles/unknown_field.yaml")))


def test_load_source_profile_rejects_missing_file(tmp_path: Path) -> None:
    """A missing file should raise a profile error."""
    with pytest.raises(SourceProfileError):
        load_source_profile(str(tmp_path / "absent.yaml"))


@pytest.mark.parametrize(
    "body",
    [
        "version: 2\n",
        "url: https://example.test\n",
        "version: 1\nmin_columns: 7\n",
        "version: 1\nserial_dates: sometimes\n",
        "version: 1\ngrace_seconds: -1\n",
        "version: 1\nretry:\n  max_attempts: 0\n",
        "- not\n- a mapping\n",
        "",
    ],
)
def test_load_source_profile_rejects_invalid_values(tmp_path: Path, body: str) -> None:
    """Schema violations should raise a profile error."""
    profile_file = tmp_path / "profile.yaml"
    profile_file.write_text(body, encoding="utf-8")

    with pytest.raises(SourceProfileError):
        load_source_profile(str(profile_file))


def test_load_source_profile_allows_empty_page_marker(tmp_path: Path) -> None:
    """An empty page marker disables the identity check."""
    profile_file = tmp_path / "profile.yaml"
    profile_file.write_text('version: 1\npage_marker: ""\n', encoding="utf-8")

    assert load_source_profile(str(profile_file)).page_marker == ""
