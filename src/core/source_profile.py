"""Typed source profiles for rendered telemetry tables.

This module loads and validates YAML profiles describing one upstream
page: where it lives, how to confirm its identity, how long to wait for
it, and which table-layout variations the normalizer should apply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, cast

from core.constants import (
    DEFAULT_GRACE_SECONDS,
    DEFAULT_NAVIGATION_TIMEOUT_SECONDS,
    DEFAULT_PAGE_MARKER,
    DEFAULT_READY_BUDGET_SECONDS,
    DEFAULT_READY_MARKER,
    DEFAULT_READY_POLL_INTERVAL_SECONDS,
    DEFAULT_SOURCE_URL,
    DEFAULT_TABLE_SELECTOR,
)
from core.errors import ConfigError, DependencyError, SourceProfileError
from core.retry import RetryPolicy
from core.types import NormalizerOptions

_ROOT_KEYS = {
    "version",
    "url",
    "page_marker",
    "ready_marker",
    "table_selector",
    "min_columns",
    "serial_dates",
    "navigation_timeout_seconds",
    "ready_budget_seconds",
    "ready_poll_interval_seconds",
    "grace_seconds",
    "retry",
}
_RETRY_KEYS = {"max_attempts", "delay_seconds"}


@dataclass(frozen=True)
class SourceProfile:
    """Validated description of one upstream telemetry page.

    Attributes:
        url: Page rendered on every run.
        page_marker: Text that must appear on the page; empty disables the check.
        ready_marker: Console text signalling the page finished its data refresh.
        table_selector: CSS selector for candidate tables.
        normalizer: Table-layout variations for the row normalizer.
        navigation_timeout_seconds: Page navigation timeout.
        ready_budget_seconds: Total wait for the ready signal.
        ready_poll_interval_seconds: Poll interval while waiting.
        grace_seconds: Extra wait when the ready signal never arrives.
        retry: Session establishment retry policy.
    """

    url: str = DEFAULT_SOURCE_URL
    page_marker: str = DEFAULT_PAGE_MARKER
    ready_marker: str = DEFAULT_READY_MARKER
    table_selector: str = DEFAULT_TABLE_SELECTOR
    normalizer: NormalizerOptions = field(default_factory=NormalizerOptions)
    navigation_timeout_seconds: float = DEFAULT_NAVIGATION_TIMEOUT_SECONDS
    ready_budget_seconds: float = DEFAULT_READY_BUDGET_SECONDS
    ready_poll_interval_seconds: float = DEFAULT_READY_POLL_INTERVAL_SECONDS
    grace_seconds: float = DEFAULT_GRACE_SECONDS
    retry: RetryPolicy = field(default_factory=RetryPolicy)


def default_source_profile() -> SourceProfile:
    """Return the built-in profile for the reservoir telemetry page."""
    return SourceProfile()


def resolve_source_profile(profile_path: Path | str | None) -> SourceProfile:
    """Load a profile file when given, else return the built-in profile."""
    if profile_path is None:
        return default_source_profile()
    return load_source_profile(str(profile_path))


def load_source_profile(profile_path: str) -> SourceProfile:
    """Load and validate a YAML source profile from disk.

    Args:
        profile_path: File path to YAML profile.

    Returns:
        Fully validated source profile.

    Raises:
        DependencyError: If PyYAML is unavailable.
        SourceProfileError: If file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(profile_path)
    root_mapping = _expect_mapping(payload, "source profile root")
    _validate_keys(root_mapping, _ROOT_KEYS, "Source profile")
    _parse_version(root_mapping)
    defaults = SourceProfile()
    normalizer = _parse_normalizer(root_mapping, defaults.normalizer)
    return SourceProfile(
        url=_optional_string(root_mapping, "url", defaults.url),
        page_marker=_optional_string(
            root_mapping, "page_marker", defaults.page_marker, allow_empty=True
        ),
        ready_marker=_optional_string(root_mapping, "ready_marker", defaults.ready_marker),
        table_selector=_optional_string(root_mapping, "table_selector", defaults.table_selector),
        normalizer=normalizer,
        navigation_timeout_seconds=_optional_seconds(
            root_mapping, "navigation_timeout_seconds", defaults.navigation_timeout_seconds
        ),
        ready_budget_seconds=_optional_seconds(
            root_mapping, "ready_budget_seconds", defaults.ready_budget_seconds
        ),
        ready_poll_interval_seconds=_optional_seconds(
            root_mapping, "ready_poll_interval_seconds", defaults.ready_poll_interval_seconds
        ),
        grace_seconds=_optional_seconds(root_mapping, "grace_seconds", defaults.grace_seconds),
        retry=_parse_retry(root_mapping, defaults.retry),
    )


def _load_yaml_payload(profile_path: str) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise DependencyError(
            "YAML source profiles require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    profile_file = Path(profile_path).expanduser().resolve()
    if not profile_file.exists():
        raise SourceProfileError(
            f"Source profile does not exist at {profile_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(profile_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise SourceProfileError(
            f"Failed to read source profile at {profile_file}: {error}. "
            "Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise SourceProfileError(
            f"Failed to parse YAML source profile at {profile_file}: {error}. "
            "Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise SourceProfileError(
            f"Source profile at {profile_file} is empty. Define at least 'version: 1'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise SourceProfileError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise SourceProfileError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise SourceProfileError(
            "Source profile field 'version' must be an integer. Set version: 1."
        )
    if raw_version != 1:
        raise SourceProfileError(
            f"Unsupported source profile version {raw_version}. Use version: 1."
        )
    return raw_version


def _parse_normalizer(
    root_mapping: Mapping[str, object],
    default: NormalizerOptions,
) -> NormalizerOptions:
    min_columns = _optional_int(root_mapping, "min_columns", default.min_columns)
    serial_dates = _optional_bool(root_mapping, "serial_dates", default.serial_dates)
    try:
        return NormalizerOptions(min_columns=min_columns, serial_dates=serial_dates)
    except ConfigError as error:
        raise SourceProfileError(f"Invalid source profile: {error}") from error


def _parse_retry(root_mapping: Mapping[str, object], default: RetryPolicy) -> RetryPolicy:
    raw_retry = root_mapping.get("retry")
    if raw_retry is None:
        return default
    retry_mapping = _expect_mapping(raw_retry, "source profile retry")
    _validate_keys(retry_mapping, _RETRY_KEYS, "Source profile retry")
    max_attempts = _optional_int(retry_mapping, "max_attempts", default.max_attempts)
    delay_seconds = _optional_seconds(retry_mapping, "delay_seconds", default.delay_seconds)
    return RetryPolicy(max_attempts=max_attempts, delay_seconds=delay_seconds)


def _optional_string(
    mapping: Mapping[str, object],
    field_name: str,
    default: str,
    allow_empty: bool = False,
) -> str:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return default
    if not isinstance(raw_value, str):
        raise SourceProfileError(f"Source profile field '{field_name}' must be a string.")
    normalized_value = raw_value.strip()
    if not normalized_value and not allow_empty:
        raise SourceProfileError(f"Source profile field '{field_name}' must not be empty.")
    return normalized_value


def _optional_int(mapping: Mapping[str, object], field_name: str, default: int) -> int:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return default
    if not isinstance(raw_value, int) or isinstance(raw_value, bool) or raw_value < 1:
        raise SourceProfileError(
            f"Source profile field '{field_name}' must be a positive integer."
        )
    return raw_value


def _optional_bool(mapping: Mapping[str, object], field_name: str, default: bool) -> bool:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return default
    if not isinstance(raw_value, bool):
        raise SourceProfileError(f"Source profile field '{field_name}' must be true or false.")
    return raw_value


def _optional_seconds(mapping: Mapping[str, object], field_name: str, default: float) -> float:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return default
    if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)) or raw_value < 0:
        raise SourceProfileError(
            f"Source profile field '{field_name}' must be a non-negative number of seconds."
        )
    return float(raw_value)


def _validate_keys(mapping: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise SourceProfileError(f"{context} contains unknown fields: {', '.join(unknown_keys)}.")
