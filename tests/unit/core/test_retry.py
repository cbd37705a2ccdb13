"""Unit tests for the fixed-delay retry policy."""

from __future__ import annotations

import asyncio

import pytest

from core.errors import ConfigError
from core.retry import RetryPolicy
from tests.fakes import SleepRecorder


class _Flaky:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure {self.calls}")
        return "ok"


def test_run_retries_with_fixed_delay_until_success() -> None:
    """Policy should wait the same delay between each failed attempt."""
    operation = _Flaky(failures=2)
    sleep = SleepRecorder()
    policy = RetryPolicy(max_attempts=3, delay_seconds=5.0)

    result = asyncio.run(policy.run(operation, sleep=sleep))

    assert (result, operation.calls, sleep.delays) == ("ok", 3, [5.0, 5.0])


def test_run_propagates_last_error_unchanged() -> None:
    """The final attempt's exception should reach the caller as-is."""
    operation = _Flaky(failures=5)
    sleep = SleepRecorder()
    policy = RetryPolicy(max_attempts=3, delay_seconds=0.5)

    with pytest.raises(RuntimeError, match="failure 3"):
        asyncio.run(policy.run(operation, sleep=sleep))

    assert operation.calls == 3 and sleep.delays == [0.5, 0.5]


def test_run_does_not_sleep_after_first_success() -> None:
    """A successful first attempt should not wait."""
    sleep = SleepRecorder()

    asyncio.run(RetryPolicy().run(_Flaky(failures=0), sleep=sleep))

    assert sleep.delays == []


def test_policy_rejects_non_positive_attempts() -> None:
    """At least one attempt is required."""
    with pytest.raises(ConfigError):
        RetryPolicy(max_attempts=0)
