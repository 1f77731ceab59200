"""
Unit Tests for Retry Policy

Tests attempt bounds, retryable filtering and settings wiring.
"""

import pytest

from crisisguard.config.settings import EscalationSettings
from crisisguard.domain.exceptions import (
    BackendUnavailableError,
    BackendValidationError,
    ScorerError,
)
from crisisguard.services.safety.retry_policy import RetryPolicy, is_retryable_error

NO_WAIT = RetryPolicy(
    max_attempts=3,
    backoff_multiplier=0.0,
    backoff_min_seconds=0.0,
    backoff_max_seconds=0.0,
)


async def _run(policy: RetryPolicy, errors: list[Exception], on_retry=None) -> tuple[str, int]:
    attempts = 0
    async for attempt in policy.retrying(on_retry):
        with attempt:
            attempts += 1
            if errors:
                raise errors.pop(0)
            return "ok", attempts
    raise AssertionError("retry loop exited without a result")


class TestIsRetryable:
    """Tests for the retryable predicate."""

    def test_transient_errors(self) -> None:
        assert is_retryable_error(BackendUnavailableError()) is True
        assert is_retryable_error(ScorerError("slow", scorer="keyword", is_retryable=True)) is True

    def test_permanent_errors(self) -> None:
        assert is_retryable_error(BackendValidationError("bad")) is False
        assert is_retryable_error(ValueError("plain")) is False


class TestRetrying:
    """Tests for the tenacity controller."""

    @pytest.mark.asyncio
    async def test_retries_until_success(self) -> None:
        retries = []

        result, attempts = await _run(
            NO_WAIT,
            [BackendUnavailableError(), BackendUnavailableError()],
            on_retry=retries.append,
        )

        assert result == "ok"
        assert attempts == 3
        assert len(retries) == 2

    @pytest.mark.asyncio
    async def test_last_error_reraised(self) -> None:
        """Test exhausted attempts re-raise the original error."""
        errors = [BackendUnavailableError() for _ in range(3)]

        with pytest.raises(BackendUnavailableError):
            await _run(NO_WAIT, errors)

        assert errors == []

    @pytest.mark.asyncio
    async def test_permanent_error_not_retried(self) -> None:
        errors = [BackendValidationError("bad"), BackendUnavailableError()]

        with pytest.raises(BackendValidationError):
            await _run(NO_WAIT, errors)

        assert len(errors) == 1

    @pytest.mark.asyncio
    async def test_no_retry(self) -> None:
        errors = [BackendUnavailableError()]

        with pytest.raises(BackendUnavailableError):
            await _run(RetryPolicy.no_retry(), errors)


class TestFromSettings:
    """Tests for settings wiring."""

    def test_defaults(self) -> None:
        policy = RetryPolicy.from_settings(EscalationSettings())

        assert policy.max_attempts == 2
        assert policy.backoff_max_seconds == 1.0

    def test_backoff_window_validated(self) -> None:
        with pytest.raises(ValueError):
            EscalationSettings(backoff_min_seconds=5.0, backoff_max_seconds=1.0)
