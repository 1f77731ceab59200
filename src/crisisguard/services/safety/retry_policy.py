"""
Retry Policy

One explicit retry policy object shared by the escalation orchestrator
and the statistical analyzer.

ARCHITECTURE: Retries are driven by tenacity. Only errors that carry
is_retryable=True are retried; validation errors fail fast. The last
error is re-raised so callers can convert it to a value.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from crisisguard.config.logging_config import get_logger
from crisisguard.config.settings import EscalationSettings

logger = get_logger(__name__)


def is_retryable_error(error: BaseException) -> bool:
    """Whether an error is marked as transient."""
    return bool(getattr(error, "is_retryable", False))


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential-backoff retry policy.

    Attributes:
        max_attempts: Total attempts including the first one
        backoff_multiplier: Exponential backoff multiplier (seconds)
        backoff_min_seconds: Lower bound of a single wait
        backoff_max_seconds: Upper bound of a single wait
        retryable: Predicate deciding which errors are retried

    Usage:
        policy = RetryPolicy.from_settings(settings.escalation)
        async for attempt in policy.retrying():
            with attempt:
                result = await backend.initiate(request)
    """

    max_attempts: int = 2
    backoff_multiplier: float = 0.2
    backoff_min_seconds: float = 0.1
    backoff_max_seconds: float = 1.0
    retryable: Callable[[BaseException], bool] = is_retryable_error

    @classmethod
    def from_settings(cls, settings: EscalationSettings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.max_attempts,
            backoff_multiplier=settings.backoff_multiplier,
            backoff_min_seconds=settings.backoff_min_seconds,
            backoff_max_seconds=settings.backoff_max_seconds,
        )

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        return cls(max_attempts=1)

    def retrying(
        self,
        on_retry: Optional[Callable[[RetryCallState], None]] = None,
    ) -> AsyncRetrying:
        """
        Build a tenacity controller for one operation.

        Args:
            on_retry: Called before each backoff sleep

        Returns:
            AsyncRetrying that re-raises the last error
        """

        def _before_sleep(state: RetryCallState) -> None:
            error = state.outcome.exception() if state.outcome else None
            logger.warning(
                "Retrying after transient error",
                attempt=state.attempt_number,
                error_type=type(error).__name__ if error else None,
            )
            if on_retry is not None:
                on_retry(state)

        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.backoff_multiplier,
                min=self.backoff_min_seconds,
                max=self.backoff_max_seconds,
            ),
            retry=retry_if_exception(self.retryable),
            before_sleep=_before_sleep,
            reraise=True,
        )
