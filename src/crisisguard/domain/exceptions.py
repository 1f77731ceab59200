"""
Domain Exceptions

Error taxonomy for the crisis pipeline.

ARCHITECTURE: Only ConfigurationError is allowed to escape to the
caller, and only at startup. Analyzer and backend failures are
caught at component boundaries and surfaced as result fields.
"""

from typing import Optional


class CrisisGuardError(Exception):
    """Base exception for all crisis pipeline errors."""


class ConfigurationError(CrisisGuardError):
    """
    Invalid or missing configuration (pattern tables, thresholds).

    Fatal at startup only; never raised mid-request.
    """


class ScorerError(CrisisGuardError):
    """Statistical scorer failed to produce a score."""

    def __init__(
        self,
        message: str,
        scorer: str,
        is_retryable: bool = False,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.scorer = scorer
        self.is_retryable = is_retryable
        self.original_error = original_error


class EscalationBackendError(CrisisGuardError):
    """Base exception raised by escalation backend implementations."""

    def __init__(
        self,
        message: str,
        is_retryable: bool = False,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.is_retryable = is_retryable
        self.original_error = original_error


class BackendUnavailableError(EscalationBackendError):
    """Backend could not be reached (network, 5xx). Transient."""

    def __init__(self, message: str = "Escalation backend unavailable") -> None:
        super().__init__(message, is_retryable=True)


class BackendTimeoutError(EscalationBackendError):
    """Backend did not answer within the configured timeout. Transient."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            f"Escalation backend timed out after {timeout_seconds:.2f}s",
            is_retryable=True,
        )
        self.timeout_seconds = timeout_seconds


class BackendValidationError(EscalationBackendError):
    """Backend rejected the request. Never retried."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message, is_retryable=False)
        self.field_name = field_name


class EscalationNotFoundError(CrisisGuardError):
    """No escalation record with the given id."""

    def __init__(self, escalation_id: str) -> None:
        super().__init__(f"Escalation {escalation_id} not found")
        self.escalation_id = escalation_id


class InvalidTransitionError(CrisisGuardError):
    """Requested escalation status change is not allowed."""

    def __init__(self, escalation_id: str, current: str, requested: str) -> None:
        super().__init__(
            f"Escalation {escalation_id} cannot move from {current} to {requested}"
        )
        self.escalation_id = escalation_id
        self.current = current
        self.requested = requested
