"""
Escalation Backend Interface

Contract for the external service that summons human responders,
plus an in-memory implementation and an HTTP client.

ARCHITECTURE: Backends raise EscalationBackendError subclasses with
`is_retryable` set. The EscalationOrchestrator is the only caller and
converts every failure into a BackendFailure value.

LEGAL_REVIEW_REQUIRED: A successful initiate() means a responder may
contact the user. It is never called without a user identity.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional
from uuid import uuid4

import httpx

from crisisguard.config.logging_config import get_logger
from crisisguard.config.settings import EscalationSettings
from crisisguard.domain.enums.escalation import EscalationStatus
from crisisguard.domain.exceptions import (
    BackendTimeoutError,
    BackendUnavailableError,
    BackendValidationError,
    EscalationBackendError,
)
from crisisguard.domain.models.escalation_models import BackendResult, EscalationRequest

logger = get_logger(__name__)


class EscalationBackend(ABC):
    """
    Abstract escalation backend.

    Implementations must:
    - Issue a fresh escalation id per request
    - Raise EscalationBackendError subclasses on failure
    - Never block past the caller's timeout without yielding
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Get backend name for logging/tracking."""
        pass

    @abstractmethod
    async def initiate(self, request: EscalationRequest) -> BackendResult:
        """
        Ask the backend to summon a responder.

        Args:
            request: Escalation request

        Returns:
            BackendResult with the backend-issued escalation id

        Raises:
            EscalationBackendError: On backend failure
        """
        pass

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemoryEscalationBackend(EscalationBackend):
    """
    Process-local backend.

    Used in development and tests. Failures can be queued with
    fail_next() and are raised in order, one per initiate() call.

    Usage:
        backend = InMemoryEscalationBackend(assign_responders=True)
        backend.fail_next(BackendUnavailableError())
        result = await backend.initiate(request)
    """

    def __init__(
        self,
        assign_responders: bool = False,
        delay_seconds: float = 0.0,
    ) -> None:
        self._assign_responders = assign_responders
        self._delay_seconds = delay_seconds
        self._failures: list[Exception] = []
        self.requests: list[EscalationRequest] = []
        self.issued: dict[str, EscalationRequest] = {}

    @property
    def backend_name(self) -> str:
        return "in-memory"

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def fail_next(self, *errors: Exception) -> None:
        """Queue errors to raise on the next initiate() calls."""
        self._failures.extend(errors)

    async def initiate(self, request: EscalationRequest) -> BackendResult:
        self.requests.append(request)
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        if self._failures:
            raise self._failures.pop(0)

        escalation_id = f"esc_{uuid4().hex[:16]}"
        self.issued[escalation_id] = request

        if self._assign_responders:
            return BackendResult(
                escalation_id=escalation_id,
                status=EscalationStatus.RESPONDER_ASSIGNED.value,
                responder_id=f"responder_{request.tier.value}",
            )
        return BackendResult(escalation_id=escalation_id)


class HttpEscalationBackend(EscalationBackend):
    """
    JSON-over-HTTP escalation service client.

    POSTs the request to {base_url}/escalations and expects
    {"escalation_id", "status", "responder_id"} back.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_seconds: float = 3.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._timeout_seconds = timeout_seconds
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 2.0)),
        )

    @property
    def backend_name(self) -> str:
        return "http"

    async def initiate(self, request: EscalationRequest) -> BackendResult:
        payload = {
            "request_id": request.request_id,
            "user_id": request.user_id,
            "tier": request.tier.value,
            "trigger": request.trigger.value,
            "severity": request.severity.label,
            "immediate_risk": request.immediate_risk,
            "context": request.context,
        }

        try:
            response = await self._client.post("/escalations", json=payload)
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(self._timeout_seconds) from e
        except httpx.TransportError as e:
            raise BackendUnavailableError(f"Escalation backend unreachable: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise BackendUnavailableError(
                f"Escalation backend returned {response.status_code}"
            )
        if response.status_code >= 400:
            raise BackendValidationError(
                f"Escalation backend rejected request ({response.status_code})"
            )

        try:
            body = response.json()
            escalation_id = str(body["escalation_id"])
        except (ValueError, KeyError, TypeError) as e:
            raise EscalationBackendError(
                "Escalation backend returned a malformed response",
                original_error=e,
            ) from e

        return BackendResult(
            escalation_id=escalation_id,
            status=body.get("status") or EscalationStatus.INITIATED.value,
            responder_id=body.get("responder_id"),
        )

    async def health_check(self) -> bool:
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError as e:
            logger.warning("Escalation backend health check failed", error=str(e))
            return False
        return response.status_code < 400

    async def close(self) -> None:
        await self._client.aclose()


def build_backend(settings: EscalationSettings) -> EscalationBackend:
    """Create the configured backend."""
    if settings.backend_url:
        logger.info("Using HTTP escalation backend", backend_url=settings.backend_url)
        return HttpEscalationBackend(
            base_url=settings.backend_url,
            api_key=settings.backend_api_key.get_secret_value(),
            timeout_seconds=settings.backend_timeout_seconds,
        )
    logger.warning("No escalation backend URL configured, using in-memory backend")
    return InMemoryEscalationBackend()
