"""
Escalation Workflow Orchestrator

Creates escalation records through the escalation backend and tracks
their lifecycle:

    initiated -> responder-assigned -> in-progress ->
    {resolved | escalated-further | failed}

SAFETY-CRITICAL: escalate() never raises. Backend failures, timeouts
and exhausted retries become an EscalationOutcome with
escalation_initiated=False and the failure reason, so the caller can
fall back to manual escalation.

ARCHITECTURE: Each request carries a fresh request id and no lock is
held across the network call. Once the backend call has started it
is shielded from cancellation; cancelling the caller only suppresses
reporting, it never rescinds the backend action.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

from crisisguard.config.logging_config import get_logger
from crisisguard.config.settings import EscalationSettings
from crisisguard.domain.enums.crisis_severity import CrisisSeverity
from crisisguard.domain.enums.escalation import (
    EscalationStatus,
    EscalationTier,
    EscalationTrigger,
    ResponderType,
)
from crisisguard.domain.exceptions import (
    BackendTimeoutError,
    EscalationBackendError,
    EscalationNotFoundError,
    InvalidTransitionError,
)
from crisisguard.domain.models.escalation_models import (
    BackendFailure,
    BackendResult,
    EscalationMetrics,
    EscalationOutcome,
    EscalationRecord,
    EscalationRequest,
    TierResponseTargets,
)
from crisisguard.infrastructure.metrics.prometheus_metrics import (
    track_backend_retry,
    track_escalation,
    track_status_change,
)
from crisisguard.infrastructure.monitoring.sentry_integration import capture_safety_event
from crisisguard.services.safety.emergency_resources import (
    EmergencyContact,
    EmergencyResourceResolver,
)
from crisisguard.services.safety.escalation_backend import EscalationBackend
from crisisguard.services.safety.escalation_policy import PolicyDecision
from crisisguard.services.safety.retry_policy import RetryPolicy

logger = get_logger(__name__)

TIER_TARGETS: dict[EscalationTier, TierResponseTargets] = {
    EscalationTier.PEER_SUPPORT: TierResponseTargets(
        acknowledgment_ms=5 * 60_000,
        response_ms=30 * 60_000,
        resolution_ms=2 * 3_600_000,
        responder_type=ResponderType.PEER_VOLUNTEER,
    ),
    EscalationTier.CRISIS_COUNSELOR: TierResponseTargets(
        acknowledgment_ms=3 * 60_000,
        response_ms=15 * 60_000,
        resolution_ms=3_600_000,
        responder_type=ResponderType.CRISIS_COUNSELOR,
    ),
    EscalationTier.EMERGENCY_TEAM: TierResponseTargets(
        acknowledgment_ms=60_000,
        response_ms=5 * 60_000,
        resolution_ms=30 * 60_000,
        responder_type=ResponderType.EMERGENCY_TEAM,
    ),
    EscalationTier.EMERGENCY_SERVICES: TierResponseTargets(
        acknowledgment_ms=30_000,
        response_ms=2 * 60_000,
        resolution_ms=15 * 60_000,
        responder_type=ResponderType.MEDICAL_PROFESSIONAL,
    ),
}

BackendOutcome = Union[BackendResult, BackendFailure]

# Statuses a freshly created escalation may report
OPEN_STATUSES = frozenset(
    {
        EscalationStatus.INITIATED,
        EscalationStatus.RESPONDER_ASSIGNED,
        EscalationStatus.IN_PROGRESS,
    }
)


@dataclass(frozen=True)
class StatusChange:
    """
    Result of update_status().

    follow_up is set when the record moved to escalated-further and a
    new escalation was issued one tier higher.
    """

    record: EscalationRecord
    follow_up: Optional[EscalationOutcome] = None


class EscalationOrchestrator:
    """
    Escalation state machine over an external backend.

    Usage:
        orchestrator = EscalationOrchestrator(backend, settings=settings.escalation)
        outcome = await orchestrator.escalate(decision, user_id="u1")
        change = await orchestrator.update_status(
            outcome.escalation_id, EscalationStatus.IN_PROGRESS
        )
    """

    def __init__(
        self,
        backend: EscalationBackend,
        resolver: Optional[EmergencyResourceResolver] = None,
        settings: Optional[EscalationSettings] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            backend: Escalation backend
            resolver: Crisis resource store for emergency contacts
            settings: Timeout and retry configuration
            retry_policy: Overrides the policy derived from settings
        """
        self._settings = settings or EscalationSettings()
        self._backend = backend
        self._resolver = resolver or EmergencyResourceResolver()
        self._retry_policy = retry_policy or RetryPolicy.from_settings(self._settings)
        self._records: dict[str, EscalationRecord] = {}
        self._metrics = EscalationMetrics()
        self._detached: set[asyncio.Task] = set()

    @property
    def backend(self) -> EscalationBackend:
        return self._backend

    async def escalate(
        self,
        decision: PolicyDecision,
        user_id: Optional[str],
        context: Optional[dict[str, Any]] = None,
        severity: CrisisSeverity = CrisisSeverity.NONE,
        immediate_risk: int = 0,
    ) -> EscalationOutcome:
        """
        Create an escalation for an authorized policy decision.

        Args:
            decision: Policy decision (must be authorized)
            user_id: User the escalation is for
            context: Non-identifying context forwarded to the backend
            severity: Fused severity
            immediate_risk: Fused immediate risk

        Returns:
            EscalationOutcome; never raises for backend failures
        """
        if not decision.authorized or not user_id:
            logger.info(
                "Escalation not authorized",
                recommended_tier=decision.recommended_tier.value,
                has_identity=bool(user_id),
            )
            return EscalationOutcome(
                escalation_initiated=False,
                recommended_tier=decision.recommended_tier,
                trigger=decision.trigger,
            )

        return await self._initiate(
            user_id=user_id,
            tier=decision.recommended_tier,
            trigger=decision.trigger,
            context=context or {},
            severity=severity,
            immediate_risk=immediate_risk,
        )

    async def _initiate(
        self,
        user_id: str,
        tier: EscalationTier,
        trigger: EscalationTrigger,
        context: dict[str, Any],
        severity: CrisisSeverity = CrisisSeverity.NONE,
        immediate_risk: int = 0,
        previous_escalation_id: Optional[str] = None,
    ) -> EscalationOutcome:
        request = EscalationRequest(
            user_id=user_id,
            tier=tier,
            trigger=trigger,
            severity=severity,
            immediate_risk=immediate_risk,
            context=context,
        )
        start = time.perf_counter()

        # Step 1: Commit the backend call; it survives caller cancellation
        task = asyncio.ensure_future(self._call_backend(request))
        try:
            backend_outcome, attempts = await asyncio.shield(task)
        except asyncio.CancelledError:
            self._detached.add(task)
            task.add_done_callback(
                lambda t: self._finish_detached(t, request, previous_escalation_id, start)
            )
            logger.warning(
                "Escalation caller cancelled; backend call continues",
                request_id=request.request_id,
                tier=tier.value,
            )
            raise

        # Step 2: Record result
        return self._complete(
            request, backend_outcome, attempts, previous_escalation_id, start
        )

    async def _call_backend(self, request: EscalationRequest) -> tuple[BackendOutcome, int]:
        """Call the backend under the retry policy; failures become values."""
        attempts = 0
        try:
            async for attempt in self._retry_policy.retrying(
                on_retry=lambda _state: track_backend_retry()
            ):
                with attempt:
                    attempts += 1
                    return await self._initiate_once(request), attempts
        except EscalationBackendError as e:
            return BackendFailure(
                reason=str(e),
                error_type=type(e).__name__,
                retryable=e.is_retryable,
                attempts=attempts,
            ), attempts
        except Exception as e:
            logger.error(
                "Unexpected escalation backend error",
                backend=self._backend.backend_name,
                error_type=type(e).__name__,
            )
            return BackendFailure(
                reason=f"Unexpected backend error: {type(e).__name__}",
                error_type=type(e).__name__,
                attempts=attempts,
            ), attempts

        return BackendFailure(
            reason="Retry loop exited without a result",
            error_type="RetryError",
            attempts=attempts,
        ), attempts

    @staticmethod
    def _reject_closed(result: BackendResult, attempts: int) -> BackendOutcome:
        """A reply for a record that is already closed did not open one."""
        if EscalationStatus.from_backend(result.status) in OPEN_STATUSES:
            return result
        return BackendFailure(
            reason=f"Escalation backend returned unusable status: {result.status}",
            error_type="BackendStatusError",
            attempts=attempts,
        )

    async def _initiate_once(self, request: EscalationRequest) -> BackendResult:
        timeout = self._settings.backend_timeout_seconds
        try:
            return await asyncio.wait_for(self._backend.initiate(request), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise BackendTimeoutError(timeout) from e

    def _complete(
        self,
        request: EscalationRequest,
        backend_outcome: BackendOutcome,
        attempts: int,
        previous_escalation_id: Optional[str],
        start: float,
        reported: bool = True,
    ) -> EscalationOutcome:
        duration = time.perf_counter() - start

        if isinstance(backend_outcome, BackendResult):
            backend_outcome = self._reject_closed(backend_outcome, attempts)

        if isinstance(backend_outcome, BackendFailure):
            self._metrics.record(request.tier, request.trigger, succeeded=False)
            track_escalation(request.tier.value, "failed", duration)
            logger.error(
                "Escalation backend failure",
                request_id=request.request_id,
                tier=request.tier.value,
                trigger=request.trigger.value,
                error_type=backend_outcome.error_type,
                attempts=attempts,
            )
            capture_safety_event(
                "Escalation could not be initiated",
                level="error",
                extra={
                    "tier": request.tier.value,
                    "trigger": request.trigger.value,
                    "error_type": backend_outcome.error_type,
                    "attempts": attempts,
                },
            )
            return EscalationOutcome(
                escalation_initiated=False,
                recommended_tier=request.tier,
                trigger=request.trigger,
                escalation_error=backend_outcome.reason,
                attempts=attempts,
            )

        status = EscalationStatus.from_backend(backend_outcome.status)
        if backend_outcome.responder_id and status == EscalationStatus.INITIATED:
            status = EscalationStatus.RESPONDER_ASSIGNED

        record = EscalationRecord(
            escalation_id=backend_outcome.escalation_id,
            user_id=request.user_id,
            tier=request.tier,
            trigger=request.trigger,
            status=status,
            responder_id=backend_outcome.responder_id,
            responder_type=TIER_TARGETS[request.tier].responder_type,
            previous_escalation_id=previous_escalation_id,
        )
        if status != EscalationStatus.INITIATED:
            record.timeline.stamp(status)
        self._records[record.escalation_id] = record

        self._metrics.record(request.tier, request.trigger, succeeded=True)
        track_escalation(
            request.tier.value, "initiated" if reported else "cancelled", duration
        )
        logger.warning(
            "Escalation initiated",
            escalation_id=record.escalation_id,
            tier=request.tier.value,
            trigger=request.trigger.value,
            status=status.value,
            attempts=attempts,
            reported=reported,
        )

        return EscalationOutcome(
            escalation_initiated=True,
            recommended_tier=request.tier,
            trigger=request.trigger,
            escalation_id=record.escalation_id,
            status=status,
            responder_id=record.responder_id,
            attempts=attempts,
        )

    def _finish_detached(
        self,
        task: asyncio.Task,
        request: EscalationRequest,
        previous_escalation_id: Optional[str],
        start: float,
    ) -> None:
        self._detached.discard(task)
        if task.cancelled():
            return
        backend_outcome, attempts = task.result()
        self._complete(
            request, backend_outcome, attempts, previous_escalation_id, start,
            reported=False,
        )

    async def update_status(
        self,
        escalation_id: str,
        status: EscalationStatus,
        responder_id: Optional[str] = None,
        note: Optional[str] = None,
        outcome: Optional[str] = None,
    ) -> StatusChange:
        """
        Move an escalation to a new lifecycle state.

        Args:
            escalation_id: Escalation to update
            status: Target status
            responder_id: Assigned responder (for responder-assigned)
            note: Free-text note appended to the record
            outcome: Outcome text for terminal states

        Returns:
            StatusChange; escalated-further carries the follow-up outcome

        Raises:
            EscalationNotFoundError: Unknown escalation id
            InvalidTransitionError: Transition not allowed
        """
        record = self.get_escalation(escalation_id)
        if not record.status.can_transition_to(status):
            raise InvalidTransitionError(escalation_id, record.status.value, status.value)

        previous = record.status
        record.status = status
        record.timeline.stamp(status)
        if responder_id:
            record.responder_id = responder_id
        if note:
            record.notes.append(note)
        if outcome:
            record.outcome = outcome
        track_status_change(status.value)

        logger.info(
            "Escalation status updated",
            escalation_id=escalation_id,
            previous_status=previous.value,
            status=status.value,
        )

        follow_up = None
        if status == EscalationStatus.ESCALATED_FURTHER:
            follow_up = await self._initiate(
                user_id=record.user_id,
                tier=record.tier.next_tier(),
                trigger=record.trigger,
                context={"previous_escalation_id": record.escalation_id},
                previous_escalation_id=record.escalation_id,
            )
            if follow_up.escalation_id:
                record.notes.append(f"Re-escalated as {follow_up.escalation_id}")

        return StatusChange(record=record, follow_up=follow_up)

    def get_escalation(self, escalation_id: str) -> EscalationRecord:
        """
        Get an escalation record.

        Raises:
            EscalationNotFoundError: Unknown escalation id
        """
        record = self._records.get(escalation_id)
        if record is None:
            raise EscalationNotFoundError(escalation_id)
        return record

    def active_escalations(self, user_id: Optional[str] = None) -> list[EscalationRecord]:
        return [
            r for r in self._records.values()
            if r.is_active and (user_id is None or r.user_id == user_id)
        ]

    def get_metrics(self) -> dict:
        metrics = self._metrics.to_dict()
        metrics["active_escalations"] = len(self.active_escalations())
        return metrics

    def get_emergency_contacts(
        self,
        location: Optional[str] = None,
        language: str = "en",
    ) -> list[EmergencyContact]:
        return self._resolver.get_emergency_contacts(location, language)

    @staticmethod
    def tier_targets(tier: EscalationTier) -> TierResponseTargets:
        return TIER_TARGETS[tier]

    async def close(self) -> None:
        """Wait for detached backend calls, then close the backend."""
        if self._detached:
            await asyncio.gather(*self._detached, return_exceptions=True)
        await self._backend.close()
