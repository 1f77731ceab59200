"""
Escalation Models

Records, requests and outcomes used by the escalation workflow.

LEGAL_REVIEW_REQUIRED: An EscalationRecord means a human responder
was asked to act on a user's behalf. Records are created only when
a user identity accompanies the request.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from crisisguard.domain.enums.crisis_severity import CrisisSeverity
from crisisguard.domain.enums.escalation import (
    EscalationStatus,
    EscalationTier,
    EscalationTrigger,
    ResponderType,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EscalationTimeline:
    """Timestamps of the lifecycle transitions of one escalation."""

    initiated: datetime = field(default_factory=utc_now)
    assigned: Optional[datetime] = None
    in_progress: Optional[datetime] = None
    resolved: Optional[datetime] = None

    def stamp(self, status: EscalationStatus, at: Optional[datetime] = None) -> None:
        """Record the time a status was entered."""
        moment = at or utc_now()
        if status == EscalationStatus.RESPONDER_ASSIGNED:
            self.assigned = moment
        elif status == EscalationStatus.IN_PROGRESS:
            self.in_progress = moment
        elif status.is_terminal:
            self.resolved = moment

    def to_dict(self) -> dict:
        def _iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "initiated": _iso(self.initiated),
            "assigned": _iso(self.assigned),
            "in_progress": _iso(self.in_progress),
            "resolved": _iso(self.resolved),
        }


@dataclass
class EscalationRecord:
    """
    A live escalation tracked by the orchestrator.

    ARCHITECTURE: Owned by the EscalationOrchestrator for its whole
    lifetime. Status changes go through update_status(), which
    enforces the lifecycle state machine.

    Attributes:
        escalation_id: Backend-issued identifier
        user_id: User the escalation is for
        tier: Responder tier summoned
        trigger: Reason for the escalation
        status: Current lifecycle state
        timeline: Transition timestamps
        responder_id: Assigned responder, if any
        responder_type: Type of responder for the tier
        outcome: Free-text outcome once terminal
        notes: Status-change notes, oldest first
        previous_escalation_id: Escalation this one re-entered from
    """

    escalation_id: str
    user_id: str
    tier: EscalationTier
    trigger: EscalationTrigger
    status: EscalationStatus = EscalationStatus.INITIATED
    timeline: EscalationTimeline = field(default_factory=EscalationTimeline)
    responder_id: Optional[str] = None
    responder_type: Optional[ResponderType] = None
    outcome: Optional[str] = None
    notes: list[str] = field(default_factory=list)
    previous_escalation_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return not self.status.is_terminal

    def to_dict(self) -> dict:
        return {
            "escalation_id": self.escalation_id,
            "user_id": self.user_id,
            "tier": self.tier.value,
            "trigger": self.trigger.value,
            "status": self.status.value,
            "timeline": self.timeline.to_dict(),
            "responder_id": self.responder_id,
            "responder_type": self.responder_type.value if self.responder_type else None,
            "outcome": self.outcome,
            "notes": list(self.notes),
            "previous_escalation_id": self.previous_escalation_id,
        }


@dataclass(frozen=True)
class EscalationRequest:
    """
    Payload sent to the escalation backend.

    request_id is fresh per request, so two concurrent escalations
    for the same user never collide.
    """

    user_id: str
    tier: EscalationTier
    trigger: EscalationTrigger
    severity: CrisisSeverity = CrisisSeverity.NONE
    immediate_risk: int = 0
    context: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    request_id: str = field(default_factory=lambda: str(uuid4()))


@dataclass(frozen=True)
class BackendResult:
    """Successful backend response."""

    escalation_id: str
    status: str = EscalationStatus.INITIATED.value
    responder_id: Optional[str] = None


@dataclass(frozen=True)
class BackendFailure:
    """
    Backend failure as a value.

    The orchestrator never lets backend exceptions propagate; they
    are converted to this type after the retry budget is spent.
    """

    reason: str
    error_type: str
    retryable: bool = False
    attempts: int = 1


@dataclass(frozen=True)
class EscalationOutcome:
    """
    Escalation result merged into CrisisAnalysisResult.

    Attributes:
        escalation_initiated: Whether a record exists at the backend
        recommended_tier: Tier recommended by policy (always set)
        trigger: Reason recorded for the escalation
        escalation_id: Backend id when initiated
        status: Record status when initiated
        responder_id: Assigned responder, if any
        escalation_error: Failure reason when not initiated
        attempts: Backend attempts made (0 when not authorized)
    """

    escalation_initiated: bool
    recommended_tier: EscalationTier
    trigger: EscalationTrigger
    escalation_id: Optional[str] = None
    status: Optional[EscalationStatus] = None
    responder_id: Optional[str] = None
    escalation_error: Optional[str] = None
    attempts: int = 0

    def to_dict(self) -> dict:
        return {
            "escalation_initiated": self.escalation_initiated,
            "recommended_tier": self.recommended_tier.value,
            "trigger": self.trigger.value,
            "escalation_id": self.escalation_id,
            "status": self.status.value if self.status else None,
            "responder_id": self.responder_id,
            "escalation_error": self.escalation_error,
            "attempts": self.attempts,
        }


@dataclass(frozen=True)
class TierResponseTargets:
    """Expected responder timings for a tier, in milliseconds."""

    acknowledgment_ms: int
    response_ms: int
    resolution_ms: int
    responder_type: ResponderType


@dataclass
class EscalationMetrics:
    """Running escalation counters kept per orchestrator instance."""

    total_escalations: int = 0
    successful_escalations: int = 0
    failed_escalations: int = 0
    escalations_by_tier: dict[str, int] = field(
        default_factory=lambda: {tier.value: 0 for tier in EscalationTier}
    )
    triggers: dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if self.total_escalations == 0:
            return 0.0
        return self.successful_escalations / self.total_escalations

    def record(
        self,
        tier: EscalationTier,
        trigger: EscalationTrigger,
        succeeded: bool,
    ) -> None:
        self.total_escalations += 1
        self.escalations_by_tier[tier.value] += 1
        self.triggers[trigger.value] = self.triggers.get(trigger.value, 0) + 1
        if succeeded:
            self.successful_escalations += 1
        else:
            self.failed_escalations += 1

    def to_dict(self) -> dict:
        common = sorted(self.triggers.items(), key=lambda item: (-item[1], item[0]))
        return {
            "total_escalations": self.total_escalations,
            "successful_escalations": self.successful_escalations,
            "failed_escalations": self.failed_escalations,
            "escalations_by_tier": dict(self.escalations_by_tier),
            "success_rate": round(self.success_rate, 3),
            "common_triggers": [name for name, _ in common],
        }
