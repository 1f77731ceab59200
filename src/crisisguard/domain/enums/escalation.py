"""
Escalation Enumerations

Tiers, triggers, lifecycle states and responder types used by the
escalation policy engine and workflow orchestrator.

LEGAL_REVIEW_REQUIRED: Tier definitions determine who is contacted
on a user's behalf.
"""

from enum import StrEnum
from typing import Optional

from crisisguard.domain.enums.crisis_severity import CrisisSeverity


class EscalationTier(StrEnum):
    """
    Class of responder to summon, lowest to highest.
    """

    PEER_SUPPORT = "peer-support"
    """Trained peer volunteer."""

    CRISIS_COUNSELOR = "crisis-counselor"
    """Professional crisis counselor."""

    EMERGENCY_TEAM = "emergency-team"
    """Mobile crisis / emergency response team."""

    EMERGENCY_SERVICES = "emergency-services"
    """
    Public emergency services.

    SAFETY_NOTE: Highest tier. Escalating further from here
    re-issues the request at the same tier.
    """

    @property
    def rank(self) -> int:
        return list(EscalationTier).index(self)

    def next_tier(self) -> "EscalationTier":
        """Get the next higher tier (saturates at EMERGENCY_SERVICES)."""
        tiers = list(EscalationTier)
        return tiers[min(self.rank + 1, len(tiers) - 1)]

    @classmethod
    def from_severity(cls, severity: CrisisSeverity) -> "EscalationTier":
        """
        Fixed severity to tier table.

        none/low/unknown -> peer support, moderate -> counselor,
        high -> emergency team, emergency -> emergency services.
        """
        mapping = {
            CrisisSeverity.UNKNOWN: cls.PEER_SUPPORT,
            CrisisSeverity.NONE: cls.PEER_SUPPORT,
            CrisisSeverity.LOW: cls.PEER_SUPPORT,
            CrisisSeverity.MODERATE: cls.CRISIS_COUNSELOR,
            CrisisSeverity.HIGH: cls.EMERGENCY_TEAM,
            CrisisSeverity.EMERGENCY: cls.EMERGENCY_SERVICES,
        }
        return mapping[severity]


class EscalationTrigger(StrEnum):
    """Reason recorded for an escalation."""

    IMMEDIATE_DANGER = "immediate-danger"
    SUICIDE_ATTEMPT = "suicide-attempt"
    VIOLENCE_THREAT = "violence-threat"
    MEDICAL_EMERGENCY = "medical-emergency"


class EscalationStatus(StrEnum):
    """
    Lifecycle state of an escalation record.

    Initiated -> ResponderAssigned -> InProgress ->
    {Resolved | EscalatedFurther | Failed}
    """

    INITIATED = "initiated"
    RESPONDER_ASSIGNED = "responder-assigned"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    ESCALATED_FURTHER = "escalated-further"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            EscalationStatus.RESOLVED,
            EscalationStatus.ESCALATED_FURTHER,
            EscalationStatus.FAILED,
        )

    def can_transition_to(self, target: "EscalationStatus") -> bool:
        """Check whether the state machine allows self -> target."""
        return target in _ALLOWED_TRANSITIONS.get(self, frozenset())

    @classmethod
    def from_backend(cls, value: Optional[str]) -> "EscalationStatus":
        """Parse a backend status string, defaulting to INITIATED."""
        try:
            return cls(value) if value else cls.INITIATED
        except ValueError:
            return cls.INITIATED


_TERMINAL_EXITS = frozenset({
    EscalationStatus.RESOLVED,
    EscalationStatus.ESCALATED_FURTHER,
    EscalationStatus.FAILED,
})

_ALLOWED_TRANSITIONS: dict[EscalationStatus, frozenset[EscalationStatus]] = {
    EscalationStatus.INITIATED: frozenset({
        EscalationStatus.RESPONDER_ASSIGNED,
        EscalationStatus.IN_PROGRESS,
    }) | _TERMINAL_EXITS,
    EscalationStatus.RESPONDER_ASSIGNED: frozenset({
        EscalationStatus.IN_PROGRESS,
    }) | _TERMINAL_EXITS,
    EscalationStatus.IN_PROGRESS: _TERMINAL_EXITS,
}


class ResponderType(StrEnum):
    """Type of responder attached to a tier."""

    PEER_VOLUNTEER = "peer-volunteer"
    CRISIS_COUNSELOR = "crisis-counselor"
    EMERGENCY_TEAM = "emergency-team"
    MEDICAL_PROFESSIONAL = "medical-professional"
