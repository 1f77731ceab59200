"""Domain enumerations."""

from crisisguard.domain.enums.crisis_severity import (
    CrisisCategory,
    CrisisSeverity,
    InterventionUrgency,
    SignalSource,
)
from crisisguard.domain.enums.escalation import (
    EscalationStatus,
    EscalationTier,
    EscalationTrigger,
    ResponderType,
)

__all__ = [
    "CrisisCategory",
    "CrisisSeverity",
    "InterventionUrgency",
    "SignalSource",
    "EscalationStatus",
    "EscalationTier",
    "EscalationTrigger",
    "ResponderType",
]
