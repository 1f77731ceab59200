"""
CRISISGUARD Domain Layer

Core entities and value objects of the crisis pipeline: signals,
assessments, analysis results and escalation records. Independent of
infrastructure.
"""

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
from crisisguard.domain.models.assessment_models import (
    CrisisAnalysisResult,
    InterventionRecommendation,
    RiskAssessment,
)
from crisisguard.domain.models.escalation_models import (
    EscalationOutcome,
    EscalationRecord,
)
from crisisguard.domain.models.signal_models import CrisisSignal, KeywordMatch

__all__ = [
    # Enums
    "CrisisCategory",
    "CrisisSeverity",
    "InterventionUrgency",
    "SignalSource",
    "EscalationStatus",
    "EscalationTier",
    "EscalationTrigger",
    "ResponderType",
    # Signals
    "CrisisSignal",
    "KeywordMatch",
    # Assessment
    "CrisisAnalysisResult",
    "InterventionRecommendation",
    "RiskAssessment",
    # Escalation
    "EscalationOutcome",
    "EscalationRecord",
]
