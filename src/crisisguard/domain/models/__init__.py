"""Domain models."""

from crisisguard.domain.models.assessment_models import (
    AnalysisMetadata,
    CrisisAnalysisResult,
    EmotionalProfile,
    InterventionRecommendation,
    MonitoringFrequency,
    MonitoringPlan,
    RecommendationType,
    RiskAssessment,
    TimelineAnalysis,
)
from crisisguard.domain.models.escalation_models import (
    BackendFailure,
    BackendResult,
    EscalationMetrics,
    EscalationOutcome,
    EscalationRecord,
    EscalationRequest,
    EscalationTimeline,
    TierResponseTargets,
)
from crisisguard.domain.models.signal_models import (
    CrisisSignal,
    KeywordMatch,
    RiskEstimate,
)

__all__ = [
    "AnalysisMetadata",
    "CrisisAnalysisResult",
    "EmotionalProfile",
    "InterventionRecommendation",
    "MonitoringFrequency",
    "MonitoringPlan",
    "RecommendationType",
    "RiskAssessment",
    "TimelineAnalysis",
    "BackendFailure",
    "BackendResult",
    "EscalationMetrics",
    "EscalationOutcome",
    "EscalationRecord",
    "EscalationRequest",
    "EscalationTimeline",
    "TierResponseTargets",
    "CrisisSignal",
    "KeywordMatch",
    "RiskEstimate",
]
