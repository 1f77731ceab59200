"""
Assessment Models

Fused risk assessment, intervention recommendations, monitoring plan
and the composite analysis result returned to callers.

SAFETY-CRITICAL: CrisisAnalysisResult is the only thing the chat
layer sees. It must always be complete, even when every analyzer
and the escalation backend failed.

ARCHITECTURE: All models here are frozen. The escalation outcome is
merged into an existing result with dataclasses.replace().
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional

from crisisguard.domain.enums.crisis_severity import (
    CrisisSeverity,
    InterventionUrgency,
)
from crisisguard.domain.models.escalation_models import EscalationOutcome


@dataclass(frozen=True)
class EmotionalProfile:
    """
    Dominant emotional tone of a message.

    Attributes:
        primary_emotion: despair, anger, fear, numbness or neutral
        intensity: Strength of emotional language (0.0-1.0)
        stability: Inverse of intensity (0.0-1.0)
        risk_alignment: How strongly the emotion aligns with crisis risk
    """

    primary_emotion: str = "neutral"
    intensity: float = 0.0
    stability: float = 1.0
    risk_alignment: float = 0.3

    def to_dict(self) -> dict:
        return {
            "primary_emotion": self.primary_emotion,
            "intensity": round(self.intensity, 3),
            "stability": round(self.stability, 3),
            "risk_alignment": round(self.risk_alignment, 3),
        }


@dataclass(frozen=True)
class TimelineAnalysis:
    """Temporal urgency language found in the message."""

    timeframe: str = "none"
    urgency_modifiers: tuple[str, ...] = ()

    @property
    def has_temporal_urgency(self) -> bool:
        return bool(self.urgency_modifiers)

    def to_dict(self) -> dict:
        return {
            "timeframe": self.timeframe,
            "urgency_modifiers": list(self.urgency_modifiers),
        }


@dataclass(frozen=True)
class RiskAssessment:
    """
    Fused numeric risk read.

    Built once per analysis by the RiskAggregator and read-only
    afterwards.

    Attributes:
        immediate_risk: Risk in the next hours (0-100)
        short_term_risk: Risk over the next days (0-100)
        long_term_risk: Risk over weeks (0-100)
        intervention_urgency: How soon a human should intervene
        confidence_score: Confidence in the fused read (0.0-1.0)
        risk_factors: Named risk factors found in the text
        protective_factors: Named protective factors found in the text
        emotional_profile: Dominant emotional tone
        has_temporal_urgency: Whether time-bound language is present
        timeline: Timeframe and urgency modifiers
        consensus_level: Agreement between analyzers (0.0-1.0)
    """

    immediate_risk: int = 0
    short_term_risk: int = 0
    long_term_risk: int = 0
    intervention_urgency: InterventionUrgency = InterventionUrgency.NONE
    confidence_score: float = 0.0
    risk_factors: frozenset[str] = frozenset()
    protective_factors: frozenset[str] = frozenset()
    emotional_profile: EmotionalProfile = field(default_factory=EmotionalProfile)
    has_temporal_urgency: bool = False
    timeline: TimelineAnalysis = field(default_factory=TimelineAnalysis)
    consensus_level: float = 1.0

    def to_dict(self) -> dict:
        return {
            "immediate_risk": self.immediate_risk,
            "short_term_risk": self.short_term_risk,
            "long_term_risk": self.long_term_risk,
            "intervention_urgency": self.intervention_urgency.value,
            "confidence_score": round(self.confidence_score, 3),
            "risk_factors": sorted(self.risk_factors),
            "protective_factors": sorted(self.protective_factors),
            "emotional_profile": self.emotional_profile.to_dict(),
            "has_temporal_urgency": self.has_temporal_urgency,
            "timeline": self.timeline.to_dict(),
            "consensus_level": round(self.consensus_level, 3),
        }


class RecommendationType(StrEnum):
    """Kind of intervention recommended to the caller."""

    IMMEDIATE = "immediate"
    URGENT = "urgent"
    SUPPORTIVE = "supportive"
    MONITORING = "monitoring"
    RESOURCES = "resources"


@dataclass(frozen=True)
class InterventionRecommendation:
    """
    One recommended intervention.

    Priority 1 is the most urgent. The resources recommendation is
    always present so the UI can prompt a manual escalation.
    """

    type: RecommendationType
    priority: int
    description: str
    action_items: tuple[str, ...] = ()
    timeframe: str = ""
    resources: tuple[str, ...] = ()
    cultural_considerations: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "priority": self.priority,
            "description": self.description,
            "action_items": list(self.action_items),
            "timeframe": self.timeframe,
            "resources": list(self.resources),
            "cultural_considerations": list(self.cultural_considerations),
        }


class MonitoringFrequency(StrEnum):
    """How often a case should be re-checked."""

    CONTINUOUS = "continuous"
    HOURLY = "hourly"
    EVERY_4_HOURS = "every-4-hours"
    DAILY = "daily"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class MonitoringPlan:
    frequency: MonitoringFrequency = MonitoringFrequency.WEEKLY
    duration: str = "3 days"
    key_indicators: tuple[str, ...] = ()
    escalation_triggers: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "frequency": self.frequency.value,
            "duration": self.duration,
            "key_indicators": list(self.key_indicators),
            "escalation_triggers": list(self.escalation_triggers),
        }


@dataclass(frozen=True)
class AnalysisMetadata:
    """
    Diagnostic details of one analysis call.

    flagged_concerns carries every degraded analyzer and failure
    note, so silence is never mistaken for a crash.
    """

    analysis_id: str
    language: str = "en"
    language_confidence: float = 0.0
    mixed_language: bool = False
    services_used: tuple[str, ...] = ()
    degraded_sources: tuple[str, ...] = ()
    flagged_concerns: tuple[str, ...] = ()
    processing_time_ms: float = 0.0
    cultural_rationale: str = ""

    def to_dict(self) -> dict:
        return {
            "analysis_id": self.analysis_id,
            "language": self.language,
            "language_confidence": round(self.language_confidence, 3),
            "mixed_language": self.mixed_language,
            "services_used": list(self.services_used),
            "degraded_sources": list(self.degraded_sources),
            "flagged_concerns": list(self.flagged_concerns),
            "processing_time_ms": round(self.processing_time_ms, 2),
            "cultural_rationale": self.cultural_rationale,
        }


@dataclass(frozen=True)
class CrisisAnalysisResult:
    """
    Composite output of one crisis analysis.

    SAFETY_NOTE: overall_severity == EMERGENCY always implies
    escalation_required. When escalation is required but no user
    identity was supplied, escalation_workflow is present with
    escalation_initiated=False and a recommended tier.

    Attributes:
        has_crisis_indicators: Whether any severity above NONE was found
        overall_severity: Fused severity bucket
        escalation_required: Whether a human responder is needed
        emergency_services_required: Whether severity is EMERGENCY
        risk_assessment: Fused numeric read
        intervention_recommendations: Sorted by priority
        escalation_workflow: Escalation outcome, None when not required
        monitoring_plan: Follow-up monitoring plan
        analysis_metadata: Diagnostics
    """

    has_crisis_indicators: bool
    overall_severity: CrisisSeverity
    escalation_required: bool
    emergency_services_required: bool
    risk_assessment: RiskAssessment
    intervention_recommendations: tuple[InterventionRecommendation, ...]
    analysis_metadata: AnalysisMetadata
    monitoring_plan: MonitoringPlan = field(default_factory=MonitoringPlan)
    escalation_workflow: Optional[EscalationOutcome] = None

    def to_dict(self) -> dict:
        return {
            "has_crisis_indicators": self.has_crisis_indicators,
            "overall_severity": self.overall_severity.label,
            "escalation_required": self.escalation_required,
            "emergency_services_required": self.emergency_services_required,
            "risk_assessment": self.risk_assessment.to_dict(),
            "intervention_recommendations": [
                r.to_dict() for r in self.intervention_recommendations
            ],
            "escalation_workflow": (
                self.escalation_workflow.to_dict()
                if self.escalation_workflow is not None
                else None
            ),
            "monitoring_plan": self.monitoring_plan.to_dict(),
            "analysis_metadata": self.analysis_metadata.to_dict(),
        }
