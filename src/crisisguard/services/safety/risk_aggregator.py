"""
Risk Aggregator

Fuses the independent lexical, statistical and cultural signals into
one overall severity and numeric RiskAssessment.

SAFETY-CRITICAL: Fusion is monotone. Raising any signal's confidence
or severity never lowers the overall severity or the immediate risk.
An emergency severity always floors immediate risk at 85, so the
numeric read and the escalation rule can never disagree.

ARCHITECTURE: Pure function of its inputs. A degraded signal never
contributes a severity; it only penalizes overall confidence.
"""

from dataclasses import dataclass
from statistics import pvariance
from typing import TYPE_CHECKING, Optional, Sequence

from crisisguard.config.logging_config import get_logger
from crisisguard.config.settings import AggregationSettings
from crisisguard.domain.enums.crisis_severity import (
    CrisisCategory,
    CrisisSeverity,
    InterventionUrgency,
    SignalSource,
)
from crisisguard.domain.models.assessment_models import (
    EmotionalProfile,
    RiskAssessment,
    TimelineAnalysis,
)
from crisisguard.domain.models.signal_models import (
    CrisisSignal,
    KeywordMatch,
    clamp,
)

if TYPE_CHECKING:
    from crisisguard.services.cultural.cultural_adjuster import CulturalAdjustment

logger = get_logger(__name__)

# Immediate-risk floor per fused severity
SEVERITY_RISK_FLOOR: dict[CrisisSeverity, float] = {
    CrisisSeverity.EMERGENCY: 85.0,
    CrisisSeverity.HIGH: 70.0,
}
ESCALATION_SEVERITIES = frozenset({CrisisSeverity.HIGH, CrisisSeverity.EMERGENCY})


@dataclass(frozen=True)
class AggregatedRisk:
    """
    Fused read handed to the escalation policy engine.

    Attributes:
        overall_severity: Max eligible severity
        severity_source: Signal that decided the severity, if any
        assessment: Numeric risk assessment
        escalation_required: immediate risk >= threshold or severity high/emergency
        matches: Lexical matches backing the read
        degraded_sources: Analyzers that failed or timed out
        flagged_concerns: Concerns and failure notes for the caller
        cultural_rationale: Explanation of cultural adjustments
    """

    overall_severity: CrisisSeverity
    severity_source: Optional[SignalSource]
    assessment: RiskAssessment
    escalation_required: bool
    matches: tuple[KeywordMatch, ...] = ()
    degraded_sources: tuple[SignalSource, ...] = ()
    flagged_concerns: tuple[str, ...] = ()
    cultural_rationale: str = ""

    @property
    def has_crisis_indicators(self) -> bool:
        return self.overall_severity > CrisisSeverity.NONE

    @property
    def emergency_services_required(self) -> bool:
        return self.overall_severity == CrisisSeverity.EMERGENCY

    @property
    def categories(self) -> frozenset[CrisisCategory]:
        return frozenset(m.category for m in self.matches)


class RiskAggregator:
    """
    Multi-signal risk fusion.

    Fusion rules:
    1. Severity: max severity among signals with confidence >= floor.
       Ties prefer higher confidence, then source priority
       (statistical > lexical > cultural).
    2. Numeric risk: each eligible signal's estimate weighted by its
       confidence; the fused value is the strongest weighted estimate,
       plus the bounded cultural change, floored by severity.
    3. Confidence: confidence-weighted mean of signal confidences,
       multiplied by the degraded penalty if any analyzer failed.

    Usage:
        aggregator = RiskAggregator(settings.aggregation)
        aggregated = aggregator.aggregate(signals, cultural_adjustment)
    """

    def __init__(self, settings: Optional[AggregationSettings] = None) -> None:
        self._settings = settings or AggregationSettings()

    def aggregate(
        self,
        signals: Sequence[CrisisSignal],
        cultural_adjustment: Optional["CulturalAdjustment"] = None,
    ) -> AggregatedRisk:
        """
        Fuse analyzer signals.

        Args:
            signals: One signal per analyzer (degraded ones included)
            cultural_adjustment: Cultural adjustment to apply, if any

        Returns:
            AggregatedRisk
        """
        floor = self._settings.severity_confidence_floor
        eligible = [s for s in signals if s.is_eligible(floor)]
        degraded = tuple(s.source for s in signals if s.degraded)

        # Step 1: Severity
        winner = self.select_severity_signal(eligible)
        severity = winner.severity if winner is not None else CrisisSeverity.NONE
        if severity < CrisisSeverity.NONE:
            severity = CrisisSeverity.NONE

        # Step 2: Numeric risk
        immediate = self._fuse(eligible, "immediate", cultural_adjustment)
        short_term = self._fuse(eligible, "short_term", cultural_adjustment)
        long_term = self._fuse(eligible, "long_term", cultural_adjustment)
        immediate = max(immediate, SEVERITY_RISK_FLOOR.get(severity, 0.0))

        # Step 3: Confidence
        confidence = self.fused_confidence(signals)
        if degraded:
            confidence *= self._settings.degraded_confidence_penalty

        lexical = _first(signals, SignalSource.LEXICAL)
        lexical_meta = lexical.metadata if lexical is not None else {}
        timeline = lexical_meta.get("timeline") or TimelineAnalysis()

        immediate_risk = int(round(immediate))
        assessment = RiskAssessment(
            immediate_risk=immediate_risk,
            short_term_risk=int(round(short_term)),
            long_term_risk=int(round(long_term)),
            intervention_urgency=InterventionUrgency.from_risk(immediate_risk, severity),
            confidence_score=clamp(confidence, 0.0, 1.0),
            risk_factors=frozenset(lexical_meta.get("risk_factors", ())),
            protective_factors=frozenset(lexical_meta.get("protective_factors", ())),
            emotional_profile=lexical_meta.get("emotional_profile") or EmotionalProfile(),
            has_temporal_urgency=timeline.has_temporal_urgency,
            timeline=timeline,
            consensus_level=self.consensus_level(eligible),
        )

        escalation_required = (
            immediate_risk >= self._settings.escalation_risk_threshold
            or severity in ESCALATION_SEVERITIES
        )

        concerns = list(lexical_meta.get("flagged_concerns", ()))
        for signal in signals:
            if signal.failure_reason:
                concerns.append(f"{signal.source.value}: {signal.failure_reason}")

        cultural_rationale = cultural_adjustment.rationale if cultural_adjustment else ""

        logger.info(
            "Risk aggregation completed",
            severity=severity.label,
            severity_source=winner.source.value if winner is not None else None,
            immediate_risk=immediate_risk,
            confidence=round(assessment.confidence_score, 3),
            degraded_sources=[s.value for s in degraded],
            escalation_required=escalation_required,
        )

        return AggregatedRisk(
            overall_severity=severity,
            severity_source=winner.source if winner is not None else None,
            assessment=assessment,
            escalation_required=escalation_required,
            matches=lexical.matches if lexical is not None else (),
            degraded_sources=degraded,
            flagged_concerns=tuple(concerns),
            cultural_rationale=cultural_rationale,
        )

    @staticmethod
    def select_severity_signal(eligible: Sequence[CrisisSignal]) -> Optional[CrisisSignal]:
        """Highest severity; ties by confidence, then source priority."""
        if not eligible:
            return None
        return max(eligible, key=lambda s: (s.severity, s.confidence, s.source.priority))

    @staticmethod
    def _fuse(
        eligible: Sequence[CrisisSignal],
        horizon: str,
        cultural_adjustment: Optional["CulturalAdjustment"],
    ) -> float:
        base = max(
            (getattr(s.risk, horizon) * s.confidence for s in eligible),
            default=0.0,
        )
        if cultural_adjustment is not None:
            base += cultural_adjustment.apply(base)
        return clamp(base)

    @staticmethod
    def fused_confidence(signals: Sequence[CrisisSignal]) -> float:
        """Confidence-weighted mean of the non-degraded confidences."""
        weights = [s.confidence for s in signals if not s.degraded and s.confidence > 0]
        total = sum(weights)
        if total <= 0:
            return 0.0
        return sum(w * w for w in weights) / total

    @staticmethod
    def consensus_level(eligible: Sequence[CrisisSignal]) -> float:
        """1.0 for full agreement, falling with severity variance."""
        levels = [max(0, int(s.severity)) / CrisisSeverity.EMERGENCY for s in eligible]
        if len(levels) < 2:
            return 1.0
        return max(0.0, 1.0 - pvariance(levels) * 4)


def _first(signals: Sequence[CrisisSignal], source: SignalSource) -> Optional[CrisisSignal]:
    for signal in signals:
        if signal.source == source:
            return signal
    return None
