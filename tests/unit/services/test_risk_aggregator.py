"""
Unit Tests for Risk Aggregator

Tests severity selection, numeric fusion, degraded handling and
monotonicity of the fused read.
"""

import pytest

from crisisguard.config.settings import AggregationSettings
from crisisguard.domain.enums.crisis_severity import (
    CrisisSeverity,
    InterventionUrgency,
    SignalSource,
)
from crisisguard.domain.models.signal_models import CrisisSignal, RiskEstimate
from crisisguard.services.cultural.cultural_adjuster import CulturalAdjustment
from crisisguard.services.safety.risk_aggregator import RiskAggregator


def _signal(
    source: SignalSource,
    severity: CrisisSeverity,
    confidence: float,
    immediate: float = 0.0,
) -> CrisisSignal:
    return CrisisSignal(
        source=source,
        severity=severity,
        confidence=confidence,
        risk=RiskEstimate(immediate=immediate, short_term=immediate, long_term=immediate),
    )


class TestSeveritySelection:
    """Tests for fused severity."""

    @pytest.fixture
    def aggregator(self) -> RiskAggregator:
        return RiskAggregator()

    def test_no_signals(self, aggregator: RiskAggregator) -> None:
        result = aggregator.aggregate([])

        assert result.overall_severity == CrisisSeverity.NONE
        assert result.severity_source is None
        assert result.assessment.immediate_risk == 0
        assert result.assessment.confidence_score == 0.0
        assert result.escalation_required is False

    def test_highest_severity_wins(self, aggregator: RiskAggregator) -> None:
        result = aggregator.aggregate([
            _signal(SignalSource.LEXICAL, CrisisSeverity.MODERATE, 0.9),
            _signal(SignalSource.STATISTICAL, CrisisSeverity.HIGH, 0.6),
        ])

        assert result.overall_severity == CrisisSeverity.HIGH
        assert result.severity_source == SignalSource.STATISTICAL

    def test_low_confidence_signal_ignored(self, aggregator: RiskAggregator) -> None:
        """Test signals under the confidence floor never set severity."""
        result = aggregator.aggregate([
            _signal(SignalSource.LEXICAL, CrisisSeverity.EMERGENCY, 0.4, immediate=100),
            _signal(SignalSource.STATISTICAL, CrisisSeverity.LOW, 0.6, immediate=10),
        ])

        assert result.overall_severity == CrisisSeverity.LOW
        assert result.assessment.immediate_risk == 6

    def test_tie_prefers_confidence(self, aggregator: RiskAggregator) -> None:
        result = aggregator.aggregate([
            _signal(SignalSource.STATISTICAL, CrisisSeverity.HIGH, 0.6),
            _signal(SignalSource.LEXICAL, CrisisSeverity.HIGH, 0.9),
        ])

        assert result.severity_source == SignalSource.LEXICAL

    def test_tie_then_prefers_statistical(self, aggregator: RiskAggregator) -> None:
        result = aggregator.aggregate([
            _signal(SignalSource.LEXICAL, CrisisSeverity.HIGH, 0.8),
            _signal(SignalSource.STATISTICAL, CrisisSeverity.HIGH, 0.8),
            _signal(SignalSource.CULTURAL, CrisisSeverity.HIGH, 0.8),
        ])

        assert result.severity_source == SignalSource.STATISTICAL


class TestNumericFusion:
    """Tests for numeric risk fusion and floors."""

    @pytest.fixture
    def aggregator(self) -> RiskAggregator:
        return RiskAggregator()

    def test_emergency_floor(self, aggregator: RiskAggregator) -> None:
        """Test emergency severity always implies escalation."""
        result = aggregator.aggregate([
            _signal(SignalSource.LEXICAL, CrisisSeverity.EMERGENCY, 0.75, immediate=0),
        ])

        assert result.assessment.immediate_risk == 85
        assert result.escalation_required is True
        assert result.emergency_services_required is True
        assert result.assessment.intervention_urgency == InterventionUrgency.IMMEDIATE

    def test_high_floor(self, aggregator: RiskAggregator) -> None:
        result = aggregator.aggregate([
            _signal(SignalSource.STATISTICAL, CrisisSeverity.HIGH, 0.8, immediate=20),
        ])

        assert result.assessment.immediate_risk == 70
        assert result.escalation_required is True

    def test_strongest_weighted_estimate(self, aggregator: RiskAggregator) -> None:
        result = aggregator.aggregate([
            _signal(SignalSource.LEXICAL, CrisisSeverity.LOW, 0.5, immediate=60),
            _signal(SignalSource.STATISTICAL, CrisisSeverity.LOW, 0.9, immediate=40),
        ])

        assert result.assessment.immediate_risk == 36

    def test_cultural_adjustment_applied(self, aggregator: RiskAggregator) -> None:
        """Test the cultural change can push a read over the escalation threshold."""
        adjustment = CulturalAdjustment(region="Hispanic/Latino", delta=20.0, rationale="stigma")

        result = aggregator.aggregate(
            [_signal(SignalSource.STATISTICAL, CrisisSeverity.MODERATE, 1.0, immediate=50)],
            adjustment,
        )

        assert result.assessment.immediate_risk == 70
        assert result.escalation_required is True
        assert result.cultural_rationale == "stigma"

    def test_custom_escalation_threshold(self) -> None:
        aggregator = RiskAggregator(AggregationSettings(escalation_risk_threshold=40))

        result = aggregator.aggregate([
            _signal(SignalSource.STATISTICAL, CrisisSeverity.MODERATE, 1.0, immediate=45),
        ])

        assert result.escalation_required is True


class TestDegradedSignals:
    """Tests for degraded analyzer handling."""

    @pytest.fixture
    def aggregator(self) -> RiskAggregator:
        return RiskAggregator()

    def test_degraded_never_contributes_severity(self, aggregator: RiskAggregator) -> None:
        result = aggregator.aggregate([
            CrisisSignal.degraded_signal(SignalSource.STATISTICAL, "timed out"),
            _signal(SignalSource.LEXICAL, CrisisSeverity.LOW, 0.9),
        ])

        assert result.overall_severity == CrisisSeverity.LOW
        assert result.degraded_sources == (SignalSource.STATISTICAL,)

    def test_degraded_penalizes_confidence(self, aggregator: RiskAggregator) -> None:
        lexical = _signal(SignalSource.LEXICAL, CrisisSeverity.HIGH, 1.0)

        healthy = aggregator.aggregate([lexical])
        degraded = aggregator.aggregate([
            lexical,
            CrisisSignal.degraded_signal(SignalSource.STATISTICAL, "timed out"),
        ])

        assert healthy.assessment.confidence_score == pytest.approx(1.0)
        assert degraded.assessment.confidence_score == pytest.approx(0.8)

    def test_failure_reason_flagged(self, aggregator: RiskAggregator) -> None:
        result = aggregator.aggregate([
            CrisisSignal.degraded_signal(SignalSource.STATISTICAL, "timed out"),
        ])

        assert "statistical: timed out" in result.flagged_concerns
        assert result.overall_severity == CrisisSeverity.NONE


class TestMonotonicity:
    """Raising one signal never lowers the fused read."""

    @pytest.mark.parametrize("source", list(SignalSource))
    def test_confidence_increase(self, source: SignalSource) -> None:
        aggregator = RiskAggregator()
        others = [
            _signal(s, CrisisSeverity.MODERATE, 0.6, immediate=40)
            for s in SignalSource if s != source
        ]

        previous_severity = CrisisSeverity.UNKNOWN
        previous_risk = -1
        for step in range(11):
            confidence = step / 10
            result = aggregator.aggregate(
                others + [_signal(source, CrisisSeverity.HIGH, confidence, immediate=80)]
            )
            assert result.overall_severity >= previous_severity
            assert result.assessment.immediate_risk >= previous_risk
            previous_severity = result.overall_severity
            previous_risk = result.assessment.immediate_risk

    def test_severity_increase(self) -> None:
        aggregator = RiskAggregator()
        previous_risk = -1
        previous_severity = CrisisSeverity.UNKNOWN
        for severity in CrisisSeverity:
            result = aggregator.aggregate([
                _signal(SignalSource.LEXICAL, severity, 0.7, immediate=30),
            ])
            assert result.overall_severity >= previous_severity
            assert result.assessment.immediate_risk >= previous_risk
            previous_severity = result.overall_severity
            previous_risk = result.assessment.immediate_risk


class TestConsensus:
    """Tests for analyzer agreement."""

    def test_full_agreement(self) -> None:
        level = RiskAggregator.consensus_level([
            _signal(SignalSource.LEXICAL, CrisisSeverity.HIGH, 0.8),
            _signal(SignalSource.STATISTICAL, CrisisSeverity.HIGH, 0.8),
        ])

        assert level == pytest.approx(1.0)

    def test_disagreement_lowers_consensus(self) -> None:
        level = RiskAggregator.consensus_level([
            _signal(SignalSource.LEXICAL, CrisisSeverity.NONE, 0.8),
            _signal(SignalSource.STATISTICAL, CrisisSeverity.EMERGENCY, 0.8),
        ])

        assert level < 0.5
