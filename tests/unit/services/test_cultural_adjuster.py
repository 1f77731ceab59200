"""
Unit Tests for Cultural Context Adjuster

Tests region resolution, bias adjustments and the bounded apply().
"""

import pytest

from crisisguard.domain.enums.crisis_severity import CrisisSeverity, SignalSource
from crisisguard.services.cultural.cultural_adjuster import (
    STIGMA_ADJUSTMENT,
    CulturalAdjustment,
    CulturalContextAdjuster,
)
from crisisguard.services.cultural.cultural_profiles import (
    HISPANIC_LATINO,
    WESTERN,
    resolve_region,
)
from crisisguard.services.detection.text_normalizer import TextNormalizer


class TestResolveRegion:
    """Tests for cultural context resolution."""

    @pytest.mark.parametrize("context", [None, "", "   "])
    def test_no_context(self, context: object) -> None:
        assert resolve_region(context) is None  # type: ignore[arg-type]

    @pytest.mark.parametrize("context", ["latino", "Hispanic", "es", "es-MX", "LATINX"])
    def test_aliases(self, context: str) -> None:
        assert resolve_region(context) == HISPANIC_LATINO

    def test_unknown_context_defaults_to_western(self) -> None:
        assert resolve_region("martian") == WESTERN


class TestCulturalContextAdjuster:
    """Tests for CulturalContextAdjuster."""

    @pytest.fixture
    def adjuster(self) -> CulturalContextAdjuster:
        return CulturalContextAdjuster()

    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        return TextNormalizer()

    def test_no_context_is_neutral(
        self,
        adjuster: CulturalContextAdjuster,
        normalizer: TextNormalizer,
    ) -> None:
        """Test that users without a context get no adjustment at all."""
        adjustment = adjuster.adjust(normalizer.normalize("No puedo más"), None)

        assert adjustment.has_context is False
        assert adjustment.delta == 0.0
        assert adjustment.apply(50.0) == 0.0
        signal = adjustment.to_signal()
        assert signal.source == SignalSource.CULTURAL
        assert signal.confidence == 0.0

    def test_latino_context(
        self,
        adjuster: CulturalContextAdjuster,
        normalizer: TextNormalizer,
    ) -> None:
        adjustment = adjuster.adjust(normalizer.normalize("No puedo más"), "latino")

        assert adjustment.region == HISPANIC_LATINO
        assert STIGMA_ADJUSTMENT in adjustment.factors
        assert adjustment.delta == pytest.approx(20.0)
        assert adjustment.confidence == pytest.approx(0.8)
        assert [i.phrase for i in adjustment.indicators] == ["no puedo más"]

    def test_latino_interventions(
        self,
        adjuster: CulturalContextAdjuster,
        normalizer: TextNormalizer,
    ) -> None:
        adjustment = adjuster.adjust(normalizer.normalize("No puedo más"), "latino")

        interventions = adjustment.interventions
        assert interventions.family_involvement == "high"
        assert interventions.religious_consideration is True
        assert "Family involvement: high" in interventions.considerations()

    def test_indicator_signal(
        self,
        adjuster: CulturalContextAdjuster,
        normalizer: TextNormalizer,
    ) -> None:
        """Test strong own-region indicators read as MODERATE."""
        adjustment = adjuster.adjust(normalizer.normalize("No puedo más"), "latino")

        signal = adjustment.to_signal()

        assert signal.severity == CrisisSeverity.MODERATE
        assert signal.confidence == pytest.approx(0.9)

    def test_cross_region_indicator_is_discounted(
        self,
        adjuster: CulturalContextAdjuster,
        normalizer: TextNormalizer,
    ) -> None:
        adjustment = adjuster.adjust(normalizer.normalize("No puedo más"), "western")

        indicator = adjustment.indicators[0]
        assert indicator.cross_region is True
        assert indicator.weight == pytest.approx(0.9 * 0.6)

    def test_western_without_factors(
        self,
        adjuster: CulturalContextAdjuster,
        normalizer: TextNormalizer,
    ) -> None:
        adjustment = adjuster.adjust(normalizer.normalize("I need help"), "western")

        assert adjustment.factors == ()
        assert adjustment.delta == 0.0
        assert adjustment.rationale == f"No cultural adjustments applied for {WESTERN}"


class TestCulturalAdjustmentApply:
    """Tests for the bounded risk change."""

    def test_positive_delta_is_capped(self) -> None:
        adjustment = CulturalAdjustment(region=HISPANIC_LATINO, delta=20.0)

        assert adjustment.apply(50.0) == pytest.approx(20.0)
        assert adjustment.apply(95.0) == pytest.approx(5.0)

    def test_negative_delta_is_floored(self) -> None:
        adjustment = CulturalAdjustment(region=HISPANIC_LATINO, delta=-10.0)

        assert adjustment.apply(4.0) == pytest.approx(-4.0)

    def test_zero_risk_untouched_without_indicators(self) -> None:
        """Test cultural framing alone never creates risk from nothing."""
        adjustment = CulturalAdjustment(region=HISPANIC_LATINO, delta=20.0)

        assert adjustment.apply(0.0) == 0.0
