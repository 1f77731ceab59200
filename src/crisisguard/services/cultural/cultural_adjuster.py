"""
Cultural Context Adjuster

Applies bounded, signed adjustments for cultural communication
styles (stigma, indirectness, family framing, somatic expression,
religious coping) and suggests culturally matched interventions.

SAFETY-CRITICAL: Without a supplied cultural context the adjuster
contributes nothing: delta 0, confidence 0, severity NONE. It must
never add ambiguity for users who did not opt in.

ARCHITECTURE: Pure and synchronous; runs concurrently with the other
analyzers. The adjustment is applied to the fused lexical and
statistical read by the RiskAggregator through
CulturalAdjustment.apply().
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from crisisguard.config.logging_config import get_logger
from crisisguard.domain.enums.crisis_severity import CrisisSeverity, SignalSource
from crisisguard.domain.models.signal_models import CrisisSignal, RiskEstimate, clamp
from crisisguard.services.cultural.cultural_profiles import (
    COMMUNICATION_PATTERNS,
    CULTURAL_INDICATORS,
    LANGUAGE_RESOURCES,
    REGION_PROFILES,
    REGIONAL_RESOURCES,
    RELIGIOUS_CONSIDERATION_REGIONS,
    FILIPINO,
    CommunicationPattern,
    CommunicationStyle,
    CulturalIndicator,
    CulturalProfile,
    ExpressionType,
    FamilyOrientation,
    HelpSeekingStyle,
    StigmaLevel,
    resolve_region,
)
from crisisguard.services.detection.crisis_patterns import contains_phrase
from crisisguard.services.detection.text_normalizer import NormalizedText

logger = get_logger(__name__)

CROSS_REGION_WEIGHT = 0.6
CROSS_REGION_SIGNIFICANCE = 0.7
MIN_CULTURAL_CONFIDENCE = 0.6
MODERATE_STRENGTH = 0.8


@dataclass(frozen=True)
class BiasAdjustment:
    """One signed cultural adjustment (-1.0 to 1.0) with its confidence."""

    factor: str
    adjustment: float
    confidence: float
    explanation: str

    @property
    def weighted(self) -> float:
        return self.adjustment * self.confidence

    def to_dict(self) -> dict:
        return {
            "factor": self.factor,
            "adjustment": self.adjustment,
            "confidence": self.confidence,
            "explanation": self.explanation,
        }


# CLINICAL_REVIEW_REQUIRED: adjustment sizes and confidences
STIGMA_ADJUSTMENT = BiasAdjustment(
    "Mental Health Stigma", 0.25, 0.8,
    "High mental health stigma: implicit help-seeking weighted higher",
)
INDIRECT_ADJUSTMENT = BiasAdjustment(
    "Indirect Communication Style", 0.20, 0.7,
    "Indirect communication style: metaphorical and implicit expressions weighted higher",
)
FAMILY_ADJUSTMENT = BiasAdjustment(
    "Family-Centered Culture", 0.15, 0.9,
    "Family-centered culture: family-related crisis expressions detected",
)
SOMATIC_ADJUSTMENT = BiasAdjustment(
    "Somatic Expression", 0.18, 0.8,
    "Somatic expression: physical symptom descriptions weighted as distress",
)
RELIGIOUS_ADJUSTMENT = BiasAdjustment(
    "Religious Coping", -0.10, 0.6,
    "Religious coping expressions: spiritual references may indicate resilience",
)


@dataclass(frozen=True)
class MatchedIndicator:
    """A cultural indicator found in the text."""

    phrase: str
    region: str
    weight: float
    significance: float
    expression_type: ExpressionType
    religious: bool = False
    cross_region: bool = False

    def to_dict(self) -> dict:
        return {
            "phrase": self.phrase,
            "region": self.region,
            "weight": round(self.weight, 3),
            "expression_type": self.expression_type.value,
            "cross_region": self.cross_region,
        }


@dataclass(frozen=True)
class CulturalInterventions:
    """Culturally matched intervention suggestions."""

    family_involvement: str = "low"
    community_approach: bool = False
    religious_consideration: bool = False
    regional_resources: tuple[str, ...] = ()
    language_resources: tuple[str, ...] = ()

    def considerations(self) -> tuple[str, ...]:
        """Plain-language notes attached to intervention recommendations."""
        notes = [f"Family involvement: {self.family_involvement}"]
        if self.community_approach:
            notes.append("Consider a community-based support approach")
        if self.religious_consideration:
            notes.append("Respect religious and spiritual coping")
        return tuple(notes)

    def to_dict(self) -> dict:
        return {
            "family_involvement": self.family_involvement,
            "community_approach": self.community_approach,
            "religious_consideration": self.religious_consideration,
            "regional_resources": list(self.regional_resources),
            "language_resources": list(self.language_resources),
        }


@dataclass(frozen=True)
class CulturalAdjustment:
    """
    Result of cultural context analysis.

    Attributes:
        region: Resolved region, None when no context was supplied
        delta: Signed risk change in points (sum of adjustment*confidence*100)
        rationale: Explanations of every applied adjustment
        factors: Applied bias adjustments
        confidence: Confidence in the adjustment (0.0-1.0)
        indicators: Cultural indicators found in the text
        communication_patterns: Communication patterns found in the text
        interventions: Culturally matched interventions
    """

    region: Optional[str] = None
    delta: float = 0.0
    rationale: str = ""
    factors: tuple[BiasAdjustment, ...] = ()
    confidence: float = 0.0
    indicators: tuple[MatchedIndicator, ...] = ()
    communication_patterns: tuple[str, ...] = ()
    interventions: Optional[CulturalInterventions] = None

    @classmethod
    def neutral(cls) -> "CulturalAdjustment":
        return cls()

    @property
    def has_context(self) -> bool:
        return self.region is not None

    @property
    def strength(self) -> float:
        """Strongest matched indicator weight."""
        return max((i.weight for i in self.indicators), default=0.0)

    def apply(self, base_risk: float) -> float:
        """
        Signed change to apply to a fused risk value.

        The change is bounded so base_risk + change stays within
        [0, 100]. Reads without any risk stay untouched unless
        cultural indicators themselves were found.

        Args:
            base_risk: Fused risk before adjustment (0-100)

        Returns:
            Change in risk points
        """
        if not self.delta:
            return 0.0
        if base_risk <= 0 and not self.indicators:
            return 0.0
        return clamp(base_risk + self.delta) - clamp(base_risk)

    def to_signal(self) -> CrisisSignal:
        """View the adjustment as a cultural CrisisSignal."""
        if not self.has_context or not self.indicators:
            return CrisisSignal(
                source=SignalSource.CULTURAL,
                confidence=0.0,
                metadata={"region": self.region},
            )

        strength = self.strength
        severity = (
            CrisisSeverity.MODERATE if strength >= MODERATE_STRENGTH
            else CrisisSeverity.LOW
        )
        return CrisisSignal(
            source=SignalSource.CULTURAL,
            severity=severity,
            confidence=strength,
            risk=RiskEstimate(
                immediate=strength * 50,
                short_term=strength * 60,
                long_term=strength * 70,
            ).clamped(),
            metadata={
                "region": self.region,
                "indicators": tuple(i.phrase for i in self.indicators),
            },
        )

    def to_dict(self) -> dict:
        return {
            "region": self.region,
            "delta": round(self.delta, 2),
            "rationale": self.rationale,
            "factors": [f.to_dict() for f in self.factors],
            "confidence": round(self.confidence, 3),
            "indicators": [i.to_dict() for i in self.indicators],
            "communication_patterns": list(self.communication_patterns),
            "interventions": self.interventions.to_dict() if self.interventions else None,
        }


class CulturalContextAdjuster:
    """
    Computes cultural adjustments for a message.

    Usage:
        adjuster = CulturalContextAdjuster()
        adjustment = adjuster.adjust(normalized, "latino")
        change = adjustment.apply(fused_immediate_risk)
    """

    def __init__(
        self,
        indicators: Mapping[str, tuple[CulturalIndicator, ...]] = CULTURAL_INDICATORS,
        patterns: tuple[CommunicationPattern, ...] = COMMUNICATION_PATTERNS,
    ) -> None:
        self._indicators = indicators
        self._patterns = patterns

    def adjust(
        self,
        normalized: NormalizedText,
        cultural_context: Optional[str],
    ) -> CulturalAdjustment:
        """
        Analyze text against a cultural context.

        Args:
            normalized: Output of TextNormalizer
            cultural_context: Region name, alias or language code; None
                for no context

        Returns:
            CulturalAdjustment; neutral when no context is supplied
        """
        region = resolve_region(cultural_context)
        if region is None:
            return CulturalAdjustment.neutral()

        profile = REGION_PROFILES[region]
        text = normalized.lowered

        indicators = self.detect_indicators(text, region)
        patterns = self.detect_patterns(text, region)
        factors = self.bias_adjustments(profile, indicators, patterns)

        delta = sum(f.weighted for f in factors) * 100
        if factors:
            confidence = min(1.0, sum(f.confidence for f in factors) / len(factors))
            confidence = max(MIN_CULTURAL_CONFIDENCE, confidence)
            rationale = "; ".join(f.explanation for f in factors)
        else:
            confidence = 0.0
            rationale = f"No cultural adjustments applied for {region}"

        interventions = self.interventions_for(profile, indicators, normalized.language)

        logger.debug(
            "Cultural adjustment computed",
            region=region,
            delta=round(delta, 2),
            indicator_count=len(indicators),
            factor_count=len(factors),
        )

        return CulturalAdjustment(
            region=region,
            delta=delta,
            rationale=rationale,
            factors=factors,
            confidence=confidence,
            indicators=indicators,
            communication_patterns=tuple(p.phrase for p in patterns),
            interventions=interventions,
        )

    def detect_indicators(self, text: str, region: str) -> tuple[MatchedIndicator, ...]:
        """Own-region indicators at full weight, other regions' at 60%."""
        found: list[MatchedIndicator] = []
        for indicator_region, indicators in self._indicators.items():
            cross = indicator_region != region
            language = REGION_PROFILES[indicator_region].language
            for indicator in indicators:
                if not contains_phrase(text, indicator.phrase, language):
                    continue
                found.append(
                    MatchedIndicator(
                        phrase=indicator.phrase,
                        region=indicator_region,
                        weight=indicator.weight * (CROSS_REGION_WEIGHT if cross else 1.0),
                        significance=indicator.significance
                        * (CROSS_REGION_SIGNIFICANCE if cross else 1.0),
                        expression_type=indicator.expression_type,
                        religious=indicator.religious,
                        cross_region=cross,
                    )
                )
        # Own-region matches first
        found.sort(key=lambda m: (m.cross_region, -m.weight))
        return tuple(found)

    def detect_patterns(self, text: str, region: str) -> tuple[CommunicationPattern, ...]:
        language = REGION_PROFILES[region].language
        return tuple(
            p for p in self._patterns
            if region in p.regions and contains_phrase(text, p.phrase, language)
        )

    @staticmethod
    def bias_adjustments(
        profile: CulturalProfile,
        indicators: tuple[MatchedIndicator, ...],
        patterns: tuple[CommunicationPattern, ...],
    ) -> tuple[BiasAdjustment, ...]:
        factors: list[BiasAdjustment] = []

        if profile.stigma == StigmaLevel.HIGH:
            factors.append(STIGMA_ADJUSTMENT)

        if profile.communication_style == CommunicationStyle.INDIRECT:
            factors.append(INDIRECT_ADJUSTMENT)

        if profile.family_orientation == FamilyOrientation.FAMILY_CENTERED:
            if any(p.family_implied for p in patterns):
                factors.append(FAMILY_ADJUSTMENT)

        if any(i.expression_type == ExpressionType.SOMATIC for i in indicators):
            factors.append(SOMATIC_ADJUSTMENT)

        if any(p.help_seeking_style == HelpSeekingStyle.RELIGIOUS for p in patterns):
            factors.append(RELIGIOUS_ADJUSTMENT)

        return tuple(factors)

    @staticmethod
    def interventions_for(
        profile: CulturalProfile,
        indicators: tuple[MatchedIndicator, ...],
        language: str,
    ) -> CulturalInterventions:
        if profile.family_orientation == FamilyOrientation.FAMILY_CENTERED:
            family_involvement = "high"
        elif profile.family_orientation == FamilyOrientation.COMMUNITY_BASED:
            family_involvement = "medium"
        else:
            family_involvement = "low"

        return CulturalInterventions(
            family_involvement=family_involvement,
            community_approach=(
                profile.family_orientation == FamilyOrientation.COMMUNITY_BASED
                or profile.region == FILIPINO
            ),
            religious_consideration=(
                any(i.religious for i in indicators)
                or profile.region in RELIGIOUS_CONSIDERATION_REGIONS
            ),
            regional_resources=REGIONAL_RESOURCES.get(profile.region, ()),
            language_resources=LANGUAGE_RESOURCES.get(language, ()),
        )
