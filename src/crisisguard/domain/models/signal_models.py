"""
Signal Models

Data models produced by the independent analyzers and consumed by
the risk aggregator.

ARCHITECTURE: Signals are immutable. One signal is produced per
analyzer per analysis call and discarded after fusion.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from crisisguard.domain.enums.crisis_severity import (
    CrisisCategory,
    CrisisSeverity,
    SignalSource,
)


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Clamp a numeric value into [lower, upper]."""
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class KeywordMatch:
    """
    A single calibrated lexical match.

    Attributes:
        term: Matched text as it appears in the input
        confidence: Calibrated confidence (0.0-1.0)
        severity: Severity bucket of the matching pattern
        category: Crisis category of the pattern
        position_in_text: Character offset of the match
        surrounding_window: Text inspected around the match
        urgency_score: Urgency estimate (0-100)
        intervention_required: Whether the pattern alone demands a human
        emotional_weight: Pattern risk weight scaled to 0-1
    """

    term: str
    confidence: float
    severity: CrisisSeverity
    category: CrisisCategory
    position_in_text: int
    surrounding_window: str = ""
    urgency_score: int = 0
    intervention_required: bool = False
    emotional_weight: float = 0.0

    @property
    def end(self) -> int:
        return self.position_in_text + len(self.term)

    def overlaps(self, other: "KeywordMatch") -> bool:
        """Check whether two matches share any character span."""
        return self.position_in_text < other.end and other.position_in_text < self.end

    def to_dict(self) -> dict:
        return {
            "term": self.term,
            "confidence": round(self.confidence, 3),
            "severity": self.severity.label,
            "category": self.category.value,
            "position_in_text": self.position_in_text,
            "surrounding_window": self.surrounding_window,
            "urgency_score": self.urgency_score,
            "intervention_required": self.intervention_required,
        }


@dataclass(frozen=True)
class RiskEstimate:
    """Numeric risk read of one analyzer (each 0-100)."""

    immediate: float = 0.0
    short_term: float = 0.0
    long_term: float = 0.0

    def clamped(self) -> "RiskEstimate":
        return RiskEstimate(
            immediate=clamp(self.immediate),
            short_term=clamp(self.short_term),
            long_term=clamp(self.long_term),
        )

    def to_dict(self) -> dict:
        return {
            "immediate": round(self.immediate, 1),
            "short_term": round(self.short_term, 1),
            "long_term": round(self.long_term, 1),
        }


@dataclass(frozen=True)
class CrisisSignal:
    """
    One analyzer's independent read on crisis risk.

    SAFETY_NOTE: A degraded signal (analyzer failed or timed out) is
    still reported, with severity UNKNOWN and zero confidence, so the
    aggregator can penalize overall confidence instead of silently
    dropping the source.

    Attributes:
        source: Which analyzer produced the signal
        severity: Severity bucket
        confidence: Confidence in the severity (0.0-1.0)
        matches: Lexical matches backing the read (lexical source only)
        risk: Numeric risk estimate
        metadata: Analyzer-specific details
        degraded: Whether the analyzer failed or timed out
        failure_reason: Human-readable failure reason
    """

    source: SignalSource
    severity: CrisisSeverity = CrisisSeverity.NONE
    confidence: float = 0.0
    matches: tuple[KeywordMatch, ...] = ()
    risk: RiskEstimate = field(default_factory=RiskEstimate)
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    degraded: bool = False
    failure_reason: Optional[str] = None

    @classmethod
    def degraded_signal(cls, source: SignalSource, reason: str) -> "CrisisSignal":
        """Build the signal reported when an analyzer fails."""
        return cls(
            source=source,
            severity=CrisisSeverity.UNKNOWN,
            confidence=0.0,
            degraded=True,
            failure_reason=reason,
        )

    @classmethod
    def empty(cls, source: SignalSource, note: Optional[str] = None) -> "CrisisSignal":
        """Build a NONE-severity signal, optionally carrying a failure note."""
        return cls(source=source, failure_reason=note)

    def is_eligible(self, confidence_floor: float) -> bool:
        """Whether this signal may contribute a severity to fusion."""
        return not self.degraded and self.confidence >= confidence_floor

    def to_dict(self) -> dict:
        return {
            "source": self.source.value,
            "severity": self.severity.label,
            "confidence": round(self.confidence, 3),
            "match_count": len(self.matches),
            "risk": self.risk.to_dict(),
            "degraded": self.degraded,
            "failure_reason": self.failure_reason,
        }
