"""
Crisis Severity and Urgency Enumerations

Defines standardized severity buckets for crisis signals, the
intervention urgency derived from numeric risk, the signal sources
that are fused, and the crisis categories a lexical match belongs to.

CLINICAL_REVIEW_REQUIRED: Severity definitions and urgency cut-offs
must be validated by crisis-intervention professionals.
"""

from enum import IntEnum, StrEnum


class CrisisSeverity(IntEnum):
    """
    Ordinal crisis severity bucket.

    Higher values indicate more severe risk. UNKNOWN is reported by a
    degraded analyzer and is ordered below NONE so that it can never
    win a max() over severities.
    """

    UNKNOWN = -1
    """Analyzer failed or timed out; no read available."""

    NONE = 0
    """No crisis indicators detected."""

    LOW = 1
    """
    Low concern.
    - Distress language without danger indicators
    - Self-service resources are sufficient
    """

    MODERATE = 2
    """
    Moderate concern.
    - Hopelessness, burden or isolation language
    - Counselor contact recommended
    """

    HIGH = 3
    """
    High risk.
    - Active ideation, self-harm, abuse disclosure, acute panic
    - Human responder required
    """

    EMERGENCY = 4
    """
    Emergency.
    - Stated intent with plan or timeline, violence threat, overdose
    - Emergency services required

    SAFETY_NOTE: At this level escalation is ALWAYS required.
    """

    @property
    def label(self) -> str:
        """Lower-case wire label (e.g. "emergency")."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "CrisisSeverity":
        """
        Parse a wire label.

        Accepts the labels of the older six-level scale as well:
        "medium" maps to MODERATE and "critical" collapses into HIGH.
        Unrecognised labels map to UNKNOWN.
        """
        aliases = {
            "medium": cls.MODERATE,
            "critical": cls.HIGH,
            "urgent": cls.EMERGENCY,
        }
        normalized = (label or "").strip().lower()
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls[normalized.upper()]
        except KeyError:
            return cls.UNKNOWN


class InterventionUrgency(StrEnum):
    """
    How soon a human should intervene.

    Derived from immediate risk (0-100) and overall severity.
    """

    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    IMMEDIATE = "immediate"

    @property
    def rank(self) -> int:
        """Ordinal position, NONE=0 ... IMMEDIATE=4."""
        return list(InterventionUrgency).index(self)

    @classmethod
    def from_risk(
        cls,
        immediate_risk: float,
        severity: CrisisSeverity = CrisisSeverity.NONE,
    ) -> "InterventionUrgency":
        """
        Map immediate risk and severity to urgency.

        Args:
            immediate_risk: Immediate risk score (0-100)
            severity: Overall fused severity

        Returns:
            Intervention urgency level
        """
        if severity == CrisisSeverity.EMERGENCY or immediate_risk >= 90:
            return cls.IMMEDIATE
        if immediate_risk >= 70:
            return cls.HIGH
        if immediate_risk >= 50:
            return cls.MODERATE
        if immediate_risk >= 30:
            return cls.LOW
        return cls.NONE


class SignalSource(StrEnum):
    """Independent analyzers whose signals are fused."""

    LEXICAL = "lexical"
    STATISTICAL = "statistical"
    CULTURAL = "cultural"

    @property
    def priority(self) -> int:
        """Tie-break priority: statistical > lexical > cultural."""
        return {
            SignalSource.STATISTICAL: 3,
            SignalSource.LEXICAL: 2,
            SignalSource.CULTURAL: 1,
        }[self]


class CrisisCategory(StrEnum):
    """Clinical category of a lexical crisis match."""

    SUICIDAL_IDEATION = "suicidal-ideation"
    SUICIDE_PLAN = "suicide-plan"
    SELF_HARM = "self-harm"
    SUBSTANCE_CRISIS = "substance-crisis"
    VIOLENCE_THREAT = "violence-threat"
    MEDICAL_EMERGENCY = "medical-emergency"
    SEVERE_DISTRESS = "severe-distress"
    PANIC_CRISIS = "panic-crisis"
    PSYCHOTIC_EPISODE = "psychotic-episode"
    ABUSE_DISCLOSURE = "abuse-disclosure"
    TRAUMA_RESPONSE = "trauma-response"
