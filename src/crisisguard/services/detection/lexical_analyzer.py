"""
Lexical Signal Analyzer

Deterministic pattern matcher producing calibrated keyword matches.

SAFETY-CRITICAL: Confidence calibration decides whether a phrase
such as "going to kill myself" is read as intent or discarded as
negated or hypothetical. False negatives are worse than false
positives; negation handling is deliberately narrow.

ARCHITECTURE: Pure and synchronous. Runs in a worker thread so the
event loop is never blocked. Never raises: malformed input or an
unexpected error yields a NONE-severity signal with a failure note.
"""

from typing import Mapping, Optional

from crisisguard.config.logging_config import get_logger
from crisisguard.config.settings import DetectionSettings
from crisisguard.domain.enums.crisis_severity import (
    CrisisCategory,
    CrisisSeverity,
    SignalSource,
)
from crisisguard.domain.models.assessment_models import (
    EmotionalProfile,
    TimelineAnalysis,
)
from crisisguard.domain.models.signal_models import (
    CrisisSignal,
    KeywordMatch,
    RiskEstimate,
    clamp,
)
from crisisguard.services.detection.crisis_patterns import (
    AMPLIFIER_BONUS,
    CONTEXT_BONUS,
    DEFAULT_LANGUAGE,
    HYPOTHETICAL_PENALTY,
    HYPOTHETICAL_PHRASES,
    NEGATION_PATTERNS,
    NEGATION_REACH_CHARS,
    TIMELINE_BONUS,
    CrisisPattern,
    LanguageProfile,
    build_pattern_table,
    contains_phrase,
    count_phrases,
    validate_pattern_table,
)
from crisisguard.services.detection.text_normalizer import NormalizedText

logger = get_logger(__name__)


# CLINICAL_VALIDATION_REQUIRED: emotion vocabulary and crisis alignment
EMOTION_VOCABULARY: dict[str, tuple[str, ...]] = {
    "despair": ("hopeless", "despair", "empty", "worthless", "pointless"),
    "anger": ("angry", "rage", "furious", "hate", "violent"),
    "fear": ("scared", "terrified", "afraid", "panic", "anxious"),
    "numbness": ("numb", "empty", "void", "nothing", "disconnect"),
}
EMOTION_ALIGNMENT: dict[str, float] = {
    "despair": 0.9,
    "anger": 0.7,
    "fear": 0.6,
    "numbness": 0.8,
}
NEUTRAL_ALIGNMENT = 0.3

RISK_FACTORS: tuple[str, ...] = (
    "isolation", "substance use", "recent loss", "trauma", "financial stress",
)
PROTECTIVE_FACTORS: tuple[str, ...] = (
    "support system", "therapy", "medication", "family", "friends", "pets",
)
BEHAVIORAL_PATTERNS: tuple[str, ...] = (
    "giving up", "withdrawal", "impulsive", "reckless",
)
OVERALL_RISK_FACTORS: tuple[str, ...] = (
    "alone", "isolated", "lost job", "relationship ended", "death", "trauma",
)

EMERGENCY_IMMEDIATE_FLOOR = 85.0

CONCERN_EMERGENCY = "Emergency-level crisis indicators detected"
CONCERN_SUICIDE_PLAN = "Suicide planning indicators present"
CONCERN_VIOLENCE = "Violence threat indicators detected"
CONCERN_FAILSAFE = "Analysis failed - using failsafe mode"


class LexicalSignalAnalyzer:
    """
    Curated-pattern crisis matcher.

    For every regex hit the analyzer inspects a context window either
    side of the match and calibrates confidence:

    1. Any negative flag word in the window -> 0
    2. A negation phrase ending just before the match -> 0
    3. Base confidence by severity (0.75 emergency, 0.65 critical, 0.5)
    4. +0.15 per amplifier, -0.5 per hypothetical phrase
    5. +0.2 when any context requirement is present
    6. Clamp to [0, 1]; discard below the match threshold

    Usage:
        analyzer = LexicalSignalAnalyzer(settings.detection)
        signal = analyzer.analyze(normalized)
    """

    def __init__(
        self,
        settings: Optional[DetectionSettings] = None,
        pattern_table: Optional[Mapping[str, LanguageProfile]] = None,
    ) -> None:
        """
        Initialize analyzer.

        Args:
            settings: Detection settings (window, threshold, fallback)
            pattern_table: Custom pattern table; built-in table if None

        Raises:
            ConfigurationError: If the pattern table is unusable
        """
        self._settings = settings or DetectionSettings()
        if pattern_table is None:
            pattern_table = build_pattern_table()
        else:
            validate_pattern_table(pattern_table)
        self._table = pattern_table

    @property
    def supported_languages(self) -> frozenset[str]:
        return frozenset(self._table)

    def analyze(self, normalized: NormalizedText) -> CrisisSignal:
        """
        Analyze normalized text.

        Args:
            normalized: Output of TextNormalizer

        Returns:
            Lexical CrisisSignal; never raises
        """
        if not isinstance(normalized, NormalizedText):
            return CrisisSignal.empty(
                SignalSource.LEXICAL,
                note=f"{CONCERN_FAILSAFE}: malformed input",
            )
        if normalized.is_empty:
            return CrisisSignal.empty(SignalSource.LEXICAL)

        try:
            return self._analyze(normalized)
        except Exception as e:
            logger.error(
                "Lexical analysis failed",
                error_type=type(e).__name__,
                language=normalized.language,
            )
            return CrisisSignal.empty(
                SignalSource.LEXICAL,
                note=f"{CONCERN_FAILSAFE}: {type(e).__name__}",
            )

    def _analyze(self, normalized: NormalizedText) -> CrisisSignal:
        # Step 1: Pick the language profiles to run
        profiles, fallback_used = self._select_profiles(normalized)

        # Step 2: Collect calibrated matches from every profile
        candidates: list[KeywordMatch] = []
        for profile in profiles:
            candidates.extend(self._match_profile(normalized.lowered, profile))

        # Step 3: Keep the highest-confidence match per text span
        matches = self.deduplicate(candidates)

        if fallback_used:
            factor = self._settings.fallback_confidence_factor
            matches = [
                _scaled(match, factor) for match in matches
            ]

        # Step 4: Contextual reads over the whole message
        primary_profile = profiles[0]
        emotional_profile = self.analyze_emotional_profile(normalized.lowered)
        timeline = self.analyze_timeline(normalized.lowered, primary_profile)
        risk_factors = frozenset(
            f for f in RISK_FACTORS if contains_phrase(normalized.lowered, f)
        )
        protective_factors = frozenset(
            f for f in PROTECTIVE_FACTORS if contains_phrase(normalized.lowered, f)
        )

        metadata = {
            "language_profile": primary_profile.language,
            "fallback_used": fallback_used,
            "emotional_profile": emotional_profile,
            "timeline": timeline,
            "risk_factors": risk_factors,
            "protective_factors": protective_factors,
            "flagged_concerns": self.flagged_concerns(matches),
        }

        if not matches:
            return CrisisSignal(
                source=SignalSource.LEXICAL,
                severity=CrisisSeverity.NONE,
                confidence=0.0,
                metadata=metadata,
            )

        # Step 5: Signal severity and confidence come from the top match
        top = max(
            matches,
            key=lambda m: (m.severity, m.confidence, -m.position_in_text),
        )
        risk = self._estimate_risk(normalized.lowered, matches)

        logger.debug(
            "Lexical analysis complete",
            match_count=len(matches),
            severity=top.severity.label,
            language=primary_profile.language,
        )

        return CrisisSignal(
            source=SignalSource.LEXICAL,
            severity=top.severity,
            confidence=top.confidence,
            matches=tuple(sorted(matches, key=lambda m: m.position_in_text)),
            risk=risk,
            metadata=metadata,
        )

    def _select_profiles(
        self,
        normalized: NormalizedText,
    ) -> tuple[list[LanguageProfile], bool]:
        profiles: list[LanguageProfile] = []
        fallback_used = False

        primary = self._table.get(normalized.language)
        if primary is None:
            primary = self._table[DEFAULT_LANGUAGE]
            fallback_used = True
        profiles.append(primary)

        secondary = normalized.secondary_language
        if normalized.mixed_language and secondary in self._table:
            if self._table[secondary] is not primary:
                profiles.append(self._table[secondary])

        return profiles, fallback_used

    def _match_profile(self, lowered: str, profile: LanguageProfile) -> list[KeywordMatch]:
        window = self._settings.context_window_chars
        threshold = self._settings.match_confidence_threshold
        matches: list[KeywordMatch] = []

        for pattern in profile.patterns:
            for hit in pattern.regex.finditer(lowered):
                if not hit.group(0).strip():
                    continue
                start, end = hit.start(), hit.end()
                window_start = max(0, start - window)
                surrounding = lowered[window_start:end + window]

                confidence = self.calibrate_confidence(
                    surrounding,
                    match_offset=start - window_start,
                    pattern=pattern,
                    profile=profile,
                )
                if confidence < threshold:
                    continue

                matches.append(
                    KeywordMatch(
                        term=hit.group(0),
                        confidence=confidence,
                        severity=pattern.severity,
                        category=pattern.category,
                        position_in_text=start,
                        surrounding_window=surrounding,
                        urgency_score=self.urgency_score(surrounding, pattern, profile),
                        intervention_required=pattern.intervention_required,
                        emotional_weight=pattern.risk_weight / 100,
                    )
                )

        return matches

    @staticmethod
    def calibrate_confidence(
        window: str,
        match_offset: int,
        pattern: CrisisPattern,
        profile: LanguageProfile,
    ) -> float:
        """
        Calibrate a match's confidence from its context window.

        Args:
            window: Lower-cased text around the match
            match_offset: Start of the match inside the window
            pattern: Pattern that matched
            profile: Language profile the pattern belongs to

        Returns:
            Confidence in [0, 1]
        """
        language = profile.language

        for flag in pattern.negative_flags:
            if contains_phrase(window, flag, language):
                return 0.0

        if profile.use_negation_patterns:
            for negation in NEGATION_PATTERNS:
                for neg in negation.finditer(window):
                    if neg.start() <= match_offset <= neg.end() + NEGATION_REACH_CHARS:
                        return 0.0

        confidence = pattern.base_confidence
        confidence += AMPLIFIER_BONUS * count_phrases(window, pattern.amplifiers, language)
        confidence -= HYPOTHETICAL_PENALTY * count_phrases(window, HYPOTHETICAL_PHRASES, language)
        if any(contains_phrase(window, req, language) for req in pattern.context_requirements):
            confidence += CONTEXT_BONUS

        return clamp(confidence, 0.0, 1.0)

    @staticmethod
    def urgency_score(window: str, pattern: CrisisPattern, profile: LanguageProfile) -> int:
        """Risk weight plus timeline bonuses found in the window, capped at 100."""
        score = pattern.risk_weight
        for level, indicators in profile.timeline_indicators.items():
            bonus = TIMELINE_BONUS.get(level, 0)
            score += bonus * count_phrases(window, indicators, profile.language)
        return int(min(100, score))

    @staticmethod
    def deduplicate(matches: list[KeywordMatch]) -> list[KeywordMatch]:
        """
        Keep the highest-confidence match per overlapping text span.

        Ties prefer the more severe match, then the earlier position,
        then the longer term, so the result is order-independent.
        """
        ranked = sorted(
            matches,
            key=lambda m: (-m.confidence, -m.severity, m.position_in_text, -len(m.term)),
        )
        kept: list[KeywordMatch] = []
        for match in ranked:
            if not any(match.overlaps(existing) for existing in kept):
                kept.append(match)
        return kept

    @staticmethod
    def analyze_emotional_profile(lowered: str) -> EmotionalProfile:
        """Dominant emotion by vocabulary hits; intensity saturates at 5 hits."""
        primary = "neutral"
        best = 0
        for emotion, words in EMOTION_VOCABULARY.items():
            hits = count_phrases(lowered, words)
            if hits > best:
                best = hits
                primary = emotion

        intensity = min(1.0, best / 5)
        return EmotionalProfile(
            primary_emotion=primary,
            intensity=intensity,
            stability=1.0 - intensity,
            risk_alignment=EMOTION_ALIGNMENT.get(primary, NEUTRAL_ALIGNMENT),
        )

    @staticmethod
    def analyze_timeline(lowered: str, profile: LanguageProfile) -> TimelineAnalysis:
        """Most urgent timeframe present, plus every urgency modifier found."""
        timeframe = "none"
        modifiers: list[str] = []
        for level, indicators in profile.timeline_indicators.items():
            found = [w for w in indicators if contains_phrase(lowered, w, profile.language)]
            if found and timeframe == "none":
                timeframe = level
            modifiers.extend(w for w in found if w not in modifiers)
        return TimelineAnalysis(timeframe=timeframe, urgency_modifiers=tuple(modifiers))

    @staticmethod
    def flagged_concerns(matches: list[KeywordMatch]) -> tuple[str, ...]:
        concerns: list[str] = []
        if any(m.severity == CrisisSeverity.EMERGENCY for m in matches):
            concerns.append(CONCERN_EMERGENCY)
        if any(m.category == CrisisCategory.SUICIDE_PLAN for m in matches):
            concerns.append(CONCERN_SUICIDE_PLAN)
        if any(m.category == CrisisCategory.VIOLENCE_THREAT for m in matches):
            concerns.append(CONCERN_VIOLENCE)
        return tuple(concerns)

    @staticmethod
    def _estimate_risk(lowered: str, matches: list[KeywordMatch]) -> RiskEstimate:
        immediate = max(m.urgency_score * m.confidence for m in matches)
        if any(m.severity == CrisisSeverity.EMERGENCY for m in matches):
            immediate = max(EMERGENCY_IMMEDIATE_FLOOR, immediate)

        behavioral_ratio = count_phrases(lowered, BEHAVIORAL_PATTERNS) / len(BEHAVIORAL_PATTERNS)
        factor_ratio = count_phrases(lowered, OVERALL_RISK_FACTORS) / len(OVERALL_RISK_FACTORS)

        return RiskEstimate(
            immediate=immediate,
            short_term=immediate * 0.8 + behavioral_ratio * 20,
            long_term=immediate * 0.6 + factor_ratio * 40,
        ).clamped()


def _scaled(match: KeywordMatch, factor: float) -> KeywordMatch:
    """Reduce a match's confidence when no table exists for the language."""
    return KeywordMatch(
        term=match.term,
        confidence=match.confidence * factor,
        severity=match.severity,
        category=match.category,
        position_in_text=match.position_in_text,
        surrounding_window=match.surrounding_window,
        urgency_score=match.urgency_score,
        intervention_required=match.intervention_required,
        emotional_weight=match.emotional_weight,
    )
