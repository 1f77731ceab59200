"""
Unit Tests for Lexical Signal Analyzer

Tests pattern matching, confidence calibration, negation handling
and the language fallback.
"""

import pytest

from crisisguard.config.settings import DetectionSettings
from crisisguard.domain.enums.crisis_severity import (
    CrisisCategory,
    CrisisSeverity,
    SignalSource,
)
from crisisguard.domain.exceptions import ConfigurationError
from crisisguard.domain.models.signal_models import KeywordMatch
from crisisguard.services.detection.lexical_analyzer import (
    CONCERN_EMERGENCY,
    CONCERN_VIOLENCE,
    LexicalSignalAnalyzer,
)
from crisisguard.services.detection.text_normalizer import NormalizedText, TextNormalizer


def _normalized(text: str, language: str = "en") -> NormalizedText:
    lowered = text.lower()
    return NormalizedText(original=text, text=text, lowered=lowered, language=language)


class TestEnglishPatterns:
    """Tests for the English contextual patterns."""

    @pytest.fixture
    def analyzer(self) -> LexicalSignalAnalyzer:
        return LexicalSignalAnalyzer()

    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        return TextNormalizer()

    def test_stated_intent_with_timeline_is_emergency(
        self,
        analyzer: LexicalSignalAnalyzer,
        normalizer: TextNormalizer,
    ) -> None:
        """Test intent plus "tonight" reaches full confidence."""
        signal = analyzer.analyze(normalizer.normalize("I'm going to kill myself tonight"))

        assert signal.source == SignalSource.LEXICAL
        assert signal.severity == CrisisSeverity.EMERGENCY
        assert signal.confidence == pytest.approx(1.0)
        assert len(signal.matches) == 1
        assert signal.risk.immediate == pytest.approx(100.0)
        assert CONCERN_EMERGENCY in signal.metadata["flagged_concerns"]

    def test_timeline_is_reported(
        self,
        analyzer: LexicalSignalAnalyzer,
        normalizer: TextNormalizer,
    ) -> None:
        signal = analyzer.analyze(normalizer.normalize("I'm going to kill myself tonight"))

        timeline = signal.metadata["timeline"]
        assert timeline.timeframe == "very-urgent"
        assert "tonight" in timeline.urgency_modifiers

    def test_violence_threat(
        self,
        analyzer: LexicalSignalAnalyzer,
        normalizer: TextNormalizer,
    ) -> None:
        """Test violence threats are emergencies floored at 85 immediate risk."""
        signal = analyzer.analyze(normalizer.normalize("I want to hurt someone"))

        assert signal.severity == CrisisSeverity.EMERGENCY
        assert signal.confidence == pytest.approx(0.75)
        assert signal.matches[0].category == CrisisCategory.VIOLENCE_THREAT
        assert signal.risk.immediate == pytest.approx(85.0)
        assert CONCERN_VIOLENCE in signal.metadata["flagged_concerns"]

    def test_negation_cancels_match(
        self,
        analyzer: LexicalSignalAnalyzer,
        normalizer: TextNormalizer,
    ) -> None:
        signal = analyzer.analyze(normalizer.normalize("I'm not going to kill myself"))

        assert signal.severity == CrisisSeverity.NONE
        assert signal.matches == ()

    def test_hypothetical_drops_below_threshold(
        self,
        analyzer: LexicalSignalAnalyzer,
        normalizer: TextNormalizer,
    ) -> None:
        """Test hypothetical framing lowers confidence below the threshold."""
        signal = analyzer.analyze(
            normalizer.normalize("I'm just thinking about how I want to die")
        )

        assert signal.severity == CrisisSeverity.NONE

    def test_active_ideation_is_high(
        self,
        analyzer: LexicalSignalAnalyzer,
        normalizer: TextNormalizer,
    ) -> None:
        signal = analyzer.analyze(
            normalizer.normalize("I really want to die, I think about it constantly")
        )

        assert signal.severity == CrisisSeverity.HIGH
        assert all(m.category == CrisisCategory.SUICIDAL_IDEATION for m in signal.matches)

    def test_benign_text(
        self,
        analyzer: LexicalSignalAnalyzer,
        normalizer: TextNormalizer,
    ) -> None:
        signal = analyzer.analyze(
            normalizer.normalize("I'm feeling a bit stressed about work")
        )

        assert signal.severity == CrisisSeverity.NONE
        assert signal.confidence == 0.0
        assert signal.matches == ()

    def test_deterministic(
        self,
        analyzer: LexicalSignalAnalyzer,
        normalizer: TextNormalizer,
    ) -> None:
        normalized = normalizer.normalize("I took too many pills and I'm scared")

        assert analyzer.analyze(normalized) == analyzer.analyze(normalized)


class TestInputHandling:
    """Tests for empty, malformed and non-English input."""

    @pytest.fixture
    def analyzer(self) -> LexicalSignalAnalyzer:
        return LexicalSignalAnalyzer()

    def test_empty_text(self, analyzer: LexicalSignalAnalyzer) -> None:
        signal = analyzer.analyze(NormalizedText.empty())

        assert signal.severity == CrisisSeverity.NONE
        assert signal.failure_reason is None

    def test_malformed_input_never_raises(self, analyzer: LexicalSignalAnalyzer) -> None:
        """Test a non-NormalizedText argument yields a failure note."""
        signal = analyzer.analyze("raw string")  # type: ignore[arg-type]

        assert signal.severity == CrisisSeverity.NONE
        assert "malformed input" in signal.failure_reason

    def test_spanish_keywords(self, analyzer: LexicalSignalAnalyzer) -> None:
        signal = analyzer.analyze(_normalized("quiero matarme esta noche", language="es"))

        assert signal.severity == CrisisSeverity.EMERGENCY
        assert signal.metadata["language_profile"] == "es"

    def test_unsupported_language_uses_fallback_factor(
        self,
        analyzer: LexicalSignalAnalyzer,
    ) -> None:
        """Test the English table stands in at reduced confidence."""
        signal = analyzer.analyze(
            _normalized("i'm going to kill myself tonight", language="fr")
        )

        assert signal.metadata["fallback_used"] is True
        assert signal.severity == CrisisSeverity.EMERGENCY
        assert signal.confidence == pytest.approx(0.6)

    def test_custom_fallback_factor(self) -> None:
        analyzer = LexicalSignalAnalyzer(DetectionSettings(fallback_confidence_factor=0.5))

        signal = analyzer.analyze(
            _normalized("i'm going to kill myself tonight", language="fr")
        )

        assert signal.confidence == pytest.approx(0.5)


class TestPatternTable:
    """Tests for pattern table validation."""

    def test_empty_table_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            LexicalSignalAnalyzer(pattern_table={})

    def test_supported_languages(self) -> None:
        analyzer = LexicalSignalAnalyzer()

        assert {"en", "es", "pt", "ar", "zh", "vi", "tl"} <= analyzer.supported_languages


class TestDeduplication:
    """Tests for overlapping match resolution."""

    def _match(self, term: str, position: int, confidence: float) -> KeywordMatch:
        return KeywordMatch(
            term=term,
            confidence=confidence,
            severity=CrisisSeverity.HIGH,
            category=CrisisCategory.SELF_HARM,
            position_in_text=position,
        )

    def test_keeps_highest_confidence_per_span(self) -> None:
        weak = self._match("hurt myself", 5, 0.7)
        strong = self._match("to hurt myself", 2, 0.9)
        separate = self._match("cutting myself", 40, 0.8)

        kept = LexicalSignalAnalyzer.deduplicate([weak, strong, separate])

        assert strong in kept
        assert separate in kept
        assert weak not in kept

    def test_order_independent(self) -> None:
        matches = [
            self._match("hurt myself", 5, 0.8),
            self._match("to hurt myself", 2, 0.8),
        ]

        assert LexicalSignalAnalyzer.deduplicate(matches) == LexicalSignalAnalyzer.deduplicate(
            list(reversed(matches))
        )
