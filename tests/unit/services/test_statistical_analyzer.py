"""
Unit Tests for Statistical Signal Analyzer

Tests the keyword scorer, the timeout wrapper and retry behavior.
"""

import asyncio

import pytest

from crisisguard.config.settings import StatisticalSettings
from crisisguard.domain.enums.crisis_severity import (
    CrisisSeverity,
    InterventionUrgency,
    SignalSource,
)
from crisisguard.domain.exceptions import ScorerError
from crisisguard.services.detection.statistical_analyzer import (
    KeywordRiskScorer,
    RealTimeRisk,
    RiskScorer,
    ScoreResult,
    StatisticalSignalAnalyzer,
    build_scorer,
)
from crisisguard.services.detection.text_normalizer import NormalizedText, TextNormalizer
from crisisguard.services.safety.retry_policy import RetryPolicy

FAST_RETRY = RetryPolicy(
    max_attempts=2,
    backoff_multiplier=0.0,
    backoff_min_seconds=0.0,
    backoff_max_seconds=0.0,
)

FIXED_RESULT = ScoreResult(
    severity_level=CrisisSeverity.HIGH,
    confidence=0.8,
    real_time_risk=RealTimeRisk(immediate=75, short_term=60, long_term=45),
)


class SlowScorer(RiskScorer):
    """Scorer that never answers in time."""

    @property
    def name(self) -> str:
        return "slow"

    async def score(self, text: str, language: str) -> ScoreResult:
        await asyncio.sleep(5)
        return FIXED_RESULT


class FlakyScorer(RiskScorer):
    """Scorer that raises queued errors before answering."""

    def __init__(self, *errors: Exception) -> None:
        self._errors = list(errors)
        self.calls = 0

    @property
    def name(self) -> str:
        return "flaky"

    async def score(self, text: str, language: str) -> ScoreResult:
        self.calls += 1
        if self._errors:
            raise self._errors.pop(0)
        return FIXED_RESULT


def _normalized(text: str) -> NormalizedText:
    return TextNormalizer().normalize(text)


class TestKeywordRiskScorer:
    """Tests for the default keyword scorer."""

    @pytest.fixture
    def scorer(self) -> KeywordRiskScorer:
        return KeywordRiskScorer()

    def test_urgent_keyword_is_emergency(self, scorer: KeywordRiskScorer) -> None:
        result = scorer.score_sync("i want to kill myself", "en")

        assert result.severity_level == CrisisSeverity.EMERGENCY
        assert result.confidence == pytest.approx(0.9)
        assert result.real_time_risk.immediate == pytest.approx(90.0)
        assert result.real_time_risk.urgency == InterventionUrgency.IMMEDIATE
        assert "kill myself" in result.risk_indicators

    @pytest.mark.parametrize(
        "text",
        ["i am not going to kill myself", "i would never kill myself"],
    )
    def test_negated_urgent_keyword_ignored(self, scorer: KeywordRiskScorer, text: str) -> None:
        result = scorer.score_sync(text, "en")

        assert result.severity_level == CrisisSeverity.NONE
        assert "kill myself" not in result.risk_indicators

    def test_unnegated_repeat_still_counts(self, scorer: KeywordRiskScorer) -> None:
        """Test one negated mention does not hide a later plain one."""
        text = (
            "i told my sister i would never kill myself, back when things were "
            "still good at home. now i am going to kill myself tonight"
        )

        result = scorer.score_sync(text, "en")

        assert result.severity_level == CrisisSeverity.EMERGENCY

    def test_moderate_keywords_accumulate(self, scorer: KeywordRiskScorer) -> None:
        """Test several moderate keywords reach HIGH without an urgent one."""
        result = scorer.score_sync("i feel hopeless and alone", "en")

        assert result.severity_level == CrisisSeverity.HIGH
        assert result.real_time_risk.immediate == pytest.approx(72.0)

    def test_help_seeking_is_discounted(self, scorer: KeywordRiskScorer) -> None:
        result = scorer.score_sync("i need help", "en")

        assert result.severity_level == CrisisSeverity.MODERATE
        assert result.real_time_risk.immediate == pytest.approx(4.8 * 6)

    def test_no_keywords(self, scorer: KeywordRiskScorer) -> None:
        result = scorer.score_sync("i'm feeling a bit stressed about work", "en")

        assert result.severity_level == CrisisSeverity.NONE
        assert result.real_time_risk.immediate == 0.0

    def test_cultural_contexts_reported(self, scorer: KeywordRiskScorer) -> None:
        result = scorer.score_sync("me siento sola, dios mío", "es")

        assert result.severity_level == CrisisSeverity.HIGH
        assert "religious" in result.cultural_contexts

    def test_unsupported_language_falls_back(self, scorer: KeywordRiskScorer) -> None:
        result = scorer.score_sync("i feel hopeless", "de")

        assert "fallback_language_table" in result.cultural_contexts

    @pytest.mark.parametrize(
        "score, has_urgent, expected",
        [
            (0, False, CrisisSeverity.NONE),
            (2, False, CrisisSeverity.LOW),
            (4, False, CrisisSeverity.MODERATE),
            (7, False, CrisisSeverity.HIGH),
            (10, False, CrisisSeverity.HIGH),
            (10, True, CrisisSeverity.EMERGENCY),
        ],
    )
    def test_severity_for_score(
        self,
        score: float,
        has_urgent: bool,
        expected: CrisisSeverity,
    ) -> None:
        assert KeywordRiskScorer.severity_for_score(score, has_urgent) == expected


class TestStatisticalSignalAnalyzer:
    """Tests for the timeout and retry wrapper."""

    @pytest.mark.asyncio
    async def test_successful_score(self) -> None:
        analyzer = StatisticalSignalAnalyzer(KeywordRiskScorer(), retry_policy=FAST_RETRY)

        signal = await analyzer.analyze(_normalized("I want to kill myself"))

        assert signal.source == SignalSource.STATISTICAL
        assert signal.severity == CrisisSeverity.EMERGENCY
        assert signal.degraded is False
        assert signal.metadata["scorer"] == "keyword"

    @pytest.mark.asyncio
    async def test_empty_text_skips_scorer(self) -> None:
        scorer = FlakyScorer()
        analyzer = StatisticalSignalAnalyzer(scorer, retry_policy=FAST_RETRY)

        signal = await analyzer.analyze(NormalizedText.empty())

        assert signal.severity == CrisisSeverity.NONE
        assert scorer.calls == 0

    @pytest.mark.asyncio
    async def test_timeout_yields_degraded_signal(self) -> None:
        """Test a slow scorer is cut off at the configured timeout."""
        analyzer = StatisticalSignalAnalyzer(
            SlowScorer(),
            StatisticalSettings(timeout_seconds=0.05),
            FAST_RETRY,
        )

        signal = await analyzer.analyze(_normalized("I feel hopeless"))

        assert signal.degraded is True
        assert signal.severity == CrisisSeverity.UNKNOWN
        assert signal.confidence == 0.0
        assert signal.failure_reason.startswith("Statistical scorer timed out")

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self) -> None:
        scorer = FlakyScorer(ScorerError("busy", scorer="flaky", is_retryable=True))
        analyzer = StatisticalSignalAnalyzer(scorer, retry_policy=FAST_RETRY)

        signal = await analyzer.analyze(_normalized("I feel hopeless"))

        assert signal.degraded is False
        assert signal.severity == CrisisSeverity.HIGH
        assert scorer.calls == 2

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(self) -> None:
        scorer = FlakyScorer(ScorerError("bad model", scorer="flaky"))
        analyzer = StatisticalSignalAnalyzer(scorer, retry_policy=FAST_RETRY)

        signal = await analyzer.analyze(_normalized("I feel hopeless"))

        assert signal.degraded is True
        assert "bad model" in signal.failure_reason
        assert scorer.calls == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_is_degraded(self) -> None:
        scorer = FlakyScorer(RuntimeError("boom"))
        analyzer = StatisticalSignalAnalyzer(scorer, retry_policy=FAST_RETRY)

        signal = await analyzer.analyze(_normalized("I feel hopeless"))

        assert signal.degraded is True
        assert signal.failure_reason == "Unexpected scorer error: RuntimeError"


class TestBuildScorer:
    """Tests for scorer selection."""

    def test_keyword_backend_by_default(self) -> None:
        assert isinstance(build_scorer(StatisticalSettings()), KeywordRiskScorer)
