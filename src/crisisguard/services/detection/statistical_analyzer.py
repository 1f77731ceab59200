"""
Statistical Signal Analyzer

Scorer contract, the default multilingual keyword scorer, and the
timeout wrapper that turns scorer failures into degraded signals.

SAFETY-CRITICAL: The scorer is fallible (it may be a remote or
model-backed service). A slow or broken scorer must never delay the
analysis past its timeout, and must never be mistaken for a "no
risk" read.

ARCHITECTURE: RiskScorer implementations are swappable without
touching the analyzer. Select the backend with
CRISISGUARD_STATISTICAL_SCORER_BACKEND (keyword | transformers).
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from crisisguard.config.logging_config import get_logger
from crisisguard.config.settings import StatisticalSettings
from crisisguard.domain.enums.crisis_severity import (
    CrisisSeverity,
    InterventionUrgency,
    SignalSource,
)
from crisisguard.domain.exceptions import ConfigurationError, ScorerError
from crisisguard.domain.models.signal_models import CrisisSignal, RiskEstimate
from crisisguard.services.detection.crisis_patterns import (
    contains_phrase,
    contains_unnegated_phrase,
)
from crisisguard.services.detection.multilingual_keywords import (
    HELP_SEEKING_FACTOR,
    KeywordTable,
    WeightedKeyword,
    get_keyword_table,
)
from crisisguard.services.detection.text_normalizer import NormalizedText
from crisisguard.services.safety.retry_policy import RetryPolicy

logger = get_logger(__name__)


@dataclass(frozen=True)
class RealTimeRisk:
    """Scorer's numeric risk read (each 0-100) and derived urgency."""

    immediate: float = 0.0
    short_term: float = 0.0
    long_term: float = 0.0
    urgency: InterventionUrgency = InterventionUrgency.NONE

    def to_estimate(self) -> RiskEstimate:
        return RiskEstimate(
            immediate=self.immediate,
            short_term=self.short_term,
            long_term=self.long_term,
        ).clamped()


@dataclass(frozen=True)
class ScoreResult:
    """
    Output of a RiskScorer.

    Attributes:
        severity_level: Severity bucket
        confidence: Confidence in the severity (0.0-1.0)
        real_time_risk: Numeric risk and urgency
        risk_indicators: Phrases or labels backing the score
        cultural_contexts: Cultural tags of matched expressions
    """

    severity_level: CrisisSeverity
    confidence: float
    real_time_risk: RealTimeRisk
    risk_indicators: tuple[str, ...] = ()
    cultural_contexts: tuple[str, ...] = ()


class RiskScorer(ABC):
    """
    Abstract statistical risk scorer.

    Implementations raise ScorerError (with is_retryable) on failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Scorer identifier used in logs and signal metadata."""
        pass

    @abstractmethod
    async def score(self, text: str, language: str) -> ScoreResult:
        """
        Score one message.

        Args:
            text: Lower-cased normalized text
            language: ISO 639-1 language code

        Returns:
            ScoreResult

        Raises:
            ScorerError: If the scorer cannot produce a score
        """
        pass

    async def load(self) -> None:
        """Load any resources the scorer needs."""

    def is_loaded(self) -> bool:
        return True


class KeywordRiskScorer(RiskScorer):
    """
    Deterministic weighted keyword scorer.

    Sums the weights of every urgent, moderate and cultural phrase
    present, plus help-seeking phrases at 80% of their weight.

    Score to severity:
    - >= 10 with an urgent keyword: EMERGENCY
    - >= 10 without one: HIGH
    - >= 7: HIGH
    - >= 4: MODERATE
    - > 0: LOW
    - 0: NONE
    """

    @property
    def name(self) -> str:
        return "keyword"

    async def score(self, text: str, language: str) -> ScoreResult:
        return self.score_sync(text, language)

    def score_sync(self, text: str, language: str) -> ScoreResult:
        table, fallback_used = get_keyword_table(language)
        table_language = table.language

        total = 0.0
        indicators: list[str] = []
        contexts: list[str] = []
        has_urgent = False

        for group, factor in self._groups(table):
            # Negated urgent phrases ("not going to kill myself") do not count
            matches = contains_unnegated_phrase if group is table.urgent else contains_phrase
            for keyword in group:
                if not matches(text, keyword.phrase, table_language):
                    continue
                total += keyword.weight * factor
                indicators.append(keyword.phrase)
                contexts.extend(c for c in keyword.contexts if c not in contexts)
                if group is table.urgent:
                    has_urgent = True

        severity = self.severity_for_score(total, has_urgent)
        confidence = min(0.95, 0.5 + 0.04 * total)

        multiplier = 9 if has_urgent else 6
        immediate = min(100.0, total * multiplier)
        risk = RealTimeRisk(
            immediate=immediate,
            short_term=immediate * 0.8,
            long_term=immediate * 0.6,
            urgency=InterventionUrgency.from_risk(immediate, severity),
        )

        if fallback_used:
            contexts.append("fallback_language_table")

        return ScoreResult(
            severity_level=severity,
            confidence=confidence,
            real_time_risk=risk,
            risk_indicators=tuple(indicators),
            cultural_contexts=tuple(contexts),
        )

    @staticmethod
    def _groups(table: KeywordTable) -> tuple[tuple[tuple[WeightedKeyword, ...], float], ...]:
        return (
            (table.urgent, 1.0),
            (table.moderate, 1.0),
            (table.cultural, 1.0),
            (table.help_seeking, HELP_SEEKING_FACTOR),
        )

    @staticmethod
    def severity_for_score(score: float, has_urgent: bool) -> CrisisSeverity:
        if score >= 10:
            return CrisisSeverity.EMERGENCY if has_urgent else CrisisSeverity.HIGH
        if score >= 7:
            return CrisisSeverity.HIGH
        if score >= 4:
            return CrisisSeverity.MODERATE
        if score > 0:
            return CrisisSeverity.LOW
        return CrisisSeverity.NONE


class StatisticalSignalAnalyzer:
    """
    Runs a RiskScorer under a hard timeout.

    Transient scorer errors are retried with the shared retry policy;
    the whole budget, retries included, is bounded by the timeout.
    Timeout or error yields a degraded signal (severity UNKNOWN,
    confidence 0) carrying the failure reason.
    """

    def __init__(
        self,
        scorer: RiskScorer,
        settings: Optional[StatisticalSettings] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self._scorer = scorer
        self._settings = settings or StatisticalSettings()
        self._retry_policy = retry_policy or RetryPolicy()

    @property
    def scorer(self) -> RiskScorer:
        return self._scorer

    async def analyze(self, normalized: NormalizedText) -> CrisisSignal:
        """
        Score normalized text.

        Args:
            normalized: Output of TextNormalizer

        Returns:
            Statistical CrisisSignal; degraded on timeout or error
        """
        if normalized.is_empty:
            return CrisisSignal.empty(SignalSource.STATISTICAL)

        timeout = self._settings.timeout_seconds
        start = time.perf_counter()

        try:
            result = await asyncio.wait_for(
                self._score_with_retry(normalized.lowered, normalized.language),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Statistical scorer timed out",
                scorer=self._scorer.name,
                timeout_seconds=timeout,
            )
            return CrisisSignal.degraded_signal(
                SignalSource.STATISTICAL,
                f"Statistical scorer timed out after {timeout:.2f}s",
            )
        except ScorerError as e:
            logger.warning(
                "Statistical scorer failed",
                scorer=e.scorer,
                retryable=e.is_retryable,
                error=str(e),
            )
            return CrisisSignal.degraded_signal(
                SignalSource.STATISTICAL,
                f"Statistical scorer error: {e}",
            )
        except Exception as e:
            logger.error(
                "Unexpected statistical scorer error",
                scorer=self._scorer.name,
                error_type=type(e).__name__,
            )
            return CrisisSignal.degraded_signal(
                SignalSource.STATISTICAL,
                f"Unexpected scorer error: {type(e).__name__}",
            )

        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "Statistical analysis complete",
            scorer=self._scorer.name,
            severity=result.severity_level.label,
            latency_ms=round(latency_ms, 2),
        )
        return self._to_signal(result)

    async def _score_with_retry(self, text: str, language: str) -> ScoreResult:
        async for attempt in self._retry_policy.retrying():
            with attempt:
                return await self._scorer.score(text, language)
        raise ScorerError("Retry loop exited without a result", scorer=self._scorer.name)

    def _to_signal(self, result: ScoreResult) -> CrisisSignal:
        return CrisisSignal(
            source=SignalSource.STATISTICAL,
            severity=result.severity_level,
            confidence=max(0.0, min(1.0, result.confidence)),
            risk=result.real_time_risk.to_estimate(),
            metadata={
                "scorer": self._scorer.name,
                "urgency": result.real_time_risk.urgency.value,
                "risk_indicators": result.risk_indicators,
                "cultural_contexts": result.cultural_contexts,
            },
        )


def build_scorer(settings: StatisticalSettings) -> RiskScorer:
    """
    Build the configured scorer.

    Raises:
        ConfigurationError: If the transformers backend is selected but
            the "ml" extra is not installed
    """
    if settings.scorer_backend == "transformers":
        try:
            from crisisguard.services.detection.transformer_scorer import (
                TransformerRiskScorer,
            )
        except ImportError as e:
            raise ConfigurationError(
                "Scorer backend 'transformers' requires the 'ml' extra "
                "(pip install crisisguard[ml])"
            ) from e
        return TransformerRiskScorer(model_name=settings.model_name)

    return KeywordRiskScorer()
