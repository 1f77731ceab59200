"""
Crisis Analysis Service

Entry point of the crisis pipeline:

    Normalizer -> {Lexical, Statistical, Cultural} concurrently ->
    Aggregator -> Policy Engine -> Orchestrator -> CrisisAnalysisResult

SAFETY-CRITICAL: analyze_crisis() always returns a complete result.
Analyzer failures become degraded signals and backend failures become
escalation errors; nothing from either propagates to the caller.

ARCHITECTURE: Every collaborator is constructed once and injected.
Lexical and cultural analysis are CPU-bound and run in the default
executor so they never block the event loop.
"""

import asyncio
import time
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Optional, TypeVar
from uuid import uuid4

from crisisguard.config.logging_config import get_logger
from crisisguard.config.settings import Settings, get_settings
from crisisguard.domain.enums.crisis_severity import SignalSource
from crisisguard.domain.models.assessment_models import (
    AnalysisMetadata,
    CrisisAnalysisResult,
)
from crisisguard.domain.models.escalation_models import EscalationOutcome
from crisisguard.domain.models.signal_models import CrisisSignal
from crisisguard.infrastructure.metrics.prometheus_metrics import (
    track_analysis,
    track_analyzer,
)
from crisisguard.services.cultural.cultural_adjuster import (
    CulturalAdjustment,
    CulturalContextAdjuster,
)
from crisisguard.services.detection.lexical_analyzer import LexicalSignalAnalyzer
from crisisguard.services.detection.statistical_analyzer import (
    StatisticalSignalAnalyzer,
    build_scorer,
)
from crisisguard.services.detection.text_normalizer import NormalizedText, TextNormalizer
from crisisguard.services.safety.emergency_resources import EmergencyResourceResolver
from crisisguard.services.safety.escalation_backend import build_backend
from crisisguard.services.safety.escalation_orchestrator import EscalationOrchestrator
from crisisguard.services.safety.escalation_policy import (
    EscalationPolicyEngine,
    PolicyDecision,
)
from crisisguard.services.safety.retry_policy import RetryPolicy
from crisisguard.services.safety.risk_aggregator import AggregatedRisk, RiskAggregator

logger = get_logger(__name__)

T = TypeVar("T")

TRUNCATED_CONCERN = "input truncated; review manually"


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Per-request analysis options.

    Attributes:
        language_hint: ISO language code to prefer over detection
        cultural_context: Region name or alias; None for no cultural context
        country_code: Jurisdiction for crisis resources
    """

    language_hint: Optional[str] = None
    cultural_context: Optional[str] = None
    country_code: Optional[str] = None


class CrisisAnalysisService:
    """
    Crisis analysis pipeline.

    Usage:
        service = CrisisAnalysisService.from_settings(get_settings())
        result = await service.analyze_crisis(
            "I can't do this anymore",
            user_id="u1",
            options=AnalysisOptions(cultural_context="latino"),
        )
    """

    def __init__(
        self,
        normalizer: TextNormalizer,
        lexical: LexicalSignalAnalyzer,
        statistical: StatisticalSignalAnalyzer,
        cultural: CulturalContextAdjuster,
        aggregator: RiskAggregator,
        policy: EscalationPolicyEngine,
        orchestrator: EscalationOrchestrator,
    ) -> None:
        self._normalizer = normalizer
        self._lexical = lexical
        self._statistical = statistical
        self._cultural = cultural
        self._aggregator = aggregator
        self._policy = policy
        self._orchestrator = orchestrator

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CrisisAnalysisService":
        """
        Build the pipeline from configuration.

        Raises:
            ConfigurationError: Invalid pattern tables, unavailable scorer
                backend or unreadable resource file
        """
        settings = settings or get_settings()
        retry_policy = RetryPolicy.from_settings(settings.escalation)
        resolver = EmergencyResourceResolver(settings.monitoring.resources_config_path)

        return cls(
            normalizer=TextNormalizer(settings.detection),
            lexical=LexicalSignalAnalyzer(settings.detection),
            statistical=StatisticalSignalAnalyzer(
                build_scorer(settings.statistical),
                settings.statistical,
                retry_policy,
            ),
            cultural=CulturalContextAdjuster(),
            aggregator=RiskAggregator(settings.aggregation),
            policy=EscalationPolicyEngine(
                resolver,
                default_country_code=settings.escalation.default_country_code,
            ),
            orchestrator=EscalationOrchestrator(
                build_backend(settings.escalation),
                resolver,
                settings.escalation,
                retry_policy,
            ),
        )

    @property
    def orchestrator(self) -> EscalationOrchestrator:
        return self._orchestrator

    @property
    def statistical(self) -> StatisticalSignalAnalyzer:
        return self._statistical

    async def analyze_crisis(
        self,
        text: Any,
        user_id: Optional[str] = None,
        options: Optional[AnalysisOptions] = None,
    ) -> CrisisAnalysisResult:
        """
        Analyze one message and escalate when required and authorized.

        Args:
            text: Message text; non-string input yields a NONE result
            user_id: User identity; no escalation record is created without it
            options: Language, cultural and jurisdiction options

        Returns:
            CrisisAnalysisResult, always complete
        """
        options = options or AnalysisOptions()
        analysis_id = str(uuid4())
        start = time.perf_counter()

        # Step 1: Normalize
        normalized = self._normalizer.normalize(text, options.language_hint)

        # Step 2: Fan out to the three analyzers
        lexical, statistical, cultural = await asyncio.gather(
            self._timed(
                SignalSource.LEXICAL,
                asyncio.to_thread(self._lexical.analyze, normalized),
            ),
            self._timed(SignalSource.STATISTICAL, self._statistical.analyze(normalized)),
            self._timed(
                SignalSource.CULTURAL,
                asyncio.to_thread(
                    self._cultural.adjust, normalized, options.cultural_context
                ),
            ),
            return_exceptions=True,
        )

        lexical_signal = self._as_signal(SignalSource.LEXICAL, lexical)
        statistical_signal = self._as_signal(SignalSource.STATISTICAL, statistical)
        if isinstance(cultural, CulturalAdjustment):
            adjustment: Optional[CulturalAdjustment] = cultural
            cultural_signal = cultural.to_signal()
        else:
            adjustment = None
            cultural_signal = self._as_signal(SignalSource.CULTURAL, cultural)

        # Step 3: Fuse
        aggregated = self._aggregator.aggregate(
            [lexical_signal, statistical_signal, cultural_signal],
            adjustment,
        )

        # Step 4: Policy
        decision = self._policy.decide(
            aggregated,
            user_id=user_id,
            cultural=adjustment,
            country_code=options.country_code,
            language=normalized.language,
        )

        analysis_seconds = time.perf_counter() - start
        result = self._build_result(
            analysis_id,
            normalized,
            aggregated,
            decision,
            [lexical_signal, statistical_signal, cultural_signal],
            analysis_seconds,
        )
        track_analysis(aggregated.overall_severity.label, analysis_seconds)

        logger.info(
            "Crisis analysis completed",
            analysis_id=analysis_id,
            severity=aggregated.overall_severity.label,
            escalation_required=aggregated.escalation_required,
            degraded_sources=list(result.analysis_metadata.degraded_sources),
            processing_time_ms=round(analysis_seconds * 1000, 2),
        )

        # Step 5: Escalate (separate suspension point)
        if not aggregated.escalation_required:
            return result

        outcome = await self._escalate(analysis_id, aggregated, decision, user_id, normalized)
        return replace(result, escalation_workflow=outcome)

    async def _escalate(
        self,
        analysis_id: str,
        aggregated: AggregatedRisk,
        decision: PolicyDecision,
        user_id: Optional[str],
        normalized: NormalizedText,
    ) -> EscalationOutcome:
        if not decision.authorized:
            logger.warning(
                "Escalation required without user identity",
                analysis_id=analysis_id,
                recommended_tier=decision.recommended_tier.value,
            )
            return EscalationOutcome(
                escalation_initiated=False,
                recommended_tier=decision.recommended_tier,
                trigger=decision.trigger,
            )

        context = {
            "analysis_id": analysis_id,
            "language": normalized.language,
            "categories": sorted(c.value for c in aggregated.categories),
            "intervention_urgency": aggregated.assessment.intervention_urgency.value,
        }
        return await self._orchestrator.escalate(
            decision,
            user_id,
            context=context,
            severity=aggregated.overall_severity,
            immediate_risk=aggregated.assessment.immediate_risk,
        )

    @staticmethod
    async def _timed(source: SignalSource, awaitable: Awaitable[T]) -> T:
        start = time.perf_counter()
        degraded = True
        try:
            result = await awaitable
            degraded = bool(getattr(result, "degraded", False))
            return result
        finally:
            track_analyzer(source.value, time.perf_counter() - start, degraded)

    @staticmethod
    def _as_signal(source: SignalSource, outcome: Any) -> CrisisSignal:
        if isinstance(outcome, CrisisSignal):
            return outcome
        if isinstance(outcome, BaseException):
            logger.error(
                "Analyzer raised",
                source=source.value,
                error_type=type(outcome).__name__,
            )
            return CrisisSignal.degraded_signal(
                source, f"{source.value} analyzer error: {type(outcome).__name__}"
            )
        return CrisisSignal.degraded_signal(
            source, f"{source.value} analyzer returned {type(outcome).__name__}"
        )

    @staticmethod
    def _build_result(
        analysis_id: str,
        normalized: NormalizedText,
        aggregated: AggregatedRisk,
        decision: PolicyDecision,
        signals: list[CrisisSignal],
        analysis_seconds: float,
    ) -> CrisisAnalysisResult:
        flagged_concerns = aggregated.flagged_concerns
        if normalized.truncated:
            flagged_concerns += (TRUNCATED_CONCERN,)

        metadata = AnalysisMetadata(
            analysis_id=analysis_id,
            language=normalized.language,
            language_confidence=normalized.language_confidence,
            mixed_language=normalized.mixed_language,
            services_used=tuple(s.source.value for s in signals if not s.degraded),
            degraded_sources=tuple(s.value for s in aggregated.degraded_sources),
            flagged_concerns=flagged_concerns,
            processing_time_ms=analysis_seconds * 1000,
            cultural_rationale=aggregated.cultural_rationale,
        )
        return CrisisAnalysisResult(
            has_crisis_indicators=aggregated.has_crisis_indicators,
            overall_severity=aggregated.overall_severity,
            escalation_required=aggregated.escalation_required,
            emergency_services_required=aggregated.emergency_services_required,
            risk_assessment=aggregated.assessment,
            intervention_recommendations=decision.recommendations,
            analysis_metadata=metadata,
            monitoring_plan=decision.monitoring_plan,
        )

    async def close(self) -> None:
        await self._orchestrator.close()
