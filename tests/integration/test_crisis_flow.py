"""
Integration Tests for the Crisis Pipeline

Runs messages through the full normalizer -> analyzers -> aggregator
-> policy -> orchestrator chain with an in-memory escalation backend.
"""

import time

import pytest

from crisisguard.domain.enums.crisis_severity import CrisisSeverity
from crisisguard.domain.enums.escalation import (
    EscalationStatus,
    EscalationTier,
    EscalationTrigger,
)
from crisisguard.domain.exceptions import BackendUnavailableError, ScorerError
from crisisguard.domain.models.assessment_models import MonitoringFrequency, RecommendationType
from crisisguard.services.detection.statistical_analyzer import RiskScorer, ScoreResult
from crisisguard.services.orchestration.crisis_analysis_service import (
    AnalysisOptions,
    CrisisAnalysisService,
    TRUNCATED_CONCERN,
)
from crisisguard.services.safety.escalation_backend import InMemoryEscalationBackend


class BrokenScorer(RiskScorer):
    """Scorer that always fails permanently."""

    @property
    def name(self) -> str:
        return "broken"

    async def score(self, text: str, language: str) -> ScoreResult:
        raise ScorerError("model unavailable", scorer=self.name)


class TestEmergencyFlow:
    """Emergency messages with and without a user identity."""

    @pytest.mark.asyncio
    async def test_emergency_escalates(
        self,
        service: CrisisAnalysisService,
        backend: InMemoryEscalationBackend,
    ) -> None:
        result = await service.analyze_crisis("I'm going to kill myself tonight", user_id="u1")

        assert result.overall_severity == CrisisSeverity.EMERGENCY
        assert result.escalation_required is True
        assert result.emergency_services_required is True
        assert result.risk_assessment.immediate_risk >= 85
        assert result.intervention_recommendations[0].type == RecommendationType.IMMEDIATE
        assert result.monitoring_plan.frequency == MonitoringFrequency.CONTINUOUS

        workflow = result.escalation_workflow
        assert workflow.escalation_initiated is True
        assert workflow.status == EscalationStatus.INITIATED
        assert workflow.recommended_tier == EscalationTier.EMERGENCY_SERVICES
        assert workflow.trigger == EscalationTrigger.SUICIDE_ATTEMPT

        request = backend.requests[0]
        assert request.user_id == "u1"
        assert request.context["language"] == "en"
        assert "suicidal-ideation" in request.context["categories"]

    @pytest.mark.asyncio
    async def test_backend_failure_reported(
        self,
        service: CrisisAnalysisService,
        backend: InMemoryEscalationBackend,
    ) -> None:
        """Test a down backend still yields a complete result."""
        backend.fail_next(BackendUnavailableError(), BackendUnavailableError())

        result = await service.analyze_crisis("I'm going to kill myself tonight", user_id="u1")

        assert result.overall_severity == CrisisSeverity.EMERGENCY
        workflow = result.escalation_workflow
        assert workflow.escalation_initiated is False
        assert workflow.escalation_error == "Escalation backend unavailable"
        assert workflow.recommended_tier == EscalationTier.EMERGENCY_SERVICES

    @pytest.mark.asyncio
    async def test_violence_without_identity(
        self,
        service: CrisisAnalysisService,
        backend: InMemoryEscalationBackend,
    ) -> None:
        result = await service.analyze_crisis("I want to hurt someone")

        assert result.overall_severity == CrisisSeverity.EMERGENCY
        workflow = result.escalation_workflow
        assert workflow.escalation_initiated is False
        assert workflow.escalation_error is None
        assert workflow.recommended_tier == EscalationTier.EMERGENCY_SERVICES
        assert workflow.trigger == EscalationTrigger.VIOLENCE_THREAT
        assert backend.call_count == 0

    @pytest.mark.asyncio
    async def test_emergency_at_end_of_long_message(
        self,
        service: CrisisAnalysisService,
        backend: InMemoryEscalationBackend,
    ) -> None:
        """Test a crisis statement after a long preamble still escalates."""
        preamble = "I have been struggling for a long time. " * 300
        text = preamble + "I'm going to kill myself tonight"

        result = await service.analyze_crisis(text, user_id="u1")

        assert result.overall_severity == CrisisSeverity.EMERGENCY
        assert result.escalation_workflow.escalation_initiated is True
        assert TRUNCATED_CONCERN in result.analysis_metadata.flagged_concerns
        assert backend.call_count == 1


class TestBenignFlow:

    @pytest.mark.asyncio
    async def test_no_indicators(
        self,
        service: CrisisAnalysisService,
        backend: InMemoryEscalationBackend,
    ) -> None:
        result = await service.analyze_crisis(
            "I'm feeling a bit stressed about work", user_id="u2"
        )

        assert result.has_crisis_indicators is False
        assert result.overall_severity == CrisisSeverity.NONE
        assert result.escalation_required is False
        assert result.escalation_workflow is None
        assert [r.type for r in result.intervention_recommendations] == [
            RecommendationType.RESOURCES
        ]
        assert backend.call_count == 0
        assert TRUNCATED_CONCERN not in result.analysis_metadata.flagged_concerns

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", None, 42])
    async def test_empty_or_malformed_input(
        self,
        service: CrisisAnalysisService,
        text: object,
    ) -> None:
        result = await service.analyze_crisis(text, user_id="u2")

        assert result.overall_severity == CrisisSeverity.NONE
        assert result.escalation_workflow is None


class TestDegradedFlow:

    @pytest.mark.asyncio
    async def test_failed_scorer_degrades(
        self,
        service_factory,
        backend: InMemoryEscalationBackend,
    ) -> None:
        """Test the lexical read still escalates while the scorer is down."""
        service = service_factory(backend, scorer=BrokenScorer())

        result = await service.analyze_crisis("I'm going to kill myself tonight", user_id="u1")

        metadata = result.analysis_metadata
        assert metadata.degraded_sources == ("statistical",)
        assert metadata.services_used == ("lexical", "cultural")
        assert any(c.startswith("statistical:") for c in metadata.flagged_concerns)
        assert result.overall_severity == CrisisSeverity.EMERGENCY
        assert result.risk_assessment.confidence_score == pytest.approx(0.8)
        assert result.escalation_workflow.escalation_initiated is True


class TestCulturalFlow:

    @pytest.mark.asyncio
    async def test_cultural_context_recorded(self, service: CrisisAnalysisService) -> None:
        result = await service.analyze_crisis(
            "No puedo más",
            options=AnalysisOptions(cultural_context="latino"),
        )

        assert result.analysis_metadata.language == "es"
        assert result.analysis_metadata.cultural_rationale != ""
        assert result.has_crisis_indicators is True
        considerations = result.intervention_recommendations[0].cultural_considerations
        assert "Family involvement: high" in considerations


class TestPipelineProperties:

    @pytest.mark.asyncio
    async def test_deterministic(self, service: CrisisAnalysisService) -> None:
        text = "I feel hopeless and I'm a burden to everyone"

        first = (await service.analyze_crisis(text)).to_dict()
        second = (await service.analyze_crisis(text)).to_dict()

        for result in (first, second):
            result["analysis_metadata"].pop("analysis_id")
            result["analysis_metadata"].pop("processing_time_ms")
        assert first == second

    @pytest.mark.asyncio
    async def test_latency(self, service: CrisisAnalysisService) -> None:
        start = time.perf_counter()

        result = await service.analyze_crisis("I'm going to kill myself tonight", user_id="u1")

        assert time.perf_counter() - start < 2.0
        assert result.analysis_metadata.processing_time_ms < 2000
