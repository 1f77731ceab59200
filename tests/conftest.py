"""Tests configuration and fixtures."""

from typing import Callable, Iterator, Optional

import pytest
from fastapi.testclient import TestClient

from crisisguard.config import Settings
from crisisguard.config.settings import EscalationSettings
from crisisguard.main import create_application
from crisisguard.services.cultural.cultural_adjuster import CulturalContextAdjuster
from crisisguard.services.detection.lexical_analyzer import LexicalSignalAnalyzer
from crisisguard.services.detection.statistical_analyzer import (
    KeywordRiskScorer,
    RiskScorer,
    StatisticalSignalAnalyzer,
)
from crisisguard.services.detection.text_normalizer import TextNormalizer
from crisisguard.services.orchestration.crisis_analysis_service import CrisisAnalysisService
from crisisguard.services.safety.emergency_resources import EmergencyResourceResolver
from crisisguard.services.safety.escalation_backend import InMemoryEscalationBackend
from crisisguard.services.safety.escalation_orchestrator import EscalationOrchestrator
from crisisguard.services.safety.escalation_policy import EscalationPolicyEngine
from crisisguard.services.safety.retry_policy import RetryPolicy
from crisisguard.services.safety.risk_aggregator import RiskAggregator

ServiceFactory = Callable[..., CrisisAnalysisService]


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with zero retry backoff."""
    return Settings(
        env="development",
        debug=True,
        escalation=EscalationSettings(
            backend_timeout_seconds=1.0,
            backoff_multiplier=0.0,
            backoff_min_seconds=0.0,
            backoff_max_seconds=0.0,
        ),
    )


@pytest.fixture
def retry_policy(test_settings: Settings) -> RetryPolicy:
    return RetryPolicy.from_settings(test_settings.escalation)


@pytest.fixture
def backend() -> InMemoryEscalationBackend:
    return InMemoryEscalationBackend()


@pytest.fixture
def orchestrator(
    backend: InMemoryEscalationBackend,
    test_settings: Settings,
    retry_policy: RetryPolicy,
) -> EscalationOrchestrator:
    return EscalationOrchestrator(
        backend,
        EmergencyResourceResolver(),
        test_settings.escalation,
        retry_policy,
    )


@pytest.fixture
def service_factory(test_settings: Settings, retry_policy: RetryPolicy) -> ServiceFactory:
    """Build a fully wired pipeline around a given backend and scorer."""

    def _build(
        backend: InMemoryEscalationBackend,
        scorer: Optional[RiskScorer] = None,
        settings: Optional[Settings] = None,
    ) -> CrisisAnalysisService:
        settings = settings or test_settings
        resolver = EmergencyResourceResolver()
        return CrisisAnalysisService(
            normalizer=TextNormalizer(settings.detection),
            lexical=LexicalSignalAnalyzer(settings.detection),
            statistical=StatisticalSignalAnalyzer(
                scorer or KeywordRiskScorer(),
                settings.statistical,
                retry_policy,
            ),
            cultural=CulturalContextAdjuster(),
            aggregator=RiskAggregator(settings.aggregation),
            policy=EscalationPolicyEngine(resolver),
            orchestrator=EscalationOrchestrator(
                backend, resolver, settings.escalation, retry_policy
            ),
        )

    return _build


@pytest.fixture
def service(
    service_factory: ServiceFactory,
    backend: InMemoryEscalationBackend,
) -> CrisisAnalysisService:
    return service_factory(backend)


@pytest.fixture
def client(test_settings: Settings, service: CrisisAnalysisService) -> Iterator[TestClient]:
    """Test client with the application lifespan running."""
    app = create_application(settings=test_settings, service=service)
    with TestClient(app) as test_client:
        yield test_client
