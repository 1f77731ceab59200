"""
Safety services package.

Risk fusion, escalation policy, escalation workflow and the crisis
resource store.
"""

from crisisguard.services.safety.emergency_resources import (
    EmergencyContact,
    EmergencyResource,
    EmergencyResourceResolver,
)
from crisisguard.services.safety.escalation_backend import (
    EscalationBackend,
    HttpEscalationBackend,
    InMemoryEscalationBackend,
    build_backend,
)
from crisisguard.services.safety.escalation_orchestrator import (
    EscalationOrchestrator,
    StatusChange,
)
from crisisguard.services.safety.escalation_policy import (
    EscalationPolicyEngine,
    PolicyDecision,
)
from crisisguard.services.safety.retry_policy import RetryPolicy
from crisisguard.services.safety.risk_aggregator import AggregatedRisk, RiskAggregator

__all__ = [
    "AggregatedRisk",
    "EmergencyContact",
    "EmergencyResource",
    "EmergencyResourceResolver",
    "EscalationBackend",
    "EscalationOrchestrator",
    "EscalationPolicyEngine",
    "HttpEscalationBackend",
    "InMemoryEscalationBackend",
    "PolicyDecision",
    "RetryPolicy",
    "RiskAggregator",
    "StatusChange",
    "build_backend",
]
