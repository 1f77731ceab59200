"""
Unit Tests for Domain Enumerations
"""

import pytest

from crisisguard.domain.enums.crisis_severity import CrisisSeverity, InterventionUrgency
from crisisguard.domain.enums.escalation import EscalationStatus, EscalationTier


class TestCrisisSeverity:

    @pytest.mark.parametrize(
        "label, severity",
        [
            ("emergency", CrisisSeverity.EMERGENCY),
            ("Critical", CrisisSeverity.HIGH),
            ("medium", CrisisSeverity.MODERATE),
            ("none", CrisisSeverity.NONE),
            ("bogus", CrisisSeverity.UNKNOWN),
            ("", CrisisSeverity.UNKNOWN),
        ],
    )
    def test_from_label(self, label: str, severity: CrisisSeverity) -> None:
        assert CrisisSeverity.from_label(label) == severity

    def test_unknown_below_none(self) -> None:
        assert max(CrisisSeverity.UNKNOWN, CrisisSeverity.NONE) == CrisisSeverity.NONE

    @pytest.mark.parametrize(
        "risk, severity, urgency",
        [
            (10, CrisisSeverity.EMERGENCY, InterventionUrgency.IMMEDIATE),
            (90, CrisisSeverity.LOW, InterventionUrgency.IMMEDIATE),
            (70, CrisisSeverity.HIGH, InterventionUrgency.HIGH),
            (50, CrisisSeverity.MODERATE, InterventionUrgency.MODERATE),
            (30, CrisisSeverity.LOW, InterventionUrgency.LOW),
            (29, CrisisSeverity.LOW, InterventionUrgency.NONE),
        ],
    )
    def test_urgency_from_risk(
        self,
        risk: int,
        severity: CrisisSeverity,
        urgency: InterventionUrgency,
    ) -> None:
        assert InterventionUrgency.from_risk(risk, severity) == urgency


class TestEscalationTier:

    def test_next_tier(self) -> None:
        assert EscalationTier.PEER_SUPPORT.next_tier() == EscalationTier.CRISIS_COUNSELOR
        assert EscalationTier.EMERGENCY_SERVICES.next_tier() == EscalationTier.EMERGENCY_SERVICES

    def test_from_severity(self) -> None:
        assert EscalationTier.from_severity(CrisisSeverity.UNKNOWN) == EscalationTier.PEER_SUPPORT
        assert EscalationTier.from_severity(CrisisSeverity.HIGH) == EscalationTier.EMERGENCY_TEAM


class TestEscalationStatus:
    """Tests for the lifecycle transition table."""

    @pytest.mark.parametrize(
        "current, target",
        [
            (EscalationStatus.INITIATED, EscalationStatus.RESPONDER_ASSIGNED),
            (EscalationStatus.INITIATED, EscalationStatus.FAILED),
            (EscalationStatus.RESPONDER_ASSIGNED, EscalationStatus.IN_PROGRESS),
            (EscalationStatus.IN_PROGRESS, EscalationStatus.ESCALATED_FURTHER),
        ],
    )
    def test_allowed(self, current: EscalationStatus, target: EscalationStatus) -> None:
        assert current.can_transition_to(target) is True

    @pytest.mark.parametrize(
        "current, target",
        [
            (EscalationStatus.IN_PROGRESS, EscalationStatus.RESPONDER_ASSIGNED),
            (EscalationStatus.RESOLVED, EscalationStatus.IN_PROGRESS),
            (EscalationStatus.FAILED, EscalationStatus.RESOLVED),
            (EscalationStatus.INITIATED, EscalationStatus.INITIATED),
        ],
    )
    def test_rejected(self, current: EscalationStatus, target: EscalationStatus) -> None:
        assert current.can_transition_to(target) is False

    def test_from_backend(self) -> None:
        assert EscalationStatus.from_backend("in-progress") == EscalationStatus.IN_PROGRESS
        assert EscalationStatus.from_backend(None) == EscalationStatus.INITIATED
        assert EscalationStatus.from_backend("queued") == EscalationStatus.INITIATED
