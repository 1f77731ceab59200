"""
Escalation Policy Engine

Pure mapping from an aggregated risk read to a responder tier, an
escalation trigger, intervention recommendations and a monitoring
plan.

SAFETY-CRITICAL: A recommendation is produced for every request,
with or without a user identity. The resources recommendation is
always present so the UI can prompt a manual escalation.

LEGAL_REVIEW_REQUIRED: Only `authorized` decisions may create an
escalation record on the user's behalf.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from crisisguard.config.logging_config import get_logger
from crisisguard.domain.enums.crisis_severity import (
    CrisisCategory,
    CrisisSeverity,
    InterventionUrgency,
)
from crisisguard.domain.enums.escalation import EscalationTier, EscalationTrigger
from crisisguard.domain.models.assessment_models import (
    InterventionRecommendation,
    MonitoringFrequency,
    MonitoringPlan,
    RecommendationType,
)
from crisisguard.services.safety.emergency_resources import EmergencyResourceResolver
from crisisguard.services.safety.risk_aggregator import AggregatedRisk

if TYPE_CHECKING:
    from crisisguard.services.cultural.cultural_adjuster import CulturalAdjustment

logger = get_logger(__name__)

SUICIDE_ATTEMPT_RISK = 90
MONITORING_RISK_THRESHOLD = 10

MONITORING_DURATIONS: dict[CrisisSeverity, str] = {
    CrisisSeverity.EMERGENCY: "72 hours minimum",
    CrisisSeverity.HIGH: "24 hours minimum",
    CrisisSeverity.MODERATE: "1 week",
}
MONITORING_KEY_INDICATORS = ("mood", "safety", "engagement", "support utilization")


@dataclass(frozen=True)
class PolicyDecision:
    """
    Outcome of the policy engine.

    Attributes:
        recommended_tier: Tier for the fused severity (always set)
        trigger: Reason recorded if an escalation is created
        authorized: True only with a user identity and escalation_required
        recommendations: Intervention recommendations, sorted by priority
        monitoring_plan: Follow-up monitoring plan
    """

    recommended_tier: EscalationTier
    trigger: EscalationTrigger
    authorized: bool
    recommendations: tuple[InterventionRecommendation, ...]
    monitoring_plan: MonitoringPlan


class EscalationPolicyEngine:
    """
    Maps fused risk to escalation policy.

    Usage:
        engine = EscalationPolicyEngine(resolver)
        decision = engine.decide(aggregated, user_id="u1", country_code="US")
        if decision.authorized:
            outcome = await orchestrator.escalate(decision, user_id, context)
    """

    def __init__(
        self,
        resolver: Optional[EmergencyResourceResolver] = None,
        default_country_code: str = "US",
    ) -> None:
        self._resolver = resolver or EmergencyResourceResolver()
        self._default_country_code = default_country_code

    def decide(
        self,
        aggregated: AggregatedRisk,
        user_id: Optional[str] = None,
        cultural: Optional["CulturalAdjustment"] = None,
        country_code: Optional[str] = None,
        language: str = "en",
    ) -> PolicyDecision:
        """
        Decide tier, trigger and recommendations.

        Args:
            aggregated: Fused risk read
            user_id: User identity; escalation is never authorized without one
            cultural: Cultural adjustment, used for considerations
            country_code: Jurisdiction for resource lookup
            language: Language for resource lookup

        Returns:
            PolicyDecision
        """
        tier = EscalationTier.from_severity(aggregated.overall_severity)
        trigger = self.select_trigger(aggregated)
        authorized = bool(user_id) and aggregated.escalation_required

        considerations: tuple[str, ...] = ()
        if cultural is not None and cultural.interventions is not None:
            considerations = cultural.interventions.considerations()

        recommendations = self.build_recommendations(
            aggregated,
            considerations,
            country_code or self._default_country_code,
            language,
        )
        monitoring_plan = self.build_monitoring_plan(aggregated)

        logger.info(
            "Escalation policy decided",
            recommended_tier=tier.value,
            trigger=trigger.value,
            authorized=authorized,
            has_identity=bool(user_id),
            recommendation_count=len(recommendations),
        )

        return PolicyDecision(
            recommended_tier=tier,
            trigger=trigger,
            authorized=authorized,
            recommendations=recommendations,
            monitoring_plan=monitoring_plan,
        )

    @staticmethod
    def select_trigger(aggregated: AggregatedRisk) -> EscalationTrigger:
        """Most specific trigger for the matched categories."""
        categories = aggregated.categories
        if CrisisCategory.VIOLENCE_THREAT in categories:
            return EscalationTrigger.VIOLENCE_THREAT
        if categories & {CrisisCategory.MEDICAL_EMERGENCY, CrisisCategory.SUBSTANCE_CRISIS}:
            return EscalationTrigger.MEDICAL_EMERGENCY
        if (
            CrisisCategory.SUICIDE_PLAN in categories
            or aggregated.assessment.immediate_risk >= SUICIDE_ATTEMPT_RISK
        ):
            return EscalationTrigger.SUICIDE_ATTEMPT
        return EscalationTrigger.IMMEDIATE_DANGER

    def build_recommendations(
        self,
        aggregated: AggregatedRisk,
        considerations: tuple[str, ...],
        country_code: str,
        language: str,
    ) -> tuple[InterventionRecommendation, ...]:
        assessment = aggregated.assessment
        urgency = assessment.intervention_urgency
        hotlines = self._resolver.resource_lines(country_code, language)
        recommendations: list[InterventionRecommendation] = []

        if urgency == InterventionUrgency.IMMEDIATE:
            recommendations.append(InterventionRecommendation(
                type=RecommendationType.IMMEDIATE,
                priority=1,
                description="Immediate crisis intervention required; contact emergency services",
                action_items=(
                    "Contact emergency services",
                    "Ensure immediate safety",
                    "Stay with the person until help arrives",
                    "Remove access to means of harm",
                ),
                timeframe="Immediate",
                resources=hotlines,
                cultural_considerations=considerations,
            ))

        if urgency == InterventionUrgency.HIGH:
            recommendations.append(InterventionRecommendation(
                type=RecommendationType.URGENT,
                priority=2,
                description="Urgent professional intervention needed within hours",
                action_items=(
                    "Contact a crisis hotline now",
                    "Schedule an emergency therapy session",
                    "Activate the support network",
                ),
                timeframe="Within 2-4 hours",
                resources=hotlines,
                cultural_considerations=considerations,
            ))

        if urgency == InterventionUrgency.MODERATE:
            recommendations.append(InterventionRecommendation(
                type=RecommendationType.SUPPORTIVE,
                priority=3,
                description="Increased support and monitoring recommended",
                action_items=(
                    "Schedule a therapy session within 24 hours",
                    "Daily check-ins with a support person",
                    "Safety planning session",
                ),
                timeframe="Within 24 hours",
                resources=("Mental health professionals", "Peer support services"),
                cultural_considerations=considerations,
            ))

        if assessment.immediate_risk > MONITORING_RISK_THRESHOLD:
            recommendations.append(InterventionRecommendation(
                type=RecommendationType.MONITORING,
                priority=4,
                description="Ongoing monitoring and support resources",
                action_items=(
                    "Regular mental health check-ins",
                    "Continued therapy engagement",
                    "Peer support group participation",
                ),
                timeframe="Ongoing",
                resources=("Support groups", "Crisis resource cards"),
                cultural_considerations=considerations,
            ))

        recommendations.append(InterventionRecommendation(
            type=RecommendationType.RESOURCES,
            priority=5,
            description="Crisis support is available any time",
            action_items=("Reach out to one of these services if you need to talk",),
            timeframe="Any time",
            resources=hotlines,
            cultural_considerations=considerations,
        ))

        return tuple(sorted(recommendations, key=lambda r: r.priority))

    @staticmethod
    def build_monitoring_plan(aggregated: AggregatedRisk) -> MonitoringPlan:
        severity = aggregated.overall_severity
        urgency = aggregated.assessment.intervention_urgency

        if severity == CrisisSeverity.EMERGENCY or urgency == InterventionUrgency.IMMEDIATE:
            frequency = MonitoringFrequency.CONTINUOUS
        elif severity == CrisisSeverity.HIGH or urgency == InterventionUrgency.HIGH:
            frequency = MonitoringFrequency.HOURLY
        elif urgency == InterventionUrgency.MODERATE:
            frequency = MonitoringFrequency.EVERY_4_HOURS
        elif severity == CrisisSeverity.MODERATE or urgency == InterventionUrgency.LOW:
            frequency = MonitoringFrequency.DAILY
        else:
            frequency = MonitoringFrequency.WEEKLY

        triggers: tuple[str, ...] = ("Increased crisis indicators",)
        if aggregated.degraded_sources:
            triggers += ("Analyzer degraded; review manually",)

        return MonitoringPlan(
            frequency=frequency,
            duration=MONITORING_DURATIONS.get(severity, "3 days"),
            key_indicators=MONITORING_KEY_INDICATORS,
            escalation_triggers=triggers,
        )
