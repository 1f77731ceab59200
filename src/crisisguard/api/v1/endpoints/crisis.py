"""
Crisis Endpoints

HTTP surface of the crisis pipeline: analysis, escalation tracking
and emergency contacts.

SAFETY-CRITICAL: POST /analyze always answers 200 with a complete
result for any text, including empty text. Escalation failures are
reported in the body, never as an HTTP error.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from crisisguard.api.dependencies import get_analysis_service, get_escalation_orchestrator
from crisisguard.config.logging_config import get_logger
from crisisguard.domain.enums.escalation import EscalationStatus
from crisisguard.services.orchestration.crisis_analysis_service import (
    AnalysisOptions,
    CrisisAnalysisService,
)
from crisisguard.services.safety.escalation_orchestrator import EscalationOrchestrator

logger = get_logger(__name__)
router = APIRouter()


# Request/Response Models

class AnalyzeRequest(BaseModel):
    """Request to analyze one message."""

    text: str = Field(..., description="Message text; long input is truncated")
    user_id: Optional[str] = Field(
        default=None,
        max_length=128,
        description="User identity; escalation records are only created with one",
    )
    language_hint: Optional[str] = Field(default=None, max_length=16)
    cultural_context: Optional[str] = Field(default=None, max_length=64)
    country_code: Optional[str] = Field(default=None, min_length=2, max_length=4)

    model_config = {
        "json_schema_extra": {
            "example": {
                "text": "I feel like I can't go on anymore",
                "user_id": "user-123",
                "language_hint": "en",
                "cultural_context": "western",
                "country_code": "US",
            }
        }
    }


class StatusUpdateRequest(BaseModel):
    """Request to move an escalation to a new status."""

    status: EscalationStatus
    responder_id: Optional[str] = Field(default=None, max_length=128)
    note: Optional[str] = Field(default=None, max_length=2000)
    outcome: Optional[str] = Field(default=None, max_length=2000)


class StatusUpdateResponse(BaseModel):
    escalation: dict
    follow_up: Optional[dict] = None


# Endpoints

@router.post(
    "/analyze",
    summary="Analyze a message for crisis indicators",
)
async def analyze(
    request: AnalyzeRequest,
    service: CrisisAnalysisService = Depends(get_analysis_service),
) -> dict:
    """
    Run the crisis pipeline on one message.

    Returns the full CrisisAnalysisResult. When escalation is required
    but could not be initiated, escalation_workflow carries the
    recommended tier and the error so the client can escalate manually.
    """
    result = await service.analyze_crisis(
        request.text,
        user_id=request.user_id,
        options=AnalysisOptions(
            language_hint=request.language_hint,
            cultural_context=request.cultural_context,
            country_code=request.country_code,
        ),
    )
    return result.to_dict()


@router.get(
    "/escalations/metrics",
    summary="Escalation metrics",
)
async def escalation_metrics(
    orchestrator: EscalationOrchestrator = Depends(get_escalation_orchestrator),
) -> dict:
    return orchestrator.get_metrics()


@router.get(
    "/escalations/{escalation_id}",
    summary="Get escalation status",
)
async def get_escalation(
    escalation_id: str,
    orchestrator: EscalationOrchestrator = Depends(get_escalation_orchestrator),
) -> dict:
    """Current state and timeline of one escalation."""
    record = orchestrator.get_escalation(escalation_id)
    targets = orchestrator.tier_targets(record.tier)
    return {
        **record.to_dict(),
        "response_targets_ms": {
            "acknowledgment": targets.acknowledgment_ms,
            "response": targets.response_ms,
            "resolution": targets.resolution_ms,
        },
    }


@router.patch(
    "/escalations/{escalation_id}",
    response_model=StatusUpdateResponse,
    summary="Update escalation status",
)
async def update_escalation(
    escalation_id: str,
    request: StatusUpdateRequest,
    orchestrator: EscalationOrchestrator = Depends(get_escalation_orchestrator),
) -> StatusUpdateResponse:
    """
    Move an escalation along its lifecycle.

    Illegal transitions answer 409. Moving to escalated-further issues
    a new escalation one tier higher, returned as follow_up.
    """
    change = await orchestrator.update_status(
        escalation_id,
        request.status,
        responder_id=request.responder_id,
        note=request.note,
        outcome=request.outcome,
    )
    return StatusUpdateResponse(
        escalation=change.record.to_dict(),
        follow_up=change.follow_up.to_dict() if change.follow_up else None,
    )


@router.get(
    "/contacts",
    summary="Emergency contacts",
)
async def emergency_contacts(
    location: Optional[str] = Query(default=None, max_length=64),
    language: str = Query(default="en", max_length=16),
    orchestrator: EscalationOrchestrator = Depends(get_escalation_orchestrator),
) -> list[dict]:
    """Emergency contacts covering a location, best first."""
    return [c.to_dict() for c in orchestrator.get_emergency_contacts(location, language)]
