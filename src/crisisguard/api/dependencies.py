"""
API Dependencies

FastAPI dependencies resolving the services built during startup.
Services live on app.state; there are no module-level instances.
"""

from fastapi import HTTPException, Request, status

from crisisguard.services.orchestration.crisis_analysis_service import CrisisAnalysisService
from crisisguard.services.safety.escalation_orchestrator import EscalationOrchestrator


def get_analysis_service(request: Request) -> CrisisAnalysisService:
    service = getattr(request.app.state, "analysis_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Crisis analysis service not initialized",
        )
    return service


def get_escalation_orchestrator(request: Request) -> EscalationOrchestrator:
    return get_analysis_service(request).orchestrator
