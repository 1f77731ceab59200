"""
Health Check Endpoints

Provides system health and readiness endpoints for:
- Load balancer health checks
- Kubernetes probes
- Monitoring systems
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from crisisguard import __version__
from crisisguard.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response with component health."""

    ready: bool
    components: dict


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Basic health check endpoint for load balancers",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=get_settings().env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Readiness including scorer and escalation backend",
)
async def readiness_check(request: Request) -> ReadinessResponse:
    """
    Detailed readiness check.

    Ready when the analysis service is built and the statistical
    scorer is loaded. An unhealthy escalation backend is reported but
    does not block readiness: analysis still degrades to manual
    escalation.
    """
    service = getattr(request.app.state, "analysis_service", None)
    components: dict = {"analysis_service": service is not None}

    if service is not None:
        components["statistical_scorer"] = service.statistical.scorer.is_loaded()
        components["escalation_backend"] = await service.orchestrator.backend.health_check()

    ready = components["analysis_service"] and components.get("statistical_scorer", False)
    return ReadinessResponse(ready=ready, components=components)


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Kubernetes liveness probe endpoint",
)
async def liveness_check() -> HealthResponse:
    return HealthResponse(
        status="alive",
        version=__version__,
        environment=get_settings().env,
    )
