"""
Prometheus Metrics

Crisis pipeline observability, exposed at /metrics for Prometheus
scraping.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.
Labels carry enum values only, never user text or identities.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    Info,
    generate_latest,
)
from fastapi import APIRouter, Response

from crisisguard.config.logging_config import get_logger

logger = get_logger(__name__)

# =============================================================================
# ANALYSIS METRICS
# =============================================================================

ANALYSES_TOTAL = Counter(
    "crisisguard_analyses_total",
    "Crisis analyses by fused severity",
    ["severity"],  # none, low, moderate, high, emergency
)

ANALYSIS_LATENCY = Histogram(
    "crisisguard_analysis_latency_seconds",
    "End-to-end analysis latency, escalation excluded",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

ANALYZER_LATENCY = Histogram(
    "crisisguard_analyzer_latency_seconds",
    "Per-analyzer latency",
    ["source"],  # lexical, statistical, cultural
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0],
)

DEGRADED_SIGNALS_TOTAL = Counter(
    "crisisguard_degraded_signals_total",
    "Analyzer signals that timed out or failed",
    ["source"],
)

# =============================================================================
# ESCALATION METRICS
# =============================================================================

ESCALATIONS_TOTAL = Counter(
    "crisisguard_escalations_total",
    "Escalation attempts by tier and outcome",
    ["tier", "outcome"],  # initiated, failed, cancelled
)

ESCALATION_LATENCY = Histogram(
    "crisisguard_escalation_latency_seconds",
    "Escalation backend latency including retries",
    ["tier"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

BACKEND_RETRIES_TOTAL = Counter(
    "crisisguard_escalation_backend_retries_total",
    "Escalation backend retries after transient errors",
)

ESCALATION_STATUS_CHANGES = Counter(
    "crisisguard_escalation_status_changes_total",
    "Escalation lifecycle transitions",
    ["status"],
)

# =============================================================================
# SYSTEM INFO
# =============================================================================

SYSTEM_INFO = Info(
    "crisisguard_system",
    "CRISISGUARD system information",
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_analysis(severity: str, duration_seconds: float) -> None:
    """Record a completed analysis."""
    ANALYSES_TOTAL.labels(severity=severity).inc()
    ANALYSIS_LATENCY.observe(duration_seconds)


def track_analyzer(source: str, duration_seconds: float, degraded: bool) -> None:
    """Record one analyzer run."""
    ANALYZER_LATENCY.labels(source=source).observe(duration_seconds)
    if degraded:
        DEGRADED_SIGNALS_TOTAL.labels(source=source).inc()


def track_escalation(tier: str, outcome: str, duration_seconds: float) -> None:
    """Record an escalation attempt."""
    ESCALATIONS_TOTAL.labels(tier=tier, outcome=outcome).inc()
    ESCALATION_LATENCY.labels(tier=tier).observe(duration_seconds)


def track_backend_retry() -> None:
    BACKEND_RETRIES_TOTAL.inc()


def track_status_change(status: str) -> None:
    ESCALATION_STATUS_CHANGES.labels(status=status).inc()


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )


def update_system_info(environment: str, version: str) -> None:
    """Update system info metric with current environment."""
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })
