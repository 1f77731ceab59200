"""Metrics infrastructure package."""

from crisisguard.infrastructure.metrics.prometheus_metrics import (
    # Analysis metrics
    ANALYSES_TOTAL,
    ANALYSIS_LATENCY,
    ANALYZER_LATENCY,
    DEGRADED_SIGNALS_TOTAL,
    # Escalation metrics
    ESCALATIONS_TOTAL,
    ESCALATION_LATENCY,
    BACKEND_RETRIES_TOTAL,
    ESCALATION_STATUS_CHANGES,
    # Helpers
    track_analysis,
    track_analyzer,
    track_escalation,
    track_backend_retry,
    track_status_change,
    update_system_info,
    # Router
    metrics_router,
)

__all__ = [
    "ANALYSES_TOTAL",
    "ANALYSIS_LATENCY",
    "ANALYZER_LATENCY",
    "DEGRADED_SIGNALS_TOTAL",
    "ESCALATIONS_TOTAL",
    "ESCALATION_LATENCY",
    "BACKEND_RETRIES_TOTAL",
    "ESCALATION_STATUS_CHANGES",
    "track_analysis",
    "track_analyzer",
    "track_escalation",
    "track_backend_retry",
    "track_status_change",
    "update_system_info",
    "metrics_router",
]
