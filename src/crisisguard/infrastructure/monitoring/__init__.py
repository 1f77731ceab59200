"""Monitoring infrastructure package."""

from crisisguard.infrastructure.monitoring.sentry_integration import (
    before_send,
    capture_exception_with_context,
    capture_safety_event,
    init_sentry,
    scrub_dict,
)

__all__ = [
    "before_send",
    "capture_exception_with_context",
    "capture_safety_event",
    "init_sentry",
    "scrub_dict",
]
