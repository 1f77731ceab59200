"""
Sentry Error Tracking Integration

Error tracking with sensitive data scrubbing. Enabled only when a
DSN is configured.

SECURITY: Message text submitted for analysis is redacted before any
event leaves the process, together with credentials and tokens.
"""

import re
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from crisisguard.config.logging_config import get_logger

logger = get_logger(__name__)

REDACTED = "[REDACTED]"

SENSITIVE_PATTERNS = [
    r"api[_-]?key[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"token[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"secret[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"bearer\s+[a-zA-Z0-9\-._~+/]+=*",
    r"authorization[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
]

# Keys whose values are dropped entirely
SENSITIVE_KEYS = frozenset({
    "text",
    "message_text",
    "surrounding_window",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "dsn",
})


def _scrub_string(value: str) -> str:
    result = value
    for pattern in SENSITIVE_PATTERNS:
        result = re.sub(pattern, REDACTED, result, flags=re.IGNORECASE)
    return result


def _scrub_value(value):
    if isinstance(value, dict):
        return scrub_dict(value)
    if isinstance(value, list):
        return [_scrub_value(item) for item in value]
    if isinstance(value, str):
        return _scrub_string(value)
    return value


def scrub_dict(data: dict) -> dict:
    """Recursively scrub sensitive data from a dictionary."""
    result = {}
    for key, value in data.items():
        key_lower = str(key).lower().replace("-", "_")
        if key_lower in SENSITIVE_KEYS or any(
            sensitive in key_lower for sensitive in ("token", "secret", "api_key")
        ):
            result[key] = REDACTED
        else:
            result[key] = _scrub_value(value)
    return result


def before_send(event: dict, hint: dict) -> Optional[dict]:
    """
    Process event before sending to Sentry.

    Request bodies are dropped outright; they may contain user text.
    """
    request = event.get("request")
    if isinstance(request, dict):
        if "data" in request:
            request["data"] = REDACTED
        if isinstance(request.get("headers"), dict):
            request["headers"] = scrub_dict(request["headers"])

    for breadcrumb in event.get("breadcrumbs", {}).get("values", []):
        if isinstance(breadcrumb.get("data"), dict):
            breadcrumb["data"] = scrub_dict(breadcrumb["data"])

    if isinstance(event.get("extra"), dict):
        event["extra"] = scrub_dict(event["extra"])

    return event


def init_sentry(
    dsn: str,
    environment: str = "development",
    release: str = "crisisguard",
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry error tracking.

    Args:
        dsn: Sentry DSN; tracking stays disabled when empty
        environment: Environment name
        release: Release version
        traces_sample_rate: Performance tracing rate

    Returns:
        Whether Sentry was initialized
    """
    if not dsn:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        before_send=before_send,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            AsyncioIntegration(),
            LoggingIntegration(level=None, event_level=None),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )

    logger.info("Sentry initialized", environment=environment, release=release)
    return True


def capture_safety_event(
    message: str,
    level: str = "warning",
    extra: Optional[dict] = None,
) -> None:
    """
    Capture a safety-related event (failed escalation, degraded pipeline).

    No-op when Sentry is not initialized.
    """
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("category", "safety")
        for key, value in scrub_dict(extra or {}).items():
            scope.set_extra(key, value)
        sentry_sdk.capture_message(message, level="error" if level == "error" else "warning")


def capture_exception_with_context(
    exception: BaseException,
    correlation_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> Optional[str]:
    """
    Capture exception with additional context.

    Returns: Sentry event ID
    """
    with sentry_sdk.new_scope() as scope:
        if correlation_id:
            scope.set_tag("correlation_id", correlation_id)
        for key, value in scrub_dict(extra or {}).items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(exception)
