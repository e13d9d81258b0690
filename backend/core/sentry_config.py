"""
Sentry SDK setup.

Errors are always captured; performance traces are sampled by route so
the noisy public catalogue does not drown the payment and auth flows.
Learner PII (emails, tokens, cookies) is scrubbed before anything leaves
the process.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

HEALTH_PATHS = {"/health", "/api/health"}

# Routes where every trace is worth keeping
HIGH_VALUE_PREFIXES = ("/api/payment", "/api/auth", "/api/admin")

SENSITIVE_HEADERS = ("Authorization", "authorization", "Cookie", "cookie")


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Strip personal data from an error event.

    Args:
        event: Sentry event.
        hint: Additional context about the event.

    Returns:
        The scrubbed event.
    """
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in SENSITIVE_HEADERS:
                if name in headers:
                    headers[name] = "[Filtered]"
        # OTP and password bodies must never be shipped
        request.pop("data", None)

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    """Drop health-check transactions."""
    transaction_name = event.get("transaction", "") or ""
    for path in HEALTH_PATHS:
        if transaction_name.endswith(path):
            return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Choose a trace sample rate for a request.

    Args:
        sampling_context: Context about the request being sampled.

    Returns:
        Sample rate between 0.0 and 1.0.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    asgi_scope = sampling_context.get("asgi_scope", {})
    path = asgi_scope.get("path", "")

    if path in HEALTH_PATHS:
        return 0.0
    if path.startswith(HIGH_VALUE_PREFIXES):
        return 0.5
    return 0.1


def init_sentry() -> bool:
    """
    Initialize Sentry when SENTRY_DSN is configured.

    Must run before the FastAPI app is created.

    Returns:
        True when Sentry was initialised.
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
    return True
