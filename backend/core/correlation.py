"""
Request-scoped correlation IDs.

A correlation ID ties together the log lines, Sentry events and error
responses produced while serving one request, so a learner can quote it
to support and it can be found in every sink.
"""

import uuid
from contextvars import ContextVar

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Short enough to read over the phone, long enough to stay unique per day.
CORRELATION_ID_LENGTH = 8


def generate_correlation_id() -> str:
    """Return a fresh 8-character hexadecimal correlation ID."""
    return uuid.uuid4().hex[:CORRELATION_ID_LENGTH]


def get_correlation_id() -> str:
    """Return the current request's correlation ID, or "" outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current context."""
    correlation_id_var.set(correlation_id)


def resolve_correlation_id(incoming: str | None) -> str:
    """
    Pick the correlation ID for an incoming request.

    A client supplied value is reused when it looks sane (1-64 printable
    characters), otherwise a new one is generated.

    Args:
        incoming: Value of the X-Correlation-ID request header, if any.

    Returns:
        The correlation ID to bind for this request.
    """
    if incoming and 0 < len(incoming) <= 64 and incoming.isprintable():
        return incoming
    return generate_correlation_id()
