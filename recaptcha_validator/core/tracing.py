"""Request-scoped correlation context.

The request id lives in a contextvar so that it survives the awaits of a
single request, and is mirrored into structlog's contextvars so that every
log line emitted while handling the request carries it.
"""

import uuid
from contextvars import ContextVar

import structlog

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"


def set_request_id(value: str | None) -> str:
    """Set the request ID in context, generating one when not provided."""
    if not value:
        value = str(uuid.uuid4())
    request_id_ctx.set(value)
    structlog.contextvars.bind_contextvars(request_id=value)
    return value


def clear_tracing_context() -> None:
    """Clear request-scoped context after request completion."""
    request_id_ctx.set(None)
    structlog.contextvars.clear_contextvars()
