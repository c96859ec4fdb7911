"""Request-scoped logging context.

Each request (or background operation) carries a request id and, once the
viewer is known, the viewer id. Both are read by the logging processors so
every log line emitted during an aggregation or mutation can be correlated.
"""

from contextvars import ContextVar
from typing import Any
from uuid import UUID, uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
viewer_id_var: ContextVar[str | None] = ContextVar("viewer_id", default=None)


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context, generating one if absent."""
    rid = request_id or str(uuid4())
    request_id_var.set(rid)
    return rid


def get_viewer_id() -> str | None:
    """Get the current viewer ID."""
    return viewer_id_var.get()


def set_viewer_id(viewer_id: str | UUID | None) -> None:
    """Set the viewer ID for the current context."""
    viewer_id_var.set(str(viewer_id) if viewer_id is not None else None)


def get_context() -> dict[str, Any]:
    """Return the non-empty context variables as a dictionary."""
    context: dict[str, Any] = {}

    request_id = get_request_id()
    if request_id:
        context["request_id"] = request_id

    viewer_id = get_viewer_id()
    if viewer_id:
        context["viewer_id"] = viewer_id

    return context


def clear_context() -> None:
    """Reset all context variables at the end of a request."""
    request_id_var.set("")
    viewer_id_var.set(None)

