# Core infrastructure
from showcase.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_viewer_id,
    set_request_id,
    set_viewer_id,
)
from showcase.core.errors import ShowcaseError
from showcase.core.logging import configure_structlog, get_logger
from showcase.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContextMiddleware",
    "ShowcaseError",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_viewer_id",
    "set_request_id",
    "set_viewer_id",
]
