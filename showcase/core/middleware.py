"""Request middleware binding the logging context for each HTTP call."""

import time
from collections.abc import Awaitable, Callable, Iterable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from showcase.core.context import clear_context, get_viewer_id, set_request_id


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of a request and log its outcome.

    The id is taken from ``X-Request-ID`` when the caller sends one and is
    echoed back on the response. Probe paths are served without request
    logging so health checks do not flood the log.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: Iterable[str] = ("/health",),
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.quiet_prefixes = tuple(exclude_paths)

    def _is_quiet(self, path: str) -> bool:
        return not self.log_requests or path.startswith(self.quiet_prefixes)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        quiet = self._is_quiet(request.url.path)

        if not quiet:
            logger.info(
                "request_started",
                method=request.method,
                path=request.url.path,
                query=str(request.query_params) or None,
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
            )
            raise
        else:
            if not quiet:
                # viewer_id is only known once the auth dependency has run
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    viewer_id=get_viewer_id(),
                    duration_ms=_elapsed_ms(started),
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()
