"""Trace ID middleware for request/response propagation."""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cropalert.logging_config import bind_request_context, clear_request_context

logger = logging.getLogger(__name__)


def new_trace_id() -> str:
    return f"trc_{uuid.uuid4().hex[:16]}"


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Trace-Id or mint one; echo it and bind it into log context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get("x-trace-id") or new_trace_id()
        request.state.trace_id = trace_id
        bind_request_context(trace_id, request.query_params.get("user_id"))
        started = time.perf_counter()

        try:
            response = await call_next(request)
            logger.debug(
                "%s %s -> %d (%.1f ms)",
                request.method, request.url.path, response.status_code,
                (time.perf_counter() - started) * 1000,
            )
        finally:
            clear_request_context()
        response.headers["X-Trace-Id"] = trace_id
        return response
