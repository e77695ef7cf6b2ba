"""
Hoots Backend — Request ID Middleware
======================================

What:  Assigns a correlation ID to each request and echoes it back.
How:   Reuses the client's X-Request-ID header when present, otherwise
       generates a short UUID; stores it in a ContextVar for loggers and
       exception handlers, and in request.state for route handlers.
       Errors no handler caught become a 500 envelope here, so they carry
       the ID too.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again or contact support."

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that tags every request and response with a request ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 chars is enough to correlate log lines
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception as exc:
            # ServerErrorMiddleware runs outside this one and cannot see the ID
            logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
            response = JSONResponse(
                status_code=500,
                content={
                    "error": "internal_server_error",
                    "message": UNEXPECTED_ERROR_MESSAGE,
                    "request_id": rid,
                },
            )
        response.headers[REQUEST_ID_HEADER] = rid
        return response
