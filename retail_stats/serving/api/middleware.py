"""
API Middleware

Binds a request id into the structlog context for the lifetime of each
request, so report events logged deep inside the statistics engine can be
traced back to the HTTP call that triggered them.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with request id and duration"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "Request failed",
                    method=request.method,
                    path=request.url.path,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "Request served",
                method=request.method,
                path=request.url.path,
                query=request.url.query or None,
                status_code=response.status_code,
                duration_ms=round(elapsed_ms, 2),
            )

        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
