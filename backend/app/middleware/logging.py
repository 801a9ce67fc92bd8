"""
Careers Site Backend: Request Logging Middleware
==================================================

What:  One access-log line per request: method, path, status, duration,
       request ID and client IP.
How:   Times the downstream call and picks the log level from the status
       (5xx ERROR, 4xx WARNING, otherwise INFO). An exception escaping the
       app is logged as a 500 and re-raised for RequestIDMiddleware to answer.
When:  Inside RequestIDMiddleware, so the request ID is already set.

Privacy:
    Form fields and resume contents are never logged here; the intake
    service logs only the applicant name and position on success.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("careers.access")

# Probes hit these every few seconds
SILENT_PATHS = {"/health"}


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SILENT_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            self._log(request, status, (time.perf_counter() - start_time) * 1000)

    def _log(self, request: Request, status: int, duration_ms: float) -> None:
        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        # Length as declared by the client; resumes dominate it
        body_bytes = request.headers.get("content-length", "-")
        logger.log(
            _level_for(status),
            "%s %s %d %.1fms %sB [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            body_bytes,
            rid,
            client_ip,
        )
