"""
Access log: one structured record when a request arrives and one when it
leaves, with status and duration.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .rate_limit import get_client_ip

logger = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        log = logger.bind(method=request.method, path=request.url.path)
        started = time.perf_counter()

        log.info(
            "Request started",
            query=str(request.query_params) or None,
            client_ip=get_client_ip(request),
        )

        response = await call_next(request)

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        # 5xx are logged with a traceback by the error handler already
        emit = log.warning if 400 <= response.status_code < 500 else log.info
        emit("Request completed", status_code=response.status_code, duration_ms=elapsed_ms)

        return response
