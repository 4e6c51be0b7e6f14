"""
Request correlation id.

Honours a caller-supplied ``X-Request-ID`` (trimmed to a sane length) or
generates one, exposes it to log records for the duration of the request
and echoes it on the response.
"""

import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from rbac_admin.utils.context import reset_request_id, set_request_id

HEADER = "X-Request-ID"
MAX_LENGTH = 128


class RequestIdMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = (request.headers.get(HEADER) or "").strip()[:MAX_LENGTH] or uuid.uuid4().hex
        request.state.request_id = request_id

        token = set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)

        response.headers[HEADER] = request_id
        return response
