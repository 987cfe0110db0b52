"""
BookClub Backend — Request ID Middleware
=========================================

What:  Gives every request a short correlation ID.
How:   Reuses a client-supplied X-Request-ID (trimmed to 64 printable chars)
       or generates one, stores it in a ContextVar for loggers and the
       exception handlers, and echoes it in the X-Request-ID response header.

The same ID appears in error envelopes as `request_id`, so a user can quote
it and it can be found in the server log.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

# Coroutine-local: concurrent requests on the same thread each see their own ID.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _clean_request_id(value: str) -> str:
    cleaned = "".join(ch for ch in value if ch.isprintable() and not ch.isspace())
    return cleaned[:MAX_REQUEST_ID_LENGTH]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = _clean_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        if not rid:
            rid = uuid.uuid4().hex[:8]

        # Not reset afterwards: ServerErrorMiddleware (outermost) still needs
        # it for the 500 envelope, and each request runs in its own task.
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
