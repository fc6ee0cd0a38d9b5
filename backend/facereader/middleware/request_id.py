"""
FaceReader Backend — Request ID Middleware
============================================

What:  Gives every request a correlation ID, exposed to handlers through a
       ContextVar and returned in the X-Request-ID response header.
Why:   The apps show the ID with analysis errors, so a bad completion can be
       found in the logs next to the raw model output.

ID source:
    A client-supplied X-Request-ID is reused only when it is short and plain
    (letters, digits, '-', '_'); it ends up in log lines, so anything else is
    replaced by a fresh 8-character ID.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def pick_request_id(header_value: Optional[str]) -> str:
    if header_value and _CLIENT_ID_RE.match(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = pick_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid

        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
