"""
FaceReader Backend — Access Log Middleware
============================================

What:  Writes one access line per API call with status, latency and upload size.
Why:   Analysis latency is dominated by the model call; the access log is
       where slow Gemini periods show up first.

Skipped paths:
    /health          probed by the orchestrator every few seconds
    /api/files/...   image downloads, already cached by the apps

Request bodies are never logged (they are face photos); only their
declared Content-Length is.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from facereader.middleware.request_id import request_id_var

logger = logging.getLogger("facereader.access")

_SKIPPED_PREFIXES = ("/health", "/api/files/")

# Analysis calls slower than this are logged at WARNING even on success
SLOW_REQUEST_MS = 20_000


def _level_for(status: int, duration_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400 or duration_ms >= SLOW_REQUEST_MS:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(_SKIPPED_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        declared = request.headers.get("content-length", "")
        upload_bytes = int(declared) if declared.isdigit() else 0
        language = request.headers.get("accept-language", "-")

        logger.log(
            _level_for(response.status_code, duration_ms),
            "[%s] %s %s → %d in %.0fms (body=%dB, lang=%s)",
            request_id_var.get(""),
            request.method,
            path,
            response.status_code,
            duration_ms,
            upload_bytes,
            language,
        )
        return response
