"""Response hardening headers and per-request access logging."""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cache-Control": "no-store",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp every response with SECURITY_HEADERS and an X-Request-ID.

    Form bodies carry the creator secret, so only method, path, status and
    latency are logged.
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]
        started = time.perf_counter()

        response: Response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            f"[API] {request_id} {request.method} {request.url.path} "
            f"-> {response.status_code} ({elapsed_ms:.0f} ms)"
        )
        response.headers.update(SECURITY_HEADERS)
        response.headers["X-Request-ID"] = request_id
        return response
