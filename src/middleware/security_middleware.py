"""
Security middleware for the session gateway
Adds security headers and request timing to every response
"""

from fastapi import Request, Response
import time
import logging
from typing import Callable

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


class SecurityHeadersMiddleware:
    """HTTP middleware: security headers, HSTS on HTTPS, slow request log"""

    def __init__(self, slow_request_seconds: float = 1.0):
        self.slow_request_seconds = slow_request_seconds

    async def __call__(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if self._is_https(request):
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        if "server" in response.headers:
            del response.headers["server"]

        if process_time > self.slow_request_seconds:
            logger.warning(f"⏱️ Slow request: {request.url.path} took {process_time:.2f}s")

        return response

    @staticmethod
    def _is_https(request: Request) -> bool:
        proto = request.headers.get("X-Forwarded-Proto", request.url.scheme)
        return proto.split(",")[0].strip().lower() == "https"
