"""
Rate limiting configuration for the session gateway
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.core.config import settings


def get_real_ip(request: Request) -> str:
    """
    Get the client IP used as the rate limit key.

    Assumes TRUSTED_PROXY_HOPS proxies in front of the app, each appending
    the address it saw to X-Forwarded-For. Entries left of those are
    whatever the client sent, so the key is taken that many places from
    the right; a caller cannot rotate it by forging the header.
    """
    hops = settings.TRUSTED_PROXY_HOPS
    if hops == 0:
        return get_remote_address(request)

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        entries = [x.strip() for x in forwarded_for.split(",") if x.strip()]
        if entries:
            # Fewer entries than proxies: the leftmost one is the closest we have
            return entries[-min(hops, len(entries))]

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def session_cookie_limit() -> str:
    """Limit for the cookie endpoint, read at request time"""
    return settings.RATE_LIMIT_SESSION_COOKIE


RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment and try again."
RETRY_AFTER_SECONDS = "60"

limiter = Limiter(key_func=get_real_ip)
