# src/main.py
"""
Session Gateway FastAPI application.

Exposes the session cookie gateway over HTTP:
- POST /, POST /set-session-cookie: validate a token and set the session cookie
- OPTIONS on the same paths: CORS preflight
- GET /health, GET /healthz: health checks
"""

from fastapi import FastAPI, Depends, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
from contextlib import asynccontextmanager
import time

from src.core.config import settings, validate_required_settings
from src.core.gateway import GatewayHandler, create_gateway
from src.core.logging_config import setup_logging
from src.core.rate_limit_config import (
    RATE_LIMIT_MESSAGE,
    RETRY_AFTER_SECONDS,
    limiter,
    session_cookie_limit
)
from src.middleware.security_middleware import SecurityHeadersMiddleware
from src.models.gateway_models import GatewayRequest

logger = setup_logging()

# Initialized in lifespan (or lazily on first use)
gateway: Optional[GatewayHandler] = None
started_at = time.monotonic()

GATEWAY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
GATEWAY_PATHS = ("/", "/set-session-cookie")


def get_gateway_handler() -> GatewayHandler:
    """
    Get the process-wide gateway handler.

    Follows the FastAPI dependency injection pattern; tests override it
    through app.dependency_overrides.
    """
    global gateway
    if gateway is None:
        gateway = create_gateway(settings)
    return gateway


def current_gateway_handler() -> GatewayHandler:
    """Gateway handler for code outside a route (exception handlers), honoring overrides"""
    return app.dependency_overrides.get(get_gateway_handler, get_gateway_handler)()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan event handler for startup/shutdown"""
    global gateway

    logger.info("=" * 60)
    logger.info(f"🚀 {settings.APP_NAME} {settings.APP_VERSION} starting...")
    logger.info("=" * 60)

    if not validate_required_settings():
        logger.warning("⚠️ Session store is not fully configured - cookie requests will fail with 500")

    gateway = create_gateway(settings)

    logger.info("📋 Configuration:")
    logger.info(f"  - Session store: {settings.SESSION_STORE_BACKEND}")
    logger.info(f"  - Cookie domain: {gateway.config.cookie_domain or '(host only)'}")
    logger.info(f"  - Cookie secure: {gateway.config.cookie_secure}")
    logger.info(f"  - SameSite: {gateway.config.same_site.value}")
    logger.info(f"  - CORS allowlist: {', '.join(gateway.config.allowed_origins) or '(echo any origin)'}")
    logger.info("✅ Gateway ready")

    yield

    logger.info("🛑 Shutting down...")
    await gateway.validator.store.shutdown()
    gateway = None


app = FastAPI(
    title="Session Gateway",
    description="Validates session tokens and issues HttpOnly session cookies",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None
)

# =============================================================================
# RATE LIMITING
# =============================================================================

app.state.limiter = limiter


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """429 that the browser can still read (CORS headers kept)"""
    logger.warning(f"🚦 Rate limit exceeded: {request.url.path}")
    headers = current_gateway_handler().cors_headers(request.headers.get("origin"))
    headers["Retry-After"] = RETRY_AFTER_SECONDS
    return JSONResponse(
        status_code=429,
        content={"error": RATE_LIMIT_MESSAGE},
        headers=headers
    )


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """
    405 from the router (HEAD, TRACE, custom verbs) answered by the gateway.

    Starlette rejects methods the route does not list before the endpoint
    runs; on the gateway paths the gateway builds that 405 so it carries
    Allow and the CORS headers like every other gateway response.
    """
    if exc.status_code != 405 or request.url.path not in GATEWAY_PATHS:
        return await http_exception_handler(request, exc)

    result = await current_gateway_handler().handle(GatewayRequest(
        method=request.method,
        headers=dict(request.headers),
    ))
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers
    )


app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)

# =============================================================================
# MIDDLEWARE
# =============================================================================

app.middleware("http")(SecurityHeadersMiddleware())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests (health checks stay quiet)"""
    path = request.url.path
    if path not in ("/health", "/healthz"):
        logger.info(f"📥 Request: {request.method} {path}")
    return await call_next(request)

# =============================================================================
# ENDPOINTS
# =============================================================================


@app.api_route("/", methods=GATEWAY_METHODS)
@app.api_route("/set-session-cookie", methods=GATEWAY_METHODS)
@limiter.limit(session_cookie_limit)
async def set_session_cookie(request: Request, handler: GatewayHandler = Depends(get_gateway_handler)):
    """Validate the posted token and answer with the session cookie"""
    raw_body = await request.body()
    result = await handler.handle(GatewayRequest(
        method=request.method,
        headers=dict(request.headers),
        body=raw_body.decode("utf-8", errors="replace") if raw_body else None,
    ))
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers
    )


@app.get("/health")
async def health(handler: GatewayHandler = Depends(get_gateway_handler)):
    """
    Health check with per-dependency detail.

    200 only when every check passes, 503 otherwise.
    """
    start = time.monotonic()
    checks = {}

    try:
        store_health = await handler.validator.store.health_check()
        checks["session_store"] = bool(store_health.get("healthy"))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        checks["session_store"] = False

    healthy = all(checks.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "responseTime": int((time.monotonic() - start) * 1000),
            "checks": checks,
            "uptime": int(time.monotonic() - started_at),
            "version": settings.APP_VERSION,
        }
    )


@app.get("/healthz", response_class=PlainTextResponse, status_code=200)
def healthz():
    """Plain text liveness check"""
    return "OK"


if __name__ == "__main__":
    import os
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"🚀 Starting server on port {port}...")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
