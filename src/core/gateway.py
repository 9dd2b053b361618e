# src/core/gateway.py
"""
Session cookie gateway - the request/response boundary.

Takes a presented session token, validates it against the session store
and answers with an HttpOnly session cookie. The handler is transport
neutral: FastAPI (src/main.py) and the serverless adapter
(src/functions/set_session_cookie.py) both translate their native request
into a GatewayRequest and send back the GatewayResponse unchanged.

Flow: preflight / method check -> parse body -> validate -> issue cookie
"""

import json
import re
from typing import Any, Dict, Optional
import logging

from src.core.config import Settings, load_deployment_config
from src.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DependencyError,
    GatewayError,
    InputError,
    input_error,
    method_not_allowed,
    store_error
)
from src.core.security import SessionValidator, build_cookie_header
from src.models.gateway_models import (
    DeploymentConfig,
    GatewayRequest,
    GatewayResponse,
    ValidationOutcome
)
from src.services.session_store import SessionStore, create_session_store

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"
PREFLIGHT_MAX_AGE = "600"

MAX_TOKEN_LENGTH = 4096
# RFC 6265 cookie-octet: no CTLs, whitespace, DQUOTE, comma, semicolon or backslash
_COOKIE_SAFE = re.compile(r"^[\x21\x23-\x2B\x2D-\x3A\x3C-\x5B\x5D-\x7E]+$")

# Client-facing messages; anything more specific stays in the server log
SAFE_MESSAGES = {
    AuthenticationError: "Invalid session token",
    ConfigurationError: "Server configuration error",
    DependencyError: "Internal server error",
}
GENERIC_ERROR = "Internal server error"


class GatewayHandler:
    """
    Verify a session token and issue the session cookie.

    Status codes:
        200 cookie issued, 204 preflight, 400 bad body or token,
        401 invalid session, 405 wrong method, 500 store or config failure
    """

    def __init__(self, validator: SessionValidator, config: DeploymentConfig):
        self.validator = validator
        self.config = config

    async def handle(self, request: GatewayRequest) -> GatewayResponse:
        """Run one request to completion; never raises"""
        cors = self.cors_headers(request.origin)
        method = (request.method or "").upper()

        try:
            if method == "OPTIONS":
                return self._preflight(cors)
            if method != "POST":
                raise method_not_allowed(method)

            token = self.parse_token(request.body)
            outcome = await self.validator.validate(token)

            if outcome is ValidationOutcome.STORE_UNAVAILABLE:
                raise store_error("Session store unavailable", operation="validate_session")
            if outcome is not ValidationOutcome.VALID:
                raise AuthenticationError()

            headers = {
                "Set-Cookie": build_cookie_header(token, self.config),
                "Cache-Control": "no-store",
            }
            logger.info("✅ Session cookie issued")
            return self._json(200, {"success": True}, cors, headers)

        except GatewayError as e:
            return self._error_response(e, cors)
        except Exception as e:
            logger.error(f"❌ Unexpected error while setting session cookie: {type(e).__name__}: {e}", exc_info=True)
            return self._json(500, {"error": GENERIC_ERROR}, cors)

    def cors_headers(self, origin: Optional[str]) -> Dict[str, str]:
        """
        CORS headers for a credentialed request.

        The request Origin is echoed verbatim; a wildcard would make the
        browser drop the response of a credentialed request.
        """
        headers = {
            "Access-Control-Allow-Credentials": "true",
            "Vary": "Origin",
        }
        if origin and self.config.origin_allowed(origin):
            headers["Access-Control-Allow-Origin"] = origin
        elif origin:
            logger.warning(f"🚫 Origin not in CORS allowlist: {origin}")
        return headers

    @staticmethod
    def parse_token(body: Optional[str]) -> str:
        """
        Extract the token from a JSON body of the form {"token": "..."}.

        Raises:
            InputError: For anything but an object with a usable token
        """
        try:
            payload: Any = json.loads(body or "{}")
        except (ValueError, RecursionError):
            # RecursionError: nesting deeper than the decoder can follow
            raise input_error("Invalid JSON body", field="body")

        if not isinstance(payload, dict):
            raise input_error("Token required", field="token")

        token = payload.get("token")
        if not isinstance(token, str) or not token:
            raise input_error("Token required", field="token")

        if len(token) > MAX_TOKEN_LENGTH or not _COOKIE_SAFE.match(token):
            raise input_error("Invalid token format", field="token")

        return token

    def _preflight(self, cors: Dict[str, str]) -> GatewayResponse:
        headers = dict(cors)
        headers.update({
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Access-Control-Max-Age": PREFLIGHT_MAX_AGE,
        })
        return GatewayResponse(status_code=204, headers=headers)

    def _error_response(self, error: GatewayError, cors: Dict[str, str]) -> GatewayResponse:
        if isinstance(error, InputError):
            logger.info(f"⚠️ Rejected request: {error}")
            extra = {"Allow": ALLOWED_METHODS} if error.status_code == 405 else None
            return self._json(error.status_code, {"error": error.message}, cors, extra)

        if isinstance(error, AuthenticationError):
            logger.warning("🔒 Invalid session token presented")
            return self._json(401, {"error": SAFE_MESSAGES[AuthenticationError]}, cors)

        if isinstance(error, ConfigurationError):
            logger.error(f"🔧 Gateway misconfigured: {error}")
            return self._json(500, {"error": SAFE_MESSAGES[ConfigurationError]}, cors)

        logger.error(f"🔥 Dependency failure: {error}")
        return self._json(500, {"error": SAFE_MESSAGES[DependencyError]}, cors)

    @staticmethod
    def _json(
        status_code: int,
        payload: Dict[str, Any],
        cors: Dict[str, str],
        extra: Optional[Dict[str, str]] = None
    ) -> GatewayResponse:
        headers = {"Content-Type": "application/json"}
        headers.update(cors)
        if extra:
            headers.update(extra)
        return GatewayResponse(status_code=status_code, headers=headers, body=json.dumps(payload))


def create_gateway(
    source: Optional[Settings] = None,
    store: Optional[SessionStore] = None
) -> GatewayHandler:
    """Wire store, validator and deployment config into a handler"""
    store = store or create_session_store(source)
    return GatewayHandler(SessionValidator(store), load_deployment_config(source))
