# src/functions/set_session_cookie.py
"""
Serverless entry point for the session cookie gateway.

Accepts a Netlify/Lambda style event:
    {"httpMethod": "POST", "headers": {...}, "body": "...", "isBase64Encoded": false}
and returns:
    {"statusCode": 200, "headers": {...}, "body": "..."}
"""

import base64
import binascii
from typing import Any, Dict, Optional

from src.core.gateway import GatewayHandler, create_gateway
from src.core.logging_config import setup_logging
from src.models.gateway_models import GatewayRequest

logger = setup_logging()

# Reused across warm invocations
_gateway: Optional[GatewayHandler] = None


def get_gateway() -> GatewayHandler:
    global _gateway
    if _gateway is None:
        _gateway = create_gateway()
        logger.info("🔐 Session gateway initialized for serverless runtime")
    return _gateway


def set_gateway(gateway: Optional[GatewayHandler]) -> None:
    """Replace the cached gateway (tests, custom wiring)"""
    global _gateway
    _gateway = gateway


def _decode_body(event: Dict[str, Any]) -> Optional[str]:
    body = event.get("body")
    if body is None:
        return None
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            # Undecodable payloads fall through to the JSON check as-is
            return body
    return body


def event_to_request(event: Dict[str, Any]) -> GatewayRequest:
    headers = event.get("headers") or {}
    return GatewayRequest(
        method=str(event.get("httpMethod") or "").upper(),
        headers={str(k): str(v) for k, v in headers.items() if v is not None},
        body=_decode_body(event),
    )


async def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Function handler: event in, status/headers/body out"""
    response = await get_gateway().handle(event_to_request(event))
    return {
        "statusCode": response.status_code,
        "headers": response.headers,
        "body": response.body,
    }
