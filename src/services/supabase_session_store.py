# src/services/supabase_session_store.py
"""
Supabase-backed session store.

Validity is decided by the `validate_session` stored procedure, called
through PostgREST's RPC endpoint with the service-role key:

    POST {url}/rest/v1/rpc/validate_session  {"p_token_hash": "<digest>"}
    -> [{"is_valid": true}]   (zero or one record)
"""
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

import httpx

from src.services.session_store import SessionStore
from src.core.service_base import ServiceConfig
from src.core.exceptions import ConfigurationError, store_error

logger = logging.getLogger(__name__)

RPC_PATH = "/rest/v1/rpc/validate_session"


@dataclass
class SupabaseConfig(ServiceConfig):
    """Configuration for the Supabase session store"""
    url: Optional[str] = None
    service_role_key: Optional[str] = None
    publishable_key: Optional[str] = None
    timeout: float = 5.0
    # Injected by tests (httpx.MockTransport)
    transport: Optional[httpx.AsyncBaseTransport] = None


class SupabaseSessionStore(SessionStore):
    """Async session store backed by a Supabase RPC"""

    backend_name = "supabase"

    def __init__(self, config: Optional[SupabaseConfig] = None):
        super().__init__(config or SupabaseConfig(), logger)

    def _validate_config(self) -> None:
        super()._validate_config()

        if not self.config.url or not self.config.service_role_key:
            raise ConfigurationError(
                "Supabase URL and service role key are required. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.",
                component=self.service_name
            )

    async def _initialize_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.url.rstrip("/"),
            timeout=self.config.timeout,
            transport=self.config.transport,
            headers={
                "Content-Type": "application/json",
                "apikey": self.config.publishable_key or "",
                "Authorization": f"Bearer {self.config.service_role_key}",
            },
        )

    async def validate(self, token_hash: str) -> bool:
        await self.ensure_initialized()

        try:
            response = await self._client.post(RPC_PATH, json={"p_token_hash": token_hash})
        except httpx.HTTPError as e:
            raise store_error(
                f"Session store request failed: {type(e).__name__}",
                backend=self.backend_name,
                operation="validate_session"
            ) from e

        if response.is_error:
            raise store_error(
                f"Session store answered HTTP {response.status_code}",
                backend=self.backend_name,
                operation="validate_session"
            )

        try:
            records = response.json()
        except ValueError as e:
            raise store_error(
                "Session store returned a non-JSON body",
                backend=self.backend_name,
                operation="validate_session"
            ) from e

        # PostgREST returns a list for set-returning functions; tolerate a bare object
        if isinstance(records, dict):
            records = [records]
        if not isinstance(records, list):
            raise store_error(
                f"Unexpected session store payload: {type(records).__name__}",
                backend=self.backend_name,
                operation="validate_session"
            )
        if not records:
            return False

        first = records[0]
        return isinstance(first, dict) and first.get("is_valid") is True

    async def health_check(self) -> Dict[str, Any]:
        """Reachability of the Supabase REST endpoint"""
        if not self.config.url or not self.config.service_role_key:
            return {
                "healthy": False,
                "status": "not_configured",
                "details": {"message": "Supabase credentials missing"}
            }

        try:
            await self.ensure_initialized()
            start = time.monotonic()
            response = await self._client.get("/rest/v1/")
            elapsed_ms = int((time.monotonic() - start) * 1000)
            return {
                "healthy": response.status_code < 500,
                "status": "connected" if response.status_code < 500 else "error",
                "details": {"status_code": response.status_code, "response_time_ms": elapsed_ms}
            }
        except Exception as e:
            return {
                "healthy": False,
                "status": "error",
                "details": {"error": type(e).__name__}
            }

    async def _cleanup(self) -> None:
        if self._client:
            await self._client.aclose()
