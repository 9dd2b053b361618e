# src/services/redis_session_store.py
"""
Redis-backed session store.

A session is valid while `<prefix><digest>` exists. The session creation
flow writes the key with a TTL, so expiry is the key's TTL. A value that is
a JSON object with `"is_valid": false` marks a revoked session that has not
expired yet.
"""
import os
import json
import redis.asyncio as redis
from typing import Optional, Dict, Any
from dataclasses import dataclass
import logging

from src.services.session_store import SessionStore
from src.core.service_base import ServiceConfig
from src.core.exceptions import ConfigurationError, store_error

logger = logging.getLogger(__name__)


@dataclass
class RedisConfig(ServiceConfig):
    """Configuration for the Redis session store"""
    url: Optional[str] = None
    key_prefix: str = "session:"
    decode_responses: bool = True
    socket_timeout: float = 5.0
    max_connections: int = 10
    health_check_interval: int = 30


class RedisSessionStore(SessionStore):
    """Async session store backed by Redis keys"""

    backend_name = "redis"

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        key_prefix: str = "session:",
        socket_timeout: float = 5.0
    ):
        """
        Initialize Redis session store.

        Args:
            config: Redis configuration. If not provided, uses environment variables.
        """
        self.logger = logger
        self._url_source = None  # Track which env var was used

        if config is None:
            config = RedisConfig(
                url=self._get_redis_url(),
                key_prefix=key_prefix,
                socket_timeout=socket_timeout
            )

        super().__init__(config, logger)

    def _get_redis_url(self) -> Optional[str]:
        """
        Get Redis URL from environment variables.

        Checks multiple variables for hosting-provider compatibility.
        """
        url_env_vars = [
            "REDIS_DIRECT_URI",      # Direct connection inside the provider network (preferred)
            "REDIS_DIRECT_URL",      # Public URL over proxy
            "REDIS_URL",             # Standard
            "REDIS_CLI_DIRECT_URI",
            "REDIS_CLI_URL"
        ]

        for var in url_env_vars:
            if url := os.environ.get(var):
                self._url_source = var
                self.logger.info(f"Using Redis URL from {var}")
                return url

        return None

    def _validate_config(self) -> None:
        super()._validate_config()

        if not self.config.url:
            raise ConfigurationError(
                "No Redis URL found. Set one of: REDIS_DIRECT_URI, REDIS_URL, ...",
                component=self.service_name
            )

    async def _initialize_client(self) -> redis.Redis:
        # No ping here: an unreachable Redis surfaces on the first query
        return redis.from_url(
            self.config.url,
            decode_responses=self.config.decode_responses,
            socket_timeout=self.config.socket_timeout,
            max_connections=self.config.max_connections,
            health_check_interval=self.config.health_check_interval
        )

    def key_for(self, token_hash: str) -> str:
        return f"{self.config.key_prefix}{token_hash}"

    async def validate(self, token_hash: str) -> bool:
        await self.ensure_initialized()

        try:
            value = await self._client.get(self.key_for(token_hash))
        except redis.RedisError as e:
            raise store_error(
                f"Redis lookup failed: {type(e).__name__}",
                backend=self.backend_name,
                operation="get"
            ) from e

        if value is None:
            return False

        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")

        try:
            record = json.loads(value)
        except json.JSONDecodeError:
            # Plain marker value
            return True

        if isinstance(record, dict):
            return record.get("is_valid", True) is True
        return True

    async def health_check(self) -> Dict[str, Any]:
        """Check Redis connectivity"""
        if not self.config.url:
            return {
                "healthy": False,
                "status": "not_configured",
                "details": {"message": "Redis not configured"}
            }

        try:
            await self.ensure_initialized()
            await self._client.ping()
            return {
                "healthy": True,
                "status": "connected",
                "details": {"url_source": self._url_source}
            }
        except Exception as e:
            return {
                "healthy": False,
                "status": "error",
                "details": {"url_source": self._url_source, "error": str(e)}
            }

    async def _cleanup(self) -> None:
        """Clean up Redis connection"""
        if self._client:
            try:
                await self._client.aclose()
            except Exception as e:
                self.logger.warning(f"Error closing Redis client: {e}")
