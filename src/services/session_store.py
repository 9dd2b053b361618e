# src/services/session_store.py
"""
Session store capability.

The gateway only ever asks one question of a session store: "is the session
behind this token digest currently valid?". Backends answer it with a bool
and raise SessionStoreError when they cannot answer at all. The gateway
never writes to the store.
"""
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Set
import logging

from src.core.service_base import BaseService, ServiceConfig
from src.core.exceptions import config_error

logger = logging.getLogger(__name__)


class SessionStore(BaseService):
    """Abstract session store: one read-only validity query"""

    backend_name = "abstract"

    @abstractmethod
    async def validate(self, token_hash: str) -> bool:
        """
        Check whether a token digest maps to a currently valid session.

        Args:
            token_hash: Lowercase hex SHA-256 digest of the credential

        Returns:
            True if a valid, unexpired session record exists

        Raises:
            SessionStoreError: If the store could not be queried
            ConfigurationError: If the store is not configured
        """


@dataclass
class MemoryStoreConfig(ServiceConfig):
    """Configuration for the in-memory store"""
    valid_hashes: Set[str] = field(default_factory=set)


class InMemorySessionStore(SessionStore):
    """
    Process-local store for development and tests.

    Holds digests only, never raw tokens.
    """

    backend_name = "memory"

    def __init__(self, valid_hashes: Optional[Iterable[str]] = None):
        super().__init__(MemoryStoreConfig(valid_hashes=set(valid_hashes or ())), logger)

    async def _initialize_client(self) -> Set[str]:
        return self.config.valid_hashes

    def add(self, token_hash: str) -> None:
        self.config.valid_hashes.add(token_hash)

    def revoke(self, token_hash: str) -> None:
        self.config.valid_hashes.discard(token_hash)

    async def validate(self, token_hash: str) -> bool:
        await self.ensure_initialized()
        return token_hash in self._client

    async def health_check(self) -> Dict[str, Any]:
        return {
            "healthy": True,
            "status": "memory",
            "details": {"sessions": len(self.config.valid_hashes)}
        }


def create_session_store(source=None) -> SessionStore:
    """
    Build the session store selected by SESSION_STORE_BACKEND.

    The returned store is not yet initialized; it connects lazily on the
    first query.
    """
    from src.core.config import settings

    source = source or settings
    backend = source.SESSION_STORE_BACKEND

    if backend == "supabase":
        from src.services.supabase_session_store import SupabaseConfig, SupabaseSessionStore

        return SupabaseSessionStore(SupabaseConfig(
            url=source.SUPABASE_URL,
            service_role_key=source.SUPABASE_SERVICE_ROLE_KEY,
            publishable_key=source.SUPABASE_PUBLISHABLE_KEY,
            timeout=source.SESSION_STORE_TIMEOUT,
        ))

    if backend == "redis":
        from src.services.redis_session_store import RedisSessionStore

        return RedisSessionStore(key_prefix=source.REDIS_KEY_PREFIX, socket_timeout=source.SESSION_STORE_TIMEOUT)

    if backend == "memory":
        logger.warning("⚠️ Using in-memory session store - no session will validate until one is added")
        return InMemorySessionStore()

    raise config_error(f"Unknown session store backend: {backend}", component="SessionStore")
