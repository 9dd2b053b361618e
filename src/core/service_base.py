# src/core/service_base.py
"""
Lifecycle shared by the session store backends.

A store opens its client lazily on the first lookup, reports health for
/health and closes the client on shutdown. The first lookup may arrive
from several requests at once, so opening the client is serialized.
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
import asyncio
import logging
from src.core.exceptions import DependencyError, ConfigurationError


class ServiceConfig:
    """Marker base for store configuration dataclasses"""
    pass


class BaseService(ABC):
    """Lazily connected store client with health check and shutdown"""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.service_name = self.__class__.__name__
        self.logger = logger or logging.getLogger(self.service_name)
        self._client = None
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @abstractmethod
    async def _initialize_client(self) -> Any:
        """Open the backend client; raise ConfigurationError for missing settings"""

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return {"healthy": bool, "status": str, "details": {...}}"""

    def _validate_config(self) -> None:
        """Hook for backends that need settings before connecting"""

    async def initialize(self) -> None:
        """
        Open the client once.

        Raises:
            ConfigurationError: The backend is missing required settings
            DependencyError: The client could not be opened
        """
        async with self._init_lock:
            if self._initialized:
                return

            self.logger.info(f"🔌 Connecting {self.service_name}...")
            try:
                self._validate_config()
                self._client = await self._initialize_client()
            except (ConfigurationError, DependencyError):
                raise
            except Exception as e:
                self.logger.error(f"❌ Failed to connect {self.service_name}: {e}")
                raise DependencyError(
                    message=f"Failed to initialize {self.service_name}",
                    service_name=self.service_name,
                    operation="initialize",
                    details={"error_type": type(e).__name__}
                ) from e

            self._initialized = True
            self.logger.info(f"✅ {self.service_name} connected")

    async def ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def shutdown(self) -> None:
        """Close the client; errors are logged, the process is exiting anyway"""
        if not self._initialized:
            return

        try:
            await self._cleanup()
        except Exception:
            self.logger.error(f"Error during {self.service_name} shutdown", exc_info=True)
        finally:
            self._client = None
            self._initialized = False
        self.logger.info(f"🛑 {self.service_name} shut down")

    async def _cleanup(self) -> None:
        """Backend-specific cleanup"""
