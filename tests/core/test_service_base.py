# tests/core/test_service_base.py
"""Tests for the store client lifecycle"""

import asyncio
import pytest

from src.core.exceptions import ConfigurationError, DependencyError
from src.core.service_base import BaseService


class CountingService(BaseService):

    def __init__(self, error=None, cleanup_error=None):
        super().__init__()
        self.opened = 0
        self.error = error
        self.cleanup_error = cleanup_error

    async def _initialize_client(self):
        await asyncio.sleep(0.01)
        if self.error:
            raise self.error
        self.opened += 1
        return object()

    async def health_check(self):
        return {"healthy": self.is_initialized, "status": "ok"}

    async def _cleanup(self):
        if self.cleanup_error:
            raise self.cleanup_error


class TestBaseService:

    async def test_concurrent_first_use_opens_one_client(self):
        service = CountingService()

        await asyncio.gather(*(service.ensure_initialized() for _ in range(10)))

        assert service.opened == 1
        assert service.is_initialized

    async def test_unexpected_failure_becomes_dependency_error(self):
        service = CountingService(error=OSError("no route to host"))

        with pytest.raises(DependencyError) as exc_info:
            await service.initialize()

        assert exc_info.value.details["service"] == "CountingService"
        assert exc_info.value.details["operation"] == "initialize"
        assert not service.is_initialized

    async def test_configuration_error_propagates(self):
        service = CountingService(error=ConfigurationError("missing url", component="CountingService"))

        with pytest.raises(ConfigurationError):
            await service.initialize()

    async def test_shutdown_resets_even_when_cleanup_fails(self):
        service = CountingService(cleanup_error=RuntimeError("close failed"))
        await service.initialize()

        await service.shutdown()

        assert not service.is_initialized
        assert service._client is None

    async def test_shutdown_before_init_is_noop(self):
        service = CountingService()
        await service.shutdown()
        assert service.opened == 0
