# tests/core/conftest.py
"""
Shared fixtures for gateway core tests.

Provides an in-memory session store that knows one good token, a default
deployment config and a request factory.
"""

import json
import pytest
from unittest.mock import Mock, AsyncMock

from src.core.gateway import GatewayHandler
from src.core.security import SessionValidator, digest
from src.models.gateway_models import DeploymentConfig, GatewayRequest
from src.services.session_store import InMemorySessionStore, SessionStore

GOOD_TOKEN = "good-token"
ORIGIN = "https://app.example.com"


@pytest.fixture
def memory_store():
    """Store that holds only the digest of GOOD_TOKEN"""
    return InMemorySessionStore([digest(GOOD_TOKEN)])


@pytest.fixture
def mock_store():
    """Store double whose validate() is an AsyncMock"""
    store = Mock(spec=SessionStore)
    store.validate = AsyncMock(return_value=True)
    return store


@pytest.fixture
def deployment_config():
    return DeploymentConfig()


@pytest.fixture
def gateway(memory_store, deployment_config):
    return GatewayHandler(SessionValidator(memory_store), deployment_config)


@pytest.fixture
def make_request():
    """Factory for GatewayRequest objects"""
    def _make(method="POST", payload=None, body=None, origin=ORIGIN, headers=None):
        all_headers = {"Content-Type": "application/json"}
        if origin:
            all_headers["Origin"] = origin
        all_headers.update(headers or {})
        if payload is not None:
            body = json.dumps(payload)
        return GatewayRequest(method=method, headers=all_headers, body=body)

    return _make
