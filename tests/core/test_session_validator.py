# tests/core/test_session_validator.py
"""
Tests for SessionValidator.

Store doubles are AsyncMocks so every query can be asserted.
"""

import pytest
from unittest.mock import AsyncMock

from src.core.exceptions import ConfigurationError, SessionStoreError
from src.core.security import SessionValidator, digest
from src.models.gateway_models import ValidationOutcome


class TestSessionValidator:

    async def test_valid_token(self, memory_store):
        validator = SessionValidator(memory_store)
        assert await validator.validate("good-token") is ValidationOutcome.VALID

    async def test_unknown_token_is_invalid(self, memory_store):
        validator = SessionValidator(memory_store)
        assert await validator.validate("bad-token") is ValidationOutcome.INVALID

    async def test_store_receives_digest_not_token(self, mock_store):
        validator = SessionValidator(mock_store)

        await validator.validate("good-token")

        mock_store.validate.assert_awaited_once_with(digest("good-token"))

    async def test_store_reporting_no_record(self, mock_store):
        mock_store.validate.return_value = False
        validator = SessionValidator(mock_store)

        assert await validator.validate("bad-token") is ValidationOutcome.INVALID

    async def test_store_error_is_unavailable_not_invalid(self, mock_store):
        mock_store.validate.side_effect = SessionStoreError("connection refused", backend="supabase")
        validator = SessionValidator(mock_store)

        assert await validator.validate("good-token") is ValidationOutcome.STORE_UNAVAILABLE

    async def test_any_store_exception_is_unavailable(self, mock_store):
        mock_store.validate.side_effect = RuntimeError("boom")
        validator = SessionValidator(mock_store)

        assert await validator.validate("anything") is ValidationOutcome.STORE_UNAVAILABLE

    async def test_store_is_queried_once_without_retry(self, mock_store):
        mock_store.validate.side_effect = TimeoutError("slow store")
        validator = SessionValidator(mock_store)

        await validator.validate("good-token")

        assert mock_store.validate.await_count == 1

    @pytest.mark.parametrize("credential", ["", None, 42, ["good-token"], {"token": "x"}])
    async def test_rejects_non_string_or_empty_without_query(self, mock_store, credential):
        validator = SessionValidator(mock_store)

        assert await validator.validate(credential) is ValidationOutcome.INVALID
        mock_store.validate.assert_not_awaited()

    async def test_configuration_error_propagates(self, mock_store):
        mock_store.validate = AsyncMock(side_effect=ConfigurationError("missing url", component="SupabaseSessionStore"))
        validator = SessionValidator(mock_store)

        with pytest.raises(ConfigurationError):
            await validator.validate("good-token")

    async def test_revoked_session_becomes_invalid(self, memory_store):
        validator = SessionValidator(memory_store)
        memory_store.revoke(digest("good-token"))

        assert await validator.validate("good-token") is ValidationOutcome.INVALID
