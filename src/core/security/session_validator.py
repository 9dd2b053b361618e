"""
Session validation against the session store.

The validator never lets a store failure look like a rejected token:
an outage yields STORE_UNAVAILABLE, a missing or invalid record yields
INVALID. Both deny access, but they are reported differently.
"""

from typing import Any
import logging

from src.core.exceptions import ConfigurationError
from src.core.security.token_digest import digest
from src.models.gateway_models import ValidationOutcome
from src.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionValidator:
    """Digest the credential, ask the store, classify the answer"""

    def __init__(self, store: SessionStore):
        self.store = store

    async def validate(self, credential: Any) -> ValidationOutcome:
        """
        Classify a presented credential.

        Args:
            credential: Value taken from the request; anything but a
                non-empty str is rejected without a store query

        Returns:
            ValidationOutcome.VALID, INVALID or STORE_UNAVAILABLE

        Raises:
            ConfigurationError: If the store has not been configured
        """
        if not isinstance(credential, str) or not credential:
            return ValidationOutcome.INVALID

        token_hash = digest(credential)
        hash_ref = token_hash[:8]

        try:
            is_valid = await self.store.validate(token_hash)
        except ConfigurationError:
            raise
        except Exception as e:
            # Single attempt; retries belong to the store client
            logger.error(
                f"🔥 Session store unavailable for digest {hash_ref}...: {e}",
                exc_info=True
            )
            return ValidationOutcome.STORE_UNAVAILABLE

        if not is_valid:
            logger.info(f"🚫 No valid session for digest {hash_ref}...")
            return ValidationOutcome.INVALID

        logger.debug(f"🔐 Session valid for digest {hash_ref}...")
        return ValidationOutcome.VALID
