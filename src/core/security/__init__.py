"""
Security layer of the session gateway.

- token_digest: one-way lookup key for a credential
- session_validator: credential -> ValidationOutcome via the session store
- cookie_policy: DeploymentConfig -> session cookie attributes
"""

from .token_digest import digest
from .session_validator import SessionValidator
from .cookie_policy import build as build_cookie, build_header as build_cookie_header

__all__ = [
    'digest',
    'SessionValidator',
    'build_cookie',
    'build_cookie_header'
]
