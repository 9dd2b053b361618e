"""
Cookie policy: pure mapping from deployment configuration to the
attributes of the session cookie.

- Path is always "/" and HttpOnly is always set
- Secure is on unless the deployment explicitly turns it off
- Domain is only emitted when configured; it is never taken from the
  request, since widening cookie scope must be an operator decision
"""

from src.models.gateway_models import CookieAttributes, DeploymentConfig


def build(credential: str, config: DeploymentConfig) -> CookieAttributes:
    """Cookie attributes for a credential that has already been validated"""
    return CookieAttributes(
        value=credential,
        path="/",
        max_age=config.max_age,
        http_only=True,
        same_site=config.same_site,
        secure=config.cookie_secure,
        domain=config.cookie_domain or None,
    )


def build_header(credential: str, config: DeploymentConfig) -> str:
    """Single Set-Cookie header value for a validated credential"""
    return build(credential, config).to_header()
