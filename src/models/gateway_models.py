# src/models/gateway_models.py

from enum import Enum
from typing import Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class SameSite(str, Enum):
    LAX = "Lax"
    STRICT = "Strict"
    NONE = "None"


class ValidationOutcome(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    STORE_UNAVAILABLE = "store_unavailable"


COOKIE_NAME = "echo_session"
COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


class DeploymentConfig(BaseModel):
    """
    Cookie and CORS settings for one deployment.

    Built once at startup and never mutated afterwards, so concurrent
    requests can share a single instance.
    """
    model_config = ConfigDict(frozen=True)

    cookie_domain: Optional[str] = None
    cookie_secure: bool = True
    same_site: SameSite = SameSite.LAX
    max_age: int = Field(default=COOKIE_MAX_AGE, gt=0)
    allowed_origins: Tuple[str, ...] = ()

    def origin_allowed(self, origin: str) -> bool:
        # An empty allowlist echoes any Origin
        if not self.allowed_origins:
            return True
        return origin in self.allowed_origins


class CookieAttributes(BaseModel):
    """Attributes of the session cookie issued for a validated credential"""
    model_config = ConfigDict(frozen=True)

    name: str = COOKIE_NAME
    value: str
    path: str = "/"
    max_age: int = COOKIE_MAX_AGE
    http_only: bool = True
    same_site: SameSite = SameSite.LAX
    secure: bool = True
    domain: Optional[str] = None

    def to_header(self) -> str:
        """Render as a single Set-Cookie header value"""
        parts = [
            f"{self.name}={self.value}",
            f"Path={self.path}",
            f"Max-Age={self.max_age}",
        ]
        if self.http_only:
            parts.append("HttpOnly")
        parts.append(f"SameSite={self.same_site.value}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        return "; ".join(parts)


class GatewayRequest(BaseModel):
    """Transport-neutral view of an inbound request"""
    method: str
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup"""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def origin(self) -> Optional[str]:
        return self.header("origin") or None


class GatewayResponse(BaseModel):
    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""
