# src/core/config.py
from typing import List, Literal, Optional
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings
import logging

from src.models.gateway_models import COOKIE_MAX_AGE, DeploymentConfig, SameSite

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings, read from the environment (or .env) at startup"""
    APP_NAME: str = "EchoSessionGateway"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Session store
    SESSION_STORE_BACKEND: Literal["supabase", "redis", "memory"] = "supabase"
    SESSION_STORE_TIMEOUT: float = Field(default=5.0, gt=0)
    SUPABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL"),
    )
    SUPABASE_PUBLISHABLE_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_PUBLISHABLE_KEY", "VITE_SUPABASE_PUBLISHABLE_KEY"),
    )
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    REDIS_KEY_PREFIX: str = "session:"

    # Cookie
    COOKIE_DOMAIN: Optional[str] = None
    COOKIE_SECURE: bool = True
    COOKIE_SAME_SITE: SameSite = SameSite.LAX
    COOKIE_MAX_AGE: int = Field(default=COOKIE_MAX_AGE, gt=0)

    # CORS / rate limiting
    CORS_ALLOWED_ORIGINS: str = ""
    RATE_LIMIT_SESSION_COOKIE: str = "60/minute"
    # Proxies that append to X-Forwarded-For in front of the app (0: trust no proxy header)
    TRUSTED_PROXY_HOPS: int = Field(default=1, ge=0)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator("SUPABASE_URL", "SUPABASE_PUBLISHABLE_KEY", "SUPABASE_SERVICE_ROLE_KEY", "COOKIE_DOMAIN", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("COOKIE_SAME_SITE", mode="before")
    @classmethod
    def _normalize_same_site(cls, value):
        # Accept "lax", "STRICT", ... from the environment
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @property
    def cors_allowed_origins(self) -> List[str]:
        items = [x.strip().rstrip("/") for x in (self.CORS_ALLOWED_ORIGINS or "").split(",")]
        return [x for x in items if x]


# Configuration available as a singleton
settings = Settings()


def load_deployment_config(source: Optional[Settings] = None) -> DeploymentConfig:
    """Freeze the cookie/CORS part of the settings into a DeploymentConfig"""
    source = source or settings

    if source.COOKIE_SAME_SITE is SameSite.NONE and not source.COOKIE_SECURE:
        logger.warning("⚠️ COOKIE_SAME_SITE=None without COOKIE_SECURE - browsers will reject the cookie")
    if not source.COOKIE_SECURE:
        logger.warning("⚠️ COOKIE_SECURE is disabled - only acceptable for local HTTP development")

    return DeploymentConfig(
        cookie_domain=source.COOKIE_DOMAIN,
        cookie_secure=source.COOKIE_SECURE,
        same_site=source.COOKIE_SAME_SITE,
        max_age=source.COOKIE_MAX_AGE,
        allowed_origins=tuple(source.cors_allowed_origins),
    )


def validate_required_settings(source: Optional[Settings] = None) -> bool:
    """Checks that the selected session store has what it needs"""
    source = source or settings
    missing = []

    if source.SESSION_STORE_BACKEND == "supabase":
        if not source.SUPABASE_URL:
            missing.append("SUPABASE_URL/VITE_SUPABASE_URL")
        if not source.SUPABASE_SERVICE_ROLE_KEY:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")

    if missing:
        logger.warning(f"Missing environment variables: {', '.join(missing)}")
        logger.warning("Session validation will fail with a configuration error until they are set.")
        return False

    return True
