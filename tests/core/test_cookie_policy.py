# tests/core/test_cookie_policy.py
"""Tests for the cookie policy and the Set-Cookie serialization"""

import pytest
from pydantic import ValidationError

from src.core.security import build_cookie, build_cookie_header
from src.models.gateway_models import COOKIE_MAX_AGE, DeploymentConfig, SameSite


class TestCookiePolicy:

    def test_default_header(self):
        header = build_cookie_header("tok", DeploymentConfig())

        assert header == "echo_session=tok; Path=/; Max-Age=2592000; HttpOnly; SameSite=Lax; Secure"

    def test_default_attributes(self):
        cookie = build_cookie("tok", DeploymentConfig())

        assert cookie.name == "echo_session"
        assert cookie.value == "tok"
        assert cookie.path == "/"
        assert cookie.max_age == COOKIE_MAX_AGE == 2592000
        assert cookie.http_only is True
        assert cookie.secure is True
        assert cookie.same_site is SameSite.LAX
        assert cookie.domain is None

    def test_no_domain_by_default(self):
        header = build_cookie_header("tok", DeploymentConfig())
        assert "Domain=" not in header

    def test_configured_domain(self):
        header = build_cookie_header("tok", DeploymentConfig(cookie_domain="example.com"))

        assert "; Domain=example.com" in header
        assert header.endswith("SameSite=Lax; Domain=example.com; Secure")

    def test_secure_can_be_disabled_explicitly(self):
        header = build_cookie_header("tok", DeploymentConfig(cookie_secure=False))

        assert "Secure" not in header
        assert "HttpOnly" in header

    def test_same_site_and_max_age_overrides(self):
        header = build_cookie_header(
            "tok",
            DeploymentConfig(same_site=SameSite.STRICT, max_age=3600)
        )

        assert "SameSite=Strict" in header
        assert "Max-Age=3600" in header

    def test_http_only_always_set(self):
        for config in (DeploymentConfig(), DeploymentConfig(cookie_secure=False, same_site=SameSite.NONE)):
            assert build_cookie("tok", config).http_only is True

    def test_foreign_domain_emitted_as_configured(self):
        header = build_cookie_header("tok", DeploymentConfig(cookie_domain="other-host.test"))
        assert "Domain=other-host.test" in header

    def test_deployment_config_is_immutable(self):
        config = DeploymentConfig()
        with pytest.raises(ValidationError):
            config.cookie_secure = False

    def test_max_age_must_be_positive(self):
        with pytest.raises(ValidationError):
            DeploymentConfig(max_age=0)
