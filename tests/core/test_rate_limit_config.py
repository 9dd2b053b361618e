# tests/core/test_rate_limit_config.py
"""Tests for the rate limit key"""

import pytest
from starlette.requests import Request

from src.core.config import settings
from src.core.rate_limit_config import get_real_ip

PEER = "10.0.0.7"


def make_request(**headers):
    return Request({
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(name.replace("_", "-").lower().encode(), value.encode()) for name, value in headers.items()],
        "client": (PEER, 43210),
    })


class TestGetRealIp:

    def test_single_proxy_uses_rightmost_entry(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 1)
        request = make_request(x_forwarded_for="6.6.6.6, 203.0.113.9")

        assert get_real_ip(request) == "203.0.113.9"

    def test_forged_entries_do_not_change_key(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 1)
        keys = {
            get_real_ip(make_request(x_forwarded_for=f"198.51.100.{n}, 203.0.113.9"))
            for n in range(5)
        }
        assert keys == {"203.0.113.9"}

    def test_two_proxies(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 2)
        request = make_request(x_forwarded_for="6.6.6.6, 203.0.113.9, 10.1.1.1")

        assert get_real_ip(request) == "203.0.113.9"

    def test_short_header_uses_leftmost(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 3)
        assert get_real_ip(make_request(x_forwarded_for="203.0.113.9")) == "203.0.113.9"

    def test_no_trusted_proxy_ignores_headers(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 0)
        request = make_request(x_forwarded_for="203.0.113.9", x_real_ip="203.0.113.10")

        assert get_real_ip(request) == PEER

    @pytest.mark.parametrize("headers, expected", [
        ({"x_real_ip": "203.0.113.10"}, "203.0.113.10"),
        ({"x_forwarded_for": " , "}, PEER),
        ({}, PEER),
    ])
    def test_fallbacks(self, monkeypatch, headers, expected):
        monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 1)
        assert get_real_ip(make_request(**headers)) == expected
