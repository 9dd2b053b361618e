# tests/core/test_token_digest.py
"""Tests for the credential digest"""

import hashlib
import re
import pytest

from src.core.security.token_digest import DIGEST_HEX_LENGTH, digest

HEX_DIGEST = re.compile(r"^[0-9a-f]{64}$")


class TestTokenDigest:

    def test_known_vector(self):
        assert digest("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_empty_string_is_a_valid_input(self):
        assert digest("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    @pytest.mark.parametrize("credential", ["good-token", "a", "x" * 4096, "jeton-élan-🐕"])
    def test_fixed_length_lowercase_hex(self, credential):
        result = digest(credential)
        assert len(result) == DIGEST_HEX_LENGTH
        assert HEX_DIGEST.match(result)

    def test_deterministic(self):
        assert digest("good-token") == digest("good-token")

    def test_digest_differs_from_credential(self):
        assert digest("good-token") != "good-token"
        assert "good-token" not in digest("good-token")

    def test_hashes_utf8_bytes(self):
        assert digest("é") == hashlib.sha256("é".encode("utf-8")).hexdigest()
        assert digest("é") != hashlib.sha256("é".encode("latin-1")).hexdigest()
