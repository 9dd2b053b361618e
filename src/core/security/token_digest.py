"""Token digest: the only form of a credential that leaves the gateway."""

import hashlib

DIGEST_HEX_LENGTH = 64


def digest(credential: str) -> str:
    """SHA-256 over the UTF-8 bytes of the credential, as lowercase hex."""
    return hashlib.sha256(credential.encode("utf-8")).hexdigest()
