"""Content encryption for stored blobs.

Blobs are encrypted with Fernet when the caller passes an encryption key.
Per-scope keys are derived from an app secret with PBKDF2 so each
collection scope gets its own key without storing one per scope.
"""

from __future__ import annotations

import base64
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import DecryptionError

_KDF_ITERATIONS = 100_000


@lru_cache(maxsize=64)
def derive_scope_key(secret: str, scope: str) -> str:
    """Derive a url-safe Fernet key for ``scope`` from ``secret``."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=scope.encode("utf-8"),
        iterations=_KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8"))).decode("ascii")


def generate_key() -> str:
    """Return a fresh random Fernet key."""
    return Fernet.generate_key().decode("ascii")


def encrypt_content(key: str, content: str) -> str:
    return Fernet(key.encode("ascii")).encrypt(content.encode("utf-8")).decode("ascii")


def decrypt_content(key: str, token: str) -> str:
    """Decrypt a token produced by ``encrypt_content``.

    Raises:
        DecryptionError: If the key is wrong or the token is corrupt.
    """
    try:
        return Fernet(key.encode("ascii")).decrypt(token.encode("ascii")).decode("utf-8")
    except (InvalidToken, ValueError) as e:
        raise DecryptionError("Stored content could not be decrypted") from e
