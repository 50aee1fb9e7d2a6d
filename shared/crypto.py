"""
Cryptographic helpers — password hashing and OTP hashing.

Uses argon2 for passwords (via argon2-cffi) and SHA-256 for one-time codes,
so neither a password nor a live OTP is ever held in plaintext.
"""

from __future__ import annotations

import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    Returns:
        ``True`` if the password matches, ``False`` on mismatch or when the
        stored hash is not a valid argon2 hash.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def hash_otp(code: str) -> str:
    """Return the hex-encoded SHA-256 digest of an OTP *code*."""
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def digests_match(left: str, right: str) -> bool:
    """Constant-time comparison of two hex digests."""
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))
