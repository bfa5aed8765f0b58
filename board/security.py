"""
Password hashing and access-token helpers.

Passwords are stored as ``"<salt hex>$<pbkdf2-sha256 hex>"``.  Access
tokens are HS256 JWTs issued and verified with PyJWT; the ``sub`` claim
carries the account id as a string.
"""
import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from board.config import settings


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, settings.PASSWORD_HASH_ITERATIONS
    )
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac(
        "sha256", plain_password.encode("utf-8"), salt, settings.PASSWORD_HASH_ITERATIONS
    )
    return hmac.compare_digest(dk.hex(), hash_hex)


def create_access_token(account_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token whose subject is *account_id*."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": str(account_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify *token* and return its claims, or None if the signature is
    wrong, the token is malformed or it has expired.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None
