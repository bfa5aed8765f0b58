from datetime import timedelta

import jwt

from board.config import settings
from board.security import create_access_token, decode_access_token, hash_password, verify_password


def test_password_hash_verifies():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_password_hashes_are_salted():
    assert hash_password("same") != hash_password("same")


def test_verify_malformed_hash():
    assert not verify_password("anything", "no-separator")
    assert not verify_password("anything", "zz$abc")


def test_token_carries_account_id():
    token = create_access_token(42)
    assert decode_access_token(token)["sub"] == "42"


def test_expired_token_is_rejected():
    token = create_access_token(42, expires_delta=timedelta(seconds=-5))
    assert decode_access_token(token) is None


def test_foreign_signature_is_rejected():
    token = jwt.encode({"sub": "42"}, settings.SECRET_KEY + "-other", algorithm=settings.JWT_ALGORITHM)
    assert decode_access_token(token) is None
