"""
Tests for password hashing and bearer tokens.
"""
from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from wagehire.core import config
from wagehire.core.access_policy import UserRole
from wagehire.core.security import (
    INVALID_TOKEN_DETAIL,
    ExpiredToken,
    InvalidToken,
    create_access_token,
    decode_access_token,
    generate_verification_token,
    hash_password,
    password_strength_errors,
    verify_password,
)

USER = SimpleNamespace(id=42, email="carol@example.com", role="candidate")


def test_hash_and_verify():
    hashed = hash_password("Str0ng!Pass")
    assert hashed != "Str0ng!Pass"
    assert verify_password("Str0ng!Pass", hashed)
    assert not verify_password("wrong", hashed)


def test_hash_rejects_overlong_password():
    with pytest.raises(ValueError):
        hash_password("a" * 73)


def test_password_strength_lists_unmet_rules():
    assert password_strength_errors("Str0ng!Pass") == []
    assert len(password_strength_errors("weak")) == 4


def test_token_round_trip():
    claims = decode_access_token(create_access_token(USER))
    assert claims.user_id == 42
    assert claims.email == "carol@example.com"
    assert claims.role is UserRole.CANDIDATE


def test_expired_token_rejected():
    token = create_access_token(USER, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ExpiredToken) as exc:
        decode_access_token(token)
    assert exc.value.detail == INVALID_TOKEN_DETAIL


def test_tampered_token_rejected():
    token = create_access_token(USER)
    with pytest.raises(InvalidToken) as exc:
        decode_access_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))
    assert exc.value.detail == INVALID_TOKEN_DETAIL


def test_token_signed_with_other_key_rejected():
    token = jwt.encode({"sub": "42", "email": "x@example.com", "role": "admin"}, "another-key", algorithm="HS256")
    with pytest.raises(InvalidToken):
        decode_access_token(token)


def test_token_missing_claims_rejected():
    token = jwt.encode({"sub": "42"}, config.SECRET_KEY, algorithm=config.ALGORITHM)
    with pytest.raises(InvalidToken):
        decode_access_token(token)


def test_verification_tokens_are_random_hex():
    first, second = generate_verification_token(), generate_verification_token()
    assert first != second
    assert len(first) == 64
    int(first, 16)
