"""Credentials — password hashing round trip and JWT claims."""

from datetime import timedelta
from uuid import uuid4

import pytest

from vending.core.domain_types import Role
from vending.core.errors import AuthenticationError
from vending.infrastructure.security import (
    ROLES_CLAIM_KEY,
    create_access_token,
    decode_access_token,
    hash_password,
    token_user_id,
    verify_password,
)


def test_hash_password_verifies_only_the_original():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("battery staple", hashed)


def test_token_carries_subject_and_role():
    user_id = uuid4()
    claims = decode_access_token(create_access_token(user_id, Role.SELLER))
    assert token_user_id(claims) == user_id
    assert claims[ROLES_CLAIM_KEY] == ["SELLER"]
    assert claims["exp"] > claims["iat"]


def test_expired_token_raises():
    token = create_access_token(uuid4(), Role.BUYER, timedelta(seconds=-1))
    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_tampered_token_raises():
    token = create_access_token(uuid4(), Role.BUYER)
    with pytest.raises(AuthenticationError):
        decode_access_token(token[:-2] + ("aa" if token[-2:] != "aa" else "bb"))


def test_non_uuid_subject_raises():
    with pytest.raises(AuthenticationError):
        token_user_id({"sub": "not-a-uuid"})
