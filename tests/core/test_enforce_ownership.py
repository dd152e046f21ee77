"""Ownership & Role Enforcement — tests for the pure access guards."""

from uuid import uuid4

import pytest

from vending.core.domain_types import Role
from vending.core.enforce_ownership import assert_owner, assert_role
from vending.core.errors import AccessDeniedError


def test_assert_owner_passes_for_same_id():
    owner = uuid4()
    assert_owner(owner, owner)


def test_assert_owner_rejects_other_id():
    with pytest.raises(AccessDeniedError) as exc_info:
        assert_owner(uuid4(), uuid4())
    assert exc_info.value.http_status == 403


def test_assert_role_passes_for_allowed_role():
    assert_role(Role.SELLER, Role.SELLER)
    assert_role(Role.BUYER, Role.BUYER, Role.SELLER)


def test_assert_role_rejects_other_role():
    with pytest.raises(AccessDeniedError) as exc_info:
        assert_role(Role.SELLER, Role.BUYER)
    assert "BUYER" in exc_info.value.message
