"""Ownership & Role Enforcement — pure guards for seller-owned products and role-scoped actions.

Invariants:
    - assert_owner raises AccessDeniedError when ids differ, returns None otherwise
    - assert_role raises AccessDeniedError when the role is not in the allowed set
    - Neither guard touches the database
"""

from uuid import UUID

from vending.core.domain_types import Role
from vending.core.errors import AccessDeniedError, ErrorContext


def assert_owner(resource_owner_id: UUID, requester_id: UUID) -> None:
    """Only the owning seller may mutate a product."""
    if resource_owner_id != requester_id:
        raise AccessDeniedError(
            "Only the owning seller may modify this product",
            ErrorContext(user_id=str(requester_id)),
        )


def assert_role(role: Role, *allowed: Role) -> None:
    if role not in allowed:
        raise AccessDeniedError(
            f"Role {role.value} is not permitted "
            f"(requires {', '.join(r.value for r in allowed)})",
        )
