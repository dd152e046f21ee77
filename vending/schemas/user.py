"""User Schemas — registration, login and account responses.

Invariants:
    - username is e-mail shaped, stripped and lower-cased
    - Registration never accepts an initial deposit: accounts start at 0
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from vending.core.domain_types import Role

USERNAME_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegistrationRequest(BaseModel):
    """New account — role decides buyer or seller capabilities."""
    username: str = Field(min_length=3, max_length=255, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=8, max_length=72)
    role: Role
    enabled: bool = True

    @field_validator("username", mode="before")
    @classmethod
    def normalize_username(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class RegistrationResponse(BaseModel):
    user_id: UUID


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=72)

    @field_validator("username", mode="before")
    @classmethod
    def normalize_username(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Public account view — never exposes the password hash."""
    id: UUID
    username: str
    role: Role
    deposit: int
    enabled: bool
