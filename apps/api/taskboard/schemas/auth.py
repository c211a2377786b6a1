"""Authentication schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, StringConstraints

from taskboard.core.validation import normalize_email

LoginEmail = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1),
    AfterValidator(normalize_email),
]
RegisterEmail = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=255),
    AfterValidator(normalize_email),
]


class AuthPrincipal(BaseModel):
    """Authenticated user plus the token that authenticated this request."""

    user_id: str = Field(min_length=1)
    token_id: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    email: RegisterEmail
    # Passwords are compared byte for byte, so they are never trimmed.
    password: str = Field(min_length=1)
    password_confirmation: str | None = None


class LoginRequest(BaseModel):
    email: LoginEmail
    password: str = Field(min_length=1)


class UserSummary(BaseModel):
    id: str
    name: str
    email: str


class UserProfile(UserSummary):
    created_at: datetime
    updated_at: datetime


class AuthSession(BaseModel):
    user: UserSummary
    token: str


class CurrentUser(BaseModel):
    user: UserProfile
