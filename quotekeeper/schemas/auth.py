"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from quotekeeper.schemas.common import ActionResult


class UserSignUp(BaseModel):
    """User sign-up request."""

    name: str = Field("", max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = Field("", max_length=128)
    confirm_password: str | None = Field(None, max_length=128)


class UserSignIn(BaseModel):
    """User sign-in request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., max_length=128)


class PasswordResetRequest(BaseModel):
    """Ask for a password reset link."""

    email: EmailStr = Field(..., max_length=255)


class PasswordResetConfirm(BaseModel):
    """Set a new password using a reset token."""

    token: str
    password: str = Field("", max_length=128)
    confirm_password: str = Field("", max_length=128)


class UserResponse(BaseModel):
    """Public user summary. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    created_at: datetime


class AuthResult(ActionResult):
    """Result of sign-up and sign-in."""

    user: UserResponse | None = None
    needs_cookie_consent: bool = False


class SessionResponse(BaseModel):
    """The session behind the current request."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    expires_at: datetime
