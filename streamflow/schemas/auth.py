"""
Authentication schemas for request/response validation.

This provides:
1. Request validation schemas
2. Response formatting schemas
3. Token claim schema
4. Type safety for authentication endpoints

Request fields are optional at the schema level: the auth service reports
missing fields with the messages the client displays.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel, Field

from streamflow.schemas.base import CamelModel

if TYPE_CHECKING:
    from streamflow.models.user import User


class SignupRequest(CamelModel):
    """Schema for user registration requests."""

    username: Optional[str] = Field(None, description="Public username (3-30 chars)")
    email: Optional[str] = Field(None, description="User's email address")
    password: Optional[str] = Field(None, description="Password (min 6 characters)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "melody",
                "email": "user@example.com",
                "password": "secret123",
            }
        }
    }


class LoginRequest(CamelModel):
    """Schema for user login requests."""

    email: Optional[str] = Field(None, description="User's email address")
    password: Optional[str] = Field(None, description="User's password")


class DeleteAccountRequest(CamelModel):
    """Password confirmation; not needed for Google-linked accounts."""

    password: Optional[str] = None


# Response Schemas


class UserInfoResponse(CamelModel):
    """Public user information (never includes credentials)."""

    id: int = Field(..., description="User's unique ID")
    username: str
    email: str
    avatar: str = Field("", description="Avatar URL")
    is_email_verified: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: "User") -> "UserInfoResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            avatar=user.avatar_url or "",
            is_email_verified=user.is_email_verified,
            created_at=user.created_at,
        )


class AuthenticationResponse(CamelModel):
    """Signup and login response: the user plus a bearer token."""

    message: str
    user: UserInfoResponse
    token: str


class ProfileResponse(CamelModel):
    user: UserInfoResponse


class TokenVerificationResponse(CamelModel):
    message: str = "Token is valid"
    user: UserInfoResponse


class MessageResponse(CamelModel):
    """Schema for simple message responses."""

    message: str = Field(..., description="Response message")


class ResendVerificationResponse(CamelModel):
    message: str
    email_sent: bool


class TokenClaims(BaseModel):
    """Validated claims of an access token."""

    user_id: int
    exp: int
    iat: int
    type: str


class APIError(BaseModel):
    """Schema for API error responses."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(
        None, description="Additional error details"
    )
