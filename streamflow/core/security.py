"""
Security utilities for authentication.

This provides:
1. Password hashing and verification
2. Bearer token (JWT) creation and validation
3. Signed OAuth state values and email verification tokens
4. The FastAPI dependency that extracts token claims from a request
"""

import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from streamflow.config import settings
from streamflow.core.exceptions import AuthenticationError, AuthorizationError
from streamflow.database import utcnow
from streamflow.schemas.auth import TokenClaims

ACCESS_TOKEN_TYPE = "access_token"
OAUTH_STATE_TYPE = "oauth_state"

# JWT token scheme; missing headers are reported by get_token_claims
security = HTTPBearer(auto_error=False)


class SecurityManager:
    """
    Centralized security management for the application.

    - bcrypt password hashing
    - JWT access tokens carrying the user id
    - short-lived signed state values for the OAuth round trip
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        bcrypt_rounds: Optional[int] = None,
    ):
        self.secret_key = secret_key or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.access_token_expire_days = settings.access_token_expire_days
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds or settings.bcrypt_rounds,
        )

    def create_password_hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Previously hashed password

        Returns:
            True if password matches, False otherwise
        """
        return self.pwd_context.verify(plain_password, hashed_password)

    def create_access_token(
        self, user_id: int, expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create a JWT access token for a user.

        Args:
            user_id: Database id of the user
            expires_delta: Optional custom expiration time

        Returns:
            Encoded JWT token string
        """
        now = utcnow()
        expire = now + (expires_delta or timedelta(days=self.access_token_expire_days))

        to_encode = {
            "user_id": user_id,
            "exp": expire,
            "iat": now,
            "type": ACCESS_TOKEN_TYPE,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT token.

        Raises:
            AuthorizationError: If token is invalid or expired
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise AuthorizationError("Invalid token") from e

    def parse_access_token(self, token: str) -> TokenClaims:
        """
        Decode an access token into typed claims.

        Raises:
            AuthorizationError: If token is invalid, expired or of another type
        """
        payload = self.decode_token(token)
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise AuthorizationError("Invalid token")

        try:
            return TokenClaims.model_validate(payload)
        except PydanticValidationError as e:
            raise AuthorizationError("Invalid token") from e

    def create_oauth_state(self) -> str:
        """Signed, short-lived value echoed back by the OAuth provider."""
        now = utcnow()
        to_encode = {
            "nonce": secrets.token_urlsafe(16),
            "exp": now + timedelta(minutes=settings.oauth_state_expire_minutes),
            "iat": now,
            "type": OAUTH_STATE_TYPE,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_oauth_state(self, state: str) -> None:
        """
        Raises:
            AuthorizationError: If the state was not issued by us or has expired
        """
        payload = self.decode_token(state)
        if payload.get("type") != OAUTH_STATE_TYPE:
            raise AuthorizationError("Invalid OAuth state")


def generate_verification_token() -> str:
    """Random opaque token for email verification links."""
    return secrets.token_urlsafe(32)


# Global security manager instance
security_manager = SecurityManager()


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenClaims:
    """
    FastAPI dependency to extract the token claims from the Authorization header.

    Raises:
        AuthenticationError: If no bearer token was sent
        AuthorizationError: If the token fails validation
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")

    return security_manager.parse_access_token(credentials.credentials)
