"""
Authentication Service - Business logic for user authentication.

This provides:
1. Password signup and login
2. Google sign-in (lookup, account linking, or creation)
3. Email verification and resending the verification link
4. Account deletion with password confirmation
5. Resolving bearer token claims to a live user
"""

import re
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.config import settings
from streamflow.core.email import EmailService
from streamflow.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ValidationError,
)
from streamflow.core.google_oauth import GoogleProfile
from streamflow.core.security import (
    SecurityManager,
    generate_verification_token,
    security_manager,
)
from streamflow.database import utcnow
from streamflow.models.user import User
from streamflow.repositories.user_repository import UserRepository
from streamflow.schemas.auth import TokenClaims
from streamflow.services.base import BaseService

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30


@dataclass
class AuthResult:
    """A signed-in user and the bearer token issued for them."""

    user: User
    token: str


def derive_username(display_name: Optional[str], email: str) -> str:
    """
    Candidate username for a new Google account: the display name, else
    the email local part, squeezed into the allowed 3-30 characters.
    """
    base = " ".join((display_name or "").split())
    if not base:
        base = email.split("@")[0].strip()

    base = base[:USERNAME_MAX_LENGTH].strip()
    if len(base) < USERNAME_MIN_LENGTH:
        base = f"user{base}"
    return base


class AuthService(BaseService):
    """
    Authentication service handling all auth-related business logic.

    Security events (signup, login, verification, deletion) are logged
    with the user id, never with credentials.
    """

    def __init__(
        self,
        db: AsyncSession,
        email_service: EmailService,
        security: SecurityManager = security_manager,
    ):
        super().__init__(db)
        self.user_repo = UserRepository(db)
        self.email_service = email_service
        self.security = security

    def issue_token(self, user: User) -> str:
        return self.security.create_access_token(user.id)

    def _new_verification_pair(self):
        token = generate_verification_token()
        expires = utcnow() + timedelta(hours=settings.email_verification_expire_hours)
        return token, expires

    async def signup(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResult:
        """
        Register a password account.

        Business rules:
        1. Username, email and password are all required
        2. Username is 3-30 characters, password at least 6
        3. Email and username are unique; an email clash is reported first
        4. The account starts unverified with a 24h verification token
        5. The verification email is best-effort

        Raises:
            ValidationError: On missing or invalid fields
            ConflictError: If the email or username is taken
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()

        if not username or not email or not password:
            raise ValidationError("All fields are required")
        if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
            raise ValidationError(
                f"Username must be between {USERNAME_MIN_LENGTH} and "
                f"{USERNAME_MAX_LENGTH} characters"
            )
        if len(password) < settings.password_min_length:
            raise ValidationError(
                f"Password must be at least {settings.password_min_length} characters"
            )

        self._log_operation("signup", username=username)

        await self._ensure_available(email, username)

        token, expires = self._new_verification_pair()
        try:
            user = await self.user_repo.create(
                {
                    "username": username,
                    "email": email,
                    "hashed_password": self.security.create_password_hash(password),
                    "is_email_verified": False,
                    "email_verification_token": token,
                    "email_verification_expires": expires,
                }
            )
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email/username
            await self.db.rollback()
            await self._ensure_available(email, username)
            raise ConflictError("Email or username already taken")

        self.logger.info(f"User registered successfully: {user.id}")

        sent = await self.email_service.send_verification_email(
            user.email, user.username, token
        )
        if not sent:
            self.logger.warning(f"Verification email not sent for user {user.id}")

        return AuthResult(user=user, token=self.issue_token(user))

    async def _ensure_available(self, email: str, username: str) -> None:
        existing = await self.user_repo.get_by_email_or_username(email, username)
        if existing:
            if existing.email == email:
                raise ConflictError("Email already registered")
            raise ConflictError("Username already taken")

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Authenticate with email and password.

        Raises:
            ValidationError: If either field is missing
            AuthenticationError: On unknown email, Google-only account or bad password
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        self._log_operation("login", email=email.strip().lower())

        user = await self.user_repo.get_by_email(email)
        if not user:
            raise AuthenticationError("Invalid credentials")
        if not user.has_password:
            raise AuthenticationError("Please use Google OAuth to login")
        if not self.security.verify_password(password, user.hashed_password):
            self.logger.warning(f"Failed login attempt for user {user.id}")
            raise AuthenticationError("Invalid credentials")

        self.logger.info(f"User logged in: {user.id}")
        return AuthResult(user=user, token=self.issue_token(user))

    async def federated_login(self, profile: GoogleProfile) -> AuthResult:
        """
        Sign in with a Google profile.

        Lookup order: linked Google id, then email (which links the Google
        identity to the existing account), else a new verified account.

        Raises:
            ConflictError: If a concurrent sign-in left no usable account
            ServiceError: On any unexpected persistence failure
        """
        self._log_operation("federated_login", google_id=profile.google_id)

        try:
            return await self._resolve_google_account(profile)
        except Exception as error:
            await self._handle_service_error(error, "sign in with Google")

    async def _resolve_google_account(self, profile: GoogleProfile) -> AuthResult:
        user = await self.user_repo.get_by_google_id(profile.google_id)
        if user:
            self.logger.info(f"User logged in with Google: {user.id}")
            return AuthResult(user=user, token=self.issue_token(user))

        user = await self.user_repo.get_by_email(profile.email)
        if user:
            user = await self.user_repo.update(
                user.id,
                {
                    "google_id": profile.google_id,
                    "avatar_url": profile.avatar_url or user.avatar_url,
                    "is_email_verified": True,
                    "email_verification_token": None,
                    "email_verification_expires": None,
                },
            )
            self.logger.info(f"Linked Google account to user {user.id}")
            return AuthResult(user=user, token=self.issue_token(user))

        username = await self._unique_username(
            derive_username(profile.display_name, profile.email)
        )
        try:
            user = await self.user_repo.create(
                {
                    "username": username,
                    "email": profile.email.strip().lower(),
                    "google_id": profile.google_id,
                    "avatar_url": profile.avatar_url,
                    "is_email_verified": True,
                }
            )
        except IntegrityError:
            # The same Google account completed a concurrent sign-in
            await self.db.rollback()
            user = await self.user_repo.get_by_google_id(profile.google_id)
            if not user:
                raise ConflictError("Could not create account for Google profile")

        self.logger.info(f"User registered with Google: {user.id}")
        return AuthResult(user=user, token=self.issue_token(user))

    async def _unique_username(self, base: str) -> str:
        candidate = base
        while await self.user_repo.get_by_username(candidate):
            suffix = str(secrets.randbelow(10000))
            candidate = f"{base[:USERNAME_MAX_LENGTH - len(suffix)]}{suffix}"
        return candidate

    async def get_user_for_claims(self, claims: TokenClaims) -> User:
        """
        Resolve token claims to the user they name.

        Raises:
            AuthenticationError: If the user no longer exists
        """
        user = await self.user_repo.get(claims.user_id)
        if not user:
            raise AuthenticationError("Invalid token")
        return user

    async def verify_email(self, token: str) -> User:
        """
        Mark the holder of an unexpired verification token as verified.

        Raises:
            ValidationError: If no user holds the token or it has expired
        """
        user = await self.user_repo.get_by_verification_token(token, utcnow())
        if not user:
            raise ValidationError("Invalid or expired verification token")

        user = await self.user_repo.update(
            user.id,
            {
                "is_email_verified": True,
                "email_verification_token": None,
                "email_verification_expires": None,
            },
        )
        self.logger.info(f"Email verified for user {user.id}")
        return user

    async def resend_verification(self, user: User) -> bool:
        """
        Rotate the verification token and email a fresh link.

        Returns:
            Whether the email was handed off successfully

        Raises:
            ValidationError: If the email is already verified
        """
        if user.is_email_verified:
            raise ValidationError("Email is already verified")

        self._log_operation("resend_verification", user_id=user.id)

        token, expires = self._new_verification_pair()
        user = await self.user_repo.update(
            user.id,
            {"email_verification_token": token, "email_verification_expires": expires},
        )
        return await self.email_service.send_verification_email(
            user.email, user.username, token
        )

    async def delete_account(self, user: User, password: Optional[str]) -> None:
        """
        Delete the account and all its activity.

        Password accounts without a linked Google identity must confirm
        with their password.

        Raises:
            ValidationError: If a required password is missing
            AuthenticationError: If the password does not match
        """
        if user.requires_password_confirmation:
            if not password:
                raise ValidationError("Password is required to delete account")
            if not self.security.verify_password(password, user.hashed_password):
                raise AuthenticationError("Invalid password")

        self._log_operation("delete_account", user_id=user.id)

        email, username, user_id = user.email, user.username, user.id
        try:
            await self.user_repo.delete_with_activity(user_id)
        except Exception as error:
            await self._handle_service_error(error, "delete account")

        self.logger.info(f"Account deleted: {user_id}")

        sent = await self.email_service.send_account_deleted_email(email, username)
        if not sent:
            self.logger.warning(f"Account deletion email not sent for user {user_id}")
