"""
Authentication API endpoints.

This provides:
1. Password signup and login
2. Google sign-in redirect and callback
3. Profile, token check and logout
4. Email verification and resending the link
5. Account deletion
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from streamflow.config import settings
from streamflow.core.exceptions import AppException
from streamflow.core.google_oauth import GoogleOAuthClient
from streamflow.core.security import security_manager
from streamflow.dependencies import (
    get_auth_service,
    get_current_user,
    get_google_oauth_client,
)
from streamflow.models.user import User
from streamflow.schemas.auth import (
    APIError,
    AuthenticationResponse,
    DeleteAccountRequest,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    ResendVerificationResponse,
    SignupRequest,
    TokenVerificationResponse,
    UserInfoResponse,
)
from streamflow.services.auth_service import AuthService

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"model": APIError, "description": "Validation failed"},
        401: {"model": APIError, "description": "Authentication failed"},
    },
)


def _frontend_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(
        f"{settings.frontend_url.rstrip('/')}{path}",
        status_code=status.HTTP_302_FOUND,
    )


@router.post(
    "/signup",
    response_model=AuthenticationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def signup(
    payload: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthenticationResponse:
    """
    Create a password account and sign it in.

    **Business Rules:**
    - Username (3-30 chars), email and password (6+ chars) are required
    - Email and username must be unused
    - A verification link is emailed; delivery problems do not fail signup
    """
    result = await auth_service.signup(payload.username, payload.email, payload.password)
    return AuthenticationResponse(
        message="User registered successfully",
        user=UserInfoResponse.from_user(result.user),
        token=result.token,
    )


@router.post(
    "/login",
    response_model=AuthenticationResponse,
    summary="Authenticate user",
)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthenticationResponse:
    result = await auth_service.login(payload.email, payload.password)
    return AuthenticationResponse(
        message="Login successful",
        user=UserInfoResponse.from_user(result.user),
        token=result.token,
    )


@router.get("/google", summary="Start Google sign-in")
async def google_login(
    oauth_client: GoogleOAuthClient = Depends(get_google_oauth_client),
) -> RedirectResponse:
    if not oauth_client.is_configured:
        return _frontend_redirect("/login?error=oauth_failed")

    state = security_manager.create_oauth_state()
    return RedirectResponse(
        oauth_client.authorization_url(state), status_code=status.HTTP_302_FOUND
    )


@router.get("/google/callback", summary="Finish Google sign-in")
async def google_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    oauth_client: GoogleOAuthClient = Depends(get_google_oauth_client),
    auth_service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """
    Exchange the code, sign the user in and hand the token to the
    frontend. Every failure lands on the login page instead.
    """
    if error or not code or not state:
        auth_service.logger.warning(f"Google callback rejected: error={error}")
        return _frontend_redirect("/login?error=oauth_failed")

    try:
        security_manager.verify_oauth_state(state)
        profile = await oauth_client.complete_authorization(code)
        result = await auth_service.federated_login(profile)
    except AppException as e:
        auth_service.logger.warning(f"Google sign-in failed: {e.message}")
        return _frontend_redirect("/login?error=oauth_failed")

    return _frontend_redirect(f"/auth/callback?token={result.token}")


@router.get("/profile", response_model=ProfileResponse, summary="Current user")
async def profile(current_user: User = Depends(get_current_user)) -> ProfileResponse:
    return ProfileResponse(user=UserInfoResponse.from_user(current_user))


@router.post("/verify", response_model=TokenVerificationResponse)
async def verify_token(
    current_user: User = Depends(get_current_user),
) -> TokenVerificationResponse:
    return TokenVerificationResponse(user=UserInfoResponse.from_user(current_user))


@router.post("/logout", response_model=MessageResponse)
async def logout() -> MessageResponse:
    # Tokens are stateless; the client discards its copy
    return MessageResponse(message="Logged out successfully")


@router.get("/verify-email/{token}", response_model=MessageResponse)
async def verify_email(
    token: str,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.verify_email(token)
    return MessageResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=ResendVerificationResponse)
async def resend_verification(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> ResendVerificationResponse:
    sent = await auth_service.resend_verification(current_user)
    if sent:
        message = "Verification email sent successfully"
    else:
        message = "Verification link renewed but the email could not be sent"
    return ResendVerificationResponse(message=message, email_sent=sent)


@router.delete("/delete-account", response_model=MessageResponse)
async def delete_account(
    payload: Optional[DeleteAccountRequest] = None,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    password = payload.password if payload else None
    await auth_service.delete_account(current_user, password)
    return MessageResponse(message="Account deleted successfully")
