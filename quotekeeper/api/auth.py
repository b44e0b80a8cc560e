"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from quotekeeper.api.dependencies import (
    get_auth_service,
    get_cookie_jar,
    get_current_user,
    get_session_manager,
    not_authenticated,
    with_status,
)
from quotekeeper.schemas.auth import (
    AuthResult,
    PasswordResetConfirm,
    PasswordResetRequest,
    SessionResponse,
    UserResponse,
    UserSignIn,
    UserSignUp,
)
from quotekeeper.schemas.common import ActionResult
from quotekeeper.services.auth import INVALID_CREDENTIALS, AuthService
from quotekeeper.services.cookies import ResponseCookieJar
from quotekeeper.services.sessions import SessionManager

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/sign-up", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def sign_up(
    user_data: UserSignUp,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Create an account and sign it in."""
    result = auth.sign_up(
        user_data.name, user_data.email, user_data.password, user_data.confirm_password
    )
    return with_status(response, result)


@router.post("/sign-in", response_model=AuthResult)
def sign_in(
    credentials: UserSignIn,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Sign in with email and password."""
    result = auth.sign_in(credentials.email, credentials.password)
    if result.error == INVALID_CREDENTIALS:
        return with_status(response, result, status.HTTP_401_UNAUTHORIZED)
    return with_status(response, result)


@router.post("/sign-out", response_model=ActionResult)
def sign_out(
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Sign out. Succeeds even without a session."""
    return with_status(response, auth.sign_out(), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.get("/session", response_model=SessionResponse)
def get_session(
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    cookies: Annotated[ResponseCookieJar, Depends(get_cookie_jar)],
):
    """Get the session behind the current request."""
    session = sessions.get_session()
    if session is None:
        raise not_authenticated(cookies)
    return SessionResponse(id=session.id, user_id=session.user_id, expires_at=session.expires_at)


@router.post("/password-reset", response_model=ActionResult)
def request_password_reset(
    reset_request: PasswordResetRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Send a password reset link. Always succeeds."""
    return auth.request_password_reset(reset_request.email)


@router.post("/password-reset/confirm", response_model=ActionResult)
def confirm_password_reset(
    reset_data: PasswordResetConfirm,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Set a new password with a reset token."""
    result = auth.reset_password(reset_data.token, reset_data.password, reset_data.confirm_password)
    return with_status(response, result)
