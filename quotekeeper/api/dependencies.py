"""FastAPI dependencies for sessions, consent and services."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from quotekeeper.config import get_settings
from quotekeeper.database import get_db
from quotekeeper.schemas.auth import UserResponse
from quotekeeper.schemas.common import ActionResult
from quotekeeper.services.auth import AuthService
from quotekeeper.services.consent import AnalyticsService, ConsentGate, FunctionalService
from quotekeeper.services.cookies import ResponseCookieJar
from quotekeeper.services.quotes import QuoteService
from quotekeeper.services.sessions import SessionManager
from quotekeeper.services.store_selector import ActiveStore, StorageBackend
from quotekeeper.stores.sql import SqlStore

settings = get_settings()


def get_storage_backend(request: Request) -> StorageBackend:
    """The application's store selector and fallback store."""
    return request.app.state.storage_backend


def get_cookie_jar(request: Request, response: Response) -> ResponseCookieJar:
    return ResponseCookieJar(request, response)


def get_session_manager(
    backend: Annotated[StorageBackend, Depends(get_storage_backend)],
    db: Annotated[Session, Depends(get_db)],
    cookies: Annotated[ResponseCookieJar, Depends(get_cookie_jar)],
) -> SessionManager:
    return SessionManager(backend, SqlStore(db), cookies, settings)


def get_active_store(
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> ActiveStore:
    return sessions.active_store()


def get_consent_gate(
    cookies: Annotated[ResponseCookieJar, Depends(get_cookie_jar)],
) -> ConsentGate:
    return ConsentGate(cookies, secure=not settings.is_development)


def get_auth_service(
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    consent: Annotated[ConsentGate, Depends(get_consent_gate)],
) -> AuthService:
    return AuthService(sessions, consent)


def not_authenticated(cookies: ResponseCookieJar) -> HTTPException:
    """A 401 that still clears a stale session cookie.

    Error responses do not carry the headers set on the injected Response, so the
    session cookie write is copied onto the exception.
    """
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers=cookies.written_header(settings.session_cookie_name),
    )


def get_current_user(
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    cookies: Annotated[ResponseCookieJar, Depends(get_cookie_jar)],
) -> UserResponse:
    """Get the signed-in user from the session cookie."""
    user = sessions.get_current_user()
    if user is None:
        raise not_authenticated(cookies)
    return user


def get_quote_service(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    active: Annotated[ActiveStore, Depends(get_active_store)],
) -> QuoteService:
    return QuoteService(active, current_user.id)


def get_analytics_service(
    consent: Annotated[ConsentGate, Depends(get_consent_gate)],
) -> AnalyticsService:
    return AnalyticsService(consent)


def get_functional_service(
    consent: Annotated[ConsentGate, Depends(get_consent_gate)],
) -> FunctionalService:
    return FunctionalService(consent)


def with_status(
    response: Response,
    result: ActionResult,
    error_status: int = status.HTTP_400_BAD_REQUEST,
    not_found: str | None = None,
):
    """Set the HTTP status for a failed result and return the result unchanged."""
    if not result.success:
        if not_found is not None and result.error == not_found:
            response.status_code = status.HTTP_404_NOT_FOUND
        else:
            response.status_code = error_status
    return result
