"""Account actions: sign-up, sign-in, sign-out and password reset."""

import hashlib
import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from quotekeeper.config import Settings
from quotekeeper.exceptions import DuplicateRecordError
from quotekeeper.schemas.auth import AuthResult, UserResponse
from quotekeeper.schemas.common import ActionResult
from quotekeeper.services.consent import ConsentGate
from quotekeeper.services.sessions import SessionManager
from quotekeeper.stores.records import UserRecord

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DEFAULT_CATEGORIES = ["inspiration", "motivation", "wisdom", "humor", "other"]
MIN_PASSWORD_LENGTH = 6

INVALID_CREDENTIALS = "Invalid email or password"
PASSWORD_RESET_PURPOSE = "password_reset"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_new_password(password: str, confirm_password: str | None) -> str | None:
    """Return a user-facing message if the new password is unacceptable."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if confirm_password is not None and password != confirm_password:
        return "Passwords do not match"
    return None


def _password_fingerprint(password_hash: str) -> str:
    # Ties a reset token to the hash it was issued against, so it stops working
    # once the password changes.
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]


def create_password_reset_token(user: UserRecord, settings: Settings) -> str:
    """Create a signed, short-lived password reset token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.password_reset_expiration_minutes)
    to_encode = {
        "sub": user.id,
        "purpose": PASSWORD_RESET_PURPOSE,
        "pwd": _password_fingerprint(user.password_hash),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_password_reset_token(token: str, settings: Settings) -> dict | None:
    """Decode and validate a password reset token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("purpose") != PASSWORD_RESET_PURPOSE or not payload.get("sub"):
        return None
    return payload


class PasswordResetNotifier:
    """Delivers password reset links. Logs them; no mail transport is configured."""

    def send_reset_link(self, email: str, link: str) -> None:
        logger.info(f"Password reset link issued for {email}")
        logger.debug(f"Password reset link: {link}")


class AuthService:
    """Account actions for one client. Every method returns a result, never raises."""

    def __init__(
        self,
        sessions: SessionManager,
        consent: ConsentGate,
        notifier: PasswordResetNotifier | None = None,
    ):
        self.sessions = sessions
        self.consent = consent
        self.settings = sessions.settings
        self.notifier = notifier or PasswordResetNotifier()

    def _signed_in(self, user: UserRecord, fallback: bool) -> AuthResult:
        session_result = self.sessions.create_session(user.id)
        if not session_result.success:
            return AuthResult.fail(
                "Authentication successful but failed to create session. Please try again.",
                fallback=fallback,
            )
        return AuthResult.ok(
            user=UserResponse(
                id=user.id, name=user.name, email=user.email, created_at=user.created_at
            ),
            needs_cookie_consent=self.consent.should_show_consent_banner(),
            fallback=fallback or session_result.fallback,
        )

    def sign_up(
        self, name: str, email: str, password: str, confirm_password: str | None = None
    ) -> AuthResult:
        """Create an account with the default categories and sign it in."""
        name = name.strip()
        email = normalize_email(email)
        if not name or not email or not password:
            return AuthResult.fail("All fields are required")
        problem = validate_new_password(password, confirm_password)
        if problem:
            return AuthResult.fail(problem)

        try:
            active = self.sessions.active_store()
            store = active.store
            if store.get_user_by_email(email):
                return AuthResult.fail("Email already in use", fallback=active.fallback)

            user = store.create_user(
                name, email, get_password_hash(password), categories=DEFAULT_CATEGORIES
            )
            logger.info(f"User {user.id} signed up (fallback={active.fallback})")
        except DuplicateRecordError:
            return AuthResult.fail("Email already in use")
        except Exception:
            logger.exception("Sign up failed")
            return AuthResult.fail(
                "Failed to create account. Please check your database connection."
            )

        return self._signed_in(user, active.fallback)

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Check credentials and start a session.

        Unknown email and wrong password produce the same message.
        """
        try:
            active = self.sessions.active_store()
            user = active.store.get_user_by_email(normalize_email(email))
            valid = user is not None and verify_password(password, user.password_hash)
        except Exception:
            logger.exception("Sign in failed")
            return AuthResult.fail("Failed to sign in. Please check your database connection.")

        if not valid:
            return AuthResult.fail(INVALID_CREDENTIALS, fallback=active.fallback)

        return self._signed_in(user, active.fallback)

    def sign_out(self) -> ActionResult:
        result = self.sessions.delete_session()
        if not result.success:
            return ActionResult.fail("Failed to sign out")
        return result

    def request_password_reset(self, email: str) -> ActionResult:
        """Issue a reset link if the account exists.

        Always reports success so the response does not reveal whether the email is
        registered.
        """
        try:
            user = self.sessions.active_store().store.get_user_by_email(normalize_email(email))
            if user is not None:
                token = create_password_reset_token(user, self.settings)
                link = f"{self.settings.app_url.rstrip('/')}/reset-password?token={token}"
                self.notifier.send_reset_link(user.email, link)
        except Exception:
            logger.exception("Password reset request failed")
        return ActionResult.ok()

    def reset_password(self, token: str, password: str, confirm_password: str) -> ActionResult:
        """Replace the password of the account named by a valid reset token."""
        if not password:
            return ActionResult.fail("Password is required")
        problem = validate_new_password(password, confirm_password)
        if problem:
            return ActionResult.fail(problem)

        invalid = "Failed to verify reset token. The link may have expired or is invalid."
        payload = decode_password_reset_token(token, self.settings) if token else None
        if payload is None:
            return ActionResult.fail(invalid)

        try:
            active = self.sessions.active_store()
            user = active.store.get_user(payload["sub"])
            if user is None or payload.get("pwd") != _password_fingerprint(user.password_hash):
                return ActionResult.fail(invalid)
            active.store.update_password(user.id, get_password_hash(password))
            revoked = active.store.delete_user_sessions(user.id)
            logger.info(f"Password reset for user {user.id}, {revoked} sessions revoked")
            return ActionResult.ok(fallback=active.fallback)
        except Exception:
            logger.exception("Password reset failed")
            return ActionResult.fail("An unexpected error occurred. Please try again.")
