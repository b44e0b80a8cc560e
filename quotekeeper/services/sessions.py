"""Session lifecycle: create, read, and delete the signed-in session of one client.

A session moves from absent to active on sign-in and from active to deleted on
sign-out, or when a read finds it expired. There is no background expiry on this path;
the periodic reap task only trims the durable table.

Every public method catches its own failures and returns a result value.
"""

import logging
import re
from datetime import UTC, datetime, timedelta

from quotekeeper.config import Settings
from quotekeeper.schemas.auth import UserResponse
from quotekeeper.schemas.common import ActionResult
from quotekeeper.services.cookies import CookieJar
from quotekeeper.services.store_selector import ActiveStore, StorageBackend
from quotekeeper.stores.base import QuoteStore
from quotekeeper.stores.records import SessionRecord

logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_valid_session_id(value: str | None) -> bool:
    """Session ids are UUID4 strings; anything else is rejected without a store lookup."""
    return bool(value) and SESSION_ID_PATTERN.match(value) is not None


class SessionManager:
    """Manages the session cookie and the session records behind it.

    The store is re-selected on every call, so a session created just before an outage
    can be invisible to reads served by the fallback until the durable store returns.
    """

    def __init__(
        self,
        backend: StorageBackend,
        durable: QuoteStore,
        cookies: CookieJar,
        settings: Settings,
    ):
        self.backend = backend
        self.durable = durable
        self.cookies = cookies
        self.settings = settings

    def active_store(self) -> ActiveStore:
        return self.backend.resolve(self.durable)

    @property
    def cookie_name(self) -> str:
        return self.settings.session_cookie_name

    def create_session(self, user_id: str) -> ActionResult:
        """Start a new session for ``user_id`` and hand its id to the client."""
        try:
            expires_at = datetime.now(UTC) + timedelta(days=self.settings.session_duration_days)
            active = self.active_store()
            # The durable store keeps one session per user; the fallback keeps every
            # session it is given.
            session = active.store.create_session(
                user_id, expires_at, replace_existing=not active.fallback
            )
            self.cookies.set(
                self.cookie_name,
                session.id,
                max_age=self.settings.session_max_age_seconds,
                path="/",
                secure=not self.settings.is_development,
                httponly=True,
                samesite="lax",
            )
            logger.info(f"Created session for user {user_id} (fallback={active.fallback})")
            return ActionResult.ok(fallback=active.fallback)
        except Exception:
            logger.exception(f"Failed to create session for user {user_id}")
            return ActionResult.fail("Failed to create session")

    def get_session(self) -> SessionRecord | None:
        """Return the live session of this client, or None.

        A session that is missing from the active store, or expired, is deleted
        (record and cookie) before returning None.
        """
        session_id = self.cookies.get(self.cookie_name)
        if not is_valid_session_id(session_id):
            return None

        try:
            active = self.active_store()
            session = active.store.get_session(session_id)
        except Exception:
            logger.exception("Failed to read session")
            return None

        if session is None or session.is_expired():
            logger.debug("Session missing or expired, clearing it")
            self.delete_session()
            return None
        return session

    def delete_session(self) -> ActionResult:
        """End this client's session. Succeeds whether or not a record existed."""
        session_id = self.cookies.get(self.cookie_name)
        result = ActionResult.ok()
        if is_valid_session_id(session_id):
            try:
                active = self.active_store()
                active.store.delete_session(session_id)
                result = ActionResult.ok(fallback=active.fallback)
            except Exception:
                logger.exception("Failed to delete session record")
                result = ActionResult.fail("Failed to delete session")
        self.cookies.delete(self.cookie_name, path="/")
        return result

    def get_current_user(self) -> UserResponse | None:
        """Return the public summary of the signed-in user, or None."""
        session = self.get_session()
        if session is None:
            return None
        try:
            user = self.active_store().store.get_user(session.user_id)
        except Exception:
            logger.exception(f"Failed to load user {session.user_id}")
            return None
        if user is None:
            return None
        return UserResponse(
            id=user.id, name=user.name, email=user.email, created_at=user.created_at
        )
