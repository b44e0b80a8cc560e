"""Cookie consent and consent-gated client storage.

Every write of non-essential data to the client goes through
``ConsentGate.set_cookie_with_consent``. Features built on top (analytics, functional
preferences) mark their methods with ``requires_consent`` and silently do nothing when
the user has not opted in, so callers never branch on consent themselves.
"""

import functools
import json
import logging
import re
import secrets
from collections.abc import Callable
from datetime import UTC, datetime
from http.cookies import CookieError
from typing import Any

from pydantic import ValidationError

from quotekeeper.schemas.consent import (
    COOKIE_CATEGORY_DESCRIPTIONS,
    ConsentRecord,
    ConsentUpdate,
    CookieCategory,
)
from quotekeeper.services.cookies import CookieJar

logger = logging.getLogger(__name__)

CONSENT_COOKIE_NAME = "cookieSettings"
CONSENT_COOKIE_DAYS = 365
DEFAULT_COOKIE_DAYS = 30

DAY_SECONDS = 24 * 60 * 60

# Preference keys become cookie names
PREFERENCE_KEY_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")


class ConsentGate:
    """Reads the client's consent record and gates cookie writes on it."""

    def __init__(self, jar: CookieJar, secure: bool = False):
        self.jar = jar
        self.secure = secure

    def load_settings(self) -> ConsentRecord:
        """Return the stored consent record, or the defaults when none is usable."""
        raw = self.jar.get(CONSENT_COOKIE_NAME)
        if not raw:
            return ConsentRecord()
        try:
            return ConsentRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable consent record: {e.error_count()} errors")
            return ConsentRecord()

    def save_settings(self, settings: ConsentRecord) -> ConsentRecord:
        """Stamp and persist a consent record. The record itself is necessary data."""
        saved = settings.model_copy(
            update={"necessary": True, "last_updated": datetime.now(UTC).isoformat()}
        )
        self.jar.set(
            CONSENT_COOKIE_NAME,
            saved.model_dump_json(by_alias=True),
            max_age=CONSENT_COOKIE_DAYS * DAY_SECONDS,
            path="/",
            secure=self.secure,
        )
        return saved

    def update(self, choices: ConsentUpdate) -> ConsentRecord:
        return self.save_settings(
            ConsentRecord(
                functional=choices.functional,
                analytics=choices.analytics,
                marketing=choices.marketing,
                consent_given=True,
            )
        )

    def accept_all(self) -> ConsentRecord:
        return self.update(ConsentUpdate(functional=True, analytics=True, marketing=True))

    def accept_necessary(self) -> ConsentRecord:
        return self.update(ConsentUpdate())

    def has_consent_been_given(self) -> bool:
        return self.load_settings().consent_given

    def should_show_consent_banner(self) -> bool:
        return not self.has_consent_been_given()

    def is_category_allowed(self, category: CookieCategory | str) -> bool:
        """Necessary is always allowed; anything else needs consent plus its own flag."""
        try:
            category = CookieCategory(category)
        except ValueError:
            logger.warning(f"Unknown cookie category {category!r}")
            return False
        if category == CookieCategory.NECESSARY:
            return True
        return self.load_settings().allows(category)

    def set_cookie_with_consent(
        self,
        name: str,
        value: str,
        category: CookieCategory | str,
        *,
        days: int = DEFAULT_COOKIE_DAYS,
        path: str = "/",
        domain: str | None = None,
        secure: bool | None = None,
    ) -> bool:
        """Write a cookie only if its category is allowed. Returns whether it was written."""
        if not self.is_category_allowed(category):
            logger.debug(f"Cookie {name} not set: {category} cookies not allowed")
            return False
        try:
            self.jar.set(
                name,
                value,
                max_age=days * DAY_SECONDS,
                path=path,
                domain=domain,
                secure=self.secure if secure is None else secure,
            )
        except CookieError as e:
            logger.warning(f"Cookie {name!r} not set: {e}")
            return False
        return True

    def get_cookie(self, name: str) -> str | None:
        return self.jar.get(name)

    @staticmethod
    def category_descriptions() -> dict[str, str]:
        return {category.value: text for category, text in COOKIE_CATEGORY_DESCRIPTIONS.items()}


def requires_consent(default: Any = None):
    """Make a feature method a no-op returning ``default`` without current consent.

    ``default`` may be a zero-argument callable (e.g. ``list``) to get a fresh value.
    """

    def decorator(method: Callable) -> Callable:
        @functools.wraps(method)
        def wrapper(self: "ConsentedFeature", *args, **kwargs):
            if not self.can_use():
                return default() if callable(default) else default
            return method(self, *args, **kwargs)

        return wrapper

    return decorator


class ConsentedFeature:
    """Base for client-storage features tied to one consent category.

    Initializes lazily on first use and re-checks consent on every call.
    """

    category: CookieCategory

    def __init__(self, gate: ConsentGate):
        self.gate = gate
        self.initialized = False

    def init(self) -> bool:
        if not self.gate.is_category_allowed(self.category):
            logger.info(f"{self.category.value.capitalize()} features disabled by user preferences")
            return False
        self._setup()
        self.initialized = True
        return True

    def _setup(self) -> None:
        pass

    def can_use(self) -> bool:
        if not self.initialized and not self.init():
            return False
        return self.gate.is_category_allowed(self.category)


def generate_client_id() -> str:
    return secrets.token_hex(13)


class AnalyticsService(ConsentedFeature):
    """First-party analytics that only records anything with analytics consent."""

    category = CookieCategory.ANALYTICS

    SESSION_COOKIE = "analytics_session_id"
    USER_ID_COOKIE = "analytics_user_id"
    EVENTS_COOKIE = "analytics_events"
    MAX_PERSISTED_EVENTS = 20

    def __init__(self, gate: ConsentGate):
        super().__init__(gate)
        self.session_id: str | None = None
        self.user_id: str | None = None
        self.events: list[dict[str, Any]] = []

    def _setup(self) -> None:
        self.session_id = self.gate.get_cookie(self.SESSION_COOKIE) or generate_client_id()
        self.gate.set_cookie_with_consent(
            self.SESSION_COOKIE, self.session_id, self.category, days=1
        )

        existing_user_id = self.gate.get_cookie(self.USER_ID_COOKIE)
        if existing_user_id:
            self.user_id = existing_user_id
        else:
            self.user_id = generate_client_id()
            self.gate.set_cookie_with_consent(
                self.USER_ID_COOKIE, self.user_id, self.category, days=365
            )

        self.events = self._load_events()
        logger.info("Analytics initialized")

    def _load_events(self) -> list[dict[str, Any]]:
        raw = self.gate.get_cookie(self.EVENTS_COOKIE)
        if not raw:
            return []
        try:
            events = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable persisted analytics events")
            return []
        return events if isinstance(events, list) else []

    @requires_consent(default=False)
    def track_page_view(self, url: str, title: str = "", referrer: str = "") -> bool:
        return self.track_event("page_view", {"url": url, "title": title, "referrer": referrer})

    @requires_consent(default=False)
    def track_event(self, name: str, properties: dict[str, Any] | None = None) -> bool:
        event = {
            "name": name,
            "properties": properties or {},
            "timestamp": int(datetime.now(UTC).timestamp() * 1000),
        }
        self.events.append(event)
        logger.debug(f"Analytics event tracked: {name}")
        return self._persist_events()

    def _persist_events(self) -> bool:
        recent = self.events[-self.MAX_PERSISTED_EVENTS :]
        return self.gate.set_cookie_with_consent(
            self.EVENTS_COOKIE, json.dumps(recent), self.category, days=DEFAULT_COOKIE_DAYS
        )


class FunctionalService(ConsentedFeature):
    """Convenience features (preferences, recently viewed quotes) behind functional consent."""

    category = CookieCategory.FUNCTIONAL

    PREFERENCE_PREFIX = "pref_"
    LAST_VIEWED_COOKIE = "last_viewed_quotes"
    MAX_LAST_VIEWED = 5

    @requires_consent(default=False)
    def save_preference(self, key: str, value: str) -> bool:
        if not PREFERENCE_KEY_PATTERN.fullmatch(key):
            logger.warning(f"Preference {key!r} not saved: invalid key")
            return False
        return self.gate.set_cookie_with_consent(
            f"{self.PREFERENCE_PREFIX}{key}", value, self.category, days=365
        )

    @requires_consent(default=None)
    def get_preference(self, key: str) -> str | None:
        return self.gate.get_cookie(f"{self.PREFERENCE_PREFIX}{key}")

    @requires_consent(default=False)
    def save_last_viewed_quotes(self, quote_ids: list[str]) -> bool:
        return self.gate.set_cookie_with_consent(
            self.LAST_VIEWED_COOKIE,
            json.dumps(quote_ids[: self.MAX_LAST_VIEWED]),
            self.category,
            days=DEFAULT_COOKIE_DAYS,
        )

    @requires_consent(default=list)
    def get_last_viewed_quotes(self) -> list[str]:
        raw = self.gate.get_cookie(self.LAST_VIEWED_COOKIE)
        if not raw:
            return []
        try:
            quote_ids = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Failed to parse last viewed quotes")
            return []
        return [str(q) for q in quote_ids] if isinstance(quote_ids, list) else []
