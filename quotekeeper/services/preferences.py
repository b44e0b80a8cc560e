"""Cookie preferences saved to the user's account."""

import logging
from datetime import UTC, datetime

from quotekeeper.schemas.common import ActionResult
from quotekeeper.schemas.consent import ConsentUpdate, CookiePreferencesResponse
from quotekeeper.services.store_selector import ActiveStore

logger = logging.getLogger(__name__)


def save_cookie_preferences(
    active: ActiveStore, user_id: str, choices: ConsentUpdate
) -> ActionResult:
    preferences = {"necessary": True, **choices.model_dump()}
    try:
        saved = active.store.save_cookie_preferences(user_id, preferences, datetime.now(UTC))
    except Exception:
        logger.exception(f"Failed to save cookie preferences for user {user_id}")
        return ActionResult.fail("Failed to save cookie preferences", fallback=active.fallback)
    if not saved:
        return ActionResult.fail("User not authenticated", fallback=active.fallback)
    return ActionResult.ok(fallback=active.fallback)


def get_cookie_preferences(active: ActiveStore, user_id: str) -> CookiePreferencesResponse:
    """Return the saved preferences; any failure reads as "no consent given"."""
    try:
        record = active.store.get_cookie_preferences(user_id)
    except Exception:
        logger.exception(f"Failed to load cookie preferences for user {user_id}")
        return CookiePreferencesResponse(consent_given=False)
    if record is None or not record.consent_given:
        return CookiePreferencesResponse(consent_given=False)
    return CookiePreferencesResponse(
        consent_given=True,
        preferences=record.preferences
        or {"necessary": True, "functional": False, "analytics": False, "marketing": False},
        last_updated=record.updated_at,
    )
