"""Cookie consent, analytics and functional preference endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from quotekeeper.api.dependencies import (
    get_active_store,
    get_analytics_service,
    get_consent_gate,
    get_current_user,
    get_functional_service,
    with_status,
)
from quotekeeper.schemas.auth import UserResponse
from quotekeeper.schemas.common import ActionResult
from quotekeeper.schemas.consent import (
    AnalyticsEvent,
    ConsentRecord,
    ConsentStatus,
    ConsentUpdate,
    CookiePreferencesResponse,
    PageView,
    PreferenceResult,
    PreferenceValue,
    RecentQuotes,
    TrackResult,
)
from quotekeeper.services.consent import AnalyticsService, ConsentGate, FunctionalService
from quotekeeper.services.preferences import get_cookie_preferences, save_cookie_preferences
from quotekeeper.services.store_selector import ActiveStore

router = APIRouter(prefix="/api/v1", tags=["consent"])


def consent_status(gate: ConsentGate, record: ConsentRecord) -> ConsentStatus:
    return ConsentStatus(
        success=True,
        settings=record,
        show_banner=not record.consent_given,
        descriptions=gate.category_descriptions(),
    )


@router.get("/consent", response_model=ConsentStatus)
def get_consent(gate: Annotated[ConsentGate, Depends(get_consent_gate)]):
    """Get the consent record stored on this client."""
    return consent_status(gate, gate.load_settings())


@router.put("/consent", response_model=ConsentStatus)
def update_consent(
    choices: ConsentUpdate,
    gate: Annotated[ConsentGate, Depends(get_consent_gate)],
):
    """Save consent choices from the cookie settings screen."""
    return consent_status(gate, gate.update(choices))


@router.post("/consent/accept-all", response_model=ConsentStatus)
def accept_all(gate: Annotated[ConsentGate, Depends(get_consent_gate)]):
    return consent_status(gate, gate.accept_all())


@router.post("/consent/accept-necessary", response_model=ConsentStatus)
def accept_necessary(gate: Annotated[ConsentGate, Depends(get_consent_gate)]):
    return consent_status(gate, gate.accept_necessary())


@router.get("/consent/account", response_model=CookiePreferencesResponse)
def get_account_consent(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    active: Annotated[ActiveStore, Depends(get_active_store)],
):
    """Get the cookie preferences saved to the current user's account."""
    return get_cookie_preferences(active, current_user.id)


@router.put("/consent/account", response_model=ActionResult)
def save_account_consent(
    choices: ConsentUpdate,
    response: Response,
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    active: Annotated[ActiveStore, Depends(get_active_store)],
):
    """Save cookie preferences to the current user's account."""
    return with_status(response, save_cookie_preferences(active, current_user.id, choices))


@router.post("/analytics/events", response_model=TrackResult)
def track_event(
    event: AnalyticsEvent,
    analytics: Annotated[AnalyticsService, Depends(get_analytics_service)],
):
    """Record an analytics event. Ignored without analytics consent."""
    return TrackResult(tracked=analytics.track_event(event.name, event.properties))


@router.post("/analytics/page-views", response_model=TrackResult)
def track_page_view(
    page_view: PageView,
    analytics: Annotated[AnalyticsService, Depends(get_analytics_service)],
):
    """Record a page view. Ignored without analytics consent."""
    tracked = analytics.track_page_view(page_view.url, page_view.title, page_view.referrer)
    return TrackResult(tracked=tracked)


@router.get("/preferences/recent-quotes", response_model=RecentQuotes)
def get_recent_quotes(
    functional: Annotated[FunctionalService, Depends(get_functional_service)],
):
    """Quotes viewed recently on this client (empty without functional consent)."""
    return RecentQuotes(quote_ids=functional.get_last_viewed_quotes())


@router.put("/preferences/recent-quotes", response_model=RecentQuotes)
def save_recent_quotes(
    recent: RecentQuotes,
    functional: Annotated[FunctionalService, Depends(get_functional_service)],
):
    functional.save_last_viewed_quotes(recent.quote_ids)
    return RecentQuotes(quote_ids=functional.get_last_viewed_quotes())


@router.get("/preferences/{key}", response_model=PreferenceResult)
def get_preference(
    key: str,
    functional: Annotated[FunctionalService, Depends(get_functional_service)],
):
    """Read a stored preference (null without functional consent)."""
    return PreferenceResult(key=key, value=functional.get_preference(key))


@router.put("/preferences/{key}", response_model=PreferenceResult)
def save_preference(
    key: str,
    preference: PreferenceValue,
    functional: Annotated[FunctionalService, Depends(get_functional_service)],
):
    """Store a preference. Not saved without functional consent."""
    saved = functional.save_preference(key, preference.value)
    return PreferenceResult(key=key, value=preference.value if saved else None, saved=saved)
