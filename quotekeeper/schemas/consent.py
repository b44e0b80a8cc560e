"""Cookie consent schemas."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quotekeeper.schemas.common import ActionResult


class CookieCategory(StrEnum):
    """Classes of client-side data a user can consent to."""

    NECESSARY = "necessary"
    FUNCTIONAL = "functional"
    ANALYTICS = "analytics"
    MARKETING = "marketing"


COOKIE_CATEGORY_DESCRIPTIONS: dict[CookieCategory, str] = {
    CookieCategory.NECESSARY: (
        "Essential cookies that enable basic functionality and security features of the website."
    ),
    CookieCategory.FUNCTIONAL: (
        "Cookies that enhance the functionality of the website, such as remembering your "
        "preferences."
    ),
    CookieCategory.ANALYTICS: (
        "Cookies that help us understand how you interact with our website and improve your "
        "experience."
    ),
    CookieCategory.MARKETING: (
        "Cookies used to track visitors across websites to display relevant advertisements."
    ),
}


class ConsentRecord(BaseModel):
    """Consent choices held by the client.

    Serialized with camelCase keys (``consentGiven``, ``lastUpdated``) so the stored blob
    matches what browser code reads.
    """

    model_config = ConfigDict(populate_by_name=True)

    necessary: bool = True
    functional: bool = False
    analytics: bool = False
    marketing: bool = False
    consent_given: bool = Field(False, alias="consentGiven")
    last_updated: str = Field("", alias="lastUpdated")

    @field_validator("necessary", mode="after")
    @classmethod
    def necessary_is_always_true(cls, value: bool) -> bool:
        return True

    def allows(self, category: CookieCategory | str) -> bool:
        category = CookieCategory(category)
        if category == CookieCategory.NECESSARY:
            return True
        return self.consent_given and bool(getattr(self, category.value))


class ConsentUpdate(BaseModel):
    """Choices submitted from the cookie settings screen."""

    functional: bool = False
    analytics: bool = False
    marketing: bool = False


class ConsentStatus(ActionResult):
    """Current consent record plus whether the banner should be shown."""

    settings: ConsentRecord
    show_banner: bool
    descriptions: dict[str, str] = {}


class CookiePreferencesResponse(BaseModel):
    """Cookie preferences saved to the user's account."""

    consent_given: bool
    preferences: dict[str, Any] | None = None
    last_updated: datetime | None = None


class AnalyticsEvent(BaseModel):
    """An analytics event sent by the client."""

    name: str = Field(..., min_length=1, max_length=100)
    properties: dict[str, Any] = {}


class PageView(BaseModel):
    url: str = Field(..., max_length=2048)
    title: str = ""
    referrer: str = ""


class TrackResult(BaseModel):
    tracked: bool


class PreferenceValue(BaseModel):
    value: str = Field(..., max_length=1024)


class PreferenceResult(BaseModel):
    key: str
    value: str | None
    saved: bool = False


class RecentQuotes(BaseModel):
    quote_ids: list[str]
