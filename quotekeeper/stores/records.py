"""Plain records exchanged between stores and services."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tzinfo on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class SessionRecord:
    id: str
    user_id: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return ensure_utc(self.expires_at) <= (now or datetime.now(UTC))


@dataclass(frozen=True)
class QuoteRecord:
    id: str
    user_id: str
    text: str
    author: str
    category: str
    created_at: datetime


@dataclass(frozen=True)
class CategoryRecord:
    id: str
    user_id: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class CookiePreferencesRecord:
    """Cookie preferences a signed-in user saved to their account."""

    consent_given: bool
    preferences: dict[str, Any]
    updated_at: datetime | None
