"""In-memory fallback store used while the durable store is unreachable.

Data lives only in this process: it is not shared between instances and is lost on
restart.
"""

import threading
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from quotekeeper.exceptions import DuplicateRecordError
from quotekeeper.models.mixins import generate_id
from quotekeeper.stores.records import (
    CategoryRecord,
    CookiePreferencesRecord,
    QuoteRecord,
    SessionRecord,
    UserRecord,
)


class MemoryStore:
    """QuoteStore implementation on plain dicts guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[str, UserRecord] = {}
        self._sessions: dict[str, SessionRecord] = {}
        self._quotes: dict[str, QuoteRecord] = {}
        self._categories: dict[str, CategoryRecord] = {}
        self._cookie_preferences: dict[str, CookiePreferencesRecord] = {}

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
            self._sessions.clear()
            self._quotes.clear()
            self._categories.clear()
            self._cookie_preferences.clear()

    # Users

    def create_user(
        self, name: str, email: str, password_hash: str, categories: Iterable[str] = ()
    ) -> UserRecord:
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise DuplicateRecordError(f"User with email {email} already exists")
            now = datetime.now(UTC)
            user = UserRecord(
                id=generate_id(),
                name=name,
                email=email,
                password_hash=password_hash,
                created_at=now,
            )
            records = [
                CategoryRecord(id=generate_id(), user_id=user.id, name=category, created_at=now)
                for category in categories
            ]
            self._users[user.id] = user
            self._categories.update((record.id, record) for record in records)
            return user

    def get_user(self, user_id: str) -> UserRecord | None:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            return next((u for u in self._users.values() if u.email == email), None)

    def update_password(self, user_id: str, password_hash: str) -> bool:
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return False
            self._users[user_id] = replace(user, password_hash=password_hash)
            return True

    def save_cookie_preferences(
        self, user_id: str, preferences: dict[str, Any], saved_at: datetime
    ) -> bool:
        with self._lock:
            if user_id not in self._users:
                return False
            self._cookie_preferences[user_id] = CookiePreferencesRecord(
                consent_given=True, preferences=dict(preferences), updated_at=saved_at
            )
            return True

    def get_cookie_preferences(self, user_id: str) -> CookiePreferencesRecord | None:
        with self._lock:
            if user_id not in self._users:
                return None
            empty = CookiePreferencesRecord(consent_given=False, preferences={}, updated_at=None)
            return self._cookie_preferences.get(user_id, empty)

    # Sessions

    def create_session(
        self, user_id: str, expires_at: datetime, replace_existing: bool = True
    ) -> SessionRecord:
        with self._lock:
            if replace_existing:
                self._delete_user_sessions(user_id)
            session = SessionRecord(
                id=generate_id(),
                user_id=user_id,
                expires_at=expires_at,
                created_at=datetime.now(UTC),
            )
            self._sessions[session.id] = session
            return session

    def get_session(self, session_id: str) -> SessionRecord | None:
        return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def delete_user_sessions(self, user_id: str) -> int:
        with self._lock:
            return self._delete_user_sessions(user_id)

    def _delete_user_sessions(self, user_id: str) -> int:
        stale = [sid for sid, s in self._sessions.items() if s.user_id == user_id]
        for sid in stale:
            del self._sessions[sid]
        return len(stale)

    def delete_expired_sessions(self, now: datetime) -> int:
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
            for sid in expired:
                del self._sessions[sid]
            return len(expired)

    # Quotes

    def list_quotes(self, user_id: str) -> list[QuoteRecord]:
        with self._lock:
            quotes = [q for q in self._quotes.values() if q.user_id == user_id]
        return sorted(quotes, key=lambda q: q.created_at, reverse=True)

    def get_quote(self, quote_id: str, user_id: str | None = None) -> QuoteRecord | None:
        quote = self._quotes.get(quote_id)
        if quote is None or (user_id is not None and quote.user_id != user_id):
            return None
        return quote

    def add_quote(self, user_id: str, text: str, author: str, category: str) -> QuoteRecord:
        quote = QuoteRecord(
            id=generate_id(),
            user_id=user_id,
            text=text,
            author=author,
            category=category,
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._quotes[quote.id] = quote
        return quote

    def update_quote(
        self, quote_id: str, user_id: str, text: str, author: str, category: str
    ) -> QuoteRecord | None:
        with self._lock:
            quote = self.get_quote(quote_id, user_id)
            if quote is None:
                return None
            updated = replace(quote, text=text, author=author, category=category)
            self._quotes[quote_id] = updated
            return updated

    def delete_quote(self, quote_id: str, user_id: str) -> bool:
        with self._lock:
            if self.get_quote(quote_id, user_id) is None:
                return False
            del self._quotes[quote_id]
            return True

    # Categories

    def list_categories(self, user_id: str) -> list[CategoryRecord]:
        with self._lock:
            categories = [c for c in self._categories.values() if c.user_id == user_id]
        return sorted(categories, key=lambda c: c.name)

    def get_category(self, category_id: str, user_id: str) -> CategoryRecord | None:
        category = self._categories.get(category_id)
        if category is None or category.user_id != user_id:
            return None
        return category

    def find_category(self, user_id: str, name: str) -> CategoryRecord | None:
        with self._lock:
            return next(
                (c for c in self._categories.values() if c.user_id == user_id and c.name == name),
                None,
            )

    def add_category(self, user_id: str, name: str) -> CategoryRecord:
        category = CategoryRecord(
            id=generate_id(), user_id=user_id, name=name, created_at=datetime.now(UTC)
        )
        with self._lock:
            self._categories[category.id] = category
        return category

    def rename_category(self, category_id: str, user_id: str, name: str) -> CategoryRecord | None:
        with self._lock:
            category = self.get_category(category_id, user_id)
            if category is None:
                return None
            self._relabel_quotes(user_id, category.name, name)
            renamed = replace(category, name=name)
            self._categories[category_id] = renamed
            return renamed

    def delete_category(self, category_id: str, user_id: str, reassign_to: str) -> bool:
        with self._lock:
            category = self.get_category(category_id, user_id)
            if category is None:
                return False
            self._relabel_quotes(user_id, category.name, reassign_to)
            del self._categories[category_id]
            return True

    def _relabel_quotes(self, user_id: str, old_name: str, new_name: str) -> None:
        for quote_id, quote in list(self._quotes.items()):
            if quote.user_id == user_id and quote.category == old_name:
                self._quotes[quote_id] = replace(quote, category=new_name)
