"""Storage interface shared by the durable and fallback stores."""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from quotekeeper.stores.records import (
    CategoryRecord,
    CookiePreferencesRecord,
    QuoteRecord,
    SessionRecord,
    UserRecord,
)


class QuoteStore(Protocol):
    """Persistence operations for users, sessions, quotes and categories.

    Every quote and category lookup is scoped by ``user_id``; a record owned by another
    user behaves exactly like a missing one.
    """

    # Users
    def create_user(
        self, name: str, email: str, password_hash: str, categories: Iterable[str] = ()
    ) -> UserRecord:
        """Create a user together with its initial categories, all or nothing."""
        ...

    def get_user(self, user_id: str) -> UserRecord | None: ...

    def get_user_by_email(self, email: str) -> UserRecord | None: ...

    def update_password(self, user_id: str, password_hash: str) -> bool: ...

    def save_cookie_preferences(
        self, user_id: str, preferences: dict[str, Any], saved_at: datetime
    ) -> bool: ...

    def get_cookie_preferences(self, user_id: str) -> CookiePreferencesRecord | None: ...

    # Sessions
    def create_session(
        self, user_id: str, expires_at: datetime, replace_existing: bool = True
    ) -> SessionRecord: ...

    def get_session(self, session_id: str) -> SessionRecord | None: ...

    def delete_session(self, session_id: str) -> bool: ...

    def delete_user_sessions(self, user_id: str) -> int: ...

    def delete_expired_sessions(self, now: datetime) -> int: ...

    # Quotes
    def list_quotes(self, user_id: str) -> list[QuoteRecord]: ...

    def get_quote(self, quote_id: str, user_id: str | None = None) -> QuoteRecord | None: ...

    def add_quote(self, user_id: str, text: str, author: str, category: str) -> QuoteRecord: ...

    def update_quote(
        self, quote_id: str, user_id: str, text: str, author: str, category: str
    ) -> QuoteRecord | None: ...

    def delete_quote(self, quote_id: str, user_id: str) -> bool: ...

    # Categories
    def list_categories(self, user_id: str) -> list[CategoryRecord]: ...

    def get_category(self, category_id: str, user_id: str) -> CategoryRecord | None: ...

    def find_category(self, user_id: str, name: str) -> CategoryRecord | None: ...

    def add_category(self, user_id: str, name: str) -> CategoryRecord: ...

    def rename_category(self, category_id: str, user_id: str, name: str) -> CategoryRecord | None:
        """Rename a category and re-label the user's quotes that used the old name."""
        ...

    def delete_category(self, category_id: str, user_id: str, reassign_to: str) -> bool:
        """Delete a category, moving the user's quotes in it to ``reassign_to``."""
        ...
