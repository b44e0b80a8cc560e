"""Durable store backed by SQLAlchemy."""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quotekeeper.exceptions import DuplicateRecordError
from quotekeeper.models import AuthSession, Category, Quote, User
from quotekeeper.stores.records import (
    CategoryRecord,
    CookiePreferencesRecord,
    QuoteRecord,
    SessionRecord,
    UserRecord,
    ensure_utc,
)

logger = logging.getLogger(__name__)


def _user_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        created_at=ensure_utc(user.created_at),
    )


def _session_record(session: AuthSession) -> SessionRecord:
    return SessionRecord(
        id=session.id,
        user_id=session.user_id,
        expires_at=ensure_utc(session.expires_at),
        created_at=ensure_utc(session.created_at),
    )


def _quote_record(quote: Quote) -> QuoteRecord:
    return QuoteRecord(
        id=quote.id,
        user_id=quote.user_id,
        text=quote.text,
        author=quote.author,
        category=quote.category,
        created_at=ensure_utc(quote.created_at),
    )


def _category_record(category: Category) -> CategoryRecord:
    return CategoryRecord(
        id=category.id,
        user_id=category.user_id,
        name=category.name,
        created_at=ensure_utc(category.created_at),
    )


class SqlStore:
    """QuoteStore implementation on top of a SQLAlchemy session.

    Each mutating method commits its own transaction and rolls back on failure.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # Users

    def create_user(
        self, name: str, email: str, password_hash: str, categories: Iterable[str] = ()
    ) -> UserRecord:
        user = User(name=name, email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            try:
                self.db.flush()
            except IntegrityError as e:
                raise DuplicateRecordError(f"User with email {email} already exists") from e
            for category in categories:
                self.db.add(Category(user_id=user.id, name=category))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return _user_record(user)

    def get_user(self, user_id: str) -> UserRecord | None:
        user = self.db.query(User).filter(User.id == user_id).first()
        return _user_record(user) if user else None

    def get_user_by_email(self, email: str) -> UserRecord | None:
        user = self.db.query(User).filter(User.email == email).first()
        return _user_record(user) if user else None

    def update_password(self, user_id: str, password_hash: str) -> bool:
        updated = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update({User.password_hash: password_hash}, synchronize_session=False)
        )
        self._commit()
        return updated > 0

    def save_cookie_preferences(
        self, user_id: str, preferences: dict[str, Any], saved_at: datetime
    ) -> bool:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            return False
        user.cookie_preferences = preferences
        user.cookie_consent_given = True
        user.cookie_consent_date = saved_at
        self._commit()
        return True

    def get_cookie_preferences(self, user_id: str) -> CookiePreferencesRecord | None:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            return None
        return CookiePreferencesRecord(
            consent_given=bool(user.cookie_consent_given),
            preferences=dict(user.cookie_preferences or {}),
            updated_at=ensure_utc(user.cookie_consent_date) if user.cookie_consent_date else None,
        )

    # Sessions

    def create_session(
        self, user_id: str, expires_at: datetime, replace_existing: bool = True
    ) -> SessionRecord:
        # Delete and insert share one transaction so concurrent sign-ins cannot
        # leave two live sessions behind.
        try:
            if replace_existing:
                self.db.query(AuthSession).filter(AuthSession.user_id == user_id).delete(
                    synchronize_session=False
                )
            session = AuthSession(user_id=user_id, expires_at=expires_at)
            self.db.add(session)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(session)
        return _session_record(session)

    def get_session(self, session_id: str) -> SessionRecord | None:
        session = self.db.query(AuthSession).filter(AuthSession.id == session_id).first()
        return _session_record(session) if session else None

    def delete_session(self, session_id: str) -> bool:
        deleted = (
            self.db.query(AuthSession)
            .filter(AuthSession.id == session_id)
            .delete(synchronize_session=False)
        )
        self._commit()
        return deleted > 0

    def delete_user_sessions(self, user_id: str) -> int:
        deleted = (
            self.db.query(AuthSession)
            .filter(AuthSession.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self._commit()
        return deleted

    def delete_expired_sessions(self, now: datetime) -> int:
        deleted = (
            self.db.query(AuthSession)
            .filter(AuthSession.expires_at <= now)
            .delete(synchronize_session=False)
        )
        self._commit()
        return deleted

    # Quotes

    def list_quotes(self, user_id: str) -> list[QuoteRecord]:
        quotes = (
            self.db.query(Quote)
            .filter(Quote.user_id == user_id)
            .order_by(Quote.created_at.desc())
            .all()
        )
        return [_quote_record(q) for q in quotes]

    def get_quote(self, quote_id: str, user_id: str | None = None) -> QuoteRecord | None:
        query = self.db.query(Quote).filter(Quote.id == quote_id)
        if user_id is not None:
            query = query.filter(Quote.user_id == user_id)
        quote = query.first()
        return _quote_record(quote) if quote else None

    def add_quote(self, user_id: str, text: str, author: str, category: str) -> QuoteRecord:
        quote = Quote(user_id=user_id, text=text, author=author, category=category)
        self.db.add(quote)
        self._commit()
        self.db.refresh(quote)
        return _quote_record(quote)

    def update_quote(
        self, quote_id: str, user_id: str, text: str, author: str, category: str
    ) -> QuoteRecord | None:
        quote = self.db.query(Quote).filter(Quote.id == quote_id, Quote.user_id == user_id).first()
        if not quote:
            return None
        quote.text = text
        quote.author = author
        quote.category = category
        self._commit()
        self.db.refresh(quote)
        return _quote_record(quote)

    def delete_quote(self, quote_id: str, user_id: str) -> bool:
        deleted = (
            self.db.query(Quote)
            .filter(Quote.id == quote_id, Quote.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self._commit()
        return deleted > 0

    # Categories

    def list_categories(self, user_id: str) -> list[CategoryRecord]:
        categories = (
            self.db.query(Category)
            .filter(Category.user_id == user_id)
            .order_by(Category.name)
            .all()
        )
        return [_category_record(c) for c in categories]

    def get_category(self, category_id: str, user_id: str) -> CategoryRecord | None:
        category = (
            self.db.query(Category)
            .filter(Category.id == category_id, Category.user_id == user_id)
            .first()
        )
        return _category_record(category) if category else None

    def find_category(self, user_id: str, name: str) -> CategoryRecord | None:
        category = (
            self.db.query(Category)
            .filter(Category.user_id == user_id, Category.name == name)
            .first()
        )
        return _category_record(category) if category else None

    def add_category(self, user_id: str, name: str) -> CategoryRecord:
        category = Category(user_id=user_id, name=name)
        self.db.add(category)
        self._commit()
        self.db.refresh(category)
        return _category_record(category)

    def rename_category(self, category_id: str, user_id: str, name: str) -> CategoryRecord | None:
        category = (
            self.db.query(Category)
            .filter(Category.id == category_id, Category.user_id == user_id)
            .first()
        )
        if not category:
            return None
        old_name = category.name
        category.name = name
        self.db.query(Quote).filter(Quote.user_id == user_id, Quote.category == old_name).update(
            {Quote.category: name}, synchronize_session=False
        )
        self._commit()
        self.db.refresh(category)
        return _category_record(category)

    def delete_category(self, category_id: str, user_id: str, reassign_to: str) -> bool:
        category = (
            self.db.query(Category)
            .filter(Category.id == category_id, Category.user_id == user_id)
            .first()
        )
        if not category:
            return False
        self.db.query(Quote).filter(
            Quote.user_id == user_id, Quote.category == category.name
        ).update({Quote.category: reassign_to}, synchronize_session=False)
        self.db.delete(category)
        self._commit()
        logger.info(f"Deleted category {category_id}, quotes moved to '{reassign_to}'")
        return True
