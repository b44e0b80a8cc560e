"""Tests for the durable and in-memory stores.

Both implementations must behave the same, so most tests run against each.
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from quotekeeper.exceptions import DuplicateRecordError
from quotekeeper.models import Category, Quote, User
from quotekeeper.stores.memory import MemoryStore
from quotekeeper.stores.sql import SqlStore


@pytest.fixture(params=["sql", "memory"])
def store(request, db):
    if request.param == "sql":
        return SqlStore(db)
    return MemoryStore()


@pytest.fixture
def user(store):
    return store.create_user("Ada", "ada@example.com", "hash")


def test_create_and_find_user(store, user):
    assert store.get_user(user.id) == user
    assert store.get_user_by_email("ada@example.com") == user
    assert store.get_user_by_email("nobody@example.com") is None


def test_duplicate_email_is_rejected(store, user):
    with pytest.raises(DuplicateRecordError):
        store.create_user("Other Ada", "ada@example.com", "hash")


def test_create_user_with_categories(store):
    user = store.create_user("Ada", "ada@example.com", "hash", categories=["wisdom", "humor"])

    assert [c.name for c in store.list_categories(user.id)] == ["humor", "wisdom"]


def test_duplicate_email_adds_no_categories(store, user):
    with pytest.raises(DuplicateRecordError):
        store.create_user("Other Ada", "ada@example.com", "hash", categories=["humor"])

    assert store.list_categories(user.id) == []


def test_failed_category_insert_leaves_no_user(db):
    store = SqlStore(db)

    # A category without a name violates NOT NULL
    with pytest.raises(IntegrityError):
        store.create_user("Ada", "ada@example.com", "hash", categories=["wisdom", None])

    assert store.get_user_by_email("ada@example.com") is None
    assert db.query(Category).count() == 0


def test_update_password(store, user):
    assert store.update_password(user.id, "new-hash") is True
    assert store.get_user(user.id).password_hash == "new-hash"
    assert store.update_password("missing", "new-hash") is False


def test_cookie_preferences(store, user):
    assert store.get_cookie_preferences(user.id).consent_given is False

    saved_at = datetime.now(UTC)
    prefs = {"necessary": True, "functional": True, "analytics": False, "marketing": False}
    assert store.save_cookie_preferences(user.id, prefs, saved_at) is True

    record = store.get_cookie_preferences(user.id)
    assert record.consent_given is True
    assert record.preferences == prefs
    assert record.updated_at is not None


def test_cookie_preferences_for_unknown_user(store):
    assert store.save_cookie_preferences("missing", {}, datetime.now(UTC)) is False
    assert store.get_cookie_preferences("missing") is None


def test_delete_expired_sessions(store, user):
    now = datetime.now(UTC)
    expired = store.create_session(user.id, now - timedelta(hours=1), replace_existing=False)
    live = store.create_session(user.id, now + timedelta(days=7), replace_existing=False)

    assert store.delete_expired_sessions(now) == 1
    assert store.get_session(expired.id) is None
    assert store.get_session(live.id) is not None


def test_delete_user_sessions(store, user):
    expires_at = datetime.now(UTC) + timedelta(days=7)
    store.create_session(user.id, expires_at, replace_existing=False)
    store.create_session(user.id, expires_at, replace_existing=False)

    assert store.delete_user_sessions(user.id) == 2
    assert store.delete_user_sessions(user.id) == 0


def test_quotes_are_scoped_to_user(store, user):
    other = store.create_user("Grace", "grace@example.com", "hash")
    quote = store.add_quote(user.id, "Stay hungry", "Unknown", "motivation")

    assert store.get_quote(quote.id, user.id) == quote
    assert store.get_quote(quote.id, other.id) is None
    assert store.list_quotes(other.id) == []
    assert store.update_quote(quote.id, other.id, "Mine now", "Grace", "other") is None
    assert store.delete_quote(quote.id, other.id) is False
    # Without an owner the lookup is global, as used by share pages
    assert store.get_quote(quote.id) == quote


def test_update_and_delete_quote(store, user):
    quote = store.add_quote(user.id, "Stay hungry", "Unknown", "motivation")

    updated = store.update_quote(quote.id, user.id, "Stay foolish", "Steve Jobs", "wisdom")
    assert updated.text == "Stay foolish"
    assert updated.author == "Steve Jobs"
    assert updated.category == "wisdom"
    assert updated.created_at == quote.created_at

    assert store.delete_quote(quote.id, user.id) is True
    assert store.get_quote(quote.id, user.id) is None


def test_categories_sorted_by_name(store, user):
    for name in ["wisdom", "humor", "other"]:
        store.add_category(user.id, name)

    assert [c.name for c in store.list_categories(user.id)] == ["humor", "other", "wisdom"]
    assert store.find_category(user.id, "humor").name == "humor"
    assert store.find_category(user.id, "sports") is None


def test_rename_category_relabels_quotes(store, user):
    category = store.add_category(user.id, "humor")
    quote = store.add_quote(user.id, "A day without laughter is a day wasted", "Chaplin", "humor")

    renamed = store.rename_category(category.id, user.id, "comedy")

    assert renamed.name == "comedy"
    assert store.get_quote(quote.id, user.id).category == "comedy"


def test_delete_category_reassigns_quotes(store, user):
    category = store.add_category(user.id, "humor")
    quote = store.add_quote(user.id, "A day without laughter is a day wasted", "Chaplin", "humor")

    assert store.delete_category(category.id, user.id, reassign_to="other") is True

    assert store.get_category(category.id, user.id) is None
    assert store.get_quote(quote.id, user.id).category == "other"


def test_category_of_other_user_is_invisible(store, user):
    other = store.create_user("Grace", "grace@example.com", "hash")
    category = store.add_category(user.id, "humor")

    assert store.get_category(category.id, other.id) is None
    assert store.rename_category(category.id, other.id, "comedy") is None
    assert store.delete_category(category.id, other.id, reassign_to="other") is False


def test_deleting_user_cascades(db):
    store = SqlStore(db)
    user = store.create_user("Ada", "ada@example.com", "hash")
    store.add_quote(user.id, "Stay hungry", "Unknown", "motivation")
    store.add_category(user.id, "motivation")
    store.create_session(user.id, datetime.now(UTC) + timedelta(days=7))

    db.delete(db.query(User).filter(User.id == user.id).first())
    db.commit()

    assert db.query(Quote).count() == 0
    assert db.query(Category).count() == 0
    assert store.delete_user_sessions(user.id) == 0


def test_memory_store_clear():
    store = MemoryStore()
    user = store.create_user("Ada", "ada@example.com", "hash")
    store.add_quote(user.id, "Stay hungry", "Unknown", "motivation")

    store.clear()

    assert store.get_user(user.id) is None
    assert store.list_quotes(user.id) == []
