"""Tests for periodic cleanup tasks."""

from datetime import UTC, datetime, timedelta

from quotekeeper.celery_app import app as celery_app
from quotekeeper.tasks.cleanup import reap_expired_sessions


def test_reap_expired_sessions(sql_store, stored_user):
    now = datetime.now(UTC)
    expired = sql_store.create_session(stored_user.id, now - timedelta(minutes=5), False)
    live = sql_store.create_session(stored_user.id, now + timedelta(days=7), False)

    result = reap_expired_sessions()

    assert result == {"deleted": 1}
    assert sql_store.get_session(expired.id) is None
    assert sql_store.get_session(live.id) is not None


def test_reap_with_nothing_expired():
    assert reap_expired_sessions() == {"deleted": 0}


def test_reap_is_scheduled():
    schedule = celery_app.conf.beat_schedule["reap-expired-sessions"]
    assert schedule["task"] == "quotekeeper.tasks.cleanup.reap_expired_sessions"
