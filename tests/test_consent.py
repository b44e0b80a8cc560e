"""Tests for cookie consent and consent-gated features."""

import json

import pytest
from starlette.requests import Request
from starlette.responses import Response

from quotekeeper.schemas.consent import ConsentRecord, ConsentUpdate, CookieCategory
from quotekeeper.services.consent import (
    CONSENT_COOKIE_NAME,
    AnalyticsService,
    ConsentGate,
    FunctionalService,
)
from quotekeeper.services.cookies import MemoryCookieJar, ResponseCookieJar

DAY = 24 * 60 * 60


def consent_cookie(**choices) -> str:
    return json.dumps(
        {
            "necessary": True,
            "functional": choices.get("functional", False),
            "analytics": choices.get("analytics", False),
            "marketing": choices.get("marketing", False),
            "consentGiven": choices.get("consent_given", True),
            "lastUpdated": "2024-01-01T00:00:00+00:00",
        }
    )


@pytest.fixture
def jar():
    return MemoryCookieJar()


@pytest.fixture
def gate(jar):
    return ConsentGate(jar)


def test_defaults_without_consent_cookie(gate):
    record = gate.load_settings()

    assert record.necessary is True
    assert record.consent_given is False
    assert gate.should_show_consent_banner() is True


def test_necessary_is_always_allowed(gate):
    assert gate.is_category_allowed("necessary") is True
    assert gate.is_category_allowed(CookieCategory.NECESSARY) is True


def test_nothing_else_allowed_without_consent(gate):
    for category in ["functional", "analytics", "marketing"]:
        assert gate.is_category_allowed(category) is False


def test_flags_ignored_until_consent_given():
    cookie = consent_cookie(analytics=True, consent_given=False)
    gate = ConsentGate(MemoryCookieJar({CONSENT_COOKIE_NAME: cookie}))

    assert gate.is_category_allowed("analytics") is False


def test_unknown_category_is_not_allowed(gate):
    gate.accept_all()
    assert gate.is_category_allowed("advertising") is False


def test_unreadable_consent_cookie_falls_back_to_defaults():
    gate = ConsentGate(MemoryCookieJar({CONSENT_COOKIE_NAME: "{not json"}))

    assert gate.load_settings() == ConsentRecord()
    assert gate.should_show_consent_banner() is True


def test_accept_all(gate, jar):
    record = gate.accept_all()

    assert record.consent_given is True
    assert record.functional and record.analytics and record.marketing
    assert record.last_updated
    assert gate.should_show_consent_banner() is False

    stored = json.loads(jar.get(CONSENT_COOKIE_NAME))
    assert stored["consentGiven"] is True
    assert stored["lastUpdated"] == record.last_updated
    assert jar.cookies[CONSENT_COOKIE_NAME].max_age == 365 * DAY


def test_accept_necessary(gate):
    record = gate.accept_necessary()

    assert record.consent_given is True
    assert not (record.functional or record.analytics or record.marketing)
    assert gate.should_show_consent_banner() is False
    assert gate.is_category_allowed("analytics") is False


def test_update_with_specific_choices(gate):
    gate.update(ConsentUpdate(functional=True))

    assert gate.is_category_allowed("functional") is True
    assert gate.is_category_allowed("analytics") is False


def test_necessary_cannot_be_switched_off():
    record = ConsentRecord.model_validate_json(
        '{"necessary": false, "consentGiven": true, "lastUpdated": ""}'
    )
    assert record.necessary is True


def test_set_cookie_with_consent_writes_allowed_cookie(jar):
    jar.set(CONSENT_COOKIE_NAME, consent_cookie(analytics=True))
    gate = ConsentGate(jar)

    assert gate.set_cookie_with_consent("x", "1", "analytics") is True
    assert jar.get("x") == "1"
    assert jar.cookies["x"].max_age == 30 * DAY
    assert jar.cookies["x"].path == "/"


def test_set_cookie_with_consent_skips_disallowed_cookie(jar):
    jar.set(CONSENT_COOKIE_NAME, consent_cookie(analytics=False))
    gate = ConsentGate(jar)

    assert gate.set_cookie_with_consent("x", "1", "analytics") is False
    assert jar.get("x") is None


def test_necessary_cookie_written_without_consent(gate, jar):
    assert gate.set_cookie_with_consent("csrf", "token", "necessary", days=1) is True
    assert jar.cookies["csrf"].max_age == DAY


def test_illegal_cookie_name_is_not_written():
    response = Response()
    jar = ResponseCookieJar(Request({"type": "http", "headers": []}), response)
    gate = ConsentGate(jar)

    assert gate.set_cookie_with_consent("bad name", "1", "necessary") is False
    assert "set-cookie" not in response.headers
    assert jar.get("bad name") is None


def test_category_descriptions(gate):
    descriptions = gate.category_descriptions()
    assert set(descriptions) == {"necessary", "functional", "analytics", "marketing"}


class TestAnalytics:
    def test_no_op_without_consent(self, gate, jar):
        analytics = AnalyticsService(gate)

        assert analytics.track_page_view("/quotes") is False
        assert analytics.track_event("quote_added") is False
        assert analytics.initialized is False
        assert jar.get(AnalyticsService.SESSION_COOKIE) is None
        assert jar.get(AnalyticsService.EVENTS_COOKIE) is None

    def test_tracks_with_consent(self, gate, jar):
        gate.update(ConsentUpdate(analytics=True))
        analytics = AnalyticsService(gate)

        assert analytics.track_page_view("/quotes", title="Quotes") is True

        assert jar.cookies[AnalyticsService.SESSION_COOKIE].max_age == DAY
        assert jar.cookies[AnalyticsService.USER_ID_COOKIE].max_age == 365 * DAY
        events = json.loads(jar.get(AnalyticsService.EVENTS_COOKIE))
        assert events[0]["name"] == "page_view"
        assert events[0]["properties"]["url"] == "/quotes"

    def test_reuses_client_ids(self, jar):
        jar.set(CONSENT_COOKIE_NAME, consent_cookie(analytics=True))
        jar.set(AnalyticsService.SESSION_COOKIE, "session-abc")
        jar.set(AnalyticsService.USER_ID_COOKIE, "user-abc")
        analytics = AnalyticsService(ConsentGate(jar))

        analytics.track_event("opened")

        assert analytics.session_id == "session-abc"
        assert analytics.user_id == "user-abc"

    def test_keeps_last_twenty_events(self, gate, jar):
        gate.accept_all()
        analytics = AnalyticsService(gate)

        for i in range(25):
            analytics.track_event(f"event_{i}")

        events = json.loads(jar.get(AnalyticsService.EVENTS_COOKIE))
        assert len(events) == 20
        assert events[-1]["name"] == "event_24"

    def test_stops_when_consent_withdrawn(self, gate):
        gate.accept_all()
        analytics = AnalyticsService(gate)
        assert analytics.track_event("before") is True

        gate.accept_necessary()

        assert analytics.track_event("after") is False


class TestFunctional:
    def test_no_op_without_consent(self, gate, jar):
        functional = FunctionalService(gate)

        assert functional.save_preference("theme", "dark") is False
        assert functional.get_preference("theme") is None
        assert functional.save_last_viewed_quotes(["a"]) is False
        assert functional.get_last_viewed_quotes() == []
        assert jar.get("pref_theme") is None

    def test_preferences_with_consent(self, gate, jar):
        gate.update(ConsentUpdate(functional=True))
        functional = FunctionalService(gate)

        assert functional.save_preference("theme", "dark") is True
        assert functional.get_preference("theme") == "dark"
        assert jar.cookies["pref_theme"].max_age == 365 * DAY

    def test_invalid_preference_key_is_rejected(self, gate, jar):
        gate.update(ConsentUpdate(functional=True))
        functional = FunctionalService(gate)

        for key in ["a b", "theme;path=/", "", "k" * 65]:
            assert functional.save_preference(key, "dark") is False

        assert set(jar.cookies) == {CONSENT_COOKIE_NAME}

    def test_last_viewed_quotes_keeps_five(self, gate):
        gate.update(ConsentUpdate(functional=True))
        functional = FunctionalService(gate)

        functional.save_last_viewed_quotes([f"q{i}" for i in range(8)])

        assert functional.get_last_viewed_quotes() == ["q0", "q1", "q2", "q3", "q4"]

    def test_unreadable_last_viewed_quotes(self, jar):
        jar.set(CONSENT_COOKIE_NAME, consent_cookie(functional=True))
        jar.set(FunctionalService.LAST_VIEWED_COOKIE, "[broken")

        assert FunctionalService(ConsentGate(jar)).get_last_viewed_quotes() == []
