"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from quotekeeper.config import Settings


def test_defaults():
    settings = Settings(database_url="sqlite:///./test.db")

    assert settings.session_cookie_name == "session_id"
    assert settings.session_max_age_seconds == 7 * 24 * 60 * 60
    assert settings.fallback_freshness_seconds == 5.0
    assert settings.is_development is True


def test_production_requires_real_secret():
    with pytest.raises(ValidationError, match="JWT_SECRET"):
        Settings(environment="production", database_url="postgresql://db.internal/quotekeeper")


def test_production_rejects_localhost_database():
    with pytest.raises(ValidationError, match="localhost"):
        Settings(
            environment="production",
            jwt_secret="a-real-secret",
            database_url="postgresql://localhost/quotekeeper",
        )
