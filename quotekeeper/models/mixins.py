"""Mixins for SQLAlchemy models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, func


def generate_id() -> str:
    """Return a new opaque identifier (UUID4 text)."""
    return str(uuid.uuid4())


class UUIDPrimaryKeyMixin:
    """Mixin for a UUID text primary key."""

    id = Column(String(36), primary_key=True, default=generate_id)


class CreatedAtMixin:
    """Mixin to add a created_at timestamp column."""

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
    )
