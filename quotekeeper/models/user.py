"""User model."""

from sqlalchemy import JSON, Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship

from quotekeeper.database import Base
from quotekeeper.models.mixins import CreatedAtMixin, UUIDPrimaryKeyMixin


class User(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """User model for authentication and ownership."""

    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Cookie preferences saved from the consent settings screen
    cookie_preferences = Column(JSON, nullable=True)
    cookie_consent_given = Column(Boolean, nullable=False, default=False)
    cookie_consent_date = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    quotes = relationship(
        "Quote", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    categories = relationship(
        "Category", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    sessions = relationship(
        "AuthSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
