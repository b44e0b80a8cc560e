"""Authentication session model."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from quotekeeper.database import Base
from quotekeeper.models.mixins import CreatedAtMixin, UUIDPrimaryKeyMixin


class AuthSession(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """One signed-in browser context. The id is the session cookie value."""

    __tablename__ = "sessions"

    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="sessions")
