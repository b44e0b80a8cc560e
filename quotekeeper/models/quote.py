"""Quote model."""

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from quotekeeper.database import Base
from quotekeeper.models.mixins import CreatedAtMixin, UUIDPrimaryKeyMixin


class Quote(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """A quote saved by a user."""

    __tablename__ = "quotes"

    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text = Column(Text, nullable=False)
    author = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)  # category name, lowercase

    user = relationship("User", back_populates="quotes")
