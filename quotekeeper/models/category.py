"""Category model."""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from quotekeeper.database import Base
from quotekeeper.models.mixins import CreatedAtMixin, UUIDPrimaryKeyMixin


class Category(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """User-scoped label for organizing quotes."""

    __tablename__ = "categories"

    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)  # always lowercase

    user = relationship("User", back_populates="categories")
