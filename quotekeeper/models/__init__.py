"""SQLAlchemy models."""

from quotekeeper.models.category import Category
from quotekeeper.models.quote import Quote
from quotekeeper.models.session import AuthSession
from quotekeeper.models.user import User

__all__ = [
    "User",
    "AuthSession",
    "Quote",
    "Category",
]
