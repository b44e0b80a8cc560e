"""Quote and category actions for the signed-in user."""

import logging

from quotekeeper.schemas.category import (
    CategoryListResult,
    CategoryResponse,
    CategoryResult,
)
from quotekeeper.schemas.common import ActionResult
from quotekeeper.schemas.quote import QuoteListResult, QuoteResponse, QuoteResult
from quotekeeper.services.categorize import FALLBACK_CATEGORY, suggest_category
from quotekeeper.services.store_selector import ActiveStore
from quotekeeper.stores.records import CategoryRecord, QuoteRecord

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "Unknown"
QUOTE_NOT_FOUND = "Quote not found"
CATEGORY_NOT_FOUND = "Category not found"


def connection_error(action: str) -> str:
    return f"Failed to {action}. Please check your database connection."


def normalize_category(name: str) -> str:
    return name.strip().lower()


def _quote_response(record: QuoteRecord) -> QuoteResponse:
    return QuoteResponse.model_validate(record)


def _category_response(record: CategoryRecord) -> CategoryResponse:
    return CategoryResponse.model_validate(record)


class QuoteService:
    """Quote and category CRUD scoped to one user.

    Results carry ``fallback`` so callers can warn that changes are not durable while
    the in-memory store is serving.
    """

    def __init__(self, active: ActiveStore, user_id: str):
        self.store = active.store
        self.fallback = active.fallback
        self.user_id = user_id

    # Quotes

    def list_quotes(self) -> QuoteListResult:
        try:
            quotes = self.store.list_quotes(self.user_id)
        except Exception:
            logger.exception(f"Failed to list quotes for user {self.user_id}")
            return QuoteListResult.fail(connection_error("load quotes"), fallback=self.fallback)
        return QuoteListResult.ok(
            quotes=[_quote_response(q) for q in quotes], fallback=self.fallback
        )

    def get_quote(self, quote_id: str) -> QuoteRecord | None:
        try:
            return self.store.get_quote(quote_id, self.user_id)
        except Exception:
            logger.exception(f"Failed to load quote {quote_id}")
            return None

    def _resolve_category(self, text: str, author: str, category: str) -> str:
        category = normalize_category(category)
        if category:
            return category
        return suggest_category(text, author)

    def add_quote(self, text: str, author: str = "", category: str = "") -> QuoteResult:
        """Save a quote. Empty author becomes "Unknown"; empty category is suggested."""
        text = text.strip()
        if not text:
            return QuoteResult.fail("Quote text is required", fallback=self.fallback)
        author = author.strip() or DEFAULT_AUTHOR
        try:
            category = self._resolve_category(text, author, category)
            self._ensure_category(category)
            quote = self.store.add_quote(self.user_id, text, author, category)
        except Exception:
            logger.exception(f"Failed to add quote for user {self.user_id}")
            return QuoteResult.fail(connection_error("add quote"), fallback=self.fallback)
        return QuoteResult.ok(quote=_quote_response(quote), fallback=self.fallback)

    def update_quote(
        self,
        quote_id: str,
        text: str | None = None,
        author: str | None = None,
        category: str | None = None,
    ) -> QuoteResult:
        try:
            existing = self.store.get_quote(quote_id, self.user_id)
            if existing is None:
                return QuoteResult.fail(QUOTE_NOT_FOUND, fallback=self.fallback)
            new_text = text.strip() if text is not None else existing.text
            if not new_text:
                return QuoteResult.fail("Quote text is required", fallback=self.fallback)
            new_author = existing.author
            if author is not None:
                new_author = author.strip() or DEFAULT_AUTHOR
            new_category = existing.category
            if category is not None:
                new_category = self._resolve_category(new_text, new_author, category)
                self._ensure_category(new_category)
            quote = self.store.update_quote(
                quote_id, self.user_id, new_text, new_author, new_category
            )
        except Exception:
            logger.exception(f"Failed to update quote {quote_id}")
            return QuoteResult.fail(connection_error("update quote"), fallback=self.fallback)
        if quote is None:
            return QuoteResult.fail(QUOTE_NOT_FOUND, fallback=self.fallback)
        return QuoteResult.ok(quote=_quote_response(quote), fallback=self.fallback)

    def delete_quote(self, quote_id: str) -> ActionResult:
        try:
            deleted = self.store.delete_quote(quote_id, self.user_id)
        except Exception:
            logger.exception(f"Failed to delete quote {quote_id}")
            return ActionResult.fail(connection_error("delete quote"), fallback=self.fallback)
        if not deleted:
            return ActionResult.fail(QUOTE_NOT_FOUND, fallback=self.fallback)
        return ActionResult.ok(fallback=self.fallback)

    # Categories

    def _ensure_category(self, name: str) -> CategoryRecord:
        existing = self.store.find_category(self.user_id, name)
        if existing is not None:
            return existing
        return self.store.add_category(self.user_id, name)

    def list_categories(self) -> CategoryListResult:
        try:
            categories = self.store.list_categories(self.user_id)
        except Exception:
            logger.exception(f"Failed to list categories for user {self.user_id}")
            return CategoryListResult.fail(
                connection_error("load categories"), fallback=self.fallback
            )
        return CategoryListResult.ok(
            categories=[c.name for c in categories],
            items=[_category_response(c) for c in categories],
            fallback=self.fallback,
        )

    def add_category(self, name: str) -> CategoryResult:
        """Add a category. Adding a name that already exists succeeds without a duplicate."""
        name = normalize_category(name)
        if not name:
            return CategoryResult.fail("Category name is required", fallback=self.fallback)
        try:
            category = self._ensure_category(name)
        except Exception:
            logger.exception(f"Failed to add category for user {self.user_id}")
            return CategoryResult.fail(connection_error("add category"), fallback=self.fallback)
        return CategoryResult.ok(category=_category_response(category), fallback=self.fallback)

    def rename_category(self, category_id: str, name: str) -> CategoryResult:
        name = normalize_category(name)
        if not name:
            return CategoryResult.fail("Category name is required", fallback=self.fallback)
        try:
            current = self.store.get_category(category_id, self.user_id)
            if current is None:
                return CategoryResult.fail(CATEGORY_NOT_FOUND, fallback=self.fallback)
            if current.name == name:
                return CategoryResult.ok(
                    category=_category_response(current), fallback=self.fallback
                )
            if current.name == FALLBACK_CATEGORY:
                return CategoryResult.fail(
                    f'The "{FALLBACK_CATEGORY}" category cannot be renamed', fallback=self.fallback
                )
            if self.store.find_category(self.user_id, name) is not None:
                return CategoryResult.fail("Category already exists", fallback=self.fallback)
            category = self.store.rename_category(category_id, self.user_id, name)
        except Exception:
            logger.exception(f"Failed to rename category {category_id}")
            return CategoryResult.fail(connection_error("rename category"), fallback=self.fallback)
        if category is None:
            return CategoryResult.fail(CATEGORY_NOT_FOUND, fallback=self.fallback)
        return CategoryResult.ok(category=_category_response(category), fallback=self.fallback)

    def delete_category(self, category_id: str) -> ActionResult:
        """Delete a category; its quotes move to "other"."""
        try:
            category = self.store.get_category(category_id, self.user_id)
            if category is None:
                return ActionResult.fail(CATEGORY_NOT_FOUND, fallback=self.fallback)
            if category.name == FALLBACK_CATEGORY:
                return ActionResult.fail(
                    f'The "{FALLBACK_CATEGORY}" category cannot be deleted', fallback=self.fallback
                )
            self._ensure_category(FALLBACK_CATEGORY)
            self.store.delete_category(category_id, self.user_id, reassign_to=FALLBACK_CATEGORY)
        except Exception:
            logger.exception(f"Failed to delete category {category_id}")
            return ActionResult.fail(connection_error("delete category"), fallback=self.fallback)
        return ActionResult.ok(fallback=self.fallback)


def find_shared_quote(active: ActiveStore, quote_id: str) -> QuoteRecord | None:
    """Look up a quote by id for its public share page, regardless of owner."""
    try:
        return active.store.get_quote(quote_id)
    except Exception:
        logger.exception(f"Failed to load shared quote {quote_id}")
        return None
