"""Category API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from quotekeeper.api.dependencies import get_quote_service, with_status
from quotekeeper.schemas.category import (
    CategoryCreate,
    CategoryListResult,
    CategoryResult,
    CategoryUpdate,
)
from quotekeeper.schemas.common import ActionResult
from quotekeeper.services.quotes import CATEGORY_NOT_FOUND, QuoteService

router = APIRouter(prefix="/api/v1", tags=["categories"])


@router.get("/categories", response_model=CategoryListResult)
def get_categories(
    response: Response,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Get all categories of the current user."""
    return with_status(response, quotes.list_categories(), status.HTTP_503_SERVICE_UNAVAILABLE)


@router.post("/categories", response_model=CategoryResult, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    response: Response,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Add a category. Adding an existing name is a no-op that still succeeds."""
    return with_status(response, quotes.add_category(category_data.name))


@router.put("/categories/{category_id}", response_model=CategoryResult)
def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    response: Response,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Rename a category. Quotes in it follow the new name."""
    result = quotes.rename_category(category_id, category_data.name)
    return with_status(response, result, not_found=CATEGORY_NOT_FOUND)


@router.delete("/categories/{category_id}", response_model=ActionResult)
def delete_category(
    category_id: str,
    response: Response,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Delete a category. Its quotes move to "other"."""
    result = quotes.delete_category(category_id)
    return with_status(response, result, not_found=CATEGORY_NOT_FOUND)
