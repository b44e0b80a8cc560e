"""Quote API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from quotekeeper.api.dependencies import (
    get_active_store,
    get_current_user,
    get_quote_service,
    settings,
    with_status,
)
from quotekeeper.schemas.auth import UserResponse
from quotekeeper.schemas.common import ActionResult
from quotekeeper.schemas.quote import (
    CategorySuggestion,
    CategorySuggestionRequest,
    QuoteCreate,
    QuoteListResult,
    QuoteResponse,
    QuoteResult,
    QuoteUpdate,
    ShareLinks,
)
from quotekeeper.services.categorize import should_auto_categorize, suggest_category
from quotekeeper.services.quotes import QUOTE_NOT_FOUND, QuoteService, find_shared_quote
from quotekeeper.services.sharing import (
    ImageSize,
    ImageTheme,
    fallback_image_url,
    quote_image_url,
    quote_share_url,
    share_text,
    social_links,
)
from quotekeeper.services.store_selector import ActiveStore
from quotekeeper.stores.records import QuoteRecord

router = APIRouter(prefix="/api/v1", tags=["quotes"])


def build_share_links(record: QuoteRecord, theme: ImageTheme, size: ImageSize) -> ShareLinks:
    share_url = quote_share_url(settings.app_url, record.id)
    return ShareLinks(
        quote=QuoteResponse.model_validate(record),
        share_url=share_url,
        image_url=quote_image_url(settings.app_url, record, theme, size),
        fallback_image_url=fallback_image_url(record),
        share_text=share_text(record),
        **social_links(record, share_url),
    )


@router.get("/quotes", response_model=QuoteListResult)
def get_quotes(
    response: Response,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Get all quotes of the current user, newest first."""
    return with_status(response, quotes.list_quotes(), status.HTTP_503_SERVICE_UNAVAILABLE)


@router.post("/quotes", response_model=QuoteResult, status_code=status.HTTP_201_CREATED)
def create_quote(
    quote_data: QuoteCreate,
    response: Response,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Add a quote."""
    result = quotes.add_quote(quote_data.text, quote_data.author, quote_data.category)
    return with_status(response, result)


@router.post("/quotes/suggest-category", response_model=CategorySuggestion)
def suggest_quote_category(
    suggestion_request: CategorySuggestionRequest,
    current_user: Annotated[UserResponse, Depends(get_current_user)],
):
    """Suggest a category for quote text."""
    return CategorySuggestion(
        category=suggest_category(suggestion_request.text, suggestion_request.author),
        confident=should_auto_categorize(suggestion_request.text, suggestion_request.author),
    )


@router.get("/quotes/{quote_id}", response_model=QuoteResponse)
def get_quote(
    quote_id: str,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Get one quote of the current user."""
    record = quotes.get_quote(quote_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=QUOTE_NOT_FOUND)
    return QuoteResponse.model_validate(record)


@router.put("/quotes/{quote_id}", response_model=QuoteResult)
def update_quote(
    quote_id: str,
    quote_data: QuoteUpdate,
    response: Response,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Update a quote."""
    result = quotes.update_quote(
        quote_id, text=quote_data.text, author=quote_data.author, category=quote_data.category
    )
    return with_status(response, result, not_found=QUOTE_NOT_FOUND)


@router.delete("/quotes/{quote_id}", response_model=ActionResult)
def delete_quote(
    quote_id: str,
    response: Response,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
):
    """Delete a quote."""
    return with_status(response, quotes.delete_quote(quote_id), not_found=QUOTE_NOT_FOUND)


@router.get("/quotes/{quote_id}/share", response_model=ShareLinks)
def get_quote_share_links(
    quote_id: str,
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
    theme: ImageTheme = ImageTheme.LIGHT,
    size: ImageSize = ImageSize.DEFAULT,
):
    """Share links for one of the current user's quotes."""
    record = quotes.get_quote(quote_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=QUOTE_NOT_FOUND)
    return build_share_links(record, theme, size)


@router.get("/share/{quote_id}", response_model=ShareLinks)
def get_shared_quote(
    quote_id: str,
    active: Annotated[ActiveStore, Depends(get_active_store)],
    theme: ImageTheme = ImageTheme.LIGHT,
    size: ImageSize = ImageSize.DEFAULT,
):
    """Public view of a shared quote, for the share page."""
    record = find_shared_quote(active, quote_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=QUOTE_NOT_FOUND)
    return build_share_links(record, theme, size)
