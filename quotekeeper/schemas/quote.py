"""Quote schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quotekeeper.schemas.common import ActionResult


class QuoteCreate(BaseModel):
    """Create a new quote."""

    text: str = Field(..., min_length=1)
    author: str = Field("", max_length=255)
    category: str = Field("", max_length=255)


class QuoteUpdate(BaseModel):
    """Update a quote. Omitted fields keep their value."""

    text: str | None = Field(None, min_length=1)
    author: str | None = Field(None, max_length=255)
    category: str | None = Field(None, max_length=255)


class QuoteResponse(BaseModel):
    """Quote response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    text: str
    author: str
    category: str
    created_at: datetime


class QuoteResult(ActionResult):
    quote: QuoteResponse | None = None


class QuoteListResult(ActionResult):
    quotes: list[QuoteResponse] = []


class CategorySuggestionRequest(BaseModel):
    text: str
    author: str = ""


class CategorySuggestion(BaseModel):
    category: str
    confident: bool


class ShareLinks(BaseModel):
    """Everything a client needs to share one quote."""

    quote: QuoteResponse
    share_url: str
    image_url: str
    fallback_image_url: str
    share_text: str
    facebook_url: str
    twitter_url: str
    whatsapp_url: str
    instagram_caption: str
