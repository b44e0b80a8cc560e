"""Category schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quotekeeper.schemas.common import ActionResult


class CategoryCreate(BaseModel):
    """Create a new category."""

    name: str = Field(..., min_length=1, max_length=255)


class CategoryUpdate(BaseModel):
    """Rename a category."""

    name: str = Field(..., min_length=1, max_length=255)


class CategoryResponse(BaseModel):
    """Category response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    created_at: datetime


class CategoryResult(ActionResult):
    category: CategoryResponse | None = None


class CategoryListResult(ActionResult):
    categories: list[str] = []
    items: list[CategoryResponse] = []
