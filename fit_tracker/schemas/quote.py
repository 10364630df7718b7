"""Quote schemas."""

from pydantic import BaseModel, ConfigDict, Field

from fit_tracker.core.constants import DEFAULT_QUOTE_CATEGORY
from fit_tracker.schemas.types import UtcDatetime


class QuoteBase(BaseModel):
    text: str = Field(..., min_length=1)
    author: str | None = Field(None, max_length=100)
    category: str | None = Field(DEFAULT_QUOTE_CATEGORY, max_length=50)
    is_active: bool = True


class QuoteCreate(QuoteBase):
    pass


class QuoteUpdate(BaseModel):
    text: str | None = Field(None, min_length=1)
    author: str | None = Field(None, max_length=100)
    category: str | None = Field(None, max_length=50)
    is_active: bool | None = None


class QuoteRead(QuoteBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: UtcDatetime | None = None
    updated_at: UtcDatetime | None = None


class QuoteImport(BaseModel):
    quotes: list[QuoteCreate] = Field(..., min_length=1)
