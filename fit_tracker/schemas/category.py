"""Category and muscle group schemas (same shape: name, description, default flag)."""

from pydantic import BaseModel, ConfigDict, Field

from fit_tracker.schemas.types import UtcDatetime


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    is_default: bool = False


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    is_default: bool | None = None


class CategoryRead(CategoryBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: UtcDatetime | None = None


class MuscleGroupCreate(CategoryBase):
    pass


class MuscleGroupUpdate(CategoryUpdate):
    pass


class MuscleGroupRead(CategoryRead):
    pass
