"""Exercise schemas."""

from pydantic import BaseModel, ConfigDict, Field


class ExerciseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    muscle_group: str = Field(..., min_length=1, max_length=100)
    instructions: str | None = None
    equipment: str | None = Field(None, max_length=100)
    image_url: str | None = None


class ExerciseCreate(ExerciseBase):
    pass


class ExerciseUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    category: str | None = Field(None, min_length=1, max_length=100)
    muscle_group: str | None = Field(None, min_length=1, max_length=100)
    instructions: str | None = None
    equipment: str | None = Field(None, max_length=100)
    image_url: str | None = None


class ExerciseRead(ExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
