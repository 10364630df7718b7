"""Bulk data management schemas."""

from pydantic import BaseModel


class DeletedCounts(BaseModel):
    workouts: int = 0
    personal_records: int = 0
    monthly_goals: int = 0
    goal_photos: int = 0
    community_presence: int = 0

    @property
    def total(self) -> int:
        return (
            self.workouts
            + self.personal_records
            + self.monthly_goals
            + self.goal_photos
            + self.community_presence
        )


class ClearDataResult(BaseModel):
    success: bool = True
    message: str
    deleted_records: dict[str, int]
