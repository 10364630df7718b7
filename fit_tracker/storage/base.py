"""Storage interface shared by the SQL and in-memory backends.

Backends implement the primitive reads and writes. Aggregates (dashboard
stats, monthly goal data, goal stats, daily quote) are built here from those
primitives so both backends compute them the same way.

Missing rows are reported by returning ``None`` (or ``False`` for deletes);
uniqueness and "still referenced" violations raise :class:`ConflictError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any

from fit_tracker.core.constants import STREAK_LOOKBACK_DAYS
from fit_tracker.core.enums import PhotoType
from fit_tracker.models import (
    Category,
    CommunityPresence,
    Exercise,
    GoalPhoto,
    MonthlyGoal,
    MuscleGroup,
    PersonalRecord,
    Quote,
    User,
    Workout,
    WorkoutExercise,
)
from fit_tracker.schemas.data import DeletedCounts
from fit_tracker.schemas.goal import GoalPhotoRead, GoalStats, MonthlyGoalData
from fit_tracker.schemas.stats import ExerciseStats, WorkoutStats
from fit_tracker.services import goals as goal_rules
from fit_tracker.services import stats as stat_rules
from fit_tracker.services.dates import as_utc, utcnow


class StorageError(Exception):
    """Base class for storage failures the API maps to a status code."""


class ConflictError(StorageError):
    """Unique name taken, or row still referenced elsewhere."""


class Storage(ABC):
    # --- users

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None: ...

    @abstractmethod
    async def upsert_user(
        self,
        user_id: str,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        """Create the user or refresh identity fields; goal, opt-in and username are kept."""

    @abstractmethod
    async def update_user_goal(self, user_id: str, weekly_goal: int, now: datetime | None = None) -> User | None: ...

    @abstractmethod
    async def update_user_profile(self, user_id: str, changes: dict[str, Any]) -> User | None: ...

    @abstractmethod
    async def reset_user_profile(self, user_id: str) -> None:
        """Clear profile image and community opt-in."""

    # --- exercises

    @abstractmethod
    async def list_exercises(self, category: str | None = None, search: str | None = None) -> list[Exercise]: ...

    @abstractmethod
    async def get_exercise(self, exercise_id: int) -> Exercise | None: ...

    @abstractmethod
    async def create_exercise(self, data: dict[str, Any]) -> Exercise: ...

    @abstractmethod
    async def update_exercise(self, exercise_id: int, changes: dict[str, Any]) -> Exercise | None: ...

    @abstractmethod
    async def delete_exercise(self, exercise_id: int) -> bool:
        """Raises ConflictError while any workout still uses the exercise."""

    # --- categories

    @abstractmethod
    async def list_categories(self) -> list[Category]: ...

    @abstractmethod
    async def get_category(self, category_id: int) -> Category | None: ...

    @abstractmethod
    async def create_category(self, data: dict[str, Any]) -> Category: ...

    @abstractmethod
    async def update_category(self, category_id: int, changes: dict[str, Any]) -> Category | None: ...

    @abstractmethod
    async def delete_category(self, category_id: int) -> bool: ...

    # --- muscle groups

    @abstractmethod
    async def list_muscle_groups(self) -> list[MuscleGroup]: ...

    @abstractmethod
    async def get_muscle_group(self, muscle_group_id: int) -> MuscleGroup | None: ...

    @abstractmethod
    async def create_muscle_group(self, data: dict[str, Any]) -> MuscleGroup: ...

    @abstractmethod
    async def update_muscle_group(self, muscle_group_id: int, changes: dict[str, Any]) -> MuscleGroup | None: ...

    @abstractmethod
    async def delete_muscle_group(self, muscle_group_id: int) -> bool: ...

    # --- workouts

    @abstractmethod
    async def list_workouts(
        self, user_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> list[Workout]:
        """Newest first. `start` inclusive, `end` exclusive."""

    @abstractmethod
    async def list_workouts_with_exercises(self, user_id: str) -> list[Workout]:
        """Newest first, each with exercises and their Exercise loaded."""

    @abstractmethod
    async def list_user_ids(self) -> list[str]:
        """Users that own at least one workout."""

    @abstractmethod
    async def get_workout(self, workout_id: int, user_id: str) -> Workout | None: ...

    @abstractmethod
    async def create_workout(self, user_id: str, data: dict[str, Any]) -> Workout: ...

    @abstractmethod
    async def create_workout_with_exercises(
        self, user_id: str, data: dict[str, Any], exercises: list[dict[str, Any]]
    ) -> Workout:
        """Entries with exercise_id <= 0 are skipped; unknown ids raise ConflictError."""

    @abstractmethod
    async def update_workout(self, workout_id: int, user_id: str, changes: dict[str, Any]) -> Workout | None: ...

    @abstractmethod
    async def update_workout_duration(self, workout_id: int, duration: int) -> bool: ...

    @abstractmethod
    async def delete_workout(self, workout_id: int, user_id: str) -> bool: ...

    # --- workout exercises

    @abstractmethod
    async def list_workout_exercises(self, workout_id: int) -> list[WorkoutExercise]: ...

    @abstractmethod
    async def get_workout_exercise(self, entry_id: int, user_id: str) -> WorkoutExercise | None: ...

    @abstractmethod
    async def create_workout_exercise(self, data: dict[str, Any]) -> WorkoutExercise: ...

    @abstractmethod
    async def update_workout_exercise(
        self, entry_id: int, user_id: str, changes: dict[str, Any]
    ) -> WorkoutExercise | None: ...

    @abstractmethod
    async def delete_workout_exercise(self, entry_id: int, user_id: str) -> bool: ...

    @abstractmethod
    async def list_exercise_entries(self, user_id: str) -> list[WorkoutExercise]:
        """Every workout exercise the user logged, with `workout` and `exercise` loaded."""

    # --- personal records

    @abstractmethod
    async def list_personal_records(self, user_id: str, exercise_id: int | None = None) -> list[PersonalRecord]: ...

    @abstractmethod
    async def create_personal_record(self, user_id: str, data: dict[str, Any]) -> PersonalRecord: ...

    @abstractmethod
    async def delete_personal_records(self, user_id: str) -> int: ...

    # --- monthly goals

    @abstractmethod
    async def get_monthly_goal(self, user_id: str, month: int, year: int) -> MonthlyGoal | None: ...

    @abstractmethod
    async def list_monthly_goals(self, user_id: str) -> list[MonthlyGoal]:
        """Newest month first."""

    @abstractmethod
    async def upsert_monthly_goal(self, user_id: str, month: int, year: int, target_workouts: int) -> MonthlyGoal: ...

    # --- goal photos

    @abstractmethod
    async def create_goal_photo(self, user_id: str, data: dict[str, Any]) -> GoalPhoto: ...

    @abstractmethod
    async def list_goal_photos(self, user_id: str, month: int, year: int) -> list[GoalPhoto]:
        """Oldest first."""

    @abstractmethod
    async def count_goal_photos(self, user_id: str) -> int: ...

    @abstractmethod
    async def update_goal_photo(self, photo_id: int, user_id: str, description: str | None) -> GoalPhoto | None: ...

    @abstractmethod
    async def delete_goal_photo(self, photo_id: int, user_id: str) -> bool: ...

    # --- quotes

    @abstractmethod
    async def list_quotes(self, active_only: bool = False) -> list[Quote]:
        """Creation order."""

    @abstractmethod
    async def get_quote(self, quote_id: int) -> Quote | None: ...

    @abstractmethod
    async def create_quote(self, data: dict[str, Any]) -> Quote: ...

    @abstractmethod
    async def update_quote(self, quote_id: int, changes: dict[str, Any]) -> Quote | None: ...

    @abstractmethod
    async def delete_quote(self, quote_id: int) -> bool: ...

    # --- community

    @abstractmethod
    async def upsert_community_presence(
        self,
        user_id: str,
        username: str,
        profile_image_url: str | None,
        workout_name: str,
        exercise_names: str,
        now: datetime | None = None,
    ) -> CommunityPresence: ...

    @abstractmethod
    async def touch_community_presence(self, user_id: str, now: datetime | None = None) -> CommunityPresence: ...

    @abstractmethod
    async def list_community_presence(self, since: datetime, limit: int) -> list[CommunityPresence]:
        """Rows active since `since` with a workout name, newest first."""

    @abstractmethod
    async def count_active_users(self, since: datetime) -> int: ...

    # --- bulk

    @abstractmethod
    async def clear_user_data(self, user_id: str) -> DeletedCounts: ...

    # --- aggregates

    async def before_photo(self, user_id: str, month: int, year: int) -> GoalPhoto | None:
        photos = await self.list_goal_photos(user_id, month, year)
        return next((p for p in photos if p.type == PhotoType.BEFORE), None)

    async def latest_photo(self, user_id: str, month: int, year: int) -> GoalPhoto | None:
        photos = await self.list_goal_photos(user_id, month, year)
        return photos[-1] if photos else None

    async def daily_quote(self, today: date | None = None) -> Quote | None:
        quotes = await self.list_quotes(active_only=True)
        return stat_rules.pick_daily_quote(quotes, today or utcnow().date())

    async def import_quotes(self, items: list[dict[str, Any]]) -> list[Quote]:
        return [await self.create_quote(item) for item in items]

    async def workout_stats(self, user_id: str, now: datetime | None = None) -> WorkoutStats:
        now = as_utc(now or utcnow())
        user = await self.get_user(user_id)
        workouts = await self.list_workouts(user_id)
        entries = await self.list_exercise_entries(user_id)
        quote = await self.daily_quote(now.date())
        return stat_rules.build_workout_stats(user, workouts, entries, quote, now)

    async def exercise_stats(self, user_id: str) -> list[ExerciseStats]:
        entries = await self.list_exercise_entries(user_id)
        return stat_rules.build_exercise_stats(entries)

    async def monthly_goal_data(self, user_id: str, month: int, year: int) -> MonthlyGoalData:
        start, end = goal_rules.month_bounds(month, year)
        workouts = await self.list_workouts(user_id, start, end)
        goal = await self.get_monthly_goal(user_id, month, year)
        before = await self.before_photo(user_id, month, year)
        latest = await self.latest_photo(user_id, month, year)
        return goal_rules.build_monthly_goal_data(
            month,
            year,
            goal.target_workouts if goal else 0,
            workouts,
            GoalPhotoRead.model_validate(before) if before else None,
            GoalPhotoRead.model_validate(latest) if latest else None,
        )

    async def goal_stats(self, user_id: str, now: datetime | None = None) -> GoalStats:
        now = as_utc(now or utcnow())
        prev_month, prev_year = goal_rules.previous_month(now.month, now.year)
        current = await self.monthly_goal_data(user_id, now.month, now.year)
        previous = await self.monthly_goal_data(user_id, prev_month, prev_year)

        goals = await self.list_monthly_goals(user_id)
        workouts = await self.list_workouts(user_id)
        completions = [
            goal_rules.completion_percentage(
                goal_rules.count_in_month(workouts, g.month, g.year), g.target_workouts
            )
            for g in goals
        ]
        streak = goal_rules.longest_streak(
            [as_utc(w.date).date() for w in workouts],
            since=now.date(),
            lookback_days=STREAK_LOOKBACK_DAYS,
        )
        return GoalStats(
            current_month=current,
            previous_month=previous,
            total_goal_photos=await self.count_goal_photos(user_id),
            longest_streak=streak,
            average_monthly_completion=(
                round(sum(completions) / len(completions), 1) if completions else 0.0
            ),
        )
