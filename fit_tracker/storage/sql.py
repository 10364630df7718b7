"""SQLAlchemy storage over one AsyncSession (one request, one unit of work).

The session is committed or rolled back by the provider; this class only
flushes. Relationships are always eager-loaded because lazy loads are not
available under asyncio.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fit_tracker.core.constants import DEFAULT_QUOTE_CATEGORY
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
from fit_tracker.services.dates import as_utc, utcnow
from fit_tracker.storage.base import ConflictError, Storage

logger = logging.getLogger(__name__)

_WORKOUT_FIELDS = ("name", "duration", "category", "notes", "image_url")
_ENTRY_FIELDS = ("exercise_id", "sets", "reps", "weight", "rest_time", "duration_seconds", "notes")

_WITH_EXERCISES = selectinload(Workout.exercises).selectinload(WorkoutExercise.exercise)


class SqlStorage(Storage):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _flush(self, conflict_message: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.info("Integrity error: %s", e.orig)
            raise ConflictError(conflict_message) from e

    # --- users

    async def get_user(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def upsert_user(
        self,
        user_id: str,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        if email:
            result = await self.session.execute(
                select(User.id).where(User.email == email, User.id != user_id)
            )
            if result.first() is not None:
                raise ConflictError("Email already registered to another user")
        user = await self.session.get(User, user_id)
        if user is None:
            user = User(
                id=user_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                profile_image_url=profile_image_url,
            )
            self.session.add(user)
        else:
            user.email = email
            user.first_name = first_name
            user.last_name = last_name
            if user.profile_image_url is None:
                user.profile_image_url = profile_image_url
        await self._flush("Email already registered to another user")
        await self.session.refresh(user)
        return user

    async def update_user_goal(self, user_id: str, weekly_goal: int, now: datetime | None = None) -> User | None:
        user = await self.session.get(User, user_id)
        if user is None:
            return None
        user.weekly_goal = weekly_goal
        user.goal_set_at = now or utcnow()
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update_user_profile(self, user_id: str, changes: dict[str, Any]) -> User | None:
        user = await self.session.get(User, user_id)
        if user is None:
            return None
        for key, value in changes.items():
            setattr(user, key, value)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def reset_user_profile(self, user_id: str) -> None:
        await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(profile_image_url=None, show_in_community=False, updated_at=utcnow())
        )

    # --- exercises

    async def list_exercises(self, category: str | None = None, search: str | None = None) -> list[Exercise]:
        stmt = select(Exercise)
        if category:
            stmt = stmt.where(Exercise.category == category)
        if search:
            stmt = stmt.where(Exercise.name.ilike(f"%{search}%"))
        result = await self.session.execute(stmt.order_by(Exercise.name, Exercise.id))
        return list(result.scalars().all())

    async def get_exercise(self, exercise_id: int) -> Exercise | None:
        return await self.session.get(Exercise, exercise_id)

    async def create_exercise(self, data: dict[str, Any]) -> Exercise:
        exercise = Exercise(**data)
        self.session.add(exercise)
        await self.session.flush()
        await self.session.refresh(exercise)
        return exercise

    async def update_exercise(self, exercise_id: int, changes: dict[str, Any]) -> Exercise | None:
        exercise = await self.session.get(Exercise, exercise_id)
        if exercise is None:
            return None
        for key, value in changes.items():
            setattr(exercise, key, value)
        await self.session.flush()
        await self.session.refresh(exercise)
        return exercise

    async def delete_exercise(self, exercise_id: int) -> bool:
        exercise = await self.session.get(Exercise, exercise_id)
        if exercise is None:
            return False
        used = await self.session.execute(
            select(WorkoutExercise.id).where(WorkoutExercise.exercise_id == exercise_id).limit(1)
        )
        if used.first() is not None:
            raise ConflictError("Exercise is used in existing workouts")
        await self.session.execute(delete(PersonalRecord).where(PersonalRecord.exercise_id == exercise_id))
        # bulk delete: session.delete() would lazy-load workout_entries
        await self.session.execute(delete(Exercise).where(Exercise.id == exercise_id))
        return True

    # --- categories and muscle groups

    async def _check_name(self, model, name: str, exclude_id: int | None, label: str) -> None:
        stmt = select(model.id).where(model.name == name)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        if (await self.session.execute(stmt)).first() is not None:
            raise ConflictError(f"{label} '{name}' already exists")

    async def _list_named(self, model) -> list:
        result = await self.session.execute(select(model).order_by(model.is_default.desc(), model.name))
        return list(result.scalars().all())

    async def _create_named(self, model, data: dict[str, Any], label: str):
        await self._check_name(model, data["name"], None, label)
        row = model(**data)
        self.session.add(row)
        await self._flush(f"{label} '{data['name']}' already exists")
        await self.session.refresh(row)
        return row

    async def _update_named(self, model, row_id: int, changes: dict[str, Any], label: str):
        row = await self.session.get(model, row_id)
        if row is None:
            return None
        if changes.get("name") is not None:
            await self._check_name(model, changes["name"], row_id, label)
        for key, value in changes.items():
            setattr(row, key, value)
        await self._flush(f"{label} '{row.name}' already exists")
        await self.session.refresh(row)
        return row

    async def list_categories(self) -> list[Category]:
        return await self._list_named(Category)

    async def get_category(self, category_id: int) -> Category | None:
        return await self.session.get(Category, category_id)

    async def create_category(self, data: dict[str, Any]) -> Category:
        return await self._create_named(Category, data, "Category")

    async def update_category(self, category_id: int, changes: dict[str, Any]) -> Category | None:
        return await self._update_named(Category, category_id, changes, "Category")

    async def delete_category(self, category_id: int) -> bool:
        category = await self.session.get(Category, category_id)
        if category is None:
            return False
        exercise_use = await self.session.execute(
            select(Exercise.id).where(Exercise.category == category.name).limit(1)
        )
        workout_use = await self.session.execute(
            select(Workout.id).where(Workout.category == category.name).limit(1)
        )
        if exercise_use.first() is not None or workout_use.first() is not None:
            raise ConflictError(f"Category '{category.name}' is in use")
        await self.session.delete(category)
        await self.session.flush()
        return True

    async def list_muscle_groups(self) -> list[MuscleGroup]:
        return await self._list_named(MuscleGroup)

    async def get_muscle_group(self, muscle_group_id: int) -> MuscleGroup | None:
        return await self.session.get(MuscleGroup, muscle_group_id)

    async def create_muscle_group(self, data: dict[str, Any]) -> MuscleGroup:
        return await self._create_named(MuscleGroup, data, "Muscle group")

    async def update_muscle_group(self, muscle_group_id: int, changes: dict[str, Any]) -> MuscleGroup | None:
        return await self._update_named(MuscleGroup, muscle_group_id, changes, "Muscle group")

    async def delete_muscle_group(self, muscle_group_id: int) -> bool:
        group = await self.session.get(MuscleGroup, muscle_group_id)
        if group is None:
            return False
        used = await self.session.execute(
            select(Exercise.id).where(Exercise.muscle_group == group.name).limit(1)
        )
        if used.first() is not None:
            raise ConflictError(f"Muscle group '{group.name}' is in use")
        await self.session.delete(group)
        await self.session.flush()
        return True

    # --- workouts

    async def list_workouts(
        self, user_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> list[Workout]:
        stmt = select(Workout).where(Workout.user_id == user_id)
        if start is not None:
            stmt = stmt.where(Workout.date >= as_utc(start))
        if end is not None:
            stmt = stmt.where(Workout.date < as_utc(end))
        result = await self.session.execute(stmt.order_by(Workout.date.desc(), Workout.id.desc()))
        return list(result.scalars().all())

    async def list_workouts_with_exercises(self, user_id: str) -> list[Workout]:
        result = await self.session.execute(
            select(Workout)
            .where(Workout.user_id == user_id)
            .options(_WITH_EXERCISES)
            .order_by(Workout.date.desc(), Workout.id.desc())
        )
        return list(result.scalars().all())

    async def list_user_ids(self) -> list[str]:
        result = await self.session.execute(select(Workout.user_id).distinct().order_by(Workout.user_id))
        return list(result.scalars().all())

    async def _load_workout(self, workout_id: int) -> Workout | None:
        result = await self.session.execute(
            select(Workout)
            .where(Workout.id == workout_id)
            .options(_WITH_EXERCISES)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_workout(self, workout_id: int, user_id: str) -> Workout | None:
        workout = await self._load_workout(workout_id)
        if workout is None or workout.user_id != user_id:
            return None
        return workout

    async def create_workout(self, user_id: str, data: dict[str, Any]) -> Workout:
        workout = Workout(user_id=user_id, **{k: v for k, v in data.items() if k in _WORKOUT_FIELDS or k == "date"})
        self.session.add(workout)
        await self.session.flush()
        return await self._load_workout(workout.id)

    async def create_workout_with_exercises(
        self, user_id: str, data: dict[str, Any], exercises: list[dict[str, Any]]
    ) -> Workout:
        wanted = [e for e in exercises if e.get("exercise_id", 0) > 0]
        ids = {e["exercise_id"] for e in wanted}
        if ids:
            result = await self.session.execute(select(Exercise.id).where(Exercise.id.in_(ids)))
            missing = ids - set(result.scalars().all())
            if missing:
                raise ConflictError(f"Exercise {min(missing)} does not exist")
        workout = Workout(user_id=user_id, **{k: v for k, v in data.items() if k in _WORKOUT_FIELDS or k == "date"})
        workout.exercises = [
            WorkoutExercise(**{k: v for k, v in item.items() if k in _ENTRY_FIELDS}) for item in wanted
        ]
        self.session.add(workout)
        await self._flush("Workout references a missing exercise")
        return await self._load_workout(workout.id)

    async def update_workout(self, workout_id: int, user_id: str, changes: dict[str, Any]) -> Workout | None:
        workout = await self.get_workout(workout_id, user_id)
        if workout is None:
            return None
        for key, value in changes.items():
            if key in _WORKOUT_FIELDS:
                setattr(workout, key, value)
        await self.session.flush()
        return await self._load_workout(workout_id)

    async def update_workout_duration(self, workout_id: int, duration: int) -> bool:
        result = await self.session.execute(
            update(Workout).where(Workout.id == workout_id).values(duration=duration)
        )
        return result.rowcount > 0

    async def delete_workout(self, workout_id: int, user_id: str) -> bool:
        workout = await self.get_workout(workout_id, user_id)
        if workout is None:
            return False
        await self.session.delete(workout)
        await self.session.flush()
        return True

    # --- workout exercises

    async def _load_entry(self, entry_id: int) -> WorkoutExercise | None:
        result = await self.session.execute(
            select(WorkoutExercise)
            .where(WorkoutExercise.id == entry_id)
            .options(selectinload(WorkoutExercise.exercise), selectinload(WorkoutExercise.workout))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_workout_exercises(self, workout_id: int) -> list[WorkoutExercise]:
        result = await self.session.execute(
            select(WorkoutExercise)
            .where(WorkoutExercise.workout_id == workout_id)
            .options(selectinload(WorkoutExercise.exercise))
            .order_by(WorkoutExercise.id)
        )
        return list(result.scalars().all())

    async def get_workout_exercise(self, entry_id: int, user_id: str) -> WorkoutExercise | None:
        entry = await self._load_entry(entry_id)
        if entry is None or entry.workout.user_id != user_id:
            return None
        return entry

    async def _require_exercise(self, exercise_id: int) -> None:
        if await self.session.get(Exercise, exercise_id) is None:
            raise ConflictError(f"Exercise {exercise_id} does not exist")

    async def create_workout_exercise(self, data: dict[str, Any]) -> WorkoutExercise:
        if await self.session.get(Workout, data["workout_id"]) is None:
            raise ConflictError(f"Workout {data['workout_id']} does not exist")
        await self._require_exercise(data["exercise_id"])
        entry = WorkoutExercise(
            workout_id=data["workout_id"],
            **{k: v for k, v in data.items() if k in _ENTRY_FIELDS},
        )
        self.session.add(entry)
        await self._flush("Workout exercise references a missing row")
        return await self._load_entry(entry.id)

    async def update_workout_exercise(
        self, entry_id: int, user_id: str, changes: dict[str, Any]
    ) -> WorkoutExercise | None:
        entry = await self.get_workout_exercise(entry_id, user_id)
        if entry is None:
            return None
        if "exercise_id" in changes and changes["exercise_id"] != entry.exercise_id:
            await self._require_exercise(changes["exercise_id"])
        for key, value in changes.items():
            if key in _ENTRY_FIELDS:
                setattr(entry, key, value)
        await self._flush("Workout exercise references a missing row")
        return await self._load_entry(entry_id)

    async def delete_workout_exercise(self, entry_id: int, user_id: str) -> bool:
        entry = await self.get_workout_exercise(entry_id, user_id)
        if entry is None:
            return False
        await self.session.delete(entry)
        await self.session.flush()
        return True

    async def list_exercise_entries(self, user_id: str) -> list[WorkoutExercise]:
        result = await self.session.execute(
            select(WorkoutExercise)
            .join(Workout, WorkoutExercise.workout_id == Workout.id)
            .where(Workout.user_id == user_id)
            .options(selectinload(WorkoutExercise.exercise), selectinload(WorkoutExercise.workout))
            .order_by(Workout.date.desc(), WorkoutExercise.id)
        )
        return list(result.scalars().all())

    # --- personal records

    async def list_personal_records(self, user_id: str, exercise_id: int | None = None) -> list[PersonalRecord]:
        stmt = select(PersonalRecord).where(PersonalRecord.user_id == user_id)
        if exercise_id is not None:
            stmt = stmt.where(PersonalRecord.exercise_id == exercise_id)
        result = await self.session.execute(stmt.order_by(PersonalRecord.date.desc(), PersonalRecord.id.desc()))
        return list(result.scalars().all())

    async def create_personal_record(self, user_id: str, data: dict[str, Any]) -> PersonalRecord:
        await self._require_exercise(data["exercise_id"])
        record = PersonalRecord(user_id=user_id, **data)
        self.session.add(record)
        await self._flush("Personal record references a missing exercise")
        await self.session.refresh(record)
        return record

    async def delete_personal_records(self, user_id: str) -> int:
        return await self._bulk_delete(delete(PersonalRecord).where(PersonalRecord.user_id == user_id))

    # --- monthly goals

    async def get_monthly_goal(self, user_id: str, month: int, year: int) -> MonthlyGoal | None:
        result = await self.session.execute(
            select(MonthlyGoal).where(
                MonthlyGoal.user_id == user_id,
                MonthlyGoal.month == month,
                MonthlyGoal.year == year,
            )
        )
        return result.scalar_one_or_none()

    async def list_monthly_goals(self, user_id: str) -> list[MonthlyGoal]:
        result = await self.session.execute(
            select(MonthlyGoal)
            .where(MonthlyGoal.user_id == user_id)
            .order_by(MonthlyGoal.year.desc(), MonthlyGoal.month.desc())
        )
        return list(result.scalars().all())

    async def upsert_monthly_goal(self, user_id: str, month: int, year: int, target_workouts: int) -> MonthlyGoal:
        goal = await self.get_monthly_goal(user_id, month, year)
        if goal is None:
            goal = MonthlyGoal(user_id=user_id, month=month, year=year, target_workouts=target_workouts)
            self.session.add(goal)
        else:
            goal.target_workouts = target_workouts
        await self._flush("Monthly goal already exists")
        await self.session.refresh(goal)
        return goal

    # --- goal photos

    async def create_goal_photo(self, user_id: str, data: dict[str, Any]) -> GoalPhoto:
        photo = GoalPhoto(user_id=user_id, **data)
        self.session.add(photo)
        await self.session.flush()
        await self.session.refresh(photo)
        return photo

    async def list_goal_photos(self, user_id: str, month: int, year: int) -> list[GoalPhoto]:
        result = await self.session.execute(
            select(GoalPhoto)
            .where(GoalPhoto.user_id == user_id, GoalPhoto.month == month, GoalPhoto.year == year)
            .order_by(GoalPhoto.timestamp, GoalPhoto.id)
        )
        return list(result.scalars().all())

    async def count_goal_photos(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(GoalPhoto).where(GoalPhoto.user_id == user_id)
        )
        return result.scalar_one()

    async def _own_photo(self, photo_id: int, user_id: str) -> GoalPhoto | None:
        photo = await self.session.get(GoalPhoto, photo_id)
        if photo is None or photo.user_id != user_id:
            return None
        return photo

    async def update_goal_photo(self, photo_id: int, user_id: str, description: str | None) -> GoalPhoto | None:
        photo = await self._own_photo(photo_id, user_id)
        if photo is None:
            return None
        photo.description = description
        await self.session.flush()
        await self.session.refresh(photo)
        return photo

    async def delete_goal_photo(self, photo_id: int, user_id: str) -> bool:
        photo = await self._own_photo(photo_id, user_id)
        if photo is None:
            return False
        await self.session.delete(photo)
        await self.session.flush()
        return True

    # --- quotes

    async def list_quotes(self, active_only: bool = False) -> list[Quote]:
        stmt = select(Quote)
        if active_only:
            stmt = stmt.where(Quote.is_active.is_(True))
        result = await self.session.execute(stmt.order_by(Quote.id))
        return list(result.scalars().all())

    async def get_quote(self, quote_id: int) -> Quote | None:
        return await self.session.get(Quote, quote_id)

    async def create_quote(self, data: dict[str, Any]) -> Quote:
        data = {"category": DEFAULT_QUOTE_CATEGORY, **data}
        quote = Quote(**data)
        self.session.add(quote)
        await self.session.flush()
        await self.session.refresh(quote)
        return quote

    async def update_quote(self, quote_id: int, changes: dict[str, Any]) -> Quote | None:
        quote = await self.session.get(Quote, quote_id)
        if quote is None:
            return None
        for key, value in changes.items():
            setattr(quote, key, value)
        await self.session.flush()
        await self.session.refresh(quote)
        return quote

    async def delete_quote(self, quote_id: int) -> bool:
        quote = await self.session.get(Quote, quote_id)
        if quote is None:
            return False
        await self.session.delete(quote)
        await self.session.flush()
        return True

    # --- community

    async def upsert_community_presence(
        self,
        user_id: str,
        username: str,
        profile_image_url: str | None,
        workout_name: str,
        exercise_names: str,
        now: datetime | None = None,
    ) -> CommunityPresence:
        row = await self.session.get(CommunityPresence, user_id)
        if row is None:
            row = CommunityPresence(user_id=user_id)
            self.session.add(row)
        row.username = username
        row.profile_image_url = profile_image_url
        row.workout_name = workout_name
        row.exercise_names = exercise_names
        row.last_active = now or utcnow()
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def touch_community_presence(self, user_id: str, now: datetime | None = None) -> CommunityPresence:
        row = await self.session.get(CommunityPresence, user_id)
        if row is None:
            return await self.upsert_community_presence(user_id, "", None, "", "", now)
        row.last_active = now or utcnow()
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def list_community_presence(self, since: datetime, limit: int) -> list[CommunityPresence]:
        result = await self.session.execute(
            select(CommunityPresence)
            .where(CommunityPresence.last_active >= as_utc(since), CommunityPresence.workout_name != "")
            .order_by(CommunityPresence.last_active.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_active_users(self, since: datetime) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(CommunityPresence)
            .where(CommunityPresence.last_active >= as_utc(since))
        )
        return result.scalar_one()

    # --- bulk

    async def _bulk_delete(self, stmt) -> int:
        result = await self.session.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount or 0

    async def clear_user_data(self, user_id: str) -> DeletedCounts:
        user_workouts = select(Workout.id).where(Workout.user_id == user_id)
        await self._bulk_delete(delete(WorkoutExercise).where(WorkoutExercise.workout_id.in_(user_workouts)))
        counts = DeletedCounts(
            workouts=await self._bulk_delete(delete(Workout).where(Workout.user_id == user_id)),
            personal_records=await self.delete_personal_records(user_id),
            monthly_goals=await self._bulk_delete(delete(MonthlyGoal).where(MonthlyGoal.user_id == user_id)),
            goal_photos=await self._bulk_delete(delete(GoalPhoto).where(GoalPhoto.user_id == user_id)),
            community_presence=await self._bulk_delete(
                delete(CommunityPresence).where(CommunityPresence.user_id == user_id)
            ),
        )
        await self.reset_user_profile(user_id)
        return counts
