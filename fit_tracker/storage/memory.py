"""In-memory storage for running without a database (and for API tests).

Rows are transient ORM instances kept in dicts, so the API serializes them
exactly like SQL rows. Column defaults only fire on INSERT, so every field is
set explicitly here.
"""

from __future__ import annotations

import itertools
from collections import defaultdict
from datetime import datetime
from typing import Any

from fit_tracker.core.constants import DEFAULT_QUOTE_CATEGORY, DEFAULT_WEEKLY_GOAL
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

_WORKOUT_FIELDS = ("name", "duration", "category", "notes", "image_url")
_ENTRY_FIELDS = ("exercise_id", "sets", "reps", "weight", "rest_time", "duration_seconds", "notes")


def _apply(obj: Any, changes: dict[str, Any]) -> None:
    for key, value in changes.items():
        setattr(obj, key, value)


class MemoryStorage(Storage):
    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.exercises: dict[int, Exercise] = {}
        self.categories: dict[int, Category] = {}
        self.muscle_groups: dict[int, MuscleGroup] = {}
        self.workouts: dict[int, Workout] = {}
        self.workout_exercises: dict[int, WorkoutExercise] = {}
        self.personal_records: dict[int, PersonalRecord] = {}
        self.monthly_goals: dict[int, MonthlyGoal] = {}
        self.goal_photos: dict[int, GoalPhoto] = {}
        self.quotes: dict[int, Quote] = {}
        self.community_presence: dict[str, CommunityPresence] = {}
        self._ids: dict[str, itertools.count] = defaultdict(lambda: itertools.count(1))

    def _next_id(self, table: str) -> int:
        return next(self._ids[table])

    # --- users

    async def get_user(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    async def upsert_user(
        self,
        user_id: str,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        now = utcnow()
        user = self.users.get(user_id)
        if email and any(u.email == email and u.id != user_id for u in self.users.values()):
            raise ConflictError("Email already registered to another user")
        if user is None:
            user = User(
                id=user_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                username=None,
                profile_image_url=profile_image_url,
                weekly_goal=DEFAULT_WEEKLY_GOAL,
                goal_set_at=None,
                show_in_community=False,
                created_at=now,
                updated_at=now,
            )
            self.users[user_id] = user
            return user
        user.email = email
        user.first_name = first_name
        user.last_name = last_name
        if user.profile_image_url is None:
            user.profile_image_url = profile_image_url
        user.updated_at = now
        return user

    async def update_user_goal(self, user_id: str, weekly_goal: int, now: datetime | None = None) -> User | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        user.weekly_goal = weekly_goal
        user.goal_set_at = now or utcnow()
        user.updated_at = utcnow()
        return user

    async def update_user_profile(self, user_id: str, changes: dict[str, Any]) -> User | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        _apply(user, changes)
        user.updated_at = utcnow()
        return user

    async def reset_user_profile(self, user_id: str) -> None:
        user = self.users.get(user_id)
        if user is not None:
            user.profile_image_url = None
            user.show_in_community = False
            user.updated_at = utcnow()

    # --- exercises

    async def list_exercises(self, category: str | None = None, search: str | None = None) -> list[Exercise]:
        rows = list(self.exercises.values())
        if category:
            rows = [e for e in rows if e.category == category]
        if search:
            needle = search.lower()
            rows = [e for e in rows if needle in e.name.lower()]
        return sorted(rows, key=lambda e: (e.name, e.id))

    async def get_exercise(self, exercise_id: int) -> Exercise | None:
        return self.exercises.get(exercise_id)

    async def create_exercise(self, data: dict[str, Any]) -> Exercise:
        exercise = Exercise(
            id=self._next_id("exercises"),
            name=data["name"],
            category=data["category"],
            muscle_group=data["muscle_group"],
            instructions=data.get("instructions"),
            equipment=data.get("equipment"),
            image_url=data.get("image_url"),
        )
        self.exercises[exercise.id] = exercise
        return exercise

    async def update_exercise(self, exercise_id: int, changes: dict[str, Any]) -> Exercise | None:
        exercise = self.exercises.get(exercise_id)
        if exercise is None:
            return None
        _apply(exercise, changes)
        return exercise

    async def delete_exercise(self, exercise_id: int) -> bool:
        if exercise_id not in self.exercises:
            return False
        if any(e.exercise_id == exercise_id for e in self.workout_exercises.values()):
            raise ConflictError("Exercise is used in existing workouts")
        for record_id in [r.id for r in self.personal_records.values() if r.exercise_id == exercise_id]:
            del self.personal_records[record_id]
        del self.exercises[exercise_id]
        return True

    # --- categories and muscle groups share one shape

    def _check_name(self, table: dict, name: str, exclude_id: int | None, label: str) -> None:
        if any(row.name == name and row.id != exclude_id for row in table.values()):
            raise ConflictError(f"{label} '{name}' already exists")

    def _create_named(self, model, table: dict, table_name: str, data: dict[str, Any], label: str):
        self._check_name(table, data["name"], None, label)
        row = model(
            id=self._next_id(table_name),
            name=data["name"],
            description=data.get("description"),
            is_default=bool(data.get("is_default", False)),
            created_at=utcnow(),
        )
        table[row.id] = row
        return row

    def _update_named(self, table: dict, row_id: int, changes: dict[str, Any], label: str):
        row = table.get(row_id)
        if row is None:
            return None
        if changes.get("name") is not None:
            self._check_name(table, changes["name"], row_id, label)
        _apply(row, changes)
        return row

    @staticmethod
    def _sorted_named(rows) -> list:
        return sorted(rows, key=lambda r: (not r.is_default, r.name))

    async def list_categories(self) -> list[Category]:
        return self._sorted_named(self.categories.values())

    async def get_category(self, category_id: int) -> Category | None:
        return self.categories.get(category_id)

    async def create_category(self, data: dict[str, Any]) -> Category:
        return self._create_named(Category, self.categories, "categories", data, "Category")

    async def update_category(self, category_id: int, changes: dict[str, Any]) -> Category | None:
        return self._update_named(self.categories, category_id, changes, "Category")

    async def delete_category(self, category_id: int) -> bool:
        category = self.categories.get(category_id)
        if category is None:
            return False
        in_use = any(e.category == category.name for e in self.exercises.values()) or any(
            w.category == category.name for w in self.workouts.values()
        )
        if in_use:
            raise ConflictError(f"Category '{category.name}' is in use")
        del self.categories[category_id]
        return True

    async def list_muscle_groups(self) -> list[MuscleGroup]:
        return self._sorted_named(self.muscle_groups.values())

    async def get_muscle_group(self, muscle_group_id: int) -> MuscleGroup | None:
        return self.muscle_groups.get(muscle_group_id)

    async def create_muscle_group(self, data: dict[str, Any]) -> MuscleGroup:
        return self._create_named(MuscleGroup, self.muscle_groups, "muscle_groups", data, "Muscle group")

    async def update_muscle_group(self, muscle_group_id: int, changes: dict[str, Any]) -> MuscleGroup | None:
        return self._update_named(self.muscle_groups, muscle_group_id, changes, "Muscle group")

    async def delete_muscle_group(self, muscle_group_id: int) -> bool:
        group = self.muscle_groups.get(muscle_group_id)
        if group is None:
            return False
        if any(e.muscle_group == group.name for e in self.exercises.values()):
            raise ConflictError(f"Muscle group '{group.name}' is in use")
        del self.muscle_groups[muscle_group_id]
        return True

    # --- workouts

    def _user_workouts(self, user_id: str) -> list[Workout]:
        rows = [w for w in self.workouts.values() if w.user_id == user_id]
        return sorted(rows, key=lambda w: (as_utc(w.date), w.id), reverse=True)

    async def list_workouts(
        self, user_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> list[Workout]:
        rows = self._user_workouts(user_id)
        if start is not None:
            rows = [w for w in rows if as_utc(w.date) >= as_utc(start)]
        if end is not None:
            rows = [w for w in rows if as_utc(w.date) < as_utc(end)]
        return rows

    async def list_workouts_with_exercises(self, user_id: str) -> list[Workout]:
        return self._user_workouts(user_id)

    async def list_user_ids(self) -> list[str]:
        return sorted({w.user_id for w in self.workouts.values()})

    async def get_workout(self, workout_id: int, user_id: str) -> Workout | None:
        workout = self.workouts.get(workout_id)
        if workout is None or workout.user_id != user_id:
            return None
        return workout

    async def create_workout(self, user_id: str, data: dict[str, Any]) -> Workout:
        workout = Workout(
            id=self._next_id("workouts"),
            user_id=user_id,
            name=data["name"],
            date=data.get("date") or utcnow(),
            duration=data.get("duration"),
            category=data.get("category"),
            notes=data.get("notes"),
            image_url=data.get("image_url"),
        )
        workout.exercises = []
        self.workouts[workout.id] = workout
        return workout

    def _add_entry(self, workout: Workout, data: dict[str, Any]) -> WorkoutExercise:
        exercise = self.exercises.get(data["exercise_id"])
        if exercise is None:
            raise ConflictError(f"Exercise {data['exercise_id']} does not exist")
        entry = WorkoutExercise(
            id=self._next_id("workout_exercises"),
            workout_id=workout.id,
            exercise_id=exercise.id,
            sets=data["sets"],
            reps=data.get("reps"),
            weight=data.get("weight"),
            rest_time=data.get("rest_time"),
            duration_seconds=data.get("duration_seconds") or 0,
            notes=data.get("notes"),
        )
        entry.workout = workout
        entry.exercise = exercise
        self.workout_exercises[entry.id] = entry
        return entry

    async def create_workout_with_exercises(
        self, user_id: str, data: dict[str, Any], exercises: list[dict[str, Any]]
    ) -> Workout:
        wanted = [e for e in exercises if e.get("exercise_id", 0) > 0]
        for item in wanted:
            if item["exercise_id"] not in self.exercises:
                raise ConflictError(f"Exercise {item['exercise_id']} does not exist")
        workout = await self.create_workout(user_id, data)
        for item in wanted:
            self._add_entry(workout, item)
        return workout

    async def update_workout(self, workout_id: int, user_id: str, changes: dict[str, Any]) -> Workout | None:
        workout = await self.get_workout(workout_id, user_id)
        if workout is None:
            return None
        _apply(workout, {k: v for k, v in changes.items() if k in _WORKOUT_FIELDS})
        return workout

    async def update_workout_duration(self, workout_id: int, duration: int) -> bool:
        workout = self.workouts.get(workout_id)
        if workout is None:
            return False
        workout.duration = duration
        return True

    @staticmethod
    def _unlink_exercise(entry: WorkoutExercise) -> None:
        exercise = entry.exercise
        if exercise is not None and entry in exercise.workout_entries:
            exercise.workout_entries.remove(entry)

    def _drop_entry(self, entry: WorkoutExercise) -> None:
        self._unlink_exercise(entry)
        if entry.workout is not None and entry in entry.workout.exercises:
            entry.workout.exercises.remove(entry)
        del self.workout_exercises[entry.id]

    async def delete_workout(self, workout_id: int, user_id: str) -> bool:
        workout = await self.get_workout(workout_id, user_id)
        if workout is None:
            return False
        for entry in list(workout.exercises):
            self._drop_entry(entry)
        del self.workouts[workout_id]
        return True

    # --- workout exercises

    async def list_workout_exercises(self, workout_id: int) -> list[WorkoutExercise]:
        return sorted(
            (e for e in self.workout_exercises.values() if e.workout_id == workout_id),
            key=lambda e: e.id,
        )

    async def get_workout_exercise(self, entry_id: int, user_id: str) -> WorkoutExercise | None:
        entry = self.workout_exercises.get(entry_id)
        if entry is None or entry.workout is None or entry.workout.user_id != user_id:
            return None
        return entry

    async def create_workout_exercise(self, data: dict[str, Any]) -> WorkoutExercise:
        workout = self.workouts.get(data["workout_id"])
        if workout is None:
            raise ConflictError(f"Workout {data['workout_id']} does not exist")
        return self._add_entry(workout, data)

    async def update_workout_exercise(
        self, entry_id: int, user_id: str, changes: dict[str, Any]
    ) -> WorkoutExercise | None:
        entry = await self.get_workout_exercise(entry_id, user_id)
        if entry is None:
            return None
        changes = {k: v for k, v in changes.items() if k in _ENTRY_FIELDS}
        if "exercise_id" in changes and changes["exercise_id"] != entry.exercise_id:
            exercise = self.exercises.get(changes["exercise_id"])
            if exercise is None:
                raise ConflictError(f"Exercise {changes['exercise_id']} does not exist")
            self._unlink_exercise(entry)
            entry.exercise = exercise
        _apply(entry, changes)
        return entry

    async def delete_workout_exercise(self, entry_id: int, user_id: str) -> bool:
        entry = await self.get_workout_exercise(entry_id, user_id)
        if entry is None:
            return False
        self._drop_entry(entry)
        return True

    async def list_exercise_entries(self, user_id: str) -> list[WorkoutExercise]:
        return [e for w in self._user_workouts(user_id) for e in w.exercises]

    # --- personal records

    async def list_personal_records(self, user_id: str, exercise_id: int | None = None) -> list[PersonalRecord]:
        rows = [r for r in self.personal_records.values() if r.user_id == user_id]
        if exercise_id is not None:
            rows = [r for r in rows if r.exercise_id == exercise_id]
        return sorted(rows, key=lambda r: (as_utc(r.date), r.id), reverse=True)

    async def create_personal_record(self, user_id: str, data: dict[str, Any]) -> PersonalRecord:
        if data["exercise_id"] not in self.exercises:
            raise ConflictError(f"Exercise {data['exercise_id']} does not exist")
        record = PersonalRecord(
            id=self._next_id("personal_records"),
            user_id=user_id,
            exercise_id=data["exercise_id"],
            weight=data["weight"],
            reps=data["reps"],
            date=data.get("date") or utcnow(),
        )
        self.personal_records[record.id] = record
        return record

    async def delete_personal_records(self, user_id: str) -> int:
        ids = [r.id for r in self.personal_records.values() if r.user_id == user_id]
        for record_id in ids:
            del self.personal_records[record_id]
        return len(ids)

    # --- monthly goals

    async def get_monthly_goal(self, user_id: str, month: int, year: int) -> MonthlyGoal | None:
        return next(
            (
                g
                for g in self.monthly_goals.values()
                if g.user_id == user_id and g.month == month and g.year == year
            ),
            None,
        )

    async def list_monthly_goals(self, user_id: str) -> list[MonthlyGoal]:
        rows = [g for g in self.monthly_goals.values() if g.user_id == user_id]
        return sorted(rows, key=lambda g: (g.year, g.month), reverse=True)

    async def upsert_monthly_goal(self, user_id: str, month: int, year: int, target_workouts: int) -> MonthlyGoal:
        now = utcnow()
        goal = await self.get_monthly_goal(user_id, month, year)
        if goal is None:
            goal = MonthlyGoal(
                id=self._next_id("monthly_goals"),
                user_id=user_id,
                month=month,
                year=year,
                target_workouts=target_workouts,
                completed_workouts=0,
                created_at=now,
                updated_at=now,
            )
            self.monthly_goals[goal.id] = goal
            return goal
        goal.target_workouts = target_workouts
        goal.updated_at = now
        return goal

    # --- goal photos

    async def create_goal_photo(self, user_id: str, data: dict[str, Any]) -> GoalPhoto:
        photo = GoalPhoto(
            id=self._next_id("goal_photos"),
            user_id=user_id,
            image_url=data["image_url"],
            type=data["type"],
            timestamp=data.get("timestamp") or utcnow(),
            month=data["month"],
            year=data["year"],
            description=data.get("description"),
        )
        self.goal_photos[photo.id] = photo
        return photo

    async def list_goal_photos(self, user_id: str, month: int, year: int) -> list[GoalPhoto]:
        rows = [
            p
            for p in self.goal_photos.values()
            if p.user_id == user_id and p.month == month and p.year == year
        ]
        return sorted(rows, key=lambda p: (as_utc(p.timestamp), p.id))

    async def count_goal_photos(self, user_id: str) -> int:
        return sum(1 for p in self.goal_photos.values() if p.user_id == user_id)

    async def update_goal_photo(self, photo_id: int, user_id: str, description: str | None) -> GoalPhoto | None:
        photo = self.goal_photos.get(photo_id)
        if photo is None or photo.user_id != user_id:
            return None
        photo.description = description
        return photo

    async def delete_goal_photo(self, photo_id: int, user_id: str) -> bool:
        photo = self.goal_photos.get(photo_id)
        if photo is None or photo.user_id != user_id:
            return False
        del self.goal_photos[photo_id]
        return True

    # --- quotes

    async def list_quotes(self, active_only: bool = False) -> list[Quote]:
        rows = sorted(self.quotes.values(), key=lambda q: q.id)
        if active_only:
            rows = [q for q in rows if q.is_active]
        return rows

    async def get_quote(self, quote_id: int) -> Quote | None:
        return self.quotes.get(quote_id)

    async def create_quote(self, data: dict[str, Any]) -> Quote:
        now = utcnow()
        quote = Quote(
            id=self._next_id("quotes"),
            text=data["text"],
            author=data.get("author"),
            category=data.get("category", DEFAULT_QUOTE_CATEGORY),
            is_active=data.get("is_active", True),
            created_at=now,
            updated_at=now,
        )
        self.quotes[quote.id] = quote
        return quote

    async def update_quote(self, quote_id: int, changes: dict[str, Any]) -> Quote | None:
        quote = self.quotes.get(quote_id)
        if quote is None:
            return None
        _apply(quote, changes)
        quote.updated_at = utcnow()
        return quote

    async def delete_quote(self, quote_id: int) -> bool:
        return self.quotes.pop(quote_id, None) is not None

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
        row = CommunityPresence(
            user_id=user_id,
            username=username,
            profile_image_url=profile_image_url,
            workout_name=workout_name,
            exercise_names=exercise_names,
            last_active=now or utcnow(),
        )
        self.community_presence[user_id] = row
        return row

    async def touch_community_presence(self, user_id: str, now: datetime | None = None) -> CommunityPresence:
        row = self.community_presence.get(user_id)
        if row is None:
            return await self.upsert_community_presence(user_id, "", None, "", "", now)
        row.last_active = now or utcnow()
        return row

    async def list_community_presence(self, since: datetime, limit: int) -> list[CommunityPresence]:
        rows = [
            p
            for p in self.community_presence.values()
            if as_utc(p.last_active) >= as_utc(since) and p.workout_name
        ]
        rows.sort(key=lambda p: as_utc(p.last_active), reverse=True)
        return rows[:limit]

    async def count_active_users(self, since: datetime) -> int:
        return sum(1 for p in self.community_presence.values() if as_utc(p.last_active) >= as_utc(since))

    # --- bulk

    async def clear_user_data(self, user_id: str) -> DeletedCounts:
        counts = DeletedCounts()
        for workout in self._user_workouts(user_id):
            await self.delete_workout(workout.id, user_id)
            counts.workouts += 1
        counts.personal_records = await self.delete_personal_records(user_id)

        goal_ids = [g.id for g in self.monthly_goals.values() if g.user_id == user_id]
        for goal_id in goal_ids:
            del self.monthly_goals[goal_id]
        counts.monthly_goals = len(goal_ids)

        photo_ids = [p.id for p in self.goal_photos.values() if p.user_id == user_id]
        for photo_id in photo_ids:
            del self.goal_photos[photo_id]
        counts.goal_photos = len(photo_ids)

        if self.community_presence.pop(user_id, None) is not None:
            counts.community_presence = 1
        await self.reset_user_profile(user_id)
        return counts
