"""Workout duration derived from exercise timers."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from fit_tracker.models import Workout
from fit_tracker.schemas.workout import WorkoutDurationDebug

if TYPE_CHECKING:
    from fit_tracker.storage.base import Storage

logger = logging.getLogger(__name__)


def total_exercise_seconds(workout: Workout) -> int:
    return sum(e.duration_seconds or 0 for e in workout.exercises)


def derived_duration(workout: Workout) -> int | None:
    """Minutes from summed exercise timers, or None when there is nothing to derive."""
    seconds = total_exercise_seconds(workout)
    if seconds <= 0:
        return None
    return math.floor(seconds / 60 + 0.5)  # half up


def duration_report(workouts: list[Workout]) -> list[WorkoutDurationDebug]:
    return [
        WorkoutDurationDebug(
            id=w.id,
            name=w.name,
            duration=w.duration,
            exercise_count=len(w.exercises),
            total_exercise_duration=total_exercise_seconds(w),
        )
        for w in workouts
    ]


async def backfill_durations(storage: Storage, user_id: str) -> int:
    """Fill missing/zero workout durations from exercise timers. Returns rows updated."""
    updated = 0
    for workout in await storage.list_workouts_with_exercises(user_id):
        if workout.duration:
            continue
        minutes = derived_duration(workout)
        if minutes is None:
            continue
        if await storage.update_workout_duration(workout.id, minutes):
            logger.info("Workout %s duration set to %s min", workout.id, minutes)
            updated += 1
    return updated
