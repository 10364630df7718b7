"""Dashboard statistics: reps parsing, volume, weekly counts, daily quote."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date, datetime

from fit_tracker.core.constants import DEFAULT_WEEKLY_GOAL
from fit_tracker.models import Quote, User, Workout, WorkoutExercise
from fit_tracker.schemas.quote import QuoteRead
from fit_tracker.schemas.stats import ExerciseStats, HeaviestLift, WorkoutStats
from fit_tracker.services.dates import as_utc, week_start

_LEADING_INT = re.compile(r"\s*(\d+)")


def parse_reps(reps: str | int | None) -> int:
    """Leading integer of free-text reps ("8-12" -> 8, "5x5" -> 5); 0 when none."""
    if reps is None:
        return 0
    if isinstance(reps, int):
        return reps
    match = _LEADING_INT.match(reps)
    return int(match.group(1)) if match else 0


def entry_volume(entry: WorkoutExercise) -> float:
    return (entry.sets or 0) * parse_reps(entry.reps) * float(entry.weight or 0)


def pick_daily_quote(quotes: Sequence[Quote], today: date) -> Quote | None:
    """Rotate through quotes by day of year."""
    if not quotes:
        return None
    day_of_year = today.timetuple().tm_yday
    return quotes[day_of_year % len(quotes)]


def heaviest_lift(entries: Sequence[WorkoutExercise]) -> HeaviestLift | None:
    best: WorkoutExercise | None = None
    for entry in entries:
        weight = float(entry.weight or 0)
        if weight <= 0:
            continue
        if best is None or weight > float(best.weight):
            best = entry
    if best is None:
        return None
    return HeaviestLift(
        exercise_name=best.exercise.name if best.exercise else "Unknown",
        weight=float(best.weight),
        category=best.exercise.category if best.exercise else None,
    )


def can_set_new_goal(user: User | None, now: datetime) -> bool:
    """Weekly goal may change once per week: never set, or set before this week began."""
    if user is None or user.goal_set_at is None:
        return True
    return as_utc(user.goal_set_at) < week_start(now)


def build_workout_stats(
    user: User | None,
    workouts: Sequence[Workout],
    entries: Sequence[WorkoutExercise],
    quote: Quote | None,
    now: datetime,
) -> WorkoutStats:
    start = week_start(now)
    this_week = sum(1 for w in workouts if as_utc(w.date) >= start)
    durations = [w.duration or 0 for w in workouts]
    average = round(sum(durations) / len(durations), 1) if durations else 0.0
    return WorkoutStats(
        total_workouts=len(workouts),
        this_week=this_week,
        personal_record=heaviest_lift(entries),
        daily_quote=QuoteRead.model_validate(quote) if quote else None,
        weekly_goal=user.weekly_goal if user else DEFAULT_WEEKLY_GOAL,
        average_duration=average,
        can_set_new_goal=can_set_new_goal(user, now),
    )


def build_exercise_stats(entries: Sequence[WorkoutExercise]) -> list[ExerciseStats]:
    """Per-exercise volume, max weight, sets and last date; most recent first."""
    by_exercise: dict[int, dict] = {}
    for entry in entries:
        row = by_exercise.setdefault(
            entry.exercise_id,
            {
                "exercise_id": entry.exercise_id,
                "exercise_name": entry.exercise.name if entry.exercise else "Unknown",
                "total_volume": 0.0,
                "max_weight": 0.0,
                "total_sets": 0,
                "last": None,
            },
        )
        row["total_volume"] += entry_volume(entry)
        row["max_weight"] = max(row["max_weight"], float(entry.weight or 0))
        row["total_sets"] += entry.sets or 0
        performed = as_utc(entry.workout.date) if entry.workout else None
        if performed and (row["last"] is None or performed > row["last"]):
            row["last"] = performed

    rows = sorted(
        by_exercise.values(),
        key=lambda r: (r["last"] is not None, r["last"] or 0, r["exercise_id"]),
        reverse=True,
    )
    return [
        ExerciseStats(
            exercise_id=r["exercise_id"],
            exercise_name=r["exercise_name"],
            total_volume=round(r["total_volume"], 2),
            max_weight=r["max_weight"],
            total_sets=r["total_sets"],
            last_performed=r["last"].isoformat() if r["last"] else None,
        )
        for r in rows
    ]
