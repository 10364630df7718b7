"""CSV rendering of everything a user owns."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from datetime import date

from fit_tracker.models import MonthlyGoal, PersonalRecord, User, Workout
from fit_tracker.services.dates import as_utc
from fit_tracker.services.goals import completion_percentage, count_in_month


def export_filename(today: date) -> str:
    return f"fit-tracker-export-{today.isoformat()}.csv"


def _blank(value) -> object:
    return "" if value is None else value


def _weight(value) -> object:
    return "" if value is None else float(value)


def build_export_csv(
    user: User | None,
    workouts: Sequence[Workout],
    records: Sequence[PersonalRecord],
    goals: Sequence[MonthlyGoal],
) -> str:
    """Sections separated by a blank line, each headed by `=== NAME ===`.

    `workouts` must have exercises (and their Exercise) loaded.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")

    writer.writerow(["=== USER PROFILE ==="])
    if user is not None:
        writer.writerow(["Username", user.username or "Not set"])
        writer.writerow(["Email", user.email or ""])
        writer.writerow(["Weekly Goal", user.weekly_goal])
        writer.writerow(["Show in Community", "Yes" if user.show_in_community else "No"])
    writer.writerow([])

    writer.writerow(["=== WORKOUTS ==="])
    writer.writerow(["ID", "Name", "Date", "Duration (minutes)", "Category", "Notes", "Total Exercises"])
    for w in workouts:
        writer.writerow([
            w.id,
            w.name,
            as_utc(w.date).isoformat(),
            _blank(w.duration),
            _blank(w.category),
            _blank(w.notes),
            len(w.exercises),
        ])
    writer.writerow([])

    writer.writerow(["=== WORKOUT EXERCISES ==="])
    writer.writerow([
        "Workout ID", "Workout Name", "Workout Date", "Exercise ID", "Exercise Name",
        "Category", "Muscle Group", "Sets", "Reps", "Weight", "Rest Time (sec)",
        "Duration (sec)", "Notes",
    ])
    for w in workouts:
        for e in w.exercises:
            writer.writerow([
                w.id,
                w.name,
                as_utc(w.date).isoformat(),
                e.exercise_id,
                e.exercise.name if e.exercise else "Unknown",
                e.exercise.category if e.exercise else "",
                e.exercise.muscle_group if e.exercise else "",
                e.sets,
                _blank(e.reps),
                _weight(e.weight),
                _blank(e.rest_time),
                e.duration_seconds or 0,
                _blank(e.notes),
            ])
    writer.writerow([])

    writer.writerow(["=== PERSONAL RECORDS ==="])
    writer.writerow(["ID", "Exercise ID", "Weight", "Reps", "Date"])
    for r in records:
        writer.writerow([r.id, r.exercise_id, _weight(r.weight), r.reps, as_utc(r.date).isoformat()])
    writer.writerow([])

    writer.writerow(["=== MONTHLY GOALS ==="])
    writer.writerow(["Month", "Year", "Target Workouts", "Completed Workouts", "Progress %"])
    for g in goals:
        completed = count_in_month(workouts, g.month, g.year)
        progress = round(completion_percentage(completed, g.target_workouts))
        writer.writerow([g.month, g.year, g.target_workouts, completed, f"{progress}%"])

    return buf.getvalue()
