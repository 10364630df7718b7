"""Monthly goal math and workout-day streaks."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, timezone

from fit_tracker.models import Workout
from fit_tracker.schemas.goal import GoalPhotoRead, MonthlyGoalData
from fit_tracker.services.dates import as_utc


def month_bounds(month: int, year: int) -> tuple[datetime, datetime]:
    """[first day of month, first day of next month) in UTC."""
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def previous_month(month: int, year: int) -> tuple[int, int]:
    if month == 1:
        return 12, year - 1
    return month - 1, year


def count_in_month(workouts: Iterable[Workout], month: int, year: int) -> int:
    start, end = month_bounds(month, year)
    return sum(1 for w in workouts if start <= as_utc(w.date) < end)


def completion_percentage(completed: int, target: int) -> float:
    if target <= 0:
        return 0.0
    return completed / target * 100


def build_monthly_goal_data(
    month: int,
    year: int,
    target: int,
    workouts: Sequence[Workout],
    before_photo: GoalPhotoRead | None,
    latest_photo: GoalPhotoRead | None,
) -> MonthlyGoalData:
    """`workouts` must already be limited to the month."""
    dates = sorted(as_utc(w.date) for w in workouts)
    return MonthlyGoalData(
        month=month,
        year=year,
        target_workouts=target,
        completed_workouts=len(dates),
        workout_dates=[d.isoformat() for d in dates],
        completion_percentage=completion_percentage(len(dates), target),
        before_photo=before_photo,
        latest_photo=latest_photo,
    )


def longest_streak(days: Iterable[date], since: date | None = None, lookback_days: int | None = None) -> int:
    """Longest run of consecutive calendar days with at least one workout."""
    unique = set(days)
    if since is not None and lookback_days is not None:
        cutoff = since - timedelta(days=lookback_days)
        unique = {d for d in unique if d >= cutoff}
    workout_dates = sorted(unique, reverse=True)
    if not workout_dates:
        return 0

    longest = 1
    run = 1
    for i in range(1, len(workout_dates)):
        if workout_dates[i] == workout_dates[i - 1] - timedelta(days=1):
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest
