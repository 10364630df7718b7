from datetime import date, datetime, timezone

import pytest

from fit_tracker.core.enums import PhotoType
from fit_tracker.models import Exercise, MonthlyGoal, PersonalRecord, Quote, User, Workout, WorkoutExercise
from fit_tracker.services.dates import as_utc, week_start
from fit_tracker.services.durations import derived_duration, duration_report
from fit_tracker.services.export import build_export_csv, export_filename
from fit_tracker.services.goals import (
    build_monthly_goal_data,
    completion_percentage,
    count_in_month,
    longest_streak,
    month_bounds,
    previous_month,
)
from fit_tracker.services.stats import (
    build_exercise_stats,
    build_workout_stats,
    can_set_new_goal,
    parse_reps,
    pick_daily_quote,
)


def _dt(y, m, d, h=12):
    return datetime(y, m, d, h, tzinfo=timezone.utc)


def _workout(id, when, duration=None, entries=()):
    w = Workout(id=id, user_id="u1", name=f"W{id}", date=when, duration=duration)
    w.exercises = list(entries)
    return w


def _entry(id, exercise, sets, reps, weight, seconds=0):
    return WorkoutExercise(
        id=id,
        exercise_id=exercise.id,
        exercise=exercise,
        sets=sets,
        reps=reps,
        weight=weight,
        duration_seconds=seconds,
    )


BENCH = Exercise(id=1, name="Bench Press", category="strength", muscle_group="Middle Chest")
SQUAT = Exercise(id=2, name="Squat", category="strength", muscle_group="Quads")


@pytest.mark.parametrize(
    "reps,expected",
    [("10", 10), ("8-12", 8), ("5x5", 5), (" 12 ", 12), ("AMRAP", 0), ("", 0), (None, 0), (7, 7)],
)
def test_parse_reps(reps, expected):
    assert parse_reps(reps) == expected


def test_week_start_is_monday_utc():
    # 2026-10-22 is a Thursday
    assert week_start(_dt(2026, 10, 22)) == datetime(2026, 10, 19, tzinfo=timezone.utc)
    assert week_start(datetime(2026, 10, 19, 0, 0)) == datetime(2026, 10, 19, tzinfo=timezone.utc)


def test_as_utc_treats_naive_as_utc():
    assert as_utc(datetime(2026, 1, 1, 5)).tzinfo == timezone.utc
    assert as_utc(datetime(2026, 1, 1, 5)).hour == 5


def test_month_bounds_wraps_december():
    start, end = month_bounds(12, 2025)
    assert start == datetime(2025, 12, 1, tzinfo=timezone.utc)
    assert end == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert previous_month(1, 2026) == (12, 2025)
    assert previous_month(7, 2026) == (6, 2026)


def test_last_day_of_month_counts():
    workouts = [_workout(1, datetime(2026, 3, 31, 23, 30, tzinfo=timezone.utc)), _workout(2, _dt(2026, 4, 1))]
    assert count_in_month(workouts, 3, 2026) == 1
    assert count_in_month(workouts, 4, 2026) == 1


def test_completion_percentage():
    assert completion_percentage(3, 12) == 25.0
    assert completion_percentage(5, 0) == 0.0
    assert completion_percentage(15, 10) == 150.0


def test_build_monthly_goal_data():
    workouts = [_workout(2, _dt(2026, 3, 10)), _workout(1, _dt(2026, 3, 2))]
    data = build_monthly_goal_data(3, 2026, 8, workouts, None, None)
    assert data.completed_workouts == 2
    assert data.target_workouts == 8
    assert data.completion_percentage == 25.0
    assert data.workout_dates[0].startswith("2026-03-02")


def test_longest_streak():
    days = [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3), date(2026, 1, 3), date(2026, 1, 10), date(2026, 1, 11)]
    assert longest_streak(days) == 3
    assert longest_streak([]) == 0
    assert longest_streak([date(2026, 1, 5)]) == 1


def test_longest_streak_lookback_window():
    days = [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3), date(2026, 1, 1)]
    assert longest_streak(days, since=date(2026, 1, 2), lookback_days=30) == 1


def test_pick_daily_quote_rotates_by_day_of_year():
    quotes = [Quote(id=i, text=f"q{i}") for i in range(1, 4)]
    # Jan 1 is day 1 -> index 1
    assert pick_daily_quote(quotes, date(2026, 1, 1)).id == 2
    assert pick_daily_quote(quotes, date(2026, 1, 3)).id == 1
    assert pick_daily_quote([], date(2026, 1, 1)) is None


def test_can_set_new_goal():
    now = _dt(2026, 10, 22)
    assert can_set_new_goal(None, now)
    assert can_set_new_goal(User(id="u", goal_set_at=None), now)
    assert can_set_new_goal(User(id="u", goal_set_at=_dt(2026, 10, 18)), now)
    assert not can_set_new_goal(User(id="u", goal_set_at=_dt(2026, 10, 20)), now)


def test_build_workout_stats():
    now = _dt(2026, 10, 22)
    e1 = _entry(1, BENCH, 3, "10", 80)
    e2 = _entry(2, SQUAT, 5, "5", 120)
    e3 = _entry(3, SQUAT, 3, "8", 0)
    workouts = [
        _workout(1, _dt(2026, 10, 21), 60, [e1]),
        _workout(2, _dt(2026, 10, 19, 1), 30, [e2]),
        _workout(3, _dt(2026, 10, 12), None, [e3]),
    ]
    user = User(id="u1", weekly_goal=5, goal_set_at=None)
    stats = build_workout_stats(user, workouts, [e1, e2, e3], None, now)
    assert stats.total_workouts == 3
    assert stats.this_week == 2
    assert stats.personal_record.exercise_name == "Squat"
    assert stats.personal_record.weight == 120
    assert stats.weekly_goal == 5
    assert stats.average_duration == 30.0
    assert stats.can_set_new_goal is True
    assert stats.daily_quote is None


def test_build_workout_stats_without_data():
    stats = build_workout_stats(None, [], [], None, _dt(2026, 10, 22))
    assert stats.total_workouts == 0
    assert stats.average_duration == 0
    assert stats.personal_record is None
    assert stats.weekly_goal == 4


def test_build_exercise_stats():
    e1 = _entry(1, BENCH, 3, "10", 80)
    e2 = _entry(2, BENCH, 2, "8-12", 90)
    e3 = _entry(3, SQUAT, 4, "5", 100)
    _workout(1, _dt(2026, 10, 1), entries=[e1, e3])
    _workout(2, _dt(2026, 10, 5), entries=[e2])

    rows = {r.exercise_name: r for r in build_exercise_stats([e1, e2, e3])}
    bench = rows["Bench Press"]
    assert bench.total_volume == 3 * 10 * 80 + 2 * 8 * 90
    assert bench.max_weight == 90
    assert bench.total_sets == 5
    assert bench.last_performed.startswith("2026-10-05")
    assert rows["Squat"].total_volume == 2000


def test_derived_duration_rounds_half_up():
    assert derived_duration(_workout(1, _dt(2026, 1, 1), entries=[_entry(1, BENCH, 1, "1", 1, 90)])) == 2
    assert derived_duration(_workout(2, _dt(2026, 1, 1), entries=[_entry(2, BENCH, 1, "1", 1, 0)])) is None
    assert derived_duration(_workout(3, _dt(2026, 1, 1))) is None


def test_duration_report():
    w = _workout(1, _dt(2026, 1, 1), None, [_entry(1, BENCH, 1, "1", 1, 300), _entry(2, SQUAT, 1, "1", 1, 120)])
    (row,) = duration_report([w])
    assert row.exercise_count == 2
    assert row.total_exercise_duration == 420
    assert row.duration is None


def test_export_csv_sections():
    user = User(id="u1", email="a@example.com", username=None, weekly_goal=4, show_in_community=False)
    workout = _workout(7, _dt(2026, 3, 2), 45, [_entry(1, BENCH, 3, "10", 80)])
    workout.notes = 'felt "strong", good day'
    record = PersonalRecord(id=1, user_id="u1", exercise_id=1, weight=100, reps=1, date=_dt(2026, 3, 2))
    goal = MonthlyGoal(id=1, user_id="u1", month=3, year=2026, target_workouts=4)

    content = build_export_csv(user, [workout], [record], [goal])
    lines = content.splitlines()
    for header in (
        "=== USER PROFILE ===",
        "=== WORKOUTS ===",
        "=== WORKOUT EXERCISES ===",
        "=== PERSONAL RECORDS ===",
        "=== MONTHLY GOALS ===",
    ):
        assert header in lines
    assert "Username,Not set" in lines
    assert '"felt ""strong"", good day"' in content
    assert "3,2026,4,1,25%" in lines
    assert export_filename(date(2026, 3, 5)) == "fit-tracker-export-2026-03-05.csv"


def test_photo_type_values():
    assert [t.value for t in PhotoType] == ["before", "progress", "after"]
