"""Storage backends: the in-memory store and SqlStorage on a throwaway SQLite database."""

from datetime import datetime, timedelta, timezone

import pytest

from fit_tracker.core.config import Settings
from fit_tracker.core.enums import PhotoType
from fit_tracker.db import create_engine_for
from fit_tracker.storage import ConflictError, MemoryStorageProvider, SqlStorageProvider
from fit_tracker.storage.seed import seed_defaults


@pytest.fixture(params=["memory", "sqlite"])
async def provider(request, tmp_path):
    if request.param == "sqlite":
        settings = Settings(_env_file=None, database_url=f"sqlite+aiosqlite:///{tmp_path}/fit.db")
        backend = SqlStorageProvider(create_engine_for(settings))
        await backend.create_tables()
    else:
        backend = MemoryStorageProvider()
    async with backend.session() as storage:
        await seed_defaults(storage)
    yield backend
    await backend.dispose()


async def _exercise_id(storage, name: str) -> int:
    return next(e.id for e in await storage.list_exercises() if e.name == name)


async def test_seed_is_idempotent(provider):
    async with provider.session() as storage:
        created = await seed_defaults(storage)
        assert created == {"categories": 0, "muscle_groups": 0, "exercises": 0, "quotes": 0}
        assert len(await storage.list_exercises()) == 8
        assert len(await storage.list_muscle_groups()) == 20
        assert len(await storage.list_quotes(active_only=True)) == 7


async def test_exercise_filters(provider):
    async with provider.session() as storage:
        cardio = await storage.list_exercises(category="cardio")
        assert [e.name for e in cardio] == ["Cycling", "Running"]
        found = await storage.list_exercises(search="press")
        assert [e.name for e in found] == ["Bench Press"]


async def test_workout_with_exercises_round_trip(provider):
    async with provider.session() as storage:
        bench = await _exercise_id(storage, "Bench Press")
        squat = await _exercise_id(storage, "Squat")
        workout = await storage.create_workout_with_exercises(
            "user-1",
            {"name": "Strength"},
            [
                {"exercise_id": bench, "sets": 3, "reps": "10", "weight": 60.0, "duration_seconds": 90},
                {"exercise_id": 0, "sets": 1},
                {"exercise_id": squat, "sets": 5, "reps": "5", "weight": 100.0, "duration_seconds": 120},
            ],
        )
        workout_id = workout.id
        assert [e.exercise.name for e in workout.exercises] == ["Bench Press", "Squat"]

    async with provider.session() as storage:
        loaded = await storage.get_workout(workout_id, "user-1")
        assert len(loaded.exercises) == 2
        assert await storage.get_workout(workout_id, "user-2") is None
        entries = await storage.list_exercise_entries("user-1")
        assert {e.exercise.name for e in entries} == {"Bench Press", "Squat"}
        assert all(e.workout.id == workout_id for e in entries)


async def test_unknown_exercise_rolls_back(provider):
    with pytest.raises(ConflictError):
        async with provider.session() as storage:
            await storage.create_workout_with_exercises("user-1", {"name": "Bad"}, [{"exercise_id": 999, "sets": 1}])
    async with provider.session() as storage:
        assert await storage.list_workouts("user-1") == []


async def test_category_conflicts(provider):
    async with provider.session() as storage:
        with pytest.raises(ConflictError):
            await storage.create_category({"name": "strength"})
        hiit = await storage.create_category({"name": "hiit", "description": "Intervals"})
        names = [c.name for c in await storage.list_categories()]
        assert names[0] == "strength"
        assert "hiit" in names
        strength = next(c for c in await storage.list_categories() if c.name == "strength")
        with pytest.raises(ConflictError):
            await storage.delete_category(strength.id)
        assert await storage.delete_category(hiit.id) is True
        assert await storage.delete_category(hiit.id) is False


async def test_exercise_in_use_cannot_be_deleted(provider):
    async with provider.session() as storage:
        plank = await _exercise_id(storage, "Plank")
        running = await _exercise_id(storage, "Running")
        await storage.create_workout_with_exercises("user-1", {"name": "Core"}, [{"exercise_id": plank, "sets": 3}])
        with pytest.raises(ConflictError):
            await storage.delete_exercise(plank)
        assert await storage.delete_exercise(running) is True

    async with provider.session() as storage:
        assert await storage.get_exercise(running) is None
        assert await storage.get_exercise(plank) is not None


async def test_monthly_goal_data(provider):
    now = datetime.now(timezone.utc)
    async with provider.session() as storage:
        await storage.upsert_monthly_goal("user-1", now.month, now.year, 4)
        await storage.upsert_monthly_goal("user-1", now.month, now.year, 2)
        await storage.create_workout("user-1", {"name": "One"})
        await storage.create_goal_photo(
            "user-1",
            {"month": now.month, "year": now.year, "image_url": "https://img/b.jpg", "type": PhotoType.BEFORE},
        )

    async with provider.session() as storage:
        data = await storage.monthly_goal_data("user-1", now.month, now.year)
        assert data.target_workouts == 2
        assert data.completed_workouts == 1
        assert data.completion_percentage == 50.0
        assert data.before_photo.type == PhotoType.BEFORE
        assert data.latest_photo.id == data.before_photo.id
        assert len(await storage.list_monthly_goals("user-1")) == 1


async def test_clear_user_data(provider):
    async with provider.session() as storage:
        squat = await _exercise_id(storage, "Squat")
        await storage.upsert_user("user-1", email="a@example.com")
        await storage.update_user_profile("user-1", {"show_in_community": True, "profile_image_url": "x"})
        await storage.create_workout_with_exercises("user-1", {"name": "A"}, [{"exercise_id": squat, "sets": 1}])
        await storage.create_workout("user-2", {"name": "B"})
        await storage.create_personal_record("user-1", {"exercise_id": squat, "weight": 100.0, "reps": 1})
        await storage.upsert_community_presence("user-1", "alice", None, "A", "Squat")

    async with provider.session() as storage:
        counts = await storage.clear_user_data("user-1")
        assert counts.workouts == 1
        assert counts.personal_records == 1
        assert counts.community_presence == 1
        assert counts.total == 3

    async with provider.session() as storage:
        assert await storage.list_workouts("user-1") == []
        assert await storage.list_exercise_entries("user-1") == []
        assert len(await storage.list_workouts("user-2")) == 1
        user = await storage.get_user("user-1")
        assert user.show_in_community is False
        assert user.profile_image_url is None


async def test_users(provider):
    async with provider.session() as storage:
        user = await storage.upsert_user("user-1", email="a@example.com", first_name="Ann", profile_image_url="p1")
        assert user.weekly_goal == 4
        assert user.show_in_community is False
        with pytest.raises(ConflictError):
            await storage.upsert_user("user-2", email="a@example.com")

    set_at = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)
    async with provider.session() as storage:
        user = await storage.update_user_goal("user-1", 6, now=set_at)
        assert user.weekly_goal == 6
        assert user.goal_set_at.replace(tzinfo=timezone.utc) == set_at
        assert await storage.update_user_goal("nobody", 3) is None
        await storage.update_user_profile("user-1", {"username": "ann", "show_in_community": True})

    async with provider.session() as storage:
        user = await storage.upsert_user("user-1", email="ann@example.com", first_name="Annie", profile_image_url="p2")
        assert user.email == "ann@example.com"
        assert user.first_name == "Annie"
        assert user.profile_image_url == "p1"
        assert user.weekly_goal == 6
        assert user.username == "ann"
        assert user.show_in_community is True


async def test_workout_exercise_updates(provider):
    async with provider.session() as storage:
        bench = await _exercise_id(storage, "Bench Press")
        squat = await _exercise_id(storage, "Squat")
        workout = await storage.create_workout("user-1", {"name": "Upper"})
        entry = await storage.create_workout_exercise(
            {"workout_id": workout.id, "exercise_id": bench, "sets": 3, "reps": "10", "weight": 50.0}
        )
        workout_id, entry_id = workout.id, entry.id

    async with provider.session() as storage:
        assert await storage.update_workout_exercise(entry_id, "user-2", {"sets": 1}) is None
        updated = await storage.update_workout_exercise(entry_id, "user-1", {"sets": 4, "exercise_id": squat})
        assert updated.sets == 4
        assert updated.exercise.name == "Squat"
        assert updated.reps == "10"
        with pytest.raises(ConflictError):
            await storage.update_workout_exercise(entry_id, "user-1", {"exercise_id": 999})

    async with provider.session() as storage:
        assert await storage.delete_workout_exercise(entry_id, "user-2") is False
        assert await storage.delete_workout_exercise(entry_id, "user-1") is True
        assert await storage.delete_workout_exercise(entry_id, "user-1") is False

    async with provider.session() as storage:
        assert await storage.list_workout_exercises(workout_id) == []
        assert (await storage.get_workout(workout_id, "user-1")).exercises == []


async def test_goal_photos(provider):
    async with provider.session() as storage:
        first = await storage.create_goal_photo(
            "user-1", {"month": 5, "year": 2026, "image_url": "a", "type": PhotoType.PROGRESS}
        )
        before = await storage.create_goal_photo(
            "user-1", {"month": 5, "year": 2026, "image_url": "b", "type": PhotoType.BEFORE}
        )
        last = await storage.create_goal_photo(
            "user-1", {"month": 5, "year": 2026, "image_url": "c", "type": PhotoType.AFTER}
        )
        await storage.create_goal_photo("user-2", {"month": 5, "year": 2026, "image_url": "d", "type": PhotoType.AFTER})

    async with provider.session() as storage:
        assert [p.image_url for p in await storage.list_goal_photos("user-1", 5, 2026)] == ["a", "b", "c"]
        assert (await storage.before_photo("user-1", 5, 2026)).id == before.id
        assert (await storage.latest_photo("user-1", 5, 2026)).id == last.id
        assert await storage.count_goal_photos("user-1") == 3

        assert await storage.update_goal_photo(first.id, "user-2", "nope") is None
        patched = await storage.update_goal_photo(first.id, "user-1", "day one")
        assert patched.description == "day one"

        assert await storage.delete_goal_photo(before.id, "user-2") is False
        assert await storage.delete_goal_photo(before.id, "user-1") is True

    async with provider.session() as storage:
        assert await storage.before_photo("user-1", 5, 2026) is None
        assert await storage.count_goal_photos("user-1") == 2


async def test_community_presence(provider):
    now = datetime.now(timezone.utc)
    async with provider.session() as storage:
        await storage.upsert_community_presence("user-1", "ann", None, "Legs", "Squat, Lunge", now=now)
        await storage.upsert_community_presence(
            "user-2", "bob", None, "Run", "Running", now=now - timedelta(hours=30)
        )
        await storage.touch_community_presence("user-3", now=now)

    async with provider.session() as storage:
        feed = await storage.list_community_presence(now - timedelta(hours=24), limit=10)
        assert [p.user_id for p in feed] == ["user-1"]
        assert feed[0].exercise_names == "Squat, Lunge"
        assert await storage.count_active_users(now - timedelta(minutes=5)) == 2

        touched = await storage.touch_community_presence("user-2", now=now)
        assert touched.workout_name == "Run"

    async with provider.session() as storage:
        feed = await storage.list_community_presence(now - timedelta(hours=24), limit=1)
        assert len(feed) == 1
        assert await storage.count_active_users(now - timedelta(minutes=5)) == 3


async def test_stats_aggregates(provider):
    now = datetime.now(timezone.utc)
    async with provider.session() as storage:
        bench = await _exercise_id(storage, "Bench Press")
        await storage.upsert_user("user-1", email="a@example.com")
        await storage.create_workout_with_exercises(
            "user-1",
            {"name": "Push", "duration": 30},
            [{"exercise_id": bench, "sets": 3, "reps": "8-12", "weight": 70.0}],
        )
        await storage.create_workout("user-1", {"name": "Walk"})
        await storage.upsert_monthly_goal("user-1", now.month, now.year, 4)

    async with provider.session() as storage:
        stats = await storage.workout_stats("user-1", now=now)
        assert stats.total_workouts == 2
        assert stats.this_week == 2
        assert stats.average_duration == 15.0
        assert stats.personal_record.exercise_name == "Bench Press"
        assert stats.personal_record.weight == 70.0
        assert stats.daily_quote is not None
        assert stats.can_set_new_goal is True

        [bench_stats] = await storage.exercise_stats("user-1")
        assert bench_stats.total_volume == 3 * 8 * 70
        assert bench_stats.total_sets == 3

        goals = await storage.goal_stats("user-1", now=now)
        assert goals.current_month.completed_workouts == 2
        assert goals.current_month.completion_percentage == 50.0
        assert goals.longest_streak == 1
        assert goals.average_monthly_completion == 50.0


async def test_quote_import_and_daily_rotation(provider):
    async with provider.session() as storage:
        for quote in await storage.list_quotes():
            await storage.delete_quote(quote.id)
        created = await storage.import_quotes(
            [{"text": "One", "author": "A"}, {"text": "Two", "is_active": False}, {"text": "Three"}]
        )
        assert [q.text for q in created] == ["One", "Two", "Three"]
        assert created[0].category == "motivation"

    async with provider.session() as storage:
        active = await storage.list_quotes(active_only=True)
        assert [q.text for q in active] == ["One", "Three"]
        # 2026-01-02 is day 2 of the year
        assert (await storage.daily_quote(datetime(2026, 1, 2).date())).text == "One"
        assert (await storage.daily_quote(datetime(2026, 1, 3).date())).text == "Three"


async def test_deleted_entries_are_released_in_memory():
    provider = MemoryStorageProvider()
    async with provider.session() as storage:
        await seed_defaults(storage)
        bench = await _exercise_id(storage, "Bench Press")
        squat = await _exercise_id(storage, "Squat")
        for name in ("A", "B", "C"):
            workout = await storage.create_workout_with_exercises(
                "user-1", {"name": name}, [{"exercise_id": bench, "sets": 1}]
            )
            await storage.delete_workout(workout.id, "user-1")

        workout = await storage.create_workout("user-1", {"name": "D"})
        entry = await storage.create_workout_exercise({"workout_id": workout.id, "exercise_id": bench, "sets": 1})
        await storage.update_workout_exercise(entry.id, "user-1", {"exercise_id": squat})

        bench_row = await storage.get_exercise(bench)
        squat_row = await storage.get_exercise(squat)
        assert bench_row.workout_entries == []
        assert squat_row.workout_entries == [entry]

        await storage.delete_workout_exercise(entry.id, "user-1")
        assert squat_row.workout_entries == []
        assert storage.workout_exercises == {}
