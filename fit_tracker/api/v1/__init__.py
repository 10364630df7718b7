"""API v1 router aggregation."""

from fastapi import APIRouter

from fit_tracker.api.v1.endpoints import (
    auth,
    categories,
    community,
    data,
    exercises,
    goals,
    health,
    muscle_groups,
    personal_records,
    quotes,
    stats,
    users,
    workout_exercises,
    workouts,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/user", tags=["user"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(muscle_groups.router, prefix="/muscle-groups", tags=["muscle-groups"])
api_router.include_router(workouts.router, prefix="/workouts", tags=["workouts"])
api_router.include_router(workout_exercises.router, prefix="/workout-exercises", tags=["workout-exercises"])
api_router.include_router(personal_records.router, prefix="/personal-records", tags=["personal-records"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
api_router.include_router(goals.router, prefix="/goals", tags=["goals"])
api_router.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
api_router.include_router(community.router, prefix="/community", tags=["community"])
api_router.include_router(data.router, tags=["data"])
