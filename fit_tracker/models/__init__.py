"""ORM models - import all so Base.metadata is complete for migrations."""

from fit_tracker.models.category import Category
from fit_tracker.models.community import CommunityPresence
from fit_tracker.models.exercise import Exercise
from fit_tracker.models.goal import GoalPhoto, MonthlyGoal
from fit_tracker.models.muscle_group import MuscleGroup
from fit_tracker.models.personal_record import PersonalRecord
from fit_tracker.models.quote import Quote
from fit_tracker.models.user import User
from fit_tracker.models.workout import Workout, WorkoutExercise

__all__ = [
    "Category",
    "CommunityPresence",
    "Exercise",
    "GoalPhoto",
    "MonthlyGoal",
    "MuscleGroup",
    "PersonalRecord",
    "Quote",
    "User",
    "Workout",
    "WorkoutExercise",
]
