"""Default library rows: categories, muscle groups, starter exercises, quotes."""

from __future__ import annotations

import logging

from fit_tracker.storage.base import Storage

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "strength", "description": "Strength training exercises", "is_default": True},
    {"name": "cardio", "description": "Cardiovascular exercises", "is_default": False},
    {"name": "flexibility", "description": "Flexibility and mobility exercises", "is_default": False},
    {"name": "mixed", "description": "Mixed workout routines", "is_default": False},
]

DEFAULT_MUSCLE_GROUPS = [
    ("Upper Chest", "Upper portion of the pectoral muscles"),
    ("Middle Chest", "Middle portion of the pectoral muscles"),
    ("Lower Chest", "Lower portion of the pectoral muscles"),
    ("Lats", "Latissimus dorsi muscles"),
    ("Lower Back", "Lower back muscles including erector spinae"),
    ("Middle Back", "Middle back muscles including rhomboids"),
    ("Traps", "Trapezius muscles"),
    ("Rhomboids", "Rhomboid muscles"),
    ("Front Delts", "Anterior deltoid muscles"),
    ("Side Delts", "Lateral deltoid muscles"),
    ("Rear Delts", "Posterior deltoid muscles"),
    ("Biceps", "Bicep muscles"),
    ("Triceps", "Tricep muscles"),
    ("Forearms", "Forearm muscles"),
    ("Glutes", "Gluteal muscles"),
    ("Hamstrings", "Hamstring muscles"),
    ("Quads", "Quadriceps muscles"),
    ("Calves", "Calf muscles"),
    ("Abs", "Abdominal muscles"),
    ("Obliques", "Oblique muscles"),
]

DEFAULT_EXERCISES = [
    ("Bench Press", "strength", "Middle Chest", "Lie on bench, lower bar to chest, press up", "Barbell"),
    ("Squat", "strength", "Quads", "Stand with feet shoulder-width apart, squat down, stand up", "Barbell"),
    ("Deadlift", "strength", "Lower Back", "Lift barbell from ground to hip level", "Barbell"),
    ("Pull-ups", "strength", "Lats", "Hang from bar, pull body up until chin over bar", "Pull-up bar"),
    ("Push-ups", "strength", "Middle Chest", "Lower body to ground, push back up", "Bodyweight"),
    ("Running", "cardio", "Quads", "Run at steady pace", "None"),
    ("Cycling", "cardio", "Quads", "Cycle at moderate intensity", "Bike"),
    ("Plank", "flexibility", "Abs", "Hold plank position", "None"),
]

DEFAULT_QUOTES = [
    ("The only impossible journey is the one you never begin.", "Tony Robbins", "motivation"),
    ("What seems impossible today will one day become your warm-up.", "Unknown", "motivation"),
    ("The successful warrior is the average man with laser-like focus.", "Bruce Lee", "focus"),
    ("You don't have to be extreme, just consistent.", "Unknown", "consistency"),
    ("Discipline is choosing between what you want now and what you want most.", "Abraham Lincoln", "discipline"),
    ("The body achieves what the mind believes.", "Unknown", "mindset"),
    ("A one-hour workout is 4% of your day. No excuses.", "Unknown", "motivation"),
]


async def seed_defaults(storage: Storage) -> dict[str, int]:
    """Insert whatever defaults are missing. Safe to run repeatedly."""
    created = {"categories": 0, "muscle_groups": 0, "exercises": 0, "quotes": 0}

    existing = {c.name for c in await storage.list_categories()}
    for row in DEFAULT_CATEGORIES:
        if row["name"] not in existing:
            await storage.create_category(row)
            created["categories"] += 1

    existing = {m.name for m in await storage.list_muscle_groups()}
    for name, description in DEFAULT_MUSCLE_GROUPS:
        if name not in existing:
            await storage.create_muscle_group({"name": name, "description": description, "is_default": True})
            created["muscle_groups"] += 1

    # Starter library only for an empty library; user edits are left alone.
    if not await storage.list_exercises():
        for name, category, muscle_group, instructions, equipment in DEFAULT_EXERCISES:
            await storage.create_exercise(
                {
                    "name": name,
                    "category": category,
                    "muscle_group": muscle_group,
                    "instructions": instructions,
                    "equipment": equipment,
                }
            )
            created["exercises"] += 1

    if not await storage.list_quotes():
        for text, author, category in DEFAULT_QUOTES:
            await storage.create_quote({"text": text, "author": author, "category": category, "is_active": True})
            created["quotes"] += 1

    if any(created.values()):
        logger.info("Seeded defaults: %s", created)
    return created
