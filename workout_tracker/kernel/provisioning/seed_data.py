"""Demo records created on a freshly provisioned schema."""

from dataclasses import dataclass
from typing import List, Tuple

from workout_tracker.kernel.models import Exercise, User, Workout, generate_uuid

# (workout name, ((exercise name, sets), ...)), five exercises per workout
DEMO_CATALOG: Tuple[Tuple[str, Tuple[Tuple[str, str], ...]], ...] = (
    ("Push Day", (
        ("Bench Press", "4x8"),
        ("Overhead Press", "3x10"),
        ("Incline Dumbbell Press", "3x10"),
        ("Lateral Raise", "3x15"),
        ("Triceps Pushdown", "3x12"),
    )),
    ("Pull Day", (
        ("Deadlift", "3x5"),
        ("Pull-Up", "4x8"),
        ("Barbell Row", "4x8"),
        ("Face Pull", "3x15"),
        ("Biceps Curl", "3x12"),
    )),
    ("Leg Day", (
        ("Back Squat", "5x5"),
        ("Romanian Deadlift", "3x10"),
        ("Walking Lunge", "3x12"),
        ("Leg Press", "3x12"),
        ("Standing Calf Raise", "4x15"),
    )),
    ("Upper Body", (
        ("Dumbbell Bench Press", "3x10"),
        ("Chin-Up", "3x8"),
        ("Seated Cable Row", "3x12"),
        ("Arnold Press", "3x10"),
        ("Hammer Curl", "3x12"),
    )),
    ("Core & Conditioning", (
        ("Plank", "3x60s"),
        ("Hanging Leg Raise", "3x12"),
        ("Russian Twist", "3x20"),
        ("Kettlebell Swing", "4x15"),
        ("Burpee", "3x10"),
    )),
)


@dataclass
class DemoRecords:
    user: User
    workouts: List[Workout]
    exercises: List[Exercise]


def build_demo_records(email: str, password_hash: str) -> DemoRecords:
    """
    Build the demo user with its workouts and exercises.

    Ids are generated here rather than by the database so every exercise
    can point at its workout before anything is flushed.
    """
    user = User(id=generate_uuid(), email=email, password_hash=password_hash)
    workouts: List[Workout] = []
    exercises: List[Exercise] = []

    for workout_name, entries in DEMO_CATALOG:
        workout = Workout(id=generate_uuid(), user_id=user.id, name=workout_name)
        workouts.append(workout)
        for exercise_name, sets in entries:
            exercises.append(Exercise(
                id=generate_uuid(),
                user_id=user.id,
                workout_id=workout.id,
                name=exercise_name,
                sets=sets,
            ))

    return DemoRecords(user=user, workouts=workouts, exercises=exercises)
