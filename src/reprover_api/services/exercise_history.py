"""Read-side projections over stored workout logs."""
from typing import Any, Dict, Iterable, List

from reprover_api.models import ExerciseHistoryEntry, StoredWorkoutLog, WorkoutPlan
from reprover_api.services.workout_store import timestamp_sort_key


def build_exercise_history(logs: Iterable[Dict[str, Any]], exercise: str) -> List[ExerciseHistoryEntry]:
    """Collect every logged actual for ``exercise`` across ``logs``.

    Names match case-insensitively. Entries come back oldest first, which is
    the order the progress chart plots them in; entries from the same log
    keep their logged order.
    """
    wanted = exercise.strip().lower()
    history: List[ExerciseHistoryEntry] = []

    for log in logs:
        date = log.get("timestamp")
        for actual in log.get("actuals") or []:
            if str(actual.get("name", "")).strip().lower() != wanted:
                continue
            history.append(ExerciseHistoryEntry(
                date=date,
                reps=actual.get("reps"),
                weight=actual.get("weight"),
                round=actual.get("round"),
            ))

    history.sort(key=lambda entry: timestamp_sort_key(entry.date))
    return history


def summarize_log(document: Dict[str, Any]) -> StoredWorkoutLog:
    """Attach list-view summary fields to a stored log document."""
    plan = WorkoutPlan.model_validate(document.get("plan") or [])
    actuals = document.get("actuals") or []
    return StoredWorkoutLog(
        id=document["id"],
        timestamp=document["timestamp"],
        plan=plan,
        actuals=actuals,
        duration=document.get("duration"),
        workoutName=document.get("workoutName"),
        createdAt=document.get("createdAt"),
        totalExercises=len(actuals),
        exerciseNames=plan.exercise_names(),
    )
