"""Workout log endpoints: record a session, page through logs, per-exercise history."""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from reprover_api.auth import get_current_user
from reprover_api.models import (
    ExerciseHistoryEntry,
    LogWorkoutResponse,
    WorkoutLog,
    WorkoutLogPage,
)
from reprover_api.services.exercise_history import build_exercise_history, summarize_log
from reprover_api.services.workout_store import StoreError, WorkoutStore, get_workout_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


@router.post("/log-workout", response_model=LogWorkoutResponse)
async def log_workout(
    log: WorkoutLog,
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> LogWorkoutResponse:
    """Persist a completed session. Logs are immutable once written."""
    try:
        log_id = await asyncio.to_thread(store.add_log, user_id, log.model_dump(mode="json"))
    except StoreError as e:
        logger.error(f"Failed to log workout for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to log workout")

    return LogWorkoutResponse(status="ok", id=log_id)


@router.get("/history", response_model=List[ExerciseHistoryEntry])
async def exercise_history(
    exercise: Optional[str] = Query(default=None, max_length=200),
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> List[ExerciseHistoryEntry]:
    """Every logged set of one exercise, oldest first."""
    if not exercise or not exercise.strip():
        raise HTTPException(status_code=400, detail="Exercise name is required")

    try:
        logs = await asyncio.to_thread(store.iter_logs, user_id)
    except StoreError as e:
        logger.error(f"Failed to read history for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get exercise history")

    return build_exercise_history(logs, exercise)


@router.get("/workout-logs", response_model=WorkoutLogPage)
async def workout_logs(
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> WorkoutLogPage:
    """One page of logs, newest first. hasMore is true when the page is full."""
    try:
        documents = await asyncio.to_thread(store.list_logs, user_id, limit, offset)
    except StoreError as e:
        logger.error(f"Failed to list workout logs for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get workout logs")

    logs = [summarize_log(doc) for doc in documents]
    return WorkoutLogPage(logs=logs, hasMore=len(logs) == limit)
