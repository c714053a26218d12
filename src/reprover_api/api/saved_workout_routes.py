"""Saved workout CRUD. Every operation is scoped to the authenticated user."""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from reprover_api.auth import get_current_user
from reprover_api.models import SavedWorkout, SaveWorkoutRequest, UpdateSavedWorkoutRequest
from reprover_api.services.workout_store import StoreError, WorkoutStore, get_workout_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/saved-workouts")


def _to_saved_workout(document: dict) -> SavedWorkout:
    return SavedWorkout(
        id=document["id"],
        name=document["name"],
        workout=document["workout"],
        createdAt=document["createdAt"],
        updatedAt=document["updatedAt"],
    )


@router.get("", response_model=List[SavedWorkout])
async def list_saved_workouts(
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> List[SavedWorkout]:
    try:
        documents = await asyncio.to_thread(store.list_saved_workouts, user_id)
    except StoreError as e:
        logger.error(f"Failed to list saved workouts for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process request")
    return [_to_saved_workout(doc) for doc in documents]


@router.get("/{workout_id}", response_model=SavedWorkout)
async def get_saved_workout(
    workout_id: str,
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> SavedWorkout:
    try:
        document = await asyncio.to_thread(store.get_saved_workout, user_id, workout_id)
    except StoreError as e:
        logger.error(f"Failed to read saved workout {workout_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process request")

    if document is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    return _to_saved_workout(document)


@router.post("")
async def save_workout(
    request: SaveWorkoutRequest,
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> dict:
    """Save a named plan; returns the new id."""
    try:
        document = await asyncio.to_thread(
            store.add_saved_workout,
            user_id,
            request.name.strip(),
            request.workout.model_dump(mode="json"),
        )
    except StoreError as e:
        logger.error(f"Failed to save workout for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process request")

    logger.info(f"Saved workout {document['id']} for {user_id}")
    return {"id": document["id"], "message": "Workout saved successfully"}


@router.put("/{workout_id}", response_model=SavedWorkout)
async def update_saved_workout(
    workout_id: str,
    request: UpdateSavedWorkoutRequest,
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> SavedWorkout:
    """Rename a saved workout and/or replace its plan."""
    if request.name is None and request.workout is None:
        raise HTTPException(status_code=400, detail="Nothing to update")

    workout = request.workout.model_dump(mode="json") if request.workout is not None else None
    name = request.name.strip() if request.name is not None else None
    try:
        document = await asyncio.to_thread(store.update_saved_workout, user_id, workout_id, name, workout)
    except StoreError as e:
        logger.error(f"Failed to update saved workout {workout_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process request")

    if document is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    return _to_saved_workout(document)


async def _delete(workout_id: str, user_id: str, store: WorkoutStore) -> dict:
    try:
        deleted = await asyncio.to_thread(store.delete_saved_workout, user_id, workout_id)
    except StoreError as e:
        logger.error(f"Failed to delete saved workout {workout_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to process request")

    if not deleted:
        raise HTTPException(status_code=404, detail="Workout not found")
    return {"message": "Workout deleted successfully"}


@router.delete("")
async def delete_saved_workout_by_query(
    id: Optional[str] = Query(default=None),
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> dict:
    """DELETE /api/saved-workouts?id=... (the shape existing clients call)."""
    if not id:
        raise HTTPException(status_code=400, detail="Workout ID is required")
    return await _delete(id, user_id, store)


@router.delete("/{workout_id}")
async def delete_saved_workout(
    workout_id: str,
    user_id: str = Depends(get_current_user),
    store: WorkoutStore = Depends(get_workout_store),
) -> dict:
    return await _delete(workout_id, user_id, store)
