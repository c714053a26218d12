"""Coaching content endpoints backed by the LLM."""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from reprover_api.ai import LLMConfigurationError
from reprover_api.auth import get_optional_user
from reprover_api.models import (
    ExerciseDescriptionRequest,
    ExerciseInfo,
    WorkoutInfoRequest,
)
from reprover_api.services.llm_service import LLMServiceError
from reprover_api.services.workout_insights import InsightParseError, WorkoutInsightsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/workout-info")
async def workout_info(
    request: WorkoutInfoRequest,
    user_id: Optional[str] = Depends(get_optional_user),
) -> JSONResponse:
    """Workout type, muscle groups, calorie estimate, tips and modifications."""
    try:
        info = await asyncio.to_thread(WorkoutInsightsService.analyze_workout, request.workout, user_id)
    except InsightParseError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to parse workout analysis", "raw": e.raw_text},
        )
    except (LLMConfigurationError, LLMServiceError) as e:
        logger.error(f"Workout analysis failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to analyze workout")

    return JSONResponse(info.model_dump())


@router.get("/exercise-info", response_model=ExerciseInfo)
async def exercise_info(
    name: Optional[str] = Query(default=None, max_length=200),
    user_id: Optional[str] = Depends(get_optional_user),
) -> ExerciseInfo:
    """Short description of an exercise (at most 300 characters)."""
    if not name or not name.strip():
        raise HTTPException(status_code=400, detail="Exercise name is required")

    try:
        return await asyncio.to_thread(WorkoutInsightsService.exercise_info, name.strip(), user_id)
    except (LLMConfigurationError, LLMServiceError) as e:
        logger.error(f"Exercise info failed for {name!r}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get exercise information")


@router.post("/exercise-description")
async def exercise_description(
    request: ExerciseDescriptionRequest,
    user_id: Optional[str] = Depends(get_optional_user),
) -> dict:
    """Form cues, mistakes, target muscles and a tutorial search query."""
    name = request.exerciseName.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Exercise name is required")

    try:
        description = await asyncio.to_thread(WorkoutInsightsService.describe_exercise, name, user_id)
    except (LLMConfigurationError, LLMServiceError) as e:
        logger.error(f"Exercise description failed for {name!r}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get exercise description")

    return {"description": description.model_dump()}
