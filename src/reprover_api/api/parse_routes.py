"""
Parse endpoint for free-text workouts.

POST /api/parse-workout sends the trainer's message to the LLM once and
returns the validated WorkoutPlan (a JSON array of rounds).
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from reprover_api.ai import LLMConfigurationError
from reprover_api.auth import get_optional_user
from reprover_api.models import ParseWorkoutRequest
from reprover_api.services.llm_service import LLMServiceError
from reprover_api.services.workout_parser import ParseError, parse_workout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/parse-workout")
async def parse_workout_text(
    request: ParseWorkoutRequest,
    user_id: Optional[str] = Depends(get_optional_user),
) -> JSONResponse:
    """
    Parse workout text into a WorkoutPlan.

    ## Request Body
    - **text**: e.g. "3 rounds: 10 push-ups, 15 squats at 135lbs"

    ## Response
    A JSON array of `{rounds, exercises[]}`. When the model reply cannot be
    turned into a plan the 500 body carries the raw reply under `raw`.
    """
    text = request.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Text is required")

    try:
        plan = await asyncio.to_thread(parse_workout, text, user_id)
    except ParseError as e:
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to parse workout",
                "details": e.errors or str(e),
                "raw": e.raw_text,
            },
        )
    except (LLMConfigurationError, LLMServiceError) as e:
        logger.error(f"Workout parsing unavailable: {e}")
        raise HTTPException(status_code=500, detail="Workout parser is unavailable")

    return JSONResponse(plan.model_dump(mode="json"))
