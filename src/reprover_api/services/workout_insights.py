"""LLM-written coaching content: workout analysis and exercise descriptions."""
import json
import logging
from typing import Optional

from pydantic import ValidationError

from reprover_api.models import ExerciseDescription, ExerciseInfo, WorkoutInfo, WorkoutPlan
from reprover_api.services.json_extractor import OBJECT_ONLY, JSONExtractionError, extract_json
from reprover_api.services.llm_service import LLMService


logger = logging.getLogger(__name__)

INSIGHT_TEMPERATURE = 0.7
EXERCISE_INFO_MAX_CHARS = 300
EXERCISE_INFO_MAX_TOKENS = 150

WORKOUT_INFO_SYSTEM_PROMPT = "You are an experienced strength and conditioning coach."

WORKOUT_INFO_PROMPT = """Analyze this workout and provide helpful information:
{workout}

Please provide:
1. Workout Type: (e.g., HIIT, Strength, Cardio, Mixed)
2. Primary Muscle Groups: List the main muscles worked
3. Estimated Calories: Rough estimate for a 150lb person
4. Difficulty Level: Beginner/Intermediate/Advanced
5. Tips: 2-3 tips for performing this workout effectively
6. Modifications: Suggest easier and harder variations
7. Recovery: Recommended rest between sessions

Format as JSON with these keys: workoutType, muscleGroups[], estimatedCalories, difficulty, tips[], modifications{{easier[], harder[]}}, recoveryTime"""

EXERCISE_DESCRIPTION_SYSTEM_PROMPT = (
    "You are a professional fitness instructor providing clear, concise exercise guidance."
)

EXERCISE_DESCRIPTION_PROMPT = """Provide a brief, instructional description for the exercise "{name}".
Include:
1. Proper form and technique (2-3 key points)
2. Common mistakes to avoid (1-2 points)
3. Which muscles it targets
4. A good YouTube search query to find a tutorial video for this exercise (be specific, like "Jeff Nippard {name} form" or "Athlean-X {name} tutorial")

Keep the descriptions concise - max 3-4 sentences total. Be direct and actionable.

Format the response as JSON with keys: form, mistakes, muscles, youtubeQuery"""

EXERCISE_INFO_SYSTEM_PROMPT = "You are a knowledgeable personal trainer."

EXERCISE_INFO_PROMPT = """Provide a brief, informative description of the exercise "{name}" in 2-3 sentences.
Include the primary muscles worked and basic form tips. Keep it under 300 characters."""


class InsightParseError(RuntimeError):
    """Raised when a workout analysis reply cannot be decoded."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


def fallback_exercise_description(name: str) -> ExerciseDescription:
    """Generic guidance used when the model reply is unusable."""
    return ExerciseDescription(
        form="Focus on controlled movement and proper breathing throughout the exercise.",
        mistakes="Avoid rushing through the movement.",
        muscles="Various muscle groups",
        youtubeQuery=f"{name} exercise tutorial form",
    )


class WorkoutInsightsService:
    """Coaching content generated per request; nothing is cached."""

    @staticmethod
    def analyze_workout(plan: WorkoutPlan, user_id: Optional[str] = None) -> WorkoutInfo:
        """
        Ask the model for a workout type, muscle groups, calories and tips.

        Raises:
            InsightParseError: If the reply has no usable JSON object
        """
        prompt = WORKOUT_INFO_PROMPT.format(
            workout=json.dumps(plan.model_dump(mode="json"), indent=2)
        )
        raw_text = LLMService.complete(
            WORKOUT_INFO_SYSTEM_PROMPT,
            prompt,
            temperature=INSIGHT_TEMPERATURE,
            user_id=user_id,
            feature_name="workout_info",
        )

        try:
            data = extract_json(raw_text, OBJECT_ONLY)
            return WorkoutInfo.model_validate(data)
        except (JSONExtractionError, ValidationError) as e:
            logger.warning(f"Failed to parse workout info: {e}")
            raise InsightParseError("Failed to parse workout analysis", raw_text) from e

    @staticmethod
    def describe_exercise(name: str, user_id: Optional[str] = None) -> ExerciseDescription:
        """Form cues, common mistakes, target muscles and a tutorial search query."""
        raw_text = LLMService.complete(
            EXERCISE_DESCRIPTION_SYSTEM_PROMPT,
            EXERCISE_DESCRIPTION_PROMPT.format(name=name),
            temperature=INSIGHT_TEMPERATURE,
            user_id=user_id,
            feature_name="exercise_description",
        )

        try:
            return ExerciseDescription.model_validate(extract_json(raw_text, OBJECT_ONLY))
        except (JSONExtractionError, ValidationError) as e:
            logger.warning(f"Unusable exercise description for {name!r}, using fallback: {e}")
            return fallback_exercise_description(name)

    @staticmethod
    def exercise_info(name: str, user_id: Optional[str] = None) -> ExerciseInfo:
        """Two or three sentences about an exercise, capped at 300 characters."""
        raw_text = LLMService.complete(
            EXERCISE_INFO_SYSTEM_PROMPT,
            EXERCISE_INFO_PROMPT.format(name=name),
            temperature=INSIGHT_TEMPERATURE,
            max_tokens=EXERCISE_INFO_MAX_TOKENS,
            user_id=user_id,
            feature_name="exercise_info",
        )
        # TODO: look up a tutorial video once a video search provider is configured
        return ExerciseInfo(
            description=raw_text.strip()[:EXERCISE_INFO_MAX_CHARS],
            videoUrl=None,
        )
