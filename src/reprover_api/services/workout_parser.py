"""Turn a trainer's free-text message into a validated WorkoutPlan."""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from reprover_api.models import WorkoutPlan
from reprover_api.services.json_extractor import JSONExtractionError, extract_json
from reprover_api.services.llm_service import LLMService


logger = logging.getLogger(__name__)

PARSE_TEMPERATURE = 0


WORKOUT_PARSE_PROMPT = """You are a workout parsing assistant. Extract workout information from text and return it as JSON.

The response MUST be a JSON array (starting with [ and ending with ]).
Each element in the array represents a set of rounds with exercises.

Each array element must have this structure:
{
  "rounds": <number>,
  "exercises": [
    {
      "name": <string>,
      "reps": <number or null>,
      "weight": <number or null>,
      "weight_range": <string or null>,
      "weight_unit": <string or null>,
      "duration": <string or null>,
      "distance": <number or null>,
      "distance_unit": <string or null>,
      "note": <string or null>
    }
  ]
}

Example responses:
- "3 rounds: 10 push-ups, 15 squats at 135lbs":
  [{"rounds": 3, "exercises": [
    {"name": "Push-ups", "reps": 10, "weight": null, "weight_range": null, "weight_unit": null, "duration": null, "distance": null, "distance_unit": null, "note": null},
    {"name": "Squats", "reps": 15, "weight": 135, "weight_range": null, "weight_unit": "lbs", "duration": null, "distance": null, "distance_unit": null, "note": null}
  ]}]

- "Row 1000 meters, then 20 burpees":
  [{"rounds": 1, "exercises": [
    {"name": "Row", "reps": null, "weight": null, "weight_range": null, "weight_unit": null, "duration": null, "distance": 1000, "distance_unit": "meters", "note": null},
    {"name": "Burpees", "reps": 20, "weight": null, "weight_range": null, "weight_unit": null, "duration": null, "distance": null, "distance_unit": null, "note": null}
  ]}]

- "Dumbbell press 24-32kg*12":
  [{"rounds": 1, "exercises": [
    {"name": "Dumbbell Press", "reps": 12, "weight": 24, "weight_range": "24-32kg", "weight_unit": "kg", "duration": null, "distance": null, "distance_unit": null, "note": null}
  ]}]

- "Plank - 30 seconds each side":
  [{"rounds": 1, "exercises": [
    {"name": "Plank", "reps": null, "weight": null, "weight_range": null, "weight_unit": null, "duration": "30 seconds", "distance": null, "distance_unit": null, "note": "each side"}
  ]}]

Important parsing rules:
- Exercise names should be properly capitalized and expanded (e.g., "SL" -> "Single Leg", "RDL" -> "Romanian Deadlift", "DB" -> "Dumbbell", "BB" -> "Barbell")
- Common abbreviations to expand: SL (Single Leg), SA (Single Arm), RDL (Romanian Deadlift), OHP (Overhead Press), HSPU (Handstand Push-up), KB (Kettlebell), DB (Dumbbell), BB (Barbell)
- For weight ranges like "24-32kg", put the lower value (24) in "weight", the full range string in "weight_range", and extract the unit to "weight_unit"
- For time durations (seconds, minutes, hours), put the full time string in "duration" (e.g., "30 seconds", "2 minutes")
- If there's a modifier like "each side" or "each arm", put it in "note"
- If something involves distance (meters, km, miles, yards), put the number in "distance" and unit in "distance_unit"
- Common distance exercises: row, run, bike, swim, ski
- Parse ":30secs" or ":30 secs" as "30 seconds" in duration

Return ONLY the JSON array, no other text."""


class ParseError(RuntimeError):
    """Raised when the model reply cannot be turned into a WorkoutPlan.

    ``raw_text`` is the unmodified model reply; ``errors`` holds pydantic's
    field-level errors when the JSON decoded but did not validate.
    """

    def __init__(self, message: str, raw_text: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.raw_text = raw_text
        self.errors = errors or []


def validate_workout_plan(data: Any, raw_text: str = "") -> WorkoutPlan:
    """Validate decoded JSON against the WorkoutPlan schema.

    Raises:
        ParseError: If the structure does not match
    """
    try:
        return WorkoutPlan.model_validate(data)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        raise ParseError(
            f"Model output failed workout schema validation ({e.error_count()} errors)",
            raw_text,
            errors=errors,
        ) from e


def parse_model_output(raw_text: str) -> WorkoutPlan:
    """Extract and validate a WorkoutPlan from one model reply."""
    try:
        data = extract_json(raw_text)
    except JSONExtractionError as e:
        raise ParseError(str(e), raw_text) from e
    return validate_workout_plan(data, raw_text)


def parse_workout(text: str, user_id: Optional[str] = None) -> WorkoutPlan:
    """
    Parse a trainer's message into a WorkoutPlan with one LLM request.

    Args:
        text: Raw workout text as typed or pasted by the user
        user_id: Optional user ID for request tracking

    Returns:
        Validated WorkoutPlan

    Raises:
        ParseError: If the reply holds no JSON or fails validation
        LLMConfigurationError / LLMServiceError: If the model call fails
    """
    raw_text = LLMService.complete(
        WORKOUT_PARSE_PROMPT,
        text,
        temperature=PARSE_TEMPERATURE,
        user_id=user_id,
        feature_name="parse_workout",
    )

    try:
        plan = parse_model_output(raw_text)
    except ParseError:
        logger.warning("Could not parse workout from model reply: %r", raw_text[:500])
        raise

    logger.info(
        "Parsed workout: %d round groups, %d exercises",
        len(plan),
        sum(len(r.exercises) for r in plan),
    )
    return plan
