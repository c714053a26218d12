"""Data models for workout parsing, logging and saved workouts."""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, RootModel, field_validator


class Exercise(BaseModel):
    """A single prescribed exercise inside a round.

    reps, duration and distance are independently nullable. Which one is the
    primary target is up to the trainer's text, not enforced here.
    """
    name: str = Field(..., strict=True)
    reps: Optional[int] = Field(default=None, strict=True)
    weight: Optional[float] = Field(default=None, strict=True)
    weight_range: Optional[str] = Field(default=None, strict=True)  # e.g. "24-32kg", lower bound goes in weight
    weight_unit: Optional[str] = Field(default=None, strict=True)
    duration: Optional[str] = Field(default=None, strict=True)  # free text, e.g. "30 seconds"
    distance: Optional[float] = Field(default=None, strict=True)
    distance_unit: Optional[str] = Field(default=None, strict=True)
    note: Optional[str] = Field(default=None, strict=True)  # modifiers like "each side"

    class Config:
        extra = "ignore"  # Ignore client-only fields like 'description'


class WorkoutRound(BaseModel):
    """A group of exercises repeated `rounds` times."""
    rounds: int = Field(..., ge=1, strict=True)
    exercises: List[Exercise]

    class Config:
        extra = "ignore"


class WorkoutPlan(RootModel[List[WorkoutRound]]):
    """Ordered rounds; list order is execution order."""

    def __iter__(self):
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> WorkoutRound:
        return self.root[index]

    def exercise_names(self) -> List[str]:
        """Unique exercise names in first-seen order."""
        names: List[str] = []
        for workout_round in self.root:
            for exercise in workout_round.exercises:
                if exercise.name not in names:
                    names.append(exercise.name)
        return names


class ExerciseActual(BaseModel):
    """What was actually performed for one exercise in one round."""
    name: str = Field(..., strict=True)
    round: int = Field(..., ge=1, strict=True)
    reps: Optional[int] = Field(default=None, strict=True)
    weight: Optional[float] = Field(default=None, strict=True)

    class Config:
        extra = "ignore"


class WorkoutLog(BaseModel):
    """A completed session. Never modified once stored."""
    timestamp: str
    plan: WorkoutPlan
    actuals: List[ExerciseActual]
    duration: Optional[int] = Field(default=None, ge=0, strict=True)  # milliseconds
    workoutName: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("timestamp")
    @classmethod
    def _check_iso_timestamp(cls, value: str) -> str:
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError("timestamp must be an ISO-8601 string") from e
        return value


class StoredWorkoutLog(WorkoutLog):
    """A workout log as read back from the store, with summary fields."""
    id: str
    createdAt: Optional[str] = None
    totalExercises: int = 0
    exerciseNames: List[str] = Field(default_factory=list)


class ExerciseHistoryEntry(BaseModel):
    """One logged observation of an exercise, for charting."""
    date: str
    reps: Optional[int] = Field(default=None, strict=True)
    weight: Optional[float] = Field(default=None, strict=True)
    round: int = Field(..., strict=True)


class WorkoutLogPage(BaseModel):
    logs: List[StoredWorkoutLog]
    hasMore: bool


class SavedWorkout(BaseModel):
    """A named workout plan owned by a user."""
    id: str
    name: str
    workout: WorkoutPlan
    createdAt: str
    updatedAt: str


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class ParseWorkoutRequest(BaseModel):
    text: str = Field(..., max_length=20000)


class LogWorkoutResponse(BaseModel):
    status: str = "ok"
    id: str


class SaveWorkoutRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    workout: WorkoutPlan


class UpdateSavedWorkoutRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    workout: Optional[WorkoutPlan] = None


class WorkoutInfoRequest(BaseModel):
    workout: WorkoutPlan


class ExerciseDescriptionRequest(BaseModel):
    exerciseName: str = Field(..., min_length=1, max_length=200)


# ---------------------------------------------------------------------------
# LLM-generated insight payloads
# ---------------------------------------------------------------------------


class WorkoutModifications(BaseModel):
    easier: List[str] = Field(default_factory=list)
    harder: List[str] = Field(default_factory=list)


class WorkoutInfo(BaseModel):
    """LLM analysis of a workout plan."""
    workoutType: str
    muscleGroups: List[str] = Field(default_factory=list)
    estimatedCalories: Optional[Union[float, str]] = None  # models sometimes answer "300-400"
    difficulty: Optional[str] = None
    tips: List[str] = Field(default_factory=list)
    modifications: WorkoutModifications = Field(default_factory=WorkoutModifications)
    recoveryTime: Optional[str] = None

    class Config:
        extra = "ignore"


class ExerciseDescription(BaseModel):
    """Short coaching notes for one exercise."""
    form: str
    mistakes: str
    muscles: str
    youtubeQuery: str

    class Config:
        extra = "ignore"

    @field_validator("form", "mistakes", "muscles", mode="before")
    @classmethod
    def _join_lists(cls, value):
        # Models often answer with bullet lists instead of prose
        if isinstance(value, list):
            return " ".join(str(item).strip() for item in value if str(item).strip())
        return value


class ExerciseInfo(BaseModel):
    description: str
    videoUrl: Optional[str] = None

