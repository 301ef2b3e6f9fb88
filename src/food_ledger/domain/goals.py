"""Domain models for long-horizon goals."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from uuid import UUID


class GoalType(StrEnum):
    """Supported goal categories."""

    WEIGHT_LOSS = "weight_loss"
    WEIGHT_GAIN = "weight_gain"
    MUSCLE_GAIN = "muscle_gain"
    BODY_FAT_REDUCTION = "body_fat_reduction"
    FITNESS_IMPROVEMENT = "fitness_improvement"
    HABIT_BUILDING = "habit_building"


@dataclass(frozen=True)
class UserGoal:
    """A persisted goal."""

    id: UUID
    user_id: UUID
    goal_type: GoalType
    target_value: float
    current_value: float
    unit: str
    start_date: date
    target_date: date | None
    is_active: bool
    progress_percentage: float


@dataclass(frozen=True)
class GoalDraft:
    """User input for a new goal."""

    goal_type: GoalType
    target_value: float
    unit: str
    target_date: date | None
    current_value: float = 0.0
