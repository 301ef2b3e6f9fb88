"""Domain models for food entries."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class MealType(StrEnum):
    """Meal tag attached to an entry."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    OTHER = "other"

    @classmethod
    def parse(cls, value: object) -> "MealType":
        """Return the matching meal type, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.OTHER
        return cls.OTHER


@dataclass(frozen=True)
class FoodEntry:
    """A logged food occurrence."""

    id: UUID
    user_id: UUID
    food_name: str
    calories: float
    created_at: datetime
    meal_type: MealType = MealType.OTHER
    image_url: str | None = None
    description: str | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None
    sodium_mg: float | None = None
    serving_size: str | None = None
    confidence_score: float | None = None


@dataclass(frozen=True)
class NewFoodEntry:
    """Entry fields prior to insertion."""

    user_id: UUID
    food_name: str
    calories: float
    created_at: datetime
    meal_type: MealType
    image_url: str | None
    description: str | None
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    sugar_g: float
    sodium_mg: float
    serving_size: str | None
    confidence_score: float | None


@dataclass(frozen=True)
class EntryStats:
    """Totals over a filtered set of entries."""

    entries: int
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
