"""Domain models for user profiles."""

from dataclasses import dataclass
from uuid import UUID

DEFAULT_CALORIE_GOAL = 2000.0
DEFAULT_PROTEIN_GOAL = 150.0
DEFAULT_CARB_GOAL = 225.0
DEFAULT_FAT_GOAL = 65.0


@dataclass(frozen=True)
class DailyTargets:
    """Daily calorie and macro targets."""

    calories: float = DEFAULT_CALORIE_GOAL
    protein_g: float = DEFAULT_PROTEIN_GOAL
    carbs_g: float = DEFAULT_CARB_GOAL
    fat_g: float = DEFAULT_FAT_GOAL


@dataclass(frozen=True)
class UserProfile:
    """Profile and daily targets for a user."""

    user_id: UUID
    full_name: str | None = None
    email: str | None = None
    timezone: str = "UTC"
    daily_calorie_goal: float = DEFAULT_CALORIE_GOAL
    daily_protein_goal: float = DEFAULT_PROTEIN_GOAL
    daily_carb_goal: float = DEFAULT_CARB_GOAL
    daily_fat_goal: float = DEFAULT_FAT_GOAL
    age: int | None = None
    gender: str | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    activity_level: str | None = None

    @property
    def targets(self) -> DailyTargets:
        """Return the profile's daily targets."""
        return DailyTargets(
            calories=self.daily_calorie_goal,
            protein_g=self.daily_protein_goal,
            carbs_g=self.daily_carb_goal,
            fat_g=self.daily_fat_goal,
        )
