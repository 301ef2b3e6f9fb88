"""Domain models for nutrition summaries."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID, uuid5

_SUMMARY_NAMESPACE = UUID("6f1c8d2e-3b0a-4c5e-9a7d-2e4b6c8f0a13")


def summary_id(user_id: UUID, day: date) -> UUID:
    """Return the stable summary id for a user and date."""
    return uuid5(_SUMMARY_NAMESPACE, f"{user_id}:{day.isoformat()}")


@dataclass(frozen=True)
class DailySummary:
    """Per-user, per-date rollup of entry nutrition."""

    id: UUID
    user_id: UUID
    date: date
    total_calories: float
    total_protein_g: float
    total_carbs_g: float
    total_fat_g: float
    total_fiber_g: float
    total_sugar_g: float
    total_sodium_mg: float
    meals_logged: int
    goal_calories_met: bool
    goal_protein_met: bool
    goal_carbs_met: bool
    goal_fat_met: bool


@dataclass(frozen=True)
class PeriodSummary:
    """Daily summaries and averages for a period."""

    start: date
    daily: list[DailySummary]
    avg_calories: float
    avg_protein_g: float
    avg_carbs_g: float
    avg_fat_g: float
