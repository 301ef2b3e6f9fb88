"""Supabase repository for food entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from food_ledger.domain.entries import FoodEntry, MealType, NewFoodEntry
from food_ledger.services.entries import FoodEntryRepository

_COLUMNS = (
    "id, user_id, image_url, food_name, description, calories, protein_g, "
    "carbs_g, fat_g, fiber_g, sugar_g, sodium_mg, serving_size, meal_type, "
    "confidence_score, created_at"
)


@dataclass
class SupabaseFoodEntryRepository(FoodEntryRepository):
    """Supabase implementation for food entries."""

    client: Client

    def create_entry(self, entry: NewFoodEntry) -> FoodEntry:
        """Insert an entry row and return it."""
        response = (
            self.client.table("food_entries")
            .insert(
                {
                    "user_id": str(entry.user_id),
                    "image_url": entry.image_url,
                    "food_name": entry.food_name,
                    "description": entry.description,
                    "calories": entry.calories,
                    "protein_g": entry.protein_g,
                    "carbs_g": entry.carbs_g,
                    "fat_g": entry.fat_g,
                    "fiber_g": entry.fiber_g,
                    "sugar_g": entry.sugar_g,
                    "sodium_mg": entry.sodium_mg,
                    "serving_size": entry.serving_size,
                    "meal_type": entry.meal_type.value,
                    "confidence_score": entry.confidence_score,
                    "analyzed_at": entry.created_at.isoformat(),
                    "created_at": entry.created_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food entry")
        return _parse_entry(response.data[0])

    def list_entries(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodEntry]:
        """Return entries created in the time range."""
        response = (
            self.client.table("food_entries")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("created_at", start.isoformat())
            .lt("created_at", end.isoformat())
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def list_recent_entries(self, user_id: UUID, limit: int) -> list[FoodEntry]:
        """Return the most recent entries for a user."""
        response = (
            self.client.table("food_entries")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]


def _parse_entry(row: dict[str, object]) -> FoodEntry:
    return FoodEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        food_name=str(row.get("food_name") or ""),
        calories=float(row.get("calories") or 0.0),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        meal_type=MealType.parse(row.get("meal_type")),
        image_url=row.get("image_url"),
        description=row.get("description"),
        protein_g=_optional_float(row.get("protein_g")),
        carbs_g=_optional_float(row.get("carbs_g")),
        fat_g=_optional_float(row.get("fat_g")),
        fiber_g=_optional_float(row.get("fiber_g")),
        sugar_g=_optional_float(row.get("sugar_g")),
        sodium_mg=_optional_float(row.get("sodium_mg")),
        serving_size=row.get("serving_size"),
        confidence_score=_optional_float(row.get("confidence_score")),
    )


def _optional_float(value: object) -> float | None:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None
