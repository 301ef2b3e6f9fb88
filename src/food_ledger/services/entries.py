"""Food entry persistence: asset upload, entry write, summary refresh."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from food_ledger.domain.analysis import AnalysisResult, FoodItem
from food_ledger.domain.entries import EntryStats, FoodEntry, MealType, NewFoodEntry
from food_ledger.domain.errors import AssetUploadError, PersistenceError
from food_ledger.domain.intake import ImageFile
from food_ledger.services.analysis import normalize_totals
from food_ledger.services.notifications import Notifier
from food_ledger.services.summaries import DailyAggregator, day_bounds

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


class AssetStore(Protocol):
    """Storage for uploaded food images."""

    async def upload(self, user_id: UUID, image: ImageFile) -> str:
        """Store the image and return a stable public URL."""


class FoodEntryRepository(Protocol):
    """Persistence interface for food entries."""

    def create_entry(self, entry: NewFoodEntry) -> FoodEntry:
        """Insert an entry and return the stored row."""

    def list_entries(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodEntry]:
        """Return entries created in [start, end)."""

    def list_recent_entries(self, user_id: UUID, limit: int) -> list[FoodEntry]:
        """Return the newest entries first."""


@dataclass
class EntryService:
    """Commits analysis results as food entries."""

    asset_store: AssetStore
    repository: FoodEntryRepository
    aggregator: DailyAggregator
    notifier: Notifier | None = None

    async def save(
        self,
        user_id: UUID,
        analysis: AnalysisResult,
        image: ImageFile | None = None,
    ) -> FoodEntry:
        """Upload the image (if any), write the entry, then refresh the day.

        No entry is written when the upload fails. A failure after the upload
        can leave an unreferenced asset; asset paths are content-addressed, so
        a retry overwrites the same object.
        """
        image_url = None
        if image is not None:
            try:
                image_url = await self.asset_store.upload(user_id, image)
            except Exception as exc:
                logger.exception("Image upload failed for %s", user_id)
                raise AssetUploadError("Image upload failed") from exc

        new_entry = build_entry(user_id, analysis, image_url, datetime.now(tz=UTC))
        try:
            entry = self.repository.create_entry(new_entry)
        except Exception as exc:
            logger.exception("Food entry write failed for %s", user_id)
            raise PersistenceError("Failed to save food entry") from exc
        logger.info("Saved food entry %s (%.0f kcal)", entry.id, entry.calories)

        day = self.aggregator.local_date(user_id, entry.created_at)
        try:
            self.aggregator.refresh(user_id, day)
        except Exception:
            logger.exception(
                "Daily summary refresh failed for %s on %s", user_id, day.isoformat()
            )
            if self.notifier is not None:
                self.notifier.error(
                    "Entry saved, but the daily summary could not be updated."
                )
        return entry

    def recent_entries(
        self,
        user_id: UUID,
        limit: int = DEFAULT_HISTORY_LIMIT,
        day: date | None = None,
        meal_type: MealType | None = None,
        search: str | None = None,
    ) -> list[FoodEntry]:
        """Return recent entries, newest first, with optional filters."""
        if day is not None:
            tz = ZoneInfo(self.aggregator.profile_service.timezone(user_id))
            start, end = day_bounds(day, tz)
            entries = sorted(
                self.repository.list_entries(user_id, start, end),
                key=lambda entry: entry.created_at,
                reverse=True,
            )
        else:
            entries = self.repository.list_recent_entries(user_id, limit)
        if meal_type is not None:
            entries = [entry for entry in entries if entry.meal_type == meal_type]
        if search:
            needle = search.lower()
            entries = [
                entry
                for entry in entries
                if needle in entry.food_name.lower()
                or needle in (entry.description or "").lower()
            ]
        return entries[:limit]


def build_entry(
    user_id: UUID,
    analysis: AnalysisResult,
    image_url: str | None,
    created_at: datetime,
) -> NewFoodEntry:
    """Map an analysis result onto a new entry."""
    analysis = normalize_totals(analysis)
    totals = analysis.total_nutrition
    name, description, serving_size, confidence = _describe(analysis.foods)
    return NewFoodEntry(
        user_id=user_id,
        food_name=name,
        calories=totals.total_calories,
        created_at=created_at,
        meal_type=analysis.meal_analysis.meal_type,
        image_url=image_url,
        description=description,
        protein_g=totals.total_protein_g,
        carbs_g=totals.total_carbs_g,
        fat_g=totals.total_fat_g,
        fiber_g=totals.total_fiber_g,
        sugar_g=totals.total_sugar_g,
        sodium_mg=totals.total_sodium_mg,
        serving_size=serving_size,
        confidence_score=confidence,
    )


def entry_stats(entries: list[FoodEntry]) -> EntryStats:
    """Return totals over a set of entries."""
    return EntryStats(
        entries=len(entries),
        calories=math.fsum(entry.calories for entry in entries),
        protein_g=math.fsum(entry.protein_g or 0.0 for entry in entries),
        carbs_g=math.fsum(entry.carbs_g or 0.0 for entry in entries),
        fat_g=math.fsum(entry.fat_g or 0.0 for entry in entries),
    )


def _describe(
    foods: list[FoodItem],
) -> tuple[str, str | None, str | None, float | None]:
    if not foods:
        return "Meal", None, None, None
    if len(foods) == 1:
        food = foods[0]
        return food.name, food.description or None, food.serving_size, food.confidence
    name = ", ".join(food.name for food in foods)
    descriptions = [food.description for food in foods if food.description]
    confidence = math.fsum(food.confidence for food in foods) / len(foods)
    return (
        name,
        " ".join(descriptions) or None,
        f"{len(foods)} items",
        confidence,
    )
