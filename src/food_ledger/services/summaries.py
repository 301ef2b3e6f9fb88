"""Daily and period nutrition summaries derived from food entries."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from food_ledger.domain.entries import FoodEntry
from food_ledger.domain.profiles import DailyTargets
from food_ledger.domain.summaries import DailySummary, PeriodSummary, summary_id
from food_ledger.services.profiles import ProfileService

logger = logging.getLogger(__name__)

DECEMBER = 12


class EntryReader(Protocol):
    """Read access to food entries by time range."""

    def list_entries(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodEntry]:
        """Return entries created in [start, end)."""


class SummaryRepository(Protocol):
    """Persistence interface for stored daily summaries."""

    def get_summary(self, user_id: UUID, day: date) -> DailySummary | None:
        """Return the stored summary for a user and date, if present."""

    def upsert_summary(self, summary: DailySummary) -> None:
        """Create or replace the stored summary for its user and date."""


@dataclass
class DailyAggregator:
    """Recomputes summaries from the full entry set, never incrementally."""

    entry_reader: EntryReader
    summary_repository: SummaryRepository
    profile_service: ProfileService

    def summarize(self, user_id: UUID, day: date) -> DailySummary:
        """Return the summary for a day without storing it."""
        tz = ZoneInfo(self.profile_service.timezone(user_id))
        start, end = day_bounds(day, tz)
        entries = self.entry_reader.list_entries(user_id, start, end)
        targets = self.profile_service.targets(user_id)
        return build_daily_summary(user_id, day, entries, targets)

    def refresh(self, user_id: UUID, day: date) -> DailySummary:
        """Recompute the summary for a day and replace the stored copy."""
        summary = self.summarize(user_id, day)
        stored = self.summary_repository.get_summary(user_id, day)
        if stored != summary:
            self.summary_repository.upsert_summary(summary)
            logger.info(
                "Stored daily summary for %s on %s (%d meals)",
                user_id,
                day.isoformat(),
                summary.meals_logged,
            )
        return summary

    def today(self, user_id: UUID) -> DailySummary:
        """Return today's summary in the user's timezone."""
        return self.refresh(user_id, self.local_today(user_id))

    def local_today(self, user_id: UUID) -> date:
        """Return the current date in the user's timezone."""
        tz = ZoneInfo(self.profile_service.timezone(user_id))
        return datetime.now(tz=tz).date()

    def local_date(self, user_id: UUID, moment: datetime) -> date:
        """Return the calendar date of a moment in the user's timezone."""
        tz = ZoneInfo(self.profile_service.timezone(user_id))
        return moment.astimezone(tz).date()

    def summarize_week(self, user_id: UUID) -> PeriodSummary:
        """Return week-to-date summaries and averages."""
        today = self.local_today(user_id)
        start = today - timedelta(days=today.weekday())
        return self._summarize_period(user_id, start, 7)

    def summarize_month(self, user_id: UUID) -> PeriodSummary:
        """Return month-to-date summaries and averages."""
        start = self.local_today(user_id).replace(day=1)
        if start.month == DECEMBER:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return self._summarize_period(user_id, start, (end - start).days)

    def _summarize_period(self, user_id: UUID, start: date, days: int) -> PeriodSummary:
        tz = ZoneInfo(self.profile_service.timezone(user_id))
        range_start, _ = day_bounds(start, tz)
        _, range_end = day_bounds(start + timedelta(days=days - 1), tz)
        entries = self.entry_reader.list_entries(user_id, range_start, range_end)
        targets = self.profile_service.targets(user_id)

        by_day: dict[date, list[FoodEntry]] = {}
        for entry in entries:
            by_day.setdefault(entry.created_at.astimezone(tz).date(), []).append(entry)

        daily = []
        for offset in range(days):
            day = start + timedelta(days=offset)
            daily.append(
                build_daily_summary(user_id, day, by_day.get(day, []), targets)
            )
        return _period_from_daily(start, daily)


def build_daily_summary(
    user_id: UUID, day: date, entries: list[FoodEntry], targets: DailyTargets
) -> DailySummary:
    """Fold entries into a summary; the output depends only on the inputs."""
    calories = math.fsum(entry.calories for entry in entries)
    protein = math.fsum(entry.protein_g or 0.0 for entry in entries)
    carbs = math.fsum(entry.carbs_g or 0.0 for entry in entries)
    fat = math.fsum(entry.fat_g or 0.0 for entry in entries)
    return DailySummary(
        id=summary_id(user_id, day),
        user_id=user_id,
        date=day,
        total_calories=calories,
        total_protein_g=protein,
        total_carbs_g=carbs,
        total_fat_g=fat,
        total_fiber_g=math.fsum(entry.fiber_g or 0.0 for entry in entries),
        total_sugar_g=math.fsum(entry.sugar_g or 0.0 for entry in entries),
        total_sodium_mg=math.fsum(entry.sodium_mg or 0.0 for entry in entries),
        meals_logged=len(entries),
        goal_calories_met=calories >= targets.calories,
        goal_protein_met=protein >= targets.protein_g,
        goal_carbs_met=carbs >= targets.carbs_g,
        goal_fat_met=fat >= targets.fat_g,
    )


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the UTC range covering a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def _period_from_daily(start: date, daily: list[DailySummary]) -> PeriodSummary:
    total_days = max(len(daily), 1)
    return PeriodSummary(
        start=start,
        daily=daily,
        avg_calories=math.fsum(d.total_calories for d in daily) / total_days,
        avg_protein_g=math.fsum(d.total_protein_g for d in daily) / total_days,
        avg_carbs_g=math.fsum(d.total_carbs_g for d in daily) / total_days,
        avg_fat_g=math.fsum(d.total_fat_g for d in daily) / total_days,
    )
