"""Supabase repository for stored daily summaries."""

from dataclasses import asdict, dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from food_ledger.domain.summaries import DailySummary
from food_ledger.services.summaries import SummaryRepository


@dataclass
class SupabaseSummaryRepository(SummaryRepository):
    """Supabase implementation for daily summaries."""

    client: Client

    def get_summary(self, user_id: UUID, day: date) -> DailySummary | None:
        """Return the stored summary for a user and date."""
        response = (
            self.client.table("daily_summaries")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_summary(response.data[0])

    def upsert_summary(self, summary: DailySummary) -> None:
        """Replace the stored summary for the summary's user and date."""
        payload = asdict(summary)
        payload["id"] = str(summary.id)
        payload["user_id"] = str(summary.user_id)
        payload["date"] = summary.date.isoformat()
        self.client.table("daily_summaries").upsert(
            payload, on_conflict="user_id,date"
        ).execute()


def _parse_summary(row: dict[str, object]) -> DailySummary:
    return DailySummary(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        date=date.fromisoformat(str(row["date"])),
        total_calories=float(row.get("total_calories") or 0.0),
        total_protein_g=float(row.get("total_protein_g") or 0.0),
        total_carbs_g=float(row.get("total_carbs_g") or 0.0),
        total_fat_g=float(row.get("total_fat_g") or 0.0),
        total_fiber_g=float(row.get("total_fiber_g") or 0.0),
        total_sugar_g=float(row.get("total_sugar_g") or 0.0),
        total_sodium_mg=float(row.get("total_sodium_mg") or 0.0),
        meals_logged=int(row.get("meals_logged") or 0),
        goal_calories_met=bool(row.get("goal_calories_met")),
        goal_protein_met=bool(row.get("goal_protein_met")),
        goal_carbs_met=bool(row.get("goal_carbs_met")),
        goal_fat_met=bool(row.get("goal_fat_met")),
    )
