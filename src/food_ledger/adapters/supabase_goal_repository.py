"""Supabase repository for user goals."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from food_ledger.domain.goals import GoalDraft, GoalType, UserGoal
from food_ledger.services.goals import GoalRepository


@dataclass
class SupabaseGoalRepository(GoalRepository):
    """Supabase implementation for goals."""

    client: Client

    def create_goal(  # noqa: PLR0913
        self,
        user_id: UUID,
        draft: GoalDraft,
        start_date: date,
        progress_percentage: float,
    ) -> UserGoal:
        """Insert a goal row and return it."""
        response = (
            self.client.table("user_goals")
            .insert(
                {
                    "user_id": str(user_id),
                    "goal_type": draft.goal_type.value,
                    "target_value": draft.target_value,
                    "current_value": draft.current_value,
                    "unit": draft.unit,
                    "start_date": start_date.isoformat(),
                    "target_date": (
                        draft.target_date.isoformat() if draft.target_date else None
                    ),
                    "is_active": True,
                    "progress_percentage": progress_percentage,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create goal")
        return _parse_goal(response.data[0])

    def list_active_goals(self, user_id: UUID) -> list[UserGoal]:
        """Return active goals, newest first."""
        response = (
            self.client.table("user_goals")
            .select(
                "id, user_id, goal_type, target_value, current_value, unit, "
                "start_date, target_date, is_active, progress_percentage"
            )
            .eq("user_id", str(user_id))
            .eq("is_active", True)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_goal(row) for row in response.data or []]


def _parse_goal(row: dict[str, object]) -> UserGoal:
    target_date = row.get("target_date")
    return UserGoal(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        goal_type=GoalType(str(row["goal_type"])),
        target_value=float(row.get("target_value") or 0.0),
        current_value=float(row.get("current_value") or 0.0),
        unit=str(row.get("unit") or ""),
        start_date=date.fromisoformat(str(row["start_date"])),
        target_date=date.fromisoformat(str(target_date)) if target_date else None,
        is_active=bool(row.get("is_active", True)),
        progress_percentage=float(row.get("progress_percentage") or 0.0),
    )
