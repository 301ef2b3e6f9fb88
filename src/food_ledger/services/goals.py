"""Goal creation and progress tracking."""

import math
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from food_ledger.domain.errors import PersistenceError, ValidationError
from food_ledger.domain.goals import GoalDraft, UserGoal
from food_ledger.services.profiles import ProfileService


class GoalRepository(Protocol):
    """Persistence interface for user goals."""

    def create_goal(  # noqa: PLR0913
        self,
        user_id: UUID,
        draft: GoalDraft,
        start_date: date,
        progress_percentage: float,
    ) -> UserGoal:
        """Insert an active goal and return it."""

    def list_active_goals(self, user_id: UUID) -> list[UserGoal]:
        """Return active goals, newest first."""


def progress(goal: UserGoal) -> float:
    """Return progress toward a goal as a percentage in [0, 100]."""
    return progress_percentage(goal.current_value, goal.target_value)


def progress_percentage(current_value: float, target_value: float) -> float:
    """Return clamp(100 * current / target, 0, 100).

    A zero or non-finite target, or a NaN current value, yields 0.
    """
    if target_value == 0 or not math.isfinite(target_value):
        return 0.0
    if math.isnan(current_value):
        return 0.0
    return max(0.0, min(100.0, 100.0 * current_value / target_value))


@dataclass
class GoalTracker:
    """Creates goals and reports progress for active ones."""

    repository: GoalRepository
    profile_service: ProfileService | None = None

    def create_goal(
        self, user_id: UUID, draft: GoalDraft, today: date | None = None
    ) -> UserGoal:
        """Validate and store a new active goal.

        The start date defaults to today in the user's timezone.
        """
        if not math.isfinite(draft.target_value) or draft.target_value <= 0:
            raise ValidationError("Goal target value must be greater than zero")
        if not math.isfinite(draft.current_value):
            raise ValidationError("Goal current value must be a number")
        if draft.target_date is None:
            raise ValidationError("Goal target date is required")
        if not draft.unit.strip():
            raise ValidationError("Goal unit is required")
        start_date = today or self._local_today(user_id)
        try:
            return self.repository.create_goal(
                user_id=user_id,
                draft=draft,
                start_date=start_date,
                progress_percentage=progress_percentage(
                    draft.current_value, draft.target_value
                ),
            )
        except Exception as exc:
            raise PersistenceError("Failed to create goal") from exc

    def active_goals(self, user_id: UUID) -> list[UserGoal]:
        """Return active goals with progress derived from current values."""
        return [
            replace(goal, progress_percentage=progress(goal))
            for goal in self.repository.list_active_goals(user_id)
            if goal.is_active
        ]

    def _local_today(self, user_id: UUID) -> date:
        if self.profile_service is None:
            return datetime.now(tz=UTC).date()
        tz = ZoneInfo(self.profile_service.timezone(user_id))
        return datetime.now(tz=tz).date()
