"""User profile and daily target service."""

from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from food_ledger.domain.errors import PersistenceError, ValidationError
from food_ledger.domain.profiles import DailyTargets, UserProfile

_TARGET_FIELDS = (
    "daily_calorie_goal",
    "daily_protein_goal",
    "daily_carb_goal",
    "daily_fat_goal",
)
_UPDATABLE_FIELDS = frozenset(
    {
        *_TARGET_FIELDS,
        "full_name",
        "email",
        "timezone",
        "age",
        "gender",
        "height_cm",
        "weight_kg",
        "activity_level",
    }
)


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""

    def upsert_profile(self, profile: UserProfile) -> UserProfile:
        """Create or replace a profile and return the stored row."""


@dataclass
class ProfileService:
    """Service for profiles and their daily targets."""

    repository: ProfileRepository

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Return the user's profile, creating a default one on first use."""
        existing = self.repository.get_profile(user_id)
        if existing:
            return existing
        return self._store(UserProfile(user_id=user_id))

    def update_profile(self, user_id: UUID, changes: dict[str, object]) -> UserProfile:
        """Apply profile changes after validating them."""
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        for name in _TARGET_FIELDS:
            if name in changes:
                value = changes[name]
                if not isinstance(value, int | float) or value <= 0:
                    raise ValidationError(f"{name} must be a positive number")
        if "timezone" in changes:
            _validate_timezone(changes["timezone"])
        current = self.get_profile(user_id)
        return self._store(replace(current, **changes))

    def targets(self, user_id: UUID) -> DailyTargets:
        """Return daily targets, defaulted when no profile exists."""
        profile = self.repository.get_profile(user_id)
        return profile.targets if profile else DailyTargets()

    def timezone(self, user_id: UUID) -> str:
        """Return the user's timezone or UTC if unset."""
        profile = self.repository.get_profile(user_id)
        return profile.timezone if profile else "UTC"

    def _store(self, profile: UserProfile) -> UserProfile:
        try:
            return self.repository.upsert_profile(profile)
        except Exception as exc:
            raise PersistenceError("Failed to save profile") from exc


def _validate_timezone(value: object) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError("timezone must be an IANA timezone name")
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone: {value}") from exc
