"""Supabase repository for user profiles."""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from food_ledger.domain.profiles import UserProfile
from food_ledger.services.profiles import ProfileRepository

_DEFAULTS = UserProfile(user_id=UUID(int=0))


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""
        response = (
            self.client.table("user_profiles")
            .select("*")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def upsert_profile(self, profile: UserProfile) -> UserProfile:
        """Create or replace the profile row."""
        payload = asdict(profile)
        payload["user_id"] = str(profile.user_id)
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table("user_profiles")
            .upsert(payload, on_conflict="user_id")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save profile")
        return _parse_profile(response.data[0])


def _parse_profile(row: dict[str, object]) -> UserProfile:
    return UserProfile(
        user_id=UUID(str(row["user_id"])),
        full_name=row.get("full_name"),
        email=row.get("email"),
        timezone=str(row.get("timezone") or _DEFAULTS.timezone),
        daily_calorie_goal=_target(row, "daily_calorie_goal"),
        daily_protein_goal=_target(row, "daily_protein_goal"),
        daily_carb_goal=_target(row, "daily_carb_goal"),
        daily_fat_goal=_target(row, "daily_fat_goal"),
        age=row.get("age"),
        gender=row.get("gender"),
        height_cm=row.get("height_cm"),
        weight_kg=row.get("weight_kg"),
        activity_level=row.get("activity_level"),
    )


def _target(row: dict[str, object], name: str) -> float:
    value = row.get(name)
    if isinstance(value, int | float) and value > 0:
        return float(value)
    return float(getattr(_DEFAULTS, name))
