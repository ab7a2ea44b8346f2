"""Supabase repository for the user profile."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from smart_diet.domain.profile import Gender, UserProfile
from smart_diet.errors import PersistenceUnavailableError
from smart_diet.services.profile import ProfileRepository

PROFILE_ROW_ID = 1


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for the single-row user profile."""

    client: Client

    def load_profile(self) -> UserProfile | None:
        """Return the stored profile row, if present."""
        response = (
            self.client.table("user_profile")
            .select(
                "nickname, weight, height, age, gender, activity_level, bmi, "
                "calorie_target, health_conditions"
            )
            .eq("id", PROFILE_ROW_ID)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def save_profile(self, profile: UserProfile) -> None:
        """Upsert the profile row."""
        response = (
            self.client.table("user_profile")
            .upsert(
                {
                    "id": PROFILE_ROW_ID,
                    "nickname": profile.nickname,
                    "weight": profile.weight_kg,
                    "height": profile.height_cm,
                    "age": profile.age,
                    "gender": profile.gender.value,
                    "activity_level": profile.activity_factor,
                    "bmi": profile.bmi,
                    "calorie_target": profile.calorie_target,
                    "health_conditions": sorted(profile.health_conditions),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise PersistenceUnavailableError("Failed to save user profile")


def _parse_profile(row: dict[str, object]) -> UserProfile:
    return UserProfile(
        nickname=str(row.get("nickname", "")),
        weight_kg=float(row.get("weight", 0.0)),
        height_cm=float(row.get("height", 0.0)),
        age=int(row.get("age", 0)),
        gender=Gender(row.get("gender") or Gender.MALE.value),
        activity_factor=float(row.get("activity_level", 1.2)),
        bmi=float(row.get("bmi", 0.0)),
        calorie_target=int(row.get("calorie_target", 0)),
        health_conditions=_parse_conditions(row.get("health_conditions")),
    )


def _parse_conditions(value: object) -> frozenset[str]:
    if isinstance(value, list):
        return frozenset(str(item) for item in value if str(item).strip())
    if isinstance(value, str):
        return frozenset(part.strip() for part in value.split(",") if part.strip())
    return frozenset()
