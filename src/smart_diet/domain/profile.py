"""Domain models for the user profile and body metrics."""

from dataclasses import dataclass, field
from enum import StrEnum


class Gender(StrEnum):
    """Biological sex used by the Mifflin-St Jeor equation."""

    MALE = "Male"
    FEMALE = "Female"


ACTIVITY_FACTORS: tuple[float, ...] = (1.2, 1.375, 1.55, 1.725)


@dataclass(frozen=True)
class BodyMetrics:
    """Derived energy metrics for a set of body measurements."""

    bmi: float
    bmr: float
    tdee: float
    calorie_target: int


@dataclass(frozen=True)
class UserProfile:
    """The single stored user profile."""

    nickname: str
    weight_kg: float
    height_cm: float
    age: int
    gender: Gender
    activity_factor: float
    bmi: float
    calorie_target: int
    health_conditions: frozenset[str] = field(default_factory=frozenset)
