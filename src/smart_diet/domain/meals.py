"""Domain models for meal logging."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class MealRecord:
    """A logged meal, optionally carrying its analysis results."""

    description: str
    timestamp: int
    id: int | None = None
    image_path: str | None = None
    calories: int | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    raw_analysis: str | None = None


@dataclass(frozen=True)
class DailySummary:
    """Calories eaten today against the profile target."""

    day: date
    calories: int
    calorie_target: int
    meals: list[MealRecord]

    @property
    def remaining(self) -> int:
        """Calories left in today's budget (negative when over)."""
        return self.calorie_target - self.calories
