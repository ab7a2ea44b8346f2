"""Meal logging service."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from smart_diet.domain.analysis import MealAnalysisResponse
from smart_diet.domain.meals import DailySummary, MealRecord
from smart_diet.services.clock import now_millis, to_millis
from smart_diet.services.profile import ProfileRepository

DEFAULT_CALORIE_TARGET = 2000
RECENT_MEALS_LIMIT = 20

_logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for logged meals."""

    def insert(self, meal: MealRecord) -> int:
        """Store a meal and return its id."""

    def delete(self, meal: MealRecord) -> None:
        """Delete a stored meal."""

    def get(self, meal_id: int) -> MealRecord | None:
        """Return a meal by id, if present."""

    def list_all(self) -> list[MealRecord]:
        """Return every meal, newest first."""

    def list_recent(self, limit: int = RECENT_MEALS_LIMIT) -> list[MealRecord]:
        """Return the newest ``limit`` meals, newest first."""

    def sum_calories(self, start_time: int, end_time: int) -> int | None:
        """Return total calories for meals within the inclusive range."""


@dataclass
class MealLogService:
    """Turns analyses into stored meals and answers history queries."""

    repository: MealRepository
    profile_repository: ProfileRepository
    clock: Callable[[], int] = now_millis
    _last_timestamp: int = field(default=0, init=False)

    def save_analysis(
        self, analysis: MealAnalysisResponse, image_path: str | None = None
    ) -> MealRecord:
        """Persist an accepted analysis as a new meal."""
        meal = MealRecord(
            description=analysis.description,
            timestamp=self._next_timestamp(),
            image_path=image_path,
            calories=analysis.calories,
            protein=analysis.protein,
            carbs=analysis.carbs,
            fat=analysis.fat,
            raw_analysis=analysis.analysis,
        )
        meal_id = self.repository.insert(meal)
        _logger.info("Meal saved: id=%s calories=%s", meal_id, meal.calories)
        return replace(meal, id=meal_id)

    def get_meal(self, meal_id: int) -> MealRecord | None:
        """Return a stored meal by id, or None."""
        return self.repository.get(meal_id)

    def delete_meal(self, meal: MealRecord) -> None:
        """Remove a meal from the log."""
        self.repository.delete(meal)

    def list_meals(self) -> list[MealRecord]:
        """Return all meals, newest first."""
        return self.repository.list_all()

    def recent_meals(self, limit: int = RECENT_MEALS_LIMIT) -> list[MealRecord]:
        """Return the newest ``limit`` meals, newest first."""
        return self.repository.list_recent(limit)

    def calories_between(self, start_time: int, end_time: int) -> int:
        """Return calories logged in the inclusive range, 0 when none."""
        return self.repository.sum_calories(start_time, end_time) or 0

    def daily_summary(self, timezone_name: str = "UTC") -> DailySummary:
        """Return today's meals and calories against the profile target."""
        tz = ZoneInfo(timezone_name)
        now = datetime.fromtimestamp(self.clock() / 1000, tz=tz)
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_ms = to_millis(start)
        end_ms = to_millis(start + timedelta(days=1)) - 1
        meals = [
            meal
            for meal in self.repository.list_all()
            if start_ms <= meal.timestamp <= end_ms
        ]
        profile = self.profile_repository.load_profile()
        return DailySummary(
            day=start.date(),
            calories=self.calories_between(start_ms, end_ms),
            calorie_target=(
                profile.calorie_target if profile else DEFAULT_CALORIE_TARGET
            ),
            meals=meals,
        )

    def _next_timestamp(self) -> int:
        timestamp = max(self.clock(), self._last_timestamp + 1)
        self._last_timestamp = timestamp
        return timestamp
