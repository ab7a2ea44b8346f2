"""Supabase repository for logged meals."""

from dataclasses import dataclass

from supabase import Client

from smart_diet.domain.meals import MealRecord
from smart_diet.errors import PersistenceUnavailableError
from smart_diet.services.meals import RECENT_MEALS_LIMIT, MealRepository

_COLUMNS = (
    "id, description, timestamp, image_path, calories, protein, carbs, fat, "
    "raw_analysis"
)


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals."""

    client: Client

    def insert(self, meal: MealRecord) -> int:
        """Insert a meal row and return its id."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "description": meal.description,
                    "timestamp": meal.timestamp,
                    "image_path": meal.image_path,
                    "calories": meal.calories,
                    "protein": meal.protein,
                    "carbs": meal.carbs,
                    "fat": meal.fat,
                    "raw_analysis": meal.raw_analysis,
                }
            )
            .execute()
        )
        if not response.data:
            raise PersistenceUnavailableError("Failed to create meal")
        return int(response.data[0]["id"])

    def delete(self, meal: MealRecord) -> None:
        """Delete a meal row by id."""
        if meal.id is None:
            return
        self.client.table("meals").delete().eq("id", meal.id).execute()

    def get(self, meal_id: int) -> MealRecord | None:
        """Return a meal by id."""
        response = (
            self.client.table("meals")
            .select(_COLUMNS)
            .eq("id", meal_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def list_all(self) -> list[MealRecord]:
        """Return all meals, newest first."""
        response = (
            self.client.table("meals")
            .select(_COLUMNS)
            .order("timestamp", desc=True)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def list_recent(self, limit: int = RECENT_MEALS_LIMIT) -> list[MealRecord]:
        """Return the newest meals."""
        response = (
            self.client.table("meals")
            .select(_COLUMNS)
            .order("timestamp", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def sum_calories(self, start_time: int, end_time: int) -> int | None:
        """Return summed calories for meals in the inclusive range."""
        response = (
            self.client.table("meals")
            .select("calories")
            .gte("timestamp", start_time)
            .lte("timestamp", end_time)
            .execute()
        )
        values = [
            int(row["calories"])
            for row in response.data or []
            if row.get("calories") is not None
        ]
        return sum(values) if values else None


def _parse_meal(row: dict[str, object]) -> MealRecord:
    return MealRecord(
        id=int(row["id"]),
        description=str(row.get("description", "")),
        timestamp=int(row.get("timestamp", 0)),
        image_path=row.get("image_path"),
        calories=_optional_int(row.get("calories")),
        protein=_optional_float(row.get("protein")),
        carbs=_optional_float(row.get("carbs")),
        fat=_optional_float(row.get("fat")),
        raw_analysis=row.get("raw_analysis"),
    )


def _optional_int(value: object) -> int | None:
    return None if value is None else int(value)


def _optional_float(value: object) -> float | None:
    return None if value is None else float(value)
