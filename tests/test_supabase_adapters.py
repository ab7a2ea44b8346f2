"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field

import pytest

from smart_diet.adapters.supabase_fasting_repository import SupabaseFastingRepository
from smart_diet.adapters.supabase_meal_repository import SupabaseMealRepository
from smart_diet.adapters.supabase_profile_repository import (
    PROFILE_ROW_ID,
    SupabaseProfileRepository,
)
from smart_diet.domain.fasting import FastingSession
from smart_diet.domain.meals import MealRecord
from smart_diet.domain.profile import Gender, UserProfile
from smart_diet.errors import PersistenceUnavailableError


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {
            "select": [],
            "insert": [],
            "upsert": [],
            "update": [],
            "delete": [],
        }
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def _set_action(self, action: str) -> "FakeTable":
        self._action = action
        self.actions.append(action)
        return self

    def select(self, *_args) -> "FakeTable":
        return self._set_action("select")

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_payload = payload
        return self._set_action("insert")

    def upsert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_payload = payload
        return self._set_action("upsert")

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_payload = payload
        return self._set_action("update")

    def delete(self) -> "FakeTable":
        return self._set_action("delete")

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((f"{column}>=", value))
        return self

    def lte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((f"{column}<=", value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _profile() -> UserProfile:
    return UserProfile(
        nickname="Sam",
        weight_kg=70.0,
        height_cm=175.0,
        age=30,
        gender=Gender.FEMALE,
        activity_factor=1.375,
        bmi=22.9,
        calorie_target=1400,
        health_conditions=frozenset({"Vegan", "Diabetes"}),
    )


def test_profile_repository_save_and_load() -> None:
    client = FakeSupabaseClient()
    table = client.table("user_profile")
    table.queue("upsert", [{"id": PROFILE_ROW_ID}])
    table.queue(
        "select",
        [
            {
                "nickname": "Sam",
                "weight": 70,
                "height": 175,
                "age": 30,
                "gender": "Female",
                "activity_level": 1.375,
                "bmi": 22.9,
                "calorie_target": 1400,
                "health_conditions": ["Diabetes", "Vegan"],
            }
        ],
    )
    repository = SupabaseProfileRepository(client)

    repository.save_profile(_profile())
    loaded = repository.load_profile()

    assert isinstance(table.last_payload, dict)
    assert table.last_payload["health_conditions"] == ["Diabetes", "Vegan"]
    assert table.last_payload["gender"] == "Female"
    assert loaded == _profile()


def test_profile_repository_reads_comma_separated_conditions() -> None:
    client = FakeSupabaseClient()
    client.table("user_profile").queue(
        "select",
        [{"nickname": "Sam", "gender": "Male", "health_conditions": "Vegan, Celiac"}],
    )

    loaded = SupabaseProfileRepository(client).load_profile()

    assert loaded is not None
    assert loaded.health_conditions == frozenset({"Vegan", "Celiac"})


def test_profile_repository_missing_row() -> None:
    assert SupabaseProfileRepository(FakeSupabaseClient()).load_profile() is None


def test_profile_repository_save_failure() -> None:
    repository = SupabaseProfileRepository(FakeSupabaseClient())

    with pytest.raises(PersistenceUnavailableError):
        repository.save_profile(_profile())


def test_meal_repository_insert_get_and_delete() -> None:
    client = FakeSupabaseClient()
    table = client.table("meals")
    table.queue("insert", [{"id": 7}])
    table.queue(
        "select",
        [
            {
                "id": 7,
                "description": "Oatmeal",
                "timestamp": 1000,
                "image_path": None,
                "calories": 320,
                "protein": 11,
                "carbs": 54.5,
                "fat": 6,
                "raw_analysis": "Good fiber.",
            }
        ],
    )
    repository = SupabaseMealRepository(client)

    meal_id = repository.insert(MealRecord("Oatmeal", timestamp=1000, calories=320))
    loaded = repository.get(meal_id)
    repository.delete(loaded)

    assert meal_id == 7
    assert loaded == MealRecord(
        id=7,
        description="Oatmeal",
        timestamp=1000,
        calories=320,
        protein=11.0,
        carbs=54.5,
        fat=6.0,
        raw_analysis="Good fiber.",
    )
    assert table.actions[-1] == "delete"
    assert table.last_filters[-1] == ("id", 7)


def test_meal_repository_insert_failure() -> None:
    repository = SupabaseMealRepository(FakeSupabaseClient())

    with pytest.raises(PersistenceUnavailableError):
        repository.insert(MealRecord("Oatmeal", timestamp=1000))


def test_meal_repository_delete_without_id_is_noop() -> None:
    client = FakeSupabaseClient()

    SupabaseMealRepository(client).delete(MealRecord("Oatmeal", timestamp=1))

    assert client.tables == {}


def test_meal_repository_sum_calories() -> None:
    client = FakeSupabaseClient()
    table = client.table("meals")
    table.queue("select", [{"calories": 200}, {"calories": None}, {"calories": 150}])
    table.queue("select", [])
    repository = SupabaseMealRepository(client)

    assert repository.sum_calories(10, 20) == 350
    assert repository.sum_calories(10, 20) is None
    assert ("timestamp>=", 10) in table.last_filters
    assert ("timestamp<=", 20) in table.last_filters


def test_meal_repository_lists() -> None:
    client = FakeSupabaseClient()
    table = client.table("meals")
    rows = [
        {"id": 2, "description": "Dinner", "timestamp": 20},
        {"id": 1, "description": "Lunch", "timestamp": 10},
    ]
    table.queue("select", rows)
    table.queue("select", rows[:1])
    repository = SupabaseMealRepository(client)

    assert [meal.id for meal in repository.list_all()] == [2, 1]
    assert [meal.id for meal in repository.list_recent(1)] == [2]


def test_fasting_repository_start_and_stop() -> None:
    client = FakeSupabaseClient()
    table = client.table("fasting_sessions")
    table.queue("upsert", [{"id": 3}])
    table.queue(
        "select",
        [{"id": 3, "start_time": 500, "end_time": None, "target_duration_hours": 0}],
    )
    repository = SupabaseFastingRepository(client)

    repository.upsert_latest(FastingSession(start_time=500))
    latest = repository.latest()
    repository.update_latest(
        FastingSession(id=3, start_time=500, end_time=900, target_duration_hours=0)
    )

    assert latest == FastingSession(id=3, start_time=500)
    assert latest.is_active
    assert table.last_payload == {"end_time": 900, "target_duration_hours": 0}
    assert table.last_filters[-1] == ("id", 3)


def test_fasting_repository_upsert_failure() -> None:
    repository = SupabaseFastingRepository(FakeSupabaseClient())

    with pytest.raises(PersistenceUnavailableError):
        repository.upsert_latest(FastingSession(start_time=500))


def test_fasting_repository_update_without_any_session() -> None:
    repository = SupabaseFastingRepository(FakeSupabaseClient())

    with pytest.raises(PersistenceUnavailableError):
        repository.update_latest(FastingSession(start_time=500, end_time=600))
