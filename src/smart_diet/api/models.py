"""Request and response models for the HTTP API."""

import math
from datetime import date

from pydantic import BaseModel, Field

from smart_diet.domain.fasting import FastingSnapshot, FastingStage
from smart_diet.domain.meals import DailySummary, MealRecord
from smart_diet.domain.profile import ACTIVITY_FACTORS, Gender, UserProfile


class ProfileIn(BaseModel):
    """Profile form fields as submitted by a client."""

    nickname: str = ""
    weight_kg: float | None = None
    height_cm: float | None = None
    age: int | None = None
    gender: Gender = Gender.MALE
    activity_factor: float = ACTIVITY_FACTORS[0]
    health_conditions: list[str] = Field(default_factory=list)


class ProfileOut(BaseModel):
    nickname: str
    weight_kg: float
    height_cm: float
    age: int
    gender: Gender
    activity_factor: float
    bmi: float
    calorie_target: int
    health_conditions: list[str]

    @classmethod
    def from_domain(cls, profile: UserProfile) -> "ProfileOut":
        return cls(
            nickname=profile.nickname,
            weight_kg=profile.weight_kg,
            height_cm=profile.height_cm,
            age=profile.age,
            gender=profile.gender,
            activity_factor=profile.activity_factor,
            bmi=profile.bmi,
            calorie_target=profile.calorie_target,
            health_conditions=sorted(profile.health_conditions),
        )


class MetricsPreview(BaseModel):
    """Derived metrics for an unsaved profile draft."""

    bmi: float
    calorie_target: int
    computable: bool


class AnalyzeMealIn(BaseModel):
    description: str


class SaveMealIn(BaseModel):
    """An accepted analysis to store as a meal."""

    description: str
    calories: int = Field(ge=0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    analysis: str
    image_path: str | None = None


class MealOut(BaseModel):
    id: int | None
    description: str
    timestamp: int
    image_path: str | None
    calories: int | None
    protein: float | None
    carbs: float | None
    fat: float | None
    raw_analysis: str | None

    @classmethod
    def from_domain(cls, meal: MealRecord) -> "MealOut":
        return cls(
            id=meal.id,
            description=meal.description,
            timestamp=meal.timestamp,
            image_path=meal.image_path,
            calories=meal.calories,
            protein=meal.protein,
            carbs=meal.carbs,
            fat=meal.fat,
            raw_analysis=meal.raw_analysis,
        )


class DailySummaryOut(BaseModel):
    day: date
    calories: int
    calorie_target: int
    remaining: int
    meals: list[MealOut]

    @classmethod
    def from_domain(cls, summary: DailySummary) -> "DailySummaryOut":
        return cls(
            day=summary.day,
            calories=summary.calories,
            calorie_target=summary.calorie_target,
            remaining=summary.remaining,
            meals=[MealOut.from_domain(meal) for meal in summary.meals],
        )


class StageOut(BaseModel):
    """A fasting stage; ``end_hour`` is null for the open-ended final stage."""

    start_hour: float
    end_hour: float | None
    title: str
    description: str
    icon: str

    @classmethod
    def from_domain(cls, stage: FastingStage | None) -> "StageOut | None":
        if stage is None:
            return None
        return cls(
            start_hour=stage.start_hour,
            end_hour=None if math.isinf(stage.end_hour) else stage.end_hour,
            title=stage.title,
            description=stage.description,
            icon=stage.icon,
        )


class FastingOut(BaseModel):
    is_fasting: bool
    start_time: int | None
    target_hours: int
    elapsed_hours: float
    elapsed_time: str
    current_stage: StageOut | None
    next_stage: StageOut | None
    progress: float

    @classmethod
    def from_domain(cls, snapshot: FastingSnapshot) -> "FastingOut":
        return cls(
            is_fasting=snapshot.is_fasting,
            start_time=snapshot.start_time,
            target_hours=snapshot.target_hours,
            elapsed_hours=snapshot.elapsed_hours,
            elapsed_time=snapshot.elapsed_time,
            current_stage=StageOut.from_domain(snapshot.current_stage),
            next_stage=StageOut.from_domain(snapshot.next_stage),
            progress=snapshot.progress,
        )
