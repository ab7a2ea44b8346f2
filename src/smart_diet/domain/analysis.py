"""Models for contextual meal analysis."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from smart_diet.domain.meals import MealRecord
from smart_diet.domain.profile import UserProfile


@dataclass(frozen=True)
class MealAnalysisRequest:
    """Everything the prompt needs for a single analysis."""

    description: str
    profile: UserProfile | None
    history: tuple[MealRecord, ...]
    language: str


class MealAnalysisResponse(BaseModel):
    """Structured output of a meal analysis."""

    model_config = ConfigDict(extra="ignore")

    description: str
    calories: int = Field(ge=0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    analysis: str
