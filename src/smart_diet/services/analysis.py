"""Contextual meal analysis using an LLM with structured output."""

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from smart_diet.domain.analysis import MealAnalysisRequest, MealAnalysisResponse
from smart_diet.domain.meals import MealRecord
from smart_diet.domain.profile import UserProfile
from smart_diet.errors import AnalysisFailedError, InvalidInputError
from smart_diet.services.meals import RECENT_MEALS_LIMIT, MealRepository
from smart_diet.services.profile import ProfileRepository

_logger = logging.getLogger(__name__)

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "description": {"type": "string"},
        "calories": {"type": "integer", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "carbs": {"type": "number", "minimum": 0},
        "fat": {"type": "number", "minimum": 0},
        "analysis": {"type": "string"},
    },
    "required": ["description", "calories", "protein", "carbs", "fat", "analysis"],
    "additionalProperties": False,
}

PROFILE_NOT_SET = "User Profile: Not set."
HISTORY_EMPTY = "Recent Meal History: No recorded meals yet."


class InferenceClient(Protocol):
    """Interface for structured LLM text generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
    ) -> str:
        """Return the raw text produced for ``prompt``."""


class LocaleProvider(Protocol):
    """Source of the user's preferred display language."""

    def display_language(self) -> str:
        """Return a language name such as "English"."""


@dataclass
class MealAnalysisService:
    """Builds analysis prompts, calls the model once and validates the reply.

    At most one request is in flight per instance; nothing is written to
    storage here (see ``MealLogService.save_analysis``).
    """

    client: InferenceClient
    locale_provider: LocaleProvider
    profile_repository: ProfileRepository
    meal_repository: MealRepository
    model: str
    reasoning_effort: str | None = None
    store: bool = False
    timeout_seconds: float | None = 60.0
    history_limit: int = RECENT_MEALS_LIMIT
    _in_flight: bool = field(default=False, init=False)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def build_request(
        self,
        description: str,
        profile: UserProfile | None,
        history: Sequence[MealRecord],
    ) -> MealAnalysisRequest:
        """Validate the description and bundle the analysis context."""
        if not description or not description.strip():
            raise InvalidInputError("Meal description must not be blank.")
        return MealAnalysisRequest(
            description=description.strip(),
            profile=profile,
            history=tuple(history[: self.history_limit]),
            language=self.locale_provider.display_language(),
        )

    async def analyze(
        self,
        description: str,
        profile: UserProfile | None = None,
        history: Sequence[MealRecord] = (),
    ) -> MealAnalysisResponse:
        """Analyze a meal description in the context of profile and history."""
        request = self.build_request(description, profile, history)
        if self._in_flight:
            raise AnalysisFailedError("An analysis is already in progress.")
        self._in_flight = True
        try:
            raw = await self._generate(build_prompt(request))
        finally:
            self._in_flight = False
        return parse_analysis(raw)

    async def analyze_meal(self, description: str) -> MealAnalysisResponse:
        """Load the stored profile and recent meals off the loop, then analyze."""
        if not description or not description.strip():
            raise InvalidInputError("Meal description must not be blank.")
        profile = await asyncio.to_thread(self.profile_repository.load_profile)
        history = await asyncio.to_thread(
            self.meal_repository.list_recent, self.history_limit
        )
        return await self.analyze(description, profile, history)

    async def _generate(self, prompt: str) -> str:
        try:
            return await asyncio.wait_for(
                self.client.generate(
                    model=self.model,
                    reasoning_effort=self.reasoning_effort,
                    store=self.store,
                    prompt=prompt,
                    schema=ANALYSIS_SCHEMA,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            _logger.warning("Meal analysis timed out after %ss", self.timeout_seconds)
            raise AnalysisFailedError(
                f"Analysis timed out after {self.timeout_seconds} seconds."
            ) from exc
        except Exception as exc:
            _logger.exception("Meal analysis request failed")
            raise AnalysisFailedError(f"Analysis request failed: {exc}") from exc


def build_prompt(request: MealAnalysisRequest) -> str:
    """Render the nutritionist prompt for a request."""
    return "\n\n".join(
        [
            "You are an Expert Clinical Nutritionist. Your goal is to help the "
            "user lose weight safely and improve their overall health.",
            _profile_context(request.profile),
            _history_context(request.history),
            f'CURRENT MEAL TO ANALYZE: "{request.description}"',
            "INSTRUCTIONS:\n"
            "1. Analyze the current meal for calories and macros.\n"
            "2. Provide a sophisticated, professional, yet easy-to-understand "
            "analysis.\n"
            "3. Contextual advice: combine the current meal analysis with the "
            "user's profile and recent history.\n"
            "   - Tailor advice to any recorded health conditions (e.g. with "
            "Diabetes, warn about sugar and carbs).\n"
            "   - If a nutrient group is missing from recent history, advise "
            "including it in the next meal.\n"
            "   - State whether this meal fits within the remaining daily "
            "calorie budget.\n"
            f"4. CRITICAL: The analysis text MUST be written in {request.language}.",
            "Return only a JSON object with the fields description (refined "
            "meal name), calories (integer kcal), protein, carbs and fat (grams) "
            "and analysis (your professional analysis).",
        ]
    )


def parse_analysis(raw: str | None) -> MealAnalysisResponse:
    """Validate raw model output against the analysis schema."""
    if raw is None or not raw.strip():
        raise AnalysisFailedError("The model returned an empty response.")
    text = _strip_code_fence(raw.strip())
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AnalysisFailedError("The model response is not valid JSON.") from exc
    try:
        return MealAnalysisResponse.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) or "response"
            for error in exc.errors()
        )
        raise AnalysisFailedError(
            f"The model response failed validation: {fields}."
        ) from exc


def _profile_context(profile: UserProfile | None) -> str:
    if profile is None:
        return PROFILE_NOT_SET
    conditions = ", ".join(sorted(profile.health_conditions)) or "None"
    return (
        "User Profile:\n"
        f"- Name: {profile.nickname}\n"
        f"- Age: {profile.age}\n"
        f"- Gender: {profile.gender.value}\n"
        f"- Activity Level Factor: {profile.activity_factor}\n"
        f"- BMI: {profile.bmi:.1f}\n"
        "- Calculated Daily Calorie Target (Weight Loss): "
        f"{profile.calorie_target} kcal\n"
        f"- Health Conditions: {conditions}"
    )


def _history_context(history: Sequence[MealRecord]) -> str:
    if not history:
        return HISTORY_EMPTY
    lines = "\n".join(
        f"- {meal.description} ({_or_unknown(meal.calories)} kcal, "
        f"{_or_unknown(meal.protein)}g protein)"
        for meal in history
    )
    return (
        f"Recent Meal History (Last {len(history)} meals):\n"
        f"{lines}\n\n"
        "IMPORTANT: Analyze this history to identify NUTRITIONAL GAPS. "
        "For example, if the user hasn't eaten fish recently, mention the lack "
        "of Omega-3. If they lack vegetables, mention fiber and vitamins."
    )


def _or_unknown(value: float | None) -> str:
    return "?" if value is None else str(value)


def _strip_code_fence(text: str) -> str:
    if text.startswith("```"):
        body = text.split("\n", 1)[1] if "\n" in text else ""
        return body.rsplit("```", 1)[0].strip()
    return text
