"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from smart_diet.api.fasting import router as fasting_router
from smart_diet.api.models import (
    AnalyzeMealIn,
    DailySummaryOut,
    MealOut,
    MetricsPreview,
    ProfileIn,
    ProfileOut,
    SaveMealIn,
)
from smart_diet.app_logging import configure_logging
from smart_diet.containers import AppContainer
from smart_diet.domain.analysis import MealAnalysisResponse
from smart_diet.errors import (
    AnalysisFailedError,
    InvalidInputError,
    PersistenceUnavailableError,
    SmartDietError,
)
from smart_diet.services.profile import CURATED_HEALTH_CONDITIONS, ProfileDraft

_ERROR_STATUS = {
    InvalidInputError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AnalysisFailedError: status.HTTP_502_BAD_GATEWAY,
    PersistenceUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.fasting_tracker.load()
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(fasting_router)

    @app.exception_handler(SmartDietError)
    async def smart_diet_error(_request: Request, exc: SmartDietError) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning("Request failed: kind=%s detail=%s", exc.kind, exc.detail)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/profile")
    def get_profile(request: Request) -> dict[str, ProfileOut | None]:
        """Return the stored profile, or null when none was saved."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.load_profile()
        return {"profile": ProfileOut.from_domain(profile) if profile else None}

    @app.put("/profile")
    def save_profile(payload: ProfileIn, request: Request) -> ProfileOut:
        """Validate and store the profile, recomputing BMI and calorie target."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.save_profile(_to_draft(payload))
        return ProfileOut.from_domain(profile)

    @app.post("/profile/preview")
    def preview_profile(payload: ProfileIn) -> MetricsPreview:
        """Return metrics for an unsaved draft; zeros until inputs are complete."""
        draft = _to_draft(payload)
        return MetricsPreview(
            bmi=draft.bmi,
            calorie_target=draft.calorie_target,
            computable=draft.calorie_target > 0,
        )

    @app.get("/profile/conditions")
    async def health_conditions() -> dict[str, list[str]]:
        """Return the curated list of health conditions."""
        return {"conditions": list(CURATED_HEALTH_CONDITIONS)}

    @app.get("/meals")
    def list_meals(request: Request) -> dict[str, list[MealOut]]:
        """Return all meals, newest first."""
        state_container: AppContainer = request.app.state.container
        meals = state_container.meal_log_service.list_meals()
        return {"meals": [MealOut.from_domain(meal) for meal in meals]}

    @app.get("/meals/today")
    def today(request: Request) -> DailySummaryOut:
        """Return today's calories against the profile target."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.meal_log_service.daily_summary(
            state_container.settings.timezone
        )
        return DailySummaryOut.from_domain(summary)

    @app.post("/meals/analyze")
    async def analyze_meal(
        payload: AnalyzeMealIn, request: Request
    ) -> MealAnalysisResponse:
        """Analyze a meal description without storing it."""
        state_container: AppContainer = request.app.state.container
        return await state_container.analysis_service.analyze_meal(
            payload.description
        )

    @app.post("/meals", status_code=status.HTTP_201_CREATED)
    def save_meal(payload: SaveMealIn, request: Request) -> MealOut:
        """Store an accepted analysis as a meal."""
        state_container: AppContainer = request.app.state.container
        analysis = MealAnalysisResponse.model_validate(
            payload.model_dump(exclude={"image_path"})
        )
        meal = state_container.meal_log_service.save_analysis(
            analysis, image_path=payload.image_path
        )
        return MealOut.from_domain(meal)

    @app.delete("/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_meal(meal_id: int, request: Request) -> Response:
        """Delete a meal by id."""
        state_container: AppContainer = request.app.state.container
        meal = state_container.meal_log_service.get_meal(meal_id)
        if meal is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        state_container.meal_log_service.delete_meal(meal)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


def _to_draft(payload: ProfileIn) -> ProfileDraft:
    return ProfileDraft().update(
        nickname=payload.nickname,
        weight_kg=payload.weight_kg,
        height_cm=payload.height_cm,
        age=payload.age,
        gender=payload.gender,
        activity_factor=payload.activity_factor,
        health_conditions=frozenset(
            condition.strip()
            for condition in payload.health_conditions
            if condition.strip()
        ),
    )
