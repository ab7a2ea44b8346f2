"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from smart_diet.adapters.locale_provider import SettingsLocaleProvider
from smart_diet.adapters.openai_inference_client import OpenAIInferenceClient
from smart_diet.adapters.supabase_fasting_repository import SupabaseFastingRepository
from smart_diet.adapters.supabase_meal_repository import SupabaseMealRepository
from smart_diet.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from smart_diet.config import Settings
from smart_diet.services.analysis import MealAnalysisService
from smart_diet.services.fasting import FastingSessionTracker
from smart_diet.services.meals import MealLogService
from smart_diet.services.profile import ProfileService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    meal_log_service: MealLogService
    analysis_service: MealAnalysisService
    fasting_tracker: FastingSessionTracker
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    meal_repository = SupabaseMealRepository(supabase_client)
    fasting_repository = SupabaseFastingRepository(supabase_client)
    inference_client = OpenAIInferenceClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.analysis_timeout_seconds,
    )
    analysis_service = MealAnalysisService(
        client=inference_client,
        locale_provider=SettingsLocaleProvider(resolved_settings.display_language),
        profile_repository=profile_repository,
        meal_repository=meal_repository,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        timeout_seconds=resolved_settings.analysis_timeout_seconds,
        history_limit=resolved_settings.meal_history_limit,
    )

    async def close_resources() -> None:
        await inference_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_service=ProfileService(profile_repository),
        meal_log_service=MealLogService(
            repository=meal_repository,
            profile_repository=profile_repository,
        ),
        analysis_service=analysis_service,
        fasting_tracker=FastingSessionTracker(fasting_repository),
        close_resources=close_resources,
    )
