"""Tests for container wiring."""

import asyncio

from smart_diet.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.profile_service is not None
    assert container.meal_log_service is not None
    assert container.fasting_tracker is not None
    assert container.analysis_service.model == settings.openai_model
    assert container.analysis_service.history_limit == settings.meal_history_limit
    asyncio.run(container.close_resources())
