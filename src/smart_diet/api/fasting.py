"""Fasting timer endpoints."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from smart_diet.api.models import FastingOut, StageOut
from smart_diet.domain.fasting import FASTING_STAGES
from smart_diet.services.fasting import FastingTicker

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from smart_diet.containers import AppContainer
    from smart_diet.domain.fasting import FastingSnapshot
    from smart_diet.services.fasting import FastingSessionTracker

router = APIRouter(prefix="/fasting", tags=["fasting"])


@router.get("")
def fasting_status(request: Request) -> FastingOut:
    """Return the current fasting snapshot, refreshed from storage."""
    container: AppContainer = request.app.state.container
    container.fasting_tracker.load()
    return FastingOut.from_domain(container.fasting_tracker.tick())


@router.post("/toggle")
def toggle_fasting(request: Request) -> FastingOut:
    """Start a fast when idle, otherwise stop the running one."""
    container: AppContainer = request.app.state.container
    container.fasting_tracker.toggle()
    return FastingOut.from_domain(container.fasting_tracker.tick())


@router.get("/stages")
def list_stages() -> dict[str, list[StageOut]]:
    """Return the fixed stage timeline."""
    return {"stages": [StageOut.from_domain(stage) for stage in FASTING_STAGES]}


@router.get("/stream")
async def stream_fasting(request: Request) -> StreamingResponse:
    """Stream a snapshot as a server-sent event on every timer tick."""
    container: AppContainer = request.app.state.container
    return StreamingResponse(
        snapshot_events(
            container.fasting_tracker, container.settings.fasting_tick_seconds
        ),
        media_type="text/event-stream",
    )


async def snapshot_events(
    tracker: FastingSessionTracker, interval_seconds: float
) -> AsyncIterator[str]:
    """Yield SSE frames until the consumer closes the iterator."""
    queue: asyncio.Queue[FastingSnapshot] = asyncio.Queue()
    async with FastingTicker(tracker, queue.put_nowait, interval_seconds):
        while True:
            snapshot = await queue.get()
            yield f"data: {FastingOut.from_domain(snapshot).model_dump_json()}\n\n"
