"""Lookups over the fasting stage timeline."""

import math
from collections.abc import Sequence

from smart_diet.domain.fasting import FASTING_STAGES, FastingStage

MILLIS_PER_HOUR = 3_600_000


def current_stage(
    elapsed_hours: float, stages: Sequence[FastingStage] = FASTING_STAGES
) -> FastingStage | None:
    """Return the stage containing ``elapsed_hours`` (lower bound inclusive)."""
    for stage in stages:
        if stage.start_hour <= elapsed_hours < stage.end_hour:
            return stage
    return None


def next_stage(
    elapsed_hours: float, stages: Sequence[FastingStage] = FASTING_STAGES
) -> FastingStage | None:
    """Return the first stage that starts after ``elapsed_hours``."""
    for stage in stages:
        if stage.start_hour > elapsed_hours:
            return stage
    return None


def stage_progress(
    elapsed_hours: float, stages: Sequence[FastingStage] = FASTING_STAGES
) -> float:
    """Return the fraction of the current stage already elapsed, in [0, 1]."""
    stage = current_stage(elapsed_hours, stages)
    if stage is None or math.isinf(stage.end_hour):
        return 0.0
    fraction = (elapsed_hours - stage.start_hour) / (stage.end_hour - stage.start_hour)
    return min(max(fraction, 0.0), 1.0)


def elapsed_hours_between(start_time: int, now: int) -> float:
    """Convert an epoch-millisecond interval to fractional hours."""
    return (now - start_time) / MILLIS_PER_HOUR


def format_elapsed(elapsed_ms: int) -> str:
    """Format milliseconds as HH:MM:SS with an unbounded hour count."""
    total_seconds = max(elapsed_ms, 0) // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
