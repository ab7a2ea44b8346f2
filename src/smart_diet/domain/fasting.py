"""Domain models for fasting sessions and the physiological stage table."""

import math
from dataclasses import dataclass

OPEN_ENDED_TARGET_HOURS = 0


@dataclass(frozen=True)
class FastingSession:
    """A fasting session; ``end_time`` is None while the fast is running."""

    start_time: int
    end_time: int | None = None
    target_duration_hours: int = OPEN_ENDED_TARGET_HOURS
    id: int | None = None

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def is_open_ended(self) -> bool:
        return self.target_duration_hours == OPEN_ENDED_TARGET_HOURS


@dataclass(frozen=True)
class FastingStage:
    """A physiological phase covering ``[start_hour, end_hour)``."""

    start_hour: float
    end_hour: float
    title: str
    description: str
    icon: str


FASTING_STAGES: tuple[FastingStage, ...] = (
    FastingStage(
        0,
        4,
        "Blood Sugar Rising",
        "Your body is digesting the last meal. Insulin levels are high.",
        "😋",
    ),
    FastingStage(
        4,
        8,
        "Blood Sugar Falling",
        "Insulin starts to drop. The body is getting ready to burn fat.",
        "📉",
    ),
    FastingStage(
        8,
        12,
        "Reset",
        "The stomach is empty. Growth hormone secretion begins.",
        "😌",
    ),
    FastingStage(
        12,
        18,
        "Ketosis (Mild)",
        "The body starts burning fat for energy instead of glucose.",
        "🔥",
    ),
    FastingStage(
        18,
        24,
        "Autophagy (Onset)",
        "Cellular cleanup. The body recycles old cells.",
        "♻️",
    ),
    FastingStage(
        24,
        48,
        "Autophagy (Peak)",
        "Peak cellular renewal and a rise in growth hormone.",
        "🚀",
    ),
    FastingStage(
        48,
        72,
        "Immune Regeneration",
        "Deep renewal of the immune system.",
        "🛡️",
    ),
    FastingStage(
        72,
        math.inf,
        "Extended Fast",
        "Caution: consult a doctor before fasting longer than 72 hours.",
        "⚠️",
    ),
)


@dataclass(frozen=True)
class FastingSnapshot:
    """Point-in-time view of the fasting timer."""

    is_fasting: bool
    start_time: int | None
    target_hours: int
    elapsed_hours: float
    elapsed_time: str
    current_stage: FastingStage | None
    next_stage: FastingStage | None
    progress: float
