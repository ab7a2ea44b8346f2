"""User profile editing, validation and storage."""

import logging
import math
from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace
from typing import Protocol

from smart_diet.domain.profile import ACTIVITY_FACTORS, Gender, UserProfile
from smart_diet.errors import InvalidInputError
from smart_diet.services.feeds import ChangeFeed
from smart_diet.services.metrics import compute_body_metrics

_logger = logging.getLogger(__name__)

CURATED_HEALTH_CONDITIONS: tuple[str, ...] = (
    "Diabetes",
    "High Cholesterol",
    "Hypertension",
    "Celiac Disease",
    "Lactose Intolerance",
    "Vegan",
    "Vegetarian",
)

ACTIVITY_LEVELS: dict[str, float] = {
    "Sedentary (desk job, little exercise)": 1.2,
    "Lightly active (exercise 1-3 times/week)": 1.375,
    "Moderately active (exercise 3-5 times/week)": 1.55,
    "Very active (exercise 6-7 times/week)": 1.725,
}

_METRIC_FIELDS = {"weight_kg", "height_cm", "age", "gender", "activity_factor"}


class ProfileRepository(Protocol):
    """Persistence interface for the single user profile."""

    def load_profile(self) -> UserProfile | None:
        """Return the stored profile, if one was saved."""

    def save_profile(self, profile: UserProfile) -> None:
        """Insert or overwrite the stored profile."""


@dataclass(frozen=True)
class ProfileDraft:
    """Profile form state; derived metrics follow the body inputs.

    ``bmi`` and ``calorie_target`` keep their last computed values while the
    inputs are incomplete.
    """

    nickname: str = ""
    weight_kg: float | None = None
    height_cm: float | None = None
    age: int | None = None
    gender: Gender = Gender.MALE
    activity_factor: float = ACTIVITY_FACTORS[0]
    health_conditions: frozenset[str] = field(default_factory=frozenset)
    bmi: float = 0.0
    calorie_target: int = 0

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ProfileDraft":
        """Build a draft pre-filled with a stored profile."""
        return cls(
            nickname=profile.nickname,
            weight_kg=profile.weight_kg,
            height_cm=profile.height_cm,
            age=profile.age,
            gender=profile.gender,
            activity_factor=profile.activity_factor,
            health_conditions=profile.health_conditions,
            bmi=profile.bmi,
            calorie_target=profile.calorie_target,
        )

    def update(self, **changes: object) -> "ProfileDraft":
        """Return a copy with ``changes`` applied and metrics recomputed."""
        draft = replace(self, **changes)
        if _METRIC_FIELDS.isdisjoint(changes):
            return draft
        return draft.recalculate()

    def recalculate(self) -> "ProfileDraft":
        """Recompute metrics from the body inputs; keep the old ones if incomplete."""
        metrics = compute_body_metrics(
            self.weight_kg,
            self.height_cm,
            self.age,
            self.gender,
            self.activity_factor,
        )
        if metrics is None:
            return self
        return replace(self, bmi=metrics.bmi, calorie_target=metrics.calorie_target)

    def toggle_condition(self, condition: str) -> "ProfileDraft":
        """Select ``condition`` if absent, otherwise deselect it."""
        if condition in self.health_conditions:
            return replace(self, health_conditions=self.health_conditions - {condition})
        return replace(self, health_conditions=self.health_conditions | {condition})

    def add_custom_condition(self, condition: str) -> "ProfileDraft":
        """Add a free-text condition; blank input is ignored."""
        cleaned = condition.strip()
        if not cleaned:
            return self
        return replace(self, health_conditions=self.health_conditions | {cleaned})

    def remove_condition(self, condition: str) -> "ProfileDraft":
        """Drop ``condition`` from the selection."""
        return replace(self, health_conditions=self.health_conditions - {condition})


@dataclass
class ProfileService:
    """Validates drafts and stores the resulting profile."""

    repository: ProfileRepository
    _feed: ChangeFeed[UserProfile | None] | None = field(default=None, init=False)

    def load_profile(self) -> UserProfile | None:
        """Return the stored profile and refresh subscribers."""
        profile = self.repository.load_profile()
        if self._feed is None:
            self._feed = ChangeFeed(profile)
        else:
            self._feed.publish(profile)
        return profile

    def save_profile(self, draft: ProfileDraft) -> UserProfile:
        """Validate ``draft``, recompute its metrics and store it."""
        profile = build_profile(draft)
        self.repository.save_profile(profile)
        self._get_feed().publish(profile)
        _logger.info(
            "Profile saved: bmi=%.1f calorie_target=%s",
            profile.bmi,
            profile.calorie_target,
        )
        return profile

    def current(self) -> UserProfile | None:
        """Return the last loaded or saved profile without touching storage."""
        return self._get_feed().current()

    def subscribe(self) -> AsyncIterator[UserProfile | None]:
        """Yield the current profile, then each newly saved profile."""
        return self._get_feed().subscribe()

    def _get_feed(self) -> ChangeFeed[UserProfile | None]:
        if self._feed is None:
            self._feed = ChangeFeed(self.repository.load_profile())
        return self._feed


def build_profile(draft: ProfileDraft) -> UserProfile:
    """Turn a draft into a profile, raising InvalidInputError when incomplete."""
    if not draft.nickname.strip():
        raise InvalidInputError("Nickname must not be blank.")
    for label, value in (
        ("Weight", draft.weight_kg),
        ("Height", draft.height_cm),
        ("Age", draft.age),
    ):
        if value is None or not math.isfinite(value) or value <= 0:
            raise InvalidInputError(f"{label} must be a positive number.")
    if draft.activity_factor not in ACTIVITY_FACTORS:
        raise InvalidInputError(
            f"Unknown activity factor: {draft.activity_factor}."
        )
    metrics = compute_body_metrics(
        draft.weight_kg,
        draft.height_cm,
        draft.age,
        draft.gender,
        draft.activity_factor,
    )
    if metrics is None:
        raise InvalidInputError("Body metrics are incomplete.")
    return UserProfile(
        nickname=draft.nickname.strip(),
        weight_kg=float(draft.weight_kg),
        height_cm=float(draft.height_cm),
        age=int(draft.age),
        gender=draft.gender,
        activity_factor=draft.activity_factor,
        bmi=metrics.bmi,
        calorie_target=metrics.calorie_target,
        health_conditions=frozenset(draft.health_conditions),
    )
