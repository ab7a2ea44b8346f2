"""Body metric calculations (BMI, Mifflin-St Jeor BMR, TDEE, calorie target)."""

import math

from smart_diet.domain.profile import BodyMetrics, Gender

CALORIE_DEFICIT = 500
MIN_CALORIE_TARGET = 1200

_MALE_OFFSET = 5
_FEMALE_OFFSET = -161


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """Return body mass index for metric inputs."""
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def calculate_bmr(
    weight_kg: float, height_cm: float, age: int, gender: Gender
) -> float:
    """Return basal metabolic rate using the Mifflin-St Jeor equation."""
    offset = _MALE_OFFSET if gender == Gender.MALE else _FEMALE_OFFSET
    return 10 * weight_kg + 6.25 * height_cm - 5 * age + offset


def calculate_tdee(bmr: float, activity_factor: float) -> float:
    """Return total daily energy expenditure."""
    return bmr * activity_factor


def calculate_calorie_target(tdee: float) -> int:
    """Return a weight-loss target: TDEE minus the deficit, never under the floor."""
    return max(MIN_CALORIE_TARGET, _round_half_up(tdee - CALORIE_DEFICIT))


def compute_body_metrics(
    weight_kg: float | None,
    height_cm: float | None,
    age: int | None,
    gender: Gender | None,
    activity_factor: float | None,
) -> BodyMetrics | None:
    """Compute all derived metrics, or None while any input is missing or unusable."""
    if gender is None:
        return None
    for value in (weight_kg, height_cm, age, activity_factor):
        if value is None or not math.isfinite(value) or value <= 0:
            return None
    bmr = calculate_bmr(weight_kg, height_cm, age, gender)
    tdee = calculate_tdee(bmr, activity_factor)
    if not math.isfinite(tdee):
        return None
    return BodyMetrics(
        bmi=calculate_bmi(weight_kg, height_cm),
        bmr=bmr,
        tdee=tdee,
        calorie_target=calculate_calorie_target(tdee),
    )


def _round_half_up(value: float) -> int:
    # round() uses banker's rounding; 1394.5 must become 1395.
    return math.floor(value + 0.5)
