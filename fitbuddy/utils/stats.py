# utils/stats.py
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from fitbuddy.schemas.enums import MealType
from fitbuddy.utils.recommendations import calculate_bmr, round_half_up

DEFAULT_TARGET_CALORIES = 2000
FALLBACK_ACTIVITY_MULTIPLIER = 1.375  # light activity
SUMMARY_WINDOW_DAYS = 30


def as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def _meal_type(meal) -> str:
    value = meal.meal_type
    return value.value if hasattr(value, "value") else value


# ---------------- NUTRITION ----------------
def resolve_target_calories(latest_plan: Optional[dict], profile) -> int:
    """Saved diet plan first, then a light-activity estimate from the profile, then 2000."""
    if latest_plan and latest_plan.get("target_calories"):
        return latest_plan["target_calories"]
    if profile is not None:
        gender = profile.gender.value if hasattr(profile.gender, "value") else profile.gender
        bmr = calculate_bmr(profile.weight, profile.height, profile.age, gender)
        estimate = round_half_up(bmr * FALLBACK_ACTIVITY_MULTIPLIER) if bmr is not None else None
        if estimate is not None:
            return estimate
    return DEFAULT_TARGET_CALORIES


def nutrition_day_summary(meals: Iterable, target_calories: int, day=None) -> dict:
    day = day or datetime.now(timezone.utc).date()
    todays = [m for m in meals if as_utc(m.logged_at).date() == day]

    breakdown = {meal_type.value: 0 for meal_type in MealType}
    for meal in todays:
        breakdown[_meal_type(meal)] += meal.total_calories or 0

    total = sum(breakdown.values())
    progress = min(total / target_calories * 100, 100) if target_calories else 0
    return {
        "date": day,
        "total_calories": total,
        "target_calories": target_calories,
        "remaining_calories": target_calories - total,
        "progress": round(progress, 1),
        "meal_breakdown": breakdown,
        "meals_today": len(todays),
    }


# ---------------- PROGRESS ----------------
def progress_summary(workouts: Sequence, meals: Sequence, records: Sequence, profile=None, now=None) -> dict:
    """
    Thirty-day activity and nutrition totals plus weight change.

    ``records`` must be oldest-first; weight change is latest minus first,
    falling back to the profile weight when there are no records.
    """
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=SUMMARY_WINDOW_DAYS)

    recent_workouts = [w for w in workouts if as_utc(w.completed_at or w.created_at) >= since]
    recent_meals = [m for m in meals if as_utc(m.logged_at) >= since]

    total_minutes = sum(w.duration or 0 for w in recent_workouts)
    total_consumed = sum(m.total_calories or 0 for m in recent_meals)
    meal_count = len(recent_meals)

    profile_weight = profile.weight if profile is not None else None
    weighed = [r.weight for r in records if r.weight is not None]
    current_weight = weighed[-1] if weighed else profile_weight
    initial_weight = weighed[0] if weighed else profile_weight
    weight_change = 0
    if current_weight is not None and initial_weight is not None:
        weight_change = current_weight - initial_weight

    return {
        "workouts": {
            "total": len(recent_workouts),
            "exercises": sum(len(w.exercises or []) for w in recent_workouts),
            "duration_hours": round(total_minutes / 60, 1),
            "calories_burned": sum(w.calories_burned or 0 for w in recent_workouts),
        },
        "nutrition": {
            "meals": meal_count,
            "avg_calories": round_half_up(total_consumed / min(SUMMARY_WINDOW_DAYS, meal_count)) if meal_count else 0,
            "total_calories": total_consumed,
        },
        "progress": {
            "weight_change": round(weight_change, 2),
            "current_weight": current_weight,
        },
    }
