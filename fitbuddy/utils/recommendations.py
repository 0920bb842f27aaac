import logging
import math
from typing import Any, Dict, Optional

from fitbuddy.schemas.enums import FitnessLevel, WorkoutTrack
from fitbuddy.schemas.recommendations import DietPlan, Macros, WorkoutPlan

logger = logging.getLogger(__name__)

# ---------------- WORKOUT TABLES ----------------
WORKOUT_PLANS: Dict[str, Dict[str, Dict[str, Any]]] = {
    FitnessLevel.BEGINNER.value: {
        WorkoutTrack.STRENGTH.value: {
            "exercises": [
                {"name": "Bodyweight Squats", "sets": 3, "reps": "8-12", "rest": "60s"},
                {"name": "Modified Push-ups", "sets": 3, "reps": "5-10", "rest": "60s"},
                {"name": "Plank Hold", "sets": 3, "reps": "15-30s", "rest": "45s"},
                {"name": "Glute Bridges", "sets": 3, "reps": "10-15", "rest": "45s"},
                {"name": "Wall Sits", "sets": 2, "reps": "15-30s", "rest": "60s"},
            ],
            "duration": "20-25 minutes",
        },
        WorkoutTrack.CARDIO.value: {
            "exercises": [
                {"name": "Brisk Walking", "sets": 1, "reps": "15-20 min", "rest": "N/A"},
                {"name": "Marching in Place", "sets": 3, "reps": "1 min", "rest": "30s"},
                {"name": "Step-ups (using stairs)", "sets": 3, "reps": "30s", "rest": "30s"},
                {"name": "Arm Circles", "sets": 2, "reps": "30s each direction", "rest": "15s"},
            ],
            "duration": "15-20 minutes",
        },
    },
    FitnessLevel.INTERMEDIATE.value: {
        WorkoutTrack.STRENGTH.value: {
            "exercises": [
                {"name": "Goblet Squats", "sets": 4, "reps": "12-15", "rest": "90s"},
                {"name": "Push-ups", "sets": 3, "reps": "10-15", "rest": "60s"},
                {"name": "Dumbbell Rows", "sets": 3, "reps": "12-15 each arm", "rest": "60s"},
                {"name": "Lunges", "sets": 3, "reps": "10 each leg", "rest": "60s"},
                {"name": "Plank to Downward Dog", "sets": 3, "reps": "8-10", "rest": "45s"},
            ],
            "duration": "30-35 minutes",
        },
        WorkoutTrack.CARDIO.value: {
            "exercises": [
                {"name": "Jump Rope", "sets": 4, "reps": "45s", "rest": "15s"},
                {"name": "High Knees", "sets": 3, "reps": "30s", "rest": "30s"},
                {"name": "Burpees", "sets": 3, "reps": "5-8", "rest": "60s"},
                {"name": "Mountain Climbers", "sets": 3, "reps": "30s", "rest": "30s"},
            ],
            "duration": "25-30 minutes",
        },
    },
    FitnessLevel.ADVANCED.value: {
        WorkoutTrack.STRENGTH.value: {
            "exercises": [
                {"name": "Barbell Squats", "sets": 4, "reps": "8-12", "rest": "2-3min"},
                {"name": "Deadlifts", "sets": 4, "reps": "6-10", "rest": "2-3min"},
                {"name": "Pull-ups/Chin-ups", "sets": 3, "reps": "8-12", "rest": "90s"},
                {"name": "Overhead Press", "sets": 3, "reps": "8-12", "rest": "90s"},
                {"name": "Weighted Lunges", "sets": 3, "reps": "10-12 each leg", "rest": "90s"},
            ],
            "duration": "45-60 minutes",
        },
        WorkoutTrack.CARDIO.value: {
            "exercises": [
                {"name": "HIIT Sprints", "sets": 6, "reps": "30s sprint, 90s walk", "rest": "N/A"},
                {"name": "Box Jumps", "sets": 4, "reps": "8-10", "rest": "90s"},
                {"name": "Kettlebell Swings", "sets": 4, "reps": "20-25", "rest": "60s"},
                {"name": "Battle Ropes", "sets": 3, "reps": "30s", "rest": "90s"},
            ],
            "duration": "25-35 minutes",
        },
    },
}

# ---------------- DIET CONSTANTS ----------------
ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.375

WEIGHT_LOSS_FACTOR = 0.8   # 20% deficit
MUSCLE_GAIN_FACTOR = 1.1   # 10% surplus

PROTEIN_SHARE = 0.3
CARBS_SHARE = 0.4
FATS_SHARE = 0.3

MEAL_PLAN = {
    "breakfast": [
        "2 eggs scrambled with spinach",
        "1 slice whole grain toast",
        "1/2 avocado",
        "1 cup berries",
    ],
    "lunch": [
        "Grilled chicken breast (4oz)",
        "Quinoa salad with vegetables",
        "Mixed greens with olive oil dressing",
        "1 apple",
    ],
    "dinner": [
        "Baked salmon (4oz)",
        "Roasted sweet potato",
        "Steamed broccoli",
        "Small side salad",
    ],
    "snacks": [
        "Greek yogurt with nuts",
        "Protein smoothie",
        "Hummus with vegetables",
    ],
}

DIET_TIPS = [
    "Drink at least 8 glasses of water daily",
    "Eat every 3-4 hours to maintain energy",
    "Include protein in every meal",
    "Choose complex carbohydrates over simple sugars",
    "Don't skip meals, especially breakfast",
]


# ---------------- HELPERS ----------------
def _getter(profile: Any):
    """Read fields from a dict, a pydantic model or an ORM row alike."""
    if isinstance(profile, dict):
        return profile.get
    return lambda key, default=None: getattr(profile, key, default)


def _enum_value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


def round_half_up(value: Optional[float]) -> Optional[int]:
    """Round .5 upwards; undefined input (None, NaN, overflowed to inf) stays undefined."""
    if value is None or not math.isfinite(value):
        return None
    return int(math.floor(value + 0.5))


def _scale(value: Optional[float], factor: float) -> Optional[float]:
    return None if value is None else value * factor


def _macro_grams(calories: Optional[int], share: float, kcal_per_gram: int) -> Optional[int]:
    if calories is None:
        return None
    return round_half_up((calories * share) / kcal_per_gram)


# ---------------- WORKOUT ----------------
def generate_workout_plan(profile: Any) -> WorkoutPlan:
    """
    Pick a fixed exercise table by fitness level and goal.

    Goals containing "weight_loss" select the cardio track, anything else
    strength. Unknown (level, track) pairs fall back to beginner strength.
    """
    get = _getter(profile)
    level = _enum_value(get("fitness_level")) or FitnessLevel.BEGINNER.value
    goals = get("goals") or []
    track = WorkoutTrack.CARDIO.value if "weight_loss" in goals else WorkoutTrack.STRENGTH.value

    table = WORKOUT_PLANS.get(level, {}).get(track)
    if table is None:
        logger.debug("No workout table for (%s, %s); using beginner strength", level, track)
        table = WORKOUT_PLANS[FitnessLevel.BEGINNER.value][WorkoutTrack.STRENGTH.value]

    return WorkoutPlan(duration=table["duration"], exercises=table["exercises"])


# ---------------- DIET ----------------
def calculate_bmr(weight, height, age, gender: str = "male") -> Optional[float]:
    """Mifflin-St Jeor. Any gender other than "male" uses the female constant."""
    if weight is None or height is None or age is None:
        return None
    base = 10 * weight + 6.25 * height - 5 * age
    return base + 5 if gender == "male" else base - 161


def calculate_daily_calories(profile: Any) -> Optional[int]:
    get = _getter(profile)
    gender = _enum_value(get("gender")) or "male"
    bmr = calculate_bmr(get("weight"), get("height"), get("age"), gender)
    multiplier = ACTIVITY_MULTIPLIERS.get(get("activity_level"), DEFAULT_ACTIVITY_MULTIPLIER)
    return round_half_up(_scale(bmr, multiplier))


def generate_diet_plan(profile: Any) -> DietPlan:
    """
    Daily calorie target and macro split from the profile.

    weight_loss is checked before muscle_gain, so a profile carrying both
    tags only gets the deficit. Missing weight/height/age yields None
    for calories and macros rather than an error.
    """
    get = _getter(profile)
    goals = get("goals") or []
    daily_calories = calculate_daily_calories(profile)

    target_calories = daily_calories
    if "weight_loss" in goals:
        target_calories = round_half_up(_scale(daily_calories, WEIGHT_LOSS_FACTOR))
    elif "muscle_gain" in goals:
        target_calories = round_half_up(_scale(daily_calories, MUSCLE_GAIN_FACTOR))

    macros = Macros(
        protein=_macro_grams(target_calories, PROTEIN_SHARE, 4),
        carbs=_macro_grams(target_calories, CARBS_SHARE, 4),
        fats=_macro_grams(target_calories, FATS_SHARE, 9),
    )

    return DietPlan(
        target_calories=target_calories,
        macros=macros,
        meal_plan={slot: list(foods) for slot, foods in MEAL_PLAN.items()},
        tips=list(DIET_TIPS),
    )


# ---------------- BMI ----------------
def calculate_bmi(weight: Optional[float], height: Optional[float]) -> Optional[float]:
    if not weight or not height:
        return None
    height_m = height / 100
    if not height_m * height_m:
        return None
    bmi = weight / (height_m * height_m)
    return round(bmi, 1) if math.isfinite(bmi) else None


def bmi_category(bmi: Optional[float]) -> Optional[str]:
    if bmi is None:
        return None
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal"
    if bmi < 30:
        return "Overweight"
    return "Obese"
