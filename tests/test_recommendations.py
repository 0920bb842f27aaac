import pytest

from fitbuddy.utils.recommendations import (
    WORKOUT_PLANS,
    bmi_category,
    calculate_bmi,
    calculate_bmr,
    calculate_daily_calories,
    generate_diet_plan,
    generate_workout_plan,
    round_half_up,
)

BASE_PROFILE = {
    "weight": 70,
    "height": 175,
    "age": 30,
    "gender": "male",
    "activity_level": "moderate",
    "goals": [],
}


def profile(**overrides):
    return dict(BASE_PROFILE, **overrides)


# ---------------- WORKOUT ----------------
@pytest.mark.parametrize("level", ["beginner", "intermediate", "advanced"])
def test_strength_table_for_each_level(level):
    plan = generate_workout_plan({"fitness_level": level, "goals": ["muscle_gain"]})
    table = WORKOUT_PLANS[level]["strength"]
    assert plan.duration == table["duration"]
    assert [e.name for e in plan.exercises] == [e["name"] for e in table["exercises"]]


def test_weight_loss_goal_selects_cardio():
    plan = generate_workout_plan({"fitness_level": "intermediate", "goals": ["weight_loss", "muscle_gain"]})
    assert plan.duration == "25-30 minutes"
    assert plan.exercises[0].name == "Jump Rope"
    assert plan.exercises[0].sets == 4


def test_missing_level_defaults_to_beginner():
    plan = generate_workout_plan({"goals": []})
    assert plan.duration == "20-25 minutes"
    assert plan.exercises[0].name == "Bodyweight Squats"


def test_unknown_level_falls_back_to_beginner_strength():
    plan = generate_workout_plan({"fitness_level": "elite", "goals": ["weight_loss"]})
    assert plan.duration == "20-25 minutes"
    assert len(plan.exercises) == 5


# ---------------- DIET ----------------
def test_bmr_male_and_female():
    assert calculate_bmr(70, 175, 30, "male") == pytest.approx(1648.75)
    assert calculate_bmr(70, 175, 30, "female") == pytest.approx(1482.75)
    assert calculate_bmr(70, 175, 30, "other") == pytest.approx(1482.75)


def test_bmr_missing_input():
    assert calculate_bmr(None, 175, 30) is None
    assert calculate_bmr(70, None, 30) is None
    assert calculate_bmr(70, 175, None) is None


def test_maintenance_plan():
    plan = generate_diet_plan(profile())
    # 1648.75 * 1.55 = 2555.56
    assert plan.target_calories == 2556
    assert plan.macros.protein == 192
    assert plan.macros.carbs == 256
    assert plan.macros.fats == 85


def test_young_adult_plan():
    plan = generate_diet_plan(profile(weight=70, height=170, age=25))
    # 10*70 + 6.25*170 - 5*25 + 5 = 1642.5; * 1.55 = 2545.875
    assert plan.target_calories == 2546
    assert plan.macros.protein == 191
    assert plan.macros.carbs == 255
    assert plan.macros.fats == 85
    assert generate_diet_plan(profile(weight=70, height=170, age=25, goals=["weight_loss"])).target_calories == 2037


def test_weight_loss_deficit():
    plan = generate_diet_plan(profile(goals=["weight_loss"]))
    assert plan.target_calories == round_half_up(2556 * 0.8)
    assert plan.target_calories == 2045


def test_muscle_gain_surplus():
    plan = generate_diet_plan(profile(goals=["muscle_gain"]))
    assert plan.target_calories == 2812


def test_weight_loss_wins_over_muscle_gain():
    both = generate_diet_plan(profile(goals=["muscle_gain", "weight_loss"]))
    loss = generate_diet_plan(profile(goals=["weight_loss"]))
    assert both.target_calories == loss.target_calories


def test_unknown_activity_level_uses_light_multiplier():
    assert calculate_daily_calories(profile(activity_level="moderately_active")) == round_half_up(1648.75 * 1.375)
    assert calculate_daily_calories(profile(activity_level=None)) == 2267


def test_missing_measurements_give_undefined_targets():
    plan = generate_diet_plan(profile(weight=None))
    assert plan.target_calories is None
    assert plan.macros.protein is None
    assert plan.macros.carbs is None
    assert plan.macros.fats is None
    assert set(plan.meal_plan) == {"breakfast", "lunch", "dinner", "snacks"}
    assert len(plan.tips) == 5


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(None) is None
    assert round_half_up(float("nan")) is None


# ---------------- BMI ----------------
def test_bmi():
    assert calculate_bmi(70, 175) == 22.9
    assert bmi_category(22.9) == "Normal"
    assert bmi_category(18.4) == "Underweight"
    assert bmi_category(27) == "Overweight"
    assert bmi_category(31) == "Obese"
    assert calculate_bmi(None, 175) is None
    assert bmi_category(None) is None


def test_overflowing_measurements_give_undefined_targets():
    plan = generate_diet_plan(profile(weight=1e308, height=170, age=25))
    assert plan.target_calories is None
    assert plan.macros.protein is None
    assert round_half_up(float("inf")) is None


def test_bmi_of_degenerate_measurements():
    assert calculate_bmi(70, 1e-200) is None
    assert calculate_bmi(1e308, 1e-3) is None
