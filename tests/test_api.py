from unittest.mock import patch

from fitbuddy.utils.security import create_access_token


def auth_headers(user_id):
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


PROFILE = {
    "name": "Sam",
    "age": 30,
    "weight": 70,
    "height": 175,
    "gender": "male",
    "fitness_level": "intermediate",
    "activity_level": "moderate",
    "goals": ["muscle_gain"],
    "equipment": ["dumbbells"],
}


def test_ping(client):
    assert client.get("/ping").json() == {"status": "ok"}


def test_requests_without_token_are_rejected(client):
    assert client.get("/profile/").status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.get("/profile/", headers=bad).status_code == 401


# ---------------- PROFILE ----------------
def test_profile_lifecycle(client, headers):
    assert client.get("/profile/", headers=headers).status_code == 404

    r = client.post("/profile/", json=PROFILE, headers=headers)
    assert r.status_code == 201
    body = r.json()
    assert body["user_id"] == "user-1"
    assert body["bmi"] == 22.9
    assert body["bmi_category"] == "Normal"

    assert client.post("/profile/", json=PROFILE, headers=headers).status_code == 409

    r = client.put("/profile/", json=dict(PROFILE, weight=95), headers=headers)
    assert r.status_code == 200
    assert r.json()["weight"] == 95
    assert r.json()["bmi_category"] == "Obese"


def test_profile_numbers_are_not_range_checked(client, headers):
    r = client.post("/profile/", json=dict(PROFILE, height=40, weight=500), headers=headers)
    assert r.status_code == 201


def test_profiles_are_per_user(client, headers):
    client.post("/profile/", json=PROFILE, headers=headers)
    assert client.get("/profile/", headers=auth_headers("user-2")).status_code == 404


# ---------------- RECOMMENDATIONS ----------------
def test_recommendations_need_a_profile(client, headers):
    r = client.get("/recommendations/workout", headers=headers)
    assert r.status_code == 404
    assert "Profile required" in r.json()["detail"]


def test_recommendations_from_stored_profile(client, headers):
    client.post("/profile/", json=PROFILE, headers=headers)

    workout = client.get("/recommendations/workout", headers=headers).json()
    assert workout["duration"] == "30-35 minutes"
    assert workout["exercises"][0]["name"] == "Goblet Squats"

    diet = client.get("/recommendations/diet", headers=headers).json()
    # maintenance 2556 with a 10% surplus
    assert diet["target_calories"] == 2812
    assert diet["macros"] == {"protein": 211, "carbs": 281, "fats": 94}


def test_recommendations_from_request_body(client, headers):
    r = client.post("/recommendations/diet", json={"goals": ["weight_loss"]}, headers=headers)
    assert r.status_code == 200
    assert r.json()["target_calories"] is None
    assert r.json()["macros"] == {"protein": None, "carbs": None, "fats": None}

    r = client.post("/recommendations/workout", json={"fitness_level": "advanced", "goals": ["weight_loss"]}, headers=headers)
    assert r.json()["exercises"][0]["name"] == "HIIT Sprints"


# ---------------- MEALS ----------------
def test_meal_needs_foods(client, headers):
    r = client.post("/meals/", json={"meal_type": "lunch", "foods": []}, headers=headers)
    assert r.status_code == 400


def test_meals_and_daily_summary(client, headers):
    client.post("/profile/", json=dict(PROFILE, goals=[]), headers=headers)
    r = client.post("/meals/", json={
        "meal_type": "breakfast",
        "foods": [{"name": "Oats", "calories": 400}, {"name": "Banana", "calories": 150}],
    }, headers=headers)
    assert r.status_code == 201
    meal = r.json()
    assert meal["total_calories"] == 550

    summary = client.get("/meals/summary/today", headers=headers).json()
    # no saved plan: light-activity estimate round(1648.75 * 1.375)
    assert summary["target_calories"] == 2267
    assert summary["total_calories"] == 550
    assert summary["remaining_calories"] == 1717
    assert summary["progress"] == 24.3
    assert summary["meal_breakdown"]["breakfast"] == 550
    assert summary["meals_today"] == 1

    saved = client.post("/recommendations/diet/save", headers=headers)
    assert saved.status_code == 201
    assert saved.json()["plan_data"]["target_calories"] == 2556
    assert client.get("/meals/summary/today", headers=headers).json()["target_calories"] == 2556

    r = client.put(f"/meals/{meal['id']}", json={"foods": [{"name": "Oats", "calories": 300}]}, headers=headers)
    assert r.json()["total_calories"] == 300

    assert client.delete(f"/meals/{meal['id']}", headers=headers).status_code == 200
    assert client.get(f"/meals/{meal['id']}", headers=headers).status_code == 404


def test_daily_summary_defaults_without_profile(client, headers):
    summary = client.get("/meals/summary/today", headers=headers).json()
    assert summary["target_calories"] == 2000
    assert summary["progress"] == 0


# ---------------- WORKOUTS ----------------
def test_workout_crud(client, headers):
    r = client.post("/workouts/", json={
        "name": "Leg day",
        "type": "strength",
        "duration": 90,
        "calories_burned": 500,
        "exercises": [
            {"name": "Squats", "sets": 4, "reps": "8-12", "rest": "90s"},
            {"name": "Lunges", "sets": 3, "reps": "10", "rest": "60s"},
        ],
    }, headers=headers)
    assert r.status_code == 201
    workout_id = r.json()["id"]

    assert len(client.get("/workouts/", headers=headers).json()) == 1
    r = client.put(f"/workouts/{workout_id}", json={"notes": "felt strong"}, headers=headers)
    assert r.json()["notes"] == "felt strong"
    assert r.json()["duration"] == 90

    other = auth_headers("user-2")
    assert client.get(f"/workouts/{workout_id}", headers=other).status_code == 404
    assert client.delete(f"/workouts/{workout_id}", headers=headers).status_code == 200
    assert client.get("/workouts/", headers=headers).json() == []


# ---------------- PROGRESS ----------------
def test_progress_summary(client, headers):
    client.post("/workouts/", json={
        "name": "Leg day",
        "type": "strength",
        "duration": 90,
        "calories_burned": 500,
        "exercises": [{"name": "Squats", "sets": 4, "reps": "8-12", "rest": "90s"}],
    }, headers=headers)
    client.post("/meals/", json={"meal_type": "dinner", "foods": [{"name": "Salmon", "calories": 600}]}, headers=headers)
    client.post("/progress/", json={"weight": 80, "recorded_at": "2024-01-01T08:00:00"}, headers=headers)
    client.post("/progress/", json={"weight": 78.5, "recorded_at": "2024-02-01T08:00:00"}, headers=headers)

    summary = client.get("/progress/summary", headers=headers).json()
    assert summary["workouts"] == {"total": 1, "exercises": 1, "duration_hours": 1.5, "calories_burned": 500}
    assert summary["nutrition"] == {"meals": 1, "avg_calories": 600, "total_calories": 600}
    assert summary["progress"] == {"weight_change": -1.5, "current_weight": 78.5}

    records = client.get("/progress/", headers=headers).json()
    assert [r["weight"] for r in records] == [78.5, 80]


def test_progress_summary_uses_profile_weight(client, headers):
    client.post("/profile/", json=PROFILE, headers=headers)
    summary = client.get("/progress/summary", headers=headers).json()
    assert summary["progress"] == {"weight_change": 0, "current_weight": 70}
    assert summary["nutrition"]["avg_calories"] == 0


# ---------------- ONBOARDING ----------------
def test_onboarding_flow_creates_profile(client, headers):
    r = client.post("/onboarding/session", headers=headers)
    assert r.status_code == 201
    assert r.json()["phase"] == "greeting"

    r = client.post("/onboarding/session/message", json={"message": "hi coach"}, headers=headers)
    session = r.json()
    assert session["phase"] == "structured"
    assert session["current_step"]["id"] == "height_weight"

    r = client.post("/onboarding/session/answer", json={"value": {"height": 40, "weight": 70}}, headers=headers)
    assert r.json()["accepted"] is False
    assert r.json()["session"]["cursor"] == 0

    for value in (
        {"height": 180, "weight": 82, "unit": "metric"},
        "lightly_active",
        "Eggs in the morning, sandwiches for lunch",
        ["gym_membership"],
        ["vegetarian", "nut_allergy"],
    ):
        r = client.post("/onboarding/session/answer", json={"value": value}, headers=headers)
        assert r.json()["accepted"] is True

    session = r.json()["session"]
    assert session["finished"] is True
    assert session["progress"] == 100
    assert session["complete_after_ms"] == 2000
    assert session["notification"]["title"] == "Profile Created!"

    profile = client.get("/profile/", headers=headers).json()
    assert profile["height"] == 180
    assert profile["weight"] == 82
    assert profile["name"] == "User"
    assert profile["activity_level"] == "lightly_active"
    assert profile["dietary_restrictions"] == ["vegetarian", "nut_allergy"]
    assert profile["daily_diet"] == "Eggs in the morning, sandwiches for lunch"
    assert client.get("/onboarding/session", headers=headers).status_code == 404

    assert client.post("/onboarding/session", headers=headers).status_code == 409


def test_onboarding_completion_failure_and_retry(client, headers):
    client.post("/onboarding/session", headers=headers)
    client.post("/onboarding/session/message", json={"message": "hello"}, headers=headers)
    answers = (
        {"height": 170, "weight": 70},
        "sedentary",
        "Mostly home cooked meals",
        ["bodyweight_only"],
    )
    for value in answers:
        client.post("/onboarding/session/answer", json={"value": value}, headers=headers)

    # a profile appears elsewhere before the last answer lands
    client.post("/profile/", json=PROFILE, headers=headers)
    r = client.post("/onboarding/session/answer", json={"value": ["none"]}, headers=headers)
    session = r.json()["session"]
    assert r.json()["accepted"] is True
    assert session["failed"] is True
    assert session["finished"] is False
    assert session["notification"]["variant"] == "destructive"

    with patch("fitbuddy.routers.onboarding.create_profile") as create:
        r = client.post("/onboarding/session/complete", headers=headers)
    assert r.json()["accepted"] is True
    assert r.json()["session"]["finished"] is True
    create.assert_called_once()

    # the finished session is no longer held
    assert client.post("/onboarding/session/complete", headers=headers).status_code == 404


def test_onboarding_session_lookup(client, headers):
    assert client.get("/onboarding/session", headers=headers).status_code == 404
    client.post("/onboarding/session", headers=headers)
    assert client.get("/onboarding/session", headers=headers).status_code == 200
    assert client.post("/onboarding/session/complete", headers=headers).status_code == 400
    client.delete("/onboarding/session", headers=headers)
    assert client.get("/onboarding/session", headers=headers).status_code == 404
