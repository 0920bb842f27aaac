import logging
from fastapi import HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Any, Dict, List, Optional

from fitbuddy.models.models import (
    UserProfile, Workout, Meal, ProgressRecord, ChatMessage, DietPlanRecord
)
from fitbuddy.schemas.workouts import WorkoutCreate, WorkoutUpdate
from fitbuddy.schemas.meals import MealCreate, MealUpdate
from fitbuddy.schemas.progress import ProgressCreate, ProgressUpdate
from fitbuddy.schemas.recommendations import DietPlan

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {
    "name", "age", "weight", "height", "gender", "fitness_level", "activity_level",
    "goals", "equipment", "dietary_restrictions", "daily_diet",
}


def _as_payload(data: Any, exclude_unset: bool = False) -> Dict[str, Any]:
    """Accept a pydantic model or a plain dict."""
    if hasattr(data, "model_dump"):
        return data.model_dump(exclude_unset=exclude_unset)
    return dict(data)


def _profile_payload(profile: Any) -> Dict[str, Any]:
    payload = _as_payload(profile)
    unknown = set(payload) - PROFILE_FIELDS - {"user_id"}
    if unknown:
        logger.warning("Ignoring unknown profile fields: %s", sorted(unknown))
    payload = {k: v for k, v in payload.items() if k in PROFILE_FIELDS}
    # Profile names are NOT NULL; onboarding never asks for one
    if not payload.get("name"):
        payload["name"] = "User"
    return payload


# ---------------------------- PROFILES ----------------------------
def get_profile(db: Session, user_id: str) -> Optional[UserProfile]:
    return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()


def create_profile(db: Session, user_id: str, profile: Any) -> UserProfile:
    """Insert one profile row. A second insert for the same user is a 409."""
    db_profile = UserProfile(user_id=user_id, **_profile_payload(profile))
    db.add(db_profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Profile already exists")
    db.refresh(db_profile)
    logger.info("Created profile for user %s", user_id)
    return db_profile


def update_profile(db: Session, user_id: str, profile: Any) -> UserProfile:
    """Replace the user's profile wholesale, creating it if missing."""
    payload = _profile_payload(profile)
    db_profile = get_profile(db, user_id)
    if db_profile:
        for k, v in payload.items():
            setattr(db_profile, k, v)
    else:
        db_profile = UserProfile(user_id=user_id, **payload)
        db.add(db_profile)

    db.commit()
    db.refresh(db_profile)
    return db_profile


# ---------------------------- WORKOUTS ----------------------------
def create_workout(db: Session, user_id: str, workout: WorkoutCreate) -> Workout:
    payload = workout.model_dump(mode="json")
    payload["completed_at"] = workout.completed_at
    db_workout = Workout(user_id=user_id, **payload)
    db.add(db_workout)
    db.commit()
    db.refresh(db_workout)
    return db_workout


def get_workouts(db: Session, user_id: str, limit: Optional[int] = None) -> List[Workout]:
    query = (
        db.query(Workout)
        .filter(Workout.user_id == user_id)
        .order_by(Workout.created_at.desc(), Workout.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def get_workout(db: Session, user_id: str, workout_id: int) -> Optional[Workout]:
    return db.query(Workout).filter(Workout.id == workout_id, Workout.user_id == user_id).first()


def update_workout(db: Session, user_id: str, workout_id: int, updates: WorkoutUpdate) -> Optional[Workout]:
    workout = get_workout(db, user_id, workout_id)
    if not workout:
        return None
    for field, value in updates.model_dump(exclude_unset=True, mode="json").items():
        if field == "completed_at":
            value = updates.completed_at
        setattr(workout, field, value)
    db.commit()
    db.refresh(workout)
    return workout


def delete_workout(db: Session, user_id: str, workout_id: int) -> Optional[Workout]:
    workout = get_workout(db, user_id, workout_id)
    if workout:
        db.delete(workout)
        db.commit()
    return workout


# ---------------------------- MEALS ----------------------------
def _meal_total(foods: List[Dict[str, Any]]) -> int:
    return sum(food.get("calories") or 0 for food in foods)


def create_meal(db: Session, user_id: str, meal: MealCreate) -> Meal:
    foods = [food.model_dump() for food in meal.foods]
    db_meal = Meal(
        user_id=user_id,
        meal_type=meal.meal_type,
        foods=foods,
        total_calories=meal.total_calories if meal.total_calories is not None else _meal_total(foods),
        notes=meal.notes,
    )
    if meal.logged_at:
        db_meal.logged_at = meal.logged_at
    db.add(db_meal)
    db.commit()
    db.refresh(db_meal)
    return db_meal


def get_meals(db: Session, user_id: str, limit: Optional[int] = None) -> List[Meal]:
    query = (
        db.query(Meal)
        .filter(Meal.user_id == user_id)
        .order_by(Meal.logged_at.desc(), Meal.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def get_meal(db: Session, user_id: str, meal_id: int) -> Optional[Meal]:
    return db.query(Meal).filter(Meal.id == meal_id, Meal.user_id == user_id).first()


def update_meal(db: Session, user_id: str, meal_id: int, updates: MealUpdate) -> Optional[Meal]:
    meal = get_meal(db, user_id, meal_id)
    if not meal:
        return None
    changes = updates.model_dump(exclude_unset=True)
    if "foods" in changes:
        changes["foods"] = changes["foods"] or []
        if changes.get("total_calories") is None:
            changes["total_calories"] = _meal_total(changes["foods"])
    for field, value in changes.items():
        if value is None and field in ("meal_type", "total_calories", "logged_at"):
            continue
        setattr(meal, field, value)
    db.commit()
    db.refresh(meal)
    return meal


def delete_meal(db: Session, user_id: str, meal_id: int) -> Optional[Meal]:
    meal = get_meal(db, user_id, meal_id)
    if meal:
        db.delete(meal)
        db.commit()
    return meal


# ---------------------------- PROGRESS ----------------------------
def create_progress_record(db: Session, user_id: str, record: ProgressCreate) -> ProgressRecord:
    payload = record.model_dump(exclude_unset=True)
    if payload.get("recorded_at") is None:
        payload.pop("recorded_at", None)
    db_record = ProgressRecord(user_id=user_id, **payload)
    db.add(db_record)
    db.commit()
    db.refresh(db_record)
    return db_record


def get_progress_records(db: Session, user_id: str, ascending: bool = False) -> List[ProgressRecord]:
    order = (
        (ProgressRecord.recorded_at.asc(), ProgressRecord.id.asc())
        if ascending
        else (ProgressRecord.recorded_at.desc(), ProgressRecord.id.desc())
    )
    return db.query(ProgressRecord).filter(ProgressRecord.user_id == user_id).order_by(*order).all()


def get_progress_record(db: Session, user_id: str, record_id: int) -> Optional[ProgressRecord]:
    return (
        db.query(ProgressRecord)
        .filter(ProgressRecord.id == record_id, ProgressRecord.user_id == user_id)
        .first()
    )


def update_progress_record(db: Session, user_id: str, record_id: int, updates: ProgressUpdate) -> Optional[ProgressRecord]:
    record = get_progress_record(db, user_id, record_id)
    if not record:
        return None
    for field, value in updates.model_dump(exclude_unset=True).items():
        if field == "recorded_at" and value is None:
            continue
        setattr(record, field, value)
    db.commit()
    db.refresh(record)
    return record


def delete_progress_record(db: Session, user_id: str, record_id: int) -> Optional[ProgressRecord]:
    record = get_progress_record(db, user_id, record_id)
    if record:
        db.delete(record)
        db.commit()
    return record


# ---------------------------- CHAT MESSAGES ----------------------------
def create_chat_message(
    db: Session,
    user_id: str,
    message: str,
    is_user: bool,
    context: Optional[str] = None,
    sentiment: Optional[str] = None,
) -> ChatMessage:
    db_message = ChatMessage(
        user_id=user_id,
        message=message,
        is_user=is_user,
        context=context,
        sentiment=sentiment,
    )
    db.add(db_message)
    db.commit()
    db.refresh(db_message)
    return db_message


def get_chat_messages(db: Session, user_id: str) -> List[ChatMessage]:
    """All of a user's messages, oldest first."""
    return (
        db.query(ChatMessage)
        .filter(ChatMessage.user_id == user_id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        .all()
    )


def get_recent_chat_messages(db: Session, user_id: str, limit: int = 10) -> List[ChatMessage]:
    """The latest ``limit`` messages, returned oldest first."""
    rows = (
        db.query(ChatMessage)
        .filter(ChatMessage.user_id == user_id)
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
        .limit(limit)
        .all()
    )
    return list(reversed(rows))


def delete_chat_messages(db: Session, user_id: str) -> int:
    deleted = db.query(ChatMessage).filter(ChatMessage.user_id == user_id).delete()
    db.commit()
    return deleted


# ---------------------------- DIET PLANS ----------------------------
def create_diet_plan_record(db: Session, user_id: str, plan: DietPlan) -> DietPlanRecord:
    record = DietPlanRecord(user_id=user_id, plan_data=plan.model_dump())
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def get_latest_diet_plan(db: Session, user_id: str) -> Optional[DietPlanRecord]:
    return (
        db.query(DietPlanRecord)
        .filter(DietPlanRecord.user_id == user_id)
        .order_by(DietPlanRecord.created_at.desc(), DietPlanRecord.id.desc())
        .first()
    )
