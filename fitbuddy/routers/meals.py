import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from fitbuddy.database.database import get_db
from fitbuddy.crud import crud
from fitbuddy.schemas.meals import MealCreate, MealOut, MealUpdate, NutritionDaySummary
from fitbuddy.utils.security import get_current_user_id
from fitbuddy.utils.stats import nutrition_day_summary, resolve_target_calories

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/meals",
    tags=["Meals"],
)

# ---------------- CREATE ----------------
@router.post("/", response_model=MealOut, status_code=status.HTTP_201_CREATED)
def create_meal(
    meal: MealCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Log a meal; total calories default to the sum of its foods."""
    if not meal.foods:
        raise HTTPException(status_code=400, detail="Please add at least one food item with calories.")
    stored = crud.create_meal(db, user_id, meal)
    logger.info("Meal %s (%s kcal) logged for user %s", stored.id, stored.total_calories, user_id)
    return stored


# ---------------- LIST ----------------
@router.get("/", response_model=List[MealOut])
def list_meals(
    limit: Optional[int] = Query(None, description="Limit number of rows returned"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    return crud.get_meals(db, user_id, limit=limit)


# ---------------- TODAY ----------------
@router.get("/summary/today", response_model=NutritionDaySummary)
def today_summary(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Calories eaten today against the target from the latest saved diet plan or the profile."""
    latest_plan = crud.get_latest_diet_plan(db, user_id)
    target = resolve_target_calories(
        latest_plan.plan_data if latest_plan else None,
        crud.get_profile(db, user_id),
    )
    return nutrition_day_summary(crud.get_meals(db, user_id), target)


# ---------------- GET ----------------
@router.get("/{meal_id}", response_model=MealOut)
def get_meal(
    meal_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    meal = crud.get_meal(db, user_id, meal_id)
    if not meal:
        raise HTTPException(status_code=404, detail="Meal not found")
    return meal


# ---------------- UPDATE ----------------
@router.put("/{meal_id}", response_model=MealOut)
def update_meal(
    meal_id: int,
    updates: MealUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    meal = crud.update_meal(db, user_id, meal_id, updates)
    if not meal:
        raise HTTPException(status_code=404, detail="Meal not found")
    return meal


# ---------------- DELETE ----------------
@router.delete("/{meal_id}")
def delete_meal(
    meal_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    if not crud.delete_meal(db, user_id, meal_id):
        raise HTTPException(status_code=404, detail="Meal not found")
    return {"detail": f"Meal with id {meal_id} deleted"}
