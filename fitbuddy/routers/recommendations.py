import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fitbuddy.database.database import get_db
from fitbuddy.crud import crud
from fitbuddy.schemas.recommendations import (
    DietPlan, DietPlanRecordOut, PlanProfileIn, WorkoutPlan
)
from fitbuddy.utils.recommendations import generate_diet_plan, generate_workout_plan
from fitbuddy.utils.security import get_current_user_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


def _require_profile(db: Session, user_id: str):
    profile = crud.get_profile(db, user_id)
    if not profile:
        raise HTTPException(
            status_code=404,
            detail="Profile required. Please set up your profile first to get personalized recommendations.",
        )
    return profile


# ---------------- WORKOUT ----------------
@router.get("/workout", response_model=WorkoutPlan)
def workout_for_stored_profile(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    plan = generate_workout_plan(_require_profile(db, user_id))
    logger.info("Generated %s workout plan for user %s", plan.duration, user_id)
    return plan


@router.post("/workout", response_model=WorkoutPlan, dependencies=[Depends(get_current_user_id)])
def workout_for_profile(profile: PlanProfileIn):
    return generate_workout_plan(profile)


# ---------------- DIET ----------------
@router.get("/diet", response_model=DietPlan)
def diet_for_stored_profile(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    plan = generate_diet_plan(_require_profile(db, user_id))
    logger.info("Generated diet plan with %s daily calories for user %s", plan.target_calories, user_id)
    return plan


@router.post("/diet", response_model=DietPlan, dependencies=[Depends(get_current_user_id)])
def diet_for_profile(profile: PlanProfileIn):
    return generate_diet_plan(profile)


@router.post("/diet/save", response_model=DietPlanRecordOut, status_code=status.HTTP_201_CREATED)
def save_diet_plan(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Generate a plan from the stored profile and keep it."""
    plan = generate_diet_plan(_require_profile(db, user_id))
    return crud.create_diet_plan_record(db, user_id, plan)
