import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from fitbuddy.database.database import get_db
from fitbuddy.crud import crud
from fitbuddy.schemas.workouts import WorkoutCreate, WorkoutOut, WorkoutUpdate
from fitbuddy.utils.security import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/workouts",
    tags=["Workouts"],
)

# ---------------- CREATE ----------------
@router.post("/", response_model=WorkoutOut, status_code=status.HTTP_201_CREATED)
def create_workout(
    workout: WorkoutCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    stored = crud.create_workout(db, user_id, workout)
    logger.info("Workout %s logged for user %s", stored.id, user_id)
    return stored


# ---------------- LIST ----------------
@router.get("/", response_model=List[WorkoutOut])
def list_workouts(
    limit: Optional[int] = Query(None, description="Limit number of rows returned"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """The caller's workouts, newest first."""
    return crud.get_workouts(db, user_id, limit=limit)


# ---------------- GET ----------------
@router.get("/{workout_id}", response_model=WorkoutOut)
def get_workout(
    workout_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    workout = crud.get_workout(db, user_id, workout_id)
    if not workout:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


# ---------------- UPDATE ----------------
@router.put("/{workout_id}", response_model=WorkoutOut)
def update_workout(
    workout_id: int,
    updates: WorkoutUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    workout = crud.update_workout(db, user_id, workout_id, updates)
    if not workout:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


# ---------------- DELETE ----------------
@router.delete("/{workout_id}")
def delete_workout(
    workout_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    if not crud.delete_workout(db, user_id, workout_id):
        raise HTTPException(status_code=404, detail="Workout not found")
    logger.info("Workout %s deleted by user %s", workout_id, user_id)
    return {"detail": f"Workout with id {workout_id} deleted"}
