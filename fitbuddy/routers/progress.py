import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from fitbuddy.database.database import get_db
from fitbuddy.crud import crud
from fitbuddy.schemas.progress import ProgressCreate, ProgressOut, ProgressSummary, ProgressUpdate
from fitbuddy.utils.security import get_current_user_id
from fitbuddy.utils.stats import progress_summary

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/progress",
    tags=["Progress"],
)

# ---------------- CREATE ----------------
@router.post("/", response_model=ProgressOut, status_code=status.HTTP_201_CREATED)
def create_progress_record(
    record: ProgressCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    return crud.create_progress_record(db, user_id, record)


# ---------------- LIST ----------------
@router.get("/", response_model=List[ProgressOut])
def list_progress_records(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    return crud.get_progress_records(db, user_id)


# ---------------- SUMMARY ----------------
@router.get("/summary", response_model=ProgressSummary)
def get_progress_summary(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Thirty-day workout and nutrition totals plus weight change."""
    return progress_summary(
        workouts=crud.get_workouts(db, user_id),
        meals=crud.get_meals(db, user_id),
        records=crud.get_progress_records(db, user_id, ascending=True),
        profile=crud.get_profile(db, user_id),
    )


# ---------------- GET ----------------
@router.get("/{record_id}", response_model=ProgressOut)
def get_progress_record(
    record_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    record = crud.get_progress_record(db, user_id, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Progress record not found")
    return record


# ---------------- UPDATE ----------------
@router.put("/{record_id}", response_model=ProgressOut)
def update_progress_record(
    record_id: int,
    updates: ProgressUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    record = crud.update_progress_record(db, user_id, record_id, updates)
    if not record:
        raise HTTPException(status_code=404, detail="Progress record not found")
    return record


# ---------------- DELETE ----------------
@router.delete("/{record_id}")
def delete_progress_record(
    record_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    if not crud.delete_progress_record(db, user_id, record_id):
        raise HTTPException(status_code=404, detail="Progress record not found")
    logger.info("Progress record %s deleted by user %s", record_id, user_id)
    return {"detail": f"Progress record with id {record_id} deleted"}
