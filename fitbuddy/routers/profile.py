from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from fitbuddy.database.database import get_db
from fitbuddy.crud import crud
from fitbuddy.schemas.profile import ProfileCreate, ProfileOut
from fitbuddy.utils.recommendations import calculate_bmi, bmi_category
from fitbuddy.utils.security import get_current_user_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/profile", tags=["Profile"])


def _profile_out(profile) -> ProfileOut:
    out = ProfileOut.model_validate(profile)
    out.bmi = calculate_bmi(profile.weight, profile.height)
    out.bmi_category = bmi_category(out.bmi)
    return out


# --------------------- Fetch ---------------------
@router.get("/", response_model=ProfileOut)
def get_profile(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Return the caller's fitness profile with BMI."""
    profile = crud.get_profile(db, user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _profile_out(profile)


# --------------------- Insert ---------------------
@router.post("/", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def create_profile(
    profile: ProfileCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if crud.get_profile(db, user_id):
        raise HTTPException(status_code=409, detail="Profile already exists")
    return _profile_out(crud.create_profile(db, user_id, profile))


# --------------------- Update ---------------------
@router.put("/", response_model=ProfileOut)
def update_profile(
    profile: ProfileCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Replace the caller's profile wholesale (created if missing)."""
    updated = crud.update_profile(db, user_id, profile)
    logger.info("User %s updated their profile", user_id)
    return _profile_out(updated)
