from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from fitbuddy.schemas.enums import Gender, FitnessLevel

# ------------------ PROFILE CREATION / UPDATE ------------------
# Numeric fields carry no range checks here; only the conversational
# onboarding enforces height/weight ranges.
class ProfileCreate(BaseModel):
    name: str = "User"
    age: Optional[int] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    gender: Optional[Gender] = None
    fitness_level: Optional[FitnessLevel] = None
    activity_level: Optional[str] = "moderately_active"
    goals: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    dietary_restrictions: List[str] = Field(default_factory=list)
    daily_diet: Optional[str] = None

# ------------------ PROFILE OUTPUT ------------------
class ProfileOut(BaseModel):
    id: int
    user_id: str
    name: str
    age: Optional[int] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    gender: Optional[Gender] = None
    fitness_level: Optional[FitnessLevel] = None
    activity_level: Optional[str] = None
    goals: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    dietary_restrictions: List[str] = Field(default_factory=list)
    daily_diet: Optional[str] = None
    bmi: Optional[float] = None
    bmi_category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
