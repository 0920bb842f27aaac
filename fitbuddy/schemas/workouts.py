# schemas/workouts.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

# ------------------ EXERCISE ENTRY ------------------
class LoggedExercise(BaseModel):
    name: str
    sets: int
    reps: str
    rest: str
    weight: Optional[float] = None
    duration: Optional[int] = None

# ------------------ CREATE ------------------
class WorkoutCreate(BaseModel):
    name: str
    type: str
    duration: Optional[int] = None
    calories_burned: Optional[int] = None
    exercises: List[LoggedExercise] = Field(default_factory=list)
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None

# ------------------ RESPONSE ------------------
class WorkoutOut(WorkoutCreate):
    id: int
    user_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# ------------------ UPDATE ------------------
class WorkoutUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    duration: Optional[int] = None
    calories_burned: Optional[int] = None
    exercises: Optional[List[LoggedExercise]] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
