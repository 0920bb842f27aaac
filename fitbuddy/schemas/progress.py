# schemas/progress.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

# ------------------ CREATE ------------------
class ProgressCreate(BaseModel):
    weight: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    muscle_mass: Optional[float] = None
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None

# ------------------ RESPONSE ------------------
class ProgressOut(ProgressCreate):
    id: int
    user_id: str
    recorded_at: datetime

    class Config:
        from_attributes = True

# ------------------ UPDATE ------------------
class ProgressUpdate(ProgressCreate):
    pass

# ------------------ SUMMARY ------------------
class WorkoutTotals(BaseModel):
    total: int
    exercises: int
    duration_hours: float
    calories_burned: int

class NutritionTotals(BaseModel):
    meals: int
    avg_calories: int
    total_calories: int

class WeightProgress(BaseModel):
    weight_change: float
    current_weight: Optional[float] = None

class ProgressSummary(BaseModel):
    workouts: WorkoutTotals
    nutrition: NutritionTotals
    progress: WeightProgress
