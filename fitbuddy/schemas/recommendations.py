from pydantic import BaseModel, Field
from typing import Dict, List, Optional

# ------------------ PROFILE INPUT ------------------
class PlanProfileIn(BaseModel):
    """Profile fields the plan generators read. Values are not range-checked."""
    fitness_level: Optional[str] = None
    goals: List[str] = Field(default_factory=list)
    weight: Optional[float] = None
    height: Optional[float] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    activity_level: Optional[str] = None

# ------------------ WORKOUT PLAN ------------------
class Exercise(BaseModel):
    name: str
    sets: int
    reps: str
    rest: str

class WorkoutPlan(BaseModel):
    duration: str
    exercises: List[Exercise]

# ------------------ DIET PLAN ------------------
class Macros(BaseModel):
    protein: Optional[int] = None
    carbs: Optional[int] = None
    fats: Optional[int] = None

class DietPlan(BaseModel):
    target_calories: Optional[int] = None
    macros: Macros
    meal_plan: Dict[str, List[str]]
    tips: List[str]

class DietPlanRecordOut(BaseModel):
    id: int
    user_id: str
    plan_data: DietPlan

    class Config:
        from_attributes = True
