# schemas/meals.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Optional
from fitbuddy.schemas.enums import MealType

class FoodItem(BaseModel):
    name: str
    quantity: Optional[str] = None
    calories: int = 0

# ------------------ CREATE ------------------
class MealCreate(BaseModel):
    meal_type: MealType
    foods: List[FoodItem] = Field(default_factory=list)
    total_calories: Optional[int] = None  # summed from foods when omitted
    notes: Optional[str] = None
    logged_at: Optional[datetime] = None

# ------------------ RESPONSE ------------------
class MealOut(BaseModel):
    id: int
    user_id: str
    meal_type: MealType
    foods: List[FoodItem]
    total_calories: int
    notes: Optional[str] = None
    logged_at: datetime

    class Config:
        from_attributes = True

# ------------------ UPDATE ------------------
class MealUpdate(BaseModel):
    meal_type: Optional[MealType] = None
    foods: Optional[List[FoodItem]] = None
    total_calories: Optional[int] = None
    notes: Optional[str] = None
    logged_at: Optional[datetime] = None

# ------------------ DAILY SUMMARY ------------------
class NutritionDaySummary(BaseModel):
    date: date
    total_calories: int
    target_calories: int
    remaining_calories: int
    progress: float
    meal_breakdown: Dict[str, int]
    meals_today: int
