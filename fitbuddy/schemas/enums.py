from enum import Enum

# ------------------ GENDER ------------------
class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

# ------------------ FITNESS LEVEL ------------------
class FitnessLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

# ------------------ WORKOUT TRACK ------------------
class WorkoutTrack(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"

# ------------------ MEAL TYPE ------------------
class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"

# ------------------ CHAT CONTEXT ------------------
class ChatContext(str, Enum):
    WORKOUT = "workout"
    DIET = "diet"
    MOTIVATION = "motivation"
    GENERAL = "general"

# ------------------ ONBOARDING ------------------
class OnboardingPhase(str, Enum):
    GREETING = "greeting"
    STRUCTURED = "structured"

class StepKind(str, Enum):
    TEXT = "text"
    MEASUREMENTS = "measurements"
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"

class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"
