from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional
from fitbuddy.schemas.enums import OnboardingPhase, StepKind

class OptionOut(BaseModel):
    value: str
    label: str

class StepOut(BaseModel):
    id: str
    field: str
    question: str
    kind: StepKind
    options: List[OptionOut] = []
    completed: bool = False

class TranscriptEntryOut(BaseModel):
    id: str
    text: str
    is_bot: bool
    delay_ms: int = 0
    timestamp: datetime

class NotificationOut(BaseModel):
    title: str
    description: str
    variant: str = "default"

class OnboardingSessionOut(BaseModel):
    phase: OnboardingPhase
    cursor: int
    progress: int
    current_step: Optional[StepOut] = None
    steps: List[StepOut]
    transcript: List[TranscriptEntryOut]
    draft: Dict[str, Any]
    finished: bool
    failed: bool
    complete_after_ms: Optional[int] = None
    notification: Optional[NotificationOut] = None

# ------------------ INPUT ------------------
class OnboardingMessageIn(BaseModel):
    message: str

class OnboardingAnswerIn(BaseModel):
    # str for text/single-select, list for multi-select,
    # {"height", "weight", "unit"} for measurements
    value: Any

class OnboardingAnswerResult(BaseModel):
    accepted: bool
    session: OnboardingSessionOut
