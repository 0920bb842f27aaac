"""
Conversational onboarding.

A linear state machine that asks a fixed list of profile questions as
chat turns. The session opens in the ``greeting`` phase and waits for the
user to say hello; it then walks the structured steps in order, validating
each answer, and finally writes the collected draft as one profile insert.

Timing is expressed as ``delay_ms`` hints on transcript entries so the
client can pace the conversation; nothing here sleeps.
"""
import logging
import math
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from fitbuddy.config import (
    ONBOARDING_COMPLETE_DELAY_MS,
    ONBOARDING_GREETING_DELAY_MS,
    ONBOARDING_STEP_DELAY_MS,
)
from fitbuddy.schemas.enums import OnboardingPhase, StepKind, UnitSystem
from fitbuddy.utils.recommendations import round_half_up

logger = logging.getLogger(__name__)

# ---------------- MESSAGES ----------------
WELCOME_MESSAGE = (
    "Hey there! I'm Coach Alex 👋 Excited to help you get fitter and stronger. "
    "To get started, I'll need a couple of basics. Just say hello, hi, or hey to begin!"
)
GREETING_ACK_MESSAGE = (
    "Perfect! Thanks for saying hello 🙌 Now I need to collect some information "
    "to create your personalized fitness plan."
)
GREETING_REPROMPT = "Please say hello, hi, or hey to get started with your fitness journey! 😊"
COMPLETION_MESSAGE = (
    "Awesome, I've got everything I need to build your personalized workout and "
    "meal plan! 🚀 Ready to begin?"
)
COMPLETION_FAILED_MESSAGE = "I encountered an issue saving your profile. Let me try that again."

GREETING_KEYWORDS = (
    "hello", "hi", "hey", "hola", "greetings",
    "good morning", "good afternoon", "good evening",
)

# ---------------- MEASUREMENT LIMITS ----------------
FEET_TO_CM = 30.48
LB_TO_KG = 0.453592
HEIGHT_RANGE_CM = (100, 250)
WEIGHT_RANGE_KG = (30, 250)
MIN_TEXT_LENGTH = 10


class InvalidAnswer(ValueError):
    """An answer that the step's input affordance would not let through."""


# ---------------- VALIDATORS ----------------
def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidAnswer("expected a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidAnswer(f"not a number: {value!r}")
    if math.isnan(number) or math.isinf(number):
        raise InvalidAnswer(f"not a number: {value!r}")
    return number


def _whole(number: float):
    return int(number) if float(number).is_integer() else number


def validate_text(value: Any, step: "OnboardingStep") -> str:
    if not isinstance(value, str) or len(value.strip()) < MIN_TEXT_LENGTH:
        raise InvalidAnswer(f"at least {MIN_TEXT_LENGTH} characters required")
    return value.strip()


def validate_measurements(value: Any, step: "OnboardingStep") -> Dict[str, float]:
    """
    Resolve ``{"height", "weight", "unit"}`` to metric and range-check it.

    Imperial heights are feet and weights pounds; both are converted and
    rounded before the 100-250 cm / 30-250 kg checks.
    """
    if not isinstance(value, dict):
        raise InvalidAnswer("expected height and weight")
    height = _to_number(value.get("height"))
    weight = _to_number(value.get("weight"))
    if height <= 0 or weight <= 0:
        raise InvalidAnswer("height and weight must be positive")

    try:
        unit = UnitSystem(value.get("unit") or UnitSystem.METRIC.value)
    except ValueError:
        raise InvalidAnswer(f"unknown unit system: {value.get('unit')!r}")

    if unit == UnitSystem.IMPERIAL:
        height_cm = round_half_up(height * FEET_TO_CM)
        weight_kg = round_half_up(weight * LB_TO_KG)
        if height_cm is None or weight_kg is None:
            raise InvalidAnswer("measurements out of range")
    else:
        height_cm, weight_kg = _whole(height), _whole(weight)

    if not HEIGHT_RANGE_CM[0] <= height_cm <= HEIGHT_RANGE_CM[1]:
        raise InvalidAnswer("Height must be between 100-250 cm (3-8 ft)")
    if not WEIGHT_RANGE_KG[0] <= weight_kg <= WEIGHT_RANGE_KG[1]:
        raise InvalidAnswer("Weight must be between 30-250 kg (60-550 lbs)")
    return {"height": height_cm, "weight": weight_kg}


def validate_single_select(value: Any, step: "OnboardingStep") -> str:
    if value not in step.option_values:
        raise InvalidAnswer(f"{value!r} is not one of the options")
    return value


def validate_multi_select(value: Any, step: "OnboardingStep") -> List[str]:
    if not isinstance(value, (list, tuple)) or not value:
        raise InvalidAnswer("select at least one option")
    selected = []
    for item in value:
        if item not in step.option_values:
            raise InvalidAnswer(f"{item!r} is not one of the options")
        if item not in selected:
            selected.append(item)
    return selected


VALIDATORS: Dict[StepKind, Callable[[Any, "OnboardingStep"], Any]] = {
    StepKind.TEXT: validate_text,
    StepKind.MEASUREMENTS: validate_measurements,
    StepKind.SINGLE_SELECT: validate_single_select,
    StepKind.MULTI_SELECT: validate_multi_select,
}


# ---------------- STEPS ----------------
@dataclass(frozen=True)
class OnboardingStep:
    id: str
    field: str
    question: str
    kind: StepKind
    options: Tuple[Tuple[str, str], ...] = ()

    @property
    def option_values(self) -> List[str]:
        return [value for value, _ in self.options]

    def label_for(self, value: str) -> str:
        for option_value, label in self.options:
            if option_value == value:
                return label
        return value

    def validate(self, value: Any) -> Any:
        return VALIDATORS[self.kind](value, self)

    def display(self, value: Any) -> str:
        """Transcript text for an accepted answer."""
        if self.kind == StepKind.MULTI_SELECT:
            return ", ".join(self.label_for(v) for v in value)
        if self.kind == StepKind.SINGLE_SELECT:
            return self.label_for(value)
        if self.kind == StepKind.MEASUREMENTS:
            return f"{value['height']} cm, {value['weight']} kg"
        return str(value)

    def merge_into(self, draft: Dict[str, Any], value: Any) -> None:
        if self.kind == StepKind.MEASUREMENTS:
            draft.update(value)
        else:
            draft[self.field] = value


ONBOARDING_STEPS: Tuple[OnboardingStep, ...] = (
    OnboardingStep(
        id="height_weight",
        field="height",
        question=(
            "What's your current weight and height? This helps me calculate your "
            "Body Mass Index (BMI) and understand your starting point."
        ),
        kind=StepKind.MEASUREMENTS,
    ),
    OnboardingStep(
        id="activity_level",
        field="activity_level",
        question="What's your current activity level?",
        kind=StepKind.SINGLE_SELECT,
        options=(
            ("sedentary", "Sedentary"),
            ("lightly_active", "Lightly Active"),
            ("moderately_active", "Moderately Active"),
            ("very_active", "Very Active"),
        ),
    ),
    OnboardingStep(
        id="daily_diet",
        field="daily_diet",
        question=(
            "What's your typical daily diet like? Knowing your current eating habits "
            "helps me suggest appropriate dietary adjustments."
        ),
        kind=StepKind.TEXT,
    ),
    OnboardingStep(
        id="equipment",
        field="equipment",
        question="What kind of exercise equipment do you have access to?",
        kind=StepKind.MULTI_SELECT,
        options=(
            ("gym_membership", "Gym Membership"),
            ("home_gym", "Home Gym"),
            ("bodyweight_only", "Bodyweight Only"),
            ("dumbbells", "Dumbbells"),
            ("resistance_bands", "Resistance Bands"),
            ("cardio_machine", "Cardio Machines"),
        ),
    ),
    OnboardingStep(
        id="dietary_restrictions",
        field="dietary_restrictions",
        question="Do you have any dietary restrictions or allergies?",
        kind=StepKind.MULTI_SELECT,
        options=(
            ("none", "No Restrictions"),
            ("vegetarian", "Vegetarian"),
            ("vegan", "Vegan"),
            ("gluten_free", "Gluten Free"),
            ("dairy_free", "Dairy Free"),
            ("nut_allergy", "Nut Allergy"),
            ("shellfish_allergy", "Shellfish Allergy"),
            ("other", "Other"),
        ),
    ),
)


def is_greeting(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in GREETING_KEYWORDS)


# ---------------- SESSION ----------------
@dataclass
class TranscriptEntry:
    text: str
    is_bot: bool
    delay_ms: int = 0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Notification:
    title: str
    description: str
    variant: str = "default"


class OnboardingSession:
    """
    One user's pass through the onboarding conversation.

    Holds only the phase, the step cursor, per-step completion flags, the
    draft profile and the transcript. ``persist`` is called once with the
    finished draft (user id attached) when the last step is answered.
    """

    def __init__(self, user_id: str, steps: Sequence[OnboardingStep] = ONBOARDING_STEPS):
        self.user_id = user_id
        self.steps = tuple(steps)
        self.phase = OnboardingPhase.GREETING
        self.cursor = 0
        self.completed_steps = [False] * len(self.steps)
        self.draft: Dict[str, Any] = {}
        self.transcript: List[TranscriptEntry] = []
        self.notification: Optional[Notification] = None
        self.finished = False
        self.failed = False
        self.complete_after_ms: Optional[int] = None
        self._say(WELCOME_MESSAGE)

    # ----- transcript -----
    def _say(self, text: str, delay_ms: int = 0) -> TranscriptEntry:
        entry = TranscriptEntry(text=text, is_bot=True, delay_ms=delay_ms)
        self.transcript.append(entry)
        return entry

    def _record_user(self, text: str) -> TranscriptEntry:
        entry = TranscriptEntry(text=text, is_bot=False)
        self.transcript.append(entry)
        return entry

    # ----- state -----
    @property
    def current_step(self) -> Optional[OnboardingStep]:
        if self.phase != OnboardingPhase.STRUCTURED or self.cursor >= len(self.steps):
            return None
        return self.steps[self.cursor]

    @property
    def progress(self) -> int:
        if not self.steps:
            return 100
        return round_half_up(100 * sum(self.completed_steps) / len(self.steps))

    @property
    def awaiting_completion(self) -> bool:
        return self.cursor >= len(self.steps) and not self.finished

    # ----- transitions -----
    def handle_message(self, message: str) -> List[TranscriptEntry]:
        """Free-text chat input; only meaningful during the greeting phase."""
        message = (message or "").strip()
        if not message or self.phase != OnboardingPhase.GREETING:
            return []

        start = len(self.transcript)
        self._record_user(message)
        if is_greeting(message):
            self.phase = OnboardingPhase.STRUCTURED
            self.cursor = 0
            self._say(GREETING_ACK_MESSAGE)
            self._say(self.steps[0].question, delay_ms=ONBOARDING_GREETING_DELAY_MS)
        else:
            self._say(GREETING_REPROMPT)
        return self.transcript[start:]

    def submit(self, value: Any, persist: Callable[[Dict[str, Any]], Any]) -> bool:
        """
        Answer the current step.

        Returns False, leaving the session untouched, when there is no
        current step or the answer fails the step's validator.
        """
        step = self.current_step
        if step is None or self.completed_steps[self.cursor]:
            return False
        try:
            resolved = step.validate(value)
        except InvalidAnswer as exc:
            logger.debug("Rejected answer for step %s: %s", step.id, exc)
            return False

        self._record_user(step.display(resolved))
        step.merge_into(self.draft, resolved)
        self.completed_steps[self.cursor] = True
        self.cursor += 1

        if self.cursor < len(self.steps):
            self._say(self.steps[self.cursor].question, delay_ms=ONBOARDING_STEP_DELAY_MS)
        else:
            self.complete(persist)
        return True

    def complete(self, persist: Callable[[Dict[str, Any]], Any]) -> bool:
        """Write the draft as a single profile insert; safe to call again after a failure."""
        if not self.awaiting_completion:
            return False

        payload = dict(self.draft, user_id=self.user_id)
        try:
            persist(payload)
        except Exception as e:
            logger.exception("Failed to save onboarding profile for user %s: %s", self.user_id, e)
            self.failed = True
            self._say(COMPLETION_FAILED_MESSAGE)
            self.notification = Notification(
                title="Error",
                description="Failed to save profile. Please try again.",
                variant="destructive",
            )
            return False

        logger.info("Onboarding complete for user %s", self.user_id)
        self.failed = False
        self.finished = True
        self.complete_after_ms = ONBOARDING_COMPLETE_DELAY_MS
        self._say(COMPLETION_MESSAGE)
        self.notification = Notification(
            title="Profile Created!",
            description="Your personalized fitness profile is ready. Welcome to Fit Buddy!",
        )
        return True


# ---------------- SESSION REGISTRY ----------------
class OnboardingSessionStore:
    """In-memory sessions, at most one per user."""

    def __init__(self):
        self._sessions: Dict[str, OnboardingSession] = {}
        self._lock = threading.Lock()

    def start(self, user_id: str) -> OnboardingSession:
        session = OnboardingSession(user_id)
        with self._lock:
            self._sessions[user_id] = session
        return session

    def get(self, user_id: str) -> Optional[OnboardingSession]:
        with self._lock:
            return self._sessions.get(user_id)

    def discard(self, user_id: str) -> None:
        with self._lock:
            self._sessions.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


sessions = OnboardingSessionStore()
