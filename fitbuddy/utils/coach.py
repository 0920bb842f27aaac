# fitbuddy/utils/coach.py
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from sqlalchemy.orm import Session

from fitbuddy.config import (
    COACH_HISTORY_LIMIT,
    COACH_REQUEST_TIMEOUT,
    GEMINI_API_BASE,
    GEMINI_API_KEY,
    GEMINI_MODEL,
)
from fitbuddy.crud import crud
from fitbuddy.schemas.enums import ChatContext

logger = logging.getLogger(__name__)


class CoachServiceError(Exception):
    """The language model could not be reached or answered with an error."""


# ---------------- CONTEXT DETECTION ----------------
CONTEXT_KEYWORDS = (
    (ChatContext.WORKOUT, ("workout", "exercise", "train")),
    (ChatContext.DIET, ("diet", "food", "eat")),
    (ChatContext.MOTIVATION, ("motivat", "encourage", "inspire")),
)


def detect_context(message: str) -> ChatContext:
    lowered = message.lower()
    for context, keywords in CONTEXT_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return context
    return ChatContext.GENERAL


def normalize_context(context: Any) -> ChatContext:
    """Unknown or missing contexts are treated as general."""
    if isinstance(context, ChatContext):
        return context
    try:
        return ChatContext(str(context).lower())
    except ValueError:
        return ChatContext.GENERAL


# ---------------- FALLBACKS ----------------
FALLBACK_RESPONSES = {
    ChatContext.WORKOUT: (
        "I'm having trouble accessing my full capabilities right now, but I can still help! "
        "For a quick workout, try: 3 sets of 10 push-ups, 3 sets of 15 squats, and a 30-second "
        "plank. Focus on proper form and controlled movements. What specific exercises are you "
        "interested in?"
    ),
    ChatContext.DIET: (
        "I'm experiencing some technical difficulties, but here's a quick nutrition tip: Focus on "
        "eating a balanced plate with 1/2 vegetables, 1/4 lean protein, and 1/4 complex "
        "carbohydrates. Drink plenty of water throughout the day. What are your specific "
        "nutrition goals?"
    ),
    ChatContext.MOTIVATION: (
        "Even though I'm having some technical issues, remember this: every workout, no matter "
        "how small, is progress! You're investing in your health and future self. What's one "
        "small healthy choice you can make today?"
    ),
    ChatContext.GENERAL: (
        "I'm experiencing some connectivity issues, but I'm still here to help with your fitness "
        "journey! Whether you need workout advice, nutrition tips, or motivation, I'm ready to "
        "assist. What would you like to focus on today?"
    ),
}

EMPTY_REPLY = "I'm sorry, I couldn't generate a response right now. Please try again."


def get_fallback_response(context: Any) -> str:
    return FALLBACK_RESPONSES[normalize_context(context)]


# ---------------- PROMPT ----------------
BASE_PROMPT = """You are a highly experienced and motivational personal fitness coach named Coach Alex. You are NOT an AI assistant - you are a real fitness expert who has helped thousands of people achieve their fitness goals.

IMPORTANT COACHING PERSONALITY:
- Speak like a professional personal trainer, not an AI
- Be encouraging, motivational, and supportive but also challenging when needed
- Use fitness industry terminology naturally
- Share specific, actionable advice based on real training experience
- Always be positive and build confidence
- Ask follow-up questions to understand their needs better
- Provide detailed workout plans with specific exercises, sets, reps, and form cues
- Give comprehensive nutrition advice with meal plans and macro breakdowns
- Celebrate their progress and milestones
- Be their accountability partner and cheerleader

NEVER mention being an AI, Gemini, or any artificial intelligence. You are Coach Alex, a real human fitness expert."""

CONTEXT_PROMPTS = {
    ChatContext.WORKOUT: """

CONTEXT: The user is asking about WORKOUTS and EXERCISES.
Focus on:
- Detailed exercise routines with specific sets, reps, and rest periods
- Proper form instructions and safety tips
- Progressive overload strategies
- Recovery and rest day recommendations
- Equipment alternatives if needed""",
    ChatContext.DIET: """

CONTEXT: The user is asking about NUTRITION and DIET.
Focus on:
- Detailed meal plans with specific foods and portions
- Calorie and macro calculations
- Hydration recommendations
- Meal timing and frequency
- Healthy recipe suggestions and substitutions""",
    ChatContext.MOTIVATION: """

CONTEXT: The user needs MOTIVATION and ENCOURAGEMENT.
Focus on:
- Positive reinforcement and encouragement
- Goal-setting strategies
- Overcoming common fitness obstacles
- Building sustainable habits
- Celebrating progress and milestones""",
    ChatContext.GENERAL: """

CONTEXT: General fitness consultation.
Be ready to address any fitness-related topic comprehensively.""",
}


def _value(obj: Any, key: str) -> Any:
    value = obj.get(key) if isinstance(obj, dict) else getattr(obj, key, None)
    return value.value if hasattr(value, "value") else value


def _describe_profile(profile: Any) -> str:
    def field(key, default="Not specified", unit=""):
        value = _value(profile, key)
        if not value:
            return default
        return f"{value} {unit}".strip()

    def tags(key, default="Not specified"):
        return ", ".join(_value(profile, key) or []) or default

    return f"""

USER PROFILE:
- Name: {field("name", "User")}
- Age: {field("age")}
- Weight: {field("weight", unit="kg")}
- Height: {field("height", unit="cm")}
- Gender: {field("gender")}
- Fitness Level: {field("fitness_level")}
- Activity Level: {field("activity_level")}
- Goals: {tags("goals")}
- Available Equipment: {tags("equipment")}
- Dietary Restrictions: {tags("dietary_restrictions", "None specified")}

Use this profile information to personalize ALL your responses."""


def build_system_prompt(context: Any, profile: Optional[Any] = None) -> str:
    prompt = BASE_PROMPT
    if profile is not None:
        prompt += _describe_profile(profile)
    return prompt + CONTEXT_PROMPTS[normalize_context(context)]


# ---------------- GEMINI ----------------
GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 1000,
}
SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]


def build_gemini_payload(system_prompt: str, history: List[Dict[str, Any]], message: str) -> dict:
    """
    ``history`` is oldest-first ``{"message", "is_user"}`` rows; the new user
    message goes last.
    """
    contents = [
        {"role": "user" if row["is_user"] else "model", "parts": [{"text": row["message"]}]}
        for row in history
    ]
    contents.append({"role": "user", "parts": [{"text": message}]})
    return {
        "contents": contents,
        "systemInstruction": {"parts": [{"text": system_prompt}]},
        "generationConfig": GENERATION_CONFIG,
        "safetySettings": SAFETY_SETTINGS,
    }


def _extract_text(data: dict) -> Optional[str]:
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"] or None
    except (KeyError, IndexError, TypeError):
        return None


def request_completion(payload: dict) -> str:
    """POST the payload to Gemini and return the first candidate's text."""
    if not GEMINI_API_KEY:
        raise CoachServiceError("GEMINI_API_KEY not configured")

    url = f"{GEMINI_API_BASE}/models/{GEMINI_MODEL}:generateContent"
    try:
        resp = requests.post(
            url,
            params={"key": GEMINI_API_KEY},
            json=payload,
            timeout=COACH_REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise CoachServiceError(f"Network error calling Gemini: {e}")

    if resp.status_code < 200 or resp.status_code >= 300:
        logger.error("Gemini API error: %s %s", resp.status_code, resp.text)
        raise CoachServiceError(f"Gemini API error: {resp.status_code}")

    try:
        data = resp.json()
    except ValueError:
        raise CoachServiceError("Gemini returned a non-JSON body")

    return _extract_text(data) or EMPTY_REPLY


def generate_coach_reply(
    message: str,
    context: Any,
    profile: Optional[Any] = None,
    history: Optional[List[Dict[str, Any]]] = None,
) -> str:
    """Assemble the Coach Alex prompt and ask the model. Raises CoachServiceError."""
    context = normalize_context(context)
    system_prompt = build_system_prompt(context, profile)
    payload = build_gemini_payload(system_prompt, history or [], message)
    logger.info("Sending %d messages to Gemini (context=%s)", len(payload["contents"]), context.value)
    return request_completion(payload)


def history_rows(messages: List[Any]) -> List[Dict[str, Any]]:
    return [{"message": m.message, "is_user": m.is_user} for m in messages]


def reply_for_user(db: Session, user_id: str, message: str, context: Any, history=None) -> Tuple[str, bool]:
    """
    Coach reply personalised with the user's stored profile and recent chat.

    Returns ``(reply, has_profile)``. ``history`` defaults to the latest
    COACH_HISTORY_LIMIT stored messages.
    """
    profile = crud.get_profile(db, user_id)
    if history is None:
        history = history_rows(crud.get_recent_chat_messages(db, user_id, limit=COACH_HISTORY_LIMIT))
    logger.info("Processing coach message from user %s", user_id)
    return generate_coach_reply(message, context, profile, history), profile is not None
