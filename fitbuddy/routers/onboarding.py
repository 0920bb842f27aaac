from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from fitbuddy.crud.crud import create_profile, get_profile
from fitbuddy.database.database import get_db
from fitbuddy.schemas.onboarding import (
    OnboardingAnswerIn,
    OnboardingAnswerResult,
    OnboardingMessageIn,
    OnboardingSessionOut,
)
from fitbuddy.utils.onboarding import OnboardingSession, OnboardingStep, sessions
from fitbuddy.utils.security import get_current_user_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/onboarding", tags=["Onboarding"])


# ----------------------------------------------------------------------
# Helper functions
# ----------------------------------------------------------------------

def _step_out(step: OnboardingStep, completed: bool) -> dict:
    return {
        "id": step.id,
        "field": step.field,
        "question": step.question,
        "kind": step.kind,
        "options": [{"value": value, "label": label} for value, label in step.options],
        "completed": completed,
    }


def _session_out(session: OnboardingSession) -> OnboardingSessionOut:
    steps = [_step_out(step, done) for step, done in zip(session.steps, session.completed_steps)]
    current = steps[session.cursor] if session.current_step is not None else None
    notification = session.notification
    return OnboardingSessionOut(
        phase=session.phase,
        cursor=session.cursor,
        progress=session.progress,
        current_step=current,
        steps=steps,
        transcript=[
            {
                "id": entry.id,
                "text": entry.text,
                "is_bot": entry.is_bot,
                "delay_ms": entry.delay_ms,
                "timestamp": entry.timestamp,
            }
            for entry in session.transcript
        ],
        draft=dict(session.draft),
        finished=session.finished,
        failed=session.failed,
        complete_after_ms=session.complete_after_ms,
        notification=vars(notification) if notification else None,
    )


def _require_session(user_id: str) -> OnboardingSession:
    session = sessions.get(user_id)
    if not session:
        raise HTTPException(status_code=404, detail="No onboarding session in progress")
    return session


def _persister(db: Session):
    """Single profile insert for the finished draft."""
    def persist(payload: dict):
        return create_profile(db, payload["user_id"], payload)
    return persist


def _answer_result(user_id: str, session: OnboardingSession, accepted: bool) -> OnboardingAnswerResult:
    """Finished sessions are dropped from the registry once their final state is reported."""
    result = OnboardingAnswerResult(accepted=accepted, session=_session_out(session))
    if session.finished:
        sessions.discard(user_id)
    return result


# ----------------------------------------------------------------------
# Routes
# ----------------------------------------------------------------------

@router.post("/session", response_model=OnboardingSessionOut, status_code=status.HTTP_201_CREATED)
def start_session(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Open a fresh conversation, replacing any session already in progress.
    Users who already have a profile have nothing to onboard.
    """
    if get_profile(db, user_id):
        raise HTTPException(status_code=409, detail="Profile already exists")
    session = sessions.start(user_id)
    logger.info("Onboarding session started for user %s", user_id)
    return _session_out(session)


@router.get("/session", response_model=OnboardingSessionOut)
def read_session(user_id: str = Depends(get_current_user_id)):
    return _session_out(_require_session(user_id))


@router.post("/session/message", response_model=OnboardingSessionOut)
def send_message(
    payload: OnboardingMessageIn,
    user_id: str = Depends(get_current_user_id)
):
    session = _require_session(user_id)
    session.handle_message(payload.message)
    return _session_out(session)


@router.post("/session/answer", response_model=OnboardingAnswerResult)
def submit_answer(
    payload: OnboardingAnswerIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Answer the current step. A rejected answer leaves the session as it was
    and comes back with ``accepted`` false.
    """
    session = _require_session(user_id)
    accepted = session.submit(payload.value, _persister(db))
    return _answer_result(user_id, session, accepted)


@router.post("/session/complete", response_model=OnboardingAnswerResult)
def retry_completion(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    session = _require_session(user_id)
    if not session.awaiting_completion:
        raise HTTPException(status_code=400, detail="Onboarding is not waiting to be saved")
    accepted = session.complete(_persister(db))
    return _answer_result(user_id, session, accepted)


@router.delete("/session")
def discard_session(user_id: str = Depends(get_current_user_id)):
    sessions.discard(user_id)
    return {"detail": "Onboarding session discarded"}
