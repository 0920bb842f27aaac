from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from fitbuddy.database.database import get_db
from fitbuddy.schemas.chat import CoachRequest, CoachResponse
from fitbuddy.utils.coach import get_fallback_response, normalize_context, reply_for_user
from fitbuddy.utils.security import get_current_user_id

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/coach",
    tags=["Coach"],
)


@router.post("/chat", response_model=CoachResponse, response_model_exclude_none=True)
def coach_chat(
    payload: CoachRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Coach Alex: one message in, one reply out.

    Upstream failures still answer 200 with the context's fallback text so
    the conversation never stalls.
    """
    if not payload.message or not payload.userId:
        return JSONResponse(status_code=400, content={"error": "Message and userId are required"})
    if payload.userId != user_id:
        raise HTTPException(status_code=403, detail="Cannot chat on behalf of another user")

    context = normalize_context(payload.context or "general")
    try:
        reply, has_profile = reply_for_user(db, user_id, payload.message, context)
    except Exception as e:
        logger.exception("Error in coach chat for user %s: %s", user_id, e)
        return CoachResponse(
            message=get_fallback_response(context),
            context=context.value,
            error="AI service temporarily unavailable",
        )

    return CoachResponse(message=reply, context=context.value, hasProfile=has_profile)
