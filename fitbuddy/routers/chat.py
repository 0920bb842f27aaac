import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from fitbuddy.config import COACH_HISTORY_LIMIT
from fitbuddy.database.database import get_db
from fitbuddy.crud import crud
from fitbuddy.schemas.chat import ChatExchange, ChatMessageOut, ChatSend
from fitbuddy.utils.coach import detect_context, get_fallback_response, history_rows, reply_for_user
from fitbuddy.utils.security import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/chat",
    tags=["Chat"],
)

# ---------------- SEND ----------------
@router.post("/messages", response_model=ChatExchange, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: ChatSend,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """
    Store the user's message, ask the coach, store the reply.

    If the coach cannot answer, the fixed fallback for the detected
    context is stored instead; the exchange always completes.
    """
    text = payload.message.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message is required")

    context = detect_context(text)
    history = history_rows(crud.get_recent_chat_messages(db, user_id, limit=COACH_HISTORY_LIMIT))
    user_message = crud.create_chat_message(db, user_id, text, is_user=True, context=context.value)

    fallback = False
    try:
        reply, _ = reply_for_user(db, user_id, text, context, history=history)
    except Exception as e:
        logger.exception("Coach reply failed for user %s: %s", user_id, e)
        reply = get_fallback_response(context)
        fallback = True

    bot_message = crud.create_chat_message(
        db, user_id, reply, is_user=False, context=context.value, sentiment="neutral"
    )
    return ChatExchange(
        user_message=ChatMessageOut.model_validate(user_message),
        reply=ChatMessageOut.model_validate(bot_message),
        fallback=fallback,
    )


# ---------------- HISTORY ----------------
@router.get("/messages", response_model=List[ChatMessageOut])
def list_messages(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """The caller's conversation, oldest first."""
    return crud.get_chat_messages(db, user_id)


# ---------------- CLEAR ----------------
@router.delete("/messages")
def clear_messages(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    deleted = crud.delete_chat_messages(db, user_id)
    logger.info("Cleared %s chat messages for user %s", deleted, user_id)
    return {"detail": f"Deleted {deleted} messages"}
