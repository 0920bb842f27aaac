from pydantic import BaseModel
from datetime import datetime
from typing import Optional

# ------------------ COACH ENDPOINT ------------------
class CoachRequest(BaseModel):
    message: Optional[str] = None
    userId: Optional[str] = None
    context: Optional[str] = "general"

class CoachResponse(BaseModel):
    message: str
    context: Optional[str] = None
    hasProfile: Optional[bool] = None
    error: Optional[str] = None

# ------------------ CHAT HISTORY ------------------
class ChatSend(BaseModel):
    message: str

class ChatMessageOut(BaseModel):
    id: int
    user_id: str
    message: str
    is_user: bool
    context: Optional[str] = None
    sentiment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class ChatExchange(BaseModel):
    user_message: ChatMessageOut
    reply: ChatMessageOut
    fallback: bool = False
