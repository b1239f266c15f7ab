from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.base import IDModel, TimestampModel, utc_now, new_id
from app.models.enums import (
    ChatRole,
    MessageType,
    PersonalityMode,
    QuickReplyAction,
    QuickReplyCategory,
    ResponseSpeed,
    Sentiment,
    SessionType,
    UrgencyLevel,
)


class MessageMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message_type: Optional[MessageType] = Field(default=None, alias='messageType')
    sentiment: Optional[Sentiment] = None
    urgency_level: Optional[UrgencyLevel] = Field(default=None, alias='urgencyLevel')


class ChatMessage(IDModel, TimestampModel):
    model_config = ConfigDict(frozen=True)

    content: str
    role: ChatRole
    metadata: Optional[MessageMetadata] = None


class SessionContext(BaseModel):
    quit_day: Optional[int] = None
    current_mood: Optional[str] = None
    last_urge: Optional[datetime] = None
    recent_triggers: list[str] = Field(default_factory=list)


class ChatSession(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    messages: list[ChatMessage] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utc_now)
    last_activity: datetime = Field(default_factory=utc_now)
    session_type: SessionType = SessionType.COACHING
    context: Optional[SessionContext] = None


class QuickReply(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    action: Optional[QuickReplyAction] = None
    category: QuickReplyCategory
    request: Optional[dict[str, Any]] = None


class ChatbotConfig(BaseModel):
    personality_mode: PersonalityMode = PersonalityMode.SUPPORTIVE
    response_speed: ResponseSpeed = ResponseSpeed.REALISTIC
    max_tokens: int = Field(default=150, gt=0)
    temperature: float = Field(default=0.7, ge=0, le=2)
    welcome_message: bool = False
