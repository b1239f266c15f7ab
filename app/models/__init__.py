from app.models.base import IDModel, TimestampModel
from app.models.chat import (
    ChatMessage,
    ChatSession,
    ChatbotConfig,
    MessageMetadata,
    QuickReply,
    SessionContext,
)

__all__ = [
    'IDModel',
    'TimestampModel',
    'ChatMessage',
    'ChatSession',
    'ChatbotConfig',
    'MessageMetadata',
    'QuickReply',
    'SessionContext',
]
