from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError

from app.models.base import new_id
from app.models.chat import MessageMetadata, QuickReply
from app.models.enums import QuickReplyCategory

FALLBACK_PROMPT = "I'm here to help you. Could you tell me more about what you're experiencing?"


@dataclass
class ReplyText:
    content: str
    metadata: Optional[MessageMetadata] = None
    is_fallback: bool = False


@dataclass
class CoachReply:
    texts: list[ReplyText] = field(default_factory=list)
    choices: list[QuickReply] = field(default_factory=list)
    is_ending: bool = False


def _parse_metadata(raw: Any) -> Optional[MessageMetadata]:
    if not isinstance(raw, dict):
        return None
    try:
        return MessageMetadata.model_validate(raw)
    except ValidationError as exc:
        logger.warning('coach.reply.bad_metadata', error=str(exc))
        return None


def _parse_choices(payload: dict[str, Any]) -> list[QuickReply]:
    buttons = payload.get('buttons') or payload.get('choices') or []
    replies: list[QuickReply] = []
    for button in buttons:
        if not isinstance(button, dict):
            continue
        name = button.get('name')
        if not name:
            continue
        request = button.get('request')
        replies.append(
            QuickReply(
                id=new_id(),
                text=name,
                category=QuickReplyCategory.AI_GENERATED,
                request=request if isinstance(request, dict) else None,
            )
        )
    return replies


def parse_traces(messages: list[Any], *, is_ending: bool = False) -> CoachReply:
    """Turn the relayed runtime traces into assistant texts and suggested replies.

    Plain strings are taken as text replies. ``text`` traces may carry a
    ``metadata`` object in their payload, which is how the coach flags crisis
    content. When nothing displayable comes back a fallback prompt is used so the
    user is never left without an answer.
    """
    reply = CoachReply(is_ending=is_ending)
    for trace in messages or []:
        if isinstance(trace, str):
            if trace.strip():
                reply.texts.append(ReplyText(content=trace))
            continue
        if not isinstance(trace, dict):
            logger.debug('coach.reply.unhandled_item', item_type=type(trace).__name__)
            continue
        trace_type = trace.get('type')
        payload = trace.get('payload') if isinstance(trace.get('payload'), dict) else {}
        if trace_type == 'text':
            message = payload.get('message')
            if message:
                metadata = _parse_metadata(payload.get('metadata') or trace.get('metadata'))
                reply.texts.append(ReplyText(content=message, metadata=metadata))
        elif trace_type == 'choice':
            reply.choices.extend(_parse_choices(payload))
        elif trace_type == 'end':
            reply.is_ending = True
        else:
            logger.debug('coach.reply.unhandled_trace', trace_type=trace_type)

    if not reply.texts and not reply.choices:
        logger.warning('coach.reply.empty_using_fallback')
        reply.texts.append(ReplyText(content=FALLBACK_PROMPT, is_fallback=True))
    return reply
