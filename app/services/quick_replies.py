from collections.abc import Iterable

from app.models.chat import QuickReply
from app.models.enums import QuickReplyAction, QuickReplyCategory

DEFAULT_QUICK_REPLIES: tuple[QuickReply, ...] = (
    QuickReply(
        id='1',
        text="I'm having an urge",
        action=QuickReplyAction.URGE_TIMER,
        category=QuickReplyCategory.CRISIS,
    ),
    QuickReply(
        id='2',
        text="I'm feeling anxious",
        action=QuickReplyAction.BREATHING_EXERCISE,
        category=QuickReplyCategory.CRISIS,
    ),
    QuickReply(id='3', text='I need motivation', category=QuickReplyCategory.SUPPORT),
    QuickReply(id='4', text='How am I doing?', category=QuickReplyCategory.GENERAL),
    QuickReply(
        id='5',
        text='Crisis help',
        action=QuickReplyAction.CRISIS_MODE,
        category=QuickReplyCategory.CRISIS,
    ),
)

CRISIS_CATEGORIES = frozenset({QuickReplyCategory.CRISIS, QuickReplyCategory.SUPPORT})

ACTION_MESSAGES = {
    QuickReplyAction.URGE_TIMER: "I'm having an urge and need help",
    QuickReplyAction.BREATHING_EXERCISE: "I'm feeling anxious and need breathing exercises",
}


def filter_quick_replies(replies: Iterable[QuickReply], crisis_mode: bool) -> list[QuickReply]:
    if not crisis_mode:
        return list(replies)
    return [reply for reply in replies if reply.category in CRISIS_CATEGORIES]


def message_for_reply(reply: QuickReply) -> str:
    if reply.action is not None and reply.action in ACTION_MESSAGES:
        return ACTION_MESSAGES[reply.action]
    return reply.text
