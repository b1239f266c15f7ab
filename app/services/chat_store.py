from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Any, Optional, Protocol

import httpx
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import CoachError
from app.models.base import utc_now
from app.models.chat import (
    ChatbotConfig,
    ChatMessage,
    ChatSession,
    MessageMetadata,
    QuickReply,
    SessionContext,
)
from app.models.enums import (
    ChatRole,
    MessageType,
    ProxyActionType,
    QuickReplyAction,
    QuickReplyCategory,
    SessionType,
    UrgencyLevel,
)
from app.schemas.coach import ProxyAction, UserContext
from app.services.coach_replies import CoachReply
from app.services.crisis import Clock, CrisisDetector
from app.services.quick_replies import DEFAULT_QUICK_REPLIES, filter_quick_replies, message_for_reply

WELCOME_MESSAGES = {
    SessionType.COACHING: (
        "Hi! I'm your personal quit coach. I'm here to support you on your journey. "
        "How are you feeling today?"
    ),
    SessionType.CRISIS: (
        "I'm here to help you through this difficult moment. You're brave for reaching out. "
        "What's happening right now?"
    ),
    SessionType.CHECKIN: (
        "Great to see you! Let's check in on how you're doing with your quit journey. "
        "What's on your mind?"
    ),
    SessionType.GENERAL: "Hello! I'm here to chat and support you however you need. What would you like to talk about?",
}

CRISIS_ENTER_MESSAGE = (
    "I'm here to help you through this crisis. You're not alone. "
    "Let's focus on getting you through the next few minutes safely."
)
CRISIS_EXIT_MESSAGE = (
    "I'm glad you're feeling better. Remember, I'm always here when you need support. "
    "How would you like to continue?"
)
FALLBACK_ERROR_MESSAGE = (
    "I'm having trouble connecting right now. Please try again in a moment, and if you're in crisis, "
    "use the panic tools or reach out to someone you trust."
)

Listener = Callable[['ChatStore'], None]


class CoachBackend(Protocol):
    async def interact(
        self,
        user_id: str,
        action: ProxyAction,
        user_context: Optional[UserContext] = None,
    ) -> CoachReply: ...


class ChatStore:
    """State container for one coaching chat screen.

    Holds the current session, its ordered messages, the typing flag, crisis
    mode and quick replies. Instances are passed around explicitly; nothing
    here is module-global.

    Round trips to the coach are serialised: a second ``send_message`` shows
    its user message immediately but waits for the first exchange to finish,
    so assistant replies always land in the order the user spoke.
    """

    def __init__(
        self,
        backend: CoachBackend,
        *,
        user_id: str,
        user_context: Optional[UserContext] = None,
        config: Optional[ChatbotConfig] = None,
        quick_replies: Optional[Iterable[QuickReply]] = None,
        crisis_detector: Optional[CrisisDetector] = None,
        clock: Clock = utc_now,
    ) -> None:
        if not user_id:
            raise ValueError('user_id is required')
        self.backend = backend
        self.user_id = user_id
        self.user_context = user_context
        self.config = config or ChatbotConfig()
        self.quick_replies: list[QuickReply] = list(
            DEFAULT_QUICK_REPLIES if quick_replies is None else quick_replies
        )
        self.suggested_replies: list[QuickReply] = []
        self.crisis = crisis_detector or CrisisDetector(
            settings.CRISIS_EXIT_POLICY,
            timeout_seconds=settings.CRISIS_TIMEOUT_SECONDS,
            clock=clock,
        )
        self.current_session: Optional[ChatSession] = None
        self.is_ending = False
        self._clock = clock
        self._pending = 0
        self._launched = False
        self._relaunch_pending = False
        self._send_lock = asyncio.Lock()
        self._listeners: list[Listener] = []

    @property
    def messages(self) -> list[ChatMessage]:
        if self.current_session is None:
            return []
        return list(self.current_session.messages)

    @property
    def is_launched(self) -> bool:
        return self._launched

    @property
    def is_typing(self) -> bool:
        return self._pending > 0

    @property
    def is_crisis_mode(self) -> bool:
        return self.crisis.is_active

    @property
    def visible_quick_replies(self) -> list[QuickReply]:
        return filter_quick_replies([*self.quick_replies, *self.suggested_replies], self.is_crisis_mode)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def start_new_session(
        self,
        session_type: SessionType = SessionType.COACHING,
        context: Optional[SessionContext] = None,
    ) -> ChatSession:
        if self.current_session is not None:
            return self.current_session
        now = self._clock()
        self.current_session = ChatSession(
            user_id=self.user_id,
            started_at=now,
            last_activity=now,
            session_type=session_type,
            context=context,
        )
        self.is_ending = False
        if session_type == SessionType.CRISIS:
            self.crisis.enter()
        logger.info('chat.session.started', session_id=self.current_session.id, session_type=session_type.value)
        if self.config.welcome_message:
            self.add_message(ChatRole.ASSISTANT, WELCOME_MESSAGES[session_type], observe=False)
        else:
            self._notify()
        return self.current_session

    def add_message(
        self,
        role: ChatRole,
        content: str,
        metadata: Optional[MessageMetadata] = None,
        *,
        observe: bool = True,
    ) -> ChatMessage:
        """Append a message to the current session.

        Locally generated text (greetings, fallbacks) passes ``observe=False`` so
        only replies from the coach can move crisis mode.
        """
        session = self.current_session
        if session is None:
            session = self.start_new_session()
        message = ChatMessage(content=content, role=role, metadata=metadata, timestamp=self._clock())
        session.messages.append(message)
        session.last_activity = message.timestamp
        if observe:
            self.crisis.observe(message)
        self._notify()
        return message

    def set_typing(self, typing: bool) -> None:
        self._pending = 1 if typing else 0
        self._notify()

    def update_config(self, **changes: Any) -> ChatbotConfig:
        self.config = ChatbotConfig.model_validate({**self.config.model_dump(), **changes})
        self._notify()
        return self.config

    def clear_chat(self) -> None:
        self.current_session = None
        self.suggested_replies = []
        self.is_ending = False
        self._pending = 0
        self.crisis.exit()
        self._notify()

    def end_session(self) -> None:
        if self.current_session is not None:
            logger.info('chat.session.ended', session_id=self.current_session.id)
        if self._launched:
            self._relaunch_pending = True
        self._launched = False
        self.clear_chat()

    def enter_crisis_mode(self) -> None:
        self.crisis.enter()
        self.add_message(
            ChatRole.ASSISTANT,
            CRISIS_ENTER_MESSAGE,
            MessageMetadata(message_type=MessageType.CRISIS, urgency_level=UrgencyLevel.HIGH),
        )

    def exit_crisis_mode(self) -> None:
        self.crisis.exit()
        self.add_message(ChatRole.ASSISTANT, CRISIS_EXIT_MESSAGE)

    async def launch(self) -> None:
        if self.current_session is None:
            self.start_new_session()
        await self._exchange(ProxyAction(type=ProxyActionType.LAUNCH))

    async def send_message(self, text: str) -> None:
        content = (text or '').strip()
        if not content:
            return
        self.add_message(ChatRole.USER, content)
        await self._exchange(ProxyAction(type=ProxyActionType.TEXT, payload=content))

    async def select_quick_reply(self, reply: QuickReply) -> None:
        if reply.action == QuickReplyAction.CRISIS_MODE:
            self.enter_crisis_mode()
            return
        if reply.category == QuickReplyCategory.AI_GENERATED and reply.request is not None:
            self.add_message(ChatRole.USER, reply.text)
            await self._exchange(ProxyAction(type=ProxyActionType.CHOICE, payload=reply.request))
            return
        await self.send_message(message_for_reply(reply))

    async def _relaunch(self) -> None:
        # the previous runtime conversation was ended; its greeting is not shown mid-exchange
        reply = await self.backend.interact(
            self.user_id, ProxyAction(type=ProxyActionType.LAUNCH), self.user_context
        )
        logger.info('chat.session.relaunched', greeting_count=len(reply.texts))
        self._launched = True
        self._relaunch_pending = False

    async def _exchange(self, action: ProxyAction) -> None:
        session = self.current_session
        self._pending += 1
        self._notify()
        try:
            async with self._send_lock:
                if self._relaunch_pending and action.type != ProxyActionType.LAUNCH:
                    await self._relaunch()
                reply = await self.backend.interact(self.user_id, action, self.user_context)
        except (CoachError, httpx.HTTPError, ValidationError) as exc:
            logger.warning(
                'chat.exchange.failed',
                action_type=action.type.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            reply = None
        except Exception:  # noqa: BLE001
            logger.exception('chat.exchange.unexpected_error', action_type=action.type.value)
            reply = None
        finally:
            self._pending = max(0, self._pending - 1)

        if session is None or self.current_session is not session:
            logger.info('chat.exchange.stale_reply_dropped', action_type=action.type.value)
            self._notify()
            return
        if reply is None:
            self.add_message(ChatRole.ASSISTANT, FALLBACK_ERROR_MESSAGE, observe=False)
            return

        if action.type == ProxyActionType.LAUNCH:
            self._launched = True
            self._relaunch_pending = False
        for item in reply.texts:
            self.add_message(ChatRole.ASSISTANT, item.content, item.metadata, observe=not item.is_fallback)
        self.suggested_replies = list(reply.choices)
        self.is_ending = reply.is_ending
        self._notify()
