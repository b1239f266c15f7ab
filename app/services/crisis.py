from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

from app.models.base import utc_now
from app.models.chat import ChatMessage
from app.models.enums import ChatRole, CrisisExitPolicy, MessageType, UrgencyLevel

Clock = Callable[[], datetime]


def is_crisis_message(message: ChatMessage) -> bool:
    metadata = message.metadata
    if metadata is None:
        return False
    return metadata.message_type == MessageType.CRISIS or metadata.urgency_level == UrgencyLevel.CRISIS


class CrisisDetector:
    """Tracks whether the chat is in crisis mode.

    Entry happens explicitly or when an assistant message is tagged as crisis.
    How the mode ends depends on ``policy``: ``manual`` waits for an explicit
    exit, ``non_crisis_reply`` ends it on the next untagged assistant message and
    ``timeout`` lets it lapse ``timeout_seconds`` after the last crisis signal.
    """

    def __init__(
        self,
        policy: CrisisExitPolicy = CrisisExitPolicy.MANUAL,
        *,
        timeout_seconds: int = 15 * 60,
        clock: Clock = utc_now,
    ) -> None:
        self.policy = policy
        self.timeout = timedelta(seconds=timeout_seconds)
        self._clock = clock
        self._active = False
        self._entered_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        if self._active and self.policy == CrisisExitPolicy.TIMEOUT and self._entered_at is not None:
            if self._clock() - self._entered_at >= self.timeout:
                self.exit()
        return self._active

    def enter(self) -> None:
        self._active = True
        self._entered_at = self._clock()

    def exit(self) -> None:
        self._active = False
        self._entered_at = None

    def observe(self, message: ChatMessage) -> None:
        if message.role != ChatRole.ASSISTANT:
            return
        if is_crisis_message(message):
            self.enter()
        elif self._active and self.policy == CrisisExitPolicy.NON_CRISIS_REPLY:
            self.exit()
