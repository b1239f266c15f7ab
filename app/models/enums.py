from enum import Enum


class ChatRole(str, Enum):
    USER = 'user'
    ASSISTANT = 'assistant'
    SYSTEM = 'system'


class MessageType(str, Enum):
    CRISIS = 'crisis'
    ENCOURAGEMENT = 'encouragement'
    QUESTION = 'question'
    GENERAL = 'general'


class Sentiment(str, Enum):
    POSITIVE = 'positive'
    NEGATIVE = 'negative'
    NEUTRAL = 'neutral'


class UrgencyLevel(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRISIS = 'crisis'


class SessionType(str, Enum):
    COACHING = 'coaching'
    CRISIS = 'crisis'
    CHECKIN = 'checkin'
    GENERAL = 'general'


class QuickReplyAction(str, Enum):
    CRISIS_MODE = 'crisis_mode'
    URGE_TIMER = 'urge_timer'
    BREATHING_EXERCISE = 'breathing_exercise'
    COMMUNITY = 'community'


class QuickReplyCategory(str, Enum):
    CRISIS = 'crisis'
    SUPPORT = 'support'
    TOOLS = 'tools'
    GENERAL = 'general'
    AI_GENERATED = 'ai_generated'


class ProxyActionType(str, Enum):
    LAUNCH = 'launch'
    TEXT = 'text'
    CHOICE = 'choice'


class CrisisExitPolicy(str, Enum):
    MANUAL = 'manual'
    NON_CRISIS_REPLY = 'non_crisis_reply'
    TIMEOUT = 'timeout'


class PersonalityMode(str, Enum):
    SUPPORTIVE = 'supportive'
    MOTIVATIONAL = 'motivational'
    CLINICAL = 'clinical'
    FRIENDLY = 'friendly'


class ResponseSpeed(str, Enum):
    INSTANT = 'instant'
    REALISTIC = 'realistic'
    SLOW = 'slow'
