from enum import Enum
from typing import TypedDict


class InteractionState(str, Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DELIVERING = "delivering"


class Message(TypedDict):
    role: str      # "user" or "bot"
    content: str


class ConversationState(TypedDict):
    interaction: InteractionState
    user_input: str     # raw text as typed, sent to the relay unchanged
    reply_kind: str     # matcher kind: "deliver", "text", "medical", "fallback"
    bot_response: str
