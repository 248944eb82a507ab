"""
Local rule matcher.

Resolves a user message without the LLM where it can: yes/no answers to a
pending delivery prompt, greetings, and symptom keywords from the knowledge
table. Anything else comes back as a "fallback" reply, meaning the caller
should ask the relay service instead.
"""

import re
from dataclasses import dataclass

from config import MESSAGES
from knowledge import MEDICAL_KNOWLEDGE, format_advice

DELIVER = "deliver"
TEXT = "text"
MEDICAL = "medical"
FALLBACK = "fallback"

_AFFIRMATIVE = ("yes", "sure", "ok", "please")
_NEGATIVE = ("no", "not")
_GREETING = re.compile(r"^(hi|hello|hey|good morning|good evening)")


@dataclass(frozen=True)
class LocalReply:
    kind: str
    response: str
    needs_confirmation: bool = False


def process_message(message: str, waiting_for_confirmation: bool = False) -> LocalReply:
    """Classify `message` into a deliver / text / medical / fallback reply."""
    msg = message.lower().strip()

    # An unrelated answer to the delivery prompt drops through to the rules below.
    if waiting_for_confirmation:
        if any(word in msg for word in _AFFIRMATIVE):
            return LocalReply(DELIVER, MESSAGES["deliver"])
        if any(word in msg for word in _NEGATIVE):
            return LocalReply(TEXT, MESSAGES["decline"])

    if _GREETING.match(msg):
        return LocalReply(TEXT, MESSAGES["greeting"])

    for condition, entry in MEDICAL_KNOWLEDGE.items():
        if condition in msg:
            return LocalReply(MEDICAL, format_advice(condition, entry), needs_confirmation=True)

    return LocalReply(FALLBACK, MESSAGES["thinking"])
