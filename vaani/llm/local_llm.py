"""
VAANI Local Brain - Offline Heuristic Replies

Deterministic stand-in for the hosted model. Picks a fixed reply from simple
substring checks on the user's words so the caller always gets some text.
Never touches the network.
"""

import logging

from .base import Brain, DEFAULT_MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)

OFFLINE_WEATHER_REPLY = (
    "Maaf kijiye, main abhi offline hoon isliye mausam ki taza jankari nahi de sakti. "
    "Kripya apne phone ka weather app dekhiye."
)
IDENTITY_REPLY = (
    "Main Vaani hoon, aapki Hindi-first voice assistant. "
    "Main sawaalon ke jawab de sakti hoon aur reminders yaad rakh sakti hoon."
)
SHORT_PROMPT_REPLY = "Kripya apna sawaal thoda vistaar se bataiye."
GENERIC_REPLY = "Maaf kijiye, abhi jawab dene mein dikkat ho rahi hai."

WEATHER_KEYWORDS = ("weather", "mausam", "मौसम", "baarish", "barish", "temperature")
IDENTITY_KEYWORDS = (
    "who are you", "your name", "tum kaun", "aap kaun", "tumhara naam",
    "aapka naam", "kaun ho", "तुम कौन", "आप कौन",
)
MIN_USER_TEXT_CHARS = 3

USER_MARKER = "User:"
ANSWER_MARKER = "Answer:"


def extract_user_text(prompt: str) -> str:
    """
    Pull the user's words out of a built prompt.

    Uses the text between the last 'User:' and the following 'Answer:' when
    present, otherwise the whole prompt.
    """
    text = prompt or ""
    start = text.rfind(USER_MARKER)
    if start == -1:
        return text.strip()

    text = text[start + len(USER_MARKER):]
    end = text.find(ANSWER_MARKER)
    if end != -1:
        text = text[:end]
    return text.strip()


class LocalHeuristicBrain(Brain):
    """Fixed replies chosen by keyword. Checks run in order: weather, identity, length."""

    def complete(self, prompt: str, max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS) -> str:
        user_text = extract_user_text(prompt)
        lowered = user_text.lower()

        if any(keyword in lowered for keyword in WEATHER_KEYWORDS):
            reply = OFFLINE_WEATHER_REPLY
        elif any(keyword in lowered for keyword in IDENTITY_KEYWORDS):
            reply = IDENTITY_REPLY
        elif len(user_text) < MIN_USER_TEXT_CHARS:
            reply = SHORT_PROMPT_REPLY
        else:
            reply = GENERIC_REPLY

        logger.info(f"LocalHeuristicBrain answered offline (user_text_len={len(user_text)})")
        return reply
