"""
VAANI Reply Engine - Rule-Based Reply Decision

Decides how an inbound transcript is answered BEFORE any model is called.

Architectural Rules:
- Pure classifier only
- NO store access, NO model calls
- Returns a Decision, never raises on odd input

Rule order (first match wins):
1. Image attached   → canned image observation
2. Capability query → USE_REMOTE_BRAIN
3. Greeting         → canned greeting
4. Reminder listing → SHOW_REMINDERS
5. Reminder intent  → canned "when?" prompt
6. Very short text  → canned "say more"
7. Anything else    → UNMATCHED
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


# ============================================================================
# CANNED REPLIES
# ============================================================================

IMAGE_OBSERVATION_REPLY = "Maine photo dekha, isme dukan ya sadak nazar aa rahi hai."
GREETING_REPLY = "Namaste! Main Vaani hoon. Aapko kis cheez mein madad chahiye?"
REMINDER_CLARIFY_REPLY = "Thik hai, kab set karun? (udaharan: 'kal subah 7 baje')"
SAY_MORE_REPLY = "Mujhe thoda aur bataiye ya seedha sawaal puchiye."


# ============================================================================
# PHRASE SETS (matched against lowercased text)
# ============================================================================

CAPABILITY_PHRASES = (
    "tum kya kar",
    "kya kar sakti",
    "kya kar sakta",
    "what can you do",
    "aap kya kar sakte",
)
# Bare "kya kar" only counts as a capability question in short utterances
LOOSE_CAPABILITY_PHRASE = "kya kar"
LOOSE_CAPABILITY_MAX_CHARS = 80

# Matched as whole words: "hi" must not fire inside "abhi" or "nahi"
GREETING_WORDS = ("namaste", "hello", "hi", "pranam")
GREETING_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(w) for w in GREETING_WORDS) + r")\b"
)

SHOW_REMINDER_PHRASES = (
    "show reminders",
    "show my reminders",
    "my reminders",
    "pending reminders",
    "list reminders",
    "mere reminders",
    "reminders dikhao",
    "मेरे रिमाइंडर",
)

REMINDER_INTENT_PHRASES = (
    "remind",
    "reminder",
    "remind me",
    "रिमाइंडर",
    "याद दिला",
    "जगाना",
)

MIN_TEXT_CHARS = 3


class DecisionKind(Enum):
    """How the caller should handle an input"""
    USE_REMOTE_BRAIN = "use_remote_brain"
    SHOW_REMINDERS = "show_reminders"
    CANNED_TEXT = "canned_text"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class Decision:
    """
    Engine output. Only CANNED_TEXT carries text.

    UNMATCHED ("no rule fired") is kept apart from a canned reply so the
    two are never conflated through an empty string.
    """
    kind: DecisionKind
    text: Optional[str] = None

    @classmethod
    def canned(cls, text: str) -> 'Decision':
        return cls(DecisionKind.CANNED_TEXT, text)

    @classmethod
    def use_remote_brain(cls) -> 'Decision':
        return cls(DecisionKind.USE_REMOTE_BRAIN)

    @classmethod
    def show_reminders(cls) -> 'Decision':
        return cls(DecisionKind.SHOW_REMINDERS)

    @classmethod
    def unmatched(cls) -> 'Decision':
        return cls(DecisionKind.UNMATCHED)

    @property
    def is_canned(self) -> bool:
        return self.kind is DecisionKind.CANNED_TEXT


def _is_capability_question(text: str) -> bool:
    if any(phrase in text for phrase in CAPABILITY_PHRASES):
        return True
    return LOOSE_CAPABILITY_PHRASE in text and len(text) < LOOSE_CAPABILITY_MAX_CHARS


def _is_greeting(text: str) -> bool:
    return GREETING_PATTERN.search(text) is not None


def _is_show_reminders(text: str) -> bool:
    return any(phrase in text for phrase in SHOW_REMINDER_PHRASES)


def _is_reminder_intent(text: str) -> bool:
    return any(phrase in text for phrase in REMINDER_INTENT_PHRASES)


class ReplyEngine:
    """
    Ordered keyword classifier for transcripts.

    Stateless; one instance can serve every request.
    """

    def decide(
        self,
        text: Optional[str],
        has_image: bool = False,
        stt_confidence: Optional[float] = None,
    ) -> Decision:
        """
        Classify one input.

        Args:
            text: Raw transcript (None is treated as empty)
            has_image: An image was attached to the request
            stt_confidence: Speech-to-text confidence, logged only

        Returns:
            Decision for the caller to act on
        """
        raw = (text or "").strip()
        lowered = raw.lower()

        logger.info(f"STT transcript: {raw!r} confidence: {stt_confidence}")

        if has_image:
            return Decision.canned(IMAGE_OBSERVATION_REPLY)

        if _is_capability_question(lowered):
            return Decision.use_remote_brain()

        if _is_greeting(lowered):
            return Decision.canned(GREETING_REPLY)

        if _is_show_reminders(lowered):
            return Decision.show_reminders()

        if _is_reminder_intent(lowered):
            return Decision.canned(REMINDER_CLARIFY_REPLY)

        if len(lowered) < MIN_TEXT_CHARS:
            return Decision.canned(SAY_MORE_REPLY)

        return Decision.unmatched()
