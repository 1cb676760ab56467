"""
VAANI Assistant - Request Handling Around the Reply Engine

Responsibilities:
- Ask the ReplyEngine how to answer
- Apply post-decision rules (demo reminder creation, reminder listing)
- Build the brain prompt with pending-reminder context
- Convert every failure into an ActResult envelope (never raises)
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from vaani.core.reply_engine import Decision, DecisionKind, ReplyEngine
from vaani.llm import Brain, DEFAULT_MAX_OUTPUT_TOKENS
from vaani.memory import Reminder, ReminderStore, parse_iso, to_iso_z

logger = logging.getLogger(__name__)

DEMO_USER_ID = "user_demo"
DEMO_REMINDER_TITLE = "Dawai yaad dilana"
DEMO_REMINDER_HOUR = 7

# Substrings of a canned reply that trigger the demo reminder
DEMO_REMINDER_MARKERS = ("demo reminder", "kal subah 7 baje", "reminder set")
# Canned replies that are escalated to the brain anyway
ESCALATE_MARKERS = ("Mujhe thoda", "Samajh nahi aaya")

NO_PENDING_REPLY = "Aapke koi pending reminders nahi hain."
BRAIN_UNAVAILABLE_REPLY = "Maaf kijiye, abhi jawab dene mein dikkat ho rahi hai."

MAX_CONTEXT_REMINDERS = 3
PROMPT_PREAMBLE = (
    "Aap Vaani AI ho, ek Hindi-first, voice-first assistant for everyday users. "
    "Provide a short, accurate, step-by-step or direct answer in Hindi. "
    "Keep it simple and action-focused."
)


class UnhandledRequestError(Exception):
    """Unexpected failure while handling a request; reported, never raised to the client"""
    pass


@dataclass
class ActResult:
    """Outcome of one /act request"""
    success: bool
    action_id: Optional[str] = None
    reply: Optional[str] = None
    reminders: Optional[List[Reminder]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}

        data: Dict[str, Any] = {
            "success": True,
            "action_id": self.action_id,
            "reply": self.reply,
        }
        if self.reminders is not None:
            data["reminders"] = [r.to_dict() for r in self.reminders]
        return data


def new_action_id() -> str:
    return f"A-{time.time_ns() // 1_000_000}"


def build_prompt(user_text: str, recent_reminders: Optional[List[Reminder]] = None) -> str:
    """
    Compose the brain prompt.

    Persona preamble, then up to three pending reminders as context, then
    the user's words and an answer cue.
    """
    summary = [
        f"{r.title} at {r.datetime}"
        for r in (recent_reminders or [])[:MAX_CONTEXT_REMINDERS]
    ]
    context = f"RecentReminders: {'; '.join(summary)}." if summary else ""
    return f"{PROMPT_PREAMBLE} Context: {context}\n\nUser: {user_text}\n\nAnswer:"


def is_demo_reminder_trigger(reply: Optional[str]) -> bool:
    lowered = (reply or "").lower()
    return any(marker in lowered for marker in DEMO_REMINDER_MARKERS)


def should_escalate(decision: Decision) -> bool:
    """True when the decision is answered by the brain"""
    if decision.kind in (DecisionKind.USE_REMOTE_BRAIN, DecisionKind.UNMATCHED):
        return True
    if decision.is_canned:
        return any(marker in (decision.text or "") for marker in ESCALATE_MARKERS)
    return False


def tomorrow_at(hour: int, now: Optional[datetime] = None) -> datetime:
    """Next calendar day at hour:00, system local time"""
    local_now = (now or datetime.now()).astimezone()
    day = local_now.date() + timedelta(days=1)
    # Resolve the UTC offset for the target day, not today's
    return datetime(day.year, day.month, day.day, hour).astimezone()


def format_en_in(moment: datetime) -> str:
    """
    Render a datetime the way the en-IN locale does: 1/1/2030, 12:30:00 pm

    Shown in system local time.
    """
    local = moment.astimezone()
    hour12 = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return (
        f"{local.day}/{local.month}/{local.year}, "
        f"{hour12}:{local.minute:02d}:{local.second:02d} {meridiem}"
    )


def describe_pending(pending: List[Reminder]) -> str:
    """Spoken summary of pending reminders"""
    if not pending:
        return NO_PENDING_REPLY

    first = pending[0]
    try:
        when = format_en_in(parse_iso(first.datetime))
    except ValueError:
        when = first.datetime
    return (
        f"Aapke {len(pending)} pending reminders hain. "
        f"Sabse pehla: {first.title}, scheduled {when}."
    )


class Assistant:
    """
    Handles one request end to end.

    Holds no lock while the brain is working; the store serializes its own
    read-modify-write sequences.
    """

    def __init__(
        self,
        store: ReminderStore,
        brain: Brain,
        engine: Optional[ReplyEngine] = None,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ):
        self.store = store
        self.brain = brain
        self.engine = engine or ReplyEngine()
        self.max_output_tokens = max_output_tokens
        logger.info("Assistant initialized")

    def act(
        self,
        text: Any,
        image: Any = None,
        stt_confidence: Optional[float] = None,
    ) -> ActResult:
        """
        Answer one request.

        Args:
            text: Transcript (coerced to str; None becomes empty)
            image: Any truthy value means an image is attached
            stt_confidence: Speech recognition confidence, logged only

        Returns:
            ActResult; success=False with an error string on any failure
        """
        try:
            return self._act(str(text) if text is not None else "", bool(image), stt_confidence)
        except Exception as e:
            error = UnhandledRequestError(str(e))
            logger.error(f"act failed: {error}", exc_info=True)
            return ActResult(success=False, error=str(error))

    def _act(self, text: str, has_image: bool, stt_confidence: Optional[float]) -> ActResult:
        decision = self.engine.decide(text, has_image=has_image, stt_confidence=stt_confidence)
        logger.info(f"Decision: {decision.kind.value} {decision.text!r}")

        if decision.kind is DecisionKind.SHOW_REMINDERS:
            return self.show_reminders()

        if decision.is_canned and is_demo_reminder_trigger(decision.text):
            return self.create_demo_reminder()

        if should_escalate(decision):
            return self.ask_brain(text)

        return ActResult(success=True, action_id=new_action_id(), reply=decision.text)

    def show_reminders(self) -> ActResult:
        pending = self.store.pending()
        return ActResult(
            success=True,
            action_id=new_action_id(),
            reply=describe_pending(pending),
            reminders=pending,
        )

    def create_demo_reminder(self, now: Optional[datetime] = None) -> ActResult:
        """Schedule the fixed medication reminder for tomorrow 07:00 local"""
        when = to_iso_z(tomorrow_at(DEMO_REMINDER_HOUR, now))
        reminder_id = self.store.add(DEMO_USER_ID, DEMO_REMINDER_TITLE, when)
        return ActResult(
            success=True,
            action_id=reminder_id,
            reply=f"Done. Main ne reminder set kar diya. ID: {reminder_id}",
        )

    def ask_brain(self, text: str) -> ActResult:
        recent = self.store.pending()[:MAX_CONTEXT_REMINDERS]
        prompt = build_prompt(text, recent)
        logger.info(f"Calling brain with prompt (truncated): {prompt[:400]}")

        reply = self.brain.complete(prompt, max_output_tokens=self.max_output_tokens)
        reply = (reply or "").strip() or BRAIN_UNAVAILABLE_REPLY
        return ActResult(success=True, action_id=new_action_id(), reply=reply)
