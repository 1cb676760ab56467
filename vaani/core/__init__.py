"""
VAANI Core Runtime

Reply decision, request handling and the due-reminder scanner.
"""

from .reply_engine import (
    ReplyEngine,
    Decision,
    DecisionKind,
    IMAGE_OBSERVATION_REPLY,
    GREETING_REPLY,
    REMINDER_CLARIFY_REPLY,
    SAY_MORE_REPLY,
)
from .assistant import (
    Assistant,
    ActResult,
    UnhandledRequestError,
    build_prompt,
    describe_pending,
    is_demo_reminder_trigger,
)
from .due_scanner import DueReminderScanner

__all__ = [
    # Reply engine
    'ReplyEngine',
    'Decision',
    'DecisionKind',
    'IMAGE_OBSERVATION_REPLY',
    'GREETING_REPLY',
    'REMINDER_CLARIFY_REPLY',
    'SAY_MORE_REPLY',
    # Assistant
    'Assistant',
    'ActResult',
    'UnhandledRequestError',
    'build_prompt',
    'describe_pending',
    'is_demo_reminder_trigger',
    # Scanner
    'DueReminderScanner',
]
