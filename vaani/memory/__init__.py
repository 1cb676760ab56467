"""
VAANI Memory - Flat Reminder List

Single-file persistence for time-based reminders.
"""

from .reminder_models import Reminder, create_reminder, parse_iso, to_iso_z, utc_now
from .reminder_store import (
    ReminderStore,
    MemoryReminderStore,
    ReminderStoreError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    'Reminder',
    'create_reminder',
    'parse_iso',
    'to_iso_z',
    'utc_now',
    'ReminderStore',
    'MemoryReminderStore',
    'ReminderStoreError',
    'StorageReadError',
    'StorageWriteError',
]
