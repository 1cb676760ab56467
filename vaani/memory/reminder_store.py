"""
VAANI Reminder Store - Persistent JSON Storage

Reads and writes the reminder list as a single JSON array (reminders.json).

Design:
- Whole-collection read-modify-write on every mutation
- Graceful corruption recovery (load never raises, save reports False)
- Records that fail to parse are carried through saves untouched
- One re-entrant lock per store serializes mutations across request
  threads and the scanner thread
- File is plain JSON so the user can inspect it directly
"""

import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

from .reminder_models import Reminder, create_reminder, new_reminder_id, utc_now

logger = logging.getLogger(__name__)


class ReminderStoreError(Exception):
    """Base exception for reminder storage errors"""
    pass


class StorageReadError(ReminderStoreError):
    """Stored collection exists but cannot be read or parsed"""
    pass


class StorageWriteError(ReminderStoreError):
    """Stored collection cannot be written"""
    pass


class ReminderStore:
    """
    File-based reminder storage using JSON.

    Storage location: reminders.json in the working directory unless a
    path is given.
    """

    DEFAULT_STORAGE_FILE = "reminders.json"

    def __init__(self, storage_path: Optional[Path] = None):
        """
        Initialize reminder store.

        Args:
            storage_path: Custom storage file path (default: ./reminders.json)

        Note:
            The file is not created until the first save.
        """
        self.storage_path = Path(storage_path) if storage_path else Path(self.DEFAULT_STORAGE_FILE)
        self._lock = threading.RLock()
        logger.info(f"ReminderStore initialized: {self.storage_path}")

    # ------------------------------------------------------------------
    # Backend (overridden by MemoryReminderStore)
    # ------------------------------------------------------------------

    def _read_records(self) -> Optional[list]:
        """
        Read raw records from disk.

        Returns:
            List of record dicts, or None if the file does not exist

        Raises:
            StorageReadError: File is present but unreadable or not a JSON array
        """
        if not self.storage_path.exists():
            return None
        try:
            raw = self.storage_path.read_text(encoding="utf-8")
            data = json.loads(raw or "[]")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageReadError(f"Cannot read {self.storage_path}: {e}") from e

        if not isinstance(data, list):
            raise StorageReadError(
                f"Expected a JSON array in {self.storage_path}, got {type(data).__name__}"
            )
        return data

    def _write_records(self, records: list):
        """
        Write raw records atomically (write to temp, then rename).

        Raises:
            StorageWriteError: If the file cannot be written
        """
        temp_path = self.storage_path.with_name(self.storage_path.name + ".tmp")
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            temp_path.replace(self.storage_path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageWriteError(f"Cannot write {self.storage_path}: {e}") from e

    def _quarantine_corrupt(self):
        """
        Move an unreadable file aside as <name>.bak.

        Keeps the broken content from being overwritten by the next save.
        """
        backup_path = self.storage_path.with_name(self.storage_path.name + ".bak")
        try:
            if self.storage_path.exists():
                self.storage_path.replace(backup_path)
                logger.warning(f"Backed up corrupted storage to: {backup_path}")
        except OSError as e:
            logger.error(f"Failed to back up corrupted storage: {e}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @contextmanager
    def locked(self) -> Iterator["ReminderStore"]:
        """Hold the store lock across a read-modify-write sequence"""
        with self._lock:
            yield self

    def load_entries(self) -> List[Union[Reminder, Any]]:
        """
        Load every stored record in insertion order.

        Records that do not parse as a Reminder are kept as their raw JSON
        value so a later save writes them back unchanged.

        Returns:
            Reminder objects and raw records; empty if the store is missing or corrupt
        """
        with self._lock:
            try:
                records = self._read_records()
            except StorageReadError as e:
                logger.error(f"Corrupted reminder storage: {e}")
                self._quarantine_corrupt()
                return []

            if records is None:
                return []

            entries: List[Union[Reminder, Any]] = []
            for record in records:
                try:
                    entries.append(Reminder.from_dict(record))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Keeping unreadable reminder record as-is: {e}")
                    entries.append(record)
            return entries

    def load(self) -> List[Reminder]:
        """
        Load all reminders in insertion order.

        Returns:
            List of Reminder objects; empty if the store is missing or corrupt
        """
        return [e for e in self.load_entries() if isinstance(e, Reminder)]

    def save(self, reminders: List[Union[Reminder, Any]]) -> bool:
        """
        Overwrite the stored collection.

        Raw records from load_entries() are written back verbatim.

        Returns:
            True if written, False on I/O failure (logged)
        """
        records = [r.to_dict() if isinstance(r, Reminder) else r for r in reminders]
        with self._lock:
            try:
                self._write_records(records)
            except StorageWriteError as e:
                logger.error(f"Failed to save reminders: {e}", exc_info=True)
                return False

        logger.debug(f"Saved {len(records)} reminders")
        return True

    def add(
        self,
        user_id: str,
        title: str,
        datetime_iso: str,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Append a new undelivered reminder.

        Duplicate title/datetime pairs are allowed.

        Returns:
            Identifier of the new reminder

        Raises:
            StorageWriteError: If the updated collection could not be saved
        """
        now = now or utc_now()
        with self._lock:
            entries = self.load_entries()
            taken = {e.id for e in entries if isinstance(e, Reminder)}

            reminder_id = new_reminder_id(now)
            millis = int(reminder_id[2:])
            while reminder_id in taken:
                millis += 1
                reminder_id = f"R-{millis}"

            reminder = create_reminder(user_id, title, datetime_iso, reminder_id=reminder_id, now=now)
            entries.append(reminder)
            if not self.save(entries):
                raise StorageWriteError(f"Reminder {reminder_id} was not persisted")

        logger.info(f"Added reminder: {reminder_id} - {title} (at {datetime_iso})")
        return reminder_id

    def pending(self) -> List[Reminder]:
        """Undelivered reminders in insertion order"""
        return [r for r in self.load() if not r.delivered]


class MemoryReminderStore(ReminderStore):
    """
    Same contract as ReminderStore, backed by an in-memory list.

    Records are kept as dicts so serialization still runs on every save.
    """

    def __init__(self, records: Optional[list] = None):
        self.storage_path = Path(":memory:")
        self._lock = threading.RLock()
        self._records: Optional[list] = list(records) if records is not None else None
        self.write_count = 0

    def _read_records(self) -> Optional[list]:
        if self._records is None:
            return None
        return json.loads(json.dumps(self._records))

    def _write_records(self, records: list):
        try:
            self._records = json.loads(json.dumps(records))
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Cannot serialize reminders: {e}") from e
        self.write_count += 1

    def _quarantine_corrupt(self):
        self._records = None
