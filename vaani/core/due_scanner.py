"""
VAANI Due-Reminder Scanner

Once per minute, promote every undelivered reminder whose time has passed
to delivered, persist the change once, and append an audit line.

The scheduled job isolates failures: an exception in one run is logged
and the next minute runs as usual. scan() can also be called directly
(manual trigger, tests) and returns the same became-due list.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from vaani.memory import Reminder, ReminderStore, StorageWriteError, to_iso_z, utc_now

logger = logging.getLogger(__name__)

SCAN_JOB_ID = "vaani-due-scan"


class DueReminderScanner:
    """
    Periodic due-scan over a ReminderStore.

    Lifecycle is explicit: start() on boot, shutdown() on exit.
    """

    def __init__(self, store: ReminderStore, audit_log_path: Optional[Path] = None):
        """
        Args:
            store: Store shared with the request handlers
            audit_log_path: Append-only delivery log (None disables it)
        """
        self.store = store
        self.audit_log_path = Path(audit_log_path) if audit_log_path else None
        self._scheduler: Optional[BackgroundScheduler] = None
        self.last_scan_at: Optional[datetime] = None

    def scan(self, now: Optional[datetime] = None) -> List[Reminder]:
        """
        Mark due reminders delivered.

        Args:
            now: Current time (default: utc_now()); injected for testability

        Returns:
            Reminders that became due in this scan

        Raises:
            StorageWriteError: If the delivered flags could not be persisted;
                nothing is audited and the same reminders stay due
        """
        now = now or utc_now()
        due: List[Reminder] = []

        with self.store.locked():
            entries = self.store.load_entries()
            for entry in entries:
                if isinstance(entry, Reminder) and entry.is_due(now):
                    entry.mark_delivered(now)
                    due.append(entry)

            if due and not self.store.save(entries):
                raise StorageWriteError(f"Could not persist {len(due)} delivered reminders")

        self.last_scan_at = now
        if due:
            logger.info(f"Reminders due now: {[r.id for r in due]}")
            self._append_audit(now, due)
        return due

    def _append_audit(self, now: datetime, due: List[Reminder]):
        """One line per non-empty scan: '<ISO time> - <JSON list>'"""
        if self.audit_log_path is None:
            return

        payload = json.dumps([r.to_dict() for r in due], ensure_ascii=False, separators=(",", ":"))
        try:
            self.audit_log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.audit_log_path, "a", encoding="utf-8") as f:
                f.write(f"{to_iso_z(now)} - {payload}\n")
        except OSError as e:
            logger.error(f"Failed to append delivery audit log: {e}")

    def run_scheduled_scan(self):
        """Scheduler entry point; never raises"""
        try:
            self.scan()
        except Exception as e:
            logger.error(f"Scheduled due-scan failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self):
        """Start the every-minute background job"""
        if self.running:
            logger.warning("DueReminderScanner already running")
            return

        scheduler = BackgroundScheduler()
        scheduler.add_job(
            self.run_scheduled_scan,
            trigger=CronTrigger(minute="*"),
            id=SCAN_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("DueReminderScanner started (every minute)")

    def shutdown(self):
        """Stop the background job (no-op if not started)"""
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("DueReminderScanner stopped")
