"""
Due-Reminder Scanner Tests

Time is injected through scan(now=...); the background scheduler is only
started and stopped, never waited on.
"""

import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

from vaani.core import DueReminderScanner
from vaani.memory import MemoryReminderStore, ReminderStore, StorageWriteError

BEFORE_2030 = datetime(2029, 12, 31, 23, 59, tzinfo=timezone.utc)
AFTER_2030 = datetime(2030, 1, 1, 7, 0, 1, tzinfo=timezone.utc)


def test_take_medicine_scenario():
    """Empty store -> add -> scan before due -> scan after due"""
    print("=" * 70)
    print("TEST 1: Take Medicine Scenario")
    print("=" * 70)

    with tempfile.TemporaryDirectory() as tmpdir:
        store = ReminderStore(storage_path=Path(tmpdir) / "reminders.json")
        audit_log = Path(tmpdir) / "delivered.log"
        scanner = DueReminderScanner(store, audit_log)

        print("\n[1.1] Adding reminder...")
        reminder_id = store.add("u1", "Take medicine", "2030-01-01T07:00:00.000Z")
        loaded = store.load()
        assert len(loaded) == 1 and loaded[0].delivered is False
        print(f"✓ Added {reminder_id}")

        print("\n[1.2] Scanning before due time...")
        assert scanner.scan(now=BEFORE_2030) == []
        assert not audit_log.exists()
        print("✓ Nothing due, no audit line")

        print("\n[1.3] Scanning after due time...")
        due = scanner.scan(now=AFTER_2030)
        assert [r.id for r in due] == [reminder_id]
        assert due[0].delivered is True
        assert due[0].delivered_at == "2030-01-01T07:00:01.000Z"
        assert store.load()[0].delivered is True
        print("✓ Reminder delivered and persisted")

        print("\n[1.4] Checking audit log...")
        lines = audit_log.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        stamp, payload = lines[0].split(" - ", 1)
        assert stamp == "2030-01-01T07:00:01.000Z"
        assert [r["id"] for r in json.loads(payload)] == [reminder_id]
        print(f"✓ Audit line: {lines[0][:60]}...")

    print("\n✅ Scenario test PASSED")


def test_no_due_means_no_write():
    store = MemoryReminderStore()
    store.add("u1", "Later", "2030-01-01T07:00:00.000Z")
    writes = store.write_count

    scanner = DueReminderScanner(store)
    assert scanner.scan(now=BEFORE_2030) == []
    assert store.write_count == writes


def test_second_scan_is_empty():
    """A delivered reminder is never reported twice"""
    store = MemoryReminderStore()
    store.add("u1", "Take medicine", "2030-01-01T07:00:00.000Z")
    scanner = DueReminderScanner(store)

    assert len(scanner.scan(now=AFTER_2030)) == 1
    writes = store.write_count
    assert scanner.scan(now=AFTER_2030 + timedelta(minutes=1)) == []
    assert store.write_count == writes


def test_batch_persisted_once():
    store = MemoryReminderStore()
    for i in range(3):
        store.add("u1", f"R{i}", "2030-01-01T07:00:00.000Z")
    store.add("u1", "Future", "2031-01-01T07:00:00.000Z")
    writes = store.write_count

    due = DueReminderScanner(store).scan(now=AFTER_2030)
    assert [r.title for r in due] == ["R0", "R1", "R2"]
    assert store.write_count == writes + 1
    assert [r.title for r in store.pending()] == ["Future"]


def test_unparseable_reminder_is_left_alone():
    store = MemoryReminderStore([
        {"id": "R-1", "user_id": "u1", "title": "bad", "datetime": "kal subah",
         "created_at": "", "delivered": False},
    ])
    assert DueReminderScanner(store).scan(now=AFTER_2030) == []
    assert store.load()[0].delivered is False


def test_audit_failure_does_not_fail_scan():
    with tempfile.TemporaryDirectory() as tmpdir:
        # A directory where the log file should be makes the append fail
        audit_log = Path(tmpdir) / "delivered.log"
        audit_log.mkdir()
        store = MemoryReminderStore()
        store.add("u1", "Take medicine", "2030-01-01T07:00:00.000Z")

        due = DueReminderScanner(store, audit_log).scan(now=AFTER_2030)
        assert len(due) == 1
        assert store.load()[0].delivered is True


def test_scheduled_scan_swallows_errors():
    scanner = DueReminderScanner(MemoryReminderStore())
    with patch.object(scanner, "scan", side_effect=RuntimeError("disk gone")) as scan:
        scanner.run_scheduled_scan()
        scanner.run_scheduled_scan()
    assert scan.call_count == 2


def test_start_and_shutdown():
    scanner = DueReminderScanner(MemoryReminderStore())
    assert not scanner.running

    scanner.start()
    try:
        assert scanner.running
        job = scanner._scheduler.get_job("vaani-due-scan")
        assert job is not None
        assert job.max_instances == 1
        scanner.start()  # second start is a no-op
    finally:
        scanner.shutdown()

    assert not scanner.running
    scanner.shutdown()  # idempotent


def test_failed_save_keeps_reminders_due():
    """A scan whose save fails reports nothing as delivered and writes no audit line"""
    with tempfile.TemporaryDirectory() as tmpdir:
        audit_log = Path(tmpdir) / "delivered.log"
        store = MemoryReminderStore()
        reminder_id = store.add("u1", "Take medicine", "2030-01-01T07:00:00.000Z")
        scanner = DueReminderScanner(store, audit_log)

        with patch.object(store, "save", return_value=False):
            try:
                scanner.scan(now=AFTER_2030)
            except StorageWriteError:
                pass
            else:
                raise AssertionError("Expected StorageWriteError")

        assert not audit_log.exists()
        assert store.load()[0].delivered is False

        # Storage is back; the reminder is delivered exactly once
        assert [r.id for r in scanner.scan(now=AFTER_2030)] == [reminder_id]
        assert scanner.scan(now=AFTER_2030) == []
        assert len(audit_log.read_text(encoding="utf-8").splitlines()) == 1


def test_scan_keeps_unreadable_records():
    store = MemoryReminderStore([
        {"title": "legacy, no id"},
        {"id": "R-1", "user_id": "u1", "title": "Take medicine",
         "datetime": "2030-01-01T07:00:00.000Z", "created_at": "", "delivered": False},
    ])
    assert [r.id for r in DueReminderScanner(store).scan(now=AFTER_2030)] == ["R-1"]
    assert store.load_entries()[0] == {"title": "legacy, no id"}
