"""
VAANI Reminder Models

Data structures for the flat reminder list.

Timestamps are kept as the ISO-8601 strings they were stored with, so a
load/save cycle never rewrites them. Parsing happens only when a reminder is
compared against the clock.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Keys owned by the model; anything else found in a stored record is carried along
KNOWN_KEYS = ("id", "user_id", "title", "datetime", "created_at", "delivered", "delivered_at")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def to_iso_z(moment: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with millisecond precision and a 'Z' suffix.

    Naive datetimes are taken as system local time.
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO-8601 string into an aware datetime.

    Accepts a trailing 'Z'. Values without an offset are local time.

    Raises:
        ValueError: If the value is not a valid ISO-8601 datetime
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not an ISO datetime: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def new_reminder_id(now: Optional[datetime] = None) -> str:
    """Creation-timestamp based identifier: R-<epoch milliseconds>"""
    if now is None:
        return f"R-{time.time_ns() // 1_000_000}"
    return f"R-{int(now.timestamp() * 1000)}"


@dataclass
class Reminder:
    """
    A single scheduled note.

    `delivered` is one-way: the scanner flips it to True and nothing
    flips it back.
    """
    id: str
    user_id: str
    title: str
    datetime: str
    created_at: str
    delivered: bool = False
    delivered_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.id:
            raise ValueError("Reminder ID cannot be empty")
        if not isinstance(self.delivered, bool):
            raise TypeError("delivered must be bool")

    def scheduled_at(self) -> datetime:
        return parse_iso(self.datetime)

    def is_due(self, now: datetime) -> bool:
        """
        True when the reminder is undelivered and its scheduled time is <= now.

        An unparseable schedule is never due.
        """
        if self.delivered:
            return False
        try:
            scheduled = self.scheduled_at()
        except ValueError:
            logger.warning(f"Reminder {self.id} has unparseable datetime: {self.datetime!r}")
            return False

        if now.tzinfo is None:
            now = now.astimezone()
        return scheduled <= now

    def mark_delivered(self, now: datetime) -> None:
        self.delivered = True
        self.delivered_at = to_iso_z(now)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict (delivered_at omitted until set)"""
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'datetime': self.datetime,
            'created_at': self.created_at,
            'delivered': self.delivered,
        }
        if self.delivered_at is not None:
            data['delivered_at'] = self.delivered_at
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Reminder':
        """Create Reminder from a stored dict"""
        if not isinstance(data, dict):
            raise TypeError(f"Reminder record must be an object, got {type(data).__name__}")
        return cls(
            id=data['id'],
            user_id=data.get('user_id', ''),
            title=data.get('title', ''),
            datetime=data['datetime'],
            created_at=data.get('created_at', ''),
            delivered=bool(data.get('delivered', False)),
            delivered_at=data.get('delivered_at'),
            extra={k: v for k, v in data.items() if k not in KNOWN_KEYS},
        )


def create_reminder(
    user_id: str,
    title: str,
    datetime_iso: str,
    reminder_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Reminder:
    """
    Factory for a new, undelivered reminder.

    Args:
        user_id: Owning user
        title: Free text
        datetime_iso: Scheduled time as ISO-8601, stored verbatim
        reminder_id: Explicit identifier (default: derived from the clock)
        now: Creation time (default: current time)

    Returns:
        New Reminder with delivered=False
    """
    now = now or utc_now()
    return Reminder(
        id=reminder_id or new_reminder_id(now),
        user_id=user_id,
        title=title,
        datetime=datetime_iso,
        created_at=to_iso_z(now),
        delivered=False,
    )
