"""Priority queues of users to recheck, stored in Redis sorted sets."""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable

import redis

QUEUE_INFO_EXPIRY = timedelta(hours=1)
ABORTED_EXPIRY = timedelta(hours=1)

QUEUE_STATUS_PREFIX = "queue_status:"
QUEUE_POSITION_PREFIX = "queue_position:"
QUEUE_PRIORITY_PREFIX = "queue_priority:"
ABORTED_PREFIX = "aborted:"

ACTIVITY_TYPE_RECHECKED = "rechecked"

_TIME_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


class Priority(str, Enum):
    """Processing tiers; higher tiers are served first."""

    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class Status(str, Enum):
    """Lifecycle states of a queued item."""

    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETE = "Complete"
    SKIPPED = "Skipped"


def _value(value: Any) -> str:
    """Plain string for a str, an enum member or Redis bytes."""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def queue_key(priority: Any) -> str:
    """Return the Redis key of the sorted set for a priority."""
    return f"queue:{_value(priority)}_priority"


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _parse_time(text: str) -> datetime:
    match = _TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    base, fraction, zone = match.groups()
    moment = datetime.strptime(base, "%Y-%m-%dT%H:%M:%S")
    if fraction:
        moment = moment.replace(microsecond=int((fraction + "000000")[:6]))
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return moment.replace(tzinfo=tz)


@dataclass
class Item:
    """Everything needed to process one queued user."""

    user_id: int
    priority: str
    reason: str
    added_by: int
    added_at: datetime
    status: str
    check_exists: bool = False

    def __post_init__(self) -> None:
        self.priority = _value(self.priority)
        self.status = _value(self.status)

    def to_json(self) -> str:
        """Serialise the item; equal items give identical text."""
        return json.dumps(
            {
                "userId": self.user_id,
                "priority": self.priority,
                "reason": self.reason,
                "addedBy": self.added_by,
                "addedAt": _format_time(self.added_at),
                "status": self.status,
                "checkExists": self.check_exists,
            },
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, data: str | bytes) -> Item:
        """Build an item from its JSON form."""
        raw = json.loads(data)
        return cls(
            user_id=int(raw.get("userId", 0)),
            priority=raw.get("priority", ""),
            reason=raw.get("reason", ""),
            added_by=int(raw.get("addedBy", 0)),
            added_at=_parse_time(raw.get("addedAt", "0001-01-01T00:00:00Z")),
            status=raw.get("status", ""),
            check_exists=bool(raw.get("checkExists", False)),
        )


class QueueManager:
    """Queue operations over Redis sorted sets plus per-user metadata keys."""

    def __init__(
        self,
        client: Any,
        activity_logger: Callable[..., Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._activity_logger = activity_logger
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def get_queue_length(self, priority: Any) -> int:
        """Return the number of items in a priority queue, or 0 on error."""
        try:
            return int(self._client.zcard(queue_key(priority)))
        except redis.RedisError:
            self._logger.exception("Failed to get queue length")
            return 0

    def add_to_queue(self, item: Item) -> None:
        """Queue an item, clearing any earlier abort of the same user."""
        if self.is_aborted(item.user_id):
            self.clear_aborted(item.user_id)

        score = float(math.floor(item.added_at.timestamp()))
        try:
            self._client.zadd(queue_key(item.priority), {item.to_json(): score})
        except redis.RedisError:
            self._logger.exception("Failed to add item to queue")
            raise

        if self._activity_logger is not None:
            try:
                self._activity_logger(
                    user_id=item.user_id,
                    reviewer_id=item.added_by,
                    activity_type=ACTIVITY_TYPE_RECHECKED,
                    timestamp=datetime.now(timezone.utc),
                    details={"reason": item.reason},
                )
            except Exception:  # the activity log must not undo a successful enqueue
                self._logger.exception("Failed to log queue activity")

    def get_queue_items(self, key: str, batch_size: int) -> list[str]:
        """Return up to ``batch_size`` serialised items, lowest score first."""
        try:
            members = self._client.zrange(key, 0, batch_size - 1)
        except redis.RedisError:
            self._logger.exception("Failed to get items from queue")
            raise
        return [_value(member) for member in members]

    def remove_queue_item(self, key: str, item: Item) -> None:
        """Remove an item from a queue."""
        try:
            self._client.zrem(key, item.to_json())
        except redis.RedisError:
            self._logger.exception("Failed to remove item from queue")
            raise

    def update_queue_item(self, key: str, score: float, item: Item) -> None:
        """Add or re-score an item in a queue."""
        try:
            self._client.zadd(key, {item.to_json(): float(score)})
        except redis.RedisError:
            self._logger.exception("Failed to update item in queue")
            raise

    def _get(self, key: str) -> str | None:
        try:
            value = self._client.get(key)
        except redis.RedisError:
            return None
        return None if value is None else _value(value)

    def get_queue_info(self, user_id: int) -> tuple[str, str, int]:
        """Return ``(status, priority, position)``; missing parts are empty or 0."""
        status = self._get(f"{QUEUE_STATUS_PREFIX}{user_id}") or ""
        priority = self._get(f"{QUEUE_PRIORITY_PREFIX}{user_id}") or ""
        position_text = self._get(f"{QUEUE_POSITION_PREFIX}{user_id}")
        try:
            position = int(position_text) if position_text is not None else 0
        except ValueError:
            position = 0
        return status, priority, position

    def set_queue_info(self, user_id: int, status: Any, priority: Any, position: int) -> None:
        """Store a user's queue status, priority and position with expiry."""
        expiry = int(QUEUE_INFO_EXPIRY.total_seconds())
        self._client.set(f"{QUEUE_STATUS_PREFIX}{user_id}", _value(status), ex=expiry)
        self._client.set(f"{QUEUE_PRIORITY_PREFIX}{user_id}", _value(priority), ex=expiry)
        self._client.set(f"{QUEUE_POSITION_PREFIX}{user_id}", str(position), ex=expiry)

    def clear_queue_info(self, user_id: int) -> None:
        """Delete all queue metadata for a user."""
        self._client.delete(f"{QUEUE_STATUS_PREFIX}{user_id}")
        self._client.delete(f"{QUEUE_PRIORITY_PREFIX}{user_id}")
        self._client.delete(f"{QUEUE_POSITION_PREFIX}{user_id}")

    def mark_as_aborted(self, user_id: int) -> None:
        """Flag a user as aborted, with automatic expiry."""
        self._client.set(
            f"{ABORTED_PREFIX}{user_id}", "1", ex=int(ABORTED_EXPIRY.total_seconds())
        )

    def is_aborted(self, user_id: int) -> bool:
        """Report whether a user carries an abort flag."""
        return self._get(f"{ABORTED_PREFIX}{user_id}") is not None

    def clear_aborted(self, user_id: int) -> None:
        """Remove a user's abort flag."""
        self._client.delete(f"{ABORTED_PREFIX}{user_id}")