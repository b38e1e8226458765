"""Daily and hourly moderation counters kept in Redis hashes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import redis

DAILY_STATS_KEY_PREFIX = "daily_statistics"
HOURLY_STATS_KEY_PREFIX = "hourly_statistics"

FIELD_USERS_CONFIRMED = "users_confirmed"
FIELD_USERS_FLAGGED = "users_flagged"
FIELD_USERS_CLEARED = "users_cleared"
FIELD_BANNED_USERS_PURGED = "banned_users_purged"
FIELD_FLAGGED_USERS_PURGED = "flagged_users_purged"
FIELD_CLEARED_USERS_PURGED = "cleared_users_purged"

_HOURS_TRACKED = 24


@dataclass(frozen=True)
class HourlyStat:
    """Counters recorded during one hour of the day."""

    hour: int
    confirmed: int
    flagged: int
    cleared: int


def _text(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


def _hourly_key(moment: datetime) -> str:
    return f"{HOURLY_STATS_KEY_PREFIX}:{moment.strftime('%Y-%m-%d:%H')}"


class StatisticsClient:
    """Stores and reads statistics counters in Redis."""

    def __init__(self, client: Any, logger: logging.Logger | None = None) -> None:
        self.client = client
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def _increment(self, key: str, field: str, count: int, label: str) -> None:
        try:
            self.client.hincrby(key, field, count)
        except redis.RedisError:
            self._logger.exception(
                "Failed to increment %s stat (field=%s, count=%d)", label, field, count
            )
            raise

    def increment_daily_stat(self, field: str, count: int) -> None:
        """Add ``count`` to today's counter for ``field``."""
        date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self._increment(f"{DAILY_STATS_KEY_PREFIX}:{date}", field, count, "daily")

    def increment_hourly_stat(self, field: str, count: int) -> None:
        """Add ``count`` to the current hour's counter for ``field``."""
        key = _hourly_key(datetime.now(timezone.utc))
        self._increment(key, field, count, "hourly")

    def get_hourly_stats(self) -> list[HourlyStat]:
        """Return the last 24 hours of statistics, oldest first."""
        now = datetime.now(timezone.utc)
        stats: list[HourlyStat] = []
        for offset in range(_HOURS_TRACKED - 1, -1, -1):
            moment = now - timedelta(hours=offset)
            key = _hourly_key(moment)
            try:
                raw = self.client.hgetall(key)
            except redis.RedisError:
                self._logger.exception("Failed to get hourly stats (key=%s)", key)
                raise
            counters = {_text(name): int(_text(value)) for name, value in raw.items()}
            stats.append(
                HourlyStat(
                    hour=moment.hour,
                    confirmed=counters.get(FIELD_USERS_CONFIRMED, 0),
                    flagged=counters.get(FIELD_USERS_FLAGGED, 0),
                    cleared=counters.get(FIELD_USERS_CLEARED, 0),
                )
            )
        return stats