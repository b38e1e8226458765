from datetime import datetime, timezone

import pytest
import redis

from rotector.statistics import (
    FIELD_USERS_CLEARED,
    FIELD_USERS_CONFIRMED,
    FIELD_USERS_FLAGGED,
    HourlyStat,
    StatisticsClient,
)


class FakeHashRedis:
    def __init__(self):
        self.hashes = {}

    def hincrby(self, name, key, amount=1):
        bucket = self.hashes.setdefault(name, {})
        bucket[key] = bucket.get(key, 0) + amount
        return bucket[key]

    def hgetall(self, name):
        return {
            k.encode(): str(v).encode() for k, v in self.hashes.get(name, {}).items()
        }


class BrokenRedis:
    def hincrby(self, *args, **kwargs):
        raise redis.ConnectionError("down")

    def hgetall(self, *args, **kwargs):
        raise redis.ConnectionError("down")


def test_increment_daily_stat_uses_dated_key():
    fake = FakeHashRedis()
    client = StatisticsClient(fake, None)
    client.increment_daily_stat(FIELD_USERS_FLAGGED, 3)
    client.increment_daily_stat(FIELD_USERS_FLAGGED, 2)
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    assert fake.hashes[f"daily_statistics:{date}"][FIELD_USERS_FLAGGED] == 5


def test_increment_hourly_stat_uses_hour_key():
    fake = FakeHashRedis()
    client = StatisticsClient(fake, None)
    client.increment_hourly_stat(FIELD_USERS_CLEARED, 4)
    hour = datetime.now(timezone.utc).strftime("%Y-%m-%d:%H")
    assert fake.hashes[f"hourly_statistics:{hour}"][FIELD_USERS_CLEARED] == 4


def test_get_hourly_stats_empty_has_24_zero_entries():
    stats = StatisticsClient(FakeHashRedis(), None).get_hourly_stats()
    assert len(stats) == 24
    assert all(s.confirmed == 0 and s.flagged == 0 and s.cleared == 0 for s in stats)


def test_get_hourly_stats_is_chronological():
    stats = StatisticsClient(FakeHashRedis(), None).get_hourly_stats()
    hours = [s.hour for s in stats]
    for earlier, later in zip(hours, hours[1:]):
        assert (earlier + 1) % 24 == later
    assert stats[-1].hour == datetime.now(timezone.utc).hour


def test_get_hourly_stats_reports_current_hour_last():
    fake = FakeHashRedis()
    client = StatisticsClient(fake, None)
    client.increment_hourly_stat(FIELD_USERS_CONFIRMED, 7)
    client.increment_hourly_stat(FIELD_USERS_FLAGGED, 2)
    client.increment_hourly_stat(FIELD_USERS_CLEARED, 1)
    latest = client.get_hourly_stats()[-1]
    assert latest == HourlyStat(
        hour=latest.hour, confirmed=7, flagged=2, cleared=1
    )


def test_increment_errors_propagate():
    client = StatisticsClient(BrokenRedis(), None)
    with pytest.raises(redis.ConnectionError):
        client.increment_daily_stat(FIELD_USERS_FLAGGED, 1)
    with pytest.raises(redis.ConnectionError):
        client.increment_hourly_stat(FIELD_USERS_FLAGGED, 1)


def test_get_hourly_stats_error_propagates():
    with pytest.raises(redis.ConnectionError):
        StatisticsClient(BrokenRedis(), None).get_hourly_stats()