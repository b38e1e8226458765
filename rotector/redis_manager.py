"""Lazily created Redis clients, one per logical database."""

from __future__ import annotations

import logging
import threading

import redis

CACHE_DB_INDEX = 0
STATS_DB_INDEX = 1
QUEUE_DB_INDEX = 2
SESSION_DB_INDEX = 3


class RedisManager:
    """Keeps one Redis client per database index, created on first use."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None,
        password: str | None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username or None
        self._password = password or None
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._clients: dict[int, redis.Redis] = {}
        self._lock = threading.Lock()

    def get_client(self, db_index: int) -> redis.Redis:
        """Return the client for ``db_index``, creating it if needed."""
        with self._lock:
            client = self._clients.get(db_index)
            if client is not None:
                return client
            try:
                client = redis.Redis(
                    host=self._host,
                    port=self._port,
                    username=self._username,
                    password=self._password,
                    db=db_index,
                )
            except redis.RedisError as exc:
                raise redis.RedisError(
                    f"failed to create Redis client for DB {db_index}: {exc}"
                ) from exc
            self._clients[db_index] = client
            self._logger.info("Created new Redis client (dbIndex=%d)", db_index)
            return client

    def close(self) -> None:
        """Close every client created so far; safe to call more than once."""
        with self._lock:
            for db_index, client in self._clients.items():
                client.close()
                self._logger.info("Closed Redis client (dbIndex=%d)", db_index)
            self._clients.clear()