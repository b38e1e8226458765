"""Concurrent retrieval of group information."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Protocol

_MAX_WORKERS = 32


class GroupLockedError(Exception):
    """Raised when a group is locked."""

    def __init__(self, group_id: int) -> None:
        super().__init__(f"group {group_id} is locked")
        self.group_id = group_id


class GroupsAPI(Protocol):
    def get_group_info(self, group_id: int) -> Any: ...


class GroupFetcher:
    """Fetches group information for many groups at once."""

    def __init__(self, api: GroupsAPI, logger: logging.Logger | None = None) -> None:
        self._api = api
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def _fetch_one(self, group_id: int) -> Any:
        info = self._api.get_group_info(group_id)
        if getattr(info, "is_locked", None):
            raise GroupLockedError(group_id)
        return info

    def fetch_group_infos(self, group_ids: Iterable[int]) -> list[Any]:
        """Return information for every group that could be fetched and is not locked."""
        requested = list(group_ids)
        unique_ids = list(dict.fromkeys(requested))
        valid: list[Any] = []

        if unique_ids:
            workers = min(_MAX_WORKERS, len(unique_ids))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {gid: pool.submit(self._fetch_one, gid) for gid in unique_ids}
            for group_id, future in futures.items():
                try:
                    valid.append(future.result())
                except GroupLockedError:
                    continue
                except Exception as exc:
                    self._logger.warning(
                        "Error fetching group info (groupID=%d): %s", group_id, exc
                    )

        self._logger.info(
            "Finished fetching group information (totalRequested=%d, successfulFetches=%d)",
            len(requested),
            len(valid),
        )
        return valid