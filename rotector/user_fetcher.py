"""Concurrent retrieval of user profiles, groups and friends."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Protocol

_MAX_WORKERS = 32


class UserBannedError(Exception):
    """Raised when a user is banned."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"user {user_id} is banned")
        self.user_id = user_id


@dataclass
class UserInfo:
    """A user's profile together with their group memberships and friends."""

    id: int
    name: str
    display_name: str
    description: str
    created_at: datetime
    groups: list[Any] = field(default_factory=list)
    friends: list[Any] = field(default_factory=list)
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class UsersAPI(Protocol):
    def get_user_by_id(self, user_id: int) -> Any: ...

    def get_user_group_roles(self, user_id: int) -> list[Any]: ...

    def get_friends(self, user_id: int) -> list[Any]: ...


class UserFetcher:
    """Fetches complete user information for many users at once."""

    def __init__(self, api: UsersAPI, logger: logging.Logger | None = None) -> None:
        self._api = api
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def fetch_infos(self, user_ids: Iterable[int]) -> list[UserInfo]:
        """Return information for every user that could be fetched and is not banned."""
        requested = list(user_ids)
        unique_ids = list(dict.fromkeys(requested))
        valid: list[UserInfo] = []

        if unique_ids:
            workers = min(_MAX_WORKERS, len(unique_ids))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {uid: pool.submit(self._fetch_one, uid) for uid in unique_ids}
            for user_id, future in futures.items():
                try:
                    valid.append(future.result())
                except UserBannedError:
                    continue
                except Exception as exc:
                    self._logger.warning(
                        "Error fetching user info (userID=%d): %s", user_id, exc
                    )

        self._logger.info(
            "Finished fetching user information (totalRequested=%d, successfulFetches=%d)",
            len(requested),
            len(valid),
        )
        return valid

    def _fetch_one(self, user_id: int) -> UserInfo:
        user = self._api.get_user_by_id(user_id)
        if user.is_banned:
            raise UserBannedError(user_id)
        groups, friends = self._fetch_groups_and_friends(user_id)
        return UserInfo(
            id=user.id,
            name=user.name,
            display_name=user.display_name,
            description=user.description,
            created_at=user.created,
            groups=groups,
            friends=friends,
            last_updated=datetime.now(timezone.utc),
        )

    def _fetch_groups_and_friends(self, user_id: int) -> tuple[list[Any], list[Any]]:
        with ThreadPoolExecutor(max_workers=2) as pool:
            groups_future = pool.submit(self._api.get_user_group_roles, user_id)
            friends_future = pool.submit(self._api.get_friends, user_id)

        groups: list[Any] = []
        friends: list[Any] = []
        try:
            groups = list(groups_future.result())
        except Exception as exc:
            self._logger.warning("Error fetching user groups (userID=%d): %s", user_id, exc)
        try:
            friends = list(friends_future.result())
        except Exception as exc:
            self._logger.warning("Error fetching user friends (userID=%d): %s", user_id, exc)
        return groups, friends

    def fetch_banned_users(self, user_ids: Iterable[int]) -> list[int]:
        """Return the IDs of the given users that are currently banned."""
        requested = list(user_ids)
        unique_ids = list(dict.fromkeys(requested))
        banned: list[int] = []

        if unique_ids:
            workers = min(_MAX_WORKERS, len(unique_ids))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {uid: pool.submit(self._api.get_user_by_id, uid) for uid in unique_ids}
            for user_id, future in futures.items():
                try:
                    user = future.result()
                except Exception as exc:
                    self._logger.warning(
                        "Error fetching user info (userID=%d): %s", user_id, exc
                    )
                    continue
                if user.is_banned:
                    banned.append(user.id)

        self._logger.info(
            "Finished checking banned users (totalChecked=%d, bannedUsers=%d)",
            len(requested),
            len(banned),
        )
        return banned