"""Concurrent retrieval of users' outfits."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol, Sequence

ITEMS_PER_PAGE = 1000
_MAX_WORKERS = 32


class AvatarAPI(Protocol):
    def get_user_outfits(
        self, user_id: int, *, items_per_page: int, is_editable: bool
    ) -> list[Any]: ...


class OutfitFetcher:
    """Adds outfit lists to user records."""

    def __init__(self, api: AvatarAPI, logger: logging.Logger | None = None) -> None:
        self._api = api
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def _fetch(self, user_id: int) -> list[Any]:
        return self._api.get_user_outfits(
            user_id, items_per_page=ITEMS_PER_PAGE, is_editable=True
        )

    def add_outfits(self, users: Sequence[Any]) -> list[Any]:
        """Set ``outfits`` on each user; return those that succeeded, in order."""
        user_ids = list(dict.fromkeys(user.id for user in users))
        updated: list[Any] = []

        if user_ids:
            workers = min(_MAX_WORKERS, len(user_ids))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {uid: pool.submit(self._fetch, uid) for uid in user_ids}

            for user in users:
                try:
                    outfits = futures[user.id].result()
                except Exception as exc:
                    self._logger.error(
                        "Failed to fetch user outfits (userID=%d): %s", user.id, exc
                    )
                    continue
                user.outfits = outfits
                updated.append(user)

        self._logger.info(
            "Finished fetching user outfits (totalUsers=%d, successfulFetches=%d)",
            len(users),
            len(updated),
        )
        return updated