"""Batched retrieval of user headshots and group icons."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

BATCH_SIZE = 100
_MAX_WORKERS = 16

AVATAR_HEADSHOT_TYPE = "AvatarHeadShot"
GROUP_ICON_TYPE = "GroupIcon"
SIZE_420X420 = "420x420"
FORMAT_PNG = "Png"
STATE_COMPLETED = "Completed"


@dataclass(frozen=True)
class ThumbnailRequest:
    """One entry of a batch thumbnail request."""

    type: str
    target_id: int
    request_id: str
    size: str = SIZE_420X420
    format: str = FORMAT_PNG


class ThumbnailsAPI(Protocol):
    def get_batch_thumbnails(self, requests: list[ThumbnailRequest]) -> list[Any]: ...


class ThumbnailFetcher:
    """Adds thumbnail URLs to user and group records."""

    def __init__(self, api: ThumbnailsAPI, logger: logging.Logger | None = None) -> None:
        self._api = api
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def add_image_urls(self, users: Sequence[Any]) -> list[Any]:
        """Set ``thumbnail_url`` on users; return those that received one, in order."""
        updated = self._attach(users, AVATAR_HEADSHOT_TYPE)
        self._logger.info(
            "Finished fetching user thumbnails (totalUsers=%d, successfulFetches=%d)",
            len(users),
            len(updated),
        )
        return updated

    def add_group_image_urls(self, groups: Sequence[Any]) -> list[Any]:
        """Set ``thumbnail_url`` on groups; return those that received one, in order."""
        updated = self._attach(groups, GROUP_ICON_TYPE)
        self._logger.info(
            "Finished fetching group thumbnails (totalGroups=%d, successfulFetches=%d)",
            len(groups),
            len(updated),
        )
        return updated

    def _attach(self, records: Sequence[Any], thumbnail_type: str) -> list[Any]:
        urls: dict[int, str] = {}
        starts = range(0, len(records), BATCH_SIZE)
        if starts:
            workers = min(_MAX_WORKERS, len(starts))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {
                    start: pool.submit(
                        self._process_batch,
                        [
                            ThumbnailRequest(
                                type=thumbnail_type,
                                target_id=record.id,
                                request_id=str(record.id),
                            )
                            for record in records[start : start + BATCH_SIZE]
                        ],
                    )
                    for start in starts
                }
            for start, future in futures.items():
                try:
                    urls.update(future.result())
                except Exception as exc:
                    self._logger.error(
                        "Error fetching batch thumbnails (batchStart=%d): %s", start, exc
                    )

        updated: list[Any] = []
        for record in records:
            url = urls.get(record.id)
            if url is not None:
                record.thumbnail_url = url
                updated.append(record)
        return updated

    def _process_batch(self, requests: list[ThumbnailRequest]) -> dict[int, str]:
        responses = self._api.get_batch_thumbnails(requests)
        return {
            response.target_id: response.image_url
            for response in responses
            if getattr(response, "state", None) == STATE_COMPLETED
            and getattr(response, "image_url", None) is not None
        }