# rotector

Reusable parts for a content-moderation pipeline that reviews user profiles
and groups. The package is a library. It installs no commands.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `rotector.progress`
  - `Bar(total, width, message)` is a thread-safe text progress bar.
    `increment` and `set_current` cap progress at the total.
    `set_step_message` restarts the step timer.
  - `Bar.render()` returns a line with the bar, the percentage, the step and
    its duration, the overall duration and an ETA. The ETA is the average of
    the last ten runs recorded by `reset()`. If the bar was rendered or reset
    less than 100ms ago, `render()` returns an empty string.
  - `Renderer(bars, output=None)` redraws the bars in place every 100ms, on
    stdout by default. It runs until `stop()` is called. `stop()` also clears
    the lines.
- `rotector.textutils`
  - `normalize_string` applies NFKC, removes combining marks and whitespace,
    and lower-cases the result.
  - `contains_normalized` does a substring test on the normalised forms.
    Empty input gives `False`.
- `rotector.translator`
  - `Translator(session=None)` decodes Morse code (`translate_morse`, with
    words separated by `/`) and 8-bit binary (`translate_binary`). Binary with
    an incomplete byte raises `InvalidBinaryError`.
  - `translate(text, source_lang="", target_lang="")` decodes any Morse or
    binary runs inside free text. When both languages are given, it then sends
    the whole text to an online translation endpoint through a `requests`
    session (`translate_language`).
  - Short or trivial text is returned unchanged, as decided by
    `should_skip_translation`. `is_morse_format` and `is_binary_format` are
    the format checks it uses.
- `rotector.statistics`
  - `StatisticsClient(client, logger=None)` increments daily and hourly
    counters in Redis hashes, keyed by UTC date or hour.
  - `get_hourly_stats()` returns the last 24 hours as `HourlyStat` records
    (`hour`, `confirmed`, `flagged`, `cleared`), oldest first.
- `rotector.queue`
  - `QueueManager(client, activity_logger=None, logger=None)` keeps one Redis
    sorted set for each `Priority` (`HIGH`, `NORMAL`, `LOW`). `queue_key`
    gives the key of each set.
  - An `Item` is stored as JSON (`to_json` / `from_json`) and scored by the
    seconds of its `added_at`.
  - `add_to_queue` clears an earlier abort flag for the user. It then calls
    the optional `activity_logger` with keyword arguments.
  - Per-user status (`Status`), priority and position, set with
    `set_queue_info`, expire after an hour. So does the abort flag set with
    `mark_as_aborted`.
- `rotector.logs`
  - `LogManager(log_dir, level, max_logs_to_keep)` removes the oldest entries
    in `log_dir` beyond `max_logs_to_keep`. It then creates a timestamped
    session directory and a fresh `latest/`.
  - `get_loggers()` returns the main and database loggers. Each writes to
    both directories.
  - `get_worker_logger(name)` adds a logger for one worker. It returns a
    disabled logger if the level is invalid or the files cannot be opened.
  - Levels are `debug`, `info`, `warn`, `error`, `dpanic`, `panic` and
    `fatal`.
- `rotector.redis_manager`
  - `RedisManager(host, port, username, password, logger=None)` creates one
    `redis.Redis` client for each database index, on first use of
    `get_client`.
  - `close()` closes them all.
  - The index constants are `CACHE_DB_INDEX`, `STATS_DB_INDEX`,
    `QUEUE_DB_INDEX` and `SESSION_DB_INDEX`.
- Fetchers: these run concurrently on threads against an API object you
  supply. Failed fetches are logged and left out.
  - `rotector.group_fetcher.GroupFetcher.fetch_group_infos` calls
    `api.get_group_info(group_id)`. Locked groups (`is_locked`, see
    `GroupLockedError`) are left out without a warning.
  - `rotector.outfit_fetcher.OutfitFetcher.add_outfits` calls
    `api.get_user_outfits(user_id, items_per_page=1000, is_editable=True)`.
    It sets `outfits` on each user.
  - `rotector.thumbnail_fetcher.ThumbnailFetcher.add_image_urls` and
    `add_group_image_urls` send batches of 100 `ThumbnailRequest`s to
    `api.get_batch_thumbnails(requests)`. They set `thumbnail_url` from
    responses whose `state` is `"Completed"`.
  - `rotector.user_fetcher.UserFetcher.fetch_infos` calls
    `api.get_user_by_id`, `api.get_user_group_roles` and `api.get_friends`.
    It builds `UserInfo` records and leaves out banned users
    (`UserBannedError`).
  - `rotector.user_fetcher.UserFetcher.fetch_banned_users` returns the IDs of
    banned users.

## Example

```python
from rotector.translator import Translator

translator = Translator()
print(translator.translate_morse(".... . .-.. .-.. --- / .-- --- .-. .-.. -.."))
# HELLO WORLD
print(translator.translate_binary("01001000 01101001"))
# Hi
```

```python
from datetime import datetime, timezone

import redis
from rotector.queue import Item, Priority, QueueManager, Status

client = redis.Redis(db=2, decode_responses=True)
manager = QueueManager(client)
manager.add_to_queue(
    Item(
        user_id=1,
        priority=Priority.HIGH,
        reason="report",
        added_by=2,
        added_at=datetime.now(timezone.utc),
        status=Status.PENDING,
    )
)
print(manager.get_queue_length(Priority.HIGH))
```

## What this package does not do

- It has no worker loops or command-line program that drive these parts.
- It has no database layer for users, groups or activity logs.
- It has no HTTP client for the profile service. The fetchers need an API
  object with the methods listed above, and record objects with the
  attributes they read and set.