"""Per-session log files with a mirrored "latest" directory."""

from __future__ import annotations

import logging
import os
import shutil
import time
from pathlib import Path

_SESSION_FORMAT = "%Y-%m-%d_%H-%M-%S"
_LATEST = "latest"
_FORMAT = "%(asctime)s\t%(levelname)s\t%(name)s\t%(message)s"

_LEVELS = {
    "": logging.INFO,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "dpanic": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}


def _parse_level(level: str) -> int:
    try:
        return _LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"invalid log level: {level!r}") from None


def _build_logger(name: str, paths: list[Path], level: int) -> logging.Logger:
    """Create a standalone logger writing to every path in ``paths``."""
    logger = logging.Logger(name, level)
    formatter = logging.Formatter(_FORMAT)
    handlers: list[logging.Handler] = []
    try:
        for path in paths:
            handler = logging.FileHandler(path, encoding="utf-8")
            handler.setFormatter(formatter)
            handlers.append(handler)
    except OSError:
        for handler in handlers:
            handler.close()
        raise
    for handler in handlers:
        logger.addHandler(handler)
    return logger


def _nop_logger(name: str) -> logging.Logger:
    logger = logging.Logger(name)
    logger.addHandler(logging.NullHandler())
    logger.disabled = True
    return logger


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class LogManager:
    """Creates loggers that write to a timestamped session directory and to ``latest``."""

    def __init__(self, log_dir: str | os.PathLike[str], level: str, max_logs_to_keep: int) -> None:
        self._log_dir = Path(log_dir)
        self._level = level
        self._max_logs_to_keep = max_logs_to_keep
        self._session_dir: Path | None = None

    def get_loggers(self) -> tuple[logging.Logger, logging.Logger]:
        """Set up the log directories and return the main and database loggers."""
        self._setup_log_directories()
        assert self._session_dir is not None
        level = _parse_level(self._level)
        latest = self._log_dir / _LATEST

        main_logger = _build_logger(
            "main", [self._session_dir / "main.log", latest / "main.log"], level
        )
        db_logger = _build_logger(
            "database", [self._session_dir / "database.log", latest / "database.log"], level
        )
        return main_logger, db_logger

    def get_worker_logger(self, name: str) -> logging.Logger:
        """Return a logger for a worker, or a disabled one if it cannot be set up."""
        try:
            level = _parse_level(self._level)
        except ValueError:
            return _nop_logger(name)

        session_dir = self._get_or_create_session_dir()
        latest = self._log_dir / _LATEST
        try:
            return _build_logger(
                name, [session_dir / f"{name}.log", latest / f"{name}.log"], level
            )
        except OSError:
            return _nop_logger(name)

    def _setup_log_directories(self) -> None:
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._rotate_log_sessions()

        self._session_dir = self._log_dir / time.strftime(_SESSION_FORMAT)
        self._session_dir.mkdir(parents=True, exist_ok=True)

        latest = self._log_dir / _LATEST
        if latest.exists() or latest.is_symlink():
            _remove(latest)
        latest.mkdir(parents=True, exist_ok=True)

    def _get_or_create_session_dir(self) -> Path:
        if self._session_dir is not None:
            return self._session_dir
        session_dir = self._log_dir / time.strftime(_SESSION_FORMAT)
        try:
            session_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            return self._log_dir
        return session_dir

    def _rotate_log_sessions(self) -> None:
        sessions = list(self._log_dir.iterdir())
        if len(sessions) <= self._max_logs_to_keep:
            return
        sessions.sort(key=lambda path: path.stat().st_mtime)
        for path in sessions[: len(sessions) - self._max_logs_to_keep]:
            _remove(path)