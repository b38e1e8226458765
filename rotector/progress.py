"""Terminal progress bars with step messages, durations and an ETA."""

from __future__ import annotations

import math
import sys
import threading
import time
from collections import deque
from typing import IO, Iterable

_RATE_LIMIT = 0.1
_HISTORY_SIZE = 10
_CLEAR_LINE = "\033[1A\033[K"


def _format_duration(seconds: float) -> str:
    """Format a duration rounded to whole seconds, e.g. ``1h2m3s``."""
    total = int(math.floor(max(seconds, 0.0) + 0.5))
    if total == 0:
        return "0s"
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


class Bar:
    """A thread-safe progress bar tracking progress against a total."""

    def __init__(self, total: int, width: int, message: str) -> None:
        now = time.monotonic()
        self._lock = threading.Lock()
        self._total = total
        self._current = 0
        self._width = width
        self._message = message
        self._step_message = ""
        self._last_update = now
        self._step_start = now
        self._overall_start = now
        self._durations: deque[float] = deque(maxlen=_HISTORY_SIZE)

    def increment(self, n: int) -> None:
        """Add to the current progress, capped at the total."""
        with self._lock:
            self._current = min(self._current + n, self._total)

    def set_total(self, total: int) -> None:
        """Change the value that represents 100% progress."""
        with self._lock:
            self._total = total

    def set_current(self, current: int) -> None:
        """Set the current progress directly, capped at the total."""
        with self._lock:
            self._current = min(current, self._total)

    def set_message(self, message: str) -> None:
        """Change the description of the overall operation."""
        with self._lock:
            self._message = message

    def set_step_message(self, message: str) -> None:
        """Change the current step description and restart the step timer."""
        with self._lock:
            self._step_message = message
            self._step_start = time.monotonic()

    def render(self) -> str:
        """Return the bar's text, or an empty string if rendered within the last 100ms."""
        with self._lock:
            now = time.monotonic()
            if now - self._last_update < _RATE_LIMIT:
                return ""
            self._last_update = now

            percent = self._current / self._total if self._total > 0 else 0.0
            filled = max(0, min(int(percent * self._width), self._width))
            bar = "=" * filled + "-" * (self._width - filled)

            step = _format_duration(now - self._step_start)
            overall = _format_duration(now - self._overall_start)
            return (
                f"\r{self._message} [{bar}] {percent * 100:.1f}% | "
                f"{self._step_message} ({step}) | Overall: {overall} "
                f"(ETA: {self._eta()})"
            )

    def _eta(self) -> str:
        if not self._durations:
            return "0s"
        return _format_duration(sum(self._durations) / len(self._durations))

    def reset(self) -> None:
        """Record the finished operation's duration and start a new one."""
        with self._lock:
            now = time.monotonic()
            self._durations.append(now - self._overall_start)
            self._current = 0
            self._last_update = now
            self._step_message = ""
            self._step_start = now
            self._overall_start = now


class Renderer:
    """Redraws a set of progress bars on a terminal every 100ms."""

    def __init__(self, bars: Iterable[Bar], output: IO[str] | None = None) -> None:
        self._bars = list(bars)
        self._output = output if output is not None else sys.stdout
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    def render(self) -> None:
        """Redraw the bars repeatedly until :meth:`stop` is called."""
        while True:
            with self._lock:
                if self._stopped.is_set():
                    return
                self._output.write(_CLEAR_LINE * len(self._bars))
                for bar in self._bars:
                    self._output.write(bar.render() + "\n")
                self._output.flush()
            if self._stopped.wait(_RATE_LIMIT):
                return

    def stop(self) -> None:
        """Stop redrawing and clear the bars from the screen."""
        with self._lock:
            self._stopped.set()
            self._output.write(_CLEAR_LINE * len(self._bars))
            self._output.flush()