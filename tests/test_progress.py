import io
import threading
import time
from unittest import mock

import pytest

from rotector.progress import Bar, Renderer


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    fake = FakeClock()
    with mock.patch("time.monotonic", fake):
        yield fake


def _bar_segment(text):
    return text[text.index("[") + 1 : text.index("]")]


def test_render_is_rate_limited(clock):
    bar = Bar(100, 10, "Working")
    assert bar.render() == ""
    clock.advance(0.2)
    first = bar.render()
    assert first.startswith("\rWorking [")
    assert bar.render() == ""


def test_bar_fill_matches_progress(clock):
    bar = Bar(100, 10, "Working")
    bar.set_current(50)
    clock.advance(0.2)
    segment = _bar_segment(bar.render())
    assert len(segment) == 10
    assert segment.count("=") == 5
    assert segment == "=" * 5 + "-" * 5
    assert "50.0%" in bar_text_after(bar, clock)


def bar_text_after(bar, clock):
    clock.advance(0.2)
    return bar.render()


def test_increment_caps_at_total(clock):
    bar = Bar(10, 8, "Job")
    bar.increment(7)
    bar.increment(7)
    segment = _bar_segment(bar_text_after(bar, clock))
    assert segment == "=" * 8


def test_set_current_caps_at_total(clock):
    bar = Bar(10, 4, "Job")
    bar.set_current(500)
    assert "100.0%" in bar_text_after(bar, clock)


def test_set_total_changes_percentage(clock):
    bar = Bar(10, 10, "Job")
    bar.set_current(10)
    bar.set_total(40)
    segment = _bar_segment(bar_text_after(bar, clock))
    assert segment.count("=") < 10
    assert len(segment) == 10


def test_messages_appear(clock):
    bar = Bar(100, 10, "first")
    bar.set_message("Overall job")
    bar.set_step_message("Fetching users")
    text = bar_text_after(bar, clock)
    assert text.startswith("\rOverall job [")
    assert "| Fetching users (" in text


def test_eta_without_history(clock):
    bar = Bar(100, 10, "Job")
    assert bar_text_after(bar, clock).endswith("(ETA: 0s)")


def test_eta_averages_previous_runs(clock):
    bar = Bar(100, 10, "Job")
    clock.advance(4)
    bar.reset()
    clock.advance(6)
    bar.reset()
    assert bar_text_after(bar, clock).endswith("(ETA: 5s)")


def test_history_keeps_last_ten(clock):
    bar = Bar(100, 10, "Job")
    clock.advance(1000)
    bar.reset()
    for _ in range(10):
        clock.advance(20)
        bar.reset()
    assert bar_text_after(bar, clock).endswith("(ETA: 20s)")


def test_reset_clears_progress_and_step(clock):
    bar = Bar(100, 10, "Job")
    bar.set_current(100)
    bar.set_step_message("step")
    bar.reset()
    text = bar_text_after(bar, clock)
    assert _bar_segment(text) == "-" * 10
    assert "step" not in text


def test_step_duration_formats_minutes(clock):
    bar = Bar(100, 10, "Job")
    bar.set_step_message("Long step")
    clock.advance(65)
    assert "Long step (1m5s)" in bar.render()


def test_renderer_draws_and_clears():
    out = io.StringIO()
    bars = [Bar(10, 5, "alpha"), Bar(10, 5, "beta")]
    renderer = Renderer(bars, out)
    thread = threading.Thread(target=renderer.render)
    thread.start()
    time.sleep(0.35)
    renderer.stop()
    thread.join(timeout=2)
    assert not thread.is_alive()
    text = out.getvalue()
    assert "alpha" in text
    assert "beta" in text
    assert text.endswith("\033[1A\033[K" * 2)


def test_renderer_stop_before_render_writes_nothing_more():
    out = io.StringIO()
    renderer = Renderer([Bar(10, 5, "x")], out)
    renderer.stop()
    renderer.render()
    assert out.getvalue() == "\033[1A\033[K"