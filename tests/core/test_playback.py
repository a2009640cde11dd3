"""Tests for timed trace playback.

Timers are created through ManualTimerFactory, so each "tick" happens
exactly when a test fires it.
"""

import threading

import pytest

from mstep.session import DEFAULT_INTERVALS, PlaySpeed, Playback


class TestPlaySpeed:
    def test_parse_names(self):
        assert PlaySpeed.parse("slow") == PlaySpeed.SLOW
        assert PlaySpeed.parse("FAST") == PlaySpeed.FAST
        assert PlaySpeed.parse(PlaySpeed.NORMAL) == PlaySpeed.NORMAL

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown play speed"):
            PlaySpeed.parse("ludicrous")

    @pytest.mark.parametrize("value", [5, None, 1.5, ["fast"]])
    def test_parse_non_string(self, value):
        with pytest.raises(ValueError, match="Unknown play speed"):
            PlaySpeed.parse(value)

    def test_default_intervals(self):
        assert DEFAULT_INTERVALS == {
            PlaySpeed.SLOW: 2.0,
            PlaySpeed.NORMAL: 1.0,
            PlaySpeed.FAST: 0.5,
        }


class Counter:
    """Cursor stand-in for driving Playback directly."""

    def __init__(self, last: int):
        self.value = 0
        self.last = last

    def advance(self):
        if self.value < self.last:
            self.value += 1
            return True
        return False

    def has_next(self):
        return self.value < self.last


class TestPlaybackDirect:
    def test_plays_to_the_end_and_stops(self, timers):
        counter = Counter(3)
        playback = Playback(counter.advance, counter.has_next, timer_factory=timers)
        assert playback.play()
        for _ in range(3):
            timers.fire_pending()
        assert counter.value == 3
        assert not playback.is_playing
        assert timers.pending() == []

    def test_play_at_end_does_nothing(self, timers):
        counter = Counter(0)
        playback = Playback(counter.advance, counter.has_next, timer_factory=timers)
        assert not playback.play()
        assert not playback.is_playing
        assert timers.timers == []

    def test_interval_follows_speed(self, timers):
        counter = Counter(5)
        playback = Playback(counter.advance, counter.has_next, timer_factory=timers)
        playback.play("fast")
        assert timers.last.interval == 0.5
        playback.set_speed(PlaySpeed.SLOW)
        assert timers.last.interval == 2.0
        assert len(timers.pending()) == 1

    def test_custom_intervals(self, timers):
        counter = Counter(5)
        playback = Playback(
            counter.advance,
            counter.has_next,
            intervals={PlaySpeed.NORMAL: 0.25},
            timer_factory=timers,
        )
        playback.play()
        assert timers.last.interval == 0.25

    def test_pause_is_idempotent(self, timers):
        counter = Counter(5)
        playback = Playback(counter.advance, counter.has_next, timer_factory=timers)
        playback.pause()
        playback.play()
        playback.pause()
        playback.pause()
        assert not playback.is_playing
        assert timers.pending() == []

    def test_stale_tick_after_pause_is_ignored(self, timers):
        counter = Counter(5)
        playback = Playback(counter.advance, counter.has_next, timer_factory=timers)
        playback.play()
        stale = timers.last
        playback.pause()
        stale.fire()
        assert counter.value == 0

    def test_stale_tick_after_restart_is_ignored(self, timers):
        counter = Counter(5)
        playback = Playback(counter.advance, counter.has_next, timer_factory=timers)
        playback.play()
        stale = timers.last
        playback.play()
        stale.fire()
        assert counter.value == 0
        timers.fire_pending()
        assert counter.value == 1

    def test_toggle(self, timers):
        counter = Counter(5)
        playback = Playback(counter.advance, counter.has_next, timer_factory=timers)
        assert playback.toggle() is True
        assert playback.toggle() is False
        assert not playback.is_playing


class TestSessionPlayback:
    def test_auto_advance_reaches_complete(self, traced_session, timers):
        assert traced_session.play()
        while timers.pending():
            timers.fire_pending()
        assert traced_session.is_complete
        assert not traced_session.is_playing

    def test_play_without_trace(self, triangle_session):
        assert not triangle_session.play()

    def test_manual_step_while_playing(self, traced_session, timers):
        traced_session.play()
        traced_session.next_step()
        timers.fire_pending()
        assert traced_session.cursor == 2

    def test_go_to_step_pauses(self, traced_session):
        traced_session.play()
        traced_session.go_to_step(3)
        assert not traced_session.is_playing

    def test_reset_pauses(self, traced_session):
        traced_session.play()
        traced_session.reset_steps()
        assert not traced_session.is_playing

    def test_edit_cancels_playback(self, traced_session, timers):
        traced_session.play()
        pending = timers.last
        traced_session.remove_edge("A", "B")
        assert not traced_session.is_playing
        pending.fire()
        assert not traced_session.has_trace
        assert traced_session.cursor == 0

    def test_play_from_last_step(self, traced_session):
        traced_session.go_to_step(7)
        assert not traced_session.play()

    def test_real_timer_advances(self):
        from mstep.session import Session
        from tests.core.graph_test_helpers import triangle

        session = Session(intervals={PlaySpeed.FAST: 0.01})
        session.replace_graph(triangle())
        session.run()
        finished = threading.Event()
        session.play("fast")
        for _ in range(200):
            if not session.is_playing:
                finished.set()
                break
            finished.wait(0.01)
        assert finished.is_set()
        assert session.is_complete
