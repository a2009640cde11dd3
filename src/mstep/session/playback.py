"""Playback - Auto-advance through an algorithm trace on a timer.

A Playback is a cancellable repeating task bound to a cursor-advance
callable. While playing it advances once per interval and stops by
itself when the cursor reaches the last step. Pausing is idempotent.

The timer is created through a factory so the scheduling can be driven
manually in tests; the default factory uses daemon ``threading.Timer``
objects.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class PlaySpeed(Enum):
    """Auto-advance speed tiers."""

    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"

    @classmethod
    def parse(cls, value: str | PlaySpeed) -> PlaySpeed:
        """Accept an enum member or its (case-insensitive) name."""
        if isinstance(value, PlaySpeed):
            return value
        if isinstance(value, str):
            for speed in cls:
                if speed.value == value.lower():
                    return speed
        raise ValueError(
            f"Unknown play speed '{value}' (expected one of: "
            f"{', '.join(s.value for s in cls)})"
        )


# Seconds between steps
DEFAULT_INTERVALS: dict[PlaySpeed, float] = {
    PlaySpeed.SLOW: 2.0,
    PlaySpeed.NORMAL: 1.0,
    PlaySpeed.FAST: 0.5,
}


class Timer(Protocol):
    """The subset of ``threading.Timer`` Playback relies on."""

    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def daemon_timer(interval: float, callback: Callable[[], None]) -> Timer:
    """Create a daemon ``threading.Timer`` so playback never blocks exit."""
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class Playback:
    """Repeating auto-advance task.

    Args:
        advance: Moves the cursor forward one step.
        has_next: Reports whether the cursor can still move forward.
        lock: Lock shared with the owner of the cursor. Ticks and
            play/pause are serialized through it.
        intervals: Seconds between steps per speed tier.
        timer_factory: Creates one-shot timers; defaults to daemon
            ``threading.Timer``.
        speed: Initial speed tier.
    """

    def __init__(
        self,
        advance: Callable[[], object],
        has_next: Callable[[], bool],
        lock: threading.RLock | None = None,
        intervals: Mapping[PlaySpeed, float] | None = None,
        timer_factory: TimerFactory | None = None,
        speed: PlaySpeed = PlaySpeed.NORMAL,
    ) -> None:
        self._advance = advance
        self._has_next = has_next
        self._lock = lock or threading.RLock()
        self._intervals = dict(DEFAULT_INTERVALS)
        if intervals:
            self._intervals.update(intervals)
        self._timer_factory = timer_factory or daemon_timer
        self._speed = speed
        self._timer: Timer | None = None
        self._playing = False
        # Bumped on every start/stop so a tick that already fired but is
        # waiting on the lock can tell it has been cancelled.
        self._generation = 0

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def speed(self) -> PlaySpeed:
        return self._speed

    @property
    def interval(self) -> float:
        """Seconds between steps at the current speed."""
        return self._intervals[self._speed]

    def set_speed(self, speed: str | PlaySpeed) -> None:
        """Change the speed tier, rescheduling if currently playing."""
        with self._lock:
            self._speed = PlaySpeed.parse(speed)
            if self._playing:
                self._stop()
                self._start()

    def play(self, speed: str | PlaySpeed | None = None) -> bool:
        """Start auto-advancing.

        Args:
            speed: Optional speed tier to switch to first.

        Returns:
            True if playback is running afterwards, False if there was
            nothing left to advance through.
        """
        with self._lock:
            if speed is not None:
                self._speed = PlaySpeed.parse(speed)
            self._stop()
            if not self._has_next():
                return False
            self._start()
            logger.debug("Playback started at %s speed (%.2fs)", self._speed.value, self.interval)
            return True

    def pause(self) -> None:
        """Stop auto-advancing. Safe to call when already stopped."""
        with self._lock:
            if self._playing:
                logger.debug("Playback paused")
            self._stop()

    cancel = pause

    def toggle(self) -> bool:
        """Pause if playing, otherwise play. Returns the new playing state."""
        with self._lock:
            if self._playing:
                self.pause()
                return False
            return self.play()

    def _start(self) -> None:
        self._playing = True
        self._generation += 1
        self._schedule(self._generation)

    def _stop(self) -> None:
        self._playing = False
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, generation: int) -> None:
        self._timer = self._timer_factory(self.interval, lambda: self._tick(generation))
        self._timer.start()

    def _tick(self, generation: int) -> None:
        with self._lock:
            if not self._playing or generation != self._generation:
                return
            self._timer = None
            if not self._has_next():
                self._stop()
                return
            self._advance()
            if self._has_next():
                self._schedule(generation)
            else:
                logger.debug("Playback reached the last step")
                self._stop()
