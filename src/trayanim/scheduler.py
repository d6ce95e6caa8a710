"""Delay-driven animation loop for the tray icon.

The scheduler is a two-state machine (IDLE, PLAYING). Each tick shows the
current frame, advances the index circularly and schedules the next tick
after the shown frame's delay. Timers come from an injectable factory so
the loop can run on real threads or be stepped by hand.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from PIL import Image

logger = logging.getLogger(__name__)


@dataclass
class RenderFrame:
    """A display-size bitmap and how long to show it, in milliseconds."""

    image: Image.Image
    delay: int


class IconSurface(Protocol):
    """Anything that can display a tray icon image."""

    def set_image(self, image: Image.Image) -> None: ...


class Timer(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[int, Callable[[], None]], Timer]


class SchedulerState(Enum):
    IDLE = "idle"
    PLAYING = "playing"


class ThreadingTimerFactory:
    """Schedules callbacks on daemon ``threading.Timer`` threads."""

    def __call__(self, delay_ms: int, callback: Callable[[], None]) -> Timer:
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass
class ManualTimer:
    delay_ms: int
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualTimerFactory:
    """Timer factory whose timers only fire when :meth:`advance` is called.

    Used for dry runs and deterministic tests; ``elapsed_ms`` accumulates
    the delays of the timers that fired.
    """

    pending: list[ManualTimer] = field(default_factory=list)
    elapsed_ms: int = 0

    def __call__(self, delay_ms: int, callback: Callable[[], None]) -> Timer:
        timer = ManualTimer(delay_ms, callback)
        self.pending.append(timer)
        return timer

    def advance(self) -> bool:
        """Fire the oldest live timer. Returns False when none is pending."""
        while self.pending:
            timer = self.pending.pop(0)
            if timer.cancelled:
                continue
            self.elapsed_ms += timer.delay_ms
            timer.callback()
            return True
        return False

    def run(self, ticks: int) -> int:
        fired = 0
        while fired < ticks and self.advance():
            fired += 1
        return fired


class AnimationScheduler:
    """Cycles a render sequence onto an :class:`IconSurface`."""

    def __init__(
        self,
        timer_factory: TimerFactory | None = None,
        surface: IconSurface | None = None,
    ):
        self._timer_factory = timer_factory or ThreadingTimerFactory()
        self._surface = surface
        self._lock = threading.RLock()
        self._state = SchedulerState.IDLE
        self._sequence: list[RenderFrame] = []
        self._index = 0
        self._timer: Timer | None = None
        # Bumped on every start/stop so stale timer callbacks become no-ops
        self._generation = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is SchedulerState.PLAYING

    @property
    def index(self) -> int:
        return self._index

    @property
    def surface(self) -> IconSurface | None:
        return self._surface

    def attach_surface(self, surface: IconSurface | None) -> None:
        """Swap the display surface. The scheduler must be stopped first."""
        with self._lock:
            if self.is_playing:
                raise RuntimeError("Cannot replace the surface while animating")
            self._surface = surface

    def start(self, sequence: Sequence[RenderFrame]) -> SchedulerState:
        """Begin cycling ``sequence`` from index 0.

        Does nothing when the sequence is empty, there is no surface, or an
        animation is already playing. A single frame is shown once and the
        scheduler stays IDLE.
        """
        with self._lock:
            if not sequence or self._surface is None or self.is_playing:
                return self._state

            self._sequence = list(sequence)
            self._index = 0

            if len(self._sequence) == 1:
                try:
                    self._surface.set_image(self._sequence[0].image)
                except Exception as e:
                    logger.warning(f"Could not set static tray icon: {e}")
                return self._state

            self._state = SchedulerState.PLAYING
            self._generation += 1
            generation = self._generation
            logger.debug(f"Animation started with {len(self._sequence)} frames")

        self._tick(generation)
        return self._state

    def stop(self) -> None:
        """Cancel the pending tick. Later ticks from old timers do nothing."""
        with self._lock:
            self._stop_locked()

    def _stop_locked(self) -> None:
        self._state = SchedulerState.IDLE
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _tick(self, generation: int) -> None:
        with self._lock:
            if (
                generation != self._generation
                or not self.is_playing
                or not self._sequence
                or self._surface is None
            ):
                return

            frame = self._sequence[self._index]
            try:
                self._surface.set_image(frame.image)
            except Exception as e:
                logger.warning(f"Stopping animation, tray icon update failed: {e}")
                self._stop_locked()
                return

            self._index = (self._index + 1) % len(self._sequence)
            self._timer = self._timer_factory(
                frame.delay, lambda: self._tick(generation)
            )
