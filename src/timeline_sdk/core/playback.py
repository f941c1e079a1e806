"""Playback clock: advances slide time from a cooperative frame loop.

The clock does not own a thread or timer. A ``FrameScheduler`` calls back
once per rendered frame; each callback measures the wall-clock delta since
the previous frame, scales it by ``speed`` and advances ``time`` once. When
the slide runs out the clock either continues into the next enabled slide or
stops at the slide's end.

Every time update is followed by the tick listeners (audio sync among them),
so listeners always see the latest ``time`` before the next frame is
requested. Pausing or stopping cancels the pending frame.
"""

import asyncio
import logging
import time as _time
from typing import Any, Callable, Optional, Protocol

from .slides import Project, Slide
from .timeutil import clamp

logger = logging.getLogger("SlideTimeline.core.playback")

SPEED_MIN = 0.25
SPEED_MAX = 3.0

STOPPED = "stopped"
PLAYING = "playing"


def clamp_speed(speed: float) -> float:
    return clamp(speed, SPEED_MIN, SPEED_MAX)


class FrameScheduler(Protocol):
    def now(self) -> float: ...

    def request_frame(self, callback: Callable[[float], None]) -> Any: ...

    def cancel_frame(self, handle: Any) -> None: ...


class AsyncioFrameScheduler:
    """Frame scheduler on an asyncio event loop, firing ``fps`` times per second.

    Without an explicit loop it binds to the running loop on first use, so it
    must first be used from inside a coroutine or loop callback.
    """

    def __init__(self, fps: float = 60.0, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.interval = 1.0 / fps
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def request_frame(self, callback: Callable[[float], None]) -> asyncio.TimerHandle:
        loop = self.loop
        return loop.call_later(self.interval, lambda: callback(loop.time()))

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


ClockListener = Callable[["PlaybackClock"], None]


class PlaybackClock:
    """Shared slide clock with cross-slide continuation."""

    def __init__(
        self,
        project: Project,
        scheduler: Optional[FrameScheduler] = None,
        time_source: Optional[Callable[[], float]] = None,
        continuation: bool = True,
    ):
        self.project = project
        self.scheduler = scheduler
        if time_source is None:
            time_source = scheduler.now if scheduler is not None else _time.perf_counter
        self._time_source = time_source
        self.continuation = continuation
        self.state = STOPPED
        self.time = 0.0
        self._speed = 1.0
        self._slide_id: Optional[str] = project.slides[0].id if project.slides else None
        self._last_frame: Optional[float] = None
        self._pending: Any = None
        self.tick_listeners: list[ClockListener] = []
        self.slide_listeners: list[ClockListener] = []

    # ── Slide cursor ────────────────────────────────────────────────────

    @property
    def current_slide(self) -> Optional[Slide]:
        slide = self.project.get(self._slide_id)
        if slide is None and self.project.slides:
            return self.project.slides[0]
        return slide

    @property
    def slide_index(self) -> int:
        slide = self.current_slide
        return self.project.index_of(slide.id) if slide is not None else -1

    @property
    def duration(self) -> float:
        slide = self.current_slide
        return slide.duration if slide is not None else 0.0

    def attach(self, project: Project) -> None:
        """Point the clock at a new document: first slide, time 0, stopped."""
        self._cancel_pending()
        self.project = project
        self.state = STOPPED
        self._last_frame = None
        self._switch(project.slides[0].id if project.slides else None)
        self._notify()

    def select_slide(self, slide_id: str) -> bool:
        if self.project.get(slide_id) is None:
            return False
        if self._slide_id != slide_id:
            self._switch(slide_id)
            self._notify()
        return True

    def _switch(self, slide_id: Optional[str]) -> None:
        self._slide_id = slide_id
        self.time = 0.0
        logger.debug(f"Active slide -> {slide_id}")
        for listener in list(self.slide_listeners):
            listener(self)

    # ── Transport ───────────────────────────────────────────────────────

    @property
    def playing(self) -> bool:
        return self.state == PLAYING

    @property
    def speed(self) -> float:
        return self._speed

    @speed.setter
    def speed(self, value: float) -> None:
        self._speed = clamp_speed(value)
        self._notify()

    def play(self, now: Optional[float] = None) -> None:
        if self.playing or self.current_slide is None:
            return
        self._last_frame = now if now is not None else self._time_source()
        self.state = PLAYING
        self._schedule()
        self._notify()

    def pause(self) -> None:
        self._halt()
        self._notify()

    def stop(self) -> None:
        self._halt()
        self.time = 0.0
        self._notify()

    def seek(self, t: float) -> float:
        self.time = clamp(t, 0.0, self.duration)
        self._notify()
        return self.time

    def clamp_to_slide(self) -> None:
        """Pull ``time`` back inside the slide after its duration shrank."""
        if self.time > self.duration:
            self.time = max(0.0, self.duration - 0.0001)
            self._notify()

    def tick(self, now: float) -> None:
        """Advance by the wall-clock time elapsed since the previous frame."""
        if not self.playing:
            return
        last = self._last_frame if self._last_frame is not None else now
        self._last_frame = now
        self._advance((now - last) * self._speed)
        self._notify()

    def _advance(self, dt: float) -> None:
        slide = self.current_slide
        if slide is None:
            self._halt()
            return
        nxt = self.time + dt
        if nxt < slide.duration:
            self.time = nxt
            return
        if self.continuation:
            idx = self.project.next_enabled_index(self.project.index_of(slide.id))
            if idx is not None:
                logger.info(f"Continuing playback into slide '{self.project.slides[idx].id}'")
                self._switch(self.project.slides[idx].id)
                return
        self._halt()
        self.time = slide.duration

    def _halt(self) -> None:
        self.state = STOPPED
        self._last_frame = None
        self._cancel_pending()

    # ── Frame loop ──────────────────────────────────────────────────────

    def _schedule(self) -> None:
        if self.scheduler is not None and self._pending is None:
            self._pending = self.scheduler.request_frame(self._on_frame)

    def _cancel_pending(self) -> None:
        if self._pending is not None and self.scheduler is not None:
            self.scheduler.cancel_frame(self._pending)
        self._pending = None

    def _on_frame(self, now: float) -> None:
        self._pending = None
        self.tick(now)
        if self.playing:
            self._schedule()

    def _notify(self) -> None:
        for listener in list(self.tick_listeners):
            listener(self)
