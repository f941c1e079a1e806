"""Audio clip synchronization against the playback clock.

Each audio clip can be bound to a media element with its own clock. After
every time update the elements are brought in line with slide time. While
playing, an element is only repositioned when it drifts more than
``DRIFT_TOLERANCE`` seconds, so normal media-clock jitter does not cause
stutter. While stopped, elements are parked exactly at the clip-relative
position and paused.
"""

import logging
from typing import Optional, Protocol

from .playback import clamp_speed
from .slides import Slide
from .timeutil import clamp

logger = logging.getLogger("SlideTimeline.core.media")

DRIFT_TOLERANCE = 0.2
PARK_MARGIN = 0.01
DEFAULT_VOLUME = 1.0


class MediaElement(Protocol):
    current_time: float
    playback_rate: float
    volume: float

    @property
    def paused(self) -> bool: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...


class AudioSync:
    """Keeps bound media elements aligned with the active slide's audio clips."""

    def __init__(self):
        self._elements: dict[str, MediaElement] = {}

    def bind(self, clip_id: str, element: MediaElement) -> None:
        self._elements[clip_id] = element

    def unbind(self, clip_id: str) -> Optional[MediaElement]:
        element = self._elements.pop(clip_id, None)
        if element is not None and not element.paused:
            element.pause()
        return element

    def element(self, clip_id: str) -> Optional[MediaElement]:
        return self._elements.get(clip_id)

    @property
    def bound_ids(self) -> list[str]:
        return list(self._elements)

    def sync(self, slide: Optional[Slide], time: float, playing: bool, speed: float) -> None:
        clips = {c.id: c for c in slide.clips} if slide is not None else {}
        for clip_id, element in self._elements.items():
            clip = clips.get(clip_id)
            if clip is None or clip.type != "audio":
                self._ensure_paused(element)
                continue

            rel = time - clip.start
            if rel < 0 or rel > clip.duration:
                self._ensure_paused(element)
                continue

            element.playback_rate = clamp_speed(speed)
            if playing:
                if abs(element.current_time - rel) > DRIFT_TOLERANCE:
                    element.current_time = rel
                if element.paused:
                    self._try_play(clip_id, element)
            else:
                element.current_time = clamp(rel, 0, max(0.0, clip.duration - PARK_MARGIN))
                self._ensure_paused(element)
            volume = clip.audio.volume
            element.volume = DEFAULT_VOLUME if volume is None else volume

    @staticmethod
    def _ensure_paused(element: MediaElement) -> None:
        if not element.paused:
            element.pause()

    @staticmethod
    def _try_play(clip_id: str, element: MediaElement) -> None:
        try:
            element.play()
        except Exception as e:
            logger.debug(f"Audio '{clip_id}' failed to start: {e}")
