"""Slide data model."""

from typing import Literal, Optional

from pydantic import Field

from .animations import SlideTransition
from .base import TimelineModel, new_id
from .clip import Clip


class Slide(TimelineModel):
    """A single slide: a fixed-duration stage holding layered clips.

    Disabled slides stay navigable but are skipped by cross-slide playback.
    ``clips`` order is the timeline row order; paint order comes from
    ``layer``.
    """
    id: str = Field(default_factory=lambda: new_id("s"))
    name: str = "Slide"
    enabled: bool = True
    duration: float = Field(default=8.0, gt=0)
    transition: SlideTransition = Field(default_factory=SlideTransition)
    bg_color: Optional[str] = None
    bg_image: Optional[str] = None
    bg_fit: Optional[Literal["contain", "cover"]] = None
    clips: list[Clip] = Field(default_factory=list)

    def get(self, clip_id: Optional[str]):
        if clip_id is None:
            return None
        for c in self.clips:
            if c.id == clip_id:
                return c
        return None

    def index_of(self, clip_id: str) -> int:
        for i, c in enumerate(self.clips):
            if c.id == clip_id:
                return i
        return -1

    def add(self, clip):
        self.clips.append(clip)
        return clip

    def remove(self, clip_id: str) -> bool:
        original_len = len(self.clips)
        self.clips = [c for c in self.clips if c.id != clip_id]
        return len(self.clips) < original_len

    def replace(self, clip) -> bool:
        idx = self.index_of(clip.id)
        if idx < 0:
            return False
        self.clips[idx] = clip
        return True

    def max_layer(self) -> int:
        return max([0] + [c.layer for c in self.clips])
