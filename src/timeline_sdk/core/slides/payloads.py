"""Type-specific clip payloads (text, image, audio, shape)."""

from typing import Literal, Optional

from .base import TimelineModel


class TextPayload(TimelineModel):
    content: str = ""
    font_size: Optional[float] = None
    color: Optional[str] = None
    align: Optional[Literal["left", "center", "right"]] = None
    font_weight: Optional[int] = None


class ImagePayload(TimelineModel):
    src: str = ""
    object_fit: Optional[Literal["contain", "cover"]] = None


class AudioPayload(TimelineModel):
    """Audio source; ``volume`` defaults to 1 when absent."""
    src: str = ""
    volume: Optional[float] = None


class ShapePayload(TimelineModel):
    kind: Literal["rect", "circle", "triangle"] = "rect"
    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: Optional[float] = None
    radius: Optional[float] = None
