"""Clip models: a tagged union over the four clip kinds.

Each variant carries only its own payload (``TextClip.text``,
``AudioClip.audio``, ...), selected by the ``type`` discriminator. Visual
fields are optional; absent values mean x/y = 50, opacity = 1 at evaluation
time and are omitted again on export.
"""

from typing import Annotated, Any, Literal, Optional, Union, get_args

from pydantic import Field, TypeAdapter

from .animations import Action, AnimationName, Easing
from .base import TimelineModel, new_id
from .payloads import AudioPayload, ImagePayload, ShapePayload, TextPayload

ClipType = Literal["text", "image", "audio", "shape"]
CLIP_TYPES: tuple[str, ...] = get_args(ClipType)


class _ClipBase(TimelineModel):
    id: str
    start: float = Field(default=0.0, ge=0)
    duration: float = Field(default=4.0, gt=0)
    layer: int = 0
    name: Optional[str] = None
    in_anim: Optional[AnimationName] = None
    out_anim: Optional[AnimationName] = None
    in_dur: Optional[float] = None
    out_dur: Optional[float] = None
    easing: Optional[Easing] = None
    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    rotation: Optional[float] = None
    opacity: Optional[float] = None
    actions: list[Action] = Field(default_factory=list)

    @property
    def end(self) -> float:
        return self.start + self.duration

    def get_action(self, action_id: str):
        for a in self.actions:
            if a.id == action_id:
                return a
        return None


class TextClip(_ClipBase):
    type: Literal["text"] = "text"
    id: str = Field(default_factory=lambda: new_id("text"))
    text: TextPayload = Field(default_factory=TextPayload)


class ImageClip(_ClipBase):
    type: Literal["image"] = "image"
    id: str = Field(default_factory=lambda: new_id("image"))
    image: ImagePayload = Field(default_factory=ImagePayload)


class AudioClip(_ClipBase):
    type: Literal["audio"] = "audio"
    id: str = Field(default_factory=lambda: new_id("audio"))
    audio: AudioPayload = Field(default_factory=AudioPayload)


class ShapeClip(_ClipBase):
    type: Literal["shape"] = "shape"
    id: str = Field(default_factory=lambda: new_id("shape"))
    shape: ShapePayload = Field(default_factory=ShapePayload)


Clip = Annotated[
    Union[TextClip, ImageClip, AudioClip, ShapeClip],
    Field(discriminator="type"),
]

CLIP_MODELS = {
    "text": TextClip,
    "image": ImageClip,
    "audio": AudioClip,
    "shape": ShapeClip,
}

_clip_adapter: TypeAdapter = TypeAdapter(Clip)


def parse_clip(data: dict[str, Any]):
    """Validate a clip dict (camelCase or snake_case keys) into its variant."""
    return _clip_adapter.validate_python(data)
