"""Animation vocabularies and timeline actions.

Clip entrance/exit animations and slide transitions are named presets that the
renderer resolves. Actions are the secondary timeline entries nested inside a
clip; their ``start``/``end`` are slide-relative, in the same time base as the
owning clip's ``start``.
"""

from typing import Annotated, Literal, Optional, Union, get_args

from pydantic import Field

from .base import TimelineModel, new_id

AnimationName = Literal[
    "none", "fadeIn", "fadeOut", "slideInLeft", "slideInRight", "slideInTop",
    "slideInBottom", "scaleIn", "scaleOut", "rotateIn", "rotateOut", "blurIn",
    "bounceIn", "zoomIn", "zoomOut",
]
SlideAnimName = Literal[
    "fade", "moveLeft", "moveRight", "moveUp", "moveDown", "flipX", "flipY",
    "zoomIn", "zoomOut", "scaleIn", "scaleOut", "rotateIn", "rotateOut",
    "skewLeft", "skewRight", "kenBurns", "drape", "wipe", "split",
]
Easing = Literal["linear", "easeIn", "easeOut", "easeInOut", "circIn", "circOut", "circInOut"]
ActionType = Literal["appear", "move", "highlight"]

ANIMATION_NAMES: tuple[str, ...] = get_args(AnimationName)
SLIDE_ANIM_NAMES: tuple[str, ...] = get_args(SlideAnimName)
EASINGS: tuple[str, ...] = get_args(Easing)
ACTION_TYPES: tuple[str, ...] = get_args(ActionType)

# Cubic-bezier control points; "linear" has none.
EASING_CURVES: dict[str, Optional[tuple[float, float, float, float]]] = {
    "linear": None,
    "easeIn": (0.4, 0.0, 1.0, 1.0),
    "easeOut": (0.0, 0.0, 0.2, 1.0),
    "easeInOut": (0.4, 0.0, 0.2, 1.0),
    "circIn": (0.55, 0.0, 1.0, 0.45),
    "circOut": (0.0, 0.55, 0.45, 1.0),
    "circInOut": (0.85, 0.0, 0.15, 1.0),
}

DEFAULT_HIGHLIGHT_INTENSITY = 0.15


class SlideTransition(TimelineModel):
    """Entrance/exit transition of a slide (``{"in": ..., "out": ...}`` on disk)."""
    enter: SlideAnimName = Field(default="fade", alias="in")
    exit: SlideAnimName = Field(default="fade", alias="out")


class _ActionBase(TimelineModel):
    id: str = Field(default_factory=lambda: new_id("act"))
    start: float = 0.0
    end: float = 1.0
    easing: Optional[Easing] = None

    @property
    def length(self) -> float:
        return self.end - self.start

    def contains(self, t: float) -> bool:
        return self.start <= t <= self.end


class AppearAction(_ActionBase):
    """Linear fade-in over the action window."""
    type: Literal["appear"] = "appear"


class MoveAction(_ActionBase):
    """Move from (from_x, from_y) to (to_x, to_y); missing ends use the current position."""
    type: Literal["move"] = "move"
    from_x: Optional[float] = None
    from_y: Optional[float] = None
    to_x: Optional[float] = None
    to_y: Optional[float] = None


class HighlightAction(_ActionBase):
    """Scale pulse peaking at the middle of the window."""
    type: Literal["highlight"] = "highlight"
    intensity: Optional[float] = None


Action = Annotated[
    Union[AppearAction, MoveAction, HighlightAction],
    Field(discriminator="type"),
]

ACTION_MODELS = {
    "appear": AppearAction,
    "move": MoveAction,
    "highlight": HighlightAction,
}
