"""Slides package — public API re-exports."""

from .base import TimelineModel, new_id
from .payloads import TextPayload, ImagePayload, AudioPayload, ShapePayload
from .animations import (
    Action,
    ActionType,
    AnimationName,
    AppearAction,
    Easing,
    HighlightAction,
    MoveAction,
    SlideAnimName,
    SlideTransition,
    ACTION_MODELS,
    ACTION_TYPES,
    ANIMATION_NAMES,
    DEFAULT_HIGHLIGHT_INTENSITY,
    EASING_CURVES,
    EASINGS,
    SLIDE_ANIM_NAMES,
)
from .clip import (
    Clip,
    ClipType,
    TextClip,
    ImageClip,
    AudioClip,
    ShapeClip,
    CLIP_MODELS,
    CLIP_TYPES,
    parse_clip,
)
from .slide import Slide
from .project import Project, default_project

__all__ = [
    "TimelineModel",
    "new_id",
    "TextPayload",
    "ImagePayload",
    "AudioPayload",
    "ShapePayload",
    "Action",
    "ActionType",
    "AnimationName",
    "AppearAction",
    "Easing",
    "HighlightAction",
    "MoveAction",
    "SlideAnimName",
    "SlideTransition",
    "ACTION_MODELS",
    "ACTION_TYPES",
    "ANIMATION_NAMES",
    "DEFAULT_HIGHLIGHT_INTENSITY",
    "EASING_CURVES",
    "EASINGS",
    "SLIDE_ANIM_NAMES",
    "Clip",
    "ClipType",
    "TextClip",
    "ImageClip",
    "AudioClip",
    "ShapeClip",
    "CLIP_MODELS",
    "CLIP_TYPES",
    "parse_clip",
    "Slide",
    "Project",
    "default_project",
]
