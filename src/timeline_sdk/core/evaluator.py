"""Render-state evaluation of clips at an arbitrary slide time.

``evaluate`` folds every action whose window contains ``t`` over the clip's
base transform. It is a pure function of ``(clip, t)``: the same inputs always
produce the same state, so scrubbing backwards or jumping to a never-rendered
time needs no history.

Actions whose window lies outside ``t`` contribute nothing. This also covers
actions left outside their clip's span after a resize; they stay in the
document and simply become inert.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .slides import DEFAULT_HIGHLIGHT_INTENSITY, EASING_CURVES, Slide
from .timeutil import clamp, lerp

EPSILON = 0.001

DEFAULT_X = 50.0
DEFAULT_Y = 50.0
DEFAULT_OPACITY = 1.0

DEFAULT_ENTRANCE_DURATION = 0.3
DEFAULT_EASING = "easeOut"
_BEZIER_STEPS = 40


@dataclass(frozen=True)
class RenderState:
    """Transform of a clip at one instant. ``scale`` multiplies the clip's own size."""
    x: float
    y: float
    opacity: float
    scale: float = 1.0


@dataclass(frozen=True)
class FrameItem:
    clip: object
    state: RenderState


def _value_or(value: Optional[float], default: float) -> float:
    return default if value is None else value


def progress(action, t: float) -> float:
    """Normalized progress of ``t`` through the action window, in [0, 1]."""
    span = max(action.end - action.start, EPSILON)
    return clamp((t - action.start) / span, 0.0, 1.0)


def cubic_bezier(x1: float, y1: float, x2: float, y2: float, x: float) -> float:
    """Value of a CSS-style cubic-bezier timing curve at abscissa ``x`` in [0, 1]."""
    def axis(a1: float, a2: float, s: float) -> float:
        return 3 * a1 * s * (1 - s) ** 2 + 3 * a2 * s * s * (1 - s) + s ** 3

    x = clamp(x, 0.0, 1.0)
    lo, hi = 0.0, 1.0
    # x(s) is monotonic: both control abscissas lie in [0, 1]
    for _ in range(_BEZIER_STEPS):
        mid = (lo + hi) / 2
        if axis(x1, x2, mid) < x:
            lo = mid
        else:
            hi = mid
    return axis(y1, y2, (lo + hi) / 2)


def ease(easing: Optional[str], p: float) -> float:
    """Apply a named easing to linear progress ``p``; unknown names stay linear."""
    p = clamp(p, 0.0, 1.0)
    curve = EASING_CURVES.get(easing or "linear")
    if curve is None or p in (0.0, 1.0):
        return p
    return cubic_bezier(*curve, p)


def entrance_progress(clip, t: float) -> float:
    """Eased progress of the clip's entrance animation at slide time ``t``."""
    duration = clip.in_dur or DEFAULT_ENTRANCE_DURATION
    p = (t - clip.start) / max(duration, EPSILON)
    return ease(clip.easing or DEFAULT_EASING, p)


def active_actions(clip, t: float) -> list:
    return [a for a in clip.actions if a.contains(t)]


def evaluate(clip, t: float) -> RenderState:
    x = _value_or(clip.x, DEFAULT_X)
    y = _value_or(clip.y, DEFAULT_Y)
    opacity = _value_or(clip.opacity, DEFAULT_OPACITY)
    scale = 1.0

    for action in clip.actions:
        if t < action.start or t > action.end:
            continue
        p = progress(action, t)
        if action.type == "appear":
            opacity *= p
        elif action.type == "move":
            from_x = _value_or(action.from_x, x)
            to_x = _value_or(action.to_x, x)
            from_y = _value_or(action.from_y, y)
            to_y = _value_or(action.to_y, y)
            x = lerp(from_x, to_x, p)
            y = lerp(from_y, to_y, p)
        elif action.type == "highlight":
            k = _value_or(action.intensity, DEFAULT_HIGHLIGHT_INTENSITY)
            scale *= 1 + k * math.sin(p * math.pi)

    return RenderState(x=x, y=y, opacity=opacity, scale=scale)


def is_active(clip, t: float) -> bool:
    return clip.start <= t <= clip.start + clip.duration


def is_highlighted(clip, t: float) -> bool:
    return any(a.type == "highlight" for a in active_actions(clip, t))


def visible_clips(slide: Optional[Slide], t: float) -> list:
    """Clips active at ``t`` in paint order (ascending layer, stable on ties)."""
    if slide is None:
        return []
    return sorted((c for c in slide.clips if is_active(c, t)), key=lambda c: c.layer)


def render_frame(slide: Optional[Slide], t: float) -> list[FrameItem]:
    return [FrameItem(clip=c, state=evaluate(c, t)) for c in visible_clips(slide, t)]
