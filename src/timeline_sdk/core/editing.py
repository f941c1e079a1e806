"""Edit operations on clips, actions and slides.

Timing operations keep a clip's nested actions consistent with its span:
moving the clip body or dragging its left edge shifts every action by the
same delta, so actions stay anchored to the clip's start. Dragging the right
edge touches only ``duration``.

The timing operations do not validate their inputs. Callers clamp first,
using ``clamp_move_start``, ``clamp_left_resize`` and ``clamp_right_resize``:

* ``new_start >= 0``
* ``new_start + duration <= slide.duration``
* ``duration >= MIN_CLIP_DURATION``

Actions are never re-clamped to a shrunk clip. One that ends up outside the
clip's span is kept and simply contributes nothing at evaluation time.
"""

from typing import Any, Optional

from .slides import (
    ACTION_MODELS,
    CLIP_MODELS,
    AudioPayload,
    ImagePayload,
    ShapePayload,
    Slide,
    SlideTransition,
    TextPayload,
    new_id,
    parse_clip,
)
from .timeutil import clamp

MIN_CLIP_DURATION = 0.2
MIN_ACTION_LENGTH = 0.05
MIN_SLIDE_DURATION = 1.0
NEW_CLIP_DURATION = 4.0
NEW_SLIDE_DURATION = 8.0

NUDGE_STEP = 1.0
NUDGE_STEP_COARSE = 5.0
ARROW_KEYS = {
    "ArrowLeft": (-1, 0),
    "ArrowRight": (1, 0),
    "ArrowUp": (0, -1),
    "ArrowDown": (0, 1),
}

ACTION_DEFAULT_LENGTH = {"appear": 1.0, "move": 2.0, "highlight": 1.5}


def _field_aliases(model: type, patch: dict[str, Any]) -> dict[str, Any]:
    """Translate snake_case keys of ``patch`` to the model's document keys."""
    fields = model.model_fields
    out = {}
    for key, value in patch.items():
        field = fields.get(key)
        out[field.alias if field is not None and field.alias else key] = value
    return out


# ── Clip properties ─────────────────────────────────────────────────────

def set_clip(slide: Slide, clip_id: str, patch: dict[str, Any]):
    """Shallow-merge ``patch`` into a clip and return the updated clip.

    The merged document is re-validated, so patching ``type`` switches the
    clip to the matching variant. No range checks are applied.
    """
    clip = slide.get(clip_id)
    if clip is None:
        return None
    data = clip.model_dump(by_alias=True, exclude_none=True)
    data.update(_field_aliases(type(clip), patch))
    updated = parse_clip(data)
    slide.replace(updated)
    return updated


def nudge(slide: Slide, clip_id: str, dx: float, dy: float):
    """Offset a visual clip's position by percentage points, clamped to the canvas."""
    clip = slide.get(clip_id)
    if clip is None or clip.type == "audio":
        return None
    x = clamp((50.0 if clip.x is None else clip.x) + dx, 0, 100)
    y = clamp((50.0 if clip.y is None else clip.y) + dy, 0, 100)
    return set_clip(slide, clip_id, {"x": x, "y": y})


def nudge_for_key(slide: Slide, clip_id: str, key: str, coarse: bool = False):
    """Arrow-key nudge: 1 point per press, 5 with the modifier held."""
    direction = ARROW_KEYS.get(key)
    if direction is None:
        return None
    step = NUDGE_STEP_COARSE if coarse else NUDGE_STEP
    return nudge(slide, clip_id, direction[0] * step, direction[1] * step)


# ── Clip timing ─────────────────────────────────────────────────────────

def shift_actions(clip, delta: float) -> None:
    if abs(delta) < 1e-6:
        return
    for a in clip.actions:
        a.start += delta
        a.end += delta


def move_clip_to(clip, new_start: float) -> None:
    shift_actions(clip, new_start - clip.start)
    clip.start = new_start


def resize_clip_from_left(clip, new_start: float, new_duration: float) -> None:
    shift_actions(clip, new_start - clip.start)
    clip.start = new_start
    clip.duration = new_duration


def resize_clip_from_right(clip, new_duration: float) -> None:
    clip.duration = new_duration


def clamp_move_start(slide: Slide, clip, new_start: float) -> float:
    return clamp(new_start, 0, max(0.0, slide.duration - clip.duration))


def clamp_left_resize(slide: Slide, clip, new_start: float) -> tuple[float, float]:
    """Clamp a left-edge drag; the clip's right edge stays where it is."""
    right = clip.start + clip.duration
    start = clamp(new_start, 0, max(0.0, right - MIN_CLIP_DURATION))
    duration = clamp(right - start, MIN_CLIP_DURATION, slide.duration - start)
    return start, duration


def clamp_right_resize(slide: Slide, clip, new_duration: float) -> float:
    return clamp(new_duration, MIN_CLIP_DURATION, max(MIN_CLIP_DURATION, slide.duration - clip.start))


# ── Clip lifecycle ──────────────────────────────────────────────────────

def _default_payload(clip_type: str):
    if clip_type == "text":
        return TextPayload(content="New Text", font_size=48, color="#ffffff",
                           align="center", font_weight=700)
    if clip_type == "image":
        return ImagePayload(src="https://picsum.photos/1920/1080", object_fit="cover")
    if clip_type == "audio":
        return AudioPayload(src="", volume=1)
    return ShapePayload(kind="rect", fill="#22c55e", stroke="#00000055",
                        stroke_width=2, radius=8)


def new_clip(slide: Slide, clip_type: str, at_time: float = 0.0):
    """Build a clip of ``clip_type`` starting at ``at_time``, on top of the stack."""
    model = CLIP_MODELS.get(clip_type)
    if model is None:
        raise ValueError(f"Unknown clip type: {clip_type}")
    return model(
        id=new_id(clip_type),
        start=clamp(at_time, 0, max(0.0, (slide.duration or 1) - 0.5)),
        duration=NEW_CLIP_DURATION,
        layer=slide.max_layer() + 1,
        x=50, y=50, w=40, h=40, opacity=1,
        in_anim="fadeIn", out_anim="fadeOut", in_dur=0.3, out_dur=0.3, easing="easeOut",
        **{clip_type: _default_payload(clip_type)},
    )


def add_clip(slide: Slide, clip_type: str, at_time: float = 0.0):
    return slide.add(new_clip(slide, clip_type, at_time))


def remove_clip(slide: Slide, clip_id: str) -> bool:
    return slide.remove(clip_id)


# ── Actions ─────────────────────────────────────────────────────────────

def add_action(slide: Slide, clip_id: str, action_type: str, at_time: float):
    """Append an action starting at ``at_time`` with the default length for its type."""
    clip = slide.get(clip_id)
    if clip is None:
        return None
    model = ACTION_MODELS.get(action_type)
    if model is None:
        raise ValueError(f"Unknown action type: {action_type}")

    start = max(0.0, at_time)
    end = min(slide.duration, at_time + ACTION_DEFAULT_LENGTH[action_type])
    extra: dict[str, Any] = {}
    if action_type == "move":
        x = 50.0 if clip.x is None else clip.x
        y = 50.0 if clip.y is None else clip.y
        extra = {"from_x": x, "from_y": y, "to_x": clamp(x + 10, 0, 100), "to_y": y}
    elif action_type == "highlight":
        extra = {"intensity": 0.15}

    action = model(id=new_id("act"), start=start, end=end, **extra)
    clip.actions.append(action)
    return action


def remove_action(clip, action_id: str) -> bool:
    original_len = len(clip.actions)
    clip.actions = [a for a in clip.actions if a.id != action_id]
    return len(clip.actions) < original_len


def set_action_window(slide: Slide, clip, action_id: str,
                      start: Optional[float] = None, end: Optional[float] = None):
    """Edit an action's window within the slide, keeping end >= start + 0.05."""
    action = clip.get_action(action_id)
    if action is None:
        return None
    if start is not None:
        action.start = clamp(start, 0, slide.duration)
        action.end = max(action.start + MIN_ACTION_LENGTH, action.end)
    if end is not None:
        action.end = max(clamp(end, 0, slide.duration), action.start + MIN_ACTION_LENGTH)
    return action


def set_action(clip, action_id: str, patch: dict[str, Any]):
    """Shallow-merge ``patch`` into an action; patching ``type`` changes its kind."""
    for i, action in enumerate(clip.actions):
        if action.id != action_id:
            continue
        data = action.model_dump(by_alias=True, exclude_none=True)
        data.update(_field_aliases(type(action), patch))
        model = ACTION_MODELS.get(data.get("type"))
        if model is None:
            raise ValueError(f"Unknown action type: {data.get('type')}")
        updated = model.model_validate(data)
        clip.actions[i] = updated
        return updated
    return None


# ── Slides ──────────────────────────────────────────────────────────────

def new_slide(position: int) -> Slide:
    return Slide(
        id=new_id("s"),
        name=f"Slide {position}",
        enabled=True,
        duration=NEW_SLIDE_DURATION,
        transition=SlideTransition(enter="fade", exit="fade"),
        bg_color="#000000",
        bg_fit="cover",
    )


def set_slide(slide: Slide, patch: dict[str, Any]) -> Slide:
    """Apply slide settings in place. Duration is floored at one second.

    The merged settings are re-validated before anything is assigned, so an
    invalid value raises ``ValidationError`` and leaves the slide unchanged.
    """
    data = slide.model_dump(by_alias=True, exclude={"clips"})
    for key, value in patch.items():
        name = _field_name(Slide, key)
        if name is None or name in ("id", "clips"):
            continue
        if name == "duration":
            value = max(MIN_SLIDE_DURATION, float(value or MIN_SLIDE_DURATION))
        elif name == "transition" and isinstance(value, dict):
            value = {**data["transition"], **_field_aliases(SlideTransition, value)}
        data[Slide.model_fields[name].alias or name] = value

    validated = Slide.model_validate(data)
    for name in Slide.model_fields:
        if name not in ("id", "clips"):
            setattr(slide, name, getattr(validated, name))
    return slide


def _field_name(model: type, key: str) -> Optional[str]:
    for name, field in model.model_fields.items():
        if key == name or key == field.alias:
            return name
    return None


__all__ = [
    "MIN_CLIP_DURATION",
    "set_clip",
    "nudge",
    "nudge_for_key",
    "shift_actions",
    "move_clip_to",
    "resize_clip_from_left",
    "resize_clip_from_right",
    "clamp_move_start",
    "clamp_left_resize",
    "clamp_right_resize",
    "new_clip",
    "add_clip",
    "remove_clip",
    "add_action",
    "remove_action",
    "set_action_window",
    "set_action",
    "new_slide",
    "set_slide",
]
