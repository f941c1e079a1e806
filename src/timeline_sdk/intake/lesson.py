"""Lesson-JSON import: converts a foreign lesson description into a Project.

The lesson schema describes each slide as a background plus a ``timeline`` of
elements with clock-string timings, pixel or fractional positions and
free-form animation names. Conversion rules:

- timings: ``hh:mm:ss``, ``mm:ss`` or plain seconds; empty, ``"none"`` or
  unparseable values become 0
- sizes: pixels are converted to percent of a 1920x1080 reference canvas
- positions: fractional ``[x, y]`` pairs (list or text) become percent
- animation names: alias table, then case-insensitive match, then a fuzzy
  match; anything else falls back to ``fadeIn`` (clips) or ``fade`` (slides)
- elements without a usable end run until the end of the slide
"""

import difflib
import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Optional, Sequence

from ..core.slides import (
    ANIMATION_NAMES,
    SLIDE_ANIM_NAMES,
    AudioClip,
    AudioPayload,
    ImageClip,
    ImagePayload,
    Project,
    ShapeClip,
    ShapePayload,
    Slide,
    SlideTransition,
    TextClip,
    TextPayload,
)

logger = logging.getLogger("SlideTimeline.intake.lesson")

REFERENCE_WIDTH = 1920
REFERENCE_HEIGHT = 1080
MIN_SLIDE_DURATION = 8.0
MIN_ELEMENT_DURATION = 0.2
DEFAULT_ANIM_DURATION = 0.6
FUZZY_CUTOFF = 0.75

ANIMATION_ALIASES = {
    "fadein": "fadeIn",
    "fadeout": "fadeOut",
    "bouncescale": "bounceIn",
    "bounce": "bounceIn",
    "flyin": "slideInRight",
    "randombars": "zoomIn",
    "spit": "scaleIn",
    "split": "scaleIn",
    "zoomin": "zoomIn",
    "zoomout": "zoomOut",
}

ELEMENT_LAYERS = {"audio": 1, "image": 5, "text": 10}
DEFAULT_ELEMENT_LAYER = 6

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_HEX_RE = re.compile(r"#([0-9a-fA-F]{3,8})")
_TAG_RE = re.compile(r"<[^>]+>")


# ── Field parsers ───────────────────────────────────────────────────────

def parse_clock(value: Any) -> float:
    """Parse ``hh:mm:ss``, ``mm:ss`` or seconds; 0 for anything unusable."""
    if value is None or value == "none" or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    s = str(value).strip()
    if not s:
        return 0.0
    try:
        parts = [float(p) for p in s.split(":")]
    except ValueError:
        return 0.0
    if len(parts) == 3:
        seconds = parts[0] * 3600 + parts[1] * 60 + parts[2]
    elif len(parts) == 2:
        seconds = parts[0] * 60 + parts[1]
    elif len(parts) == 1:
        seconds = parts[0]
    else:
        return 0.0
    return seconds if math.isfinite(seconds) else 0.0


def _parse_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = float(re.sub(r"px$", "", value.strip())) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def px_to_pct(px: Any, base: float) -> Optional[float]:
    n = _parse_number(px)
    if n is None or base <= 0:
        return None
    return n / base * 100


def as_number(value: Any, default: float) -> float:
    """Numeric style value such as 48, "48" or "48px"; ``default`` otherwise."""
    n = _parse_number(value)
    return default if n is None else n


def parse_position(value: Any) -> tuple[Optional[float], Optional[float]]:
    """Fractional ``[x, y]`` (list, JSON text or loose text) to percent."""
    if not value or value == "none":
        return None, None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            nums = _NUMBER_RE.findall(value)
            if len(nums) >= 2:
                return float(nums[0]) * 100, float(nums[1]) * 100
            return None, None
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        try:
            return float(value[0]) * 100, float(value[1]) * 100
        except (TypeError, ValueError):
            return None, None
    return None, None


def parse_style(style: Any) -> dict:
    if not style:
        return {}
    if isinstance(style, str):
        try:
            parsed = json.loads(style)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return style if isinstance(style, dict) else {}


def clean_html(text: str) -> str:
    return _TAG_RE.sub("", text)


def is_circle_style(style: dict) -> bool:
    br = style.get("borderRadius")
    return (isinstance(br, str) and ("100" in br or br == "50%")) or br == 999


def extract_hex_color(value: Any, default: str = "#000000") -> str:
    m = _HEX_RE.search(str(value))
    return f"#{m.group(1)}" if m else default


# ── Name matching ───────────────────────────────────────────────────────

def match_name(value: Any, choices: Sequence[str], aliases: dict[str, str],
               default: str) -> str:
    """Best-effort match of a free-form name onto ``choices``."""
    s = str(value or "").strip()
    if not s:
        return default
    key = s.lower()
    if key in aliases:
        return aliases[key]
    by_lower = {c.lower(): c for c in choices}
    if key in by_lower:
        return by_lower[key]
    squashed = re.sub(r"[^a-z0-9]", "", key)
    if squashed in aliases:
        return aliases[squashed]
    if squashed in by_lower:
        return by_lower[squashed]
    close = difflib.get_close_matches(squashed, list(by_lower), n=1, cutoff=FUZZY_CUTOFF)
    if close:
        return by_lower[close[0]]
    logger.debug(f"No match for animation name '{s}', using '{default}'")
    return default


def map_animation(value: Any) -> str:
    return match_name(value, [a for a in ANIMATION_NAMES if a != "none"],
                      ANIMATION_ALIASES, "fadeIn")


def map_transition(value: Any) -> str:
    return match_name(value, SLIDE_ANIM_NAMES, {}, "fade")


# ── Converter ───────────────────────────────────────────────────────────

class LessonConverter:
    """Converts lesson JSON (a list of slides or ``{"slides": [...]}``) into a Project."""

    def __init__(self, fps: int = 30, width: int = REFERENCE_WIDTH,
                 height: int = REFERENCE_HEIGHT):
        self.fps = fps
        self.width = width
        self.height = height

    def load(self, path: str | Path) -> Project:
        return self.convert(json.loads(Path(path).read_text(encoding="utf-8")))

    def convert(self, lesson: Any) -> Project:
        if isinstance(lesson, dict):
            lesson = lesson.get("slides", [])
        slides = [self.convert_slide(s, i) for i, s in enumerate(lesson or [])
                  if isinstance(s, dict)]
        logger.info(f"Converted lesson with {len(slides)} slides")
        return Project(fps=self.fps, width=self.width, height=self.height, slides=slides)

    def convert_slide(self, data: dict, index: int) -> Slide:
        slide_key = str(data.get("id") or index)
        transition = map_transition(data.get("transition"))

        timed: list[tuple[Any, Optional[float]]] = []
        for j, item in enumerate(data.get("timeline") or []):
            if not isinstance(item, dict):
                continue
            clip, end = self._element_clip(item, slide_key, j)
            if clip is not None:
                timed.append((clip, end))

        explicit_ends = [end for _, end in timed if end is not None]
        duration = max([MIN_SLIDE_DURATION] + explicit_ends)
        clips = []
        for clip, end in timed:
            if end is None:
                clip.duration = max(MIN_ELEMENT_DURATION, duration - clip.start)
            clips.append(clip)

        background = self._background_clip(data, index, duration)
        if background is not None:
            clips.append(background)

        return Slide(
            id=str(data.get("id") or f"s{index + 1}"),
            name=str(data.get("title") or data.get("id") or f"Slide {index + 1}"),
            duration=duration,
            transition=SlideTransition(enter=transition, exit=transition),
            clips=sorted(clips, key=lambda c: (c.layer, c.start)),
        )

    def _background_clip(self, data: dict, index: int, duration: float):
        common = dict(
            start=0, duration=duration, layer=0, x=50, y=50, w=100, h=100,
            in_anim="fadeIn", out_anim="fadeOut", in_dur=0.2, out_dur=0.2,
            easing="easeOut", opacity=1,
        )
        if data.get("bg_image"):
            return ImageClip(id=f"bgimg_{index}",
                             image=ImagePayload(src=str(data["bg_image"]), object_fit="cover"),
                             **common)
        if data.get("bg"):
            return ShapeClip(id=f"bgrect_{index}",
                             shape=ShapePayload(kind="rect", fill=extract_hex_color(data["bg"]), radius=0),
                             **common)
        return None

    def _element_clip(self, item: dict, slide_key: str, j: int):
        """Build the clip for one timeline element; returns ``(clip, explicit_end)``."""
        kind = item.get("element_type")
        start = max(0.0, parse_clock(item.get("start")))
        end = parse_clock(item.get("end"))
        explicit_end = end if end > start else None
        x, y = parse_position(item.get("position"))
        style = parse_style(item.get("style"))

        anim_dur = item.get("duration_animation")
        in_dur = DEFAULT_ANIM_DURATION
        if anim_dur and anim_dur != "none":
            in_dur = parse_clock(anim_dur) or DEFAULT_ANIM_DURATION

        base = dict(
            id=str(item.get("element_key") or f"{slide_key}_{j}"),
            start=start,
            duration=max(MIN_ELEMENT_DURATION, end - start),
            layer=ELEMENT_LAYERS.get(kind, DEFAULT_ELEMENT_LAYER),
            in_anim=map_animation(item.get("animation")),
            out_anim="fadeOut",
            in_dur=in_dur,
            out_dur=DEFAULT_ANIM_DURATION,
            easing="easeOut",
            x=x, y=y,
            opacity=1,
        )
        content = clean_html(str(item.get("element_content") or ""))

        if kind == "text":
            weight = style.get("fontWeight")
            try:
                font_weight = 700 if weight == "bold" else int(weight or 600)
            except (TypeError, ValueError):
                font_weight = 600
            clip = TextClip(name="Text", text=TextPayload(
                content=content, font_size=as_number(style.get("fontSize"), 48),
                color=str(style.get("color", "#ffffff")), align="center", font_weight=font_weight,
            ), **base)
        elif kind == "audio":
            clip = AudioClip(name="Audio", audio=AudioPayload(
                src=str(item.get("file_record") or ""), volume=1,
            ), **base)
        elif kind == "circle":
            clip = ShapeClip(name="Circle", shape=ShapePayload(
                kind="circle" if is_circle_style(style) else "rect",
                fill=str(style.get("backgroundColor", "#ffffff")),
            ), w=px_to_pct(style.get("width"), self.width),
                h=px_to_pct(style.get("height"), self.height), **base)
        elif kind == "image":
            clip = ImageClip(name="Image", image=ImagePayload(
                src=str(item.get("file_record") or content), object_fit="contain",
            ), w=px_to_pct(style.get("width"), self.width),
                h=px_to_pct(style.get("height"), self.height), **base)
        elif kind == "table":
            clip = TextClip(name="Table-as-text", text=TextPayload(
                content=content.replace("\\n", "\n"), font_size=as_number(style.get("fontSize"), 18),
                color=str(style.get("color", "#1a2954")), align="left", font_weight=600,
            ), **base)
        else:
            logger.debug(f"Skipping unsupported lesson element type '{kind}'")
            return None, None
        return clip, explicit_end
