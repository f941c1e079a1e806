"""Project document: ordered slides plus canvas metadata, with JSON codec."""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, PositiveInt, ValidationError

from ..errors import MalformedDocument
from ..timeutil import fmt_time
from .animations import AppearAction, HighlightAction, MoveAction, SlideTransition
from .base import TimelineModel
from .clip import AudioClip, ImageClip, ShapeClip, TextClip
from .payloads import AudioPayload, ImagePayload, ShapePayload, TextPayload
from .slide import Slide


class Project(TimelineModel):
    """Ordered collection of slides. List order is playback order."""
    fps: PositiveInt = 30
    width: PositiveInt = 1920
    height: PositiveInt = 1080
    slides: list[Slide] = Field(default_factory=list)

    def get(self, slide_id: Optional[str]) -> Optional[Slide]:
        for s in self.slides:
            if s.id == slide_id:
                return s
        return None

    def index_of(self, slide_id: Optional[str]) -> int:
        for i, s in enumerate(self.slides):
            if s.id == slide_id:
                return i
        return -1

    def add(self, slide: Slide) -> Slide:
        self.slides.append(slide)
        return slide

    def remove(self, slide_id: str) -> bool:
        original_len = len(self.slides)
        self.slides = [s for s in self.slides if s.id != slide_id]
        return len(self.slides) < original_len

    def next_enabled_index(self, from_index: int) -> Optional[int]:
        """Index of the first enabled slide after ``from_index``, or None."""
        for i in range(from_index + 1, len(self.slides)):
            if self.slides[i].enabled:
                return i
        return None

    def to_summary(self) -> list[dict]:
        return [
            {
                "id": s.id,
                "index": i,
                "name": s.name,
                "enabled": s.enabled,
                "duration": fmt_time(s.duration),
                "clip_count": len(s.clips),
                "transition": f"{s.transition.enter} / {s.transition.exit}",
            }
            for i, s in enumerate(self.slides)
        ]

    # ── Document codec ──────────────────────────────────────────────────

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    @classmethod
    def from_dict(cls, data: Any) -> "Project":
        if not isinstance(data, dict) or not isinstance(data.get("slides"), list):
            raise MalformedDocument("Invalid file: missing 'slides' array")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise MalformedDocument("Invalid project document", details=str(e)) from e

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Project":
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError, UnicodeDecodeError) as e:
            raise MalformedDocument("Invalid JSON", details=str(e)) from e
        return cls.from_dict(data)

    def save(self, path: str | Path) -> None:
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path) -> "Project":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))


def default_project() -> Project:
    """The built-in starter project used when nothing has been saved yet."""
    return Project(
        fps=30, width=1920, height=1080,
        slides=[
            Slide(
                id="s1", name="Slide 1", duration=10, bg_color="#000000",
                transition=SlideTransition(enter="fade", exit="fade"),
                clips=[
                    TextClip(
                        id="t1", name="Title", start=0, duration=4, layer=100,
                        in_anim="fadeIn", out_anim="fadeOut", in_dur=0.6, out_dur=0.6,
                        easing="easeOut", x=50, y=25, w=60, h=20, opacity=1,
                        text=TextPayload(content="Mini Timeline Editor", font_size=64,
                                         color="#ffffff", align="center", font_weight=800),
                        actions=[
                            AppearAction(id="a1", start=0, end=1),
                            HighlightAction(id="a2", start=1.5, end=3.0, intensity=0.15),
                        ],
                    ),
                    ImageClip(
                        id="img1", name="Cover", start=0.5, duration=8, layer=90,
                        in_anim="slideInRight", out_anim="fadeOut", in_dur=0.8, out_dur=0.4,
                        easing="easeOut", x=50, y=60, w=45, h=45,
                        image=ImagePayload(src="https://picsum.photos/1920/1080", object_fit="cover"),
                        actions=[
                            MoveAction(id="m1", start=5, end=7, from_x=50, from_y=60, to_x=80, to_y=60),
                        ],
                    ),
                    ShapeClip(
                        id="shape1", name="Circle", start=0, duration=8, layer=95,
                        x=20, y=75, w=12, h=12,
                        shape=ShapePayload(kind="circle", fill="#0ea5e9", stroke="#ffffff88", stroke_width=2),
                        actions=[
                            AppearAction(id="sapp", start=0.2, end=0.8),
                            HighlightAction(id="shl", start=2, end=3.5, intensity=0.2),
                        ],
                    ),
                    AudioClip(
                        id="bgm1", name="BGM", start=0, duration=10, layer=1,
                        audio=AudioPayload(src="", volume=0.7),
                    ),
                ],
            ),
            Slide(
                id="s2", name="Slide 2", duration=6, bg_color="#111827",
                transition=SlideTransition(enter="wipe", exit="split"),
                clips=[
                    TextClip(
                        id="t2", name="Next slide", start=0, duration=4, layer=100,
                        x=50, y=50, in_anim="slideInTop", out_anim="fadeOut",
                        in_dur=0.6, out_dur=0.4,
                        text=TextPayload(content="Slide 2", font_size=72, color="#fff",
                                         align="center", font_weight=800),
                        actions=[AppearAction(id="a3", start=0, end=0.8)],
                    ),
                ],
            ),
        ],
    )
