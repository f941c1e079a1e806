"""Pointer-drag state machines for the timeline and the preview canvas.

A clip row drag moves along two independent axes: horizontal motion edits the
clip's timing (``TimeDrag``), vertical motion reorders rows (``RowDrag``).
``ClipDragController`` feeds one pointer stream to both.

``CanvasDrag`` handles direct manipulation on the preview canvas: dragging a
clip body moves it, dragging a corner handle resizes it. Pixel deltas are
converted to percent of the canvas size.
"""

from dataclasses import dataclass
from typing import Literal, Optional

from .editing import (
    clamp_left_resize,
    clamp_move_start,
    clamp_right_resize,
    move_clip_to,
    resize_clip_from_left,
    resize_clip_from_right,
    set_clip,
)
from .reorder import drag_target_index, move_slide, reorder_clips
from .slides import Project, Slide
from .timeutil import clamp

PX_PER_SECOND = 40.0
CLIP_ROW_HEIGHT = 40.0
SLIDE_ROW_HEIGHT = 36.0

DragMode = Literal["move", "resize-left", "resize-right"]

CANVAS_WIDTH = 960.0
CANVAS_HEIGHT = 540.0
MIN_CANVAS_SIZE = 2.0
DEFAULT_CANVAS_POS = 50.0
DEFAULT_CANVAS_SIZE = 40.0
DEFAULT_FONT_SIZE = 48.0
MIN_FONT_SIZE = 10.0
FONT_PX_PER_POINT = 3.0

CanvasMode = Literal["move", "resize"]
Corner = Literal["nw", "ne", "sw", "se"]


@dataclass
class TimeDrag:
    """Horizontal drag of a clip body or one of its edges."""
    clip_id: str
    mode: DragMode
    start_x: float
    init_start: float
    init_duration: float
    px_per_second: float = PX_PER_SECOND

    def update(self, slide: Slide, x: float):
        clip = slide.get(self.clip_id)
        if clip is None:
            return None
        d_sec = (x - self.start_x) / self.px_per_second
        if self.mode == "move":
            move_clip_to(clip, clamp_move_start(slide, clip, self.init_start + d_sec))
        elif self.mode == "resize-left":
            start, duration = clamp_left_resize(slide, clip, self.init_start + d_sec)
            resize_clip_from_left(clip, start, duration)
        elif self.mode == "resize-right":
            resize_clip_from_right(clip, clamp_right_resize(slide, clip, self.init_duration + d_sec))
        return clip


@dataclass
class RowDrag:
    """Vertical drag of a row; re-anchors after every committed step."""
    item_id: str
    start_y: float
    init_index: int
    row_height: float = CLIP_ROW_HEIGHT

    def _step(self, count: int, current_index: int, y: float) -> Optional[int]:
        to = drag_target_index(self.init_index, y - self.start_y, self.row_height, count)
        if to == self.init_index or current_index < 0:
            return None
        return to

    def _commit(self, to: int, y: float) -> None:
        self.start_y = y
        self.init_index = to

    def update_clips(self, slide: Slide, y: float) -> bool:
        to = self._step(len(slide.clips), slide.index_of(self.item_id), y)
        if to is None:
            return False
        reorder_clips(slide, slide.index_of(self.item_id), to)
        self._commit(to, y)
        return True

    def update_slides(self, project: Project, y: float) -> bool:
        to = self._step(len(project.slides), project.index_of(self.item_id), y)
        if to is None:
            return False
        move_slide(project, project.index_of(self.item_id), to)
        self._commit(to, y)
        return True


class ClipDragController:
    """Routes one pointer stream on a clip row to the time and row state machines."""

    def __init__(self, px_per_second: float = PX_PER_SECOND,
                 row_height: float = CLIP_ROW_HEIGHT):
        self.px_per_second = px_per_second
        self.row_height = row_height
        self.time_drag: Optional[TimeDrag] = None
        self.row_drag: Optional[RowDrag] = None

    @property
    def active(self) -> bool:
        return self.time_drag is not None

    def begin(self, slide: Slide, clip_id: str, mode: DragMode, x: float, y: float) -> bool:
        clip = slide.get(clip_id)
        if clip is None:
            return False
        self.time_drag = TimeDrag(clip_id, mode, x, clip.start, clip.duration, self.px_per_second)
        self.row_drag = RowDrag(clip_id, y, slide.index_of(clip_id), self.row_height)
        return True

    def pointer_move(self, slide: Slide, x: float, y: float) -> bool:
        if self.time_drag is None or self.row_drag is None:
            return False
        moved = self.time_drag.update(slide, x) is not None
        reordered = self.row_drag.update_clips(slide, y)
        return moved or reordered

    def end(self) -> None:
        self.time_drag = None
        self.row_drag = None


@dataclass
class CanvasDrag:
    """Move or corner-resize of a visual clip on the preview canvas."""
    clip_id: str
    mode: CanvasMode
    start_x: float
    start_y: float
    init_x: float
    init_y: float
    init_w: float
    init_h: float
    init_font_size: Optional[float] = None
    corner: Corner = "se"
    canvas_w: float = CANVAS_WIDTH
    canvas_h: float = CANVAS_HEIGHT

    @classmethod
    def begin(cls, slide: Slide, clip_id: str, mode: CanvasMode, x: float, y: float,
              corner: Corner = "se", canvas_w: float = CANVAS_WIDTH,
              canvas_h: float = CANVAS_HEIGHT) -> Optional["CanvasDrag"]:
        clip = slide.get(clip_id)
        if clip is None or clip.type == "audio":
            return None
        return cls(
            clip_id, mode, x, y,
            init_x=DEFAULT_CANVAS_POS if clip.x is None else clip.x,
            init_y=DEFAULT_CANVAS_POS if clip.y is None else clip.y,
            init_w=DEFAULT_CANVAS_SIZE if clip.w is None else clip.w,
            init_h=DEFAULT_CANVAS_SIZE if clip.h is None else clip.h,
            init_font_size=clip.text.font_size if clip.type == "text" else None,
            corner=corner,
            canvas_w=canvas_w or CANVAS_WIDTH,
            canvas_h=canvas_h or CANVAS_HEIGHT,
        )

    def update(self, slide: Slide, x: float, y: float, lock_axis: bool = False):
        """Apply the pointer position; ``lock_axis`` keeps only the dominant axis of a move."""
        clip = slide.get(self.clip_id)
        if clip is None:
            return None
        dx = x - self.start_x
        dy = y - self.start_y
        d_pct_x = dx / self.canvas_w * 100
        d_pct_y = dy / self.canvas_h * 100

        if self.mode == "move":
            lock_x = lock_axis and abs(dx) > abs(dy)
            lock_y = lock_axis and abs(dy) > abs(dx)
            return set_clip(slide, self.clip_id, {
                "x": clamp(self.init_x + (0 if lock_y else d_pct_x), 0, 100),
                "y": clamp(self.init_y + (0 if lock_x else d_pct_y), 0, 100),
            })

        add_w = d_pct_x if self.corner in ("ne", "se") else -d_pct_x
        add_h = d_pct_y if self.corner in ("sw", "se") else -d_pct_y
        patch: dict = {
            "w": clamp(self.init_w + add_w, MIN_CANVAS_SIZE, 100),
            "h": clamp(self.init_h + add_h, MIN_CANVAS_SIZE, 100),
        }
        if clip.type == "text":
            # bottom handles grow the font when dragged down, top handles when dragged up
            sign = 1 if self.corner in ("sw", "se") else -1
            base = self.init_font_size or DEFAULT_FONT_SIZE
            text = clip.text.model_dump(by_alias=True, exclude_none=True)
            text["fontSize"] = max(MIN_FONT_SIZE, base + dy / FONT_PX_PER_POINT * sign)
            patch["text"] = text
        return set_clip(slide, self.clip_id, patch)
