"""Editor session: the host that wires the document, clock, audio and autosave.

The session owns the single mutable ``Project``. Every mutating method ends
with an autosave through the injected ``PersistenceAdapter`` (if any); a
failed save is logged and otherwise ignored.

Selection is stored as a clip id and resolved against the active slide on
every read, so deleting the clip (or switching slides) can never leave a
dangling reference.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from . import editing
from .errors import MalformedDocument
from .evaluator import FrameItem, render_frame
from .gestures import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    SLIDE_ROW_HEIGHT,
    CanvasDrag,
    CanvasMode,
    ClipDragController,
    Corner,
    DragMode,
    RowDrag,
)
from .media import AudioSync
from .persistence import PersistenceAdapter
from .playback import FrameScheduler, PlaybackClock
from .reorder import move_slide, reorder_clips
from .slides import Project, Slide, default_project

logger = logging.getLogger("SlideTimeline.core.state")

EXPORT_FILENAME = "project_v3.json"


class EditorSession:
    """Editing and playback state for one open project."""

    def __init__(
        self,
        project: Optional[Project] = None,
        persistence: Optional[PersistenceAdapter] = None,
        scheduler: Optional[FrameScheduler] = None,
        notify: Optional[Callable[[str], None]] = None,
        continuation: bool = True,
    ):
        self.persistence = persistence
        if project is None and persistence is not None:
            project = persistence.load()
            if project is not None:
                logger.info("Restored project from autosave")
        self.project = project if project is not None else default_project()
        self.notify = notify or logger.warning
        self.audio = AudioSync()
        self.clock = PlaybackClock(self.project, scheduler=scheduler, continuation=continuation)
        self.drag = ClipDragController()
        self.slide_drag: Optional[RowDrag] = None
        self.canvas_drag: Optional[CanvasDrag] = None
        self._selected_id: Optional[str] = None
        self.clock.slide_listeners.append(self._on_slide_switch)
        self.clock.tick_listeners.append(self._sync_audio)

    # ── Views ───────────────────────────────────────────────────────────

    @property
    def slide(self) -> Optional[Slide]:
        return self.clock.current_slide

    @property
    def time(self) -> float:
        return self.clock.time

    @property
    def selected_clip(self):
        slide = self.slide
        return slide.get(self._selected_id) if slide is not None else None

    @property
    def selected_id(self) -> Optional[str]:
        clip = self.selected_clip
        return clip.id if clip is not None else None

    def frame(self, t: Optional[float] = None) -> list[FrameItem]:
        return render_frame(self.slide, self.time if t is None else t)

    # ── Selection ───────────────────────────────────────────────────────

    def select(self, clip_id: Optional[str]) -> bool:
        if clip_id is None:
            self._selected_id = None
            return True
        if self.slide is None or self.slide.get(clip_id) is None:
            return False
        self._selected_id = clip_id
        return True

    def _on_slide_switch(self, clock: PlaybackClock) -> None:
        self._selected_id = None
        self.drag.end()
        self.canvas_drag = None

    def _sync_audio(self, clock: PlaybackClock) -> None:
        self.audio.sync(clock.current_slide, clock.time, clock.playing, clock.speed)

    # ── Autosave ────────────────────────────────────────────────────────

    def _commit(self) -> None:
        if self.persistence is None:
            return
        try:
            self.persistence.save(self.project)
        except OSError as e:
            logger.warning(f"Autosave failed: {e}")

    # ── Transport ───────────────────────────────────────────────────────

    def play(self) -> None:
        self.clock.play()

    def pause(self) -> None:
        self.clock.pause()

    def stop(self) -> None:
        self.clock.stop()

    def seek(self, t: float) -> float:
        return self.clock.seek(t)

    def set_speed(self, speed: float) -> float:
        self.clock.speed = speed
        return self.clock.speed

    def set_continuation(self, enabled: bool) -> None:
        self.clock.continuation = enabled

    # ── Slides ──────────────────────────────────────────────────────────

    def select_slide(self, slide_id: str) -> bool:
        return self.clock.select_slide(slide_id)

    def add_slide(self) -> Slide:
        slide = self.project.add(editing.new_slide(len(self.project.slides) + 1))
        self._commit()
        self.clock.select_slide(slide.id)
        return slide

    def remove_slide(self, slide_id: str) -> bool:
        idx = self.project.index_of(slide_id)
        if idx < 0:
            return False
        was_active = self.slide is not None and self.slide.id == slide_id
        self.project.remove(slide_id)
        self._commit()
        if was_active and self.project.slides:
            self.clock.select_slide(self.project.slides[max(0, idx - 1)].id)
        elif was_active:
            self.clock.attach(self.project)
        return True

    def move_slide(self, from_index: int, to_index: int) -> bool:
        if not move_slide(self.project, from_index, to_index):
            return False
        self._commit()
        return True

    def update_slide(self, slide_id: str, patch: dict[str, Any]) -> Optional[Slide]:
        slide = self.project.get(slide_id)
        if slide is None:
            return None
        editing.set_slide(slide, patch)
        self._commit()
        if self.slide is slide:
            self.clock.clamp_to_slide()
        return slide

    def begin_slide_drag(self, slide_id: str, y: float) -> bool:
        idx = self.project.index_of(slide_id)
        if idx < 0:
            return False
        self.slide_drag = RowDrag(slide_id, y, idx, SLIDE_ROW_HEIGHT)
        return True

    def slide_pointer_move(self, y: float) -> bool:
        if self.slide_drag is None or not self.slide_drag.update_slides(self.project, y):
            return False
        self._commit()
        return True

    def end_slide_drag(self) -> None:
        self.slide_drag = None

    # ── Clips ───────────────────────────────────────────────────────────

    def add_clip(self, clip_type: str):
        if self.slide is None:
            return None
        clip = editing.add_clip(self.slide, clip_type, self.time)
        self._commit()
        self.select(clip.id)
        return clip

    def remove_clip(self, clip_id: str) -> bool:
        if self.slide is None or not editing.remove_clip(self.slide, clip_id):
            return False
        if self._selected_id == clip_id:
            self._selected_id = None
        self.audio.unbind(clip_id)
        self._commit()
        return True

    def set_clip(self, clip_id: str, patch: dict[str, Any]):
        if self.slide is None:
            return None
        clip = editing.set_clip(self.slide, clip_id, patch)
        if clip is not None:
            self._commit()
        return clip

    def move_clip(self, clip_id: str, new_start: float):
        clip = self.slide.get(clip_id) if self.slide is not None else None
        if clip is None:
            return None
        editing.move_clip_to(clip, editing.clamp_move_start(self.slide, clip, new_start))
        self._commit()
        return clip

    def resize_clip_left(self, clip_id: str, new_start: float):
        clip = self.slide.get(clip_id) if self.slide is not None else None
        if clip is None:
            return None
        start, duration = editing.clamp_left_resize(self.slide, clip, new_start)
        editing.resize_clip_from_left(clip, start, duration)
        self._commit()
        return clip

    def resize_clip_right(self, clip_id: str, new_duration: float):
        clip = self.slide.get(clip_id) if self.slide is not None else None
        if clip is None:
            return None
        editing.resize_clip_from_right(clip, editing.clamp_right_resize(self.slide, clip, new_duration))
        self._commit()
        return clip

    def reorder_clip(self, from_index: int, to_index: int) -> bool:
        if self.slide is None or not reorder_clips(self.slide, from_index, to_index):
            return False
        self._commit()
        return True

    def nudge(self, key: str, coarse: bool = False):
        """Arrow-key nudge of the selected clip."""
        clip_id = self.selected_id
        if clip_id is None:
            return None
        clip = editing.nudge_for_key(self.slide, clip_id, key, coarse)
        if clip is not None:
            self._commit()
        return clip

    def begin_drag(self, clip_id: str, mode: DragMode, x: float, y: float) -> bool:
        if self.slide is None or not self.drag.begin(self.slide, clip_id, mode, x, y):
            return False
        self.select(clip_id)
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        if self.slide is None or not self.drag.pointer_move(self.slide, x, y):
            return False
        self._commit()
        return True

    def end_drag(self) -> None:
        self.drag.end()

    def begin_canvas_drag(self, clip_id: str, mode: CanvasMode, x: float, y: float,
                          corner: Corner = "se", canvas_w: float = CANVAS_WIDTH,
                          canvas_h: float = CANVAS_HEIGHT) -> bool:
        """Start moving (or corner-resizing) a visual clip on the preview."""
        if self.slide is None:
            return False
        self.canvas_drag = CanvasDrag.begin(self.slide, clip_id, mode, x, y, corner,
                                            canvas_w, canvas_h)
        if self.canvas_drag is None:
            return False
        self.select(clip_id)
        return True

    def canvas_pointer_move(self, x: float, y: float, lock_axis: bool = False):
        if self.canvas_drag is None or self.slide is None:
            return None
        clip = self.canvas_drag.update(self.slide, x, y, lock_axis)
        if clip is not None:
            self._commit()
        return clip

    def end_canvas_drag(self) -> None:
        self.canvas_drag = None

    # ── Actions ─────────────────────────────────────────────────────────

    def add_action(self, clip_id: str, action_type: str):
        if self.slide is None:
            return None
        action = editing.add_action(self.slide, clip_id, action_type, self.time)
        if action is not None:
            self._commit()
        return action

    def remove_action(self, clip_id: str, action_id: str) -> bool:
        clip = self.slide.get(clip_id) if self.slide is not None else None
        if clip is None or not editing.remove_action(clip, action_id):
            return False
        self._commit()
        return True

    def set_action_window(self, clip_id: str, action_id: str,
                          start: Optional[float] = None, end: Optional[float] = None):
        clip = self.slide.get(clip_id) if self.slide is not None else None
        if clip is None:
            return None
        action = editing.set_action_window(self.slide, clip, action_id, start, end)
        if action is not None:
            self._commit()
        return action

    def set_action(self, clip_id: str, action_id: str, patch: dict[str, Any]):
        clip = self.slide.get(clip_id) if self.slide is not None else None
        if clip is None:
            return None
        action = editing.set_action(clip, action_id, patch)
        if action is not None:
            self._commit()
        return action

    # ── Document ────────────────────────────────────────────────────────

    def replace_project(self, project: Project) -> None:
        self.project = project
        self.clock.attach(project)
        self._commit()

    def import_json(self, raw: str | bytes) -> bool:
        """Replace the project with a parsed document; on failure nothing changes."""
        try:
            project = Project.from_json(raw)
        except MalformedDocument as e:
            logger.warning(f"Import rejected: {e}")
            self.notify(f"Import failed: {e.message}")
            return False
        self.replace_project(project)
        logger.info(f"Imported project with {len(project.slides)} slides")
        return True

    def import_file(self, path: str | Path) -> bool:
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            self.notify(f"Import failed: {e}")
            return False
        return self.import_json(raw)

    def export_json(self) -> str:
        return self.project.to_json()

    def export_to(self, directory: str | Path, filename: str = EXPORT_FILENAME) -> Path:
        path = Path(directory) / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        self.project.save(path)
        return path
