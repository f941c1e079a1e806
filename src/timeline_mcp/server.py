"""Slide Timeline MCP Server - MCP tools for editing and previewing slide timelines."""

from mcp.server.fastmcp import FastMCP, Context
import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

# SDK imports
from timeline_sdk.core.evaluator import FrameItem, entrance_progress
from timeline_sdk.core.persistence import FilePersistence
from timeline_sdk.core.playback import AsyncioFrameScheduler
from timeline_sdk.core.slides import CLIP_TYPES, ACTION_TYPES, default_project
from timeline_sdk.core.state import EditorSession
from timeline_sdk.core.timeutil import fmt_time
from timeline_sdk.intake.lesson import LessonConverter

# Configure logging
logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("SlideTimeline")

# Default configuration
DEFAULT_AUTOSAVE_DIR = "./.autosave"
DEFAULT_EXPORT_DIR = "./exports"
DEFAULT_FPS = 60


# ── Global State ────────────────────────────────────────────────────────

_session: Optional[EditorSession] = None


def get_session() -> EditorSession:
    global _session
    if _session is None:
        autosave_dir = Path(os.getenv("TIMELINE_AUTOSAVE_DIR", DEFAULT_AUTOSAVE_DIR))
        fps = float(os.getenv("TIMELINE_FPS", DEFAULT_FPS))
        _session = EditorSession(
            persistence=FilePersistence(root_path=autosave_dir),
            scheduler=AsyncioFrameScheduler(fps=fps),
        )
        logger.info(f"Session ready with {len(_session.project.slides)} slides (autosave: {autosave_dir})")
    return _session


def set_session(session: Optional[EditorSession]) -> None:
    global _session
    _session = session


def _frame_item(item: FrameItem, t: float) -> dict:
    clip = item.clip
    return {
        "id": clip.id,
        "type": clip.type,
        "layer": clip.layer,
        "x": item.state.x,
        "y": item.state.y,
        "opacity": item.state.opacity,
        "scale": item.state.scale,
        "entrance": entrance_progress(clip, t),
    }


def _transport(session: EditorSession) -> dict:
    return {
        "state": session.clock.state,
        "time": session.time,
        "time_display": f"{fmt_time(session.time)} / {fmt_time(session.clock.duration)}",
        "speed": session.clock.speed,
        "continuation": session.clock.continuation,
        "slide_id": session.slide.id if session.slide else None,
        "slide_index": session.clock.slide_index,
    }


def _no_slide() -> str:
    return "Error: The project has no slides. Use add_slide first."


# ── Server Setup ────────────────────────────────────────────────────────

@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[Dict[str, Any]]:
    try:
        logger.info("SlideTimeline server starting up")
        get_session()
        yield {}
    finally:
        if _session is not None:
            _session.pause()
        logger.info("SlideTimeline server shut down")


mcp = FastMCP("SlideTimeline", lifespan=server_lifespan)


# ═══════════════════════════════════════════════════════════════════════
# PROJECT TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def get_project_status(ctx: Context) -> str:
    """Get the project canvas settings, slide count and transport state."""
    session = get_session()
    project = session.project
    return json.dumps({
        "fps": project.fps,
        "width": project.width,
        "height": project.height,
        "slide_count": len(project.slides),
        "selected_clip": session.selected_id,
        "transport": _transport(session),
    }, indent=2)


@mcp.tool()
def new_project(ctx: Context) -> str:
    """Replace the current project with the built-in starter project."""
    session = get_session()
    session.replace_project(default_project())
    return json.dumps({"status": "created", "slides": session.project.to_summary()}, indent=2)


@mcp.tool()
def import_project(ctx: Context, document: str = "", file_path: str = "") -> str:
    """Import a project document, replacing the current project.

    Parameters:
    - document: Project JSON text
    - file_path: Path to a project JSON file (used when document is empty)
    """
    session = get_session()
    if not document and not file_path:
        return "Error: Provide either document or file_path."
    messages: list[str] = []
    previous = session.notify
    session.notify = messages.append
    try:
        ok = session.import_json(document) if document else session.import_file(file_path)
    finally:
        session.notify = previous
    if not ok:
        return f"Error: {messages[-1] if messages else 'Import failed'}"
    return json.dumps({"status": "imported", "slides": session.project.to_summary()}, indent=2)


@mcp.tool()
def export_project(ctx: Context, directory: str = "", inline: bool = False) -> str:
    """Export the current project as JSON.

    Parameters:
    - directory: Target directory (defaults to TIMELINE_EXPORT_DIR or ./exports)
    - inline: Return the document text instead of writing a file
    """
    session = get_session()
    if inline:
        return session.export_json()
    target = directory or os.getenv("TIMELINE_EXPORT_DIR", DEFAULT_EXPORT_DIR)
    try:
        path = session.export_to(target)
    except OSError as e:
        return f"Error exporting project: {str(e)}"
    return json.dumps({"status": "exported", "path": str(path)}, indent=2)


@mcp.tool()
def import_lesson(ctx: Context, file_path: str) -> str:
    """Convert a lesson JSON file into a new project, replacing the current one.

    Parameters:
    - file_path: Path to the lesson JSON file
    """
    if not os.path.exists(file_path):
        return f"Error: File not found: {file_path}"
    try:
        project = LessonConverter().load(file_path)
    except (json.JSONDecodeError, ValueError) as e:
        logger.error(f"Lesson conversion error: {str(e)}")
        return f"Error converting lesson: {str(e)}"
    session = get_session()
    session.replace_project(project)
    return json.dumps({"status": "converted", "slides": project.to_summary()}, indent=2)


# ═══════════════════════════════════════════════════════════════════════
# SLIDE TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def get_slides(ctx: Context) -> str:
    """List all slides with their IDs, durations and clip counts."""
    project = get_session().project
    if not project.slides:
        return "No slides yet. Use add_slide to create one."
    return json.dumps(project.to_summary(), indent=2)


@mcp.tool()
def get_slide(ctx: Context, slide_id: str = "") -> str:
    """Get the full document of a slide (the active slide by default).

    Parameters:
    - slide_id: The ID of the slide to retrieve
    """
    session = get_session()
    slide = session.project.get(slide_id) if slide_id else session.slide
    if not slide:
        return f"Error: Slide '{slide_id}' not found."
    return json.dumps(slide.to_document(), indent=2)


@mcp.tool()
def add_slide(ctx: Context) -> str:
    """Append a new empty slide and make it active."""
    slide = get_session().add_slide()
    return json.dumps({"status": "added", "slide": slide.to_document()}, indent=2)


@mcp.tool()
def remove_slide(ctx: Context, slide_id: str) -> str:
    """Remove a slide from the project.

    Parameters:
    - slide_id: The ID of the slide to remove
    """
    session = get_session()
    if session.remove_slide(slide_id):
        return f"Slide '{slide_id}' removed. {len(session.project.slides)} slides remaining."
    return f"Error: Slide '{slide_id}' not found."


@mcp.tool()
def move_slide(ctx: Context, from_index: int, to_index: int) -> str:
    """Move a slide to a new position in the playback order.

    Parameters:
    - from_index: Current position of the slide
    - to_index: Target position
    """
    session = get_session()
    if not session.move_slide(from_index, to_index):
        return "Error: Indices are out of range or identical."
    return json.dumps({"status": "moved", "slides": session.project.to_summary()}, indent=2)


@mcp.tool()
def update_slide(ctx: Context, slide_id: str, name: str = None, duration: float = None,
                 enabled: bool = None, transition_in: str = None, transition_out: str = None,
                 bg_color: str = None, bg_image: str = None, bg_fit: str = None) -> str:
    """Edit slide settings. Only the given fields change.

    Parameters:
    - slide_id: The ID of the slide to edit
    - name: Display name
    - duration: Slide duration in seconds (minimum 1)
    - enabled: Whether cross-slide playback includes this slide
    - transition_in / transition_out: Slide transition names (fade, wipe, split, ...)
    - bg_color / bg_image / bg_fit: Background settings
    """
    patch: dict[str, Any] = {}
    for key, value in (("name", name), ("duration", duration), ("enabled", enabled),
                       ("bg_color", bg_color), ("bg_image", bg_image), ("bg_fit", bg_fit)):
        if value is not None:
            patch[key] = value
    transition = {k: v for k, v in (("in", transition_in), ("out", transition_out)) if v is not None}
    if transition:
        patch["transition"] = transition

    try:
        slide = get_session().update_slide(slide_id, patch)
    except ValueError as e:
        return f"Error: Invalid slide settings: {str(e)}"
    if not slide:
        return f"Error: Slide '{slide_id}' not found."
    return json.dumps({"status": "updated", "slide": slide.to_document()}, indent=2)


@mcp.tool()
def select_slide(ctx: Context, slide_id: str) -> str:
    """Make a slide active. Resets the clock to 0 and clears the selection.

    Parameters:
    - slide_id: The ID of the slide to activate
    """
    session = get_session()
    if not session.select_slide(slide_id):
        return f"Error: Slide '{slide_id}' not found."
    return json.dumps(_transport(session), indent=2)


# ═══════════════════════════════════════════════════════════════════════
# CLIP TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def add_clip(ctx: Context, clip_type: str) -> str:
    """Add a clip to the active slide at the current time and select it.

    Parameters:
    - clip_type: One of text, image, audio, shape
    """
    if clip_type not in CLIP_TYPES:
        return f"Error: Unknown clip type '{clip_type}'. Use one of: {', '.join(CLIP_TYPES)}"
    clip = get_session().add_clip(clip_type)
    if clip is None:
        return _no_slide()
    return json.dumps({"status": "added", "clip": clip.to_document()}, indent=2)


@mcp.tool()
def remove_clip(ctx: Context, clip_id: str) -> str:
    """Remove a clip from the active slide.

    Parameters:
    - clip_id: The ID of the clip to remove
    """
    if get_session().remove_clip(clip_id):
        return f"Clip '{clip_id}' removed."
    return f"Error: Clip '{clip_id}' not found on the active slide."


@mcp.tool()
def update_clip(ctx: Context, clip_id: str, properties: dict) -> str:
    """Merge properties into a clip (e.g. {"x": 20, "opacity": 0.5, "text": {...}}).

    Values are applied as given; keep x/y/w/h within 0-100 and opacity within 0-1.

    Parameters:
    - clip_id: The ID of the clip to edit
    - properties: Fields to merge, in document (camelCase) or snake_case spelling
    """
    try:
        clip = get_session().set_clip(clip_id, properties)
    except ValueError as e:
        return f"Error: Invalid clip properties: {str(e)}"
    if clip is None:
        return f"Error: Clip '{clip_id}' not found on the active slide."
    return json.dumps({"status": "updated", "clip": clip.to_document()}, indent=2)


@mcp.tool()
def move_clip(ctx: Context, clip_id: str, start: float) -> str:
    """Move a clip in time; its actions move with it. Start is clamped to the slide.

    Parameters:
    - clip_id: The ID of the clip
    - start: New start time in seconds
    """
    clip = get_session().move_clip(clip_id, start)
    if clip is None:
        return f"Error: Clip '{clip_id}' not found on the active slide."
    return json.dumps({"status": "moved", "clip": clip.to_document()}, indent=2)


@mcp.tool()
def resize_clip(ctx: Context, clip_id: str, edge: str, value: float) -> str:
    """Drag one edge of a clip.

    Parameters:
    - clip_id: The ID of the clip
    - edge: "left" (value is the new start; the right edge stays) or "right" (value is the new duration)
    - value: Seconds
    """
    session = get_session()
    if edge == "left":
        clip = session.resize_clip_left(clip_id, value)
    elif edge == "right":
        clip = session.resize_clip_right(clip_id, value)
    else:
        return "Error: edge must be 'left' or 'right'."
    if clip is None:
        return f"Error: Clip '{clip_id}' not found on the active slide."
    return json.dumps({"status": "resized", "clip": clip.to_document()}, indent=2)


@mcp.tool()
def reorder_clip(ctx: Context, from_index: int, to_index: int) -> str:
    """Move a clip row; layers are renumbered so the first row paints on top.

    Parameters:
    - from_index: Current row of the clip
    - to_index: Target row
    """
    session = get_session()
    if not session.reorder_clip(from_index, to_index):
        return "Error: Indices are out of range or identical."
    return json.dumps([{"id": c.id, "layer": c.layer} for c in session.slide.clips], indent=2)


@mcp.tool()
def select_clip(ctx: Context, clip_id: str = "") -> str:
    """Select a clip on the active slide (empty clip_id clears the selection).

    Parameters:
    - clip_id: The ID of the clip to select
    """
    if not get_session().select(clip_id or None):
        return f"Error: Clip '{clip_id}' not found on the active slide."
    return json.dumps({"selected": clip_id or None})


@mcp.tool()
def nudge_clip(ctx: Context, direction: str, coarse: bool = False) -> str:
    """Nudge the selected clip by 1 percentage point (5 when coarse).

    Parameters:
    - direction: left, right, up or down
    - coarse: Use the larger step
    """
    key = {"left": "ArrowLeft", "right": "ArrowRight", "up": "ArrowUp", "down": "ArrowDown"}.get(direction)
    if key is None:
        return "Error: direction must be left, right, up or down."
    clip = get_session().nudge(key, coarse)
    if clip is None:
        return "Error: No visual clip is selected."
    return json.dumps({"id": clip.id, "x": clip.x, "y": clip.y})


# ═══════════════════════════════════════════════════════════════════════
# ACTION TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def add_action(ctx: Context, clip_id: str, action_type: str) -> str:
    """Add a timeline action to a clip, starting at the current time.

    Parameters:
    - clip_id: The ID of the clip
    - action_type: One of appear, move, highlight
    """
    if action_type not in ACTION_TYPES:
        return f"Error: Unknown action type '{action_type}'. Use one of: {', '.join(ACTION_TYPES)}"
    action = get_session().add_action(clip_id, action_type)
    if action is None:
        return f"Error: Clip '{clip_id}' not found on the active slide."
    return json.dumps({"status": "added", "action": action.to_document()}, indent=2)


@mcp.tool()
def update_action(ctx: Context, clip_id: str, action_id: str, start: float = None,
                  end: float = None, properties: dict = None) -> str:
    """Edit an action's window and/or properties.

    Parameters:
    - clip_id: The ID of the owning clip
    - action_id: The ID of the action
    - start / end: New window bounds in slide seconds
    - properties: Other fields to merge (type, fromX, toX, intensity, ...)
    """
    session = get_session()
    action = None
    try:
        if properties:
            action = session.set_action(clip_id, action_id, properties)
            if action is None:
                return f"Error: Action '{action_id}' not found on clip '{clip_id}'."
        if start is not None or end is not None:
            action = session.set_action_window(clip_id, action_id, start, end)
    except ValueError as e:
        return f"Error: Invalid action properties: {str(e)}"
    if action is None:
        return f"Error: Action '{action_id}' not found on clip '{clip_id}'."
    return json.dumps({"status": "updated", "action": action.to_document()}, indent=2)


@mcp.tool()
def remove_action(ctx: Context, clip_id: str, action_id: str) -> str:
    """Remove an action from a clip.

    Parameters:
    - clip_id: The ID of the owning clip
    - action_id: The ID of the action
    """
    if get_session().remove_action(clip_id, action_id):
        return f"Action '{action_id}' removed."
    return f"Error: Action '{action_id}' not found on clip '{clip_id}'."


# ═══════════════════════════════════════════════════════════════════════
# TRANSPORT TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def play(ctx: Context) -> str:
    """Start playback from the current time."""
    session = get_session()
    try:
        session.play()
    except RuntimeError as e:
        return f"Error starting playback: {str(e)}"
    return json.dumps(_transport(session), indent=2)


@mcp.tool()
def pause(ctx: Context) -> str:
    """Pause playback, keeping the current time."""
    session = get_session()
    session.pause()
    return json.dumps(_transport(session), indent=2)


@mcp.tool()
def stop(ctx: Context) -> str:
    """Stop playback and rewind the active slide to 0."""
    session = get_session()
    session.stop()
    return json.dumps(_transport(session), indent=2)


@mcp.tool()
def seek(ctx: Context, time: float) -> str:
    """Scrub to a time on the active slide (clamped to the slide).

    Parameters:
    - time: Slide time in seconds
    """
    session = get_session()
    session.seek(time)
    return json.dumps(_transport(session), indent=2)


@mcp.tool()
def set_playback(ctx: Context, speed: float = None, continuation: bool = None) -> str:
    """Set playback speed (0.25x-3x) and/or whether playback continues across slides.

    Parameters:
    - speed: Speed factor
    - continuation: Continue into the next enabled slide at the end of a slide
    """
    session = get_session()
    if speed is not None:
        session.set_speed(speed)
    if continuation is not None:
        session.set_continuation(continuation)
    return json.dumps(_transport(session), indent=2)


@mcp.tool()
def get_frame(ctx: Context, time: float = None) -> str:
    """Evaluate the active slide: visible clips in paint order with their render state.

    Parameters:
    - time: Slide time in seconds (defaults to the current time)
    """
    session = get_session()
    if session.slide is None:
        return _no_slide()
    t = session.time if time is None else time
    return json.dumps({
        "slide_id": session.slide.id,
        "time": t,
        "clips": [_frame_item(item, t) for item in session.frame(t)],
    }, indent=2)


# ═══════════════════════════════════════════════════════════════════════
# MCP PROMPT
# ═══════════════════════════════════════════════════════════════════════

@mcp.prompt()
def timeline_workflow() -> str:
    """Recommended workflow for building a slide timeline"""
    return """You are helping the user build a timed slide presentation. Follow this workflow:

1. **Start**: Use get_project_status() to see what is loaded. Use new_project(),
   import_project() or import_lesson() to start from a template, a saved
   document or a lesson file.

2. **Slides**: Use get_slides() and select_slide() to navigate. Use add_slide(),
   update_slide() (duration, transitions, background) and move_slide() to
   shape the deck. Disabled slides are skipped during continuous playback.

3. **Clips**: Use add_clip() with text, image, audio or shape. Adjust with
   update_clip(), move_clip() and resize_clip(). Use reorder_clip() to change
   which clip paints on top.

4. **Actions**: Use add_action() for appear, move or highlight effects, then
   update_action() to fine-tune their windows.

5. **Preview**: Use seek() and get_frame() to check any instant. Use play(),
   pause(), stop() and set_playback() for live playback.

6. **Save**: Every change is autosaved. Use export_project() to write a
   shareable document.
"""


# ── Main ────────────────────────────────────────────────────────────────

def main():
    """Run the MCP server"""
    mcp.run()


if __name__ == "__main__":
    main()
