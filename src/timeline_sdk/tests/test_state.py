"""Tests for timeline_sdk.core.state — EditorSession wiring, selection, import/export, autosave."""

import json
import pytest
from pydantic import ValidationError

from timeline_sdk.core.persistence import MemoryPersistence
from timeline_sdk.core.playback import PLAYING, STOPPED
from timeline_sdk.core.slides import Project, Slide, TextClip, default_project
from timeline_sdk.core.state import EXPORT_FILENAME, EditorSession


class FailingPersistence:
    def load(self):
        return None

    def save(self, project):
        raise OSError("disk full")


class FakeElement:
    def __init__(self):
        self.current_time = 0.0
        self.playback_rate = 1.0
        self.volume = 1.0
        self.paused = True

    def play(self):
        self.paused = False

    def pause(self):
        self.paused = True


@pytest.fixture
def messages():
    return []


@pytest.fixture
def session(messages):
    return EditorSession(persistence=MemoryPersistence(), notify=messages.append)


# ── Startup ─────────────────────────────────────────────────────────────

class TestStartup:
    def test_default_project(self):
        s = EditorSession()
        assert s.slide.id == "s1"
        assert s.time == 0
        assert s.selected_clip is None

    def test_restores_autosave(self):
        store = MemoryPersistence()
        project = Project(slides=[Slide(id="restored")])
        store.save(project)
        s = EditorSession(persistence=store)
        assert s.slide.id == "restored"

    def test_explicit_project_wins(self):
        store = MemoryPersistence()
        store.save(Project(slides=[Slide(id="stored")]))
        s = EditorSession(project=Project(slides=[Slide(id="given")]), persistence=store)
        assert s.slide.id == "given"


# ── Selection ───────────────────────────────────────────────────────────

class TestSelection:
    def test_select(self, session):
        assert session.select("t1") is True
        assert session.selected_clip.id == "t1"

    def test_select_unknown(self, session):
        assert session.select("zzz") is False
        assert session.selected_id is None

    def test_clear(self, session):
        session.select("t1")
        session.select(None)
        assert session.selected_id is None

    def test_removed_clip_clears_selection(self, session):
        session.select("t1")
        assert session.remove_clip("t1") is True
        assert session.selected_clip is None

    def test_selection_never_dangles(self, session):
        session.select("t1")
        session.slide.remove("t1")
        assert session.selected_id is None

    def test_slide_switch_clears_selection(self, session):
        session.select("t1")
        session.select_slide("s2")
        assert session.selected_id is None
        assert session.time == 0

    def test_slide_switch_ends_drag(self, session):
        session.begin_drag("t1", "move", 0, 0)
        session.select_slide("s2")
        assert session.drag.active is False


# ── Import / export ─────────────────────────────────────────────────────

class TestDocument:
    def test_import_rejects_missing_slides(self, session, messages):
        before = session.project
        assert session.import_json("{}") is False
        assert session.project is before
        assert messages == ["Import failed: Invalid file: missing 'slides' array"]

    def test_import_rejects_bad_json(self, session, messages):
        assert session.import_json("not json") is False
        assert messages[0].startswith("Import failed:")
        assert session.slide.id == "s1"

    def test_import_replaces_project(self, session):
        session.seek(4)
        raw = Project(slides=[Slide(id="x", duration=3)]).to_json()
        assert session.import_json(raw) is True
        assert session.slide.id == "x"
        assert session.time == 0
        assert session.clock.state == STOPPED

    def test_import_stops_playback(self, session):
        session.clock.play(now=0)
        session.import_json(default_project().to_json())
        assert session.clock.state == STOPPED

    def test_import_file(self, session, tmp_path):
        path = tmp_path / "p.json"
        Project(slides=[Slide(id="from_file")]).save(path)
        assert session.import_file(path) is True
        assert session.slide.id == "from_file"

    def test_import_missing_file(self, session, messages, tmp_path):
        assert session.import_file(tmp_path / "nope.json") is False
        assert len(messages) == 1

    def test_export_json(self, session):
        doc = json.loads(session.export_json())
        assert [s["id"] for s in doc["slides"]] == ["s1", "s2"]

    def test_export_to(self, session, tmp_path):
        path = session.export_to(tmp_path / "out")
        assert path.name == EXPORT_FILENAME
        assert Project.load(path) == session.project

    def test_roundtrip_through_session(self, session):
        raw = session.export_json()
        other = EditorSession()
        other.import_json(raw)
        assert other.project == session.project


# ── Autosave ────────────────────────────────────────────────────────────

class TestAutosave:
    def test_edit_saves(self, session):
        clip = session.add_clip("text")
        restored = session.persistence.load()
        assert restored.get("s1").get(clip.id) is not None

    def test_new_session_restores_edits(self, session):
        session.update_slide("s1", {"name": "Renamed"})
        again = EditorSession(persistence=session.persistence)
        assert again.project.get("s1").name == "Renamed"

    def test_save_failure_tolerated(self):
        s = EditorSession(persistence=FailingPersistence())
        assert s.add_slide() is not None


# ── Slides ──────────────────────────────────────────────────────────────

class TestSlides:
    def test_add_selects(self, session):
        slide = session.add_slide()
        assert session.slide is slide
        assert slide.name == "Slide 3"

    def test_remove_active_selects_previous(self, session):
        session.select_slide("s2")
        assert session.remove_slide("s2") is True
        assert session.slide.id == "s1"

    def test_remove_first_selects_next(self, session):
        session.remove_slide("s1")
        assert session.slide.id == "s2"

    def test_remove_inactive_keeps_active(self, session):
        session.seek(3)
        session.remove_slide("s2")
        assert session.slide.id == "s1"
        assert session.time == 3

    def test_remove_last(self, session):
        session.remove_slide("s1")
        session.remove_slide("s2")
        assert session.slide is None
        assert session.frame() == []
        assert session.add_clip("text") is None

    def test_remove_unknown(self, session):
        assert session.remove_slide("zzz") is False

    def test_move(self, session):
        assert session.move_slide(1, 0) is True
        assert [s.id for s in session.project.slides] == ["s2", "s1"]

    def test_shrink_clamps_time(self, session):
        session.seek(9)
        session.update_slide("s1", {"duration": 5})
        assert session.time < 5

    def test_slide_drag(self, session):
        assert session.begin_slide_drag("s1", 0) is True
        assert session.slide_pointer_move(36) is True
        session.end_slide_drag()
        assert [s.id for s in session.project.slides] == ["s2", "s1"]

    def test_invalid_settings_rejected(self, session):
        session.update_slide("s1", {"name": "Renamed"})
        before = session.export_json()
        with pytest.raises(ValidationError):
            session.update_slide("s1", {"name": "Changed", "transition": {"in": "bogus"}})
        with pytest.raises(ValidationError):
            session.update_slide("s1", {"bgFit": "stretch"})
        assert session.slide.name == "Renamed"
        assert session.export_json() == before
        assert Project.from_json(before).get("s1").transition.enter == "fade"
        reloaded = EditorSession(persistence=session.persistence)
        assert reloaded.project.get("s1").name == "Renamed"
        assert reloaded.project.get("s1").bg_fit is None


# ── Clips & actions ─────────────────────────────────────────────────────

class TestClips:
    def test_add_at_current_time(self, session):
        session.seek(2)
        clip = session.add_clip("shape")
        assert clip.start == 2
        assert session.selected_id == clip.id

    def test_move_clamped(self, session):
        clip = session.move_clip("t1", 100)
        assert clip.start == 6
        assert clip.get_action("a1").start == 6

    def test_resize(self, session):
        clip = session.resize_clip_right("t1", 2)
        assert clip.duration == 2
        clip = session.resize_clip_left("t1", 1)
        assert (clip.start, clip.duration) == (1, 1)

    def test_set_clip(self, session):
        clip = session.set_clip("t1", {"opacity": 0.5})
        assert clip.opacity == 0.5
        assert session.slide.get("t1").opacity == 0.5

    def test_nudge_selected(self, session):
        session.select("t1")
        clip = session.nudge("ArrowDown", coarse=True)
        assert clip.y == 30

    def test_nudge_without_selection(self, session):
        assert session.nudge("ArrowLeft") is None

    def test_reorder(self, session):
        assert session.reorder_clip(3, 0) is True
        assert session.slide.clips[0].id == "bgm1"
        assert session.slide.clips[0].layer > session.slide.clips[1].layer

    def test_drag(self, session):
        assert session.begin_drag("t1", "move", 0, 0) is True
        assert session.selected_id == "t1"
        assert session.pointer_move(40, 0) is True
        session.end_drag()
        assert session.slide.get("t1").start == pytest.approx(1)

    def test_canvas_drag(self, session):
        assert session.begin_canvas_drag("t1", "move", 0, 0) is True
        assert session.selected_id == "t1"
        clip = session.canvas_pointer_move(96, 54)
        session.end_canvas_drag()
        assert clip.x == pytest.approx(60)
        assert clip.y == pytest.approx(35)
        assert session.persistence.load().get("s1").get("t1").x == pytest.approx(60)
        assert session.canvas_pointer_move(0, 0) is None

    def test_canvas_drag_rejects_audio(self, session):
        assert session.begin_canvas_drag("bgm1", "move", 0, 0) is False
        assert session.canvas_drag is None

    def test_slide_switch_ends_canvas_drag(self, session):
        assert session.begin_canvas_drag("t1", "resize", 0, 0, corner="se") is True
        session.select_slide("s2")
        assert session.canvas_drag is None

    def test_remove_unbinds_audio(self, session):
        session.audio.bind("bgm1", FakeElement())
        session.remove_clip("bgm1")
        assert session.audio.bound_ids == []

    def test_actions(self, session):
        session.seek(1)
        action = session.add_action("t1", "move")
        assert action.start == 1
        assert session.set_action_window("t1", action.id, end=2.5).end == 2.5
        assert session.set_action("t1", action.id, {"toX": 10}).to_x == 10
        assert session.remove_action("t1", action.id) is True
        assert session.remove_action("t1", action.id) is False


# ── Playback integration ────────────────────────────────────────────────

class TestPlayback:
    def test_continuation(self, session):
        session.seek(9.9)
        session.clock.play(now=0)
        session.clock.tick(0.5)
        assert session.slide.id == "s2"
        assert session.clock.state == PLAYING

    def test_audio_synced_on_seek(self, session):
        el = FakeElement()
        session.audio.bind("bgm1", el)
        session.seek(3)
        assert el.current_time == pytest.approx(3)
        assert el.volume == 0.7
        assert el.paused is True

    def test_audio_follows_playback(self, session):
        el = FakeElement()
        session.audio.bind("bgm1", el)
        session.clock.play(now=0)
        session.clock.tick(1.0)
        assert el.paused is False

    def test_speed(self, session):
        assert session.set_speed(8) == 3.0

    def test_continuation_toggle(self, session):
        session.set_continuation(False)
        session.seek(9.9)
        session.clock.play(now=0)
        session.clock.tick(0.5)
        assert session.slide.id == "s1"
