"""Tests for timeline_sdk.core.evaluator — action folding and paint order."""

import pytest

from timeline_sdk.core.evaluator import (
    RenderState,
    ease,
    entrance_progress,
    evaluate,
    is_active,
    is_highlighted,
    progress,
    render_frame,
    visible_clips,
)
from timeline_sdk.core.slides import (
    AppearAction,
    HighlightAction,
    MoveAction,
    ShapeClip,
    Slide,
    TextClip,
    default_project,
)


# ── progress ────────────────────────────────────────────────────────────

class TestProgress:
    def test_midpoint(self):
        assert progress(AppearAction(start=1, end=3), 2) == pytest.approx(0.5)

    def test_clamped(self):
        a = AppearAction(start=1, end=3)
        assert progress(a, 0) == 0.0
        assert progress(a, 5) == 1.0

    def test_zero_length_window(self):
        a = AppearAction(start=2, end=2)
        assert progress(a, 2) == 0.0


# ── evaluate ────────────────────────────────────────────────────────────

class TestEvaluate:
    def test_defaults_without_actions(self):
        assert evaluate(TextClip(), 1.0) == RenderState(x=50, y=50, opacity=1, scale=1)

    def test_base_transform(self):
        state = evaluate(TextClip(x=10, y=20, opacity=0.5), 0)
        assert (state.x, state.y, state.opacity) == (10, 20, 0.5)

    def test_appear_ramp(self):
        clip = TextClip(x=50, y=50, opacity=1, actions=[AppearAction(start=0, end=1)])
        assert evaluate(clip, 0).opacity == pytest.approx(0.0)
        assert evaluate(clip, 0.5).opacity == pytest.approx(0.5)
        assert evaluate(clip, 1.0).opacity == pytest.approx(1.0)

    def test_appear_monotonic(self):
        clip = TextClip(opacity=1, actions=[AppearAction(start=1, end=3)])
        values = [evaluate(clip, 1 + i * 0.1).opacity for i in range(21)]
        assert all(a <= b for a, b in zip(values, values[1:]))

    def test_appear_inactive_after_window(self):
        clip = TextClip(opacity=1, actions=[AppearAction(start=0, end=1)])
        assert evaluate(clip, 1.5).opacity == 1.0

    def test_appear_multiplies_base_opacity(self):
        clip = TextClip(opacity=0.5, actions=[AppearAction(start=0, end=2)])
        assert evaluate(clip, 1).opacity == pytest.approx(0.25)

    def test_move_interpolates(self):
        clip = ShapeClip(x=50, y=60, actions=[
            MoveAction(start=5, end=7, from_x=50, from_y=60, to_x=80, to_y=60),
        ])
        state = evaluate(clip, 6)
        assert state.x == pytest.approx(65)
        assert state.y == pytest.approx(60)

    def test_move_missing_endpoints_use_current(self):
        clip = ShapeClip(x=30, y=40, actions=[MoveAction(start=0, end=2, to_x=70)])
        state = evaluate(clip, 1)
        assert state.x == pytest.approx(50)
        assert state.y == pytest.approx(40)

    def test_move_outside_window_keeps_base(self):
        clip = ShapeClip(x=30, actions=[MoveAction(start=0, end=2, from_x=0, to_x=70)])
        assert evaluate(clip, 3).x == 30

    def test_highlight_peaks_at_middle(self):
        clip = TextClip(actions=[HighlightAction(start=1, end=3, intensity=0.2)])
        assert evaluate(clip, 2).scale == pytest.approx(1.2)
        assert evaluate(clip, 1).scale == pytest.approx(1.0)
        assert evaluate(clip, 3).scale == pytest.approx(1.0, abs=1e-9)

    def test_highlight_symmetric(self):
        clip = TextClip(actions=[HighlightAction(start=1.5, end=3.0, intensity=0.15)])
        assert evaluate(clip, 1.8).scale == pytest.approx(evaluate(clip, 2.7).scale)

    def test_highlight_default_intensity(self):
        clip = TextClip(actions=[HighlightAction(start=0, end=2)])
        assert evaluate(clip, 1).scale == pytest.approx(1.15)

    def test_actions_fold_in_order(self):
        clip = TextClip(x=0, opacity=1, actions=[
            MoveAction(start=0, end=2, from_x=0, to_x=100),
            MoveAction(start=0, end=2, to_x=0),
        ])
        # second move starts from the first move's result
        assert evaluate(clip, 1).x == pytest.approx(25)

    def test_deterministic(self):
        clip = default_project().slides[0].get("t1")
        assert evaluate(clip, 2.2) == evaluate(clip, 2.2)

    def test_scrub_backwards_matches_fresh(self):
        clip = default_project().slides[0].get("img1")
        forward = [evaluate(clip, t) for t in (4.0, 5.5, 6.5)]
        assert evaluate(clip, 5.5) == forward[1]

    def test_action_outside_clip_span_is_inert(self):
        clip = TextClip(start=0, duration=1, opacity=1, actions=[AppearAction(start=5, end=6)])
        assert evaluate(clip, 0.5).opacity == 1.0


# ── Easing ──────────────────────────────────────────────────────────────

class TestEasing:
    def test_linear(self):
        assert ease("linear", 0.3) == pytest.approx(0.3)

    def test_unknown_is_linear(self):
        assert ease(None, 0.3) == pytest.approx(0.3)
        assert ease("wobble", 0.3) == pytest.approx(0.3)

    def test_endpoints(self):
        for name in ("easeIn", "easeOut", "easeInOut", "circIn", "circOut", "circInOut"):
            assert ease(name, 0) == 0
            assert ease(name, 1) == 1
            assert ease(name, -2) == 0
            assert ease(name, 5) == 1

    def test_curve_shapes(self):
        assert ease("easeOut", 0.5) > 0.5
        assert ease("easeIn", 0.5) < 0.5
        assert ease("circInOut", 0.5) == pytest.approx(0.5, abs=1e-4)

    def test_monotonic(self):
        for name in ("easeIn", "easeOut", "circInOut"):
            values = [ease(name, i / 50) for i in range(51)]
            assert all(a <= b + 1e-9 for a, b in zip(values, values[1:]))

    def test_entrance_progress(self):
        clip = TextClip(start=1, in_dur=0.5, easing="linear")
        assert entrance_progress(clip, 0.5) == 0
        assert entrance_progress(clip, 1.25) == pytest.approx(0.5)
        assert entrance_progress(clip, 3) == 1

    def test_entrance_defaults(self):
        clip = TextClip(start=0)
        assert entrance_progress(clip, 0.3) == 1
        assert 0.5 < entrance_progress(clip, 0.15) < 1


# ── Visibility ──────────────────────────────────────────────────────────

class TestVisibility:
    def test_is_active_inclusive(self):
        clip = TextClip(start=1, duration=2)
        assert is_active(clip, 1)
        assert is_active(clip, 3)
        assert not is_active(clip, 3.1)

    def test_is_highlighted(self):
        clip = TextClip(actions=[HighlightAction(start=1, end=2)])
        assert is_highlighted(clip, 1.5)
        assert not is_highlighted(clip, 2.5)

    def test_paint_order_by_layer(self):
        slide = Slide(clips=[
            TextClip(id="top", layer=10),
            TextClip(id="bottom", layer=1),
            TextClip(id="mid", layer=5),
        ])
        assert [c.id for c in visible_clips(slide, 0)] == ["bottom", "mid", "top"]

    def test_ties_keep_row_order(self):
        slide = Slide(clips=[TextClip(id="a", layer=2), TextClip(id="b", layer=2)])
        assert [c.id for c in visible_clips(slide, 0)] == ["a", "b"]

    def test_inactive_clips_hidden(self):
        slide = Slide(clips=[TextClip(id="early", start=0, duration=1),
                             TextClip(id="late", start=5, duration=1)])
        assert [c.id for c in visible_clips(slide, 5.5)] == ["late"]

    def test_no_slide(self):
        assert visible_clips(None, 0) == []
        assert render_frame(None, 0) == []

    def test_render_frame(self):
        slide = default_project().slides[0]
        frame = render_frame(slide, 0.5)
        by_id = {item.clip.id: item.state for item in frame}
        assert by_id["t1"].opacity == pytest.approx(0.5)
        assert [item.clip.id for item in frame][0] == "bgm1"
