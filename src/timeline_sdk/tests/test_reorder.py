"""Tests for timeline_sdk.core.reorder — row moves and layer renumbering."""

from timeline_sdk.core.reorder import (
    LAYER_BASE,
    assign_layers,
    drag_target_index,
    move_slide,
    reorder_clips,
    splice_move,
)
from timeline_sdk.core.slides import Project, Slide, TextClip


def _slide(n=3):
    return Slide(clips=[TextClip(id=f"c{i}", layer=i) for i in range(n)])


class TestSpliceMove:
    def test_forward(self):
        assert splice_move(["a", "b", "c", "d"], 0, 2) == ["b", "c", "a", "d"]

    def test_backward(self):
        assert splice_move(["a", "b", "c", "d"], 3, 1) == ["a", "d", "b", "c"]

    def test_input_untouched(self):
        items = ["a", "b"]
        splice_move(items, 0, 1)
        assert items == ["a", "b"]


class TestReorderClips:
    def test_moves_row(self):
        slide = _slide()
        assert reorder_clips(slide, 0, 2) is True
        assert [c.id for c in slide.clips] == ["c1", "c2", "c0"]

    def test_layers_follow_rows(self):
        slide = _slide(4)
        reorder_clips(slide, 3, 0)
        layers = [c.layer for c in slide.clips]
        assert layers == [LAYER_BASE, LAYER_BASE - 1, LAYER_BASE - 2, LAYER_BASE - 3]
        assert all(a > b for a, b in zip(layers, layers[1:]))

    def test_first_row_paints_last(self):
        from timeline_sdk.core.evaluator import visible_clips
        slide = _slide()
        reorder_clips(slide, 2, 0)
        assert visible_clips(slide, 0)[-1].id == "c2"

    def test_same_index_is_noop(self):
        slide = _slide()
        assert reorder_clips(slide, 1, 1) is False
        assert [c.layer for c in slide.clips] == [0, 1, 2]

    def test_out_of_range(self):
        slide = _slide()
        assert reorder_clips(slide, 0, 3) is False
        assert reorder_clips(slide, -1, 0) is False
        assert [c.id for c in slide.clips] == ["c0", "c1", "c2"]

    def test_assign_layers_custom_base(self):
        slide = _slide()
        assign_layers(slide, base=10)
        assert [c.layer for c in slide.clips] == [10, 9, 8]


class TestMoveSlide:
    def test_moves(self):
        p = Project(slides=[Slide(id="a"), Slide(id="b"), Slide(id="c")])
        assert move_slide(p, 2, 0) is True
        assert [s.id for s in p.slides] == ["c", "a", "b"]

    def test_invalid(self):
        p = Project(slides=[Slide(id="a"), Slide(id="b")])
        assert move_slide(p, 0, 0) is False
        assert move_slide(p, 0, 5) is False
        assert [s.id for s in p.slides] == ["a", "b"]


class TestDragTargetIndex:
    def test_rounds_half_row(self):
        assert drag_target_index(0, 19, 40, 5) == 0
        assert drag_target_index(0, 20, 40, 5) == 1
        assert drag_target_index(0, 85, 40, 5) == 2

    def test_upwards(self):
        assert drag_target_index(3, -40, 40, 5) == 2
        assert drag_target_index(3, -20, 40, 5) == 3
        assert drag_target_index(3, -21, 40, 5) == 2

    def test_clamped(self):
        assert drag_target_index(1, 1000, 40, 3) == 2
        assert drag_target_index(1, -1000, 40, 3) == 0

    def test_empty(self):
        assert drag_target_index(0, 100, 40, 0) == 0
