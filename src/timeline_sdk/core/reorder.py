"""Row reordering and deterministic layer assignment.

The clip row list is the only sanctioned way to change paint order: after a
reorder every clip's layer is renumbered from its row position, first row on
top. Slides reorder the same way one level up, without any layer numbering.
"""

import math
from typing import Sequence

from .slides import Project, Slide
from .timeutil import clamp

LAYER_BASE = 1000


def splice_move(items: Sequence, from_index: int, to_index: int) -> list:
    """Remove the element at ``from_index`` and reinsert it at ``to_index``."""
    arr = list(items)
    moved = arr.pop(from_index)
    arr.insert(to_index, moved)
    return arr


def assign_layers(slide: Slide, base: int = LAYER_BASE) -> None:
    for i, clip in enumerate(slide.clips):
        clip.layer = base - i


def _valid(index: int, count: int) -> bool:
    return 0 <= index < count


def reorder_clips(slide: Slide, from_index: int, to_index: int) -> bool:
    count = len(slide.clips)
    if not (_valid(from_index, count) and _valid(to_index, count)):
        return False
    if from_index == to_index:
        return False
    slide.clips = splice_move(slide.clips, from_index, to_index)
    assign_layers(slide)
    return True


def move_slide(project: Project, from_index: int, to_index: int) -> bool:
    count = len(project.slides)
    if not (_valid(from_index, count) and _valid(to_index, count)):
        return False
    if from_index == to_index:
        return False
    project.slides = splice_move(project.slides, from_index, to_index)
    return True


def drag_target_index(init_index: int, dy: float, row_height: float, count: int) -> int:
    """Row index a vertical drag of ``dy`` pixels lands on (half-row rounds away)."""
    if count <= 0:
        return 0
    steps = math.floor(dy / row_height + 0.5)
    return int(clamp(init_index + steps, 0, count - 1))
