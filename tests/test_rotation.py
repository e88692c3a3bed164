# tests/test_rotation.py
"""Tests for docview.processors.rotation"""

import pytest

from docview.models.types import PageMeta, Rect
from docview.processors.rotation import (
    infer_rotation,
    out_of_bounds_score,
    rotate_rect,
    rotated_page_size,
)


@pytest.mark.unit
class TestRotatedPageSize:
    """Tests for rotated_page_size"""

    @pytest.mark.parametrize("rotation,expected", [
        (0, (595, 841)), (90, (841, 595)), (180, (595, 841)), (270, (841, 595)),
    ])
    def test_swaps_for_quarter_turns(self, rotation, expected):
        assert rotated_page_size(595, 841, rotation) == expected


@pytest.mark.unit
class TestRotateRect:
    """Tests for rotate_rect (page 100 x 200)"""

    RECT = Rect(10, 20, 30, 40)

    def test_zero_is_identity(self):
        assert rotate_rect(self.RECT, 100, 200, 0) == self.RECT

    def test_90(self):
        assert rotate_rect(self.RECT, 100, 200, 90) == Rect(140, 10, 40, 30)

    def test_180(self):
        assert rotate_rect(self.RECT, 100, 200, 180) == Rect(60, 140, 30, 40)

    def test_270(self):
        assert rotate_rect(self.RECT, 100, 200, 270) == Rect(20, 60, 40, 30)

    def test_two_quarter_turns_make_a_half_turn(self):
        once = rotate_rect(self.RECT, 100, 200, 90)
        w, h = rotated_page_size(100, 200, 90)
        assert rotate_rect(once, w, h, 90) == rotate_rect(self.RECT, 100, 200, 180)

    def test_full_turn_is_identity(self):
        rect = self.RECT
        w, h = 100, 200
        for _ in range(4):
            rect = rotate_rect(rect, w, h, 90)
            w, h = h, w
        assert rect == self.RECT

    def test_page_maps_onto_rotated_page(self):
        assert rotate_rect(Rect(0, 0, 100, 200), 100, 200, 270) == Rect(0, 0, 200, 100)


@pytest.mark.unit
class TestOutOfBoundsScore:
    """Tests for out_of_bounds_score"""

    def test_inside_is_zero(self):
        assert out_of_bounds_score(Rect(0, 0, 100, 100), 100, 100) == 0

    def test_left_overflow(self):
        # edge 10, area 10 * height 10 -> 100 + 5 * 10
        assert out_of_bounds_score(Rect(-10, 0, 20, 10), 100, 100) == pytest.approx(150)

    def test_bottom_overflow(self):
        # edge 5, area 5 * width 20 -> 100 + 5 * 5
        assert out_of_bounds_score(Rect(0, 95, 20, 10), 100, 100) == pytest.approx(125)


@pytest.mark.unit
class TestInferRotation:
    """Tests for infer_rotation"""

    def test_no_samples_keeps_declared(self):
        assert infer_rotation(PageMeta(1, 595, 841, 180), []) == 180

    def test_inside_page_keeps_declared(self):
        sample = [Rect(50, 50, 100, 20), Rect(50, 700, 400, 30)]
        assert infer_rotation(PageMeta(1, 595, 841, 0), sample) == 0
        assert infer_rotation(PageMeta(1, 595, 841, 90), sample) == 90

    def test_deterministic(self):
        page = PageMeta(1, 595, 841, 270)
        sample = [Rect(-20, 10, 700, 20), Rect(500, 800, 200, 100), Rect(10, 10, 5, 5)]
        first = infer_rotation(page, sample)
        assert all(infer_rotation(page, sample) == first for _ in range(5))
        assert infer_rotation(page, list(sample)) == first

    def test_result_is_a_valid_rotation(self):
        sample = [Rect(600, -30, 300, 40)]
        assert infer_rotation(PageMeta(1, 595, 841, 0), sample) in (0, 90, 180, 270)
