# tests/test_coordinate_resolver.py
"""Tests for docview.processors.coordinate_resolver"""

import pytest

from docview.models.types import CoordinateMode, PageMeta, RawElement
from docview.processors.coordinate_resolver import resolve_scale


def _element(index=0, **fields):
    return RawElement.from_dict(index, fields)


@pytest.mark.unit
class TestResolveScale:
    """Tests for resolve_scale"""

    def test_no_alternate_elements_is_points(self, a4_page):
        elements = [_element(prov=[{"page_no": 1, "bbox": {"l": 0, "t": 0, "r": 900, "b": 900}}])]
        scale = resolve_scale(a4_page, elements)
        assert scale.mode == CoordinateMode.POINTS
        assert (scale.sx, scale.sy) == (1.0, 1.0)

    def test_normalized(self):
        page = PageMeta(1, 600, 800, 0)
        scale = resolve_scale(page, [_element(x=0.1, y=0.1, width=0.5, height=0.2)])
        assert scale.mode == CoordinateMode.NORMALIZED
        assert (scale.sx, scale.sy) == (600, 800)

    def test_normalized_allows_small_overshoot(self, a4_page):
        scale = resolve_scale(a4_page, [_element(x=-0.05, y=0.0, width=1.5, height=1.2)])
        assert scale.mode == CoordinateMode.NORMALIZED

    def test_negative_origin_is_not_normalized(self, a4_page):
        scale = resolve_scale(a4_page, [_element(x=-0.5, y=0.0, width=1.0, height=1.0)])
        assert scale.mode == CoordinateMode.PIXELS

    def test_points(self, a4_page):
        scale = resolve_scale(a4_page, [
            _element(0, x=50, y=50, width=400, height=600),
            _element(1, x=60, y=700, width=100, height=20),
        ])
        assert scale.mode == CoordinateMode.POINTS

    def test_pixels_fit_extent_to_page(self, a4_page):
        scale = resolve_scale(a4_page, [_element(x=0, y=0, width=1190, height=1682)])
        assert scale.mode == CoordinateMode.PIXELS
        assert scale.sx == pytest.approx(0.5)
        assert scale.sy == pytest.approx(0.5)

    def test_small_extent_outside_points_range_is_pixels(self, a4_page):
        scale = resolve_scale(a4_page, [_element(x=0, y=0, width=100, height=100)])
        assert scale.mode == CoordinateMode.PIXELS
        assert scale.sx == pytest.approx(5.95)
        assert scale.sy == pytest.approx(8.41)

    def test_non_finite_elements_are_ignored(self, a4_page):
        elements = [
            _element(0, x=float("nan"), y=0, width=1, height=1),
            _element(1, x=0.1, y=0.1, width=0.2, height=0.2),
        ]
        assert resolve_scale(a4_page, elements).mode == CoordinateMode.NORMALIZED
