# tests/test_viewport.py
"""Tests for docview.ui.viewport"""

import pytest

from docview.config.settings import ViewerSettings
from docview.models.types import FitMode, PageMeta
from docview.ui.viewport import PageNumbering, ViewportController


def _pages(*numbers, width=595.0, height=841.0):
    return [PageMeta(n, width, height, 0) for n in numbers]


@pytest.mark.unit
class TestPageNumbering:
    """Tests for PageNumbering.detect"""

    def test_one_based(self):
        assert PageNumbering.detect({1, 2, 3}) == PageNumbering(1, 3, False)

    def test_zero_based(self):
        assert PageNumbering.detect({0, 2, 3}).zero_based
        assert PageNumbering.detect({0}).zero_based

    def test_zero_and_one_present(self):
        assert not PageNumbering.detect({0, 1, 2}).zero_based

    def test_empty(self):
        assert PageNumbering.detect(set()) == PageNumbering(1, 1, False)


@pytest.mark.unit
class TestPageMapping:
    """Tests for external/internal page mapping"""

    def test_one_based_round_trip(self):
        controller = ViewportController(_pages(1, 2, 3, 4))
        for page in range(1, 5):
            assert controller.internal_to_external(controller.external_to_internal(page)) == page

    def test_zero_based_round_trip(self):
        controller = ViewportController(_pages(0))
        assert controller.external_to_internal(1) == 0
        assert controller.internal_to_external(0) == 1

    def test_zero_based_offset_is_bijective(self):
        controller = ViewportController(_pages(0, 2, 3))
        for internal in (0, 2, 3):
            assert controller.external_to_internal(controller.internal_to_external(internal)) == internal

    def test_zero_based_never_takes_unshifted_match(self):
        controller = ViewportController(_pages(0, 2, 3))
        # External 2 is internal 1, which is missing: nearest is 0 or 2, lowest wins
        assert controller.external_to_internal(2) == 0
        assert controller.external_to_internal(3) == 2
        assert controller.external_to_internal(4) == 3
        assert controller.external_to_internal(99) == 3

    def test_zero_and_one_present_is_identity(self):
        controller = ViewportController(_pages(0, 1, 2))
        for page in (0, 1, 2):
            assert controller.internal_to_external(controller.external_to_internal(page)) == page

    def test_out_of_range_clamps(self):
        controller = ViewportController(_pages(1, 2, 3))
        assert controller.external_to_internal(99) == 3
        assert controller.external_to_internal(-4) == 1

    def test_gap_resolves_to_nearest_lowest_first(self):
        controller = ViewportController(_pages(1, 3, 7))
        assert controller.external_to_internal(5) == 3
        assert controller.external_to_internal(2) == 1
        assert controller.external_to_internal(6) == 7


@pytest.mark.unit
class TestNavigation:
    """Tests for page navigation"""

    def test_go_to_page_notifies(self):
        changes = []
        controller = ViewportController(_pages(1, 2, 3), on_page_change=changes.append)
        assert controller.go_to_page(2) == 2
        assert controller.external_current_page == 2
        assert changes == [2]

    def test_go_to_page_without_notify(self):
        changes = []
        controller = ViewportController(_pages(1, 2, 3), on_page_change=changes.append)
        controller.go_to_page(3, notify=False)
        assert controller.internal_current_page == 3
        assert changes == []

    def test_go_to_page_clamps(self):
        controller = ViewportController(_pages(1, 2, 3))
        assert controller.go_to_page(99) == 3

    def test_next_and_prev(self):
        controller = ViewportController(_pages(1, 3, 7))
        assert controller.next_page() == 3
        assert controller.next_page() == 7
        assert controller.next_page() == 7
        assert controller.prev_page() == 3
        assert controller.prev_page() == 1
        assert controller.prev_page() == 1

    def test_zero_based_navigation_is_external(self):
        changes = []
        controller = ViewportController(_pages(0, 2), on_page_change=changes.append)
        assert controller.internal_current_page == 0
        assert controller.external_current_page == 1
        controller.next_page()
        assert controller.internal_current_page == 2
        assert changes == [3]

    def test_can_navigate(self):
        assert ViewportController(_pages(1, 2)).can_navigate
        assert not ViewportController(_pages(1)).can_navigate

    def test_focus_element(self):
        changes = []
        controller = ViewportController(_pages(1, 2, 3), on_page_change=changes.append)
        assert controller.focus_element(2)
        assert controller.internal_current_page == 2
        assert not controller.focus_element(2)
        assert not controller.focus_element(None)
        assert changes == [2]

    def test_set_highlight_follows_element_page(self):
        changes = []
        controller = ViewportController(_pages(1, 2, 3), on_page_change=changes.append)
        assert controller.highlighted_index is None
        assert controller.set_highlight(5, element_page=3)
        assert controller.highlighted_index == 5
        assert controller.internal_current_page == 3
        assert changes == [3]

    def test_set_highlight_on_current_page(self):
        controller = ViewportController(_pages(1, 2, 3))
        assert not controller.set_highlight(4, element_page=1)
        assert not controller.set_highlight(7)
        assert controller.highlighted_index == 7
        assert controller.internal_current_page == 1

    def test_clear_highlight(self):
        controller = ViewportController(_pages(1, 2))
        controller.set_highlight(1, element_page=2)
        assert not controller.set_highlight(None)
        assert controller.highlighted_index is None
        assert controller.internal_current_page == 2

    def test_current_page_meta(self):
        pages = [PageMeta(1, 595, 841, 0), PageMeta(2, 842, 595, 0)]
        controller = ViewportController(pages, current_page=2)
        assert controller.current_page_meta == pages[1]
        assert (controller.page_width, controller.page_height) == (842, 595)


@pytest.mark.unit
class TestZoom:
    """Tests for zoom in/out"""

    def test_initial_scale(self):
        controller = ViewportController(_pages(1))
        assert controller.scale == 0.6
        assert controller.zoom_label == "60%"
        assert controller.fit_mode == FitMode.NONE

    def test_zoom_steps_are_rounded(self):
        controller = ViewportController(_pages(1))
        assert controller.zoom_in() == 0.7
        assert controller.zoom_in() == 0.8
        assert controller.zoom_out() == 0.7
        assert controller.zoom_label == "70%"

    def test_zoom_is_clamped(self):
        controller = ViewportController(_pages(1))
        for _ in range(40):
            controller.zoom_in()
        assert controller.scale == 2.5
        for _ in range(40):
            controller.zoom_out()
        assert controller.scale == 0.2

    def test_zoom_leaves_fit_mode(self):
        controller = ViewportController(_pages(1))
        controller.update_container_size(1000, 800)
        controller.set_fit_mode("width")
        controller.zoom_in()
        assert controller.fit_mode == FitMode.NONE
        assert controller.scale == round(904 / 595 + 0.1, 2)

    def test_zoom_step_from_settings(self):
        controller = ViewportController(_pages(1), settings=ViewerSettings(zoom_step=0.25))
        assert controller.zoom_in() == 0.85


@pytest.mark.unit
class TestFitModes:
    """Tests for fit width / fit page"""

    def test_fit_width(self):
        controller = ViewportController(_pages(1))
        controller.update_container_size(1000, 800)
        controller.set_fit_mode(FitMode.WIDTH)
        assert controller.scale == pytest.approx((1000 - 96) / 595)

    def test_fit_page(self):
        controller = ViewportController(_pages(1))
        controller.update_container_size(1000, 800)
        controller.set_fit_mode("page")
        assert controller.scale == pytest.approx((800 - 96) / 841)

    def test_minimum_fit_area(self):
        controller = ViewportController(_pages(1))
        controller.update_container_size(100, 100)
        controller.set_fit_mode("width")
        assert controller.scale == pytest.approx(200 / 595)

    def test_fit_scale_is_clamped(self):
        controller = ViewportController(_pages(1, width=10, height=10))
        controller.update_container_size(1000, 800)
        controller.set_fit_mode("page")
        assert controller.scale == 2.5

    def test_fit_waits_for_container(self):
        controller = ViewportController(_pages(1))
        controller.set_fit_mode("width")
        assert controller.scale == 0.6
        controller.update_container_size(1000, 800)
        assert controller.scale == pytest.approx(904 / 595)

    def test_rotated_page_dimensions_refit(self):
        controller = ViewportController(_pages(1))
        controller.update_container_size(1000, 800)
        controller.set_fit_mode("width")
        controller.set_page_dimensions(841, 595)
        assert controller.scale == pytest.approx(904 / 841)

    def test_page_change_refits(self):
        pages = [PageMeta(1, 595, 841, 0), PageMeta(2, 842, 595, 0)]
        controller = ViewportController(pages)
        controller.update_container_size(1000, 800)
        controller.set_fit_mode("width")
        controller.go_to_page(2)
        assert controller.scale == pytest.approx(904 / 842)

    def test_toggle(self):
        controller = ViewportController(_pages(1))
        assert controller.toggle_fit_mode("width") == FitMode.WIDTH
        assert controller.toggle_fit_mode("page") == FitMode.PAGE
        assert controller.toggle_fit_mode("page") == FitMode.NONE

    def test_unknown_mode(self):
        controller = ViewportController(_pages(1))
        with pytest.raises(ValueError):
            controller.set_fit_mode("stretch")

    def test_initial_fit_mode_from_settings(self):
        controller = ViewportController(_pages(1), settings=ViewerSettings(initial_fit_mode="page"))
        assert controller.fit_mode == FitMode.PAGE
        controller.update_container_size(1000, 800)
        assert controller.scale == pytest.approx(704 / 841)
