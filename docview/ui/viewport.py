# docview/ui/viewport.py
"""
Viewport controller: zoom, fit modes and page selection.

Page numbers come in two flavours:
- internal: as used by the input data (may be 0-based)
- external: as shown to the user and exchanged with the host (1-based)

Zero-based data is detected from the page set (page 0 present, page 1
absent); the offset is then applied in both directions. External pages that
match nothing clamp to the nearest existing page.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

from docview.config.settings import ViewerSettings
from docview.models.types import (
    DEFAULT_PAGE_HEIGHT,
    DEFAULT_PAGE_WIDTH,
    FitMode,
    PageChangeCallback,
    PageMeta,
    ViewportState,
)

# Module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageNumbering:
    """Numbering base of a page set."""
    min_page: int
    max_page: int
    zero_based: bool

    @classmethod
    def detect(cls, page_numbers: set[int]) -> "PageNumbering":
        if not page_numbers:
            return cls(min_page=1, max_page=1, zero_based=False)
        min_page = min(page_numbers)
        zero_based = 0 in page_numbers and 1 not in page_numbers and min_page == 0
        return cls(min_page=min_page, max_page=max(page_numbers), zero_based=zero_based)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ViewportController:
    """
    Owns the only long-lived view state: scale, fit mode and current page.

    Page changes are reported through on_page_change with external page
    numbers. Fit modes recompute the scale whenever the fit mode, the
    container size or the page dimensions change.
    """

    def __init__(
        self,
        pages: list[PageMeta],
        current_page: int = 1,
        settings: Optional[ViewerSettings] = None,
        on_page_change: Optional[PageChangeCallback] = None,
    ):
        """
        Args:
            pages: Normalized pages (non-empty, ascending)
            current_page: Initial page (external numbering)
            settings: Viewer settings (zoom range, fit padding)
            on_page_change: Called with the new external page number
        """
        self.settings = settings or ViewerSettings()
        self.on_page_change = on_page_change
        self.state = ViewportState(
            scale=self.settings.initial_scale,
            fit_mode=FitMode(self.settings.initial_fit_mode),
            external_current_page=current_page,
        )
        self.container_width: Optional[float] = None
        self.container_height: Optional[float] = None
        self.set_pages(pages)

    # =========================================================================
    # Page set / numbering
    # =========================================================================

    def set_pages(self, pages: list[PageMeta]) -> None:
        """Replace the page set and recompute the numbering base."""
        self.pages = sorted(pages, key=lambda p: p.page_no)
        self.page_set = {p.page_no for p in self.pages}
        self.numbering = PageNumbering.detect(self.page_set)
        self._sorted_numbers = [p.page_no for p in self.pages]
        if self.numbering.zero_based:
            logger.debug("Zero-based page numbering detected")
        self._reset_page_dimensions()

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def external_to_internal(self, external: int) -> int:
        """
        Map a user-facing page number to a data page number.

        With zero-based data the offset is always applied and an exact match
        on the unshifted number is never taken: in {0, 2, 3} external 2 means
        internal 1, which is missing and clamps to the nearest page. Every
        internal page therefore maps back to the same external page.
        """
        if not self._sorted_numbers:
            return external
        target = external - 1 if self.numbering.zero_based else external
        if target in self.page_set:
            return target

        # Nearest existing page (lowest wins ties)
        clamped = _clamp(target, self._sorted_numbers[0], self._sorted_numbers[-1])
        return min(self._sorted_numbers, key=lambda p: abs(p - clamped))

    def internal_to_external(self, internal: int) -> int:
        if self.numbering.zero_based:
            return internal + 1
        return internal

    @property
    def internal_current_page(self) -> int:
        return self.external_to_internal(self.state.external_current_page)

    @property
    def external_current_page(self) -> int:
        """Current page as displayed (canonical external number)."""
        return self.internal_to_external(self.internal_current_page)

    @property
    def current_page_meta(self) -> PageMeta:
        internal = self.internal_current_page
        for page in self.pages:
            if page.page_no == internal:
                return page
        return PageMeta(internal, DEFAULT_PAGE_WIDTH, DEFAULT_PAGE_HEIGHT, 0)

    # =========================================================================
    # Navigation
    # =========================================================================

    def go_to_page(self, external: int, notify: bool = True) -> int:
        """
        Select a page by external number.

        Returns:
            The canonical external number of the page actually selected
        """
        internal = self.external_to_internal(external)
        resolved = self.internal_to_external(internal)
        changed = resolved != self.external_current_page
        self.state.external_current_page = resolved
        if changed:
            self._reset_page_dimensions()
        if notify and self.on_page_change is not None:
            self.on_page_change(resolved)
        return resolved

    def next_page(self) -> int:
        index = self._current_index()
        if 0 <= index < len(self._sorted_numbers) - 1:
            target = self._sorted_numbers[index + 1]
        else:
            target = self._sorted_numbers[-1]
        return self.go_to_page(self.internal_to_external(target))

    def prev_page(self) -> int:
        index = self._current_index()
        target = self._sorted_numbers[index - 1] if index > 0 else self._sorted_numbers[0]
        return self.go_to_page(self.internal_to_external(target))

    def _current_index(self) -> int:
        try:
            return self._sorted_numbers.index(self.internal_current_page)
        except ValueError:
            return -1

    @property
    def can_navigate(self) -> bool:
        return self.page_count > 1

    def focus_element(self, element_page: Optional[int]) -> bool:
        """
        Follow a highlighted element onto its page.

        Args:
            element_page: Internal page referenced by the element (None: unknown)

        Returns:
            True if the current page changed
        """
        if element_page is None or element_page == self.internal_current_page:
            return False
        logger.debug("Following highlight to page %d", element_page)
        self.go_to_page(self.internal_to_external(element_page))
        return True

    @property
    def highlighted_index(self) -> Optional[int]:
        return self.state.highlighted_index

    def set_highlight(self, index: Optional[int], element_page: Optional[int] = None) -> bool:
        """
        Highlight an input element and follow it onto its page.

        Args:
            index: Input index of the element (None clears the highlight)
            element_page: Internal page referenced by the element

        Returns:
            True if the current page changed
        """
        self.state.highlighted_index = index
        if index is None:
            return False
        return self.focus_element(element_page)

    # =========================================================================
    # Zoom / fit
    # =========================================================================

    @property
    def scale(self) -> float:
        return self.state.scale

    @property
    def fit_mode(self) -> FitMode:
        return self.state.fit_mode

    @property
    def zoom_label(self) -> str:
        return f"{math.floor(self.state.scale * 100 + 0.5)}%"

    def _zoom(self, delta: float) -> float:
        self.state.fit_mode = FitMode.NONE
        self.state.scale = _clamp(
            round(self.state.scale + delta, 2),
            self.settings.min_scale,
            self.settings.max_scale,
        )
        return self.state.scale

    def zoom_in(self) -> float:
        return self._zoom(self.settings.zoom_step)

    def zoom_out(self) -> float:
        return self._zoom(-self.settings.zoom_step)

    def set_fit_mode(self, mode: Union[FitMode, str]) -> None:
        """
        Raises:
            ValueError: Unknown fit mode
        """
        self.state.fit_mode = FitMode(mode)
        self._apply_fit()

    def toggle_fit_mode(self, mode: Union[FitMode, str]) -> FitMode:
        """Switch to a fit mode, or back to none if it is already active."""
        mode = FitMode(mode)
        self.set_fit_mode(FitMode.NONE if self.state.fit_mode == mode else mode)
        return self.state.fit_mode

    def update_container_size(self, width: float, height: float) -> None:
        self.container_width = width
        self.container_height = height
        self._apply_fit()

    def set_page_dimensions(self, width: float, height: float) -> None:
        """Set the rotated size of the page being displayed."""
        self.page_width = width
        self.page_height = height
        self._apply_fit()

    def _reset_page_dimensions(self) -> None:
        # Unrotated size until the render pass reports the rotated one
        page = self.current_page_meta
        self.set_page_dimensions(page.width, page.height)

    def _apply_fit(self) -> None:
        mode = self.state.fit_mode
        if mode == FitMode.NONE or self.container_width is None or self.container_height is None:
            return
        if self.page_width <= 0 or self.page_height <= 0:
            return

        padding = self.settings.fit_padding
        available_w = max(self.settings.min_fit_area, self.container_width - padding)
        available_h = max(self.settings.min_fit_area, self.container_height - padding)

        if mode == FitMode.WIDTH:
            scale = available_w / self.page_width
        else:
            scale = min(available_w / self.page_width, available_h / self.page_height)
        self.state.scale = _clamp(scale, self.settings.min_scale, self.settings.max_scale)
