# docview/services/layout_pipeline.py
"""
Layout pipeline: turns extracted document metadata into renderable pages.

One render pass per page, data flowing one way:
    page model -> coordinate resolution -> rotation inference ->
    rect projection -> line merging / table extraction -> font fitting

Everything is re-derived from the inputs; the only state kept between passes
is the parsed input itself. Scale and rotation are memoized per pass, keyed
by page number.
"""

import logging
from typing import Any, Optional

from docview.config.settings import ViewerSettings
from docview.models.types import (
    DEFAULT_PAGE_HEIGHT,
    DEFAULT_PAGE_WIDTH,
    ElementClickCallback,
    PageMeta,
    PageRender,
    RawElement,
    Rect,
    RenderedTable,
    RenderedTextRun,
    ResolvedScale,
)
from docview.processors.coordinate_resolver import resolve_scale
from docview.processors.font_fitter import clamp, fit_text, get_text_style
from docview.processors.line_merger import merge_text_lines
from docview.processors.page_model import group_elements_by_page, normalize_pages
from docview.processors.rect_projector import project_rect, sample_rects
from docview.processors.rotation import ROTATION_SAMPLE_LIMIT, infer_rotation, rotated_page_size
from docview.processors.table_extractor import extract_table, table_payload
from docview.processors.text_metrics import TextMetrics

# Module logger
logger = logging.getLogger(__name__)

# Text inset inside a run's rect
MAX_TEXT_PADDING = 4.0

# Table font sizing relative to the row height
TABLE_FONT_RATIO = 0.55
TABLE_FONT_MIN = 1.0
TABLE_FONT_MAX = 14.0
TABLE_HEADER_FONT_RATIO = 1.08
TABLE_HEADER_FONT_MAX = 16.0


class _RenderPass:
    """
    State of a single render pass.

    Holds the page grouping (which depends on the page being viewed, since
    elements without a page reference fall back to it) and the per-page
    scale / rotation memos.
    """

    def __init__(self, pipeline: "LayoutPipeline", fallback_page: int):
        self._pipeline = pipeline
        self.by_page = group_elements_by_page(pipeline.elements, fallback_page)
        self._scales: dict[int, ResolvedScale] = {}
        self._rotations: dict[int, int] = {}

    def elements_on(self, page: PageMeta) -> list[RawElement]:
        return self.by_page.get(page.page_no, [])

    def scale_for(self, page: PageMeta) -> ResolvedScale:
        scale = self._scales.get(page.page_no)
        if scale is None:
            scale = resolve_scale(page, self.elements_on(page))
            self._scales[page.page_no] = scale
        return scale

    def rotation_for(self, page: PageMeta) -> int:
        rotation = self._rotations.get(page.page_no)
        if rotation is None:
            sample = sample_rects(
                page,
                self.elements_on(page),
                self.scale_for(page),
                limit=self._pipeline.rotation_sample_limit,
            )
            rotation = infer_rotation(page, sample)
            self._rotations[page.page_no] = rotation
        return rotation

    def project(self, element: RawElement, page: PageMeta) -> Optional[Rect]:
        return project_rect(element, page, self.scale_for(page), self.rotation_for(page))


class LayoutPipeline:
    """
    Renderable geometry for a document described by extraction metadata.

    Example:
        pipeline = LayoutPipeline(coordinates, tables=tables, pages=pages)
        page = pipeline.render_page(pipeline.pages[0].page_no)
        for run in page.text_runs:
            print(run.rect, run.fitted.font_size, run.text)
    """

    def __init__(
        self,
        coordinates: Optional[list] = None,
        tables: Optional[list] = None,
        pages: Optional[list] = None,
        settings: Optional[ViewerSettings] = None,
        metrics: Optional[TextMetrics] = None,
        on_element_click: Optional[ElementClickCallback] = None,
    ):
        """
        Args:
            coordinates: Raw coordinate elements (provenance or x/y/width/height form)
            tables: Raw table payloads, indexed by an element's tableIndex
            pages: Raw page metadata (optional)
            settings: Viewer settings (default page size, rotation sample limit)
            metrics: Text measurement backend (default: shared instance)
            on_element_click: Called with the input index of a clicked element
        """
        self.settings = settings
        self.metrics = metrics
        self.on_element_click = on_element_click
        self.tables = tables if isinstance(tables, list) else []
        self.elements = [
            RawElement.from_dict(index, data)
            for index, data in enumerate(coordinates if isinstance(coordinates, list) else [])
        ]
        self.pages = normalize_pages(pages, self.elements, settings)
        self.page_set = {p.page_no for p in self.pages}
        self._pages_by_number = {p.page_no: p for p in self.pages}
        logger.debug("Layout pipeline: %d elements, %d pages", len(self.elements), len(self.pages))

    @property
    def rotation_sample_limit(self) -> int:
        if self.settings is not None:
            return self.settings.rotation_sample_limit
        return ROTATION_SAMPLE_LIMIT

    def page_meta(self, page_no: int) -> PageMeta:
        """PageMeta for a page number (a default-sized page if unknown)."""
        page = self._pages_by_number.get(page_no)
        if page is not None:
            return page
        width = self.settings.default_page_width if self.settings else DEFAULT_PAGE_WIDTH
        height = self.settings.default_page_height if self.settings else DEFAULT_PAGE_HEIGHT
        return PageMeta(page_no, width, height, 0)

    def render_page(self, internal_page: int, highlighted_index: Optional[int] = None) -> PageRender:
        """
        Run one render pass for a page.

        Args:
            internal_page: Page number as used by the input data
            highlighted_index: Input index of the element to highlight

        Returns:
            PageRender with text runs and tables in the rotated page frame
        """
        page = self.page_meta(internal_page)
        render_pass = _RenderPass(self, fallback_page=internal_page)
        rotation = render_pass.rotation_for(page)
        width, height = rotated_page_size(page.width, page.height, rotation)

        elements = render_pass.elements_on(page)
        text_runs = self._render_text_runs(render_pass, page, elements, highlighted_index)
        tables = self._render_tables(render_pass, page, elements, highlighted_index)

        logger.debug(
            "Rendered page %d: rotation %d, %d text runs, %d tables",
            page.page_no, rotation, len(text_runs), len(tables),
        )
        return PageRender(
            page=page,
            rotation=rotation,
            width=width,
            height=height,
            text_runs=text_runs,
            tables=tables,
        )

    def _render_text_runs(
        self,
        render_pass: _RenderPass,
        page: PageMeta,
        elements: list[RawElement],
        highlighted_index: Optional[int],
    ) -> list[RenderedTextRun]:
        merged = merge_text_lines(elements, lambda e: render_pass.project(e, page))

        runs = []
        for item in merged:
            style = get_text_style(item.label)
            pad = clamp(style.padding, 0, MAX_TEXT_PADDING)
            inner_width = max(0.0, item.rect.width - pad * 2)
            inner_height = max(0.0, item.rect.height - pad * 2)
            fitted = fit_text(inner_width, inner_height, item.text, item.label, self.metrics)
            runs.append(
                RenderedTextRun(
                    merged=item,
                    rect=item.rect,
                    padding=pad,
                    inner_width=inner_width,
                    inner_height=inner_height,
                    fitted=fitted,
                    highlighted=highlighted_index is not None and highlighted_index in item.source_indices,
                )
            )
        return runs

    def _render_tables(
        self,
        render_pass: _RenderPass,
        page: PageMeta,
        elements: list[RawElement],
        highlighted_index: Optional[int],
    ) -> list[RenderedTable]:
        tables = []
        for element in elements:
            if not element.is_table:
                continue
            rect = render_pass.project(element, page)
            if rect is None:
                continue

            table_index = element.table_index if element.table_index is not None else 0
            model = extract_table(table_payload(self.tables, table_index))

            total_rows = max(1, len(model.rows) + (1 if model.has_header else 0))
            row_height = rect.height / total_rows
            base_font = clamp(row_height * TABLE_FONT_RATIO, TABLE_FONT_MIN, TABLE_FONT_MAX)
            header_font = clamp(base_font * TABLE_HEADER_FONT_RATIO, TABLE_FONT_MIN, TABLE_HEADER_FONT_MAX)

            tables.append(
                RenderedTable(
                    original_index=element.index,
                    table_index=table_index,
                    rect=rect,
                    model=model,
                    base_font=base_font,
                    header_font=header_font,
                    highlighted=highlighted_index == element.index,
                )
            )
        return tables

    def page_of_element(self, index: Optional[int]) -> Optional[int]:
        """Page referenced by the element at an input index (None if unknown)."""
        if index is None or not 0 <= index < len(self.elements):
            return None
        return self.elements[index].referenced_page

    def click(self, original_index: int) -> None:
        """Forward an element click to the on_element_click callback."""
        logger.debug("Element clicked: %d", original_index)
        if self.on_element_click is not None:
            self.on_element_click(original_index)


def build_pipeline(data: dict[str, Any], **kwargs) -> LayoutPipeline:
    """Create a pipeline from a combined {coordinates, tables, pages} payload."""
    if not isinstance(data, dict):
        data = {}
    return LayoutPipeline(
        coordinates=data.get("coordinates"),
        tables=data.get("tables"),
        pages=data.get("pages"),
        **kwargs,
    )
