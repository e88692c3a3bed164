# docview/ui/components/document_view.py
"""
Document view: toolbar plus the reconstructed page canvas.

The page is laid out at its natural (rotated) size in points and scaled
with a CSS transform, so zooming never re-runs the layout pipeline.
"""

import logging
from typing import Callable, Optional

from nicegui import ui

from docview.models.types import FitMode, PageRender, RenderedTable, RenderedTextRun
from docview.services.layout_pipeline import LayoutPipeline
from docview.ui import styles
from docview.ui.viewport import ViewportController

# Module logger
logger = logging.getLogger(__name__)

# A highlighted element closer than this to the canvas edge is scrolled to the center (px)
SCROLL_MARGIN_Y = 60
SCROLL_MARGIN_X = 40

# Enter / Space activate a focused element like a click
_ACTIVATE_KEY_HANDLER = '''(e) => {
    if (e.key === "Enter" || e.key === " ") {
        e.preventDefault();
        emit();
    }
}'''


def element_selector(anchor_index: int) -> str:
    """CSS selector of the DOM element rendered for an anchor index."""
    return f'[data-docview-index="{anchor_index}"]'


def scroll_into_view_js(canvas_id: int, anchor_index: int) -> str:
    """
    JavaScript that centers an element in the canvas if it is near or past an edge.

    Args:
        canvas_id: NiceGUI id of the scrolling canvas element
        anchor_index: Index carried by the element (see PageRender.anchor_index)
    """
    selector = element_selector(anchor_index).replace("'", "\\'")
    return f'''(() => {{
    const scroller = getElement({canvas_id}).$el;
    const el = scroller.querySelector('{selector}');
    if (!el) return false;
    const elRect = el.getBoundingClientRect();
    const scRect = scroller.getBoundingClientRect();
    const out = elRect.top < scRect.top + {SCROLL_MARGIN_Y}
        || elRect.bottom > scRect.bottom - {SCROLL_MARGIN_Y}
        || elRect.left < scRect.left + {SCROLL_MARGIN_X}
        || elRect.right > scRect.right - {SCROLL_MARGIN_X};
    if (out) el.scrollIntoView({{block: "center", inline: "center", behavior: "smooth"}});
    return out;
}})()'''


def _make_activatable(el: ui.element, index: int, label: str, on_click: Callable[[int], None]) -> None:
    """Click, keyboard focus and Enter/Space activation for a page element."""
    el.props(f'data-docview-index={index} role=button tabindex=0 aria-label="{label}"')
    el.on('click', lambda _, i=index: on_click(i))
    el.on('keydown', lambda _, i=index: on_click(i), js_handler=_ACTIVATE_KEY_HANDLER)


def _text_run(run: RenderedTextRun, on_click: Callable[[int], None]) -> None:
    classes = 'docview-run highlighted' if run.highlighted else 'docview-run'
    with ui.element('div').classes(classes).style(styles.to_css(styles.text_run_style(run))) as el:
        ui.label(run.fitted.rendered_text).style(styles.to_css(styles.text_inner_style(run)))
    el.tooltip(run.title)
    _make_activatable(el, run.original_index, run.label, on_click)


def _table(table: RenderedTable, on_click: Callable[[int], None]) -> None:
    classes = 'docview-table highlighted' if table.highlighted else 'docview-table'
    with ui.element('div').classes(classes).style(styles.to_css(styles.table_style(table))) as el:
        placeholder = table.placeholder
        if placeholder is not None:
            ui.label(placeholder).style(styles.to_css(styles.placeholder_style()))
        else:
            model = table.model
            width = styles.column_width(model.col_count)
            with ui.element('table').style(styles.to_css(styles.table_grid_style(table))):
                with ui.element('colgroup'):
                    for _ in range(model.col_count):
                        ui.element('col').style(f'width: {width}')
                if model.has_header:
                    header_css = styles.to_css(styles.header_cell_style(table))
                    with ui.element('thead'):
                        with ui.element('tr'):
                            for header in model.headers:
                                with ui.element('th').style(header_css):
                                    ui.label(header)
                with ui.element('tbody'):
                    for row_index, row in enumerate(model.rows):
                        cell_css = styles.to_css(styles.body_cell_style(table, row_index))
                        with ui.element('tr'):
                            for cell in row:
                                with ui.element('td').style(cell_css) as td:
                                    ui.label(cell)
                                if cell:
                                    td.tooltip(cell)
    el.tooltip(table.title)
    _make_activatable(el, table.original_index, 'table', on_click)


def _page(render: PageRender, scale: float, on_click: Callable[[int], None]) -> None:
    with ui.element('div').style(
        styles.to_css(styles.page_wrapper_style(render.width, render.height, scale))
    ):
        with ui.element('div').classes('docview-page').style(
            styles.to_css(styles.page_style(render.width, render.height, scale))
        ):
            for run in render.text_runs:
                _text_run(run, on_click)
            for table in render.tables:
                _table(table, on_click)


class DocumentView:
    """
    Document view with page navigation, fit and zoom controls.

    The highlighted element can be changed after creation with
    set_highlight(); the view then follows the element onto its page and
    scrolls it into view.
    """

    def __init__(self, pipeline: LayoutPipeline, controller: ViewportController):
        self.pipeline = pipeline
        self.controller = controller
        self._canvas: Optional[ui.element] = None
        self._last_render: Optional[PageRender] = None
        self._view = ui.refreshable(self._build)

    def refresh(self) -> None:
        self._view.refresh()

    def render(self) -> None:
        """Create the view in the current UI context."""
        ui.add_head_html(f'<style>{styles.COMPLETE_CSS}</style>')
        self._view()
        if self.controller.highlighted_index is not None:
            ui.timer(0.1, self.scroll_to_highlight, once=True)

    async def set_highlight(self, index: Optional[int]) -> None:
        """
        Highlight an input element, switching pages if needed.

        Args:
            index: Input index of the element (None clears the highlight)
        """
        page = self.pipeline.page_of_element(index)
        self.controller.set_highlight(index, page)
        self.refresh()
        await self.scroll_to_highlight()

    async def scroll_to_highlight(self) -> None:
        index = self.controller.highlighted_index
        if index is None or self._canvas is None or self._last_render is None:
            return
        anchor = self._last_render.anchor_index(index)
        scrolled = await ui.run_javascript(scroll_into_view_js(self._canvas.id, anchor))
        if scrolled:
            logger.debug("Scrolled element %d into view", anchor)

    async def measure_container(self) -> None:
        if self._canvas is None:
            return
        size = await ui.run_javascript(
            f'(() => {{ const el = getElement({self._canvas.id}).$el; '
            f'return [el.clientWidth, el.clientHeight]; }})()'
        )
        if isinstance(size, list) and len(size) == 2:
            self.controller.update_container_size(float(size[0]), float(size[1]))

    def _handle_click(self, original_index: int) -> None:
        self.pipeline.click(original_index)

    def _navigate(self, action: Callable[[], object]) -> None:
        action()
        self.refresh()

    async def _toggle_fit(self, mode: FitMode) -> None:
        await self.measure_container()
        self.controller.toggle_fit_mode(mode)
        self.refresh()

    def _build(self) -> None:
        controller = self.controller
        render = self.pipeline.render_page(controller.internal_current_page, controller.highlighted_index)
        self._last_render = render
        # Fit modes work on the rotated page size of this pass
        controller.set_page_dimensions(render.width, render.height)

        with ui.element('div').classes('docview-root'):
            with ui.element('div').classes('docview-toolbar'):
                with ui.row().classes('items-center gap-2'):
                    with ui.element('div').classes('docview-toolbar-group'):
                        nav_props = 'flat dense round size=sm' + ('' if controller.can_navigate else ' disable')
                        ui.button(
                            icon='chevron_left',
                            on_click=lambda: self._navigate(controller.prev_page),
                        ).props(nav_props + ' aria-label="Previous page"').classes('docview-toolbar-btn')
                        with ui.element('div').classes('docview-page-indicator'):
                            ui.label(str(controller.external_current_page))
                            ui.label('/').classes('opacity-60')
                            ui.label(str(controller.page_count)).classes('opacity-60')
                        ui.button(
                            icon='chevron_right',
                            on_click=lambda: self._navigate(controller.next_page),
                        ).props(nav_props + ' aria-label="Next page"').classes('docview-toolbar-btn')

                    with ui.element('div').classes('docview-toolbar-group'):
                        width_active = ' active' if controller.fit_mode == FitMode.WIDTH else ''
                        page_active = ' active' if controller.fit_mode == FitMode.PAGE else ''
                        ui.button(
                            icon='fit_screen',
                            on_click=lambda: self._toggle_fit(FitMode.WIDTH),
                        ).props('flat dense round size=sm aria-label="Fit to width"').classes(
                            'docview-toolbar-btn' + width_active
                        ).tooltip('Fit to width')
                        ui.button(
                            icon='crop_free',
                            on_click=lambda: self._toggle_fit(FitMode.PAGE),
                        ).props('flat dense round size=sm aria-label="Fit to page"').classes(
                            'docview-toolbar-btn' + page_active
                        ).tooltip('Fit to page')

                with ui.element('div').classes('docview-toolbar-group'):
                    ui.button(
                        icon='zoom_out',
                        on_click=lambda: self._navigate(controller.zoom_out),
                    ).props('flat dense round size=sm aria-label="Zoom out"').classes('docview-toolbar-btn')
                    ui.label(controller.zoom_label).classes('docview-zoom-label')
                    ui.button(
                        icon='zoom_in',
                        on_click=lambda: self._navigate(controller.zoom_in),
                    ).props('flat dense round size=sm aria-label="Zoom in"').classes('docview-toolbar-btn')

            with ui.element('div').classes('docview-canvas') as canvas:
                with ui.element('div').classes('docview-canvas-inner'):
                    _page(render, controller.scale, self._handle_click)
            self._canvas = canvas


def create_document_view(
    pipeline: LayoutPipeline,
    controller: Optional[ViewportController] = None,
    highlighted_index: Optional[int] = None,
    on_page_change: Optional[Callable[[int], None]] = None,
) -> DocumentView:
    """
    Create a document view in the current UI context.

    Args:
        pipeline: Layout pipeline holding the document
        controller: Viewport state (created from the pipeline's pages if None)
        highlighted_index: Input index of the element to highlight; the view
                           follows it onto its page
        on_page_change: Called with the external page number after navigation

    Returns:
        The DocumentView (use set_highlight() / refresh() to update it)
    """
    if controller is None:
        controller = ViewportController(pipeline.pages, settings=pipeline.settings)
    if on_page_change is not None:
        controller.on_page_change = on_page_change
    if highlighted_index is not None:
        controller.set_highlight(highlighted_index, pipeline.page_of_element(highlighted_index))

    view = DocumentView(pipeline, controller)
    view.render()
    return view
