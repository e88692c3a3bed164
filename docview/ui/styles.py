# docview/ui/styles.py
"""
Styles for the document view.

Static classes (toolbar, canvas, hover/highlight states) live in styles.css.
Per-element geometry and typography depend on the render pass and are built
as inline style dicts here; to_css() turns them into a style attribute.
"""

from pathlib import Path

from docview.models.types import Rect, RenderedTable, RenderedTextRun
from docview.processors.font_fitter import LINE_HEIGHT, clamp

# Load CSS from external file
_CSS_FILE = Path(__file__).parent / "styles.css"


def _load_css() -> str:
    """Load CSS from external file."""
    if _CSS_FILE.exists():
        return _CSS_FILE.read_text(encoding="utf-8")
    return ""


# Cache the loaded CSS at module import time
COMPLETE_CSS = _load_css()

TEXT_COLOR = "#000000"
HIGHLIGHT_TEXT_COLOR = "var(--q-primary)"
TABLE_TEXT_COLOR = "#0b1220"
TABLE_CELL_COLOR = "#0f172a"
TABLE_HEADER_BACKGROUND = "#f3f4f6"
TABLE_STRIPE_BACKGROUND = "#f9fafb"
PLACEHOLDER_COLOR = "#6b7280"


def _px(value: float) -> str:
    return f"{value:g}px"


def to_css(style: dict[str, object]) -> str:
    """Render a style dict as a CSS declaration list."""
    return "; ".join(f"{key}: {value}" for key, value in style.items())


def position_style(rect: Rect) -> dict[str, object]:
    """Absolute positioning inside the (unscaled) page."""
    return {
        "position": "absolute",
        "left": _px(rect.left),
        "top": _px(rect.top),
        "width": _px(rect.width),
        "height": _px(rect.height),
    }


def page_style(width: float, height: float, scale: float) -> dict[str, object]:
    """The page is laid out at its natural size and scaled with a transform."""
    return {
        "width": _px(width),
        "height": _px(height),
        "transform": f"scale({scale:g})",
        "transform-origin": "top left",
    }


def page_wrapper_style(width: float, height: float, scale: float) -> dict[str, object]:
    """Wrapper reserving the scaled page size in the scroll area."""
    scaled_w = _px(width * scale)
    scaled_h = _px(height * scale)
    return {
        "position": "relative",
        "width": scaled_w,
        "height": scaled_h,
        "min-width": scaled_w,
        "min-height": scaled_h,
        "flex-shrink": 0,
    }


def text_run_style(run: RenderedTextRun) -> dict[str, object]:
    style = run.fitted.style
    css = position_style(run.rect)
    css.update({
        "color": HIGHLIGHT_TEXT_COLOR if run.highlighted else TEXT_COLOR,
        "font-family": style.family,
        "font-weight": style.font_weight,
        "font-size": _px(run.fitted.font_size),
        "line-height": LINE_HEIGHT,
        "padding": _px(run.padding),
        "display": "flex",
        "align-items": style.align_items,
        "justify-content": style.justify_content,
        "text-align": style.text_align,
        "white-space": "pre-wrap",
        "word-break": "break-word",
    })
    return css


def text_inner_style(run: RenderedTextRun) -> dict[str, object]:
    return {
        "width": _px(run.inner_width),
        "height": _px(run.inner_height),
        "overflow": "hidden",
    }


def table_style(table: RenderedTable) -> dict[str, object]:
    css = position_style(table.rect)
    css["background-color"] = "#ffffff"
    return css


def table_grid_style(table: RenderedTable) -> dict[str, object]:
    return {
        "table-layout": "fixed",
        "width": "100%",
        "border-collapse": "collapse",
        "font-size": _px(table.base_font),
        "color": TABLE_TEXT_COLOR,
    }


def column_width(col_count: int) -> str:
    """Equal column widths."""
    return f"{100 / col_count:g}%" if col_count > 0 else "auto"


def header_cell_style(table: RenderedTable) -> dict[str, object]:
    base = table.base_font
    return {
        "border": "1px solid #cbd5e1",
        "padding": f"{_px(clamp(base * 0.25, 1, 6))} {_px(clamp(base * 0.35, 2, 8))}",
        "text-align": "left",
        "font-weight": 700,
        "font-size": _px(table.header_font),
        "color": TABLE_TEXT_COLOR,
        "background-color": TABLE_HEADER_BACKGROUND,
        "white-space": "nowrap",
        "overflow": "hidden",
        "text-overflow": "ellipsis",
    }


def body_cell_style(table: RenderedTable, row_index: int) -> dict[str, object]:
    base = table.base_font
    return {
        "border": "1px solid #e2e8f0",
        "padding": f"{_px(clamp(base * 0.28, 1, 6))} {_px(clamp(base * 0.38, 2, 10))}",
        "font-size": _px(base),
        "color": TABLE_CELL_COLOR,
        "background-color": "#ffffff" if row_index % 2 == 0 else TABLE_STRIPE_BACKGROUND,
        "vertical-align": "top",
        "line-height": 1.25,
        "word-break": "break-word",
        "overflow": "hidden",
    }


def placeholder_style() -> dict[str, object]:
    return {
        "display": "flex",
        "align-items": "center",
        "justify-content": "center",
        "height": "100%",
        "color": PLACEHOLDER_COLOR,
        "font-size": "12px",
    }
