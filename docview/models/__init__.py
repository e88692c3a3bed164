"""
Data models for docview.
"""

from .types import (
    DEFAULT_PAGE_WIDTH,
    DEFAULT_PAGE_HEIGHT,
    CoordinateMode,
    FitMode,
    PageMeta,
    Rect,
    BoundingBox,
    Provenance,
    RawElement,
    ResolvedScale,
    MergedElement,
    TableModel,
    ViewportState,
    FontSpec,
    TextStyle,
    FittedText,
    RenderedTextRun,
    RenderedTable,
    PageRender,
    ElementClickCallback,
    PageChangeCallback,
)

__all__ = [
    'DEFAULT_PAGE_WIDTH',
    'DEFAULT_PAGE_HEIGHT',
    'CoordinateMode',
    'FitMode',
    'PageMeta',
    'Rect',
    'BoundingBox',
    'Provenance',
    'RawElement',
    'ResolvedScale',
    'MergedElement',
    'TableModel',
    'ViewportState',
    'FontSpec',
    'TextStyle',
    'FittedText',
    'RenderedTextRun',
    'RenderedTable',
    'PageRender',
    'ElementClickCallback',
    'PageChangeCallback',
]
