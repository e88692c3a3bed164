# docview/processors/__init__.py
"""
Layout processors for docview.

Processors that pull in numpy / PyMuPDF are lazy-loaded.
Use explicit imports like:
    from docview.processors.rotation import infer_rotation
"""

# Fast imports - pure Python helpers
from .page_model import normalize_pages, group_elements_by_page
from .line_merger import merge_text_lines
from .table_extractor import extract_table

# Lazy-loaded processors via __getattr__
_LAZY_IMPORTS = {
    'resolve_scale': 'coordinate_resolver',
    'infer_rotation': 'rotation',
    'rotate_rect': 'rotation',
    'rotated_page_size': 'rotation',
    'project_rect': 'rect_projector',
    'sample_rects': 'rect_projector',
    'fit_text': 'font_fitter',
    'get_text_style': 'font_fitter',
    'TextMetrics': 'text_metrics',
    'get_text_metrics': 'text_metrics',
}

# Submodules that can be accessed via __getattr__ (for patching support)
_SUBMODULES = {'page_model', 'coordinate_resolver', 'rotation', 'rect_projector',
               'line_merger', 'table_extractor', 'text_metrics', 'font_fitter'}


def __getattr__(name: str):
    """Lazy-load heavy processor modules on first access."""
    import importlib
    # Support accessing submodules directly (for unittest.mock.patch)
    if name in _SUBMODULES:
        return importlib.import_module(f'.{name}', __package__)
    if name in _LAZY_IMPORTS:
        module_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(f'.{module_name}', __package__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'normalize_pages',
    'group_elements_by_page',
    'merge_text_lines',
    'extract_table',
    'resolve_scale',
    'infer_rotation',
    'rotate_rect',
    'rotated_page_size',
    'project_rect',
    'sample_rects',
    'fit_text',
    'get_text_style',
    'TextMetrics',
    'get_text_metrics',
]
