# docview/ui/__init__.py
"""
UI layer for docview.

NiceGUI is only imported by the components, which are lazy-loaded.
Use explicit imports like:
    from docview.ui.components.document_view import create_document_view
"""

# Fast imports - view state (no NiceGUI dependency)
from .viewport import ViewportController, PageNumbering

# Lazy-loaded UI components via __getattr__
_LAZY_IMPORTS = {
    'DocumentView': 'components.document_view',
    'create_document_view': 'components.document_view',
}

# Submodules that can be accessed via __getattr__ (for patching support)
_SUBMODULES = {'styles', 'viewport', 'components'}


def __getattr__(name: str):
    """Lazy-load UI modules on first access."""
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
    'ViewportController',
    'PageNumbering',
    'DocumentView',
    'create_document_view',
]
