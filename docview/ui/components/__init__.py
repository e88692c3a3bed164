# docview/ui/components/__init__.py
"""
UI components for docview.

Component imports are lazy-loaded so that importing docview.ui does not
pull in NiceGUI.
Use explicit imports like:
    from docview.ui.components.document_view import create_document_view
"""

# Lazy-loaded components via __getattr__
_LAZY_IMPORTS = {
    "DocumentView": "document_view",
    "create_document_view": "document_view",
}


def __getattr__(name: str):
    """Lazy-load component modules on first access."""
    if name in _LAZY_IMPORTS:
        module_name = _LAZY_IMPORTS[name]
        import importlib

        module = importlib.import_module(f".{module_name}", __package__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "DocumentView",
    "create_document_view",
]
