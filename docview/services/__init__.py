# docview/services/__init__.py
"""
Service layer for docview.

Use explicit imports like:
    from docview.services.layout_pipeline import LayoutPipeline
"""

# Lazy-loaded services via __getattr__
_LAZY_IMPORTS = {
    'LayoutPipeline': 'layout_pipeline',
    'build_pipeline': 'layout_pipeline',
}

# Submodules that can be accessed via __getattr__ (for patching support)
_SUBMODULES = {'layout_pipeline'}


def __getattr__(name: str):
    """Lazy-load service modules on first access."""
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
    'LayoutPipeline',
    'build_pipeline',
]
