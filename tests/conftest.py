from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Ensure the project root is importable when running `pytest` via its entrypoint
# (e.g., `uv run --extra test pytest`), where `sys.path[0]` may not be the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture
def estimate_metrics():
    """Font-file independent text measurement."""
    from docview.processors.text_metrics import EstimatedTextMetrics

    return EstimatedTextMetrics()


@pytest.fixture
def a4_page():
    from docview.models.types import PageMeta

    return PageMeta(page_no=1, width=595.0, height=841.0, rotation=0)


@pytest.fixture(autouse=True)
def _reset_shared_state():
    """Shared singletons and caches must not leak between tests."""
    yield
    from docview.config.settings import invalidate_settings_cache
    from docview.processors.text_metrics import reset_text_metrics

    reset_text_metrics()
    invalidate_settings_cache()
