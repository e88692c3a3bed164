# docview/ui/app.py
"""
Standalone viewer for a layout metadata file.

The file is a JSON object {"coordinates": [...], "tables": [...], "pages": [...]}
as produced by the document-analysis pipeline.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from docview.config.settings import ViewerSettings, get_default_settings_path
from docview.services.layout_pipeline import LayoutPipeline, build_pipeline

# Module logger
logger = logging.getLogger(__name__)


def load_document(path: Path, settings: Optional[ViewerSettings] = None) -> LayoutPipeline:
    """
    Load a layout metadata file into a pipeline.

    Raises:
        OSError: File cannot be read
        json.JSONDecodeError: File is not valid JSON
    """
    with open(path, 'r', encoding='utf-8-sig') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        logger.warning("%s: expected a JSON object, got %s", path, type(data).__name__)
        data = {}
    pipeline = build_pipeline(data, settings=settings)
    logger.info("Loaded %s: %d elements on %d pages", path, len(pipeline.elements), len(pipeline.pages))
    return pipeline


def run_app(
    data_path: Path,
    host: str = '127.0.0.1',
    port: int = 8766,
) -> None:
    """Serve the document view for one file.

    Args:
        data_path: Layout metadata JSON file
        host: Host to bind to
        port: Port to bind to
    """
    from nicegui import ui

    from docview.ui.components.document_view import create_document_view
    from docview.ui.viewport import ViewportController

    settings = ViewerSettings.load(get_default_settings_path())
    pipeline = load_document(data_path, settings)

    def on_element_click(index: int) -> None:
        element = pipeline.elements[index]
        logger.info("Element %d clicked: %s", index, element.text[:80])
        ui.notify(f'#{index} {element.label or "text"}')

    pipeline.on_element_click = on_element_click

    @ui.page('/')
    def index(highlight: Optional[int] = None) -> None:
        # One controller per client
        controller = ViewportController(pipeline.pages, settings=settings)
        with ui.element('div').classes('w-full').style('height: calc(100vh - 32px)'):
            create_document_view(pipeline, controller, highlighted_index=highlight)

    ui.run(
        host=host,
        port=port,
        title=f'docview - {data_path.name}',
        reload=False,
        show=False,
    )
