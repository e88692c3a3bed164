#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
docview - Structured document view

Entry point: serves the reconstructed layout of one metadata file.

Usage:
    python app.py <layout.json> [port]
"""

import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def setup_logging():
    """Configure logging to console and file for debugging.

    Log file location: ~/.docview/logs/viewer.log

    Returns:
        tuple: (console_handler, file_handler) to keep references alive
    """
    logs_dir = Path.home() / ".docview" / "logs"
    log_file_path = logs_dir / "viewer.log"

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    ))

    file_handler = None
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
    except OSError as e:
        # Fall back to console-only logging
        print(f"[WARNING] Failed to create log file {log_file_path}: {e}", file=sys.stderr)
        file_handler = None

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)
    if file_handler:
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    for name in ['nicegui', 'uvicorn', 'engineio', 'socketio', 'asyncio']:
        logging.getLogger(name).setLevel(logging.WARNING)

    return console_handler, file_handler


def main():
    """Main entry point"""
    if len(sys.argv) < 2:
        print(__doc__.strip(), file=sys.stderr)
        sys.exit(2)

    data_path = Path(sys.argv[1])
    port = int(sys.argv[2]) if len(sys.argv) > 2 else 8766

    _handlers = setup_logging()  # noqa: F841 - keep handler references alive
    logger = logging.getLogger(__name__)
    logger.info("Starting docview for %s", data_path)

    from docview.ui.app import run_app
    run_app(data_path, port=port)


if __name__ == "__main__":
    main()
