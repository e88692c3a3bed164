# docview/__init__.py
"""
docview - Structured document view

Reconstructs the visual layout of a paginated document from extracted
layout metadata (bounding boxes, text fragments, table grids, page sizes).
"""

from pathlib import Path


def _get_version() -> str:
    """
    pyproject.tomlからバージョンを動的に取得する。

    Returns:
        str: バージョン文字列（例: "0.1.0"）
    """
    try:
        import tomllib  # Python 3.11+ standard library

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
            return data.get("project", {}).get("version", "0.0.0")
    except (ImportError, OSError, ValueError):
        pass

    # フォールバック: ハードコードされたバージョン
    return "0.1.0"


__version__ = _get_version()
__app_name__ = "docview"
