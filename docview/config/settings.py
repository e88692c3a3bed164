# docview/config/settings.py
"""
Viewer settings management for docview.

設定ファイルの分離方式:
- settings.template.json: デフォルト値（開発者が管理）
- user_settings.json: ユーザーが変更した設定のみ
- 起動時にtemplateを読み込み、user_settingsで上書き

キャッシュ機構:
- _settings_cache: パスをキーとしてViewerSettingsインスタンスをキャッシュ
- ファイルの更新時刻が変わった場合は自動的にリロード
- invalidate_settings_cache()で明示的にキャッシュをクリア可能

The layout heuristics themselves (merge tolerances, rotation penalty weights,
font fitting ratios) are module constants, not settings.
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Module logger
logger = logging.getLogger(__name__)

# Settings cache: path -> (mtime_template, mtime_user, ViewerSettings)
_settings_cache: dict[str, tuple[float, float, "ViewerSettings"]] = {}
_settings_cache_lock = threading.Lock()

# ユーザーが変更可能な設定項目（user_settings.jsonから読み込まれる）
USER_SETTINGS_KEYS = {
    "initial_scale",
    "initial_fit_mode",
    "text_metrics",
}

TEXT_METRICS_BACKENDS = {"pymupdf", "estimate"}
FIT_MODES = {"none", "width", "page"}


@dataclass
class ViewerSettings:
    """Viewer settings"""

    # Page defaults (used when page metadata is missing or invalid)
    default_page_width: float = 595.0     # pt
    default_page_height: float = 841.0    # pt

    # Rotation inference: number of leading elements sampled per page
    rotation_sample_limit: int = 250

    # Zoom
    initial_scale: float = 0.6
    min_scale: float = 0.2
    max_scale: float = 2.5
    zoom_step: float = 0.1

    # Fit modes: padding around the page and minimum usable area (px)
    fit_padding: float = 96.0
    min_fit_area: float = 200.0
    initial_fit_mode: str = "none"        # "none", "width", "page"

    # Text measurement backend: "pymupdf" (font metrics) or "estimate"
    text_metrics: str = "pymupdf"

    @classmethod
    def load(cls, path: Path, use_cache: bool = True) -> "ViewerSettings":
        """Load settings from template and user settings files.

        分離方式:
        1. settings.template.json からデフォルト値を読み込み
        2. user_settings.json でユーザー設定を上書き

        Args:
            path: 設定ファイルのパス（config/settings.json）
                  templateとuser_settingsを探すためのベースパスとして使用
            use_cache: キャッシュを使用するかどうか（デフォルト: True）
        """
        config_dir = path.parent
        template_path = config_dir / "settings.template.json"
        user_settings_path = config_dir / "user_settings.json"

        cache_key = str(path.resolve())

        template_mtime = template_path.stat().st_mtime if template_path.exists() else 0.0
        user_mtime = user_settings_path.stat().st_mtime if user_settings_path.exists() else 0.0

        if use_cache:
            with _settings_cache_lock:
                if cache_key in _settings_cache:
                    cached_template_mtime, cached_user_mtime, cached_settings = _settings_cache[cache_key]
                    if cached_template_mtime == template_mtime and cached_user_mtime == user_mtime:
                        logger.debug("Using cached settings for: %s", path)
                        return cached_settings

        data = {}

        # 1. Load from template (developer defaults)
        if template_path.exists():
            try:
                with open(template_path, 'r', encoding='utf-8-sig') as f:
                    data = json.load(f)
                    logger.debug("Loaded template settings from: %s", template_path)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Failed to load template settings: %s", e)

        # 2. Override with user settings
        if user_settings_path.exists():
            try:
                with open(user_settings_path, 'r', encoding='utf-8-sig') as f:
                    user_data = json.load(f)
                    for key in USER_SETTINGS_KEYS:
                        if key in user_data:
                            data[key] = user_data[key]
                    logger.debug("Loaded user settings from: %s", user_settings_path)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Failed to load user settings: %s", e)

        if not isinstance(data, dict):
            logger.warning("Settings file is not a JSON object, using defaults")
            data = {}

        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        settings = cls(**filtered_data)
        settings._validate()

        with _settings_cache_lock:
            _settings_cache[cache_key] = (template_mtime, user_mtime, settings)

        return settings

    def _validate(self) -> None:
        """Validate and normalize setting values for consistency.

        Invalid values are reset to defaults with warnings.
        """
        if self.default_page_width <= 0:
            logger.warning("default_page_width must be positive (%s), resetting to 595", self.default_page_width)
            self.default_page_width = 595.0
        if self.default_page_height <= 0:
            logger.warning("default_page_height must be positive (%s), resetting to 841", self.default_page_height)
            self.default_page_height = 841.0

        if self.rotation_sample_limit < 1:
            logger.warning("rotation_sample_limit too small (%d), resetting to 250", self.rotation_sample_limit)
            self.rotation_sample_limit = 250

        # Scale range
        if self.min_scale <= 0 or self.min_scale >= self.max_scale:
            logger.warning(
                "Invalid scale range (%.2f - %.2f), resetting to 0.2 - 2.5",
                self.min_scale, self.max_scale,
            )
            self.min_scale = 0.2
            self.max_scale = 2.5
        if not self.min_scale <= self.initial_scale <= self.max_scale:
            logger.warning("initial_scale out of range (%.2f), resetting to 0.6", self.initial_scale)
            self.initial_scale = min(max(0.6, self.min_scale), self.max_scale)
        if self.zoom_step <= 0:
            logger.warning("zoom_step must be positive (%.2f), resetting to 0.1", self.zoom_step)
            self.zoom_step = 0.1

        if self.fit_padding < 0:
            self.fit_padding = 96.0
        if self.min_fit_area < 1:
            self.min_fit_area = 200.0

        if self.initial_fit_mode not in FIT_MODES:
            logger.warning("Unknown initial_fit_mode '%s', resetting to 'none'", self.initial_fit_mode)
            self.initial_fit_mode = "none"

        if self.text_metrics not in TEXT_METRICS_BACKENDS:
            logger.warning("Unknown text_metrics backend '%s', resetting to 'pymupdf'", self.text_metrics)
            self.text_metrics = "pymupdf"


def get_default_settings_path() -> Path:
    """Get default settings file path"""
    return Path(__file__).parent.parent.parent / "config" / "settings.json"


def invalidate_settings_cache(path: Optional[Path] = None) -> None:
    """Invalidate settings cache.

    Args:
        path: 特定のパスのキャッシュのみクリアする場合に指定。
              Noneの場合は全キャッシュをクリア。
    """
    with _settings_cache_lock:
        if path is None:
            _settings_cache.clear()
            logger.debug("Cleared all settings cache")
        else:
            cache_key = str(path.resolve())
            if cache_key in _settings_cache:
                del _settings_cache[cache_key]
                logger.debug("Cleared settings cache for: %s", path)
