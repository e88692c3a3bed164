# docview/processors/text_metrics.py
"""
Text measurement for font fitting.

The font fitter only needs one capability: the rendered width of a string in
a given font. Two implementations are provided:

- PyMuPDFTextMetrics: glyph advances of PyMuPDF's built-in Base-14 fonts
  (Helvetica / Times). Characters missing from those fonts (CJK etc.) fall
  back to the Unicode width estimate.
- EstimatedTextMetrics: half-width / full-width estimate from Unicode ranges.
  No font files needed.

get_text_metrics() returns a lazily created module-level instance.
"""

import logging
from typing import Optional, Protocol

from docview.models.types import FontSpec

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Lazy Imports
# =============================================================================
_pymupdf = None


def _get_pymupdf():
    """Lazy import PyMuPDF"""
    global _pymupdf
    if _pymupdf is None:
        import pymupdf
        _pymupdf = pymupdf
    return _pymupdf


# Base-14 font names understood by pymupdf.Font(fontname=...)
BASE14_FONTS = {
    (False, False): "helv",   # Helvetica
    (False, True): "hebo",    # Helvetica-Bold
    (True, False): "tiro",    # Times-Roman
    (True, True): "tibo",     # Times-Bold
}


def estimate_char_width(char: str) -> float:
    """
    Estimate normalized character width (0.0-1.0) based on Unicode properties.

    Args:
        char: Single character

    Returns:
        Normalized character width (multiply by font size for points)
    """
    code = ord(char)

    # Half-width characters -> 0.5
    if (0x0020 <= code <= 0x00FF or  # Basic Latin, Latin-1 Supplement
            0xFF61 <= code <= 0xFF9F):   # Halfwidth Katakana
        return 0.5

    # Full-width characters -> 1.0
    if (0x3000 <= code <= 0x30FF or  # CJK Symbols, Hiragana, Katakana
            0x3400 <= code <= 0x4DBF or  # CJK Extension A
            0x4E00 <= code <= 0x9FFF or  # CJK Unified Ideographs
            0xAC00 <= code <= 0xD7AF or  # Hangul Syllables
            0xFF00 <= code <= 0xFF60 or  # Fullwidth Forms
            0xFFA0 <= code <= 0xFFEF):
        return 1.0

    if code > 0x2E7F:
        return 1.0
    return 0.5


class TextMetrics(Protocol):
    """Measures the rendered width of a string."""

    def measure(self, text: str, font: FontSpec) -> float:
        """Width of `text` in points when set in `font`."""
        ...


class EstimatedTextMetrics:
    """Width estimate from Unicode width classes."""

    def measure(self, text: str, font: FontSpec) -> float:
        width = sum(estimate_char_width(c) for c in text)
        if font.is_bold:
            # Bold faces run roughly 5% wider
            width *= 1.05
        return width * font.size


class PyMuPDFTextMetrics:
    """
    Width from Base-14 font glyph advances.

    Font objects and per-character advances are cached per font name.
    """

    def __init__(self):
        self._fonts: dict[str, object] = {}
        # (font name, char) -> normalized advance
        self._advance_cache: dict[tuple[str, str], float] = {}

    def _get_font(self, name: str):
        font = self._fonts.get(name)
        if font is None:
            pymupdf = _get_pymupdf()
            font = pymupdf.Font(fontname=name)
            self._fonts[name] = font
            logger.debug("Created Base-14 font object: %s", name)
        return font

    def _char_advance(self, name: str, char: str) -> float:
        key = (name, char)
        cached = self._advance_cache.get(key)
        if cached is not None:
            return cached

        font = self._get_font(name)
        code = ord(char)
        if font.has_glyph(code):
            advance = font.glyph_advance(code)
        else:
            advance = estimate_char_width(char)
        self._advance_cache[key] = advance
        return advance

    def measure(self, text: str, font: FontSpec) -> float:
        name = BASE14_FONTS[(font.serif, font.is_bold)]
        return sum(self._char_advance(name, c) for c in text) * font.size


# =============================================================================
# Singleton
# =============================================================================
_text_metrics: Optional[TextMetrics] = None


def create_text_metrics(backend: str = "pymupdf") -> TextMetrics:
    """
    Create a TextMetrics implementation.

    Args:
        backend: "pymupdf" or "estimate"

    Raises:
        ValueError: Unknown backend name
    """
    if backend == "pymupdf":
        return PyMuPDFTextMetrics()
    if backend == "estimate":
        return EstimatedTextMetrics()
    raise ValueError(f"Unknown text metrics backend: {backend}")


def get_text_metrics(backend: Optional[str] = None) -> TextMetrics:
    """
    Get the shared TextMetrics instance, creating it on first use.

    Args:
        backend: Backend for the first creation. Defaults to the configured
                 `text_metrics` setting.
    """
    global _text_metrics
    if _text_metrics is None:
        if backend is None:
            from docview.config.settings import ViewerSettings, get_default_settings_path
            backend = ViewerSettings.load(get_default_settings_path()).text_metrics
        _text_metrics = create_text_metrics(backend)
        logger.debug("Text metrics backend: %s", backend)
    return _text_metrics


def reset_text_metrics() -> None:
    """Drop the shared instance (next get_text_metrics() recreates it)."""
    global _text_metrics
    _text_metrics = None
