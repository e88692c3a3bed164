# docview/processors/font_fitter.py
"""
Dynamic Font Fitter.

Picks a uniform font size (and line wrapping) so that a text run fills its
layout rectangle without overflowing it.

Text is wrapped once at a baseline size, then the size is derived from the
binding constraint:
    maxByHeight = h / (lines * LINE_HEIGHT) * semanticScale
    maxByWidth  = w * BASELINE / widest line at BASELINE
capped at 92% (one line) / 88% (several lines) of the box height.

Wrapping is not repeated at the final size. Wrapped width scales linearly
with the font size, so the widest line still fits horizontally; only the
line breaks may differ from a wrap computed at the final size.
"""

import logging
import re
from typing import Optional

from docview.models.types import FittedText, FontSpec, TextStyle
from docview.processors.text_metrics import TextMetrics, get_text_metrics

# Module logger
logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================
BASELINE_FONT_SIZE = 10.0
LINE_HEIGHT = 1.18
MIN_FONT_SIZE = 1.0
MAX_FONT_SIZE = 256.0
DEGENERATE_FONT_SIZE = 12.0

SINGLE_LINE_HEIGHT_CAP = 0.92
MULTI_LINE_HEIGHT_CAP = 0.88

SERIF_FAMILY = 'ui-serif, Georgia, Cambria, "Times New Roman", Times, serif'
SANS_FAMILY = (
    'ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, '
    '"Apple Color Emoji", "Segoe UI Emoji"'
)

_RE_WHITESPACE = re.compile(r"\s+")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def get_text_style(label: Optional[str]) -> TextStyle:
    """
    Semantic styling for an element label.

    Titles and section headers: serif, bold, centered, no padding.
    Everything else: sans-serif, regular, left-aligned, 1pt padding.
    Footnotes and captions are scaled down slightly.
    """
    name = (label or "").lower()
    is_title = name == "title"
    is_section_header = name in ("section_header", "section-header") or "header" in name
    is_footnote = name in ("footnote", "caption")
    is_heading = is_title or is_section_header

    if is_title:
        semantic_scale = 1.15
    elif is_section_header:
        semantic_scale = 1.05
    elif is_footnote:
        semantic_scale = 0.9
    else:
        semantic_scale = 1.0

    return TextStyle(
        font_weight=700 if is_heading else 400,
        text_align="center" if is_heading else "left",
        align_items="flex-start",
        justify_content="center" if is_heading else "flex-start",
        padding=0.0 if is_heading else 1.0,
        family=SERIF_FAMILY if is_heading else SANS_FAMILY,
        serif=is_heading,
        semantic_scale=semantic_scale,
    )


def font_for_style(style: TextStyle, size: float = BASELINE_FONT_SIZE) -> FontSpec:
    return FontSpec(family=style.family, weight=style.font_weight, size=size, serif=style.serif)


def _split_word(word: str, max_width: float, font: FontSpec, metrics: TextMetrics) -> list[str]:
    """Break a word wider than max_width into character fragments.

    Every fragment keeps at least one character.
    """
    fragments = []
    fragment = ""
    for char in word:
        candidate = fragment + char
        if not fragment or metrics.measure(candidate, font) <= max_width:
            fragment = candidate
        else:
            fragments.append(fragment)
            fragment = char
    fragments.append(fragment)
    return fragments


def wrap_text_to_lines(
    text: str,
    max_width: float,
    font: FontSpec,
    metrics: TextMetrics,
) -> list[str]:
    """
    Greedy word wrap.

    Paragraph breaks ('\\n') are preserved; an empty paragraph yields an
    empty line. Whitespace inside a paragraph collapses to single spaces.

    Args:
        text: Text to wrap
        max_width: Maximum line width in points
        font: Font used for measuring
        metrics: Text measurement backend

    Returns:
        Wrapped lines (never empty)
    """
    if not text:
        return [""]
    if max_width <= 0:
        return text.split("\n")

    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = [w for w in _RE_WHITESPACE.split(paragraph) if w]
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            if current:
                combined = f"{current} {word}"
                if metrics.measure(combined, font) <= max_width:
                    current = combined
                    continue
                lines.append(current)
                current = ""

            if metrics.measure(word, font) <= max_width:
                current = word
            else:
                *full, current = _split_word(word, max_width, font, metrics)
                lines.extend(full)

        if current:
            lines.append(current)

    return lines or [""]


def fit_text(
    width: float,
    height: float,
    text: str,
    label: Optional[str] = None,
    metrics: Optional[TextMetrics] = None,
) -> FittedText:
    """
    Compute a font size and line wrapping so that text fills a box.

    Args:
        width: Inner box width in points
        height: Inner box height in points
        text: Text of the run
        label: Element label (selects the semantic style)
        metrics: Text measurement backend (default: shared instance)

    Returns:
        FittedText with a font size in [MIN_FONT_SIZE, MAX_FONT_SIZE].
        Degenerate input (no text, empty box) gets DEGENERATE_FONT_SIZE
        and the text split on newlines.
    """
    style = get_text_style(label)

    if not text or width <= 0 or height <= 0:
        return FittedText(
            font_size=DEGENERATE_FONT_SIZE,
            lines=text.split("\n") if text else [""],
            style=style,
        )

    if metrics is None:
        metrics = get_text_metrics()

    font = font_for_style(style)
    lines = wrap_text_to_lines(text, width, font, metrics)
    max_width_at_base = max((metrics.measure(line, font) for line in lines), default=0.0)

    line_count = max(1, len(lines))
    max_by_height = height / (line_count * LINE_HEIGHT) * style.semantic_scale

    max_by_width = max_by_height
    if max_width_at_base > 0:
        max_by_width = width * BASELINE_FONT_SIZE / max_width_at_base

    cap_ratio = SINGLE_LINE_HEIGHT_CAP if line_count == 1 else MULTI_LINE_HEIGHT_CAP
    hard_cap = height * cap_ratio

    font_size = clamp(min(max_by_height, max_by_width, hard_cap), MIN_FONT_SIZE, MAX_FONT_SIZE)
    return FittedText(font_size=font_size, lines=lines, style=style)
