# docview/processors/line_merger.py
"""
Text Line Merger.

OCR and layout producers often emit one element per word or even per glyph.
Fragments are merged back into text runs in two passes:

1. Vertical clustering: elements with the same label whose vertical midpoint
   is close to a group's running average midpoint form a line group.
2. Horizontal merge: within a line group, left-to-right neighbours whose gap
   is small relative to their height are joined into one run.

This approximates reading order without a general reading-order solver.
Every candidate element ends up in exactly one run, so the runs'
source_indices partition the rendered elements of the page.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from docview.models.types import MergedElement, RawElement, Rect

# Module logger
logger = logging.getLogger(__name__)

# Vertical clustering tolerance: max(MIN, RATIO * min(element h, group avg h))
LINE_Y_TOLERANCE_MIN = 4.0
LINE_Y_TOLERANCE_RATIO = 0.6

# Horizontal merge threshold: max(MIN, RATIO * min(run h, next h))
WORD_GAP_MIN = 4.0
WORD_GAP_RATIO = 0.45

DEFAULT_LABEL = "text"

_RE_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs to a single space and trim."""
    return _RE_WHITESPACE.sub(" ", value).strip()


@dataclass
class _Candidate:
    element: RawElement
    rect: Rect
    raw_text: str       # Trimmed text
    merge_text: str     # Whitespace-normalized text
    label: str

    @property
    def mid_y(self) -> float:
        return self.rect.mid_y


@dataclass
class _LineGroup:
    label: str
    mid_y: float
    avg_height: float
    items: list[_Candidate] = field(default_factory=list)

    def accepts(self, item: _Candidate) -> bool:
        tolerance = max(
            LINE_Y_TOLERANCE_MIN,
            min(item.rect.height, self.avg_height) * LINE_Y_TOLERANCE_RATIO,
        )
        return item.label == self.label and abs(item.mid_y - self.mid_y) <= tolerance

    def add(self, item: _Candidate) -> None:
        # Running averages are updated incrementally
        self.items.append(item)
        count = len(self.items)
        self.mid_y = (self.mid_y * (count - 1) + item.mid_y) / count
        self.avg_height = (self.avg_height * (count - 1) + item.rect.height) / count


def _build_candidates(
    elements: Iterable[RawElement],
    project: Callable[[RawElement], Optional[Rect]],
) -> list[_Candidate]:
    candidates = []
    for element in elements:
        if element.is_table:
            continue
        raw_text = element.text.strip()
        if not raw_text:
            continue
        rect = project(element)
        if rect is None:
            continue
        candidates.append(
            _Candidate(
                element=element,
                rect=rect,
                raw_text=raw_text,
                merge_text=normalize_whitespace(raw_text),
                label=(element.label or DEFAULT_LABEL).lower(),
            )
        )
    return candidates


def _group_lines(candidates: list[_Candidate]) -> list[_LineGroup]:
    groups: list[_LineGroup] = []
    for item in candidates:
        for group in groups:
            if group.accepts(item):
                group.add(item)
                break
        else:
            group = _LineGroup(label=item.label, mid_y=item.mid_y, avg_height=item.rect.height)
            group.items.append(item)
            groups.append(group)
    return groups


def _merge_group(group: _LineGroup) -> list[MergedElement]:
    """Join horizontally adjacent members of one line group into runs."""
    ordered = sorted(group.items, key=lambda c: c.rect.left)
    runs: list[MergedElement] = []

    current = ordered[0]
    current_rect = current.rect
    current_text = current.raw_text
    current_indices = [current.element.index]

    def flush() -> None:
        unique_indices = tuple(dict.fromkeys(current_indices))
        runs.append(
            MergedElement(
                element=current.element,
                text=current_text,
                rect=current_rect,
                label=current.label,
                source_indices=unique_indices,
            )
        )

    for item in ordered[1:]:
        gap = item.rect.left - current_rect.right
        gap_threshold = max(WORD_GAP_MIN, min(current_rect.height, item.rect.height) * WORD_GAP_RATIO)
        if gap <= gap_threshold:
            current_text = f"{normalize_whitespace(current_text)} {item.merge_text}".strip()
            current_rect = current_rect.union(item.rect)
            current_indices.append(item.element.index)
        else:
            flush()
            current = item
            current_rect = item.rect
            current_text = item.raw_text
            current_indices = [item.element.index]

    flush()
    return runs


def merge_text_lines(
    elements: Iterable[RawElement],
    project: Callable[[RawElement], Optional[Rect]],
) -> list[MergedElement]:
    """
    Merge a page's text fragments into line runs.

    Args:
        elements: Elements of one page (table elements are skipped)
        project: Projects an element to its rendered rect, or None to drop it

    Returns:
        Merged runs, grouped line by line in top-to-bottom order of each
        line's first element, left to right within a line.
    """
    candidates = _build_candidates(elements, project)
    if not candidates:
        return []

    candidates.sort(key=lambda c: (c.rect.top, c.rect.left))
    groups = _group_lines(candidates)

    merged: list[MergedElement] = []
    for group in groups:
        merged.extend(_merge_group(group))

    logger.debug("Merged %d text fragments into %d runs", len(candidates), len(merged))
    return merged
