# docview/processors/rect_projector.py
"""
Rect Projector.

Converts one element's raw geometry into an axis-aligned page-space rect:
provenance bboxes are normalized and flipped for bottom-left origins,
alternate x/y/width/height geometry is scaled by the page's ResolvedScale,
and finally the page's effective rotation is applied.

Malformed geometry (non-finite values, negative or zero extents) yields None;
such elements are expected noise from heterogeneous producers and are
dropped silently.
"""

import logging
from typing import Iterable, Optional

from docview.models.types import BoundingBox, PageMeta, RawElement, Rect, ResolvedScale
from docview.processors.rotation import ROTATION_SAMPLE_LIMIT, rotate_rect

# Module logger
logger = logging.getLogger(__name__)


def bbox_to_rect(bbox: BoundingBox, page_height: float) -> Rect:
    """
    Normalize a provenance bbox to a top-left origin rect.

    l/r and t/b may be swapped by the producer; min/max is taken. For a
    bottom-left origin the vertical axis is flipped against the page height.
    """
    x0 = min(bbox.l, bbox.r)
    x1 = max(bbox.l, bbox.r)
    y0 = min(bbox.t, bbox.b)
    y1 = max(bbox.t, bbox.b)
    top = page_height - y1 if bbox.is_bottom_left else y0
    return Rect(x0, top, x1 - x0, y1 - y0)


def alternate_to_rect(element: RawElement, scale: ResolvedScale) -> Rect:
    """Scale alternate-form geometry to page points, normalizing negative extents."""
    x0 = min(element.x, element.x + element.width)
    x1 = max(element.x, element.x + element.width)
    y0 = min(element.y, element.y + element.height)
    y1 = max(element.y, element.y + element.height)
    return Rect(x0 * scale.sx, y0 * scale.sy, (x1 - x0) * scale.sx, (y1 - y0) * scale.sy)


def base_rect(element: RawElement, page: PageMeta, scale: ResolvedScale) -> Optional[Rect]:
    """
    Pre-rotation page-space rect of an element, without validity checks.

    A usable provenance bbox always wins over alternate geometry.
    Returns None only when the element has no geometry at all.
    """
    bbox = element.provenance_bbox(page.page_no)
    if bbox is not None:
        return bbox_to_rect(bbox, page.height)
    if element.has_alternate_geometry:
        return alternate_to_rect(element, scale)
    return None


def sample_rects(
    page: PageMeta,
    elements: Iterable[RawElement],
    scale: ResolvedScale,
    limit: int = ROTATION_SAMPLE_LIMIT,
) -> list[Rect]:
    """
    Pre-rotation rects of the first `limit` elements for rotation inference.

    Only finite rects are kept; their extents are not otherwise checked.
    """
    result = []
    for count, element in enumerate(elements):
        if count >= limit:
            break
        rect = base_rect(element, page, scale)
        if rect is not None and rect.is_finite:
            result.append(rect)
    return result


def project_rect(
    element: RawElement,
    page: PageMeta,
    scale: ResolvedScale,
    rotation: int,
) -> Optional[Rect]:
    """
    Project one element to a renderable rect in the rotated page frame.

    Pure function of (element, page, scale, rotation).

    Args:
        element: Parsed input element
        page: Page the element is rendered on
        scale: Resolved alternate-form scale of the page
        rotation: Effective (inferred) rotation of the page

    Returns:
        Rect with positive finite extents, or None if the geometry is
        missing or malformed.
    """
    rect = base_rect(element, page, scale)
    if rect is None:
        return None

    if not rect.is_finite or rect.width < 0 or rect.height < 0:
        logger.debug("Dropping element %d: malformed geometry %s", element.index, rect)
        return None

    rotated = rotate_rect(rect, page.width, page.height, rotation)
    if not rotated.is_renderable:
        logger.debug("Dropping element %d: empty rect %s", element.index, rotated)
        return None
    return rotated
