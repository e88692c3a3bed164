# docview/processors/coordinate_resolver.py
"""
Coordinate System Resolver.

Producers disagree on the units of alternate-form (x/y/width/height)
coordinates: fractions of the page, native page points, or rasterization
pixels. The convention is sniffed once per page from the extent of all
alternate-form elements and resolved into a ResolvedScale that the Rect
Projector applies to every element of that page.
"""

import logging
from typing import Iterable

import numpy as np

from docview.models.types import CoordinateMode, PageMeta, RawElement, ResolvedScale

# Module logger
logger = logging.getLogger(__name__)

# Normalized coordinates may overshoot 1.0 slightly (rounding, bleed boxes)
NORMALIZED_MAX_EXTENT = 1.5
NORMALIZED_MIN_EXTENT = -0.1

# Extent within this fraction of the page size means "already in points"
POINTS_MIN_RATIO = 0.5
POINTS_MAX_RATIO = 1.25

POINTS_SCALE = ResolvedScale(CoordinateMode.POINTS, 1.0, 1.0)


def resolve_scale(page: PageMeta, elements: Iterable[RawElement]) -> ResolvedScale:
    """
    Classify the page's alternate-form coordinates and derive a scale factor.

    Args:
        page: Page the elements belong to
        elements: All elements assigned to the page (provenance-form
                  elements are ignored)

    Returns:
        ResolvedScale mapping alternate-form units to page points.
        Pages without alternate-form elements resolve to points (1, 1).
    """
    boxes = [
        (e.x, e.y, e.x + e.width, e.y + e.height)
        for e in elements
        if e.has_finite_alternate_geometry
    ]
    if not boxes:
        return POINTS_SCALE

    arr = np.asarray(boxes, dtype=float)
    min_x = float(arr[:, 0].min())
    min_y = float(arr[:, 1].min())
    max_x = float(arr[:, 2].max())
    max_y = float(arr[:, 3].max())

    looks_normalized = (
        max_x <= NORMALIZED_MAX_EXTENT
        and max_y <= NORMALIZED_MAX_EXTENT
        and min_x >= NORMALIZED_MIN_EXTENT
        and min_y >= NORMALIZED_MIN_EXTENT
    )
    if looks_normalized:
        logger.debug("Page %d: normalized coordinates (extent %.3f x %.3f)", page.page_no, max_x, max_y)
        return ResolvedScale(CoordinateMode.NORMALIZED, page.width, page.height)

    within_points_x = page.width * POINTS_MIN_RATIO <= max_x <= page.width * POINTS_MAX_RATIO
    within_points_y = page.height * POINTS_MIN_RATIO <= max_y <= page.height * POINTS_MAX_RATIO
    if within_points_x and within_points_y:
        logger.debug("Page %d: point coordinates (extent %.1f x %.1f)", page.page_no, max_x, max_y)
        return POINTS_SCALE

    # Pixels (or some other unit): fit the extent to the page
    sx = page.width / max_x if max_x > 0 else 1.0
    sy = page.height / max_y if max_y > 0 else 1.0
    logger.debug(
        "Page %d: pixel coordinates (extent %.1f x %.1f), scale %.4f x %.4f",
        page.page_no, max_x, max_y, sx, sy,
    )
    return ResolvedScale(CoordinateMode.PIXELS, sx, sy)
