# docview/processors/rotation.py
"""
Rotation Inference Engine.

Upstream page metadata often declares the wrong rotation (or none) for
scanned or landscape pages. The effective rotation is inferred by trying
every right-angle rotation against a sample of the page's rectangles and
picking the one that keeps them inside the page best.

Scoring (lower is better, 0 means every sampled rect is inside the page):
    areaPenalty + EDGE_PENALTY_WEIGHT * edgePenalty
where edgePenalty is the linear overflow beyond each page edge and
areaPenalty is that overflow multiplied by the rect's extent along the edge.
"""

import logging
from typing import Sequence

import numpy as np

from docview.models.types import PageMeta, Rect, VALID_ROTATIONS

# Module logger
logger = logging.getLogger(__name__)

ROTATION_CANDIDATES = VALID_ROTATIONS
EDGE_PENALTY_WEIGHT = 5.0
# Bonus for the declared rotation so that exact ties keep it
DECLARED_ROTATION_BONUS = 0.0001
# Maximum number of leading elements sampled per page
ROTATION_SAMPLE_LIMIT = 250


def rotated_page_size(width: float, height: float, rotation: int) -> tuple[float, float]:
    """Page size after rotation (width/height swap for 90 and 270)."""
    if rotation in (90, 270):
        return height, width
    return width, height


def _rotate_points(xs, ys, page_width: float, page_height: float, rotation: int):
    """
    Rotate points given in top-left origin, y-down page space.

    Works on floats and numpy arrays alike.
    """
    if rotation == 90:
        return page_height - ys, xs
    if rotation == 180:
        return page_width - xs, page_height - ys
    if rotation == 270:
        return ys, page_width - xs
    return xs, ys


def rotate_rect(rect: Rect, page_width: float, page_height: float, rotation: int) -> Rect:
    """
    Rotate a rect's four corners and return their axis-aligned bounding box.

    Args:
        rect: Rect in unrotated page space
        page_width: Unrotated page width
        page_height: Unrotated page height
        rotation: 0, 90, 180 or 270

    Returns:
        Rect in the rotated page frame
    """
    if rotation == 0:
        return rect

    xs = np.array([rect.left, rect.right, rect.left, rect.right], dtype=float)
    ys = np.array([rect.top, rect.top, rect.bottom, rect.bottom], dtype=float)
    rx, ry = _rotate_points(xs, ys, page_width, page_height, rotation)

    x0 = float(rx.min())
    x1 = float(rx.max())
    y0 = float(ry.min())
    y1 = float(ry.max())
    return Rect(x0, y0, x1 - x0, y1 - y0)


def out_of_bounds_score(rect: Rect, page_width: float, page_height: float) -> float:
    """Out-of-bounds penalty of a single rect (0 means fully inside)."""
    boxes = np.asarray([rect.as_box()], dtype=float)
    return _score_rotation(boxes, page_width, page_height, 0)


def _score_rotation(boxes: np.ndarray, page_width: float, page_height: float, rotation: int) -> float:
    """
    Total out-of-bounds score of all sample boxes under one rotation.

    Args:
        boxes: (n, 4) array of left, top, right, bottom
    """
    left, top, right, bottom = boxes[:, 0], boxes[:, 1], boxes[:, 2], boxes[:, 3]

    # Corners: (n, 4) arrays
    xs = np.stack([left, right, left, right], axis=1)
    ys = np.stack([top, top, bottom, bottom], axis=1)
    rx, ry = _rotate_points(xs, ys, page_width, page_height, rotation)

    x0 = rx.min(axis=1)
    x1 = rx.max(axis=1)
    y0 = ry.min(axis=1)
    y1 = ry.max(axis=1)

    rot_w, rot_h = rotated_page_size(page_width, page_height, rotation)

    over_left = np.maximum(0.0, -x0)
    over_top = np.maximum(0.0, -y0)
    over_right = np.maximum(0.0, x1 - rot_w)
    over_bottom = np.maximum(0.0, y1 - rot_h)

    edge_penalty = over_left + over_top + over_right + over_bottom
    area_penalty = (over_left + over_right) * (y1 - y0) + (over_top + over_bottom) * (x1 - x0)
    return float(np.sum(area_penalty + edge_penalty * EDGE_PENALTY_WEIGHT))


def infer_rotation(page: PageMeta, sample: Sequence[Rect]) -> int:
    """
    Pick the rotation that keeps the sampled rects inside the page best.

    Deterministic: candidates are tried in a fixed order and the declared
    rotation wins exact ties.

    Args:
        page: Page metadata (declared size and rotation)
        sample: Pre-rotation page-space rects of the page's elements

    Returns:
        Effective rotation (0, 90, 180 or 270). The declared rotation if
        the sample is empty.
    """
    if not sample:
        return page.rotation

    boxes = np.asarray([r.as_box() for r in sample], dtype=float)

    best_rotation = page.rotation
    best_score = float("inf")
    for rotation in ROTATION_CANDIDATES:
        score = _score_rotation(boxes, page.width, page.height, rotation)
        if rotation == page.rotation:
            score -= DECLARED_ROTATION_BONUS
        if score < best_score:
            best_score = score
            best_rotation = rotation

    if best_rotation != page.rotation:
        logger.info(
            "Page %d: inferred rotation %d (declared %d, %d samples)",
            page.page_no, best_rotation, page.rotation, len(sample),
        )
    return best_rotation
