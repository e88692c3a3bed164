# docview/processors/page_model.py
"""
Page model normalization.

Builds one canonical PageMeta per page, either from explicit page metadata
or, when none is supplied, from the page numbers referenced by elements.
Missing or invalid dimensions fall back to an A4-ish default; nothing here
raises on malformed input.
"""

import logging
import math
from typing import Any, Iterable, Optional, TYPE_CHECKING

from docview.models.types import (
    DEFAULT_PAGE_HEIGHT,
    DEFAULT_PAGE_WIDTH,
    PageMeta,
    RawElement,
    normalize_rotation,
    to_float,
    to_int,
)

if TYPE_CHECKING:
    from docview.config.settings import ViewerSettings

# Module logger
logger = logging.getLogger(__name__)

# Alternative field names used by different producers (first match wins)
PAGE_NUMBER_KEYS = ("page_number", "page_no", "page")
PAGE_WIDTH_KEYS = ("width", "page_width", "w")
PAGE_HEIGHT_KEYS = ("height", "page_height", "h")
PAGE_ROTATION_KEYS = ("rotation", "rotate", "page_rotation")


def _first_present(data: dict, keys: Iterable[str]) -> Any:
    """Return the first non-None value among keys."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _positive_dimension(value: Any) -> Optional[float]:
    """Return value as a positive finite float, or None if unusable."""
    number = to_float(value)
    if number is None or not math.isfinite(number) or number <= 0:
        return None
    return number


def parse_page(data: Any, position: int, default_width: float, default_height: float) -> PageMeta:
    """
    Convert one raw page dict to PageMeta.

    Args:
        data: Raw page dict (may be malformed)
        position: 0-based position in the pages list (fallback page number)
        default_width: Width used when the page has none
        default_height: Height used when the page has none

    Returns:
        PageMeta with defaults applied
    """
    if not isinstance(data, dict):
        data = {}

    page_no = to_int(_first_present(data, PAGE_NUMBER_KEYS))
    if page_no is None:
        page_no = position + 1

    width = _positive_dimension(_first_present(data, PAGE_WIDTH_KEYS))
    height = _positive_dimension(_first_present(data, PAGE_HEIGHT_KEYS))
    if width is None or height is None:
        logger.debug(
            "Page %d has no usable size, defaulting to %.0fx%.0f",
            page_no, default_width, default_height,
        )

    return PageMeta(
        page_no=page_no,
        width=width if width is not None else default_width,
        height=height if height is not None else default_height,
        rotation=normalize_rotation(_first_present(data, PAGE_ROTATION_KEYS)),
    )


def referenced_pages(elements: Iterable[RawElement]) -> set[int]:
    """Page numbers referenced by elements via `page` or prov[0].page_no."""
    result = set()
    for element in elements:
        page = element.referenced_page
        if page is not None:
            result.add(page)
    return result


def normalize_pages(
    pages: Optional[list],
    elements: list[RawElement],
    settings: Optional["ViewerSettings"] = None,
) -> list[PageMeta]:
    """
    Build the canonical, ascending list of pages.

    Every page number referenced by an element is guaranteed a PageMeta:
    referenced pages missing from explicit metadata are added with the
    default size.

    Args:
        pages: Raw page metadata list (optional)
        elements: Parsed input elements
        settings: Optional settings providing the default page size

    Returns:
        Non-empty list of PageMeta sorted by page number
    """
    default_width = settings.default_page_width if settings else DEFAULT_PAGE_WIDTH
    default_height = settings.default_page_height if settings else DEFAULT_PAGE_HEIGHT

    by_number: dict[int, PageMeta] = {}

    if isinstance(pages, list) and pages:
        for position, raw_page in enumerate(pages):
            meta = parse_page(raw_page, position, default_width, default_height)
            if meta.page_no in by_number:
                logger.debug("Duplicate page number %d in page metadata, keeping first", meta.page_no)
                continue
            by_number[meta.page_no] = meta
    else:
        logger.info("No page metadata supplied, inferring pages from coordinates")

    missing = sorted(referenced_pages(elements) - by_number.keys())
    if missing and by_number:
        logger.info("Pages %s referenced by coordinates have no metadata, using default size", missing)
    for page_no in missing:
        by_number[page_no] = PageMeta(page_no, default_width, default_height, 0)

    if not by_number:
        logger.info("No pages found, synthesizing a single default page")
        by_number[1] = PageMeta(1, default_width, default_height, 0)

    return [by_number[n] for n in sorted(by_number)]


def group_elements_by_page(
    elements: Iterable[RawElement],
    fallback_page: int,
) -> dict[int, list[RawElement]]:
    """
    Assign every element to exactly one page.

    Elements without a page reference go to fallback_page (the page
    currently being viewed).
    """
    grouped: dict[int, list[RawElement]] = {}
    for element in elements:
        page = element.referenced_page
        if page is None:
            page = fallback_page
        grouped.setdefault(page, []).append(element)
    return grouped
