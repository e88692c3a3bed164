# docview/models/types.py
"""
Core data types for docview.

Inputs arrive as loosely-typed dicts from an upstream extraction pipeline.
They are parsed once into the read-only types below; everything downstream
(projection, merging, fitting) works on these types only.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


# Default page size in points (A4-ish) used when page metadata is missing
DEFAULT_PAGE_WIDTH = 595.0
DEFAULT_PAGE_HEIGHT = 841.0

VALID_ROTATIONS = (0, 90, 180, 270)


def to_float(value: Any) -> Optional[float]:
    """Coerce an external value to float. Returns None for missing/non-numeric input.

    Booleans are rejected even though they are ints in Python.
    Non-finite results (NaN, inf) are returned as-is so callers can decide
    whether to drop them.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def safe_num(value: Any, fallback: float) -> float:
    """Return value as a finite float, or fallback."""
    number = to_float(value)
    if number is None or not math.isfinite(number):
        return fallback
    return number


def to_int(value: Any) -> Optional[int]:
    """Coerce a page number or index to int. Non-finite or non-numeric -> None."""
    number = to_float(value)
    if number is None or not math.isfinite(number):
        return None
    return int(round(number))


def normalize_rotation(value: Any) -> int:
    """Normalize a rotation to one of 0/90/180/270 (anything else becomes 0)."""
    n = int(round(safe_num(value, 0.0)))
    normalized = n % 360
    if normalized in (90, 180, 270):
        return normalized
    return 0


class CoordinateMode(Enum):
    """Unit convention of alternate-form (x/y/width/height) coordinates"""
    POINTS = "points"            # Already in page units
    NORMALIZED = "normalized"    # Fractions of the page (0-1)
    PIXELS = "pixels"            # Rasterization pixels or other foreign units


class FitMode(Enum):
    """Viewport fit modes"""
    NONE = "none"
    WIDTH = "width"
    PAGE = "page"


@dataclass(frozen=True)
class PageMeta:
    """
    Canonical page metadata, one per physical page.

    Attributes:
        page_no: Page number as used by the input data (0- or 1-based)
        width: Page width in points (> 0)
        height: Page height in points (> 0)
        rotation: Declared rotation (0, 90, 180 or 270)
    """
    page_no: int
    width: float = DEFAULT_PAGE_WIDTH
    height: float = DEFAULT_PAGE_HEIGHT
    rotation: int = 0


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in page space (points, top-left origin, y down).
    """
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def mid_y(self) -> float:
        return self.top + self.height / 2

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.left, self.top, self.width, self.height))

    @property
    def is_renderable(self) -> bool:
        """True if the rect may reach the presentation layer."""
        return self.is_finite and self.width > 0 and self.height > 0

    def union(self, other: "Rect") -> "Rect":
        """Smallest rect containing both rects."""
        left = min(self.left, other.left)
        top = min(self.top, other.top)
        right = max(self.right, other.right)
        bottom = max(self.bottom, other.bottom)
        return Rect(left, top, right - left, bottom - top)

    def as_box(self) -> tuple[float, float, float, float]:
        """Return (x0, y0, x1, y1)"""
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class BoundingBox:
    """Provenance bbox as produced by the extraction pipeline."""
    l: float  # noqa: E741
    t: float
    r: float
    b: float
    coord_origin: Optional[str] = None

    @property
    def is_bottom_left(self) -> bool:
        """True if the vertical axis originates at the bottom of the page."""
        origin = (self.coord_origin or "").upper()
        return origin.startswith("BOTTOM") or origin == "BL"

    @classmethod
    def from_dict(cls, data: Any) -> Optional["BoundingBox"]:
        """Parse a bbox dict. Returns None unless `l` is numeric."""
        if not isinstance(data, dict):
            return None
        left = to_float(data.get("l"))
        if left is None:
            return None
        nan = float("nan")
        right = to_float(data.get("r"))
        top = to_float(data.get("t"))
        bottom = to_float(data.get("b"))
        origin = data.get("coord_origin")
        return cls(
            l=left,
            t=top if top is not None else nan,
            r=right if right is not None else nan,
            b=bottom if bottom is not None else nan,
            coord_origin=origin if isinstance(origin, str) else None,
        )


@dataclass(frozen=True)
class Provenance:
    """A (page_no, bbox) pair from an element's `prov` list."""
    page_no: Optional[int]
    bbox: Optional[BoundingBox]

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Provenance"]:
        if not isinstance(data, dict):
            return None
        return cls(
            page_no=to_int(data.get("page_no")),
            bbox=BoundingBox.from_dict(data.get("bbox")),
        )


@dataclass(frozen=True)
class RawElement:
    """
    Read-only view of one input coordinate element.

    Geometry comes in one of two shapes:
    - provenance form: prov[] entries carrying a bbox{l,t,r,b,coord_origin}
    - alternate form: x/y/width/height on the element itself

    Attributes:
        index: Position in the input coordinates list (provenance for callers)
        raw: The original input dict
    """
    index: int
    page: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    text: str = ""
    label: Optional[str] = None
    prov: tuple[Provenance, ...] = ()
    is_table: bool = False
    table_index: Optional[int] = None
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, index: int, data: Any) -> "RawElement":
        """Parse an input dict. Unknown or malformed fields are ignored."""
        if not isinstance(data, dict):
            return cls(index=index)

        page = data.get("page")
        prov_data = data.get("prov")
        prov: list[Provenance] = []
        if isinstance(prov_data, list):
            for item in prov_data:
                parsed = Provenance.from_dict(item)
                if parsed is not None:
                    prov.append(parsed)

        text = data.get("text")
        if not isinstance(text, str):
            text = data.get("orig")
        label = data.get("label")
        table_index = data.get("tableIndex")

        return cls(
            index=index,
            # Only numeric page values count as an explicit page
            page=to_int(page) if not isinstance(page, str) else None,
            x=to_float(data.get("x")),
            y=to_float(data.get("y")),
            width=to_float(data.get("width")),
            height=to_float(data.get("height")),
            text=text if isinstance(text, str) else "",
            label=label if isinstance(label, str) else None,
            prov=tuple(prov),
            is_table=bool(data.get("isTable")),
            table_index=to_int(table_index),
            raw=data,
        )

    @property
    def referenced_page(self) -> Optional[int]:
        """Page referenced by `page`, else by prov[0].page_no."""
        if self.page is not None:
            return self.page
        if self.prov:
            return self.prov[0].page_no
        return None

    @property
    def has_alternate_geometry(self) -> bool:
        return None not in (self.x, self.y, self.width, self.height)

    @property
    def has_finite_alternate_geometry(self) -> bool:
        return self.has_alternate_geometry and all(
            math.isfinite(v) for v in (self.x, self.y, self.width, self.height)
        )

    def provenance_bbox(self, page_no: int) -> Optional[BoundingBox]:
        """Bbox of the prov entry matching page_no, else the first available bbox."""
        for entry in self.prov:
            if entry.page_no == page_no and entry.bbox is not None:
                return entry.bbox
        if self.prov:
            return self.prov[0].bbox
        return None


@dataclass(frozen=True)
class ResolvedScale:
    """Per-page resolution of alternate-form coordinates to page points."""
    mode: CoordinateMode = CoordinateMode.POINTS
    sx: float = 1.0
    sy: float = 1.0


@dataclass(frozen=True)
class MergedElement:
    """
    A text run built from one or more raw elements of the same line.

    Attributes:
        element: First raw element of the run (label, table linkage, raw data)
        text: Concatenated text
        rect: Union rectangle of all merged elements
        source_indices: Original input positions, deduplicated, in merge order
    """
    element: RawElement
    text: str
    rect: Rect
    label: str
    source_indices: tuple[int, ...]

    @property
    def original_index(self) -> int:
        return self.source_indices[0]


@dataclass
class TableModel:
    """Normalized table: every header/row is padded or truncated to col_count."""
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    col_count: int = 1

    @property
    def has_header(self) -> bool:
        return any(h.strip() for h in self.headers)

    @property
    def is_empty(self) -> bool:
        return not self.rows and not self.has_header


@dataclass
class ViewportState:
    """Zoom / fit / page selection owned by the viewport controller."""
    scale: float = 0.6
    fit_mode: FitMode = FitMode.NONE
    external_current_page: int = 1
    highlighted_index: Optional[int] = None


@dataclass(frozen=True)
class FontSpec:
    """Font used for measuring and rendering a run."""
    family: str                      # CSS font-family stack
    weight: int = 400
    size: float = 10.0
    serif: bool = False

    @property
    def is_bold(self) -> bool:
        return self.weight >= 600


@dataclass(frozen=True)
class TextStyle:
    """Semantic styling selected from an element label."""
    font_weight: int
    text_align: str
    align_items: str
    justify_content: str
    padding: float
    family: str
    serif: bool
    semantic_scale: float


@dataclass
class FittedText:
    """Result of font fitting: uniform font size plus wrapped lines."""
    font_size: float
    lines: list[str]
    style: Optional[TextStyle] = None

    @property
    def rendered_text(self) -> str:
        return "\n".join(self.lines)


@dataclass
class RenderedTextRun:
    """A merged text run ready for the presentation layer."""
    merged: MergedElement
    rect: Rect
    padding: float
    inner_width: float
    inner_height: float
    fitted: FittedText
    highlighted: bool = False

    @property
    def original_index(self) -> int:
        return self.merged.original_index

    @property
    def source_indices(self) -> tuple[int, ...]:
        return self.merged.source_indices

    @property
    def label(self) -> str:
        return self.merged.label

    @property
    def text(self) -> str:
        return self.merged.text

    @property
    def title(self) -> str:
        """Tooltip text"""
        return f"{self.merged.element.label or 'text'}: {self.text}"


@dataclass
class RenderedTable:
    """A table element ready for the presentation layer."""
    original_index: int
    table_index: int
    rect: Rect
    model: TableModel
    base_font: float
    header_font: float
    highlighted: bool = False

    @property
    def placeholder(self) -> Optional[str]:
        """Text shown instead of the grid when the payload had no data."""
        if self.model.is_empty:
            return f"Table {self.table_index + 1} (no data)"
        return None

    @property
    def title(self) -> str:
        return f"table: {self.table_index + 1}"


@dataclass
class PageRender:
    """
    Renderable geometry of one page.

    Attributes:
        page: Page metadata
        rotation: Rotation actually applied (inferred)
        width: Rotated page width in points
        height: Rotated page height in points
    """
    page: PageMeta
    rotation: int
    width: float
    height: float
    text_runs: list[RenderedTextRun] = field(default_factory=list)
    tables: list[RenderedTable] = field(default_factory=list)

    def find_run(self, original_index: int) -> Optional[RenderedTextRun]:
        """Text run containing the given input element, if rendered."""
        for run in self.text_runs:
            if original_index in run.source_indices:
                return run
        return None

    def anchor_index(self, original_index: int) -> int:
        """Index carried by the DOM element showing an input element.

        Merged runs are rendered under their first source index; tables and
        elements not on this page keep their own index.
        """
        run = self.find_run(original_index)
        return run.original_index if run is not None else original_index


# Callback types
ElementClickCallback = Callable[[int], None]
PageChangeCallback = Callable[[int], None]
