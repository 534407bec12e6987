"""pdf_generator.pagination
================================

Page break decisions for the document composer.

The vertical position is measured top-down from the page's upper edge,
the same way the page is read.  :class:`LayoutCursor` is immutable: every
operation in this module returns a new cursor together with a flag telling
whether a page break was inserted, so callers never share a mutable
position.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NamedTuple, Tuple

from reportlab.lib.pagesizes import A4

PAGE_MARGIN = 50.0

# Minimum free space (distance to the bottom page edge) before placing a block
DEFAULT_MIN_SPACE = 100.0
PARAGRAPH_MIN_SPACE = 80.0
SECTION_MIN_SPACE = 150.0
CODE_MIN_SPACE = 150.0
METADATA_MIN_SPACE = 150.0
FOOTER_MIN_SPACE = 200.0

METADATA_BOX_HEIGHT = 80.0
METADATA_BOX_PADDING = 15.0
# The cursor always moves by this much past a metadata box, whatever its content
METADATA_BOX_ADVANCE = METADATA_BOX_HEIGHT + METADATA_BOX_PADDING

# Footer top, measured up from the bottom page edge
FOOTER_OFFSET = 150.0


@dataclass(frozen=True)
class LayoutCursor:
    """Current writing position for one render pass."""

    y: float
    page_index: int = 0
    page_width: float = A4[0]
    page_height: float = A4[1]
    margin_top: float = PAGE_MARGIN
    margin_bottom: float = PAGE_MARGIN
    margin_left: float = PAGE_MARGIN
    margin_right: float = PAGE_MARGIN

    @classmethod
    def start(cls, page_size: Tuple[float, float] = A4, margin: float = PAGE_MARGIN) -> "LayoutCursor":
        width, height = page_size
        return cls(
            y=margin,
            page_width=width,
            page_height=height,
            margin_top=margin,
            margin_bottom=margin,
            margin_left=margin,
            margin_right=margin,
        )

    @property
    def remaining_space(self) -> float:
        return self.page_height - self.y

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.margin_bottom

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def at_page_top(self) -> bool:
        return self.y <= self.margin_top

    def advance(self, dy: float) -> "LayoutCursor":
        return replace(self, y=self.y + dy)

    def move_to(self, y: float) -> "LayoutCursor":
        return replace(self, y=y)

    def next_page(self) -> "LayoutCursor":
        return replace(self, y=self.margin_top, page_index=self.page_index + 1)


class Placement(NamedTuple):
    cursor: LayoutCursor
    page_break_inserted: bool


def place(cursor: LayoutCursor, height_estimate: float = 0.0,
          min_space: float = DEFAULT_MIN_SPACE) -> Placement:
    """Decide whether a block needs a fresh page before it is drawn.

    A break is always inserted when less than ``min_space`` is left on the
    page.  Otherwise a block that fits on an empty page but would cross the
    bottom margin here moves to a new page, unless the cursor is already at
    the top of one.
    """
    if cursor.remaining_space < min_space:
        return Placement(cursor.next_page(), True)

    if cursor.at_page_top:
        return Placement(cursor, False)

    crosses_margin = cursor.y + height_estimate > cursor.bottom_limit
    if crosses_margin and height_estimate <= cursor.content_height:
        return Placement(cursor.next_page(), True)

    return Placement(cursor, False)


def force_page_break(cursor: LayoutCursor) -> Placement:
    return Placement(cursor.next_page(), True)


def fit_line(cursor: LayoutCursor, line_height: float) -> Placement:
    """Continue a block on the next page when its next line would be clipped."""
    if not cursor.at_page_top and cursor.y + line_height > cursor.bottom_limit:
        return Placement(cursor.next_page(), True)
    return Placement(cursor, False)


class BoxPlacement(NamedTuple):
    top: float
    cursor: LayoutCursor
    page_break_inserted: bool


def place_metadata_box(cursor: LayoutCursor) -> BoxPlacement:
    """Reserve the fixed metadata box slot.

    ``top`` is where the box is drawn; the returned cursor sits exactly
    ``METADATA_BOX_ADVANCE`` below it regardless of how many fields the box
    ends up holding.
    """
    placement = place(cursor, METADATA_BOX_ADVANCE, METADATA_MIN_SPACE)
    top = placement.cursor.y
    return BoxPlacement(top, placement.cursor.advance(METADATA_BOX_ADVANCE),
                        placement.page_break_inserted)


def place_footer(cursor: LayoutCursor) -> Placement:
    """Move to the footer anchor, starting a new page when space is short.

    The footer sits at a fixed offset from the bottom edge, not at the
    cursor, so there may be empty space between the last block and it.
    """
    broke = False
    if cursor.remaining_space < FOOTER_MIN_SPACE:
        cursor = cursor.next_page()
        broke = True
    return Placement(cursor.move_to(cursor.page_height - FOOTER_OFFSET), broke)
