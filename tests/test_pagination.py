import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from reportlab.lib.pagesizes import A4, letter

from pdf_generator.pagination import (
    CODE_MIN_SPACE,
    DEFAULT_MIN_SPACE,
    FOOTER_OFFSET,
    METADATA_BOX_ADVANCE,
    PAGE_MARGIN,
    LayoutCursor,
    fit_line,
    force_page_break,
    place,
    place_footer,
    place_metadata_box,
)

PAGE_HEIGHT = A4[1]


def cursor_at(y, page_index=0):
    return LayoutCursor(y=y, page_index=page_index)


def test_start_uses_page_size_and_margin():
    cursor = LayoutCursor.start(letter, margin=36)
    assert cursor.y == 36
    assert cursor.page_height == letter[1]
    assert cursor.content_width == letter[0] - 72
    assert cursor.at_page_top


def test_place_with_ample_space_keeps_page():
    cursor = cursor_at(200)
    placement = place(cursor, 20, DEFAULT_MIN_SPACE)
    assert placement.page_break_inserted is False
    assert placement.cursor == cursor


@pytest.mark.parametrize("min_space", [DEFAULT_MIN_SPACE, CODE_MIN_SPACE])
def test_place_below_threshold_breaks(min_space):
    cursor = cursor_at(PAGE_HEIGHT - min_space + 1, page_index=2)
    placement = place(cursor, 0, min_space)
    assert placement.page_break_inserted is True
    assert placement.cursor.y == PAGE_MARGIN
    assert placement.cursor.page_index == 3


def test_code_threshold_larger_than_default():
    cursor = cursor_at(PAGE_HEIGHT - 120)
    assert place(cursor, 0, DEFAULT_MIN_SPACE).page_break_inserted is False
    assert place(cursor, 0, CODE_MIN_SPACE).page_break_inserted is True


def test_place_breaks_when_block_would_cross_bottom_margin():
    cursor = cursor_at(700)
    placement = place(cursor, 100, DEFAULT_MIN_SPACE)
    assert placement.page_break_inserted is True
    assert placement.cursor.page_index == 1


def test_tall_block_at_page_top_stays():
    cursor = LayoutCursor.start()
    placement = place(cursor, 5000, DEFAULT_MIN_SPACE)
    assert placement.page_break_inserted is False
    assert placement.cursor == cursor


def test_short_page_breaks_even_at_page_top():
    cursor = LayoutCursor.start((200, 100), margin=10)
    placement = place(cursor, 0, DEFAULT_MIN_SPACE)
    assert placement.page_break_inserted is True
    assert placement.cursor.page_index == 1
    assert placement.cursor.y == 10


def test_oversized_block_starts_where_it_is():
    cursor = cursor_at(300)
    assert place(cursor, 5000, DEFAULT_MIN_SPACE).page_break_inserted is False


def test_cursor_is_immutable():
    cursor = cursor_at(300)
    moved = cursor.advance(25)
    assert cursor.y == 300
    assert moved.y == 325


def test_force_page_break_ignores_space():
    placement = force_page_break(cursor_at(60))
    assert placement.page_break_inserted is True
    assert placement.cursor.y == PAGE_MARGIN
    assert placement.cursor.page_index == 1


def test_fit_line():
    assert fit_line(cursor_at(300), 14).page_break_inserted is False
    assert fit_line(cursor_at(PAGE_HEIGHT - PAGE_MARGIN - 5), 14).page_break_inserted is True
    assert fit_line(LayoutCursor.start(), 5000).page_break_inserted is False


def test_metadata_box_advances_fixed_amount():
    box = place_metadata_box(cursor_at(200))
    assert box.page_break_inserted is False
    assert box.top == 200
    assert box.cursor.y == 200 + METADATA_BOX_ADVANCE


def test_metadata_box_moves_to_new_page_when_short():
    box = place_metadata_box(cursor_at(PAGE_HEIGHT - 120))
    assert box.page_break_inserted is True
    assert box.top == PAGE_MARGIN
    assert box.cursor.y == PAGE_MARGIN + METADATA_BOX_ADVANCE


def test_footer_anchored_to_bottom_edge():
    placement = place_footer(cursor_at(200))
    assert placement.page_break_inserted is False
    assert placement.cursor.page_index == 0
    assert placement.cursor.y == PAGE_HEIGHT - FOOTER_OFFSET


def test_footer_forces_new_page_when_space_short():
    placement = place_footer(cursor_at(PAGE_HEIGHT - 160))
    assert placement.page_break_inserted is True
    assert placement.cursor.page_index == 1
    assert placement.cursor.y == PAGE_HEIGHT - FOOTER_OFFSET
