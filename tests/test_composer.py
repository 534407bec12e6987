import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from datetime import datetime

import pytest
from reportlab.lib.pagesizes import A4

from pdf_generator.blocks import TITLE_SECONDARY, Paragraph, SubHeading, Title
from pdf_generator.composer import (
    DateLine,
    DrawRect,
    DrawText,
    MetadataBox,
    NewPage,
    PageBreak,
    ProblemTitle,
    compose,
    iter_blocks,
    language_label,
    layout_metadata_box,
    wrap_text,
)
from pdf_generator.fonts import FontCapability
from pdf_generator.models import ProblemMetadata, RenderRequest
from pdf_generator.pagination import METADATA_BOX_ADVANCE, PAGE_MARGIN, LayoutCursor
from utils.error_handler import ValidationError

BOOKS = chr(0x1F4DA)
GENERATED_AT = datetime(2024, 1, 2, 15, 4, 5)


def fake_measure(text, font, size):
    return len(text) * size * 0.5


def make_request(analysis="# Intro\nSolve it.", **kwargs):
    metadata = ProblemMetadata(
        title=kwargs.pop("title", "Two Sum"),
        difficulty=kwargs.pop("difficulty", ""),
        topics=kwargs.pop("topics", ""),
        link=kwargs.pop("link", ""),
    )
    return RenderRequest(metadata=metadata, analysis=analysis, **kwargs)


def render_commands(request, capability=None):
    return list(compose(request, capability or FontCapability(), fake_measure, GENERATED_AT))


def texts(commands):
    return [c.text for c in commands if isinstance(c, DrawText)]


def test_two_sum_block_sequence():
    blocks = list(iter_blocks(make_request(), FontCapability(), GENERATED_AT))
    start = next(i for i, block in enumerate(blocks) if isinstance(block, PageBreak)) + 2
    assert blocks[start] == Title("Intro", TITLE_SECONDARY)
    assert blocks[start + 1] == Paragraph("Solve it.")


def test_missing_analysis_fails_before_any_command():
    with pytest.raises(ValidationError) as exc_info:
        compose(make_request(analysis=""), FontCapability(), fake_measure)
    assert exc_info.value.missing_fields == ["analysis"]


def test_blank_title_fails_validation():
    with pytest.raises(ValidationError):
        iter_blocks(make_request(title="   "), FontCapability())


def test_header_order_and_optional_sections():
    request = make_request(date="Jan 5, 2024", problem_content="Line one\n## two")
    blocks = list(iter_blocks(request, FontCapability(), GENERATED_AT))
    assert blocks[0] == Title("LeetCode Daily Challenge")
    assert blocks[1] == DateLine("Jan 5, 2024")
    assert blocks[5] == SubHeading("Problem Description")
    assert blocks[6:8] == [Paragraph("Line one"), Paragraph("## two")]
    assert isinstance(blocks[8], PageBreak)


def test_page_break_before_analysis_heading():
    commands = render_commands(make_request())
    heading_index = next(i for i, c in enumerate(commands)
                         if isinstance(c, DrawText) and "Comprehensive Analysis" in c.text)
    assert isinstance(commands[heading_index - 1], NewPage)
    assert commands[heading_index].text.startswith("[BOOKS]")


def test_emoji_kept_with_emoji_font():
    capability = FontCapability(preserve_emoji=True, emoji_font="EmojiFont")
    commands = render_commands(make_request(), capability)
    heading = next(c for c in commands if isinstance(c, DrawText) and "Comprehensive" in c.text)
    assert heading.text.startswith(BOOKS)
    assert heading.font == "EmojiFont"


def test_code_block_label_and_font():
    commands = render_commands(make_request(analysis="```py\nx = 1\n    y = 2\n```"))
    drawn = [c for c in commands if isinstance(c, DrawText)]
    label_index = next(i for i, c in enumerate(drawn) if c.text == "[Python]")
    assert drawn[label_index + 1].text == "x = 1"
    assert drawn[label_index + 1].font == "Courier"
    assert drawn[label_index + 2].text == "    y = 2"


def test_footer_generated_line():
    assert "Generated on 01/02/2024, 03:04:05 PM" in texts(render_commands(make_request()))


def test_long_analysis_paginates_without_clipping():
    analysis = "\n".join(f"Paragraph number {i} " + "word " * 40 for i in range(80))
    commands = render_commands(make_request(analysis=analysis))
    assert sum(isinstance(c, NewPage) for c in commands) >= 3
    for command in commands:
        if isinstance(command, DrawText):
            assert command.y <= A4[1] - PAGE_MARGIN


def test_link_drawn_as_link():
    commands = render_commands(make_request(link="https://leetcode.com/problems/two-sum/"))
    link = next(c for c in commands if isinstance(c, DrawText) and c.text.startswith("Link:"))
    assert link.link == "https://leetcode.com/problems/two-sum/"
    assert link.underline


class TestMetadataBox:

    def test_fixed_advance_regardless_of_fields(self):
        cursor = LayoutCursor(y=200)
        boxes = [
            MetadataBox(),
            MetadataBox(difficulty="Easy"),
            MetadataBox(difficulty="Easy", topics="Array, Hash Table"),
            MetadataBox(difficulty="Easy", topics="Array", link="https://leetcode.com/problems/two-sum/"),
        ]
        for box in boxes:
            commands, after = layout_metadata_box(box, cursor, FontCapability(), fake_measure)
            assert after.y == cursor.y + METADATA_BOX_ADVANCE
            assert isinstance(commands[0], DrawRect)

    def test_overflowing_fields_stay_inside_box(self):
        cursor = LayoutCursor(y=200)
        box = MetadataBox(difficulty="Hard", topics="Graph " * 60, link="https://example.com")
        commands, _ = layout_metadata_box(box, cursor, FontCapability(), fake_measure)
        rect = commands[0]
        for command in commands[1:]:
            assert command.y <= rect.y + rect.height


def test_wrap_text_splits_words_and_long_tokens():
    assert wrap_text("aaa bbb ccc", "F", 10, 40, fake_measure) == ["aaa bbb", "ccc"]
    assert wrap_text("abcdefghij", "F", 10, 20, fake_measure) == ["abcd", "efgh", "ij"]


def test_language_label():
    assert language_label("py") == "Python"
    assert language_label("not-a-real-language") == "not-a-real-language"
    assert language_label("") == ""


def test_single_line_fields_have_no_newlines():
    request = make_request(
        title="Two\nSum",
        difficulty="Easy\r\n",
        topics="Array,\nHash Table",
        link="https://leetcode.com/\nproblems/two-sum/",
        date="Jan 5,\n2024",
    )
    blocks = list(iter_blocks(request, FontCapability(), GENERATED_AT))
    assert DateLine("Jan 5, 2024") in blocks
    assert ProblemTitle("Two Sum") in blocks
    assert MetadataBox("Easy", "Array, Hash Table", "https://leetcode.com/ problems/two-sum/") in blocks

    for command in render_commands(request):
        if isinstance(command, DrawText):
            assert "\n" not in command.text
