import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pdf_generator.blocks import (
    MAX_DESCRIPTION_PARAGRAPH,
    TITLE_SECONDARY,
    Blank,
    Bullet,
    CodeBlock,
    Heading,
    Paragraph,
    SubHeading,
    Title,
    classify,
    classify_description,
    classify_line,
)
from pdf_generator.sanitizer import sanitize_markdown


def test_fenced_block_with_language():
    assert classify("```py\nx=1\ny=2\n```") == [CodeBlock("x=1\ny=2", "py")]


def test_unterminated_fence_is_flushed():
    assert classify("text\n```js\nlet a = 1;") == [Paragraph("text"), CodeBlock("let a = 1;", "js")]


def test_blank_only_fence_is_dropped():
    assert classify("```\n\n\n```\nafter") == [Paragraph("after")]


def test_headings_paragraphs_and_bullets_in_order():
    assert classify("## H\ntext\n- a\n- b") == [
        Heading("H"),
        Paragraph("text"),
        Bullet("• a"),
        Bullet("• b"),
    ]


def test_heading_levels():
    assert classify_line("# Intro") == Title("Intro", TITLE_SECONDARY)
    assert classify_line("## Approach") == Heading("Approach")
    assert classify_line("### Complexity") == SubHeading("Complexity")
    assert classify_line("* star bullet") == Bullet("• star bullet")
    assert classify_line("#hashtag") == Paragraph("#hashtag")
    assert classify_line("   ") == Blank()


def test_code_lines_keep_indentation_and_inner_blanks():
    analysis = "```python\n\ndef f():\n\n    return 1\n\n```"
    blocks = classify(sanitize_markdown(analysis))
    assert blocks == [CodeBlock("def f():\n\n    return 1", "python")]


def test_markup_inside_fence_not_interpreted():
    assert classify("```\n# not a title\n- not a bullet\n```") == [
        CodeBlock("# not a title\n- not a bullet", "")
    ]


def test_blank_lines_become_blank_blocks():
    assert classify("a\n\nb") == [Paragraph("a"), Blank(), Paragraph("b")]


def test_empty_input():
    assert classify("") == []


def test_description_ignores_markup_and_truncates():
    long_line = "x" * (MAX_DESCRIPTION_PARAGRAPH + 50)
    paragraphs = classify_description(f"## Not a heading\n\n- not a bullet\n{long_line}")
    assert paragraphs == [
        Paragraph("## Not a heading"),
        Paragraph("- not a bullet"),
        Paragraph("x" * MAX_DESCRIPTION_PARAGRAPH),
    ]
