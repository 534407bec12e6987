"""pdf_generator.composer
================================

Turns a :class:`~pdf_generator.models.RenderRequest` into an ordered stream
of draw commands for the renderer backend.

The document always has the same shape::

    document title, date, separator
    problem title, metadata box
    problem description (optional)
    -- page break --
    analysis heading, classified analysis blocks
    footer

Every element is laid out by a pure function taking the element, the
current :class:`~pdf_generator.pagination.LayoutCursor`, the request's
:class:`~pdf_generator.fonts.FontCapability` and a ``measure`` callable
supplied by the backend, and returning ``(commands, new_cursor)``.  The
composer itself only keeps the cursor between elements, so commands are
produced lazily while the backend consumes them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Tuple

from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound
from reportlab.lib.pagesizes import A4

from .blocks import (
    TITLE_PRIMARY,
    Blank,
    Bullet,
    CodeBlock,
    ContentBlock,
    Heading,
    Paragraph,
    SubHeading,
    Title,
    classify_description,
    iter_blocks as iter_analysis_blocks,
)
from .fonts import FontCapability
from .models import RenderRequest
from .pagination import (
    CODE_MIN_SPACE,
    DEFAULT_MIN_SPACE,
    METADATA_BOX_HEIGHT,
    METADATA_BOX_PADDING,
    PARAGRAPH_MIN_SPACE,
    SECTION_MIN_SPACE,
    LayoutCursor,
    fit_line,
    force_page_break,
    place,
    place_footer,
    place_metadata_box,
)
from .sanitizer import collapse_spaces, sanitize, sanitize_markdown

logger = logging.getLogger(__name__)

# measure(text, font_name, font_size) -> width in points
Measure = Callable[[str, str, float], float]

DOCUMENT_TITLE = "LeetCode Daily Challenge"
DESCRIPTION_TITLE = "Problem Description"
ANALYSIS_TITLE = "\U0001F4DA Comprehensive Analysis & Solutions"
FOOTER_TITLE = "Happy Coding! \U0001F4AA"
FOOTER_SUBTITLE = "Keep building that DSA muscle memory! \U0001F3AF"

LEADING = 1.2
ASCENT = 0.8
SEPARATOR_COLOR = "#dddddd"
BOX_FILL_COLOR = "#f8f9fa"
LINK_COLOR = "#1a73e8"


# ---------------------------------------------------------------------------
# Draw commands
# ---------------------------------------------------------------------------


class DrawCommand:
    """Base class for instructions sent to the renderer backend."""


@dataclass(frozen=True)
class DrawText(DrawCommand):
    text: str
    x: float
    y: float  # baseline, measured from the top edge
    font: str
    size: float
    color: str
    link: Optional[str] = None
    underline: bool = False


@dataclass(frozen=True)
class DrawRect(DrawCommand):
    x: float
    y: float  # top edge
    width: float
    height: float
    fill_color: str
    stroke_color: str


@dataclass(frozen=True)
class DrawLine(DrawCommand):
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 1.0


@dataclass(frozen=True)
class NewPage(DrawCommand):
    pass


# ---------------------------------------------------------------------------
# Composer-only elements
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateLine(ContentBlock):
    text: str


@dataclass(frozen=True)
class Separator(ContentBlock):
    pass


@dataclass(frozen=True)
class ProblemTitle(ContentBlock):
    text: str


@dataclass(frozen=True)
class MetadataBox(ContentBlock):
    difficulty: str = ""
    topics: str = ""
    link: str = ""


@dataclass(frozen=True)
class PageBreak(ContentBlock):
    pass


@dataclass(frozen=True)
class Footer(ContentBlock):
    title: str
    subtitle: str
    generated: str


@dataclass(frozen=True)
class BlockStyle:
    size: float
    color: str
    center: bool = False
    indent: float = 0.0
    space_before: float = 0.0  # in lines of this style
    space_after: float = 0.0
    code: bool = False

    @property
    def leading(self) -> float:
        return self.size * LEADING


STYLES = {
    "title": BlockStyle(24, "#1a73e8", center=True, space_after=0.5),
    "secondary_title": BlockStyle(20, "#1a73e8", center=True, space_before=0.5, space_after=0.5),
    "date": BlockStyle(12, "#666666", center=True, space_after=1.0),
    "problem_title": BlockStyle(20, "#1a73e8", space_after=0.3),
    "heading": BlockStyle(18, "#34a853", space_before=0.5, space_after=0.3),
    "subheading": BlockStyle(14, "#ea4335", space_before=0.3, space_after=0.2),
    "body": BlockStyle(11, "#333333", space_after=0.3),
    "bullet": BlockStyle(11, "#333333", indent=20),
    "code": BlockStyle(9, "#000000", indent=20, space_after=0.5, code=True),
    "code_label": BlockStyle(8, "#666666", indent=20),
    "meta": BlockStyle(11, "#333333", space_after=0.2),
    "link": BlockStyle(11, LINK_COLOR),
    "blank": BlockStyle(11, "#333333"),
    "footer_title": BlockStyle(16, "#1a73e8", center=True),
    "footer_subtitle": BlockStyle(12, "#666666", center=True, space_after=0.5),
    "footer_generated": BlockStyle(10, "#999999", center=True),
}

BLOCK_STYLES = {
    Heading: "heading",
    SubHeading: "subheading",
    Paragraph: "body",
    Bullet: "bullet",
    DateLine: "date",
    ProblemTitle: "problem_title",
}

MIN_SPACE = {
    CodeBlock: CODE_MIN_SPACE,
}

BLANK_SPACE = 0.2
SEPARATOR_SPACE = 0.5 * 12 * LEADING


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def wrap_text(text: str, font: str, size: float, width: float, measure: Measure) -> List[str]:
    """Greedy word wrap.  Words wider than ``width`` are split by character.

    Does the job of ``reportlab.lib.utils.simpleSplit``, but widths come from
    the injected ``measure`` so layout runs without a registered font.
    """
    lines: List[str] = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if measure(candidate, font, size) <= width:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = ""
        if measure(word, font, size) <= width:
            current = word
            continue
        pieces = _split_chars(word, font, size, width, measure)
        lines.extend(pieces[:-1])
        current = pieces[-1]
    if current or not lines:
        lines.append(current)
    return lines


def wrap_code_line(line: str, font: str, size: float, width: float, measure: Measure) -> List[str]:
    """Hard-wrap a code line without touching its whitespace."""
    if measure(line, font, size) <= width:
        return [line]
    return _split_chars(line, font, size, width, measure)


def _split_chars(text: str, font: str, size: float, width: float, measure: Measure) -> List[str]:
    pieces: List[str] = []
    current = ""
    for ch in text:
        if current and measure(current + ch, font, size) > width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    pieces.append(current)
    return pieces


def language_label(language: str) -> str:
    """Display name for a fence language tag, e.g. ``py`` -> ``Python``."""
    if not language:
        return ""
    alias = language.split()[0].lower()
    try:
        return get_lexer_by_name(alias).name
    except ClassNotFound:
        return language


# ---------------------------------------------------------------------------
# Layout functions
# ---------------------------------------------------------------------------

Layout = Tuple[List[DrawCommand], LayoutCursor]


def _draw_lines(lines: List[str], style: BlockStyle, font: str, cursor: LayoutCursor,
                measure: Measure, commands: List[DrawCommand], link: Optional[str] = None) -> LayoutCursor:
    x = cursor.margin_left + style.indent
    for line in lines:
        placement = fit_line(cursor, style.leading)
        if placement.page_break_inserted:
            commands.append(NewPage())
        cursor = placement.cursor
        if style.center:
            x = cursor.margin_left + max(0.0, (cursor.content_width - measure(line, font, style.size)) / 2)
        commands.append(DrawText(
            text=line,
            x=x,
            y=cursor.y + style.size * ASCENT,
            font=font,
            size=style.size,
            color=style.color,
            link=link,
            underline=link is not None,
        ))
        cursor = cursor.advance(style.leading)
    return cursor


def layout_text(text: str, style: BlockStyle, cursor: LayoutCursor, capability: FontCapability,
                measure: Measure, min_space: float = DEFAULT_MIN_SPACE) -> Layout:
    font = capability.code_font if style.code else capability.text_font
    width = cursor.content_width - style.indent
    lines = wrap_text(text, font, style.size, width, measure)

    estimate = (style.space_before + len(lines)) * style.leading
    placement = place(cursor, estimate, min_space)
    commands: List[DrawCommand] = [NewPage()] if placement.page_break_inserted else []
    cursor = placement.cursor
    if not cursor.at_page_top:
        cursor = cursor.advance(style.space_before * style.leading)

    cursor = _draw_lines(lines, style, font, cursor, measure, commands)
    return commands, cursor.advance(style.space_after * style.leading)


def layout_title(block: Title, cursor: LayoutCursor, capability: FontCapability,
                 measure: Measure, min_space: float = DEFAULT_MIN_SPACE) -> Layout:
    style = STYLES["title" if block.level == TITLE_PRIMARY else "secondary_title"]
    return layout_text(block.text, style, cursor, capability, measure, min_space)


def layout_code(block: CodeBlock, cursor: LayoutCursor, capability: FontCapability,
                measure: Measure, min_space: float = CODE_MIN_SPACE) -> Layout:
    style = STYLES["code"]
    label_style = STYLES["code_label"]
    width = cursor.content_width - style.indent
    lines: List[str] = []
    for line in block.text.split("\n"):
        lines.extend(wrap_code_line(line, capability.code_font, style.size, width, measure))

    label = language_label(block.language)
    estimate = len(lines) * style.leading + (label_style.leading if label else 0.0)
    placement = place(cursor, estimate, min_space)
    commands: List[DrawCommand] = [NewPage()] if placement.page_break_inserted else []
    cursor = placement.cursor

    if label:
        cursor = _draw_lines([f"[{label}]"], label_style, capability.text_font, cursor, measure, commands)
    cursor = _draw_lines(lines, style, capability.code_font, cursor, measure, commands)
    return commands, cursor.advance(style.space_after * style.leading)


def layout_blank(block: Blank, cursor: LayoutCursor, capability: FontCapability,
                 measure: Measure, min_space: float = DEFAULT_MIN_SPACE) -> Layout:
    placement = place(cursor, 0.0, min_space)
    commands: List[DrawCommand] = [NewPage()] if placement.page_break_inserted else []
    cursor = placement.cursor
    if cursor.at_page_top:
        return commands, cursor
    return commands, cursor.advance(BLANK_SPACE * STYLES["blank"].leading)


def layout_separator(block: Separator, cursor: LayoutCursor, capability: FontCapability,
                     measure: Measure, min_space: float = 0.0) -> Layout:
    line = DrawLine(cursor.margin_left, cursor.y, cursor.page_width - cursor.margin_right,
                    cursor.y, SEPARATOR_COLOR, 1.0)
    return [line], cursor.advance(SEPARATOR_SPACE)


def layout_metadata_box(block: MetadataBox, cursor: LayoutCursor, capability: FontCapability,
                        measure: Measure, min_space: float = 0.0) -> Layout:
    """Draw the fixed-height box; the cursor ends at the box slot's end.

    Field lines that would run past the bottom of the box are dropped.
    """
    box = place_metadata_box(cursor)
    commands: List[DrawCommand] = [NewPage()] if box.page_break_inserted else []
    commands.append(DrawRect(cursor.margin_left, box.top, cursor.content_width,
                             METADATA_BOX_HEIGHT, BOX_FILL_COLOR, SEPARATOR_COLOR))

    font = capability.text_font
    x = cursor.margin_left + METADATA_BOX_PADDING
    width = cursor.content_width - 2 * METADATA_BOX_PADDING
    box_bottom = box.top + METADATA_BOX_HEIGHT
    y = box.top + METADATA_BOX_PADDING

    fields = []
    if block.difficulty:
        fields.append((f"Difficulty: {block.difficulty}", STYLES["meta"], None))
    if block.topics:
        fields.append((f"Topics: {block.topics}", STYLES["meta"], None))
    if block.link:
        fields.append((f"Link: {block.link}", STYLES["link"], block.link))

    for text, style, link in fields:
        for line in wrap_text(text, font, style.size, width, measure):
            if y + style.leading > box_bottom:
                break
            commands.append(DrawText(line, x, y + style.size * ASCENT, font, style.size,
                                     style.color, link=link, underline=link is not None))
            y += style.leading
        y += style.space_after * style.leading

    return commands, box.cursor


def layout_page_break(block: PageBreak, cursor: LayoutCursor, capability: FontCapability,
                      measure: Measure, min_space: float = 0.0) -> Layout:
    return [NewPage()], force_page_break(cursor).cursor


def layout_footer(block: Footer, cursor: LayoutCursor, capability: FontCapability,
                  measure: Measure, min_space: float = 0.0) -> Layout:
    placement = place_footer(cursor)
    commands: List[DrawCommand] = [NewPage()] if placement.page_break_inserted else []
    cursor = placement.cursor
    rule, cursor = layout_separator(Separator(), cursor, capability, measure)
    commands.extend(rule)

    font = capability.text_font
    for text, style_name in ((block.title, "footer_title"),
                             (block.subtitle, "footer_subtitle"),
                             (block.generated, "footer_generated")):
        style = STYLES[style_name]
        cursor = _draw_lines([text], style, font, cursor, measure, commands)
        cursor = cursor.advance(style.space_after * style.leading)
    return commands, cursor


def layout_styled(block: ContentBlock, cursor: LayoutCursor, capability: FontCapability,
                  measure: Measure, min_space: float = DEFAULT_MIN_SPACE) -> Layout:
    style = STYLES[BLOCK_STYLES[type(block)]]
    return layout_text(block.text, style, cursor, capability, measure, min_space)


LAYOUTS = {
    Title: layout_title,
    Heading: layout_styled,
    SubHeading: layout_styled,
    Paragraph: layout_styled,
    Bullet: layout_styled,
    DateLine: layout_styled,
    ProblemTitle: layout_styled,
    CodeBlock: layout_code,
    Blank: layout_blank,
    Separator: layout_separator,
    MetadataBox: layout_metadata_box,
    PageBreak: layout_page_break,
    Footer: layout_footer,
}


def layout_block(block: ContentBlock, cursor: LayoutCursor, capability: FontCapability,
                 measure: Measure, min_space: Optional[float] = None) -> Layout:
    """Place and lay out one element, returning its commands and the next cursor."""
    if min_space is None:
        min_space = MIN_SPACE.get(type(block), DEFAULT_MIN_SPACE)
    return LAYOUTS[type(block)](block, cursor, capability, measure, min_space)


# ---------------------------------------------------------------------------
# Document assembly
# ---------------------------------------------------------------------------


def format_generated_at(moment: datetime) -> str:
    return moment.strftime("%m/%d/%Y, %I:%M:%S %p")


def _single_line(raw: Optional[str], keep: bool) -> str:
    """Sanitize a field that is drawn as one text run."""
    return collapse_spaces(sanitize(raw, keep).replace("\n", " "))


def _document_elements(request: RenderRequest, capability: FontCapability,
                       generated_at: datetime) -> Iterator[Tuple[ContentBlock, Optional[float]]]:
    keep = capability.preserve_emoji
    meta = request.metadata

    yield Title(sanitize(DOCUMENT_TITLE, keep), TITLE_PRIMARY), None
    date = _single_line(request.date, keep)
    if date:
        yield DateLine(date), None
    yield Separator(), None

    yield ProblemTitle(_single_line(meta.title, keep)), None
    yield MetadataBox(
        difficulty=_single_line(meta.difficulty, keep),
        topics=_single_line(meta.topics, keep),
        link=_single_line(meta.link, keep),
    ), None

    content = sanitize(request.problem_content, keep)
    if content:
        yield SubHeading(sanitize(DESCRIPTION_TITLE, keep)), SECTION_MIN_SPACE
        for paragraph in classify_description(content):
            yield paragraph, PARAGRAPH_MIN_SPACE

    yield PageBreak(), None
    yield Heading(sanitize(ANALYSIS_TITLE, keep)), None
    for block in iter_analysis_blocks(sanitize_markdown(request.analysis, keep)):
        yield block, None

    yield Footer(
        title=sanitize(FOOTER_TITLE, keep),
        subtitle=sanitize(FOOTER_SUBTITLE, keep),
        generated=f"Generated on {format_generated_at(generated_at)}",
    ), None


def iter_blocks(request: RenderRequest, capability: FontCapability,
                generated_at: Optional[datetime] = None) -> Iterator[ContentBlock]:
    """Ordered document elements for ``request`` (validated first)."""
    request.validate()
    moment = generated_at or datetime.now()
    return (block for block, _ in _document_elements(request, capability, moment))


def compose(request: RenderRequest, capability: FontCapability, measure: Measure,
            generated_at: Optional[datetime] = None,
            page_size: Tuple[float, float] = A4) -> Iterator[DrawCommand]:
    """Validate ``request`` and return a lazy stream of draw commands.

    Raises
    ------
    ValidationError:
        Raised here, before any command exists, when the title or the
        analysis is blank.
    """
    request.validate()
    moment = generated_at or datetime.now()
    return _compose(request, capability, measure, moment, page_size)


def _compose(request: RenderRequest, capability: FontCapability, measure: Measure,
             generated_at: datetime, page_size: Tuple[float, float]) -> Iterator[DrawCommand]:
    cursor = LayoutCursor.start(page_size)
    count = 0
    for block, min_space in _document_elements(request, capability, generated_at):
        commands, cursor = layout_block(block, cursor, capability, measure, min_space)
        count += 1
        yield from commands
    logger.debug(f"Composed {count} blocks over {cursor.page_index + 1} pages")
