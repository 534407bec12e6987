"""pdf_generator.blocks
================================

Content block types and the line oriented classifier that turns a
sanitized markdown-lite analysis into an ordered list of blocks.

Supported syntax is deliberately small: ``#``, ``##`` and ``###``
headings, ``-`` / ``*`` bullets, triple backtick code fences with an
optional language tag, blank lines and plain paragraphs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from .sanitizer import FENCE_MARKER, is_fence

TITLE_PRIMARY = 1
TITLE_SECONDARY = 2

BULLET_GLYPH = "•"
MAX_DESCRIPTION_PARAGRAPH = 1000


class ContentBlock:
    """Base class for everything placed on a page."""

    text: str = ""


@dataclass(frozen=True)
class Title(ContentBlock):
    text: str
    level: int = TITLE_PRIMARY


@dataclass(frozen=True)
class Heading(ContentBlock):
    text: str


@dataclass(frozen=True)
class SubHeading(ContentBlock):
    text: str


@dataclass(frozen=True)
class Paragraph(ContentBlock):
    text: str


@dataclass(frozen=True)
class Bullet(ContentBlock):
    text: str


@dataclass(frozen=True)
class CodeBlock(ContentBlock):
    text: str
    language: str = ""


@dataclass(frozen=True)
class Blank(ContentBlock):
    """Explicit vertical spacer produced by an empty prose line."""


class _FenceBuffer:
    """Lines collected between an opening and a closing fence."""

    def __init__(self, language: str) -> None:
        self.language = language
        self.lines: List[str] = []

    def flush(self) -> Optional[CodeBlock]:
        lines = list(self.lines)
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        if not lines:
            return None
        return CodeBlock("\n".join(lines), self.language)


def classify_line(line: str) -> ContentBlock:
    """Classify one prose line (never called for lines inside a fence)."""
    line = line.strip()
    if not line:
        return Blank()
    if line.startswith("### "):
        return SubHeading(line[4:].strip())
    if line.startswith("## "):
        return Heading(line[3:].strip())
    if line.startswith("# "):
        return Title(line[2:].strip(), TITLE_SECONDARY)
    if line.startswith("- ") or line.startswith("* "):
        return Bullet(f"{BULLET_GLYPH} {line[2:].strip()}")
    return Paragraph(line)


def iter_blocks(sanitized: str) -> Iterator[ContentBlock]:
    """Yield blocks for ``sanitized`` in line order.

    The only state carried between lines is the open fence, if any.  An
    unterminated fence is flushed when the input ends.
    """
    fence: Optional[_FenceBuffer] = None

    for line in sanitized.split("\n") if sanitized else []:
        if is_fence(line):
            if fence is None:
                fence = _FenceBuffer(line.strip()[len(FENCE_MARKER):].strip())
            else:
                block = fence.flush()
                fence = None
                if block is not None:
                    yield block
            continue

        if fence is not None:
            fence.lines.append(line)
            continue

        yield classify_line(line)

    if fence is not None:
        block = fence.flush()
        if block is not None:
            yield block


def classify(sanitized: str) -> List[ContentBlock]:
    return list(iter_blocks(sanitized))


def classify_description(sanitized: str) -> List[Paragraph]:
    """Split problem content into paragraphs without interpreting markup.

    Each non-blank line becomes one paragraph, cut at
    ``MAX_DESCRIPTION_PARAGRAPH`` characters.
    """
    return [
        Paragraph(line.strip()[:MAX_DESCRIPTION_PARAGRAPH])
        for line in sanitized.split("\n")
        if line.strip()
    ]
