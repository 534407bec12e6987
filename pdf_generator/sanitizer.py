"""pdf_generator.sanitizer
================================

Text normalization applied to every field before it reaches the block
classifier or the renderer.  The pipeline is fixed:

1. decode HTML entities (named table plus ``&#NNN;`` / ``&#xHH;``)
2. strip HTML tags
3. normalize CRLF / CR to LF
4. collapse runs of spaces and tabs
5. optionally substitute emoji (see :func:`replace_emoji`)
6. trim

Entity decoding runs before tag stripping so encoded tags such as
``&lt;script&gt;`` are removed as well.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

FENCE_MARKER = "```"

# Named entities understood by the decoder.  Everything else is left as is.
NAMED_ENTITIES: Dict[str, str] = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
    "ndash": "–",
    "mdash": "—",
    "times": "×",
    "divide": "÷",
    "le": "≤",
    "ge": "≥",
    "ne": "≠",
    "hellip": "…",
}

# Ordered: multi code point sequences must be tried before their prefixes.
EMOJI_TOKENS: Tuple[Tuple[str, str], ...] = (
    ("\U0001F680", "[ROCKET]"),
    ("\U0001F4CC", "[PUSHPIN]"),
    ("\U0001F4DA", "[BOOKS]"),
    ("\U0001F4AA", "[FLEXED_BICEPS]"),
    ("\U0001F3AF", "[TARGET]"),
    ("\U0001F49A", "[GREEN_HEART]"),
    ("\U0001F4C4", "[PAGE]"),
    ("\u2705", "[CHECK]"),
    ("\u26a0\ufe0f", "[WARNING]"),
    ("\u26a0", "[WARNING]"),
    ("\u2b50", "[STAR]"),
    ("\U0001F525", "[FIRE]"),
    ("\U0001F4A1", "[LIGHT_BULB]"),
    ("\U0001F389", "[PARTY]"),
    ("\U0001F44D", "[THUMBS_UP]"),
    ("\U0001F44E", "[THUMBS_DOWN]"),
)

_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z]+);")
_TAG_RE = re.compile(r"<[^>]*>")
_HSPACE_RE = re.compile(r"[ \t]+")
_KNOWN_EMOJI_RE = re.compile("|".join(re.escape(emoji) for emoji, _ in EMOJI_TOKENS))
_EMOJI_RE = re.compile(
    "["
    "\U0001F300-\U0001F9FF"  # pictographs, emoticons, skin tone modifiers
    "\u2600-\u26FF"  # miscellaneous symbols
    "\u2700-\u27BF"  # dingbats
    "\U0001F600-\U0001F64F"
    "\U0001F680-\U0001F6FF"  # transport and map
    "\U0001F1E0-\U0001F1FF"  # regional indicators
    "\U0001FA00-\U0001FAFF"  # supplemental symbols
    "\uFE00-\uFE0F"  # variation selectors
    "\u200D"  # zero width joiner
    "\u20D0-\u20FF"  # combining marks for symbols
    "]"
)
_EMOJI_TOKEN_MAP = dict(EMOJI_TOKENS)


def _decode_entity(match: "re.Match[str]") -> str:
    body = match.group(1)
    if body[0] != "#":
        return NAMED_ENTITIES.get(body, match.group(0))

    try:
        if body[1] in "xX":
            codepoint = int(body[2:], 16)
        else:
            codepoint = int(body[1:])
    except ValueError:
        return match.group(0)

    if codepoint <= 0 or codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
        return match.group(0)
    return chr(codepoint)


def decode_html_entities(text: str) -> str:
    """Decode supported entities, repeating until nothing changes.

    Escaped entities such as ``&amp;lt;`` are decoded all the way to ``<``,
    so a second :func:`sanitize` pass finds nothing left to decode.
    """
    while True:
        # each substitution shortens the text, so this terminates
        decoded = _ENTITY_RE.sub(_decode_entity, text)
        if decoded == text:
            return decoded
        text = decoded


def strip_tags(text: str) -> str:
    return _TAG_RE.sub("", text)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def collapse_spaces(text: str) -> str:
    return _HSPACE_RE.sub(" ", text)


def replace_emoji(text: str, collapse: bool = True) -> str:
    """Replace known emoji by bracketed tokens and blank out the rest.

    Parameters
    ----------
    text:
        Text to clean.
    collapse:
        Re-collapse horizontal whitespace afterwards.  Disabled for code
        lines whose indentation must survive.
    """
    text = _KNOWN_EMOJI_RE.sub(lambda m: _EMOJI_TOKEN_MAP[m.group(0)], text)
    text = _EMOJI_RE.sub(" ", text)
    if collapse:
        text = collapse_spaces(text)
    return text


def sanitize(raw: Optional[str], preserve_emoji: bool = False) -> str:
    """Run the full sanitization pipeline on a single field.

    ``None`` or empty input returns an empty string.
    """
    if not raw:
        return ""

    text = decode_html_entities(raw)
    text = strip_tags(text)
    text = normalize_newlines(text)
    text = collapse_spaces(text)
    if not preserve_emoji:
        text = replace_emoji(text)
    return text.strip()


def is_fence(line: str) -> bool:
    return line.strip().startswith(FENCE_MARKER)


def sanitize_markdown(raw: Optional[str], preserve_emoji: bool = False) -> str:
    """Sanitize markdown-lite text while keeping code fence lines intact.

    Steps 1-3 run on the whole text.  Prose lines then get whitespace
    collapsing and emoji substitution; lines inside a fence only get emoji
    substitution so their indentation is preserved.
    """
    if not raw:
        return ""

    text = normalize_newlines(strip_tags(decode_html_entities(raw)))

    in_fence = False
    lines: List[str] = []
    for line in text.split("\n"):
        if is_fence(line):
            in_fence = not in_fence
            lines.append(_clean_prose_line(line, preserve_emoji))
        elif in_fence:
            lines.append(line if preserve_emoji else replace_emoji(line, collapse=False))
        else:
            lines.append(_clean_prose_line(line, preserve_emoji))

    return "\n".join(lines).strip()


def _clean_prose_line(line: str, preserve_emoji: bool) -> str:
    line = collapse_spaces(line)
    if not preserve_emoji:
        line = replace_emoji(line)
    return line
