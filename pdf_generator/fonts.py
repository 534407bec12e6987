"""Font discovery and registration.

Emoji support is resolved in two phases before any text is sanitized:
the candidate font files are probed, then the first one found is
registered with reportlab.  Only a successful registration turns emoji
preservation on, so the sanitizer never keeps characters the renderer
cannot draw.
"""

from __future__ import annotations

import functools
import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from utils.error_handler import FontLoadError

logger = logging.getLogger(__name__)

DEFAULT_FONT = "Helvetica"
CODE_FONT = "Courier"
EMOJI_FONT_NAME = "EmojiFont"
UNICODE_FONT_NAME = "DejaVu"

DEFAULT_EMOJI_FONT_PATHS = (
    # macOS
    "/System/Library/Fonts/Apple Color Emoji.ttc",
    "/Library/Fonts/Apple Color Emoji.ttc",
    # Windows
    "C:/Windows/Fonts/seguiemj.ttf",
    # Linux
    "/usr/share/fonts/truetype/noto/NotoColorEmoji.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
)

# Fonts with wider Unicode coverage (math symbols such as ≤ and ≠)
DEFAULT_UNICODE_FONT_PATHS = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/System/Library/Fonts/Arial Unicode.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
)


@dataclass(frozen=True)
class FontCapability:
    """Fonts available to one render pass.

    ``preserve_emoji`` is true only when ``emoji_font`` was registered.
    """

    preserve_emoji: bool = False
    emoji_font: Optional[str] = None
    emoji_font_path: Optional[str] = None
    body_font: str = DEFAULT_FONT
    code_font: str = CODE_FONT

    @property
    def text_font(self) -> str:
        """Font used for titles, headings and body text."""
        if self.preserve_emoji and self.emoji_font:
            return self.emoji_font
        return self.body_font


def find_font_path(candidates: Sequence[str]) -> Optional[str]:
    for font_path in candidates:
        if font_path and os.path.exists(font_path):
            return font_path
    return None


@functools.lru_cache(maxsize=None)
def register_font(name: str, font_path: str) -> str:
    """Register a TrueType font once and return its name.

    Raises
    ------
    FontLoadError:
        If reportlab cannot parse the file.
    """
    try:
        pdfmetrics.registerFont(TTFont(name, font_path))
    except Exception as e:
        raise FontLoadError(f"Failed to register font at {font_path}: {e}", font_path, e) from e
    logger.info(f"Registered font {name} from {font_path}")
    return name


def _try_register(name: str, candidates: Sequence[str]) -> Optional[str]:
    font_path = find_font_path(candidates)
    if font_path is None:
        return None
    try:
        register_font(name, font_path)
        return font_path
    except FontLoadError as e:
        logger.warning(f"{e}; falling back to {DEFAULT_FONT}")
        return None


def resolve_font_capability(
    emoji_font_paths: Optional[Sequence[str]] = None,
    unicode_font_paths: Optional[Sequence[str]] = None,
) -> FontCapability:
    """Probe and register fonts, returning the capability for one request."""
    if emoji_font_paths is None:
        emoji_font_paths = DEFAULT_EMOJI_FONT_PATHS
    if unicode_font_paths is None:
        unicode_font_paths = DEFAULT_UNICODE_FONT_PATHS

    body_font = DEFAULT_FONT
    if _try_register(UNICODE_FONT_NAME, unicode_font_paths):
        body_font = UNICODE_FONT_NAME

    emoji_path = _try_register(EMOJI_FONT_NAME, emoji_font_paths)
    if emoji_path is None:
        logger.info("No emoji font registered, emojis will be replaced with text descriptions")
        return FontCapability(body_font=body_font)

    logger.info("Emoji-supporting font registered")
    return FontCapability(
        preserve_emoji=True,
        emoji_font=EMOJI_FONT_NAME,
        emoji_font_path=emoji_path,
        body_font=body_font,
    )
