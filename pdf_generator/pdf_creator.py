"""pdf_generator.pdf_creator
================================

Renderer backend for the daily editorial PDF.  The :class:`PDFCreator`
class executes the draw commands produced by
:mod:`pdf_generator.composer` on a ``reportlab`` canvas and provides the
text metrics the composer uses for wrapping.

Key features implemented:

* Emoji capable font registration with a Helvetica fallback.
* Unicode body font (DejaVu) for mathematical symbols when installed.
* Clickable, underlined problem links.
* PDF metadata (title, subject, creator).
* In-memory rendering for HTTP streaming and file output for the CLI.

Coordinates in draw commands are measured from the top edge of the page;
they are flipped here because reportlab's origin is the bottom-left
corner.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, Sequence, Set, Tuple, Union

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as rl_canvas

from utils.error_handler import (
    EditorialPDFError, FileSystemError, RenderingError,
    ErrorDetector, handle_exception
)
from utils.file_manager import FileManager

from .composer import DrawCommand, DrawLine, DrawRect, DrawText, NewPage, compose
from .fonts import DEFAULT_FONT, FontCapability, resolve_font_capability
from .models import RenderRequest

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024
PDF_CREATOR_NAME = "Daily Editorial PDF Generator"


class PDFCreator:
    """Render editorial documents to PDF.

    Parameters
    ----------
    output_dir:
        Directory where generated files are saved.  Missing directories
        are created automatically.
    page_size:
        Page size in points, A4 by default.
    emoji_font_paths:
        Candidate emoji font files, probed in order.  ``None`` uses the
        platform defaults from :mod:`pdf_generator.fonts`.
    unicode_font_paths:
        Candidate Unicode body font files.
    """

    def __init__(
        self,
        output_dir: Union[str, Path] = "output",
        page_size: Tuple[float, float] = A4,
        emoji_font_paths: Optional[Sequence[str]] = None,
        unicode_font_paths: Optional[Sequence[str]] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.page_size = page_size
        self.emoji_font_paths = emoji_font_paths
        self.unicode_font_paths = unicode_font_paths
        self.file_manager = FileManager(self.output_dir)
        self._missing_fonts: Set[str] = set()

        logger.info(f"PDFCreator initialized. Output: {self.output_dir}")

    # ------------------------------------------------------------------
    # Fonts and metrics
    # ------------------------------------------------------------------

    def resolve_capability(self) -> FontCapability:
        """Probe and register fonts for a single request."""
        return resolve_font_capability(self.emoji_font_paths, self.unicode_font_paths)

    def _resolve_font(self, name: str) -> str:
        if name in pdfmetrics.standardFonts or name in pdfmetrics.getRegisteredFontNames():
            return name
        if name not in self._missing_fonts:
            self._missing_fonts.add(name)
            logger.warning(f"Font {name} is not available, using {DEFAULT_FONT}")
        return DEFAULT_FONT

    def measure(self, text: str, font: str, size: float) -> float:
        """Width of ``text`` in points."""
        return pdfmetrics.stringWidth(text, self._resolve_font(font), size)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _draw(self, canv: rl_canvas.Canvas, command: DrawCommand) -> None:
        page_height = self.page_size[1]

        if isinstance(command, DrawText):
            font = self._resolve_font(command.font)
            baseline = page_height - command.y
            canv.setFont(font, command.size)
            canv.setFillColor(colors.HexColor(command.color))
            canv.drawString(command.x, baseline, command.text)
            if command.underline or command.link:
                width = pdfmetrics.stringWidth(command.text, font, command.size)
                if command.underline:
                    canv.setStrokeColor(colors.HexColor(command.color))
                    canv.setLineWidth(0.5)
                    canv.line(command.x, baseline - 1.5, command.x + width, baseline - 1.5)
                if command.link:
                    canv.linkURL(
                        command.link,
                        (command.x, baseline - 2, command.x + width, baseline + command.size),
                        relative=0,
                    )
        elif isinstance(command, DrawRect):
            canv.setFillColor(colors.HexColor(command.fill_color))
            canv.setStrokeColor(colors.HexColor(command.stroke_color))
            canv.setLineWidth(1)
            canv.rect(command.x, page_height - command.y - command.height,
                      command.width, command.height, stroke=1, fill=1)
        elif isinstance(command, DrawLine):
            canv.setStrokeColor(colors.HexColor(command.color))
            canv.setLineWidth(command.width)
            canv.line(command.x1, page_height - command.y1, command.x2, page_height - command.y2)
        elif isinstance(command, NewPage):
            canv.showPage()
        else:
            raise RenderingError(f"Unsupported draw command: {type(command).__name__}")

    def render(self, commands: Iterable[DrawCommand], sink: BinaryIO,
               title: str = "", subject: str = "") -> int:
        """Draw ``commands`` onto a new canvas and write the PDF to ``sink``.

        Returns the number of pages.  Any failure raises
        :class:`RenderingError`; whatever was written to ``sink`` must then
        be discarded.
        """
        try:
            canv = rl_canvas.Canvas(sink, pagesize=self.page_size)
            canv.setTitle(title[:100])
            canv.setSubject(subject[:200])
            canv.setCreator(PDF_CREATOR_NAME)

            for command in commands:
                self._draw(canv, command)

            pages = canv.getPageNumber()
            canv.save()
            return pages
        except EditorialPDFError:
            raise
        except Exception as e:
            logger.error(f"Failed to render PDF: {e}")
            raise RenderingError(f"PDF rendering failed: {str(e)}", e) from e

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_to_bytes(
        self,
        request: RenderRequest,
        capability: Optional[FontCapability] = None,
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """Render ``request`` into an in-memory PDF.

        Raises
        ------
        ValidationError:
            Before anything is drawn, when title or analysis is blank.
        RenderingError:
            If drawing or writing the document fails.
        """
        request.validate()
        if capability is None:
            capability = self.resolve_capability()

        commands = compose(request, capability, self.measure, generated_at, self.page_size)
        buffer = io.BytesIO()
        pages = self.render(commands, buffer, title=request.metadata.title,
                            subject=request.metadata.link)
        logger.info(f"Rendered '{request.metadata.title}' ({pages} pages, {buffer.tell()} bytes)")
        return buffer.getvalue()

    @handle_exception
    def create_pdf(
        self,
        request: RenderRequest,
        filename: Optional[str] = None,
        capability: Optional[FontCapability] = None,
    ) -> str:
        """
        Render ``request`` and save it in ``output_dir``.

        Parameters
        ----------
        request:
            Validated render request.
        filename:
            Optional custom filename.  When omitted one is derived from the
            request date (``LeetCode_<date>.pdf``).

        Returns
        -------
        str:
            Path to the created PDF file
        """
        if filename:
            filename = self.file_manager.safe_filename(filename)
            if not filename.lower().endswith(".pdf"):
                filename += ".pdf"
        else:
            filename = self.file_manager.generate_pdf_filename(request.date)

        self.file_manager.ensure_directory(self.output_dir)
        if not ErrorDetector.check_disk_space(str(self.output_dir), required_mb=10):
            raise FileSystemError("Insufficient disk space for PDF generation", str(self.output_dir))

        data = self.render_to_bytes(request, capability)
        pdf_path = self.file_manager.save_bytes(data, self.output_dir / filename)
        logger.info(f"Successfully created PDF: {pdf_path}")
        return str(pdf_path)

    @staticmethod
    def iter_chunks(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Yield ``data`` in pieces for a streamed response."""
        for start in range(0, len(data), chunk_size):
            yield data[start:start + chunk_size]
