"""
HTTP Microservice
=================
Flask-based HTTP API in front of the PDF generator.

Endpoints:
    GET    /health          → Health check
    POST   /generate-pdf    → Render a problem analysis to PDF (streamed download)

Validation runs before anything is rendered, and the document is rendered
completely before the response starts, so every failure up to that point
becomes a clean JSON error.  Once streaming has begun a failure can only
abort the connection; clients must treat a truncated download as failed.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from pdf_generator.models import RenderRequest
from pdf_generator.pdf_creator import DEFAULT_CHUNK_SIZE, PDFCreator
from utils.error_handler import (
    EditorialPDFError, UnexpectedError, ValidationError, error_reporter
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "leetcode-pdf-generator"


def _stream(data: bytes, chunk_size: int) -> Iterator[bytes]:
    try:
        yield from PDFCreator.iter_chunks(data, chunk_size)
    except GeneratorExit:
        logger.warning("Client went away before the PDF was fully sent")
        raise


def create_app(config: Optional[dict] = None) -> Flask:
    """Create and configure the Flask app."""
    app = Flask(__name__)
    if config:
        app.config.update(config)

    app.config.setdefault("OUTPUT_DIR", "output")
    app.config.setdefault("EMOJI_FONT_PATHS", None)
    app.config.setdefault("UNICODE_FONT_PATHS", None)
    app.config.setdefault("STREAM_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)
    app.config.setdefault("MAX_CONTENT_LENGTH", 50 * 1024 * 1024)  # 50MB

    CORS(app)

    creator = PDFCreator(
        output_dir=app.config["OUTPUT_DIR"],
        emoji_font_paths=app.config["EMOJI_FONT_PATHS"],
        unicode_font_paths=app.config["UNICODE_FONT_PATHS"],
    )
    app.extensions["pdf_creator"] = creator

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": SERVICE_NAME})

    @app.route("/generate-pdf", methods=["POST"])
    def generate_pdf():
        """
        Render the posted problem and analysis.

        JSON body keys: problemTitle, problemDifficulty, problemTopics,
        problemLink, problemContent, analysis, date.
        """
        try:
            render_request = RenderRequest.from_payload(request.get_json(silent=True))
        except ValidationError as e:
            error_reporter.report_error(e.error_info)
            return jsonify({"error": str(e)}), 400

        try:
            capability = creator.resolve_capability()
            data = creator.render_to_bytes(render_request, capability)
        except EditorialPDFError as e:
            error_reporter.report_error(e.error_info)
            logger.error(f"Error generating PDF: {e}")
            return jsonify({"error": "Failed to generate PDF", "message": e.user_message}), 500
        except Exception as e:
            error = UnexpectedError(f"Error generating PDF: {e}", e, "generate_pdf")
            error_reporter.report_error(error.error_info)
            logger.exception("Error generating PDF")
            return jsonify({"error": "Failed to generate PDF", "message": error.user_message}), 500

        filename = creator.file_manager.generate_pdf_filename(render_request.date)
        response = Response(
            _stream(data, app.config["STREAM_CHUNK_SIZE"]),
            mimetype="application/pdf",
            direct_passthrough=True,
        )
        response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        response.headers["Content-Length"] = str(len(data))
        return response

    @app.errorhandler(413)
    def request_too_large(error):
        return jsonify({"error": "Request body too large"}), 413

    return app


def run_server(host: str = "0.0.0.0", port: int = 3000, debug: bool = False,
               config: Optional[dict] = None) -> None:
    """Start the development server."""
    app = create_app(config)
    logger.info(f"PDF Generator Service running on port {port}")
    logger.info(f"API Endpoint: http://localhost:{port}/generate-pdf")
    logger.info(f"Health Check: http://localhost:{port}/health")
    app.run(host=host, port=port, debug=debug)
