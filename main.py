#!/usr/bin/env python3
"""
Daily Editorial PDF Generator
Main entry point for the application

This module provides:
- Command-line argument parsing for one-off generation and the HTTP service
- Logging configuration and management
- Application settings and preferences
- Graceful shutdown and cleanup
- Integration of all components (PDF generator, HTTP service)
"""

__version__ = "1.0.0"
__license__ = "MIT"
__description__ = "Render LeetCode daily challenge analyses into paginated PDF documents"

import sys
import os
import argparse
import logging
import json
import signal
import atexit
import time
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional
import configparser
import platform

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from pdf_generator.models import RenderRequest
from pdf_generator.pdf_creator import PDFCreator
from utils.file_manager import FileManager
from utils.error_handler import (
    EditorialPDFError, ValidationError, ErrorInfo, ErrorCategory, ErrorSeverity,
    error_reporter
)

logger = logging.getLogger(__name__)


class ApplicationManager:
    """
    Main application manager that handles initialization, configuration,
    and lifecycle management of the PDF generator.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".editorial_pdf"
        self.config_file = self.config_dir / "config.ini"
        self.log_file = self.config_dir / "app.log"
        self.settings_file = self.config_dir / "settings.json"

        # Application components
        self.file_manager = None
        self.pdf_creator = None
        self.config = configparser.ConfigParser()

        # Runtime state
        self.is_running = False

        # Default settings
        self.default_settings = {
            "output_directory": str(Path.cwd() / "output"),
            "log_level": "INFO",
            "host": "0.0.0.0",
            "port": 3000,
            "auto_save_settings": True,
        }

        self.settings = self.default_settings.copy()

    def initialize(self):
        """
        Initialize the application with all necessary configurations.
        """
        try:
            self._create_config_directory()

            self._load_settings()
            self._load_configuration()

            self._setup_logging()

            self._initialize_components()

            self._setup_signal_handlers()

            atexit.register(self._cleanup)

            self.is_running = True
            logging.info("Application initialized successfully")

        except Exception as e:
            logging.error(f"Failed to initialize application: {e}")
            logging.error(traceback.format_exc())
            raise

    def _create_config_directory(self):
        """
        Create configuration directory if it doesn't exist.
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            logging.debug(f"Configuration directory: {self.config_dir}")
        except OSError as e:
            logging.error(f"Failed to create config directory: {e}")
            # Fallback to current directory
            self.config_dir = Path.cwd() / ".editorial_pdf"
            self.config_dir.mkdir(exist_ok=True)
            self.log_file = self.config_dir / "app.log"
            self.settings_file = self.config_dir / "settings.json"

    def _setup_logging(self):
        """
        Configure logging with file and console handlers.
        """
        log_level = getattr(logging, str(self.settings.get("log_level", "INFO")).upper(), logging.INFO)

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        )
        simple_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        root_logger.handlers.clear()

        try:
            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(f"Warning: Could not setup file logging: {e}", file=sys.stderr)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(simple_formatter)
        root_logger.addHandler(console_handler)

        logging.info(f"Logging configured. Level: {logging.getLevelName(log_level)}, Log file: {self.log_file}")

    def _load_settings(self):
        """
        Load application settings from JSON file.
        """
        try:
            if self.settings_file.exists():
                with open(self.settings_file, 'r', encoding='utf-8') as f:
                    loaded_settings = json.load(f)
                self.settings.update(loaded_settings)
                logging.debug("Settings loaded successfully")
            else:
                logging.info("No existing settings file found, using defaults")
        except (OSError, json.JSONDecodeError) as e:
            logging.warning(f"Failed to load settings: {e}. Using defaults.")

    def _save_settings(self):
        """
        Save current settings to JSON file.
        """
        try:
            if self.settings.get("auto_save_settings", True):
                with open(self.settings_file, 'w', encoding='utf-8') as f:
                    json.dump(self.settings, f, indent=2, ensure_ascii=False)
                logging.debug("Settings saved successfully")
        except OSError as e:
            logging.error(f"Failed to save settings: {e}")

    def _load_configuration(self):
        """
        Load configuration from INI file.
        """
        try:
            if self.config_file.exists():
                self.config.read(self.config_file, encoding='utf-8')
                logging.debug("Configuration loaded successfully")
            else:
                self._create_default_configuration()
        except configparser.Error as e:
            logging.warning(f"Failed to load configuration: {e}")
            self._create_default_configuration()

    def _create_default_configuration(self):
        """
        Create default configuration file.
        """
        self.config['DEFAULT'] = {
            'stream_chunk_size': '65536',
            'max_content_mb': '50'
        }

        self.config['Server'] = {
            'host': str(self.settings.get("host", "0.0.0.0")),
            'port': str(self.settings.get("port", 3000))
        }

        self.config['Paths'] = {
            'output_directory': str(self.settings.get("output_directory"))
        }

        self.config['Fonts'] = {
            'emoji_font_paths': '',
            'unicode_font_paths': ''
        }

        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                self.config.write(f)
            logging.info("Default configuration created")
        except OSError as e:
            logging.error(f"Failed to create default configuration: {e}")

    def _font_paths(self, option: str) -> Optional[List[str]]:
        """
        Read an os.pathsep separated font list; empty means platform defaults.
        """
        raw = self.config.get('Fonts', option, fallback='').strip()
        if not raw:
            return None
        return [p.strip() for p in raw.split(os.pathsep) if p.strip()]

    def output_directory(self) -> str:
        return self.config.get('Paths', 'output_directory',
                               fallback=self.settings.get("output_directory"))

    def server_address(self):
        """
        Host and port for the HTTP service; the PORT environment variable wins.
        """
        host = self.config.get('Server', 'host', fallback=self.settings.get("host", "0.0.0.0"))
        port = self.config.getint('Server', 'port', fallback=int(self.settings.get("port", 3000)))
        env_port = os.environ.get("PORT")
        if env_port and env_port.isdigit():
            port = int(env_port)
        return host, port

    def flask_config(self) -> Dict[str, Any]:
        return {
            "OUTPUT_DIR": self.output_directory(),
            "EMOJI_FONT_PATHS": self._font_paths('emoji_font_paths'),
            "UNICODE_FONT_PATHS": self._font_paths('unicode_font_paths'),
            "STREAM_CHUNK_SIZE": self.config.getint('DEFAULT', 'stream_chunk_size', fallback=65536),
            "MAX_CONTENT_LENGTH": self.config.getint('DEFAULT', 'max_content_mb', fallback=50) * 1024 * 1024,
        }

    def _initialize_components(self):
        """
        Initialize all application components.
        """
        self.file_manager = FileManager()
        self.pdf_creator = PDFCreator(
            output_dir=self.output_directory(),
            emoji_font_paths=self._font_paths('emoji_font_paths'),
            unicode_font_paths=self._font_paths('unicode_font_paths'),
        )
        logging.info("All components initialized successfully")

    def _setup_signal_handlers(self):
        """
        Setup signal handlers for graceful shutdown.
        """
        def signal_handler(signum, frame):
            logging.info(f"Received signal {signum}, initiating graceful shutdown...")
            self.shutdown()
            sys.exit(0)

        if platform.system() != 'Windows':
            signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

    def generate(self, request_file: str, output_dir: Optional[str] = None,
                 filename: Optional[str] = None) -> str:
        """
        Render one request stored as a JSON file.

        Args:
            request_file: JSON file with the same keys as the HTTP payload
            output_dir: Output directory (optional)
            filename: Custom output filename (optional)

        Returns:
            str: Path of the generated PDF
        """
        if not self.is_running:
            raise RuntimeError("Application not initialized")

        if output_dir:
            self.pdf_creator.output_dir = Path(output_dir)

        payload = self.file_manager.load_json(request_file)
        render_request = RenderRequest.from_payload(payload)
        logging.info(f"Generating PDF for '{render_request.metadata.title}'")
        return self.pdf_creator.create_pdf(render_request, filename)

    def serve(self, host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
        """
        Start the HTTP service.
        """
        if not self.is_running:
            raise RuntimeError("Application not initialized")

        from service.app import run_server

        default_host, default_port = self.server_address()
        run_server(host=host or default_host, port=port or default_port,
                   debug=debug, config=self.flask_config())

    def _handle_error(self, error: Exception, context: str = ""):
        """
        Report an application error.

        Args:
            error: The exception that occurred
            context: Additional context information
        """
        error_msg = f"Error in {context}: {str(error)}"

        if isinstance(error, EditorialPDFError):
            logging.error(error_msg)
            error_reporter.report_error(error.error_info)
        else:
            logging.error(error_msg)
            logging.error(traceback.format_exc())
            error_info = ErrorInfo(
                message=error_msg,
                category=ErrorCategory.UNKNOWN,
                severity=ErrorSeverity.HIGH,
                original_exception=error,
                context={"operation": context},
                traceback_str=traceback.format_exc()
            )
            error_reporter.report_error(error_info)

    def shutdown(self):
        """
        Graceful shutdown of the application.
        """
        if not self.is_running:
            return

        logging.info("Initiating application shutdown...")
        self.is_running = False

        self._save_settings()
        self._cleanup()
        logging.info("Application shutdown completed")

    def _cleanup(self):
        """
        Cleanup application resources.
        """
        summary = error_reporter.get_error_summary()
        if summary["total_errors"]:
            logging.info(f"Error summary: {summary['categories']}")
        logging.debug("Cleanup completed")


def parse_arguments(argv: Optional[List[str]] = None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Daily Editorial PDF Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve                                   # Start the HTTP service
  %(prog)s serve --port 8080                       # Custom port
  %(prog)s generate request.json                   # Render one request to ./output
  %(prog)s generate request.json -o ./pdfs         # Custom output directory
  %(prog)s --log-level DEBUG serve                 # Enable debug logging
        """
    )

    parser.add_argument(
        '--log-level', '-l',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Set logging level (default: INFO)'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Path to custom configuration file'
    )

    parser.add_argument(
        '--version', '-v',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command')

    generate_parser = subparsers.add_parser('generate', help='Render a JSON request file to PDF')
    generate_parser.add_argument('request_file', help='JSON file with problemTitle, analysis, ...')
    generate_parser.add_argument('--output', '-o', type=str, help='Output directory for generated PDFs')
    generate_parser.add_argument('--filename', '-f', type=str, help='Output filename')

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP service')
    serve_parser.add_argument('--host', type=str, help='Bind host')
    serve_parser.add_argument('--port', '-p', type=int, help='Bind port (PORT env var also works)')
    serve_parser.add_argument('--debug', action='store_true', help='Flask debug mode')

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = 'serve'
        args.host = None
        args.port = None
        args.debug = False
    return args


def main(argv: Optional[List[str]] = None):
    """
    Main function to start the Daily Editorial PDF Generator.
    """
    app_manager = None
    exit_code = 0

    try:
        args = parse_arguments(argv)

        app_manager = ApplicationManager()

        if args.log_level:
            app_manager.settings["log_level"] = args.log_level

        if args.config:
            app_manager.config_file = Path(args.config)

        app_manager.initialize()

        if args.command == 'generate':
            pdf_path = app_manager.generate(args.request_file, args.output, args.filename)
            print(pdf_path)
        else:
            app_manager.serve(args.host, args.port, args.debug)

    except KeyboardInterrupt:
        logging.info("Application interrupted by user")

    except ValidationError as e:
        logging.error(str(e))
        exit_code = 2

    except Exception as e:
        error_msg = f"Fatal application error: {e}"
        if app_manager:
            app_manager._handle_error(e, "Main Application")
        else:
            print(error_msg, file=sys.stderr)
        exit_code = 1

    finally:
        if app_manager:
            app_manager.shutdown()

    return exit_code


if __name__ == "__main__":
    start = time.perf_counter()
    code = main()
    logging.debug(f"Finished in {time.perf_counter() - start:.2f}s")
    sys.exit(code)
