"""
File Manager for the Daily Editorial PDF Generator
Handles output directories, download filenames and request files with error handling
"""

import os
import json
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Any, Union
from datetime import datetime
import logging

from utils.error_handler import FileSystemError, handle_exception, ErrorDetector

logger = logging.getLogger(__name__)

DEFAULT_PDF_STEM = "Daily"


class FileManager:
    """
    Utility class for managing files and directories
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        """
        Initialize File Manager

        Args:
            base_dir (Optional[str]): Base directory for operations
        """
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()

    @handle_exception
    def ensure_directory(self, path: Union[str, Path]) -> Path:
        """
        Ensure directory exists

        Args:
            path (Union[str, Path]): Directory path

        Returns:
            Path: Path object of the directory

        Raises:
            FileSystemError: If directory creation fails
        """
        path_obj = Path(path)

        if not str(path_obj).strip():
            raise FileSystemError("Empty path provided")

        if path_obj.exists() and not path_obj.is_dir():
            raise FileSystemError(f"Path exists but is not a directory: {path_obj}", str(path_obj))

        if not path_obj.exists():
            parent = path_obj.parent if path_obj.parent.exists() else Path.cwd()
            if not ErrorDetector.check_disk_space(str(parent), required_mb=10):
                logger.warning(f"Low disk space when creating directory: {path_obj}")

        try:
            path_obj.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise FileSystemError(f"Permission denied creating directory: {path_obj}", str(path_obj), e)
        except OSError as e:
            raise FileSystemError(f"OS error creating directory: {path_obj}", str(path_obj), e)

        logger.debug(f"Directory ensured: {path_obj}")
        return path_obj

    def safe_filename(self, filename: str, max_length: int = 255) -> str:
        """
        Create a safe filename by removing/replacing invalid characters

        Args:
            filename (str): Original filename
            max_length (int): Maximum filename length

        Returns:
            str: Safe filename
        """
        invalid_chars = '<>:"/\\|?*'
        safe_name = filename

        for char in invalid_chars:
            safe_name = safe_name.replace(char, '_')

        # Remove multiple consecutive underscores
        while '__' in safe_name:
            safe_name = safe_name.replace('__', '_')

        safe_name = safe_name.strip(' .')

        if len(safe_name) > max_length:
            name_part, ext_part = os.path.splitext(safe_name)
            max_name_length = max_length - len(ext_part)
            safe_name = name_part[:max_name_length] + ext_part

        if not safe_name or safe_name in ['.', '..']:
            safe_name = f"file_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

        return safe_name

    def generate_pdf_filename(self, date: Optional[str] = None, prefix: str = "LeetCode") -> str:
        """
        Generate the download filename: ``<prefix>_<date>.pdf``

        Every non alphanumeric character of the date becomes ``_``; without a
        date the stem is ``Daily``.

        Args:
            date (str, optional): Display date sent with the request
            prefix (str): Filename prefix

        Returns:
            str: Generated filename
        """
        stem = re.sub(r'[^a-zA-Z0-9]', '_', date) if date else DEFAULT_PDF_STEM
        filename = f"{prefix}_{stem}.pdf"
        logger.debug(f"Generated PDF filename: {filename}")
        return filename

    @handle_exception
    def save_bytes(self, data: bytes, filepath: Union[str, Path]) -> Path:
        """
        Write bytes atomically (temporary file in the same directory, then rename)

        Args:
            data (bytes): File content
            filepath (Union[str, Path]): Destination path

        Returns:
            Path: Destination path
        """
        path_obj = Path(filepath)
        self.ensure_directory(path_obj.parent)

        fd, temp_name = tempfile.mkstemp(prefix=".tmp_", suffix=path_obj.suffix, dir=str(path_obj.parent))
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(temp_name, path_obj)
        except OSError as e:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise FileSystemError(f"Failed to write file: {path_obj}", str(path_obj), e)

        logger.debug(f"Saved {len(data)} bytes to {path_obj}")
        return path_obj

    @handle_exception
    def load_json(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """
        Load a JSON object from file

        Args:
            filepath (Union[str, Path]): File path

        Returns:
            Dict[str, Any]: Loaded data

        Raises:
            FileSystemError: If the file is missing, unreadable or not a JSON object
        """
        path_obj = Path(filepath)
        if not path_obj.is_file():
            raise FileSystemError(f"File not found: {path_obj}", str(path_obj))

        try:
            with open(path_obj, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise FileSystemError(f"Failed to read JSON from {path_obj}: {e}", str(path_obj), e)

        if not isinstance(data, dict):
            raise FileSystemError(f"Expected a JSON object in {path_obj}", str(path_obj))
        return data
