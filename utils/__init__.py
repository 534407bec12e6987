"""
Utils package for the Daily Editorial PDF Generator
Contains error handling and file management helpers
"""

from .error_handler import error_reporter
from .file_manager import FileManager

__all__ = ['FileManager', 'error_reporter']
