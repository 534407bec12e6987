"""
Error Handling Module for the Daily Editorial PDF Generator

This module provides custom exceptions, small detection utilities and the
central error reporter used by the PDF pipeline, the HTTP service and the
command line entry point.
"""

import logging
import traceback
import functools
import os
import shutil
from typing import Dict, Any, Optional, Callable, List, Sequence
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    VALIDATION = "validation"
    RENDERING = "rendering"
    FONT = "font"
    FILE_SYSTEM = "file_system"
    UNKNOWN = "unknown"


@dataclass
class ErrorInfo:
    """Structured error information"""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    original_exception: Optional[Exception] = None
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    traceback_str: Optional[str] = None
    recovery_suggestions: List[str] = field(default_factory=list)
    user_message: Optional[str] = None


# =============================================================================
# Custom Exception Classes
# =============================================================================

class EditorialPDFError(Exception):
    """Base exception for all generator specific errors"""

    def __init__(self, message: str, error_info: Optional[ErrorInfo] = None):
        super().__init__(message)
        self.error_info = error_info or ErrorInfo(
            message=message,
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.MEDIUM
        )

    @property
    def user_message(self) -> str:
        return self.error_info.user_message or str(self)


class ValidationError(EditorialPDFError):
    """Required request fields are missing or blank"""

    def __init__(self, message: str, missing_fields: Optional[Sequence[str]] = None):
        self.missing_fields = list(missing_fields or [])
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            context={"missing_fields": self.missing_fields},
            recovery_suggestions=[
                "Provide a non-empty problemTitle",
                "Provide a non-empty analysis text"
            ],
            user_message=message
        )
        super().__init__(message, error_info)


class RenderingError(EditorialPDFError):
    """Failures while talking to the PDF renderer backend"""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.RENDERING,
            severity=ErrorSeverity.HIGH,
            original_exception=original_exception,
            recovery_suggestions=[
                "Check that reportlab is installed correctly",
                "Try again with a shorter analysis text",
                "Check the configured font paths"
            ],
            user_message="Failed to generate PDF."
        )
        super().__init__(message, error_info)


class FontLoadError(RenderingError):
    """A font resource could not be loaded; callers fall back to a default font"""

    def __init__(self, message: str, font_path: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception)
        self.font_path = font_path
        self.error_info.category = ErrorCategory.FONT
        self.error_info.severity = ErrorSeverity.LOW
        self.error_info.context = {"font_path": font_path} if font_path else {}
        self.error_info.recovery_suggestions = [
            "Install an emoji capable TrueType font",
            "Point Fonts.emoji_font_paths at a usable font file"
        ]
        self.error_info.user_message = "Font could not be loaded, default font used."


class FileSystemError(EditorialPDFError):
    """File system related errors (permissions, disk space, etc.)"""

    def __init__(self, message: str, path: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.FILE_SYSTEM,
            severity=ErrorSeverity.HIGH,
            original_exception=original_exception,
            context={"path": path} if path else {},
            recovery_suggestions=[
                "Check file/directory permissions",
                "Ensure sufficient disk space",
                "Try a different output location"
            ],
            user_message="File system error occurred. Please check permissions and disk space."
        )
        super().__init__(message, error_info)


class UnexpectedError(EditorialPDFError):
    """Anything else; reported generically without internal detail"""

    def __init__(self, message: str, original_exception: Optional[Exception] = None,
                 operation: Optional[str] = None):
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.HIGH,
            original_exception=original_exception,
            context={"operation": operation} if operation else {},
            traceback_str=traceback.format_exc() if original_exception else None,
            user_message="An unexpected error occurred."
        )
        super().__init__(message, error_info)


# =============================================================================
# Error Detection Utilities
# =============================================================================

class ErrorDetector:
    """Utilities for detecting specific types of errors"""

    @staticmethod
    def check_disk_space(path: str, required_mb: int = 50) -> bool:
        """Check if there's sufficient disk space"""
        try:
            statvfs = os.statvfs(path)
            free_bytes = statvfs.f_frsize * statvfs.f_bavail
            free_mb = free_bytes / (1024 * 1024)
            return free_mb >= required_mb
        except (OSError, AttributeError):
            # Windows doesn't have os.statvfs, fallback to shutil
            try:
                free_bytes = shutil.disk_usage(path).free
                free_mb = free_bytes / (1024 * 1024)
                return free_mb >= required_mb
            except OSError:
                return True  # Assume sufficient space if can't check


# =============================================================================
# Error Reporting
# =============================================================================

class ErrorReporter:
    """Centralized error reporting and logging"""

    def __init__(self, max_history: int = 100):
        self.max_history = max_history
        self.error_history: List[ErrorInfo] = []

    def report_error(self, error_info: ErrorInfo, context: Optional[Dict[str, Any]] = None):
        """Report an error with full context"""
        self.error_history.append(error_info)
        if len(self.error_history) > self.max_history:
            del self.error_history[:-self.max_history]

        # Log based on severity
        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(f"CRITICAL ERROR: {error_info.message}")
        elif error_info.severity == ErrorSeverity.HIGH:
            logger.error(f"ERROR: {error_info.message}")
        elif error_info.severity == ErrorSeverity.MEDIUM:
            logger.warning(f"WARNING: {error_info.message}")
        else:
            logger.info(f"INFO: {error_info.message}")

        if error_info.context:
            logger.debug(f"Context: {error_info.context}")

        if context:
            logger.debug(f"Additional context: {context}")

        if error_info.traceback_str:
            logger.debug(f"Traceback: {error_info.traceback_str}")

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all reported errors"""
        if not self.error_history:
            return {"total_errors": 0, "categories": {}, "severity_counts": {}}

        categories = {}
        severity_counts = {}

        for error in self.error_history:
            cat = error.category.value
            categories[cat] = categories.get(cat, 0) + 1

            sev = error.severity.value
            severity_counts[sev] = severity_counts.get(sev, 0) + 1

        return {
            "total_errors": len(self.error_history),
            "categories": categories,
            "severity_counts": severity_counts,
            "recent_errors": [
                {
                    "message": e.message,
                    "category": e.category.value,
                    "severity": e.severity.value,
                    "timestamp": e.timestamp.isoformat()
                }
                for e in self.error_history[-10:]  # Last 10 errors
            ]
        }

    def clear(self):
        self.error_history.clear()


# =============================================================================
# Global Error Handler Instance
# =============================================================================

error_reporter = ErrorReporter()


def handle_exception(func: Callable) -> Callable:
    """Decorator to report project errors and wrap anything else in UnexpectedError"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except EditorialPDFError as e:
            error_reporter.report_error(e.error_info)
            raise
        except Exception as e:
            error = UnexpectedError(f"Unexpected error in {func.__name__}: {str(e)}",
                                    original_exception=e, operation=func.__name__)
            error_reporter.report_error(error.error_info)
            raise error from e
    return wrapper
