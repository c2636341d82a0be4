"""Unified error handling for host-side failures of the inspector."""

import sys
import traceback
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QMessageBox, QWidget

from utils import common

logger = common.get_logger('error_handler')


class ErrorLevel(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(Enum):
    """Standardized error codes."""
    # File errors
    EXPORT_FAILED = "EXPORT_FAILED"
    FILE_PERMISSION_DENIED = "FILE_PERMISSION_DENIED"

    # Configuration errors
    CONFIG_SAVE_FAILED = "CONFIG_SAVE_FAILED"

    # UI errors
    WEB_ENGINE_UNAVAILABLE = "WEB_ENGINE_UNAVAILABLE"

    # Generic errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class ErrorInfo:
    """Structured error information."""
    code: ErrorCode
    message: str
    level: ErrorLevel
    details: Optional[str] = None
    suggestion: Optional[str] = None
    technical_info: Optional[str] = None


ERROR_TEMPLATES: Dict[ErrorCode, ErrorInfo] = {
    ErrorCode.EXPORT_FAILED: ErrorInfo(
        code=ErrorCode.EXPORT_FAILED,
        message="Failed to export logs",
        level=ErrorLevel.ERROR,
        suggestion="Choose a writable location and try again",
    ),
    ErrorCode.FILE_PERMISSION_DENIED: ErrorInfo(
        code=ErrorCode.FILE_PERMISSION_DENIED,
        message="Permission denied accessing file",
        level=ErrorLevel.ERROR,
        suggestion="Choose a different location",
    ),
    ErrorCode.CONFIG_SAVE_FAILED: ErrorInfo(
        code=ErrorCode.CONFIG_SAVE_FAILED,
        message="Failed to save configuration",
        level=ErrorLevel.WARNING,
        suggestion="History and window settings will not persist",
    ),
    ErrorCode.WEB_ENGINE_UNAVAILABLE: ErrorInfo(
        code=ErrorCode.WEB_ENGINE_UNAVAILABLE,
        message="Qt WebEngine is not available",
        level=ErrorLevel.CRITICAL,
        suggestion="Install the PyQt6-WebEngine package",
    ),
}

DialogFn = Callable[[Optional[QWidget], ErrorInfo], None]


def _show_message_box(parent: Optional[QWidget], error_info: ErrorInfo) -> None:
    if error_info.level == ErrorLevel.CRITICAL:
        icon, title = QMessageBox.Icon.Critical, "Critical Error"
    elif error_info.level == ErrorLevel.ERROR:
        icon, title = QMessageBox.Icon.Critical, "Error"
    else:
        icon, title = QMessageBox.Icon.Warning, "Warning"

    msg_box = QMessageBox(parent)
    msg_box.setIcon(icon)
    msg_box.setWindowTitle(title)
    msg_box.setText(format_error_message(error_info))
    if error_info.technical_info:
        msg_box.setDetailedText(error_info.technical_info)
    msg_box.exec()


def format_error_message(error_info: ErrorInfo) -> str:
    message = error_info.message
    if error_info.details:
        message += f"\n\nDetails: {error_info.details}"
    if error_info.suggestion:
        message += f"\n\nSuggestion: {error_info.suggestion}"
    return message


class ErrorHandler(QObject):
    """Centralized error reporting for the inspector window.

    Page-originated problems are written to the page console log instead;
    this handler covers failures of the host application itself.
    """

    error_occurred = pyqtSignal(object)  # ErrorInfo

    def __init__(self, parent: Optional[QWidget] = None, dialog_fn: Optional[DialogFn] = None):
        super().__init__(parent)
        self.parent_widget = parent
        self.error_handlers: Dict[ErrorCode, Callable[[ErrorInfo, Optional[Dict[str, Any]]], None]] = {}
        self.error_count = 0
        self._dialog_fn = dialog_fn or _show_message_box

    def handle_error(self, error_code: ErrorCode, details: Optional[str] = None,
                     exception: Optional[BaseException] = None,
                     context: Optional[Dict[str, Any]] = None) -> ErrorInfo:
        """Log, signal and (for errors) display a failure."""
        self.error_count += 1

        template = ERROR_TEMPLATES.get(error_code, ErrorInfo(
            code=error_code,
            message=f"Error occurred: {error_code.value}",
            level=ErrorLevel.ERROR,
        ))
        error_info = replace(template)

        if details:
            error_info.details = details

        if exception is not None:
            error_info.technical_info = f"{type(exception).__name__}: {exception}"
            if error_info.level in (ErrorLevel.ERROR, ErrorLevel.CRITICAL):
                formatted = ''.join(traceback.format_exception(type(exception), exception, exception.__traceback__))
                error_info.technical_info += f"\n{formatted}"

        self._log_error(error_info, context)
        self.error_occurred.emit(error_info)

        handler = self.error_handlers.get(error_code)
        if handler is not None:
            try:
                handler(error_info, context)
            except Exception as handler_error:
                logger.error(f"Error handler failed: {handler_error}")

        if self.parent_widget is not None and error_info.level != ErrorLevel.INFO:
            self._dialog_fn(self.parent_widget, error_info)
        return error_info

    def _log_error(self, error_info: ErrorInfo, context: Optional[Dict[str, Any]] = None) -> None:
        log_message = f"[{error_info.code.value}] {error_info.message}"
        if error_info.details:
            log_message += f" - Details: {error_info.details}"
        if context:
            log_message += f" - Context: {context}"
        if error_info.technical_info:
            log_message += f"\nTechnical: {error_info.technical_info}"

        if error_info.level == ErrorLevel.INFO:
            logger.info(log_message)
        elif error_info.level == ErrorLevel.WARNING:
            logger.warning(log_message)
        elif error_info.level == ErrorLevel.ERROR:
            logger.error(log_message)
        else:
            logger.critical(log_message)

    def register_error_handler(self, error_code: ErrorCode,
                               handler: Callable[[ErrorInfo, Optional[Dict[str, Any]]], None]) -> None:
        """Register custom error handler for specific error code."""
        self.error_handlers[error_code] = handler
        logger.debug(f"Registered custom handler for {error_code.value}")

    def handle_exception(self, exception: BaseException, context: Optional[str] = None) -> ErrorInfo:
        return self.handle_error(
            error_code=self._map_exception_to_error_code(exception),
            details=context,
            exception=exception,
        )

    @staticmethod
    def _map_exception_to_error_code(exception: BaseException) -> ErrorCode:
        if isinstance(exception, PermissionError):
            return ErrorCode.FILE_PERMISSION_DENIED
        if isinstance(exception, OSError):
            return ErrorCode.EXPORT_FAILED
        return ErrorCode.UNKNOWN_ERROR


def setup_exception_hook(handler: ErrorHandler) -> None:
    """Route unhandled exceptions through ``handler``."""
    def exception_hook(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))
        handler.handle_exception(exc_value, "Unhandled exception")

    sys.excepthook = exception_hook


__all__ = [
    'ERROR_TEMPLATES',
    'ErrorCode',
    'ErrorHandler',
    'ErrorInfo',
    'ErrorLevel',
    'format_error_message',
    'setup_exception_hook',
]
