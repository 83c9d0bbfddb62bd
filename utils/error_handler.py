"""
Error handling utilities for the endpoint catalog panel.
Provides centralized error handling, user-friendly error messages, and error dialogs.
"""
import traceback
from typing import Optional, Dict, Any, Callable, List, Union
from enum import Enum
from dataclasses import dataclass
from datetime import datetime

from .logger import get_logger


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors that can occur."""
    CONFIGURATION = "configuration"
    NETWORK = "network"
    SCAN = "scan"
    UI = "ui"
    VALIDATION = "validation"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_USER_MESSAGES = {
    ErrorCategory.CONFIGURATION: "There's an issue with the catalog configuration. Please check your settings.",
    ErrorCategory.NETWORK: "Unable to reach the API description. Please check your network connection.",
    ErrorCategory.SCAN: "Endpoints could not be discovered. The previous endpoint list is kept.",
    ErrorCategory.TIMEOUT: "Endpoint discovery took too long to complete. Please try again.",
    ErrorCategory.VALIDATION: "The provided input is not valid. Please check and try again.",
    ErrorCategory.UI: "An interface error occurred. Please reopen the panel if the problem persists.",
}

_SUGGESTED_ACTIONS = {
    ErrorCategory.NETWORK: [
        "Check your internet connection",
        "Verify the OpenAPI URL is correct",
        "Check if the service is running",
    ],
    ErrorCategory.CONFIGURATION: [
        "Check your .env configuration file",
        "Verify CATALOG_* settings have valid values",
        "Restart the application",
    ],
    ErrorCategory.SCAN: [
        "Verify the OpenAPI document is valid JSON",
        "Check that the document has a 'paths' section",
        "Trigger a refresh once the source is fixed",
    ],
    ErrorCategory.TIMEOUT: [
        "Try the refresh again",
        "Increase CATALOG_SCAN_TIMEOUT",
    ],
    ErrorCategory.VALIDATION: [
        "Check your input format",
        "Refer to the documentation",
    ],
    ErrorCategory.UI: [
        "Try refreshing the endpoint tree",
        "Restart the application",
        "Report this issue if it persists",
    ],
}


@dataclass
class ErrorInfo:
    """Information about an error."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    technical_details: Optional[str] = None
    user_message: Optional[str] = None
    suggested_actions: Optional[list] = None
    timestamp: Optional[datetime] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()

        if self.user_message is None:
            self.user_message = _USER_MESSAGES.get(
                self.category,
                "An unexpected error occurred. Please try again or check the logs."
            )

        if self.suggested_actions is None:
            self.suggested_actions = list(_SUGGESTED_ACTIONS.get(self.category, [
                "Try the operation again",
                "Check the application logs for more details",
            ]))


class ErrorHandler:
    """
    Centralized error handler for the endpoint catalog.
    """

    def __init__(self, parent_window: Optional[Any] = None):
        """
        Initialize error handler.

        Args:
            parent_window: Tk window used as dialog parent; no dialogs without one
        """
        self.parent_window = parent_window
        self.logger = get_logger("ErrorHandler")
        self.error_callbacks: Dict[ErrorCategory, List[Callable]] = {}
        self.error_history: List[ErrorInfo] = []
        self.max_history_size = 100

    def handle_error(self,
                     error: Union[Exception, ErrorInfo],
                     context: Optional[Dict[str, Any]] = None,
                     show_dialog: bool = True,
                     callback: Optional[Callable] = None) -> ErrorInfo:
        """
        Handle an error with logging and optional user notification.

        Args:
            error: Exception or prepared ErrorInfo
            context: Extra context merged into the error
            show_dialog: Whether to show a dialog (needs a parent window)
            callback: Called with the resulting ErrorInfo

        Returns:
            The ErrorInfo that was recorded
        """
        if isinstance(error, Exception):
            error_info = self._exception_to_error_info(error, context)
        else:
            error_info = error
            if context:
                error_info.context = {**(error_info.context or {}), **context}

        self._log_error(error_info)
        self._add_to_history(error_info)

        if show_dialog:
            self._show_error_dialog(error_info)

        self._execute_callbacks(error_info)

        if callback:
            try:
                callback(error_info)
            except Exception as e:
                self.logger.error(f"Error in error callback: {e}")

        return error_info

    def _exception_to_error_info(self,
                                 exception: Exception,
                                 context: Optional[Dict[str, Any]] = None) -> ErrorInfo:
        """Convert an exception to ErrorInfo."""
        category = getattr(exception, 'category', None) or self._categorize_exception(exception)
        severity = self._determine_severity(exception, category)

        technical_details = f"{type(exception).__name__}: {exception}"
        if exception.__traceback__:
            technical_details += f"\n\nTraceback:\n{''.join(traceback.format_tb(exception.__traceback__))}"

        return ErrorInfo(
            category=category,
            severity=severity,
            message=str(exception),
            technical_details=technical_details,
            context=context
        )

    def _categorize_exception(self, exception: Exception) -> ErrorCategory:
        """Categorize an exception based on its type and message."""
        exception_type = type(exception).__name__.lower()
        exception_message = str(exception).lower()

        if 'timeout' in exception_type or 'timed out' in exception_message:
            return ErrorCategory.TIMEOUT

        if any(keyword in exception_type for keyword in
               ['connection', 'network', 'socket', 'http', 'client']):
            return ErrorCategory.NETWORK

        if any(keyword in exception_message for keyword in
               ['config', 'setting', 'environment']):
            return ErrorCategory.CONFIGURATION

        if any(keyword in exception_type for keyword in ['json', 'decode', 'scan']):
            return ErrorCategory.SCAN

        if any(keyword in exception_type for keyword in
               ['value', 'type', 'attribute', 'key']):
            return ErrorCategory.VALIDATION

        if any(keyword in exception_type for keyword in ['tcl', 'tk', 'widget']):
            return ErrorCategory.UI

        return ErrorCategory.UNKNOWN

    def _determine_severity(self, exception: Exception, category: ErrorCategory) -> ErrorSeverity:
        """Determine error severity based on exception and category."""
        if isinstance(exception, (SystemExit, KeyboardInterrupt)):
            return ErrorSeverity.CRITICAL

        if category in [ErrorCategory.VALIDATION, ErrorCategory.TIMEOUT, ErrorCategory.SCAN]:
            return ErrorSeverity.WARNING

        return ErrorSeverity.ERROR

    def _log_error(self, error_info: ErrorInfo):
        """Log error information."""
        context_str = ""
        if error_info.context:
            context_items = [f"{k}={v}" for k, v in error_info.context.items()]
            context_str = f" | Context: {', '.join(context_items)}"

        log_message = f"[{error_info.category.value.upper()}] {error_info.message}{context_str}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(log_message)
        elif error_info.severity == ErrorSeverity.ERROR:
            self.logger.error(log_message)
        elif error_info.severity == ErrorSeverity.WARNING:
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)

        if error_info.technical_details:
            self.logger.debug(f"Technical details: {error_info.technical_details}")

    def _add_to_history(self, error_info: ErrorInfo):
        """Add error to history."""
        self.error_history.append(error_info)

        if len(self.error_history) > self.max_history_size:
            self.error_history = self.error_history[-self.max_history_size:]

    def _show_error_dialog(self, error_info: ErrorInfo):
        """Show appropriate error dialog to user."""
        if not self.parent_window:
            return

        try:
            from tkinter import messagebox

            if error_info.severity == ErrorSeverity.INFO:
                messagebox.showinfo("Information", error_info.user_message, parent=self.parent_window)
            elif error_info.severity == ErrorSeverity.WARNING:
                messagebox.showwarning("Warning", error_info.user_message, parent=self.parent_window)
            else:
                actions = "\n".join(f"• {action}" for action in (error_info.suggested_actions or [])[:4])
                detail = f"{error_info.user_message}\n\nSuggested actions:\n{actions}" if actions \
                    else error_info.user_message
                title = "Critical Error" if error_info.severity == ErrorSeverity.CRITICAL else "Error"
                messagebox.showerror(title, detail, parent=self.parent_window)

        except Exception as e:
            self.logger.error(f"Error showing error dialog: {e}")

    def _execute_callbacks(self, error_info: ErrorInfo):
        """Execute registered callbacks for error category."""
        for callback in self.error_callbacks.get(error_info.category, []):
            try:
                callback(error_info)
            except Exception as e:
                self.logger.error(f"Error in error callback: {e}")

    def register_error_callback(self, category: ErrorCategory, callback: Callable):
        """Register a callback for specific error categories."""
        self.error_callbacks.setdefault(category, []).append(callback)

    def get_error_history(self, category: Optional[ErrorCategory] = None) -> List[ErrorInfo]:
        """Get error history, optionally filtered by category."""
        if category:
            return [error for error in self.error_history if error.category == category]
        return self.error_history.copy()

    def clear_error_history(self):
        """Clear error history."""
        self.error_history.clear()
        self.logger.info("Error history cleared")


# Global error handler instance
_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler(parent_window: Optional[Any] = None) -> ErrorHandler:
    """Get the global error handler instance."""
    global _global_error_handler

    if _global_error_handler is None:
        _global_error_handler = ErrorHandler(parent_window)
    elif parent_window and _global_error_handler.parent_window != parent_window:
        _global_error_handler.parent_window = parent_window

    return _global_error_handler


def handle_error(error: Union[Exception, ErrorInfo],
                 context: Optional[Dict[str, Any]] = None,
                 show_dialog: bool = True,
                 parent_window: Optional[Any] = None) -> ErrorInfo:
    """Convenience function to handle errors."""
    error_handler = get_error_handler(parent_window)
    return error_handler.handle_error(error, context, show_dialog)
