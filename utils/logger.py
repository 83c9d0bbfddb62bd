"""
Logging system for the endpoint catalog panel.
Provides console and rotating file output under a single logger hierarchy.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Dict, Any
from enum import Enum


ROOT_LOGGER_NAME = "EndpointCatalog"


class LogLevel(Enum):
    """Log levels for the application."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class CatalogLogger:
    """
    Centralized logging for the endpoint catalog.

    Every component logs through a child of the ``EndpointCatalog`` logger,
    so handlers configured here apply to the whole application.
    """

    def __init__(self,
                 name: str = ROOT_LOGGER_NAME,
                 log_level: LogLevel = LogLevel.INFO,
                 log_to_file: bool = True,
                 log_to_console: bool = True,
                 log_directory: Optional[str] = None):
        """
        Initialize the logging system.

        Args:
            name: Root logger name
            log_level: Minimum log level to capture
            log_to_file: Whether to log to file
            log_to_console: Whether to log to console
            log_directory: Directory for log files (defaults to logs/)
        """
        self.name = name
        self.log_level = log_level
        self.log_to_file = log_to_file
        self.log_to_console = log_to_console

        if log_directory:
            self.log_directory = Path(log_directory)
        else:
            self.log_directory = Path(__file__).parent.parent / "logs"

        if self.log_to_file:
            self.log_directory.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(log_level.value)

        # Re-initialization must not stack handlers
        self.logger.handlers.clear()

        self._setup_handlers()

        self.logger.info(f"Logging system initialized - Level: {log_level.name}")

    def _setup_handlers(self):
        """Set up logging handlers for file and console output."""
        if self.log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.log_level.value)
            console_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%H:%M:%S'
            ))
            self.logger.addHandler(console_handler)

        if self.log_to_file:
            file_handler = logging.handlers.RotatingFileHandler(
                self.log_directory / f"{self.name.lower()}.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(logging.DEBUG)  # File gets all levels
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                self.log_directory / f"{self.name.lower()}_errors.log",
                maxBytes=5 * 1024 * 1024,  # 5MB
                backupCount=3
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(error_handler)

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        """
        Get a logger instance.

        Args:
            name: Optional name for child logger

        Returns:
            Logger instance
        """
        if name:
            return logging.getLogger(f"{self.name}.{name}")
        return self.logger

    def log_exception(self,
                      message: str,
                      exception: Exception,
                      context: Optional[Dict[str, Any]] = None,
                      logger_name: Optional[str] = None):
        """
        Log an exception with context information.

        Args:
            message: Descriptive message about the error
            exception: The exception that occurred
            context: Additional context information
            logger_name: Optional specific logger name
        """
        logger = self.get_logger(logger_name)

        context_str = ""
        if context:
            context_items = [f"{k}={v}" for k, v in context.items()]
            context_str = f" | Context: {', '.join(context_items)}"

        logger.error(f"{message} | Exception: {type(exception).__name__}: {exception}{context_str}",
                     exc_info=exception)

    def log_scan(self,
                 source: str,
                 endpoint_count: Optional[int] = None,
                 duration_ms: Optional[float] = None,
                 error: Optional[str] = None):
        """
        Log the outcome of an endpoint scan.

        Args:
            source: Where endpoints were read from (file path or URL)
            endpoint_count: Number of endpoints discovered
            duration_ms: Scan duration in milliseconds
            error: Error message if the scan failed
        """
        logger = self.get_logger("Scanner")

        if error:
            logger.warning(f"Scan of {source} FAILED: {error}")
        else:
            time_str = f" ({duration_ms:.1f}ms)" if duration_ms is not None else ""
            logger.info(f"Scan of {source}: {endpoint_count} endpoints{time_str}")

    def log_user_action(self, action: str, details: Optional[str] = None):
        """
        Log user actions for debugging.

        Args:
            action: Description of the user action
            details: Additional details about the action
        """
        logger = self.get_logger("UserActions")

        message = f"User action: {action}"
        if details:
            message += f" | Details: {details}"

        logger.info(message)

    def set_log_level(self, level: LogLevel):
        """Change the console logging level at runtime."""
        self.log_level = level
        self.logger.setLevel(level.value)

        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and handler.stream == sys.stdout:
                handler.setLevel(level.value)

        self.logger.info(f"Log level changed to {level.name}")

    def get_log_files(self) -> Dict[str, Path]:
        """
        Get paths to current log files.

        Returns:
            Dictionary mapping log types to file paths
        """
        return {
            "main": self.log_directory / f"{self.name.lower()}.log",
            "errors": self.log_directory / f"{self.name.lower()}_errors.log"
        }


# Global logger instance
_global_logger: Optional[CatalogLogger] = None


def _ensure_logger() -> CatalogLogger:
    global _global_logger

    if _global_logger is None:
        _global_logger = CatalogLogger(log_to_file=False)

    return _global_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger from the global logging system.

    Args:
        name: Optional name for child logger

    Returns:
        Logger instance
    """
    return _ensure_logger().get_logger(name)


def initialize_logging(log_level: LogLevel = LogLevel.INFO,
                       log_to_file: bool = True,
                       log_to_console: bool = True,
                       log_directory: Optional[str] = None) -> CatalogLogger:
    """
    Initialize the global logging system.

    Args:
        log_level: Minimum log level to capture
        log_to_file: Whether to log to file
        log_to_console: Whether to log to console
        log_directory: Directory for log files

    Returns:
        Initialized logger instance
    """
    global _global_logger

    _global_logger = CatalogLogger(
        log_level=log_level,
        log_to_file=log_to_file,
        log_to_console=log_to_console,
        log_directory=log_directory
    )

    return _global_logger


def log_exception(message: str,
                  exception: Exception,
                  context: Optional[Dict[str, Any]] = None,
                  logger_name: Optional[str] = None):
    """Convenience function to log exceptions."""
    _ensure_logger().log_exception(message, exception, context, logger_name)


def log_user_action(action: str, details: Optional[str] = None):
    """Convenience function to log user actions."""
    _ensure_logger().log_user_action(action, details)


def log_scan(source: str,
             endpoint_count: Optional[int] = None,
             duration_ms: Optional[float] = None,
             error: Optional[str] = None):
    """Convenience function to log scan outcomes."""
    _ensure_logger().log_scan(source, endpoint_count, duration_ms, error)
