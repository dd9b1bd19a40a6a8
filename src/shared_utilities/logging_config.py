"""
Loguru setup shared by the attribution tools.

Modules obtain a component-bound logger with ``get_logger(__name__)`` at any
time; sinks are installed once, by the CLI, through ``configure_logging``.
Keyword arguments passed to log calls end up in the record's ``extra``.
"""

import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from .telemetry import SERVICE_NAME, SERVICE_VERSION

LOG_FILE_NAME = "ai-attribution.log"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<level>{message}</level>"
)
CONSOLE_FORMAT_STRUCTURED = CONSOLE_FORMAT + " | {extra}"
FILE_FORMAT = "{time} | {level} | {name}:{function}:{line} | {message}"


class LoggingManager:
    """Installs the console and optional file sinks exactly once."""

    def __init__(self, service_name: str = SERVICE_NAME):
        self.service_name = service_name
        self._configured = False

    @property
    def configured(self) -> bool:
        return self._configured

    def configure_logging(
        self,
        level: str = "INFO",
        enable_file_logging: bool = False,
        log_file_path: Path | None = None,
        structured_format: bool = True,
    ) -> None:
        """
        Replace loguru's default handler with the toolkit sinks.

        Args:
            level: Minimum level for every sink
            enable_file_logging: Also write a rotating log file
            log_file_path: Log file location, defaults to ``logs/ai-attribution.log``
            structured_format: Show bound context on the console and
                serialize file records as JSON
        """
        if self._configured:
            return

        logger.remove()
        logger.configure(
            extra={
                "component": self.service_name,
                "service_name": self.service_name,
                "version": SERVICE_VERSION,
            }
        )

        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT_STRUCTURED if structured_format else CONSOLE_FORMAT,
            level=level,
            colorize=True,
            diagnose=False,
        )

        if enable_file_logging:
            log_file_path = log_file_path or Path.cwd() / "logs" / LOG_FILE_NAME
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(log_file_path),
                format=FILE_FORMAT,
                level=level,
                rotation="10 MB",
                retention="30 days",
                compression="gz",
                diagnose=False,
                serialize=structured_format,
            )

        self._configured = True
        logger.debug(
            "Logging configured",
            level=level,
            file_logging=enable_file_logging,
        )

    def get_logger(self, name: str) -> Any:
        """Logger bound to ``name`` as its ``component``."""
        return logger.bind(component=name)

    def log_operation_error(self, operation: str, error: Exception, **kwargs) -> None:
        """Log a failed operation with its error type and any extra context."""
        logger.bind(component=operation).error(
            f"{operation} failed: {error}",
            operation=operation,
            error_type=type(error).__name__,
            **kwargs,
        )


_logging_manager: LoggingManager | None = None


def get_logging_manager() -> LoggingManager:
    """Get or create the process-wide logging manager."""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager()
    return _logging_manager


def configure_logging(
    level: str | None = None,
    structured: bool = True,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure logging from the environment.

    ``LOG_LEVEL`` (default INFO) and ``ENABLE_FILE_LOGGING`` (default false)
    are read when the corresponding argument is None.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    if enable_file_logging is None:
        enable_file_logging = os.getenv("ENABLE_FILE_LOGGING", "false").lower() == "true"

    get_logging_manager().configure_logging(
        level=level,
        enable_file_logging=enable_file_logging,
        structured_format=structured,
    )


def get_logger(name: str) -> Any:
    """Shortcut for ``get_logging_manager().get_logger``."""
    return get_logging_manager().get_logger(name)


def log_operation_error(operation: str, error: Exception, **kwargs) -> None:
    """Shortcut for ``get_logging_manager().log_operation_error``."""
    get_logging_manager().log_operation_error(operation, error, **kwargs)
