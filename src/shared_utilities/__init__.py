"""
Logging and tracing shared by the attribution tools
"""

from .logging_config import (
    configure_logging,
    get_logger,
    get_logging_manager,
    log_operation_error,
)
from .telemetry import (
    get_telemetry_manager,
    set_span_attribute,
    trace_function,
    trace_operation,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_logging_manager",
    "get_telemetry_manager",
    "log_operation_error",
    "set_span_attribute",
    "trace_function",
    "trace_operation",
]
