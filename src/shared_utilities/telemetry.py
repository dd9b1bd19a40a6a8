"""
OpenTelemetry tracing for attribution runs.

Spans are always created while tracing is enabled; they leave the process
only when ``OTEL_EXPORTER_OTLP_ENDPOINT`` names a collector. Set
``OTEL_SDK_DISABLED=true`` to turn tracing off entirely.
"""

import functools
import os
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace as otel_trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Status, StatusCode

SERVICE_NAME = "ai-attribution-toolkit"
SERVICE_VERSION = "1.0.0"

MAX_ATTRIBUTE_LENGTH = 100


def _attribute_value(value: Any) -> str | int | float | bool:
    """Numbers and booleans pass through; anything else becomes a bounded string."""
    if isinstance(value, (bool, int, float)):
        return value
    return str(value)[:MAX_ATTRIBUTE_LENGTH]


class TelemetryManager:
    """Owns the tracer used by every traced operation in the toolkit"""

    def __init__(self, service_name: str = SERVICE_NAME):
        self.service_name = service_name
        self.tracer: otel_trace.Tracer | None = None
        self.enabled = os.getenv("OTEL_SDK_DISABLED", "false").lower() != "true"

        if self.enabled:
            self.tracer = self._create_tracer()

    def _create_tracer(self) -> otel_trace.Tracer:
        provider = TracerProvider(
            resource=Resource.create(
                {
                    "service.name": self.service_name,
                    "service.version": SERVICE_VERSION,
                }
            )
        )

        endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        if endpoint:
            provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint))
            )

        otel_trace.set_tracer_provider(provider)
        return otel_trace.get_tracer(__name__)

    @contextmanager
    def trace_operation(
        self, operation_name: str, attributes: dict[str, Any] | None = None
    ) -> Iterator[Span | None]:
        """
        Run the enclosed block inside a span.

        Args:
            operation_name: Span name, e.g. ``walk_commit_history``
            attributes: Attributes recorded on the span when it starts

        Yields:
            The active span, or None while tracing is disabled

        Exceptions raised in the block are recorded on the span and re-raised.
        """
        if self.tracer is None:
            yield None
            return

        with self.tracer.start_as_current_span(operation_name) as span:
            for key, value in (attributes or {}).items():
                span.set_attribute(key, _attribute_value(value))

            try:
                yield span
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise

    def trace_function(
        self,
        operation_name: str | None = None,
        include_args: bool = False,
        include_result: bool = False,
    ) -> Callable[[Callable], Callable]:
        """
        Decorator wrapping every call of a function in a span.

        Args:
            operation_name: Span name, defaults to ``module.function``
            include_args: Record positional and keyword arguments
            include_result: Record a non-None return value
        """

        def decorator(func: Callable) -> Callable:
            if self.tracer is None:
                return func

            name = operation_name or f"{func.__module__}.{func.__name__}"

            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                with self.trace_operation(name) as span:
                    if include_args:
                        for index, arg in enumerate(args):
                            self.set_attribute(span, f"arg.{index}", arg)
                        for key, value in kwargs.items():
                            self.set_attribute(span, f"kwarg.{key}", value)

                    started = time.monotonic()
                    result = func(*args, **kwargs)
                    self.set_attribute(
                        span, "duration_seconds", time.monotonic() - started
                    )

                    if include_result and result is not None:
                        self.set_attribute(span, "result", result)

                    return result

            return wrapper

        return decorator

    def set_attribute(self, span: Span | None, key: str, value: Any) -> None:
        """Record ``value`` on ``span``; a no-op without a span."""
        if span is not None:
            span.set_attribute(key, _attribute_value(value))


_telemetry_manager: TelemetryManager | None = None


def get_telemetry_manager() -> TelemetryManager:
    """Get or create the process-wide telemetry manager"""
    global _telemetry_manager
    if _telemetry_manager is None:
        _telemetry_manager = TelemetryManager()
    return _telemetry_manager


def trace_operation(operation_name: str, attributes: dict[str, Any] | None = None):
    """Shortcut for ``get_telemetry_manager().trace_operation``."""
    return get_telemetry_manager().trace_operation(operation_name, attributes)


def trace_function(
    operation_name: str | None = None,
    include_args: bool = False,
    include_result: bool = False,
):
    """Shortcut for ``get_telemetry_manager().trace_function``."""
    return get_telemetry_manager().trace_function(
        operation_name, include_args, include_result
    )


def set_span_attribute(span: Span | None, key: str, value: Any) -> None:
    """Shortcut for ``get_telemetry_manager().set_attribute``."""
    get_telemetry_manager().set_attribute(span, key, value)
