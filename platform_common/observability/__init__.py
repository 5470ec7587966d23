"""Observability module: thin OpenTelemetry integration."""

from platform_common.observability.tracing import (
    ERROR_MESSAGE_TAG,
    ERROR_TAG,
    create_tracer,
    get_tracer,
    init_tracing,
    mark_span_error,
    shutdown_tracing,
    start_span,
)

__all__ = [
    "ERROR_TAG",
    "ERROR_MESSAGE_TAG",
    "create_tracer",
    "get_tracer",
    "init_tracing",
    "mark_span_error",
    "shutdown_tracing",
    "start_span",
]
