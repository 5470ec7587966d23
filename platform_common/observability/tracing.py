"""OpenTelemetry tracing configuration and span helpers."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.trace import Span, Status, StatusCode

_tracer_provider: Optional[TracerProvider] = None

ERROR_TAG = "error"
ERROR_MESSAGE_TAG = "err"


def init_tracing(
    service_name: str,
    otlp_endpoint: str = "jaeger:4317",
    service_version: str = "1.0.0",
) -> TracerProvider:
    """Initialize global OpenTelemetry tracing with an OTLP gRPC exporter.

    Args:
        service_name: Service name for traces
        otlp_endpoint: OTLP collector endpoint (default: jaeger:4317)
        service_version: Reported service version
    """
    global _tracer_provider

    resource = Resource.create({
        SERVICE_NAME: service_name,
        SERVICE_VERSION: service_version,
    })

    _tracer_provider = TracerProvider(resource=resource)
    _tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    )
    trace.set_tracer_provider(_tracer_provider)
    return _tracer_provider


def create_tracer(
    service_name: str,
    exporter: SpanExporter,
    service_version: str = "1.0.0",
) -> trace.Tracer:
    """Create a standalone tracer (no global side-effects)."""
    resource = Resource.create({
        SERVICE_NAME: service_name,
        SERVICE_VERSION: service_version,
    })
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider.get_tracer(service_name, service_version)


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer from the global provider."""
    return trace.get_tracer(name)


def shutdown_tracing() -> None:
    """Shutdown tracer provider and flush pending spans."""
    global _tracer_provider
    if _tracer_provider:
        _tracer_provider.shutdown()
        _tracer_provider = None


def mark_span_error(span: Span, error: BaseException) -> None:
    """Flag a span as failed and attach the error text."""
    message = str(error)
    span.set_attribute(ERROR_TAG, True)
    span.set_attribute(ERROR_MESSAGE_TAG, message)
    span.set_status(Status(StatusCode.ERROR, message))


@contextmanager
def start_span(
    tracer: trace.Tracer,
    name: str,
    attributes: Optional[Dict[str, Any]] = None,
) -> Iterator[Span]:
    """Open a span as the current span and end it when the block exits.

    An Exception leaving the block tags the span via mark_span_error and
    propagates unchanged. Cancellation ends the span without tagging it.
    """
    clean: Dict[str, Any] = {}
    for key, value in (attributes or {}).items():
        if value is not None:
            clean[key] = value if isinstance(value, (int, float, bool, str)) else str(value)

    with tracer.start_as_current_span(
        name,
        attributes=clean,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            mark_span_error(span, e)
            raise
