"""
OpenTelemetry Trace Context Management

XML-RPC documents have no header section, so trace context travels in the
transport's own headers (HTTP headers for the HTTP adapters) using W3C
trace-context propagation.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional

from opentelemetry import context as otel_context
from opentelemetry import propagate, trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

logger = logging.getLogger(__name__)


def setup_tracer(service_name: str, otlp_endpoint: str = "localhost:4317"):
    """Configure OpenTelemetry tracer

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address
    """
    provider = TracerProvider(
        sampler=ALWAYS_ON,
        resource=Resource.create({"service.name": service_name}),
    )
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(provider)

    logger.info(f"OpenTelemetry trace configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return trace.get_tracer(service_name)


def inject_trace_context(carrier: Optional[MutableMapping[str, str]] = None) -> MutableMapping[str, str]:
    """Write the active trace context into a header mapping

    Args:
        carrier: Headers to update, a new dict when omitted

    Returns:
        The carrier (unchanged when no span is active)
    """
    if carrier is None:
        carrier = {}
    propagate.inject(carrier)
    return carrier


def extract_trace_context(carrier: Optional[Mapping[str, str]]) -> Optional[otel_context.Context]:
    """Read a trace context from a header mapping

    Returns:
        Context to run the request in, or None when the carrier is empty
    """
    if not carrier:
        return None
    return propagate.extract(carrier)


@contextmanager
def with_trace_context(ctx: Optional[otel_context.Context]) -> Iterator[None]:
    """Run the enclosed block with ctx attached as the current context"""
    if ctx is None:
        yield
        return

    token = otel_context.attach(ctx)
    try:
        yield
    finally:
        otel_context.detach(token)


def create_span(name: str,
                attributes: Dict[str, Any] = None,
                kind: trace.SpanKind = trace.SpanKind.INTERNAL,
                tracer_name: Optional[str] = None):
    """Create new span

    Args:
        name: Span name
        attributes: Span attributes
        kind: Span kind (CLIENT for outgoing calls, SERVER for dispatch)
        tracer_name: Instrumentation scope, defaults to this module

    Returns:
        Context manager yielding the span
    """
    tracer = trace.get_tracer(tracer_name or __name__)
    return tracer.start_as_current_span(name, attributes=attributes or {}, kind=kind)
