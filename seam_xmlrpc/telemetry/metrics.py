"""
OpenTelemetry Metrics Collection

Counters and latency histograms for XML-RPC clients, servers and transports.
Names follow the xmlrpc.client.* / xmlrpc.server.* / xmlrpc.transport.* scheme.
"""

import time
import logging
from contextlib import contextmanager
from typing import Dict, Any, Iterator

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    PeriodicExportingMetricReader
)
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

logger = logging.getLogger(__name__)

_counters = {}
_histograms = {}


def setup_metrics(service_name: str,
                  otlp_endpoint: str = "localhost:4317",
                  export_interval_ms: int = 5000,
                  console: bool = False):
    """Configure OpenTelemetry metrics collection

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address
        export_interval_ms: Metrics export interval in milliseconds
        console: Also print metrics to stdout (development)
    """
    readers = [PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=otlp_endpoint),
        export_interval_millis=export_interval_ms
    )]
    if console:
        readers.append(PeriodicExportingMetricReader(
            ConsoleMetricExporter(),
            export_interval_millis=export_interval_ms
        ))

    metrics.set_meter_provider(MeterProvider(metric_readers=readers))
    meter = metrics.get_meter(service_name)

    logger.info(f"OpenTelemetry metrics configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return meter


def get_counter(name: str, description: str, unit: str = "1"):
    """Get or create counter"""
    if name not in _counters:
        meter = metrics.get_meter(__name__)
        _counters[name] = meter.create_counter(name=name, description=description, unit=unit)
    return _counters[name]


def get_histogram(name: str, description: str, unit: str = "ms"):
    """Get or create histogram"""
    if name not in _histograms:
        meter = metrics.get_meter(__name__)
        _histograms[name] = meter.create_histogram(name=name, description=description, unit=unit)
    return _histograms[name]


def increment_counter(name: str, amount: int = 1, attributes: Dict[str, Any] = None):
    """Increment counter value

    Args:
        name: Counter name
        amount: Amount to increment
        attributes: Attribute labels
    """
    get_counter(name, f"Counter for {name}").add(amount, attributes or {})


def record_latency(name: str, value_ms: float, attributes: Dict[str, Any] = None):
    """Record latency histogram

    Args:
        name: Histogram name
        value_ms: Latency value in milliseconds
        attributes: Attribute labels
    """
    get_histogram(name, f"Latency histogram for {name}").record(value_ms, attributes or {})


@contextmanager
def timed(name: str, attributes: Dict[str, Any] = None) -> Iterator[None]:
    """Record the enclosed block's wall time in histogram name, even on error"""
    start_time = time.time()
    try:
        yield
    finally:
        record_latency(name, (time.time() - start_time) * 1000, attributes)
