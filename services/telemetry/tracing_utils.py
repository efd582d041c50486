"""Timing and HTTP metric helpers used around every client operation."""

import time
from collections.abc import Callable, Mapping
from typing import TypeVar

from services.telemetry.metrics import Attributes, Meter

T = TypeVar("T")

SMITHY_METRICS_DNS_DURATION = "smithy.client.http.dns_duration"
SMITHY_METRICS_CONNECT_DURATION = "smithy.client.http.connect_duration"
SMITHY_METRICS_SSL_DURATION = "smithy.client.http.ssl_duration"
SMITHY_METRICS_THROUGHPUT = "smithy.client.http.throughput"
SMITHY_METRICS_UNKNOWN_METRIC = "smithy.client.http.unknown_metric"

# HTTP client metric name -> (smithy metric name, unit)
_CORE_METRICS: dict[str, tuple[str, str]] = {
    "DnsLatency": (SMITHY_METRICS_DNS_DURATION, "ms"),
    "ConnectLatency": (SMITHY_METRICS_CONNECT_DURATION, "ms"),
    "SslLatency": (SMITHY_METRICS_SSL_DURATION, "ms"),
    "Throughput": (SMITHY_METRICS_THROUGHPUT, "bytes/s"),
}


def make_call_with_timing(
    func: Callable[[], T],
    metric_name: str,
    meter: Meter,
    attributes: Attributes,
    description: str = "",
) -> T:
    """Call func and record its wall-clock duration in milliseconds.

    The duration is recorded whether func returns or raises.

    Args:
        func: Zero-argument callable to time
        metric_name: Histogram name
        meter: Meter the histogram is created on
        attributes: Attributes attached to the measurement
        description: Histogram description

    Returns:
        Whatever func returns
    """
    before = time.perf_counter()
    try:
        return func()
    finally:
        duration_ms = (time.perf_counter() - before) * 1000
        histogram = meter.create_histogram(metric_name, "ms", description)
        histogram.record(duration_ms, attributes)


def convert_core_metric_to_smithy(name: str) -> tuple[str, str]:
    """Map an HTTP client metric name to its smithy metric name and unit."""
    return _CORE_METRICS.get(name, (SMITHY_METRICS_UNKNOWN_METRIC, "unknown"))


def emit_core_http_metrics(
    http_metrics: Mapping[str, float],
    meter: Meter,
    attributes: Attributes,
    description: str = "",
) -> None:
    """Record known HTTP client metrics as histograms, skipping unknown ones."""
    for name, value in http_metrics.items():
        metric_name, units = convert_core_metric_to_smithy(name)
        if metric_name == SMITHY_METRICS_UNKNOWN_METRIC:
            continue
        meter.create_histogram(metric_name, units, description).record(value, attributes)
