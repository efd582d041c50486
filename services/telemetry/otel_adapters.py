"""OpenTelemetry implementations of the vendor-neutral metrics interfaces.

Each adapter forwards straight to the matching OpenTelemetry instrument; no
buffering or aggregation happens here. Observable gauges are the one piece
with a lifecycle: OpenTelemetry offers no way to unregister a callback, so the
adapter detaches its own callback on stop and the instrument observes nothing
from then on.
"""

import logging
from collections.abc import Iterable, Sequence

from opentelemetry import metrics as otel_metrics
from opentelemetry.metrics import CallbackOptions, Observation
from opentelemetry.sdk.metrics import MeterProvider as SdkMeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource

from services.telemetry.metrics import (
    AsyncMeasurement,
    Attributes,
    GaugeCallback,
    GaugeHandle,
    Histogram,
    Meter,
    MeterProvider,
    MonotonicCounter,
    UpDownCounter,
)
from services.telemetry.provider import TelemetryProvider
from shared.config import Settings

logger = logging.getLogger(__name__)


class OtelCounterAdapter(MonotonicCounter):
    """Monotonic counter backed by an OpenTelemetry Counter."""

    def __init__(self, counter: otel_metrics.Counter) -> None:
        self.otel_counter = counter

    def add(self, value: int, attributes: Attributes) -> None:
        self.otel_counter.add(value, attributes=dict(attributes))


class OtelUpDownCounterAdapter(UpDownCounter):
    """Up/down counter backed by an OpenTelemetry UpDownCounter."""

    def __init__(self, counter: otel_metrics.UpDownCounter) -> None:
        self.otel_up_down_counter = counter

    def add(self, value: int, attributes: Attributes) -> None:
        self.otel_up_down_counter.add(value, attributes=dict(attributes))


class OtelHistogramAdapter(Histogram):
    """Histogram backed by an OpenTelemetry Histogram."""

    def __init__(self, histogram: otel_metrics.Histogram) -> None:
        self.otel_histogram = histogram

    def record(self, value: float, attributes: Attributes) -> None:
        self.otel_histogram.record(value, attributes=dict(attributes))


class OtelObserverAdapter(AsyncMeasurement):
    """Collects the observations a gauge callback records during one collection."""

    def __init__(self) -> None:
        self.observations: list[Observation] = []

    def record(self, value: float, attributes: Attributes) -> None:
        self.observations.append(Observation(value, attributes=dict(attributes)))


class GaugeHandleState:
    """Callback shared between a gauge handle and its registered OpenTelemetry callback."""

    def __init__(self, callback: GaugeCallback) -> None:
        self.callback: GaugeCallback | None = callback

    def observe(self, options: CallbackOptions) -> Iterable[Observation]:
        callback = self.callback
        if callback is None:
            return []
        observer = OtelObserverAdapter()
        callback(observer)
        return observer.observations


class OtelGaugeAdapter(GaugeHandle):
    """Handle on an OpenTelemetry observable gauge."""

    def __init__(self, gauge: otel_metrics.ObservableGauge, state: GaugeHandleState) -> None:
        self.otel_gauge = gauge
        self.state = state

    def stop(self) -> None:
        self.state.callback = None


class OtelMeterAdapter(Meter):
    """Meter that creates OpenTelemetry-backed instruments."""

    def __init__(self, meter: otel_metrics.Meter) -> None:
        self.otel_meter = meter

    def create_gauge(self, name: str, callback: GaugeCallback, units: str, description: str) -> GaugeHandle:
        state = GaugeHandleState(callback)
        gauge = self.otel_meter.create_observable_gauge(
            name, callbacks=[state.observe], unit=units, description=description
        )
        return OtelGaugeAdapter(gauge, state)

    def create_up_down_counter(self, name: str, units: str, description: str) -> UpDownCounter:
        return OtelUpDownCounterAdapter(
            self.otel_meter.create_up_down_counter(name, unit=units, description=description)
        )

    def create_counter(self, name: str, units: str, description: str) -> MonotonicCounter:
        return OtelCounterAdapter(self.otel_meter.create_counter(name, unit=units, description=description))

    def create_histogram(self, name: str, units: str, description: str) -> Histogram:
        return OtelHistogramAdapter(self.otel_meter.create_histogram(name, unit=units, description=description))


class OtelMeterProviderAdapter(MeterProvider):
    """Meter provider backed by an OpenTelemetry meter provider."""

    def __init__(self, meter_provider: otel_metrics.MeterProvider) -> None:
        self.otel_meter_provider = meter_provider

    def get_meter(self, scope: str, attributes: Attributes) -> Meter:
        return OtelMeterAdapter(self.otel_meter_provider.get_meter(scope, attributes=dict(attributes) or None))


def create_otel_provider(settings: Settings, metric_readers: Sequence[MetricReader] | None = None) -> TelemetryProvider:
    """Create a telemetry provider backed by the OpenTelemetry SDK.

    Args:
        settings: Settings supplying the service name and exporter choice
        metric_readers: Readers to attach; defaults to the configured exporter

    Returns:
        Telemetry provider whose init installs the SDK meter provider globally
    """
    if metric_readers is None:
        metric_readers = []
        if settings.otel_metrics_exporter == "console":
            metric_readers.append(
                PeriodicExportingMetricReader(
                    ConsoleMetricExporter(),
                    export_interval_millis=settings.otel_export_interval_millis,
                )
            )
        elif settings.otel_metrics_exporter != "none":
            logger.warning(
                "Unknown metrics exporter, metrics will not be exported",
                extra={"exporter": settings.otel_metrics_exporter},
            )

    resource = Resource.create({SERVICE_NAME: settings.otel_service_name})
    sdk_provider = SdkMeterProvider(metric_readers=list(metric_readers), resource=resource)

    def init() -> None:
        otel_metrics.set_meter_provider(sdk_provider)

    logger.info(
        "OpenTelemetry meter provider created",
        extra={"service_name": settings.otel_service_name, "readers": len(metric_readers)},
    )
    return TelemetryProvider(OtelMeterProviderAdapter(sdk_provider), init=init)
