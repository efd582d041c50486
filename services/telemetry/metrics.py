"""Vendor-neutral metrics instruments.

Clients record measurements through these interfaces only. The no-op
implementations are the default; `services.telemetry.otel_adapters` maps
them onto OpenTelemetry.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping

Attributes = Mapping[str, str]


class MonotonicCounter(ABC):
    """Counter that only increases."""

    @abstractmethod
    def add(self, value: int, attributes: Attributes) -> None:
        """Add a non-negative value."""


class UpDownCounter(ABC):
    """Counter that may increase or decrease."""

    @abstractmethod
    def add(self, value: int, attributes: Attributes) -> None:
        """Add a (possibly negative) value."""


class Histogram(ABC):
    """Distribution of recorded values."""

    @abstractmethod
    def record(self, value: float, attributes: Attributes) -> None:
        """Record a single value."""


class AsyncMeasurement(ABC):
    """Sink handed to gauge callbacks during a collection."""

    @abstractmethod
    def record(self, value: float, attributes: Attributes) -> None:
        """Record an observed value."""


class GaugeHandle(ABC):
    """Handle on a registered gauge callback."""

    @abstractmethod
    def stop(self) -> None:
        """Stop invoking the gauge callback."""


GaugeCallback = Callable[[AsyncMeasurement], None]


class Meter(ABC):
    """Factory for instruments within one instrumentation scope."""

    @abstractmethod
    def create_gauge(self, name: str, callback: GaugeCallback, units: str, description: str) -> GaugeHandle:
        """Register an asynchronous gauge fed by callback."""

    @abstractmethod
    def create_up_down_counter(self, name: str, units: str, description: str) -> UpDownCounter:
        """Create an up/down counter."""

    @abstractmethod
    def create_counter(self, name: str, units: str, description: str) -> MonotonicCounter:
        """Create a monotonic counter."""

    @abstractmethod
    def create_histogram(self, name: str, units: str, description: str) -> Histogram:
        """Create a histogram."""


class MeterProvider(ABC):
    """Source of meters keyed by scope."""

    @abstractmethod
    def get_meter(self, scope: str, attributes: Attributes) -> Meter:
        """Return the meter for scope."""


class NoopGaugeHandle(GaugeHandle):
    def stop(self) -> None:
        pass


class NoopUpDownCounter(UpDownCounter):
    def add(self, value: int, attributes: Attributes) -> None:
        pass


class NoopMonotonicCounter(MonotonicCounter):
    def add(self, value: int, attributes: Attributes) -> None:
        pass


class NoopHistogram(Histogram):
    def record(self, value: float, attributes: Attributes) -> None:
        pass


class NoopMeter(Meter):
    """Meter whose instruments discard every measurement."""

    def create_gauge(self, name: str, callback: GaugeCallback, units: str, description: str) -> GaugeHandle:
        return NoopGaugeHandle()

    def create_up_down_counter(self, name: str, units: str, description: str) -> UpDownCounter:
        return NoopUpDownCounter()

    def create_counter(self, name: str, units: str, description: str) -> MonotonicCounter:
        return NoopMonotonicCounter()

    def create_histogram(self, name: str, units: str, description: str) -> Histogram:
        return NoopHistogram()


class NoopMeterProvider(MeterProvider):
    def get_meter(self, scope: str, attributes: Attributes) -> Meter:
        return NoopMeter()
