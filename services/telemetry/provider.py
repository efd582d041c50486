"""Telemetry provider handed to service clients."""

import logging
import threading
from collections.abc import Callable

from services.telemetry.metrics import Attributes, Meter, MeterProvider, NoopMeterProvider

logger = logging.getLogger(__name__)


class TelemetryProvider:
    """Pairs a meter provider with a one-time initialization hook."""

    def __init__(self, meter_provider: MeterProvider, init: Callable[[], None] | None = None) -> None:
        """Initialize the telemetry provider.

        Args:
            meter_provider: Provider meters are obtained from
            init: Callable run once, the first time run_init is called
        """
        self.meter_provider = meter_provider
        self._init = init
        self._init_lock = threading.Lock()
        self._initialized = False

    def get_meter(self, scope: str, attributes: Attributes | None = None) -> Meter:
        """Get the meter for an instrumentation scope."""
        return self.meter_provider.get_meter(scope, attributes or {})

    def run_init(self) -> None:
        """Run the init hook exactly once across all threads."""
        with self._init_lock:
            if self._initialized:
                return
            # A failed init leaves the flag unset so the next call retries
            if self._init is not None:
                self._init()
                logger.debug("Telemetry provider initialized")
            self._initialized = True


def create_noop_provider() -> TelemetryProvider:
    """Create a provider that discards all measurements."""
    return TelemetryProvider(NoopMeterProvider())
