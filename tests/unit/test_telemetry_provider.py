"""Tests for the telemetry provider."""

import threading
from unittest.mock import MagicMock

import pytest

from services.telemetry.metrics import NoopMeter
from services.telemetry.provider import TelemetryProvider, create_noop_provider


@pytest.mark.unit
def test_run_init_runs_once_across_threads() -> None:
    """Test that concurrent run_init calls invoke init a single time."""
    init = MagicMock()
    provider = TelemetryProvider(MagicMock(), init=init)

    threads = [threading.Thread(target=provider.run_init) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    init.assert_called_once_with()


@pytest.mark.unit
def test_run_init_retries_after_failure() -> None:
    """Test that a failed init is attempted again."""
    init = MagicMock(side_effect=[RuntimeError("exporter unavailable"), None])
    provider = TelemetryProvider(MagicMock(), init=init)

    with pytest.raises(RuntimeError):
        provider.run_init()
    provider.run_init()
    provider.run_init()

    assert init.call_count == 2


@pytest.mark.unit
def test_get_meter_delegates_to_meter_provider() -> None:
    """Test that meters come from the wrapped provider."""
    meter_provider = MagicMock()
    provider = TelemetryProvider(meter_provider)

    meter = provider.get_meter("RDS")

    meter_provider.get_meter.assert_called_once_with("RDS", {})
    assert meter is meter_provider.get_meter.return_value


@pytest.mark.unit
def test_noop_provider_discards_measurements() -> None:
    """Test that the no-op provider hands out working no-op instruments."""
    provider = create_noop_provider()
    provider.run_init()

    meter = provider.get_meter("Glue")

    assert isinstance(meter, NoopMeter)
    meter.create_counter("c", "1", "").add(1, {})
    meter.create_up_down_counter("u", "1", "").add(-1, {})
    meter.create_histogram("h", "ms", "").record(1.0, {})
    meter.create_gauge("g", lambda m: m.record(1.0, {}), "1", "").stop()
