"""Service client factories."""

import logging
from typing import Any

from services.clients.glue_client import GlueClient
from services.clients.rds_client import RDSClient
from services.telemetry.otel_adapters import create_otel_provider
from services.telemetry.provider import TelemetryProvider, create_noop_provider
from shared.config import Settings

logger = logging.getLogger(__name__)


def create_telemetry_provider(settings: Settings) -> TelemetryProvider:
    """Create the telemetry provider the settings ask for."""
    if not settings.telemetry_enabled:
        return create_noop_provider()
    logger.info("Client metrics enabled", extra={"exporter": settings.otel_metrics_exporter})
    return create_otel_provider(settings)


def create_rds_client(settings: Settings, **kwargs: Any) -> RDSClient:
    """Create an RDS client with appropriate configuration."""
    if "telemetry_provider" not in kwargs:
        kwargs["telemetry_provider"] = create_telemetry_provider(settings)
    return RDSClient(settings, **kwargs)


def create_glue_client(settings: Settings, **kwargs: Any) -> GlueClient:
    """Create a Glue client with appropriate configuration."""
    if "telemetry_provider" not in kwargs:
        kwargs["telemetry_provider"] = create_telemetry_provider(settings)
    return GlueClient(settings, **kwargs)
