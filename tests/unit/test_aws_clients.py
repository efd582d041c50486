"""Tests for credential and client factories."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from services.clients.factory import create_glue_client, create_rds_client, create_telemetry_provider
from services.clients.glue_client import GlueClient
from services.clients.rds_client import RDSClient
from services.telemetry.metrics import NoopMeterProvider
from services.telemetry.otel_adapters import OtelMeterProviderAdapter
from shared.aws_clients import create_http_client, resolve_credentials
from shared.config import Settings


@pytest.mark.unit
def test_resolve_credentials_prefers_explicit_keys() -> None:
    """Test that explicit keys are handed to the boto3 session."""
    settings = Settings(
        aws_region="eu-west-1",
        aws_access_key_id="AKIDEXAMPLE",
        aws_secret_access_key="secret",
        aws_session_token="token",
        aws_profile="ignored",
    )

    with patch("shared.aws_clients.boto3.Session") as mock_session:
        credentials = resolve_credentials(settings)

    mock_session.assert_called_once_with(
        region_name="eu-west-1",
        aws_access_key_id="AKIDEXAMPLE",
        aws_secret_access_key="secret",
        aws_session_token="token",
    )
    assert credentials is mock_session.return_value.get_credentials.return_value


@pytest.mark.unit
def test_resolve_credentials_uses_profile() -> None:
    """Test that the configured profile is used when no keys are set."""
    settings = Settings(aws_region="us-east-1", aws_profile="analytics")

    with patch("shared.aws_clients.boto3.Session") as mock_session:
        resolve_credentials(settings)

    mock_session.assert_called_once_with(region_name="us-east-1", profile_name="analytics")


@pytest.mark.unit
def test_resolve_credentials_returns_none_when_missing() -> None:
    """Test that a missing credential chain yields None."""
    with patch("shared.aws_clients.boto3.Session") as mock_session:
        mock_session.return_value.get_credentials.return_value = None

        assert resolve_credentials(Settings(aws_region="us-east-1")) is None


@pytest.mark.unit
def test_create_http_client_applies_timeouts() -> None:
    """Test HTTP client timeout configuration."""
    client = create_http_client(Settings(connect_timeout_seconds=2.0, read_timeout_seconds=15.0))
    try:
        assert client.timeout.connect == 2.0
        assert client.timeout.read == 15.0
    finally:
        client.close()


@pytest.mark.unit
def test_create_telemetry_provider_respects_flag() -> None:
    """Test that metrics are only wired to OpenTelemetry when enabled."""
    disabled = create_telemetry_provider(Settings(telemetry_enabled=False))
    enabled = create_telemetry_provider(Settings(telemetry_enabled=True))

    assert isinstance(disabled.meter_provider, NoopMeterProvider)
    assert isinstance(enabled.meter_provider, OtelMeterProviderAdapter)


@pytest.mark.unit
def test_client_factories() -> None:
    """Test that the factories build configured clients."""
    settings = Settings(aws_region="ap-southeast-2")
    credentials = MagicMock()

    with httpx.Client() as http_client:
        rds = create_rds_client(settings, credentials=credentials, http_client=http_client)
        glue = create_glue_client(settings, credentials=credentials, http_client=http_client)

    assert isinstance(rds, RDSClient)
    assert isinstance(glue, GlueClient)
    assert rds.region == "ap-southeast-2"
    assert glue.endpoint_provider is not None
    assert glue.endpoint_provider.resolve_endpoint().url == "https://glue.ap-southeast-2.amazonaws.com"
