"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_level: str = Field(default="INFO", description="Logging level")

    # AWS Configuration
    aws_region: str = Field(default="us-east-1", description="Region the clients send requests to")
    aws_profile: str | None = Field(default=None, description="Shared credentials profile")
    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    aws_session_token: str | None = Field(default=None, description="AWS session token")

    # Endpoint Configuration
    endpoint_url: str | None = Field(default=None, description="Custom endpoint override")
    use_fips_endpoint: bool = Field(default=False, description="Resolve FIPS endpoints")
    use_dualstack_endpoint: bool = Field(default=False, description="Resolve dual-stack endpoints")

    # Presigning
    presigned_url_expires_seconds: int = Field(default=3600, description="Cross-region presigned URL lifetime")
    connect_auth_token_expires_seconds: int = Field(default=900, description="IAM DB auth token lifetime")

    # HTTP Configuration
    connect_timeout_seconds: float = Field(default=5.0, description="HTTP connect timeout")
    read_timeout_seconds: float = Field(default=30.0, description="HTTP read timeout")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")

    # Telemetry Configuration
    telemetry_enabled: bool = Field(default=False, description="Emit client metrics through OpenTelemetry")
    otel_metrics_exporter: str = Field(default="none", description="Metrics exporter: 'none' or 'console'")
    otel_export_interval_millis: int = Field(default=60000, description="Periodic metrics export interval")
    otel_service_name: str = Field(default="aws-data-clients", description="service.name resource attribute")


def get_settings() -> Settings:
    """Get client settings instance."""
    return Settings()
