"""AWS credential and HTTP client factories."""

import logging
from typing import Any

import boto3
import httpx
from botocore.credentials import Credentials

from shared.config import Settings

logger = logging.getLogger(__name__)


def resolve_credentials(settings: Settings) -> Credentials | None:
    """Resolve AWS credentials through the boto3 credential chain.

    Explicit keys in settings win; otherwise the configured profile (or the
    default chain: environment, shared config, container and instance roles)
    is used.
    """
    session_kwargs: dict[str, Any] = {"region_name": settings.aws_region}

    if settings.aws_access_key_id and settings.aws_secret_access_key:
        session_kwargs["aws_access_key_id"] = settings.aws_access_key_id
        session_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        session_kwargs["aws_session_token"] = settings.aws_session_token
    elif settings.aws_profile:
        session_kwargs["profile_name"] = settings.aws_profile
        logger.info("Using AWS profile", extra={"profile": settings.aws_profile})

    credentials = boto3.Session(**session_kwargs).get_credentials()
    if credentials is None:
        logger.warning("No AWS credentials found, requests cannot be signed")
    return credentials


def create_http_client(settings: Settings) -> httpx.Client:
    """Create a synchronous HTTP client with appropriate timeouts."""
    timeout = httpx.Timeout(settings.read_timeout_seconds, connect=settings.connect_timeout_seconds)
    return httpx.Client(timeout=timeout, verify=settings.verify_ssl)
