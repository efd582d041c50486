"""AWS Glue client."""

from services.clients.base_client import AwsServiceClient


class GlueClient(AwsServiceClient):
    """Client for the AWS Glue JSON API."""

    SERVICE_NAME = "glue"
    SERVICE_CLIENT_NAME = "Glue"
