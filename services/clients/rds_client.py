"""Amazon RDS client."""

import logging
from collections.abc import Mapping
from typing import Any

from botocore.utils import percent_encode_sequence

from services.clients.base_client import AwsServiceClient
from shared.errors import EndpointResolutionError
from shared.types import EndpointParameters, HttpMethod

logger = logging.getLogger(__name__)

# Cross-region operations that carry a presigned request from the source region
PRESIGNED_URL_OPERATIONS = frozenset(
    {
        "CopyDBClusterSnapshot",
        "CopyDBSnapshot",
        "CreateDBCluster",
        "CreateDBInstanceReadReplica",
        "StartDBInstanceAutomatedBackupsReplication",
    }
)

DB_AUTH_SIGNING_NAME = "rds-db"


class RDSClient(AwsServiceClient):
    """Client for the Amazon RDS query API."""

    SERVICE_NAME = "rds"
    SERVICE_CLIENT_NAME = "RDS"

    def prepare_request(self, operation_name: str, params: dict[str, Any]) -> dict[str, Any]:
        """Replace SourceRegion with a PreSignedUrl for cross-region operations.

        SourceRegion is never sent on the wire. When the caller already supplied
        a PreSignedUrl it is left untouched.
        """
        if operation_name not in PRESIGNED_URL_OPERATIONS:
            return params

        source_region = params.pop("SourceRegion", None)
        if not source_region or params.get("PreSignedUrl"):
            return params

        endpoint = self.resolve_endpoint(operation_name, EndpointParameters(region=source_region))
        params["PreSignedUrl"] = self.generate_presigned_url(
            operation_name,
            params,
            endpoint,
            source_region,
            extra_params={"DestinationRegion": self.region},
            expires_in=self.settings.presigned_url_expires_seconds,
        )
        logger.info(
            "Attached presigned URL",
            extra={"operation": operation_name, "source_region": source_region, "destination_region": self.region},
        )
        return params

    def convert_request_to_presigned_url(
        self, operation_name: str, params: Mapping[str, Any], region: str
    ) -> str:
        """Presign an arbitrary RDS request for a region.

        Returns:
            The presigned URL, or an empty string if no endpoint could be resolved
        """
        if self.endpoint_provider is None:
            logger.error("Presigned URL generating failed. Endpoint provider is not initialized.")
            return ""
        try:
            endpoint = self.endpoint_provider.resolve_endpoint(EndpointParameters(region=region))
        except EndpointResolutionError as e:
            logger.error("Endpoint resolution failed", extra={"operation": operation_name, "error": e.message})
            return ""
        return self.generate_presigned_url(
            operation_name,
            params,
            endpoint,
            region,
            expires_in=self.settings.presigned_url_expires_seconds,
        )

    def generate_connect_auth_token(self, db_hostname: str, db_region: str, port: int, db_username: str) -> str:
        """Generate an IAM database authentication token.

        Args:
            db_hostname: Hostname of the DB instance or cluster endpoint
            db_region: Region of the database
            port: Database port
            db_username: Database user to connect as

        Returns:
            Token to use as the database password
        """
        query = percent_encode_sequence({"Action": "connect", "DBUser": db_username})
        url = f"http://{db_hostname}:{port}/?{query}"
        presigned = self.presign_url(
            url,
            HttpMethod.GET,
            db_region,
            DB_AUTH_SIGNING_NAME,
            self.settings.connect_auth_token_expires_seconds,
        )
        return presigned.removeprefix("http://")
