"""Endpoint resolution for AWS services.

Endpoints come from the service's ``endpoint-rule-set-1`` rules and the
``partitions`` data shipped with botocore, evaluated by botocore's rule-set
engine. This module only keeps the built-in parameters (region, FIPS,
dual-stack, endpoint override) and turns rule-set results into ``Endpoint``.
"""

import functools
import logging
from typing import Any

from botocore.endpoint_provider import EndpointProvider as RuleSetEndpointProvider
from botocore.endpoint_provider import RuleSetEndpoint
from botocore.exceptions import EndpointProviderError, InvalidRegionError
from botocore.loaders import create_loader
from botocore.utils import validate_region_name

from shared.config import Settings
from shared.errors import EndpointResolutionError
from shared.types import Endpoint, EndpointParameters

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=None)
def load_endpoint_ruleset(service_name: str) -> RuleSetEndpointProvider:
    """Load and cache the endpoint rule set for a service."""
    loader = create_loader()
    return RuleSetEndpointProvider(
        loader.load_service_model(service_name, "endpoint-rule-set-1"),
        loader.load_data("partitions"),
    )


class EndpointProvider:
    """Resolves service endpoints from built-in client settings and per-call parameters."""

    def __init__(self, service_name: str, signing_name: str | None = None) -> None:
        """Initialize the endpoint provider.

        Args:
            service_name: botocore service name, e.g. "rds"
            signing_name: SigV4 service name, defaults to the service name
        """
        self.service_name = service_name
        self.signing_name = signing_name or service_name
        self.built_in_parameters = EndpointParameters()
        self._ruleset = load_endpoint_ruleset(service_name)

    def init_built_in_parameters(self, settings: Settings) -> None:
        """Capture region, FIPS, dual-stack and endpoint override from settings."""
        self.built_in_parameters = EndpointParameters(
            region=settings.aws_region,
            use_fips=settings.use_fips_endpoint,
            use_dual_stack=settings.use_dualstack_endpoint,
            endpoint=settings.endpoint_url,
        )

    def override_endpoint(self, endpoint: str) -> None:
        """Send every subsequent request to a fixed endpoint."""
        self.built_in_parameters = self.built_in_parameters.model_copy(update={"endpoint": endpoint})
        logger.info("Endpoint overridden", extra={"endpoint": endpoint, "service": self.service_name})

    def resolve_endpoint(self, parameters: EndpointParameters | None = None) -> Endpoint:
        """Resolve an endpoint.

        Args:
            parameters: Per-call parameters; any field set here overrides the built-ins

        Returns:
            The resolved endpoint

        Raises:
            EndpointResolutionError: If the rule set rejects the parameters
        """
        merged = self.built_in_parameters
        if parameters is not None:
            merged = merged.model_copy(update=parameters.model_dump(exclude_none=True))

        try:
            validate_region_name(merged.region)
        except InvalidRegionError as e:
            raise EndpointResolutionError(f"Invalid Configuration: '{merged.region}' is not a valid region") from e

        rule_parameters: dict[str, Any] = {
            "UseFIPS": bool(merged.use_fips),
            "UseDualStack": bool(merged.use_dual_stack),
        }
        if merged.region:
            rule_parameters["Region"] = merged.region
        if merged.endpoint:
            rule_parameters["Endpoint"] = merged.endpoint

        try:
            resolved = self._ruleset.resolve_endpoint(**rule_parameters)
        except EndpointProviderError as e:
            raise EndpointResolutionError(str(e)) from e
        return self._to_endpoint(resolved, merged.region)

    def _to_endpoint(self, resolved: RuleSetEndpoint, region: str | None) -> Endpoint:
        signing_region = region
        signing_name = self.signing_name
        for scheme in resolved.properties.get("authSchemes", []):
            if scheme.get("name") == "sigv4":
                signing_region = scheme.get("signingRegion", signing_region)
                signing_name = scheme.get("signingName", signing_name)
                break
        headers = {name: ",".join(values) for name, values in resolved.headers.items()}
        return Endpoint(url=resolved.url, signing_region=signing_region, signing_name=signing_name, headers=headers)
