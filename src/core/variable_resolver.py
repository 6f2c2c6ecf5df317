import logging
from typing import Mapping

from pydantic import ValidationError

from abstractions.probing_capability import ProbingCapability
from abstractions.variable_resolver import VariableResolver
from contracts.target import Target
from contracts.variables import ResolvedVariables
from core.exceptions import ConfigError, InvalidConfig
from core.profiler import Profiler
from core.variables import apply_schema

logger = logging.getLogger(__name__)


class SchemaVariableResolver(VariableResolver):
    """
    Resolves target variables against the schemas declared by each capability.

    A target's own ``pings`` and ``timeout`` override the probe-wide values.
    The effective values are written back into the target parameters so the
    capability sees them on the target it pings.
    """

    def __init__(self, capabilities: Mapping[str, ProbingCapability]):
        self.capabilities = capabilities

    @Profiler.profile
    def resolve(self, target: Target) -> ResolvedVariables:
        capability = self.capabilities.get(target.probe)
        if capability is None:
            raise ConfigError(f"target '{target.name}' uses unknown probe '{target.probe}'")

        probe_params = dict(capability.properties)
        target_params = apply_schema(
            capability.target_variables(), target.variables, f"target '{target.name}'"
        )

        ping_count = target_params.get("pings")
        if ping_count is None:
            ping_count = probe_params.get("pings")
        per_ping_timeout = target_params.get("timeout")
        if per_ping_timeout is None:
            per_ping_timeout = probe_params.get("timeout")
        if ping_count is None or per_ping_timeout is None:
            raise ConfigError(f"no ping count or timeout configured for target '{target.name}'")

        target_params["pings"] = ping_count
        target_params["timeout"] = per_ping_timeout
        logger.debug(
            f"Resolved {target.name}: pings={ping_count} timeout={per_ping_timeout}"
        )
        try:
            return ResolvedVariables(
                ping_count=ping_count,
                per_ping_timeout=per_ping_timeout,
                probe_params=probe_params,
                target_params=target_params,
            )
        except ValidationError as e:
            raise InvalidConfig(f"invalid ping settings for target '{target.name}': {e}") from e
