from abc import ABC, abstractmethod
from typing import Optional

from contracts.target import Target
from core.variables import (
    FORKED_PROBE_VARIABLES,
    FORKED_TARGET_VARIABLES,
    VariableSchema,
    apply_schema,
    merge_schemas,
)


class ProbingCapability(ABC):
    """
    Abstract base class for probing capabilities. Implementations measure the
    latency of one ping against a target; the framework calls ``ping`` exactly
    ``pings`` times per target per sweep.

    Probe-wide properties are passed to the constructor and validated against
    the merged probe schema.
    """

    def __init__(self, **properties):
        """
        Args:
            **properties: Probe-wide variables such as ``pings`` and ``timeout``.

        Raises:
            ConfigError: If a mandatory probe variable is missing.
            InvalidConfig: If a probe variable has a malformed value.
        """
        self.properties = apply_schema(self.probe_variables(), properties, "probe")

    @abstractmethod
    def ping(self, target: Target) -> Optional[float]:
        """
        Measure one round trip to the target.

        Args:
            target (Target): The target, carrying its resolved variables.

        Returns:
            Optional[float]: The latency in seconds, or None when there was no reply.

        Raises:
            PingFailure: Alternative way to report that there was no reply.
        """

    @abstractmethod
    def description(self) -> str:
        """
        Return a short human readable description of the probe.
        """

    def declare_probe_variables(self) -> VariableSchema:
        """
        Return the probe-wide variables this capability adds or overrides.
        """
        return {}

    def declare_target_variables(self) -> VariableSchema:
        """
        Return the target variables this capability adds or overrides.
        """
        return {}

    def probe_variables(self) -> VariableSchema:
        return merge_schemas(FORKED_PROBE_VARIABLES, self.declare_probe_variables())

    def target_variables(self) -> VariableSchema:
        return merge_schemas(FORKED_TARGET_VARIABLES, self.declare_target_variables())

    def __repr__(self):
        return f"{type(self).__name__}({self.properties})"
