from abc import ABC, abstractmethod

from contracts.target import Target
from contracts.variables import ResolvedVariables


class VariableResolver(ABC):
    """
    Abstract base class for resolving the configuration a target is probed with.
    """

    @abstractmethod
    def resolve(self, target: Target) -> ResolvedVariables:
        """
        Resolve the probe- and target-scoped variables for a target.

        Args:
            target (Target): The target to resolve.

        Returns:
            ResolvedVariables: Ping count, per-ping timeout and parameter maps.

        Raises:
            ConfigError: If mandatory variables are absent.
            InvalidConfig: If a value is malformed.
        """
