from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field


class Target(BaseModel):
    """
    Data model representing one measured endpoint.

    A target is identified by its name. ``probe`` names the probing capability
    that measures it and ``variables`` holds its target-scoped variables.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    probe: str
    variables: Dict[str, Any] = Field(default_factory=dict)

    def with_variables(self, variables: Mapping[str, Any]) -> "Target":
        """
        Return a copy of this target carrying the given (resolved) variables.
        """
        return self.model_copy(update={"variables": dict(variables)})

    def __eq__(self, other):
        """
        Check equality with another Target based on its name.
        """
        if not isinstance(other, Target):
            return False
        return self.name == other.name

    def __hash__(self):
        """
        Compute hash based on the target name.
        """
        return hash(self.name)

    def __repr__(self):
        return f"Target(name={self.name}, probe={self.probe})"
