from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field


class VariableSpec(BaseModel):
    """
    Declaration of one probe or target variable.
    """

    model_config = ConfigDict(frozen=True)

    default: Any = None
    mandatory: bool = False
    kind: Literal["int", "float", "str", "bool"] = "str"
    doc: str = ""


class ResolvedVariables(BaseModel):
    """
    The configuration a target is probed with, after defaults and overrides.
    """

    ping_count: int
    per_ping_timeout: float
    probe_params: Dict[str, Any] = Field(default_factory=dict)
    target_params: Dict[str, Any] = Field(default_factory=dict)
