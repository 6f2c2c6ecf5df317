import logging
from typing import Any, Dict, Mapping

from config.config import Config
from contracts.variables import VariableSpec
from core.exceptions import ConfigError, InvalidConfig

logger = logging.getLogger(__name__)

VariableSchema = Dict[str, VariableSpec]

FORKED_PROBE_VARIABLES: VariableSchema = {
    "pings": VariableSpec(
        default=Config.PROBE_PINGS,
        kind="int",
        doc="How many pings are sent to each target per sweep.",
    ),
    "timeout": VariableSpec(
        default=Config.PROBE_TIMEOUT,
        kind="float",
        doc="How long a single ping may take at most, in seconds.",
    ),
}

FORKED_TARGET_VARIABLES: VariableSchema = {
    "pings": VariableSpec(kind="int", doc="Per-target override of the probe's ping count."),
    "timeout": VariableSpec(kind="float", doc="Per-target override of the per-ping timeout."),
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def merge_schemas(*schemas: Mapping[str, VariableSpec]) -> VariableSchema:
    """
    Combine variable schemas; a later schema's declaration of a key replaces
    an earlier one.
    """
    merged: VariableSchema = {}
    for schema in schemas:
        merged.update(schema or {})
    return merged


def coerce_value(name: str, spec: VariableSpec, value: Any) -> Any:
    if value is None:
        return None
    try:
        if spec.kind == "int":
            if isinstance(value, bool):
                raise ValueError("booleans are not integers")
            if isinstance(value, float) and not value.is_integer():
                raise ValueError("not a whole number")
            return int(value)
        if spec.kind == "float":
            if isinstance(value, bool):
                raise ValueError("booleans are not numbers")
            return float(value)
        if spec.kind == "bool":
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError("not a boolean")
        return str(value)
    except (TypeError, ValueError) as e:
        raise InvalidConfig(f"variable '{name}' has invalid {spec.kind} value {value!r}: {e}")


def apply_schema(schema: Mapping[str, VariableSpec], values: Mapping[str, Any], scope: str) -> Dict[str, Any]:
    """
    Fill in defaults, check mandatory variables and coerce declared values.

    Undeclared values are passed through untouched.

    Raises:
        ConfigError: If a mandatory variable has no value.
        InvalidConfig: If a value cannot be coerced to its declared kind.
    """
    resolved = dict(values)
    for name, spec in schema.items():
        value = resolved.get(name)
        if value is None:
            value = spec.default
        if value is None and spec.mandatory:
            raise ConfigError(f"mandatory {scope} variable '{name}' is not set")
        resolved[name] = coerce_value(name, spec, value)
    return resolved
