"""
Factories for probing capabilities and worker runners.
"""
import importlib
import logging
from typing import Any, Dict, Mapping, Optional, Type

from abstractions.probing_capability import ProbingCapability
from abstractions.worker_runner import WorkerRunner
from config.config import Config
from core.process_runner import ProcessWorkerRunner
from core.thread_runner import ThreadWorkerRunner
from probes.http_probe import HttpProbe
from probes.scripted_probe import ScriptedProbe

logger = logging.getLogger(__name__)

# Built-in capability classes
PROBE_CLASSES = {
    "http": HttpProbe,
    "scripted": ScriptedProbe,
}

RUNNER_CLASSES = {
    "process": ProcessWorkerRunner,
    "thread": ThreadWorkerRunner,
}


def import_from_string(path: str) -> Type[Any]:
    module_name, class_name = path.rsplit(".", 1)
    module = importlib.import_module(module_name)
    return getattr(module, class_name)


class CapabilityFactory:
    """
    Factory class for creating probing capability instances.
    """

    @staticmethod
    def create(probe_type: str, **properties) -> ProbingCapability:
        """
        Create a capability from a built-in name or a dotted class path.

        Args:
            probe_type (str): "http", "scripted" or "package.module.ClassName".
            **properties: Probe-wide variables for the capability.

        Returns:
            ProbingCapability: The configured capability.

        Raises:
            ValueError: If the probe type is unknown or not a ProbingCapability.
            ConfigError: If the properties do not satisfy the probe schema.
        """
        cls = PROBE_CLASSES.get(probe_type.lower())
        if cls is None:
            if "." not in probe_type:
                raise ValueError(
                    f"Unsupported probe type: {probe_type}. "
                    f"Supported types: {sorted(PROBE_CLASSES)}"
                )
            try:
                cls = import_from_string(probe_type)
            except (ImportError, AttributeError) as e:
                raise ValueError(f"Could not import probe class '{probe_type}': {e}") from e
            if not (isinstance(cls, type) and issubclass(cls, ProbingCapability)):
                raise ValueError(f"'{probe_type}' is not a ProbingCapability")
        logger.info(f"Creating {cls.__name__} probe with {properties}")
        return cls(**properties)

    @staticmethod
    def create_all(probe_settings: Mapping[str, Mapping[str, Any]]) -> Dict[str, ProbingCapability]:
        """
        Create one capability per named probe section.

        Each section holds a ``type`` key plus the probe-wide variables, e.g.
        ``{"web": {"type": "http", "pings": 10}}``.
        """
        capabilities = {}
        for name, settings in probe_settings.items():
            settings = dict(settings)
            probe_type = settings.pop("type", name)
            capabilities[name] = CapabilityFactory.create(probe_type, **settings)
        return capabilities


def create_runner(mode: Optional[str] = None, **kwargs) -> WorkerRunner:
    """
    Create the worker runner for "process" or "thread" mode.

    Raises:
        ValueError: If the mode is not supported.
    """
    mode = (mode or Config.WORKER_MODE).lower()
    if mode not in RUNNER_CLASSES:
        raise ValueError(
            f"Unsupported worker mode: {mode}. Supported modes: {sorted(RUNNER_CLASSES)}"
        )
    logger.info(f"Using {mode} worker runner")
    return RUNNER_CLASSES[mode](**kwargs)
