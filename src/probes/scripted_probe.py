import logging
import os
import time
from typing import Any, Dict, List, Mapping, Optional

from abstractions.probing_capability import ProbingCapability
from contracts.target import Target
from core.exceptions import PingFailure

logger = logging.getLogger(__name__)


class ScriptedProbe(ProbingCapability):
    """
    Replays a fixed list of ping results per target name.

    Each step is one of:

    * a number: the latency in seconds
    * ``None``: a lost ping
    * ``{"sleep": s, "value": v}``: block for ``s`` seconds, then return ``v``
    * ``{"fail": msg}``: raise PingFailure
    * ``{"raise": msg}``: raise an unexpected RuntimeError
    * ``{"exit": code}``: terminate the worker process immediately

    The script repeats once exhausted. Targets without a script never reply.
    In process mode every worker starts from a fresh copy of the script.
    """

    def __init__(self, script: Optional[Mapping[str, List[Any]]] = None, **properties):
        super().__init__(**properties)
        self.script: Dict[str, List[Any]] = {
            name: list(steps) for name, steps in (script or {}).items()
        }
        self._cursors: Dict[str, int] = {}

    def description(self) -> str:
        return "Scripted latencies for dry runs and tests"

    def ping(self, target: Target) -> Optional[float]:
        steps = self.script.get(target.name)
        if not steps:
            return None
        index = self._cursors.get(target.name, 0)
        self._cursors[target.name] = index + 1
        step = steps[index % len(steps)]
        if not isinstance(step, dict):
            return step
        if "sleep" in step:
            time.sleep(step["sleep"])
            return step.get("value")
        if "fail" in step:
            raise PingFailure(step["fail"])
        if "raise" in step:
            raise RuntimeError(step["raise"])
        if "exit" in step:
            logger.warning(f"Scripted exit {step['exit']} while probing {target.name}")
            os._exit(step["exit"])
        raise ValueError(f"unknown script step {step!r}")
