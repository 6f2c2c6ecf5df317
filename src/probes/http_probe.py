import logging
import time
from typing import Optional

import httpx

from abstractions.probing_capability import ProbingCapability
from config.config import Config
from contracts.target import Target
from contracts.variables import VariableSpec
from core.exceptions import PingFailure

logger = logging.getLogger(__name__)


class HttpProbe(ProbingCapability):
    """
    Measures the time one HTTP request to the target's ``url`` takes.

    A ping counts as lost on connection errors, on timeouts, and on responses
    whose status does not match ``expect_status`` (any status below 400 when
    unset).
    """

    def declare_probe_variables(self):
        return {
            "timeout": VariableSpec(
                default=Config.PROBE_TIMEOUT,
                kind="float",
                doc="Timeout of a single HTTP request in seconds.",
            ),
            "method": VariableSpec(default="GET", doc="HTTP method used for every ping."),
            "expect_status": VariableSpec(
                kind="int", doc="Status code a reply must have to count as a success."
            ),
            "follow_redirects": VariableSpec(
                default=False, kind="bool", doc="Follow redirects before stopping the clock."
            ),
        }

    def declare_target_variables(self):
        return {
            "url": VariableSpec(mandatory=True, doc="The URL to request."),
            "expect_status": VariableSpec(
                kind="int", doc="Per-target override of the expected status code."
            ),
        }

    def description(self) -> str:
        return f"HTTP {self.properties['method']} round trip time"

    def _status_ok(self, status_code: int, expected: Optional[int]) -> bool:
        if expected is not None:
            return status_code == expected
        return status_code < 400

    def ping(self, target: Target) -> Optional[float]:
        url = target.variables["url"]
        timeout = target.variables.get("timeout") or self.properties["timeout"]
        expected = target.variables.get("expect_status")
        if expected is None:
            expected = self.properties.get("expect_status")

        with httpx.Client(
            timeout=timeout, follow_redirects=self.properties["follow_redirects"]
        ) as client:
            start = time.perf_counter()
            try:
                response = client.request(self.properties["method"], url)
            except httpx.TimeoutException as e:
                raise PingFailure(f"{url} timed out after {timeout}s") from e
            except httpx.TransportError as e:
                raise PingFailure(f"{url} unreachable: {e}") from e
            elapsed = time.perf_counter() - start

        if not self._status_ok(response.status_code, expected):
            logger.debug(f"Unexpected status {response.status_code} from {url}")
            raise PingFailure(f"{url} answered with status {response.status_code}")
        return elapsed
