import logging
import numbers
from typing import Optional

from config.config import Config
from core.exceptions import InvalidConfig

logger = logging.getLogger(__name__)


def _require_positive(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfig(f"{name} must be a number, got {value!r}")
    if not value > 0:
        raise InvalidConfig(f"{name} must be positive, got {value!r}")


class TimeoutPolicy:
    """
    Computes the wall-clock budget for one target's full probing run.

    The budget is ``ping_count * per_ping_timeout + margin``. The margin lets a
    probe's own per-ping timeout expire and clean up before the worker is
    force-terminated from outside.
    """

    def __init__(self, margin: Optional[float] = None):
        margin = Config.TIMEOUT_MARGIN if margin is None else margin
        _require_positive("timeout margin", margin)
        self.margin = float(margin)

    def compute_budget(self, ping_count: int, per_ping_timeout: float) -> float:
        """
        Return the timeout budget in seconds.

        Raises:
            InvalidConfig: If the ping count is not a positive integer or the
                per-ping timeout is not a positive number.
        """
        if isinstance(ping_count, bool) or not isinstance(ping_count, numbers.Integral):
            raise InvalidConfig(f"ping count must be an integer, got {ping_count!r}")
        _require_positive("ping count", ping_count)
        _require_positive("per-ping timeout", per_ping_timeout)
        budget = ping_count * float(per_ping_timeout) + self.margin
        logger.debug(
            f"Timeout budget {budget:.3f}s for {ping_count} pings at {per_ping_timeout}s"
        )
        return budget


def compute_budget(ping_count: int, per_ping_timeout: float, margin: Optional[float] = None) -> float:
    return TimeoutPolicy(margin).compute_budget(ping_count, per_ping_timeout)
