import logging
from typing import Callable, Optional

from contracts.target import Target
from core.exceptions import PingFailure

logger = logging.getLogger(__name__)


def run_pings(
    target: Target,
    capability,
    ping_count: int,
    record: Callable[[Optional[float]], object],
    report_fault: Optional[Callable[[str], object]] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> int:
    """
    Ping the target ``ping_count`` times in sequence, passing every result
    (``None`` for a lost ping) to ``record``.

    Errors raised by the capability never escape: ``PingFailure`` is a lost
    ping, anything else is also counted as a fault. Returns the fault count.
    """
    faults = 0
    for attempt in range(1, ping_count + 1):
        if should_stop is not None and should_stop():
            logger.debug(f"Stopping pings to {target.name} after {attempt - 1}/{ping_count}")
            break
        try:
            observation = capability.ping(target)
        except PingFailure as e:
            logger.debug(f"No reply from {target.name} on ping {attempt}/{ping_count}: {e}")
            observation = None
        except Exception as e:
            faults += 1
            logger.error(
                f"Probe {target.probe} failed on ping {attempt}/{ping_count} to {target.name}: {e!r}"
            )
            if report_fault is not None:
                report_fault(repr(e))
            observation = None
        record(observation)
    return faults
