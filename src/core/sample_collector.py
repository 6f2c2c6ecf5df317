import logging
import math
import numbers
import threading
from typing import List, Optional

logger = logging.getLogger(__name__)


class SampleCollector:
    """
    Accumulates latency observations for one target attempt.

    Failures (``None``, negative, NaN or non-numeric values) are dropped on
    record. ``finalize`` freezes the collector and returns the successes sorted
    ascending; observations recorded afterwards are discarded.
    """

    def __init__(self, capacity: Optional[int] = None):
        self.capacity = capacity
        self._samples: List[float] = []
        self._final: Optional[List[float]] = None
        self._lock = threading.Lock()

    def record(self, observation) -> bool:
        """Record one observation. Returns True if it was kept as a sample."""
        if observation is None:
            return False
        if isinstance(observation, bool) or not isinstance(observation, numbers.Real):
            logger.warning(f"Dropping non-numeric observation {observation!r}")
            return False
        value = float(observation)
        if math.isnan(value) or value < 0:
            logger.warning(f"Dropping invalid latency observation {observation!r}")
            return False
        with self._lock:
            if self._final is not None:
                logger.debug(f"Discarding observation {value} recorded after finalize")
                return False
            if self.capacity is not None and len(self._samples) >= self.capacity:
                logger.warning(
                    f"Dropping observation {value}: already holding {self.capacity} samples"
                )
                return False
            self._samples.append(value)
            return True

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._samples)

    @property
    def finalized(self) -> bool:
        return self._final is not None

    def finalize(self) -> List[float]:
        with self._lock:
            if self._final is None:
                # sorted() is stable, ties keep arrival order
                self._final = sorted(self._samples)
            return list(self._final)
