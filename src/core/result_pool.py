import asyncio
import logging
import time
from typing import Dict, Iterable, Optional

from contracts.sample_set import SampleSet, SweepResult

logger = logging.getLogger(__name__)


class ResultPool:
    """
    Holds the most recent SampleSet of every target for the reporting surface.
    Only the latest sweep is kept.
    """

    def __init__(self):
        # Structure: {target_name: SampleSet}
        self.results: Dict[str, SampleSet] = {}
        self.sweeps_completed = 0
        self.last_sweep_at: Optional[float] = None
        self._lock = asyncio.Lock()

    async def publish(self, sweep_result: SweepResult):
        now = time.time()
        async with self._lock:
            for name, sample_set in sweep_result.entries.items():
                self.results[name] = sample_set
            self.sweeps_completed += 1
            self.last_sweep_at = now
        logger.debug(f"Published sweep with {len(sweep_result)} targets")

    async def retain(self, names: Iterable[str]):
        """Drop results of targets that are no longer configured."""
        keep = set(names)
        async with self._lock:
            for name in list(self.results):
                if name not in keep:
                    del self.results[name]
                    logger.info(f"Dropped results of removed target {name}")

    async def get_latest(self, name: str) -> Optional[SampleSet]:
        async with self._lock:
            return self.results.get(name)

    async def snapshot(self) -> Dict[str, SampleSet]:
        async with self._lock:
            return dict(self.results)
