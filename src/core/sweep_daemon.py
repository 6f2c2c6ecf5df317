import asyncio
import logging
import math
import time
from typing import Iterable, Mapping, Optional

from abstractions.probing_capability import ProbingCapability
from config.config import Config
from contracts.sample_set import SweepResult
from contracts.target import Target
from core.exceptions import InvalidConfig
from core.result_pool import ResultPool
from core.scheduler import ConcurrencyScheduler

logger = logging.getLogger(__name__)


def seconds_until_next_sweep(now: float, step: float, offset: float) -> float:
    """
    Seconds from ``now`` until the next sweep start. Sweeps start ``offset * step``
    seconds after each multiple of ``step``.
    """
    phase = offset * step
    next_start = (math.floor((now - phase) / step) + 1) * step + phase
    return next_start - now


class SweepDaemon:
    """
    Runs a sweep over the configured targets every ``step`` seconds and
    publishes each result to a ResultPool.
    """

    def __init__(
        self,
        scheduler: ConcurrencyScheduler,
        targets: Iterable[Target],
        capabilities: Mapping[str, ProbingCapability],
        result_pool: Optional[ResultPool] = None,
        step: Optional[float] = None,
        offset: Optional[float] = None,
        concurrency_limit: Optional[int] = None,
    ):
        """
        Args:
            scheduler (ConcurrencyScheduler): Scheduler running each sweep.
            targets (Iterable[Target]): Targets probed by every sweep.
            capabilities (Mapping[str, ProbingCapability]): Capabilities by probe name.
            result_pool (Optional[ResultPool]): Where results are published.
            step (Optional[float]): Seconds between sweep starts.
            offset (Optional[float]): Fraction of the step, in [0, 1), at which sweeps start.
            concurrency_limit (Optional[int]): Overrides the scheduler's default limit.
        """
        self.step = Config.SWEEP_STEP if step is None else step
        self.offset = Config.SWEEP_OFFSET if offset is None else offset
        if not self.step > 0:
            raise InvalidConfig(f"sweep step must be positive, got {self.step!r}")
        if not 0 <= self.offset < 1:
            raise InvalidConfig(f"sweep offset must be in [0, 1), got {self.offset!r}")
        self.scheduler = scheduler
        self.targets = list(targets)
        self.capabilities = capabilities
        self.result_pool = result_pool or ResultPool()
        self.concurrency_limit = concurrency_limit
        self._task = None
        self._running = False
        self._sweep_lock = asyncio.Lock()
        logger.info(
            f"SweepDaemon initialized for {len(self.targets)} targets, "
            f"step={self.step}s offset={self.offset}"
        )

    async def start(self):
        """
        Start the sweep loop as an asynchronous task.
        """
        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info("Sweep loop started.")

    async def stop(self):
        """
        Stop the sweep loop and wait for the task to finish cancelling.
        """
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Sweep loop stopped.")

    async def reconfigure(
        self,
        targets: Iterable[Target],
        capabilities: Optional[Mapping[str, ProbingCapability]] = None,
    ):
        """
        Replace the target set (and optionally the capabilities) used by later sweeps.
        """
        async with self._sweep_lock:
            self.targets = list(targets)
            if capabilities is not None:
                self.capabilities = capabilities
            await self.result_pool.retain(t.name for t in self.targets)
        logger.info(f"Reconfigured sweep with {len(self.targets)} targets")

    async def run_once(self) -> SweepResult:
        """
        Run one sweep now and publish its result. Sweeps never overlap.
        """
        async with self._sweep_lock:
            result = await self.scheduler.sweep(
                self.targets, self.capabilities, self.concurrency_limit
            )
            await self.result_pool.publish(result)
        return result

    async def _sweep_loop(self):
        """
        Internal loop that starts a sweep at every step boundary plus offset.
        """
        while self._running:
            delay = seconds_until_next_sweep(time.time(), self.step, self.offset)
            logger.debug(f"Next sweep in {delay:.1f}s")
            await asyncio.sleep(delay)
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Sweep failed: {e}")
