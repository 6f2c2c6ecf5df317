import asyncio
import logging
import time
from concurrent.futures import Executor
from typing import Callable, Optional

from abstractions.probing_capability import ProbingCapability
from abstractions.worker_runner import WorkerRunner
from contracts.sample_set import SampleSet, WorkerStatus
from contracts.target import Target
from core.metrics import (
    PING_LATENCY,
    PINGS_LOST,
    WORKER_FAULTS,
    WORKER_TIMEOUTS,
    WORKERS_IN_FLIGHT,
)
from core.profiler import Profiler
from core.sample_collector import SampleCollector

logger = logging.getLogger(__name__)


class ProbeWorker:
    """
    Probes one target through a WorkerRunner and turns the outcome into a SampleSet.
    """

    def __init__(self, runner: WorkerRunner, executor: Optional[Executor] = None):
        """
        Args:
            runner (WorkerRunner): Execution strategy for the pings.
            executor (Optional[Executor]): Executor the blocking runner call is
                made in. None uses the event loop's default executor.
        """
        self.runner = runner
        self.executor = executor
        self._released = None

    async def settle(
        self, abort: Optional[Callable[[], bool]] = None, poll_interval: float = 0.02
    ) -> bool:
        """
        Wait until the worker abandoned by the previous run, if any, has exited.
        Callers that cap concurrency must settle before starting the next target.

        Returns False if ``abort`` returned True first; the abandoned worker is
        then still running.
        """
        released = self._released
        if released is None:
            return True
        if not released.is_set():
            logger.info("Waiting for an abandoned worker to exit before probing the next target")
        while not released.is_set():
            if abort is not None and abort():
                return False
            await asyncio.sleep(poll_interval)
        self._released = None
        return True

    @Profiler.profile
    async def run(
        self,
        target: Target,
        capability: ProbingCapability,
        ping_count: int,
        budget: float,
    ) -> SampleSet:
        collector = SampleCollector(capacity=ping_count)
        loop = asyncio.get_running_loop()
        start = time.monotonic()
        WORKERS_IN_FLIGHT.inc()
        try:
            outcome = await loop.run_in_executor(
                self.executor,
                self.runner.execute,
                target,
                capability,
                ping_count,
                budget,
                collector,
            )
        finally:
            WORKERS_IN_FLIGHT.dec()
        self._released = outcome.released
        elapsed = time.monotonic() - start
        samples = collector.finalize()

        if outcome.status == WorkerStatus.TIMEOUT:
            WORKER_TIMEOUTS.labels(probe=target.probe).inc()
            logger.warning(
                f"Timeout probing {target.name}: {outcome.detail}; "
                f"keeping {len(samples)}/{ping_count} samples"
            )
        elif outcome.status == WorkerStatus.FAULT:
            WORKER_FAULTS.labels(probe=target.probe).inc()
            logger.error(
                f"Worker fault probing {target.name}: {outcome.detail}; "
                f"keeping {len(samples)}/{ping_count} samples"
            )
        if outcome.faults:
            WORKER_FAULTS.labels(probe=target.probe).inc(outcome.faults)

        for sample in samples:
            PING_LATENCY.labels(probe=target.probe).observe(sample)
        PINGS_LOST.labels(probe=target.probe).inc(ping_count - len(samples))
        logger.info(
            f"Probed {target.name} with {target.probe}: {len(samples)}/{ping_count} replies "
            f"in {elapsed:.3f}s (budget {budget:.3f}s)"
        )

        return SampleSet(
            target=target.name,
            probe=target.probe,
            pings=ping_count,
            samples=samples,
            status=outcome.status,
            faults=outcome.faults,
            budget=budget,
            elapsed=elapsed,
            detail=outcome.detail,
        )
