import logging
import threading

from abstractions.probing_capability import ProbingCapability
from abstractions.worker_runner import WorkerOutcome, WorkerRunner
from contracts.sample_set import WorkerStatus
from contracts.target import Target
from core.exceptions import WorkerSpawnError
from core.metrics import WORKERS_IN_FLIGHT
from core.ping_loop import run_pings
from core.sample_collector import SampleCollector

logger = logging.getLogger(__name__)


class ThreadWorkerRunner(WorkerRunner):
    """
    Runs each target's pings in its own daemon thread.

    A thread cannot be killed: on budget expiry it is told to stop after the
    current ping and abandoned. Anything it records later is discarded by the
    finalized collector. The returned outcome carries a ``released`` event that
    fires when the abandoned thread finally exits, and the thread counts as in
    flight until then.
    """

    def execute(
        self,
        target: Target,
        capability: ProbingCapability,
        ping_count: int,
        budget: float,
        collector: SampleCollector,
    ) -> WorkerOutcome:
        stop = threading.Event()
        released = threading.Event()
        state_lock = threading.Lock()
        abandoned = []
        faults = []
        crashes = []

        def _main():
            try:
                run_pings(target, capability, ping_count, collector.record, faults.append, stop.is_set)
            except Exception as e:
                logger.exception(f"Worker thread for {target.name} crashed")
                crashes.append(repr(e))
            finally:
                with state_lock:
                    released.set()
                    if abandoned:
                        WORKERS_IN_FLIGHT.dec()
                        logger.debug(f"Abandoned worker thread for {target.name} exited")

        thread = threading.Thread(target=_main, name=f"probe-{target.name}", daemon=True)
        try:
            thread.start()
        except RuntimeError as e:
            raise WorkerSpawnError(f"could not start worker thread for {target.name}: {e}") from e

        thread.join(budget)
        with state_lock:
            if not released.is_set():
                stop.set()
                abandoned.append(True)
                WORKERS_IN_FLIGHT.inc()
                return WorkerOutcome(
                    status=WorkerStatus.TIMEOUT,
                    faults=len(faults),
                    detail=f"exceeded timeout budget of {budget:.3f}s",
                    released=released,
                )
        if crashes:
            return WorkerOutcome(
                status=WorkerStatus.FAULT,
                faults=len(faults),
                detail=f"worker crashed: {crashes[0]}",
            )
        return WorkerOutcome(faults=len(faults))
