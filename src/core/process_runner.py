import logging
import multiprocessing
import time
from typing import Optional

from abstractions.probing_capability import ProbingCapability
from abstractions.worker_runner import WorkerOutcome, WorkerRunner
from config.config import Config
from contracts.sample_set import WorkerStatus
from contracts.target import Target
from core.exceptions import WorkerSpawnError
from core.ping_loop import run_pings
from core.sample_collector import SampleCollector

logger = logging.getLogger(__name__)

_SAMPLE = "sample"
_FAULT = "fault"
_DONE = "done"


def _worker_main(target, capability, ping_count, channel):
    # Runs in the child. Every result is sent as soon as it exists so the
    # parent keeps it even if this process is killed later.
    def record(observation):
        channel.send((_SAMPLE, observation))

    def report_fault(message):
        channel.send((_FAULT, message))

    run_pings(target, capability, ping_count, record, report_fault)
    channel.send((_DONE, None))
    channel.close()


class ProcessWorkerRunner(WorkerRunner):
    """
    Runs each target's pings in a dedicated OS process.

    The parent owns the process handle. Once the budget expires the process is
    sent SIGTERM, then SIGKILL if it is still alive after the grace period.
    """

    def __init__(self, start_method: Optional[str] = None, kill_grace: Optional[float] = None):
        self.start_method = start_method or Config.PROCESS_START_METHOD
        self.kill_grace = Config.KILL_GRACE_SECONDS if kill_grace is None else kill_grace
        self._context = multiprocessing.get_context(self.start_method)

    def execute(
        self,
        target: Target,
        capability: ProbingCapability,
        ping_count: int,
        budget: float,
        collector: SampleCollector,
    ) -> WorkerOutcome:
        reader, writer = self._context.Pipe(duplex=False)
        process = self._context.Process(
            target=_worker_main,
            args=(target, capability, ping_count, writer),
            name=f"probe-{target.name}",
            daemon=True,
        )
        try:
            process.start()
        except Exception as e:
            reader.close()
            writer.close()
            raise WorkerSpawnError(f"could not start worker process for {target.name}: {e}") from e
        # Only the child may write; closing our copy lets recv() see EOF when it dies
        writer.close()
        logger.debug(f"Started worker process {process.pid} for {target.name}")

        faults = []
        finished = False
        exited = False
        deadline = time.monotonic() + budget
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0 or not reader.poll(remaining):
                    break
                try:
                    message = reader.recv()
                except EOFError:
                    exited = True
                    break
                if self._handle(message, collector, faults):
                    finished = True
                    break
            if not (finished or exited):
                self._terminate(process)
                # Replies sent before the kill are still buffered in the pipe
                self._drain(reader, collector, faults)
        finally:
            reader.close()

        if finished:
            self._reap(process)
            return WorkerOutcome(faults=len(faults))

        if exited:
            exitcode = self._reap(process)
            return WorkerOutcome(
                status=WorkerStatus.FAULT,
                faults=len(faults),
                detail=f"worker process exited with code {exitcode}",
            )

        process.close()
        return WorkerOutcome(
            status=WorkerStatus.TIMEOUT,
            faults=len(faults),
            detail=f"exceeded timeout budget of {budget:.3f}s",
        )

    @staticmethod
    def _handle(message, collector, faults) -> bool:
        """Apply one message from the child. Returns True once the child is done."""
        kind, payload = message
        if kind == _SAMPLE:
            collector.record(payload)
        elif kind == _FAULT:
            faults.append(payload)
        return kind == _DONE

    def _drain(self, reader, collector, faults):
        drained = 0
        while reader.poll(0):
            try:
                message = reader.recv()
            except EOFError:
                break
            self._handle(message, collector, faults)
            drained += 1
        if drained:
            logger.debug(f"Drained {drained} buffered messages from terminated worker")

    def _reap(self, process):
        process.join(self.kill_grace)
        if process.is_alive():
            self._terminate(process)
        exitcode = process.exitcode
        process.close()
        return exitcode

    def _terminate(self, process):
        logger.debug(f"Terminating worker process {process.pid} ({process.name})")
        process.terminate()
        process.join(self.kill_grace)
        if process.is_alive():
            logger.warning(f"Worker process {process.pid} ignored SIGTERM, killing it")
            process.kill()
            process.join()
