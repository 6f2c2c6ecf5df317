import asyncio
import logging
import numbers
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from abstractions.probing_capability import ProbingCapability
from abstractions.variable_resolver import VariableResolver
from abstractions.worker_runner import WorkerRunner
from config.config import Config
from contracts.sample_set import SampleSet, SweepResult, WorkerStatus
from contracts.target import Target
from core.capability_factory import create_runner
from core.exceptions import ConfigError, InvalidConfig, SchedulingError, WorkerSpawnError
from core.metrics import NO_DATA_TARGETS, SWEEP_DURATION
from core.probe_worker import ProbeWorker
from core.profiler import Profiler
from core.target_queue import TargetQueue
from core.timeout_policy import TimeoutPolicy
from core.variable_resolver import SchemaVariableResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbePlan:
    target: Target
    capability: ProbingCapability
    ping_count: int
    budget: float


class _SweepState:
    def __init__(self, result: SweepResult):
        self.result = result
        self.spawn_failures = 0
        self._lock = asyncio.Lock()

    async def store(self, sample_set: SampleSet):
        async with self._lock:
            if sample_set.target in self.result.entries:
                logger.warning(f"Ignoring second result for target {sample_set.target}")
                return
            self.result.entries[sample_set.target] = sample_set


class ConcurrencyScheduler:
    """
    Probes a set of targets with at most ``concurrency_limit`` workers at once.

    Every target passed to ``sweep`` gets an entry in the returned SweepResult:
    its samples, partial samples after a timeout or crash, or an explicit
    no-data marker when its configuration is invalid.
    """

    def __init__(
        self,
        runner: Optional[WorkerRunner] = None,
        resolver: Optional[VariableResolver] = None,
        timeout_policy: Optional[TimeoutPolicy] = None,
        concurrency_limit: Optional[int] = None,
    ):
        """
        Args:
            runner (Optional[WorkerRunner]): Execution strategy. Defaults to the
                runner for Config.WORKER_MODE.
            resolver (Optional[VariableResolver]): Variable resolver. Defaults to
                a SchemaVariableResolver over the capabilities of each sweep.
            timeout_policy (Optional[TimeoutPolicy]): Budget computation.
            concurrency_limit (Optional[int]): Default number of simultaneous workers.
        """
        self.runner = runner or create_runner()
        self.resolver = resolver
        self.timeout_policy = timeout_policy or TimeoutPolicy()
        self.concurrency_limit = (
            Config.CONCURRENCY_LIMIT if concurrency_limit is None else concurrency_limit
        )
        logger.info(
            f"ConcurrencyScheduler initialized with {type(self.runner).__name__}, "
            f"concurrency_limit={self.concurrency_limit}"
        )

    def _plan(
        self,
        target: Target,
        capabilities: Mapping[str, ProbingCapability],
        resolver: VariableResolver,
    ) -> ProbePlan:
        capability = capabilities.get(target.probe)
        if capability is None:
            raise ConfigError(f"target '{target.name}' uses unknown probe '{target.probe}'")
        variables = resolver.resolve(target)
        # Recomputed every sweep so reconfigured timeouts take effect immediately
        budget = self.timeout_policy.compute_budget(
            variables.ping_count, variables.per_ping_timeout
        )
        return ProbePlan(
            target=target.with_variables(variables.target_params),
            capability=capability,
            ping_count=variables.ping_count,
            budget=budget,
        )

    async def _slot(self, queue: TargetQueue, worker: ProbeWorker, state: _SweepState):
        while queue.size:
            # A timed-out thread worker still occupies this slot until it exits
            await worker.settle(abort=lambda: not queue.size)
            plan = queue.next_task()
            if plan is None:
                return
            try:
                sample_set = await worker.run(
                    plan.target, plan.capability, plan.ping_count, plan.budget
                )
            except WorkerSpawnError as e:
                logger.error(f"Could not start worker for {plan.target.name}: {e}")
                state.spawn_failures += 1
                sample_set = SampleSet(
                    target=plan.target.name,
                    probe=plan.target.probe,
                    pings=plan.ping_count,
                    status=WorkerStatus.FAULT,
                    budget=plan.budget,
                    detail=str(e),
                )
            await state.store(sample_set)

    @Profiler.profile
    async def sweep(
        self,
        targets: Iterable[Target],
        capabilities: Mapping[str, ProbingCapability],
        concurrency_limit: Optional[int] = None,
    ) -> SweepResult:
        """
        Probe every target once and return the results keyed by target name.

        Args:
            targets (Iterable[Target]): Targets to probe. Duplicate names are probed once.
            capabilities (Mapping[str, ProbingCapability]): Capabilities by probe name.
            concurrency_limit (Optional[int]): Overrides the scheduler's default limit.

        Returns:
            SweepResult: One entry per distinct target name.

        Raises:
            InvalidConfig: If the concurrency limit is not a positive integer.
            SchedulingError: If no worker could be started at all.
        """
        limit = self.concurrency_limit if concurrency_limit is None else concurrency_limit
        if isinstance(limit, bool) or not isinstance(limit, numbers.Integral) or limit <= 0:
            raise InvalidConfig(f"concurrency limit must be a positive integer, got {limit!r}")

        resolver = self.resolver or SchemaVariableResolver(capabilities)
        started = time.monotonic()
        state = _SweepState(SweepResult(started_at=time.time()))
        queue = TargetQueue()

        for target in targets:
            if target.name in queue or target.name in state.result:
                logger.debug(f"Skipping duplicate target {target.name}")
                continue
            try:
                plan = self._plan(target, capabilities, resolver)
            except ConfigError as e:
                logger.warning(f"No data for target {target.name}: {e}")
                NO_DATA_TARGETS.labels(probe=target.probe).inc()
                await state.store(SampleSet.no_data(target.name, str(e), probe=target.probe))
                continue
            queue.add_task(target.name, plan)

        dispatched = queue.size
        if dispatched:
            slots = min(limit, dispatched)
            executor = ThreadPoolExecutor(max_workers=slots, thread_name_prefix="probe-worker")
            try:
                await asyncio.gather(
                    *(
                        self._slot(queue, ProbeWorker(self.runner, executor), state)
                        for _ in range(slots)
                    )
                )
            finally:
                # Abandoned thread-mode workers must not hold up the sweep
                executor.shutdown(wait=False)

        if dispatched and state.spawn_failures == dispatched:
            raise SchedulingError(f"could not start a worker for any of {dispatched} targets")

        result = state.result
        result.finished_at = time.time()
        elapsed = time.monotonic() - started
        SWEEP_DURATION.observe(elapsed)
        with_data = sum(1 for entry in result.entries.values() if entry.has_data)
        logger.info(
            f"Sweep finished in {elapsed:.3f}s: {len(result)} targets, "
            f"{with_data} with data, concurrency_limit={limit}"
        )
        return result

    def sweep_sync(
        self,
        targets: Iterable[Target],
        capabilities: Mapping[str, ProbingCapability],
        concurrency_limit: Optional[int] = None,
    ) -> SweepResult:
        """Run ``sweep`` on a fresh event loop."""
        return asyncio.run(self.sweep(targets, capabilities, concurrency_limit))
