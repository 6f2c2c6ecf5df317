import threading
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from abstractions.probing_capability import ProbingCapability
from contracts.sample_set import WorkerStatus
from contracts.target import Target
from core.sample_collector import SampleCollector


class WorkerOutcome(BaseModel):
    """
    How a worker ended. The samples themselves live in the SampleCollector.

    ``released`` is set by runners that return before their worker has really
    exited. It fires once the worker is gone.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: WorkerStatus = WorkerStatus.OK
    faults: int = 0
    detail: Optional[str] = None
    released: Optional[threading.Event] = Field(default=None, exclude=True)


class WorkerRunner(ABC):
    """
    Abstract base class for the execution strategy of one target's pings.
    """

    @abstractmethod
    def execute(
        self,
        target: Target,
        capability: ProbingCapability,
        ping_count: int,
        budget: float,
        collector: SampleCollector,
    ) -> WorkerOutcome:
        """
        Run ``ping_count`` pings against the target, recording every result into
        the collector, and return once they are done or the budget has expired.

        This call blocks; it must return within ``budget`` plus the runner's
        kill grace period. A runner that cannot stop its worker by then
        returns anyway and sets ``WorkerOutcome.released``.

        Raises:
            WorkerSpawnError: If the worker could not be started at all.
        """
