import statistics
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class WorkerStatus(str, Enum):
    OK = "ok"
    TIMEOUT = "timeout"
    FAULT = "fault"
    NO_DATA = "no_data"


class SampleSet(BaseModel):
    """
    Successful latency samples (seconds, ascending) for one target in one sweep.
    """

    target: str
    probe: Optional[str] = None
    pings: int = 0
    samples: List[float] = Field(default_factory=list)
    status: WorkerStatus = WorkerStatus.OK
    faults: int = 0
    budget: Optional[float] = None
    elapsed: Optional[float] = None
    detail: Optional[str] = None

    @classmethod
    def no_data(cls, target: str, reason: str, probe: Optional[str] = None) -> "SampleSet":
        """Explicit marker for a target that could not be probed at all."""
        return cls(target=target, probe=probe, status=WorkerStatus.NO_DATA, detail=reason)

    @computed_field
    @property
    def has_data(self) -> bool:
        return bool(self.samples)

    @computed_field
    @property
    def loss(self) -> int:
        return max(self.pings - len(self.samples), 0)

    @computed_field
    @property
    def median(self) -> Optional[float]:
        if not self.samples:
            return None
        return float(statistics.median(self.samples))


class SweepResult(BaseModel):
    """
    Mapping from target name to its SampleSet for one scheduler run.
    """

    entries: Dict[str, SampleSet] = Field(default_factory=dict)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    def __getitem__(self, name: str) -> SampleSet:
        return self.entries[name]

    def __contains__(self, name) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def names(self) -> List[str]:
        return list(self.entries)

    def get(self, name: str) -> Optional[SampleSet]:
        return self.entries.get(name)
