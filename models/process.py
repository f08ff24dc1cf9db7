"""
Process model for the Banker's Safety Simulator.

Represents a process with its current allocation, maximum demand and
remaining need, bound to the shared pool of available resources.
"""

from dataclasses import dataclass, field
from enum import Enum

from models.resource import MalformedInputError, ResourceState, ResourceVector


class ProcessState(Enum):
    """Process states in the simulation."""
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"


@dataclass
class Process:
    """
    Represents a process in the safety simulation.

    Attributes:
        pid: Process identifier (creation index)
        allocated: Resources currently held [R]
        maximum: Maximum resources the process will ever hold at once [R]
        pool: Shared pool of available resources (not owned)
        need: Remaining resources required, maximum - allocated [R]
        state: Current process state

    Invariant while RUNNING:
        allocated[i] + need[i] == maximum[i] and need[i] >= 0
    """
    pid: int
    allocated: ResourceVector
    maximum: ResourceVector
    pool: ResourceState = field(repr=False)
    need: ResourceVector = field(init=False)
    state: ProcessState = field(default=ProcessState.RUNNING, init=False)

    def __post_init__(self):
        """Validate vector lengths against the pool and derive the need vector."""
        num_resources = self.pool.num_resources
        if not isinstance(self.allocated, ResourceVector):
            self.allocated = ResourceVector(self.allocated, label=f"P{self.pid} allocation")
        if not isinstance(self.maximum, ResourceVector):
            self.maximum = ResourceVector(self.maximum, label=f"P{self.pid} maximum")

        for name, vector in (("allocation", self.allocated), ("maximum", self.maximum)):
            if len(vector) != num_resources:
                raise MalformedInputError(
                    f"P{self.pid}: {name} has {len(vector)} entries, "
                    f"pool has {num_resources} resource types"
                )
        # Negative need is rejected by ResourceVector
        self.need = ResourceVector(
            (m - a for a, m in zip(self.allocated, self.maximum)),
            label=f"P{self.pid} need"
        )

    @property
    def label(self) -> str:
        """Display name, e.g. P0."""
        return f"P{self.pid}"

    def need_of(self) -> ResourceVector:
        """Remaining need (copy)."""
        return self.need.copy()

    def is_safe_to_request(self) -> bool:
        """
        Check whether the full remaining need can be granted right now.

        Evaluated against the live pool on every call.

        Returns:
            True if need[i] <= available[i] for every resource type
        """
        return self.need.fits_within(self.pool.available)

    def is_finished(self) -> bool:
        """Check if process has completed execution."""
        return self.state == ProcessState.FINISHED

    def request_resources(self) -> None:
        """
        Grant the remaining need from the pool.

        After this the process holds its maximum and needs nothing more.
        Does nothing if the request would not be safe.
        """
        if not self.is_safe_to_request():
            return

        self.pool.grant(self.need)
        for i in range(len(self.need)):
            self.allocated[i] += self.need[i]
            self.need[i] = 0

    def finish_task(self) -> ResourceVector:
        """
        Release everything held back to the pool and mark the process finished.

        Returns:
            Released amounts by resource type
        """
        released = self.allocated.copy()
        self.pool.release(released)
        for i in range(len(self.allocated)):
            self.allocated[i] = 0
            self.maximum[i] = 0

        self.state = ProcessState.FINISHED
        return released

    def request_and_complete(self) -> bool:
        """
        Grant the full remaining need, then immediately release all and finish.

        Legal only while RUNNING and safe to request; otherwise nothing changes.

        Returns:
            True if the process was granted its need and finished
        """
        if self.state != ProcessState.RUNNING:
            return False
        if not self.is_safe_to_request():
            return False

        self.request_resources()
        self.finish_task()
        return True

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Process(pid={self.pid}, state={self.state.value}, "
            f"alloc={self.allocated.to_list()}, max={self.maximum.to_list()}, "
            f"need={self.need.to_list()})"
        )
