"""
Process Ledger for the Banker's Safety Simulator.

Holds every process record together with the shared pool of available
resources, and exposes the matrix views used for display and invariant
checks.
"""

import numpy as np
from typing import List, Sequence

from models.process import Process, ProcessState
from models.resource import MalformedInputError, ResourceState, ResourceVector


class ProcessLedger:
    """
    Global state for a safety run.

    Attributes:
        pool: Shared pool of available resources
        processes: Process records in creation order
        total_resources: [R] Instances of each type in the system
            (available + allocated at construction; constant for the run)
    """

    def __init__(self, pool: ResourceState, processes: List[Process]):
        self.pool = pool
        self.processes = processes
        self.total_resources = self._compute_totals()

    @classmethod
    def from_matrices(
        cls,
        allocation: Sequence[Sequence[int]],
        maximum: Sequence[Sequence[int]],
        available: Sequence[int]
    ) -> "ProcessLedger":
        """
        Build a ledger from the three input matrices.

        Args:
            allocation: [P][R] Resources held by each process
            maximum: [P][R] Maximum demand of each process
            available: [R] Initially available resources

        Returns:
            ProcessLedger with one RUNNING process per row

        Raises:
            MalformedInputError: If shapes disagree, a count is negative,
                or an allocation exceeds its maximum
        """
        pool = ResourceState(ResourceVector(available, label="Available"))
        num_resources = pool.num_resources

        if len(allocation) != len(maximum):
            raise MalformedInputError(
                f"Allocation has {len(allocation)} rows but Maximum has "
                f"{len(maximum)} (one row per process required)"
            )

        processes = []
        for pid, (alloc_row, max_row) in enumerate(zip(allocation, maximum)):
            allocated = ResourceVector(
                alloc_row, length=num_resources, label=f"Allocation row P{pid}"
            )
            maximum_vec = ResourceVector(
                max_row, length=num_resources, label=f"Maximum row P{pid}"
            )

            for i in range(num_resources):
                if allocated[i] > maximum_vec[i]:
                    raise MalformedInputError(
                        f"P{pid}: allocation of R{i} ({allocated[i]}) exceeds "
                        f"maximum ({maximum_vec[i]})"
                    )

            processes.append(Process(pid=pid, allocated=allocated, maximum=maximum_vec, pool=pool))

        return cls(pool, processes)

    @property
    def num_processes(self) -> int:
        """Number of processes in the system."""
        return len(self.processes)

    @property
    def num_resources(self) -> int:
        """Number of resource types in the system."""
        return self.pool.num_resources

    @property
    def allocation_matrix(self) -> np.ndarray:
        """Allocation matrix [P][R], rebuilt from the process records."""
        return self._build_matrix(lambda p: p.allocated)

    @property
    def max_demand_matrix(self) -> np.ndarray:
        """Max demand matrix [P][R]."""
        return self._build_matrix(lambda p: p.maximum)

    @property
    def need_matrix(self) -> np.ndarray:
        """Need matrix [P][R] (Max - Allocation while running, zero once finished)."""
        return self._build_matrix(lambda p: p.need)

    @property
    def available_vector(self) -> np.ndarray:
        """Available resources vector [R] (copy)."""
        return np.array(self.pool.available.to_list(), dtype=int)

    def _build_matrix(self, row_of) -> np.ndarray:
        matrix = np.zeros((self.num_processes, self.num_resources), dtype=int)
        for i, process in enumerate(self.processes):
            matrix[i] = row_of(process).to_list()
        return matrix

    def _compute_totals(self) -> np.ndarray:
        return self.allocation_matrix.sum(axis=0) + self.available_vector

    def running_processes(self) -> List[Process]:
        """Processes still in RUNNING state, in creation order."""
        return [p for p in self.processes if p.state == ProcessState.RUNNING]

    def count_safe_running(self) -> int:
        """Number of running processes whose full need fits the current pool."""
        return sum(1 for p in self.running_processes() if p.is_safe_to_request())

    def finished_count(self) -> int:
        return sum(1 for p in self.processes if p.is_finished())

    def all_finished(self) -> bool:
        """Check if every process has finished."""
        return all(p.is_finished() for p in self.processes)

    def assert_resource_conservation(self, context: str = "") -> None:
        """Verify resource conservation: allocated + available = total for all resources.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If resource conservation is violated
        """
        allocation_matrix = self.allocation_matrix
        available_vector = self.available_vector

        for r_idx in range(self.num_resources):
            allocated = allocation_matrix[:, r_idx].sum()
            available = available_vector[r_idx]
            total = self.total_resources[r_idx]

            assert allocated + available == total, (
                f"Resource conservation violated for R{r_idx} {context}\n"
                f"  Allocated: {allocated}, Available: {available}, Total: {total}\n"
                f"  Allocated + Available = {allocated + available} != {total}"
            )

            assert available >= 0, (
                f"Negative available resources for R{r_idx} {context}\n"
                f"  Available: {available}"
            )

    def assert_need_invariant(self, context: str = "") -> None:
        """Verify allocated + need == maximum for every running process.

        Raises:
            AssertionError: If the invariant is violated
        """
        for process in self.running_processes():
            held = np.array(process.allocated.to_list()) + np.array(process.need.to_list())
            assert np.array_equal(held, np.array(process.maximum.to_list())), (
                f"Need invariant violated for {process.label} {context}\n"
                f"  Allocated: {process.allocated.to_list()}, "
                f"Need: {process.need.to_list()}, Maximum: {process.maximum.to_list()}"
            )

    def display(self) -> str:
        """
        Generate readable string representation of the ledger.

        Returns:
            Formatted string showing process states, availability and matrices
        """
        header = "     " + " ".join([f"R{i:2}" for i in range(self.num_resources)])
        output = []
        output.append("\n" + "="*60)
        output.append("SYSTEM STATE")
        output.append("="*60)

        output.append("\nProcess States:")
        for process in self.processes:
            output.append(f"  {process.label}: {process.state.value}")

        output.append("\nAvailable Resources:")
        avail = ", ".join(f"R{i}:{n:2}" for i, n in enumerate(self.available_vector))
        output.append(f"  [{avail}]")

        for title, matrix in (
            ("Allocation Matrix:", self.allocation_matrix),
            ("Max Demand Matrix:", self.max_demand_matrix),
            ("Need Matrix (Max - Allocation):", self.need_matrix),
        ):
            output.append("\n" + title)
            output.append(header)
            for i, process in enumerate(self.processes):
                row = f"  {process.label}: "
                row += " ".join([f"{matrix[i][j]:3}" for j in range(self.num_resources)])
                output.append(row)

        output.append("\n" + "="*60)
        return "\n".join(output)
