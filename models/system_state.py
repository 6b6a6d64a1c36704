"""
System State model for the Banker's Algorithm game engine.

Holds one immutable snapshot of a session's resources, processes,
allocation matrix and available vector. Transitions return new
snapshots; the engine swaps them in only once they are known to be safe.
"""

import numpy as np
from typing import Dict, List, Tuple
from dataclasses import dataclass, replace

from models.process import Process, ProcessState
from models.resource import ResourceType
from utils import vectors


@dataclass(frozen=True, eq=False)
class SystemState:
    """
    Snapshot of a session's allocation state.

    Attributes:
        resources: All resource types, ordered by index
        processes: All processes, ordered by index
        allocation_matrix: [P][R] Current resources held by each process
        available_vector: [R] Free resource instances by type
        finished: [P] True once a process has been driven to completion

    Arrays are stored read-only; every transition builds new arrays.
    """
    resources: Tuple[ResourceType, ...]
    processes: Tuple[Process, ...]
    allocation_matrix: np.ndarray
    available_vector: np.ndarray
    finished: Tuple[bool, ...]

    def __post_init__(self):
        object.__setattr__(self, "allocation_matrix", vectors.frozen(self.allocation_matrix))
        object.__setattr__(self, "available_vector", vectors.frozen(self.available_vector))

    @classmethod
    def initial(
        cls,
        resources: Tuple[ResourceType, ...],
        processes: Tuple[Process, ...],
        allocation_matrix: np.ndarray
    ) -> "SystemState":
        """
        Build the starting snapshot, deriving Available from the conservation law.

        Processes whose need is already zero start out FINISHED.
        """
        total = np.array([r.total for r in resources], dtype=int)
        allocation = np.array(allocation_matrix, dtype=int).reshape(len(processes), len(resources))
        available = total - allocation.sum(axis=0)
        max_demand = np.array([p.max_demand for p in processes], dtype=int).reshape(allocation.shape)
        finished = tuple(
            vectors.is_zero(max_demand[i] - allocation[i]) for i in range(len(processes))
        )
        return cls(
            resources=tuple(resources),
            processes=tuple(processes),
            allocation_matrix=allocation,
            available_vector=available,
            finished=finished
        )

    @property
    def num_processes(self) -> int:
        """Number of processes in the session."""
        return len(self.processes)

    @property
    def num_resources(self) -> int:
        """Number of resource types in the session."""
        return len(self.resources)

    @property
    def total_vector(self) -> np.ndarray:
        """Total instances per resource type [R]."""
        return np.array([r.total for r in self.resources], dtype=int)

    @property
    def max_demand_matrix(self) -> np.ndarray:
        """Get max demand matrix [P][R]."""
        return np.array(
            [p.max_demand for p in self.processes], dtype=int
        ).reshape(self.num_processes, self.num_resources)

    @property
    def need_matrix(self) -> np.ndarray:
        """
        Get need matrix [P][R].
        Computed as: Need = Max - Allocation, with FINISHED rows forced to zero.
        Used for Banker's Algorithm safety check.
        """
        need = self.max_demand_matrix - self.allocation_matrix
        for i, done in enumerate(self.finished):
            if done:
                need[i] = 0
        return need

    def need_of(self, process_index: int) -> np.ndarray:
        return self.need_matrix[process_index]

    def process_state(self, process_index: int) -> ProcessState:
        if self.finished[process_index]:
            return ProcessState.FINISHED
        return ProcessState.READY

    @property
    def all_finished(self) -> bool:
        return all(self.finished)

    def with_request(self, process_index: int, request: np.ndarray) -> "SystemState":
        """
        Tentatively grant a request.

        Returns:
            New snapshot with Available -= request and Allocation[i] += request
        """
        allocation = self.allocation_matrix.copy()
        allocation[process_index] = vectors.add(allocation[process_index], request)
        available = vectors.subtract(self.available_vector, request)
        return replace(self, allocation_matrix=allocation, available_vector=available)

    def with_release(self, process_index: int) -> Tuple["SystemState", np.ndarray]:
        """
        Return a process's whole allocation to the pool.

        Returns:
            Tuple of (new snapshot, released vector)
        """
        released = self.allocation_matrix[process_index].copy()
        allocation = self.allocation_matrix.copy()
        allocation[process_index] = 0
        available = vectors.add(self.available_vector, released)
        return replace(self, allocation_matrix=allocation, available_vector=available), released

    def with_finished(self, process_index: int) -> "SystemState":
        """Mark a process FINISHED."""
        finished = list(self.finished)
        finished[process_index] = True
        return replace(self, finished=tuple(finished))

    def to_dict(self) -> Dict:
        """
        Serializable projection of the snapshot.

        Returns:
            Dictionary of plain Python lists/ints
        """
        return {
            'processes': [p.name for p in self.processes],
            'resources': [r.name for r in self.resources],
            'allocation': vectors.to_rows(self.allocation_matrix),
            'max_demand': vectors.to_rows(self.max_demand_matrix),
            'need': vectors.to_rows(self.need_matrix),
            'available': vectors.to_list(self.available_vector),
            'total_resources': vectors.to_list(self.total_vector),
            'finished': list(self.finished),
        }

    def display(self) -> str:
        """
        Generate readable string representation of system state.

        Returns:
            Formatted string showing all matrices and vectors
        """
        names = [r.name for r in self.resources]
        header = "      " + " ".join(f"{name:>3}" for name in names)

        output = []
        output.append("\n" + "="*60)
        output.append("SYSTEM STATE")
        output.append("="*60)

        output.append("\nProcess States:")
        for i, process in enumerate(self.processes):
            output.append(f"  {process.name}: {self.process_state(i).value}")

        output.append("\nAvailable Resources:")
        avail = ", ".join(
            f"{name}:{int(self.available_vector[j]):2}" for j, name in enumerate(names)
        )
        output.append(f"  [{avail}]")

        for title, matrix in [
            ("Allocation Matrix", self.allocation_matrix),
            ("Max Demand Matrix", self.max_demand_matrix),
            ("Need Matrix (Max - Allocation)", self.need_matrix),
        ]:
            output.append(f"\n{title}:")
            output.append(header)
            for i, process in enumerate(self.processes):
                row = " ".join(f"{int(matrix[i][j]):3}" for j in range(self.num_resources))
                output.append(f"  {process.name:>3}: {row}")

        output.append("\n" + "="*60)
        return "\n".join(output)

    def assert_resource_conservation(self, context=""):
        """Verify resource conservation: allocated + available = total for all resources.

        Also verifies 0 <= allocation <= max_demand.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If resource conservation is violated
        """
        total_instances = self.total_vector

        for r_idx, resource in enumerate(self.resources):
            allocated = int(self.allocation_matrix[:, r_idx].sum())
            available = int(self.available_vector[r_idx])
            total = int(total_instances[r_idx])

            assert allocated + available == total, (
                f"Resource conservation violated for {resource.name} {context}\n"
                f"  Allocated: {allocated}, Available: {available}, Total: {total}\n"
                f"  Allocated + Available = {allocated + available} != {total}"
            )

            assert available >= 0, (
                f"Negative available resources for {resource.name} {context}\n"
                f"  Available: {available}"
            )

        raw_need = self.max_demand_matrix - self.allocation_matrix
        assert np.all(self.allocation_matrix >= 0) and np.all(raw_need >= 0), (
            f"Allocation outside [0, max_demand] {context}"
        )

    def summary_rows(self) -> List[str]:
        """One line per process: allocation, need and state."""
        rows = []
        for i, p in enumerate(self.processes):
            alloc = vectors.to_list(self.allocation_matrix[i])
            need = vectors.to_list(self.need_matrix[i])
            rows.append(f"{p.name}: state={self.process_state(i).value}, alloc={alloc}, need={need}")
        return rows
