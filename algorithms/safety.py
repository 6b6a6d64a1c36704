"""
Safety Checker (Banker's Algorithm) for the game engine.

Decides whether a state is safe and, if it is, returns a completion order.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List

from models.errors import InvalidResourceVector
from models.system_state import SystemState
from utils import vectors


@dataclass(frozen=True)
class SafetyResult:
    """
    Verdict of the safety algorithm.

    Attributes:
        safe: True if some order lets every process run to completion
        sequence: Process indices in completion order (empty when unsafe)
    """
    safe: bool
    sequence: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {'safe': self.safe, 'sequence': list(self.sequence)}

    def describe(self, processes=None) -> str:
        """Human-readable verdict, e.g. 'SAFE (P1 -> P3 -> P0)'."""
        if not self.safe:
            return "UNSAFE (no safe sequence exists)"
        if processes is not None:
            names = [processes[i].name for i in self.sequence]
        else:
            names = [f"P{i}" for i in self.sequence]
        return f"SAFE ({' -> '.join(names)})"


def is_safe_state(
    available: np.ndarray,
    allocation: np.ndarray,
    need: np.ndarray
) -> SafetyResult:
    """
    Check if a state is safe using Banker's Algorithm.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Find the lowest index i where Finish[i] == False and Need[i] <= Work
    3. If found: Finish[i] = True, Work += Allocation[i], add i to sequence
    4. Repeat step 2 until all processes finish (SAFE) or stuck (UNSAFE)

    The search restarts from index 0 after every pick, so identical inputs
    always give the identical sequence.

    Time Complexity: O(P²×R)

    Args:
        available: [R] free instances
        allocation: [P][R] instances held
        need: [P][R] remaining need

    Returns:
        SafetyResult with the safe sequence, or an empty sequence if unsafe

    Raises:
        InvalidResourceVector: If the shapes do not agree
    """
    available = np.asarray(available, dtype=int)
    allocation = np.asarray(allocation, dtype=int)
    need = np.asarray(need, dtype=int)

    if available.ndim != 1:
        raise InvalidResourceVector("available must be a vector")
    num_resources = available.shape[0]
    if allocation.ndim == 1 and allocation.size == 0:
        allocation = allocation.reshape(0, num_resources)
    if need.ndim == 1 and need.size == 0:
        need = need.reshape(0, num_resources)
    if allocation.ndim != 2 or allocation.shape[1] != num_resources:
        raise InvalidResourceVector(
            f"allocation shape {allocation.shape} does not match {num_resources} resources"
        )
    if need.shape != allocation.shape:
        raise InvalidResourceVector(
            f"need shape {need.shape} does not match allocation shape {allocation.shape}"
        )

    num_processes = allocation.shape[0]

    # Work = copy of Available (never modify the caller's vector)
    work = available.copy()
    finish = np.zeros(num_processes, dtype=bool)
    safe_sequence = []

    made_progress = True
    while made_progress:
        made_progress = False

        for i in range(num_processes):
            if finish[i]:
                continue

            if vectors.fits(need[i], work):
                # Process can finish: add its allocation back to work
                work = vectors.add(work, allocation[i])
                finish[i] = True
                safe_sequence.append(i)
                made_progress = True
                break  # Restart search from beginning for determinism

    if np.all(finish):
        return SafetyResult(True, safe_sequence)
    return SafetyResult(False, [])


def check_state(system_state: SystemState) -> SafetyResult:
    """Run the safety algorithm on a session snapshot."""
    return is_safe_state(
        system_state.available_vector,
        system_state.allocation_matrix,
        system_state.need_matrix
    )
