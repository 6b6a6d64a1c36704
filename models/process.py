"""
Process model for the Banker's Algorithm game engine.

Represents a process with its declared maximum demand.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class ProcessState(Enum):
    """Process states within a game session."""
    READY = "READY"
    FINISHED = "FINISHED"


@dataclass(frozen=True)
class Process:
    """
    Represents a process in a game session.

    Allocation is not stored here; it lives in the session's allocation
    matrix so that state transitions can swap whole snapshots.

    Attributes:
        index: Process identifier (row in every P x R matrix)
        name: Display name (e.g. "P0")
        max_demand: Maximum resource demand declared by the process [R]
    """
    index: int
    name: str
    max_demand: Tuple[int, ...]

    def can_hold(self, resource_type: int, amount: int) -> bool:
        """
        Check if holding `amount` units of a resource stays within max_demand.

        Args:
            resource_type: Index of resource type
            amount: Total number of instances held

        Returns:
            True if 0 <= amount <= max_demand[resource_type]
        """
        if resource_type < 0 or resource_type >= len(self.max_demand):
            return False
        return 0 <= amount <= self.max_demand[resource_type]

    def __str__(self) -> str:
        return self.name
