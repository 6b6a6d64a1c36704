"""
Resource model for the Banker's Algorithm game engine.

Represents a resource type with a fixed number of instances per session.
"""

import numbers
from dataclasses import dataclass

from models.errors import ConfigurationError
from utils.vectors import MAX_COUNT


@dataclass(frozen=True)
class ResourceType:
    """
    Represents a resource type in a game session.

    Attributes:
        index: Resource type identifier (position in every resource vector)
        name: Display name (e.g. "A", "Printer")
        total: Total number of instances, fixed at initialization

    Invariant:
        0 <= total <= MAX_COUNT
    """
    index: int
    name: str
    total: int

    def __post_init__(self):
        """Validate resource definition."""
        if isinstance(self.total, bool) or not isinstance(self.total, numbers.Integral):
            raise ConfigurationError(f"Resource {self.name}: total must be an integer")
        if self.total < 0:
            raise ConfigurationError(f"Resource {self.name}: total cannot be negative")
        if self.total > MAX_COUNT:
            raise ConfigurationError(f"Resource {self.name}: total {self.total} is too large")
        object.__setattr__(self, "total", int(self.total))

    def __str__(self) -> str:
        return f"{self.name}({self.total})"
