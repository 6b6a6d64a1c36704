"""
Score tracking for the Banker's Algorithm game engine.

Points are awarded once per process driven to completion, plus a one-time
bonus when the whole round is completed. Score never decreases.
"""

from dataclasses import dataclass, field
from typing import Set

PROCESS_COMPLETION_POINTS = 10
ROUND_COMPLETION_BONUS = 50


@dataclass
class ScoreKeeper:
    """
    Accumulated score for a single session.

    Attributes:
        score: Current score
        completed_processes: Indices already rewarded
        bonus_awarded: Whether the round completion bonus has been paid
    """
    score: int = 0
    completed_processes: Set[int] = field(default_factory=set)
    bonus_awarded: bool = False

    def record_process_completion(self, process_index: int) -> int:
        """
        Reward a process reaching zero need.

        Args:
            process_index: Process identifier

        Returns:
            Points awarded (0 if this process was already rewarded)
        """
        if process_index in self.completed_processes:
            return 0
        self.completed_processes.add(process_index)
        self.score += PROCESS_COMPLETION_POINTS
        return PROCESS_COMPLETION_POINTS

    def record_round_completion(self) -> int:
        """
        Pay the completion bonus, at most once.

        Returns:
            Points awarded
        """
        if self.bonus_awarded:
            return 0
        self.bonus_awarded = True
        self.score += ROUND_COMPLETION_BONUS
        return ROUND_COMPLETION_BONUS
