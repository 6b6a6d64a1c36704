"""
History model for the Banker's Algorithm game engine.

Append-only audit trail of every attempted state-changing action.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ActionKind(Enum):
    """Kinds of audited actions."""
    REQUEST = "request"
    RELEASE = "release"


@dataclass(frozen=True)
class HistoryEntry:
    """
    Represents a single audited action.

    Attributes:
        timestamp: When the action was attempted
        process_index: Index of the process involved
        process_name: Display name of that process
        action: Kind of action
        request: Requested (or released) vector, None if not applicable
        granted: Whether the action took effect
        reason: Human-readable explanation
        sequence: Safe sequence computed for a granted request, if any
    """
    timestamp: datetime
    process_index: int
    process_name: str
    action: ActionKind
    request: Optional[Tuple[int, ...]]
    granted: bool
    reason: str
    sequence: Optional[Tuple[int, ...]] = None

    def to_dict(self) -> Dict:
        return {
            'timestamp': self.timestamp.isoformat(),
            'process_index': self.process_index,
            'process': self.process_name,
            'action': self.action.value,
            'request': list(self.request) if self.request is not None else None,
            'granted': self.granted,
            'reason': self.reason,
            'sequence': list(self.sequence) if self.sequence is not None else None,
        }

    def __str__(self) -> str:
        """Format entry for logging."""
        status = "GRANTED" if self.granted else "DENIED"
        time_str = self.timestamp.strftime("%H:%M:%S")
        if self.action == ActionKind.RELEASE:
            return f"[{time_str}] {self.process_name} releases {list(self.request or ())} ({self.reason})"
        return f"[{time_str}] {self.process_name} requests {list(self.request or ())} - {status} ({self.reason})"


class HistoryLog:
    """Append-only collection of history entries."""

    def __init__(self, clock=datetime.now):
        self._entries: List[HistoryEntry] = []
        self._clock = clock

    def record(
        self,
        process_index: int,
        process_name: str,
        action: ActionKind,
        request,
        granted: bool,
        reason: str,
        sequence=None
    ) -> HistoryEntry:
        """Create, append and return a new entry."""
        entry = HistoryEntry(
            timestamp=self._clock(),
            process_index=process_index,
            process_name=process_name,
            action=action,
            request=tuple(int(x) for x in request) if request is not None else None,
            granted=granted,
            reason=reason,
            sequence=tuple(sequence) if sequence is not None else None
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def granted(self) -> List[HistoryEntry]:
        """Get all granted entries."""
        return [e for e in self._entries if e.granted]

    def denied(self) -> List[HistoryEntry]:
        """Get all denied entries."""
        return [e for e in self._entries if not e.granted]

    def for_process(self, process_index: int) -> List[HistoryEntry]:
        """Get all entries for a specific process."""
        return [e for e in self._entries if e.process_index == process_index]

    def to_list(self) -> List[Dict]:
        return [e.to_dict() for e in self._entries]

    def display(self) -> str:
        """Format all entries for display."""
        return "\n".join(str(entry) for entry in self._entries)
