"""
Allocation Engine for the Banker's Algorithm game engine.

Owns one session's live state and arbitrates requests and releases
against the safety property.
"""

import numbers
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from algorithms.safety import SafetyResult, check_state
from analysis.history import ActionKind, HistoryEntry, HistoryLog
from analysis.scoring import ScoreKeeper
from models.errors import (
    EmptyRequest,
    ExceedsAvailable,
    ExceedsNeed,
    InvalidProcess,
    RequestDenied,
    UnsafeState,
)
from models.system_state import SystemState
from utils import vectors
from utils.logger import EngineLogger
from utils.scenario_loader import GameConfig


@dataclass(frozen=True)
class RequestResult:
    """
    Outcome of a resource request.

    Attributes:
        granted: Whether the request was committed
        reason: Human-readable explanation
        safety_check: Verdict for the state the decision was based on
            (the speculative state for granted or unsafe requests,
            the live state for other denials)
    """
    granted: bool
    reason: str
    safety_check: SafetyResult

    def to_dict(self) -> Dict:
        return {
            'granted': self.granted,
            'reason': self.reason,
            'safety_check': self.safety_check.to_dict(),
        }


class AllocationEngine:
    """
    Per-session Banker's Algorithm engine.

    The live state is an immutable SystemState. A request builds a
    successor snapshot, checks it, and only then replaces the live one,
    so a denied request never touches visible state. All operations on
    one engine are serialized by its lock.
    """

    def __init__(
        self,
        config: GameConfig,
        session_id: str = "local",
        logger: Optional[EngineLogger] = None
    ):
        self.config = config
        self.session_id = session_id
        self.logger = logger
        self.lock = threading.RLock()
        self._start()

    @classmethod
    def initialize(
        cls,
        resource_names: Sequence[str],
        totals: Sequence[int],
        process_names: Sequence[str],
        max_demands: Sequence[Sequence[int]],
        initial_allocations: Optional[Sequence[Sequence[int]]] = None,
        session_id: str = "local",
        logger: Optional[EngineLogger] = None
    ) -> "AllocationEngine":
        """
        Build an engine straight from vectors.

        Raises:
            ConfigurationError: If the configuration is malformed
        """
        config = GameConfig.from_vectors(
            resource_names, totals, process_names, max_demands, initial_allocations
        )
        return cls(config, session_id=session_id, logger=logger)

    def _start(self) -> None:
        """(Re)build the starting state from the configuration."""
        state = self.config.build_state()
        state.assert_resource_conservation("at initial state")
        self._state = state
        self._history = HistoryLog()
        self._scores = ScoreKeeper()
        self._completed = state.all_finished

    # Read-only views

    @property
    def state(self) -> SystemState:
        return self._state

    @property
    def history(self) -> Sequence[HistoryEntry]:
        return self._history.entries

    @property
    def history_log(self) -> HistoryLog:
        return self._history

    @property
    def score(self) -> int:
        return self._scores.score

    @property
    def completed(self) -> bool:
        return self._completed

    # Operations

    def request_resources(self, process_index: int, request: Sequence[int]) -> RequestResult:
        """
        Handle a resource request using Banker's Algorithm.

        Steps:
        1. Validate: request is non-empty and request <= need
        2. Check: request <= available
        3. Build the tentative successor state
        4. Run safety algorithm on it
        5. If safe: swap it in, finish the process if its need is now zero
           If unsafe: drop the successor, live state is untouched

        Args:
            process_index: Index of the requesting process
            request: Requested instances per resource type

        Returns:
            RequestResult describing the decision

        Raises:
            InvalidProcess: If process_index is out of range
            InvalidResourceVector: If request has the wrong length or bad values
        """
        with self.lock:
            state = self._state
            self._check_process(state, process_index)
            vector = vectors.as_vector(request, state.num_resources, "request")
            process = state.processes[process_index]

            safety = None
            try:
                self._validate_request(state, process_index, vector)
                successor = state.with_request(process_index, vector)
                safety = check_state(successor)
                if not safety.safe:
                    raise UnsafeState(
                        "Request would violate safety (no safe sequence exists afterwards)"
                    )
            except RequestDenied as denial:
                if safety is None:
                    safety = check_state(state)
                self._history.record(
                    process_index, process.name, ActionKind.REQUEST, vector,
                    granted=False, reason=denial.reason
                )
                self._log_request(process.name, vector, False, denial.reason)
                return RequestResult(False, denial.reason, safety)

            successor.assert_resource_conservation(
                f"after granting {vectors.to_list(vector)} to {process.name}"
            )

            seq_str = " -> ".join(state.processes[i].name for i in safety.sequence)
            reason = f"Safe state maintained, sequence: {seq_str}"

            if vectors.is_zero(successor.need_of(process_index)):
                successor = successor.with_finished(process_index)
                points = self._scores.record_process_completion(process_index)
                reason += f"; {process.name} completed (+{points})"

            self._state = successor
            self._history.record(
                process_index, process.name, ActionKind.REQUEST, vector,
                granted=True, reason=reason, sequence=safety.sequence
            )
            self._log_request(process.name, vector, True, reason)

            if successor.all_finished and not self._completed:
                self._completed = True
                self._scores.record_round_completion()
                if self.logger:
                    self.logger.log_completion(self.session_id, self.score)

            return RequestResult(True, reason, safety)

    def _validate_request(self, state: SystemState, process_index: int, request) -> None:
        """
        Denial checks in order, first failure wins.

        Raises:
            EmptyRequest, ExceedsNeed, ExceedsAvailable
        """
        process = state.processes[process_index]
        need = state.need_of(process_index)
        available = state.available_vector

        if vectors.is_zero(request):
            raise EmptyRequest("Request must ask for at least one resource unit")

        if not vectors.fits(request, need):
            if state.finished[process_index]:
                raise ExceedsNeed(f"Request exceeds need: {process.name} has already finished")
            raise ExceedsNeed(
                f"Request exceeds need (requested: {vectors.to_list(request)}, "
                f"need: {vectors.to_list(need)})"
            )

        if not vectors.fits(request, available):
            raise ExceedsAvailable(
                f"Request exceeds available resources (requested: {vectors.to_list(request)}, "
                f"available: {vectors.to_list(available)})"
            )

    def release_resources(self, process_index: int) -> List[int]:
        """
        Return a process's entire allocation to the pool.

        Releasing can only grow Available, so no safety check is needed.

        Returns:
            Released amounts by resource type

        Raises:
            InvalidProcess: If process_index is out of range
        """
        with self.lock:
            state = self._state
            self._check_process(state, process_index)
            process = state.processes[process_index]

            successor, released = state.with_release(process_index)
            successor.assert_resource_conservation(f"after {process.name} release")
            self._state = successor

            released_list = vectors.to_list(released)
            if vectors.is_zero(released):
                reason = f"{process.name} held no resources"
            else:
                reason = f"Released {released_list} to the pool"
            self._history.record(
                process_index, process.name, ActionKind.RELEASE, released,
                granted=True, reason=reason
            )
            if self.logger:
                self.logger.log_release(self.session_id, process.name, released_list)
            return released_list

    def check_safety(self) -> SafetyResult:
        """Run the safety algorithm on the live state (no mutation, no history)."""
        state = self._state
        result = check_state(state)
        if self.logger:
            self.logger.log_safety(self.session_id, result.describe(state.processes))
        return result

    def reset(self) -> None:
        """Discard all progress and rebuild the starting state."""
        with self.lock:
            self._start()
            if self.logger:
                self.logger.log_reset(self.session_id)

    def snapshot(self) -> Dict:
        """
        Full read-only projection of the session.

        Returns:
            Dictionary of plain Python values
        """
        with self.lock:
            data = self._state.to_dict()
            data['score'] = self.score
            data['completed'] = self._completed
            data['history'] = self._history.to_list()
            return data

    def complete_round(self) -> Dict:
        """Summarize round completion without changing state."""
        with self.lock:
            state = self._state
            remaining = [
                p.name for i, p in enumerate(state.processes) if not state.finished[i]
            ]
            return {
                'completed': self._completed,
                'score': self.score,
                'remaining': remaining,
            }

    def _check_process(self, state: SystemState, process_index) -> None:
        if (
            isinstance(process_index, bool)
            or not isinstance(process_index, numbers.Integral)
            or not 0 <= process_index < state.num_processes
        ):
            raise InvalidProcess(process_index, state.num_processes)

    def _log_request(self, process_name: str, request, granted: bool, reason: str) -> None:
        if self.logger:
            self.logger.log_request(
                self.session_id, process_name, vectors.to_list(request), granted, reason
            )
            self.logger.log_system_state(self.session_id, self._state.display())
