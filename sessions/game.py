"""
Round 2 game operations exposed to the transport layer.

Each method takes an (already authenticated) session id and returns a
plain-dict payload ready for JSON encoding.
"""

from typing import Dict, Optional, Sequence

from algorithms.allocation import AllocationEngine
from sessions.store import SessionStore
from utils.logger import EngineLogger
from utils.scenario_loader import DEFAULT_GAME_CONFIG, GameConfig


class BankersGame:
    """
    Banker's Algorithm round shared by all sessions.

    Args:
        config: Configuration every new session starts from
        logger: Optional logger passed down to every engine
        store: Session store (a fresh one by default)
    """

    def __init__(
        self,
        config: GameConfig = DEFAULT_GAME_CONFIG,
        logger: Optional[EngineLogger] = None,
        store: Optional[SessionStore] = None
    ):
        self.config = config
        self.logger = logger
        self.store = store if store is not None else SessionStore()

    def _new_engine(self, session_id: str) -> AllocationEngine:
        return AllocationEngine(self.config, session_id=session_id, logger=self.logger)

    def initialize(self, session_id: str) -> Dict:
        """Create the session's round, or return the existing one untouched."""
        engine, created = self.store.get_or_create(session_id, self._new_engine)
        if created:
            message = "Round 2 initialized. Keep the system in a safe state!"
            if self.logger:
                self.logger.log_session(session_id, "initialized")
        else:
            message = "Round 2 already in progress"
        return {'state': engine.snapshot(), 'message': message}

    def get_state(self, session_id: str) -> Dict:
        return self.store.get(session_id).snapshot()

    def check_safety(self, session_id: str) -> Dict:
        return self.store.get(session_id).check_safety().to_dict()

    def request_resources(
        self,
        session_id: str,
        process_index: int,
        request: Sequence[int]
    ) -> Dict:
        engine = self.store.get(session_id)
        return engine.request_resources(process_index, request).to_dict()

    def release_resources(self, session_id: str, process_index: int) -> Dict:
        released = self.store.get(session_id).release_resources(process_index)
        return {'released': True, 'amounts': released}

    def reset(self, session_id: str) -> Dict:
        engine = self.store.get(session_id)
        engine.reset()
        return {'state': engine.snapshot(), 'message': "Round 2 reset to its starting state"}

    def complete(self, session_id: str) -> Dict:
        """Report whether the round is complete and the final score."""
        summary = self.store.get(session_id).complete_round()
        if summary['completed']:
            summary['message'] = (
                f"Round 2 Complete! All processes successfully executed. "
                f"Final Score: {summary['score']}"
            )
        else:
            summary['message'] = (
                f"Round 2 not complete yet: {', '.join(summary['remaining'])} still running"
            )
        return summary

    def discard(self, session_id: str) -> bool:
        """Forget a session (called when the owning session expires)."""
        return self.store.discard(session_id)
