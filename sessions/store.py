"""
Session Store for the Banker's Algorithm game engine.

Maps opaque session identifiers to allocation engines. The store-level
lock only guards the mapping itself; each engine carries its own lock,
so operations on different sessions never wait on each other.
"""

import threading
from typing import Callable, Dict, List, Tuple

from algorithms.allocation import AllocationEngine
from models.errors import SessionNotFound


class SessionStore:
    """Thread-safe session id -> AllocationEngine mapping."""

    def __init__(self):
        self._engines: Dict[str, AllocationEngine] = {}
        self._lock = threading.Lock()

    def get_or_create(
        self,
        session_id: str,
        factory: Callable[[str], AllocationEngine]
    ) -> Tuple[AllocationEngine, bool]:
        """
        Insert-if-absent.

        The factory runs outside the store lock; if two callers race on
        the same new id, the first engine inserted wins and the other is
        dropped.

        Args:
            session_id: Session identifier
            factory: Builds a new engine for the id

        Returns:
            Tuple of (engine, created)
        """
        with self._lock:
            engine = self._engines.get(session_id)
        if engine is not None:
            return engine, False

        candidate = factory(session_id)
        with self._lock:
            engine = self._engines.setdefault(session_id, candidate)
        return engine, engine is candidate

    def get(self, session_id: str) -> AllocationEngine:
        """
        Look up an existing session.

        Raises:
            SessionNotFound: If the id was never initialized (or was discarded)
        """
        with self._lock:
            engine = self._engines.get(session_id)
        if engine is None:
            raise SessionNotFound(session_id)
        return engine

    def discard(self, session_id: str) -> bool:
        """Drop a session. Returns True if it existed."""
        with self._lock:
            return self._engines.pop(session_id, None) is not None

    def session_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._engines)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._engines

    def __len__(self) -> int:
        with self._lock:
            return len(self._engines)
