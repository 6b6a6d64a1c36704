"""
Error taxonomy for the Banker's Algorithm game engine.

Hard failures (configuration, unknown session, malformed indices/vectors)
propagate to the caller. RequestDenied subclasses are caught by the
allocation engine and reported as denied results.
"""


class BankersError(Exception):
    """Base class for all engine errors."""
    pass


class ConfigurationError(BankersError):
    """Raised when a game configuration is malformed or inconsistent."""
    pass


class SessionNotFound(BankersError):
    """Raised when an operation names a session that was never initialized."""

    def __init__(self, session_id):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InvalidProcess(BankersError):
    """Raised when a process index is out of range."""

    def __init__(self, process_index, num_processes: int):
        super().__init__(
            f"Invalid process index {process_index} "
            f"(expected 0..{num_processes - 1})"
        )
        self.process_index = process_index


class InvalidResourceVector(BankersError):
    """Raised when a resource vector has the wrong length or bad components."""
    pass


class RequestDenied(BankersError):
    """
    A request that is structurally valid but cannot be granted.

    Attributes:
        reason: Human-readable explanation, suitable for direct display
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class EmptyRequest(RequestDenied):
    """Request vector asks for nothing."""
    pass


class ExceedsNeed(RequestDenied):
    """Request is larger than the process's remaining need."""
    pass


class ExceedsAvailable(RequestDenied):
    """Request is larger than the currently available pool."""
    pass


class UnsafeState(RequestDenied):
    """Granting the request would leave the system in an unsafe state."""
    pass
