"""
Logger utility for the Banker's Algorithm game engine.

Provides per-decision logging with verbosity levels.
"""

from typing import Optional, Sequence
from datetime import datetime

LEVEL_PREFIXES = {"error": "[ERROR]", "warning": "[WARNING]", "debug": "[DEBUG]"}


class EngineLogger:
    """
    Logger for engine decisions and session events.

    Format: "Session S: P1 requests [1, 0, 2] - GRANTED/DENIED (reason)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None, echo: bool = True):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
            echo: Print to console (disable to log to file only)
        """
        self.verbose = verbose
        self.log_file = log_file
        self.echo = echo
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        started = datetime.now().isoformat(sep=" ", timespec="seconds")
        self.file_handle.write(f"Banker's Algorithm Log - {started}\n{'=' * 60}\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        if self.echo:
            print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        prefix = LEVEL_PREFIXES.get(level)
        return f"{prefix} {message}" if prefix else message

    def log_session(self, session_id: str, message: str, level: str = "info") -> None:
        """Log a message tagged with its session."""
        self.log(f"Session {session_id}: {message}", level)

    def log_request(
        self,
        session_id: str,
        process_name: str,
        request: Sequence[int],
        granted: bool,
        reason: str
    ) -> None:
        """
        Log a resource request decision.

        Args:
            session_id: Session identifier
            process_name: Requesting process
            request: Requested vector
            granted: Whether request was granted
            reason: Reason for decision
        """
        status = "GRANTED" if granted else "DENIED"
        message = f"{process_name} requests {list(request)} - {status} ({reason})"
        self.log_session(session_id, message)

    def log_release(self, session_id: str, process_name: str, released: Sequence[int]) -> None:
        self.log_session(session_id, f"{process_name} releases {list(released)}")

    def log_safety(self, session_id: str, verdict: str) -> None:
        self.log_session(session_id, f"safety check - {verdict}")

    def log_completion(self, session_id: str, score: int) -> None:
        self.log_session(session_id, f"ROUND COMPLETE - all processes finished (score={score})")

    def log_reset(self, session_id: str) -> None:
        self.log_session(session_id, "reset to initial configuration")

    def log_system_state(self, session_id: str, state_str: str) -> None:
        """
        Log system state snapshot.

        Args:
            session_id: Session identifier
            state_str: Formatted system state
        """
        if self.verbose:
            self.log_session(session_id, f"System State:\n{state_str}", "debug")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __enter__(self) -> "EngineLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self):
        self.close()
