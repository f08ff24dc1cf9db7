"""
Logger utility for the Banker's Safety Simulator.

Provides pass-by-pass logging with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for safety-run events and decisions.

    Format: "Pass X: PY granted need [..] - FINISHED (available now [..])"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Safety Run Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

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

        print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_pass(self, pass_number: int, message: str) -> None:
        """Log a message tagged with its safety pass."""
        self.log(f"Pass {pass_number}: {message}", "debug")

    def log_grant(
        self,
        pass_number: int,
        pid: int,
        need: List[int],
        available: str
    ) -> None:
        """
        Log a process being granted its need and finishing.

        Args:
            pass_number: Current pass
            pid: Process ID
            need: Need vector that was granted
            available: Description of the pool after release
        """
        self.log_pass(pass_number, f"P{pid} granted need {need} - FINISHED ({available})")

    def log_unsafe(self, pass_number: int, blocked_pids: list) -> None:
        """
        Log that no running process can be served.

        Args:
            pass_number: Pass that found no safe process
            blocked_pids: PIDs still running
        """
        pids_str = ", ".join(f"P{pid}" for pid in blocked_pids)
        self.log(f"Pass {pass_number}: no safe request - blocked processes: [{pids_str}]", "debug")

    def log_result(self, result) -> None:
        """Log the final verdict (SafetyResult)."""
        for line in result.display().splitlines():
            self.log(line)

    def log_system_state(self, state_str: str) -> None:
        """
        Log system state snapshot.

        Args:
            state_str: Formatted system state
        """
        if self.verbose:
            self.log(f"System State:\n{state_str}", "debug")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
