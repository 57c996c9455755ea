"""Console output formatting utilities for wpship."""

from __future__ import annotations

import sys
import threading
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug
        # parallel tasks print from worker threads
        self._lock = threading.Lock()

    def _out(self, message: str, err: bool = False) -> None:
        with self._lock:
            print(message, file=sys.stderr if err else sys.stdout)

    def print_run_started(
        self, plugin: str, task: str, deploy_type: Optional[str], commit: Optional[str] = None
    ) -> None:
        """Print run start information."""
        self._out("\nRUN STARTED")
        self._out(f"Plugin: {plugin}")
        self._out(f"Task: {task}")
        self._out(f"Deploy type: {deploy_type or '-'}")
        if commit:
            self._out(f"Commit: {commit[:12]}")

    def print_task_start(self, name: str) -> None:
        self._out(f"Starting '{name}'...")

    def print_task_done(self, name: str, duration: float) -> None:
        self._out(f"Finished '{name}' after {_format_duration(duration)}")

    def print_task_skipped(self, name: str) -> None:
        self._out(f"Stopped '{name}' (skipped)")

    def print_task_failed(self, name: str, error: BaseException) -> None:
        """
        Print task failure message.

        Args:
            name: Task name
            error: The error raised by the task
        """
        self._out(f"'{name}' errored", err=True)
        exit_code = getattr(error, "exit_code", None)
        if exit_code is not None:
            self._out(f"Exit code: {exit_code}", err=True)
        if self.debug:
            cause = error.__cause__
            if cause is not None:
                self._out(f"Caused by: {type(cause).__name__}: {cause}", err=True)

    def print_command(self, command: str) -> None:
        self._out(f"$ {command}")

    def print_results(self, task: str, outcome: str) -> None:
        """Print final results summary."""
        self._out("\n" + "=" * 40)
        self._out("RESULT")
        self._out("=" * 40)
        self._out(f"  {task}: {outcome.upper()}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        self._out(f"\nERROR: {title}", err=True)
        self._out(message, err=True)
        if details:
            for detail in details:
                self._out(f"  {detail}", err=True)
        if suggestion:
            self._out(f"\n{suggestion}", err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            self._out(f"Error: {exc}", err=True)

    def print_warning(self, message: str) -> None:
        self._out(f"WARNING: {message}", err=True)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._out(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            self._out(f"[DEBUG] {message}", err=True)


def _format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    return f"{seconds:.2f} s"


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
