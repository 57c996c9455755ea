# errors.py
from __future__ import annotations

from typing import Optional


class WpshipError(Exception):
    """Base class for every error the orchestrator knows how to report."""

    def __init__(self, message: str, *, task: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.task = task

    def __str__(self) -> str:
        if self.task:
            return f"[{self.task}] {self.message}"
        return self.message


class DuplicateTaskError(WpshipError, ValueError):
    """A task name was registered twice."""


class UnknownTaskError(WpshipError, KeyError):
    # KeyError.__str__ would repr() the message
    __str__ = WpshipError.__str__


class PreconditionError(WpshipError):
    """
    Raised by checks that must pass before anything is mutated:
    missing env vars, dirty working copy, missing markers in source files.
    The user has to fix the cause and re-run.
    """


class StepExecutionError(WpshipError):
    """A step failed: non-zero exit code, HTTP failure, unmatched rewrite, ..."""

    def __init__(
        self,
        message: str,
        *,
        task: Optional[str] = None,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
    ):
        super().__init__(message, task=task)
        self.command = command
        self.exit_code = exit_code


class BestEffortWarning(UserWarning):
    """Failure of an enrichment step; logged, never aborts a pipeline."""
