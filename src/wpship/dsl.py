# src/wpship/dsl.py
from __future__ import annotations

from typing import Any, Callable, Optional

from .model import Parallel, RunContext, Series, StepRef
from .shell import exec_command


# ---------------------------------------------------------------------
# Composition helpers
# ---------------------------------------------------------------------

def series(*steps: Optional[StepRef]) -> Series:
    """series('a', 'b', fn); None entries are dropped so optional steps can be inlined."""
    return Series(*[s for s in steps if s is not None])


def parallel(*steps: Optional[StepRef]) -> Parallel:
    return Parallel(*[s for s in steps if s is not None])


# ---------------------------------------------------------------------
# Inline step helpers
# ---------------------------------------------------------------------

def sh(command: str, *, cwd: str | None = None) -> Callable[[RunContext], None]:
    """Create an inline shell step."""
    def _step(ctx: RunContext) -> None:
        exec_command(command, cwd=cwd, console=ctx.console)

    _step.__name__ = f"sh({command})"
    return _step


def set_options(**values: Any) -> Callable[[RunContext], None]:
    """
    Inline step that writes to the shared options when it runs (not when
    the pipeline is built), so earlier steps in the same series see the old values.
    """
    def _step(ctx: RunContext) -> None:
        for key, value in values.items():
            if not hasattr(ctx.options, key):
                raise AttributeError(f"Unknown option: {key}")
            setattr(ctx.options, key, value)

    _step.__name__ = "set_options(" + ", ".join(f"{k}={v!r}" for k, v in values.items()) + ")"
    return _step
