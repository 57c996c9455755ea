# shell.py
from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Dict, Optional

from .errors import StepExecutionError
from .ui.console import Console, get_console


TOOL_HINTS = {
    "git": "Install Git or fix PATH.",
    "svn": "Install Subversion (svn) or fix PATH.",
    "composer": "Install Composer or fix PATH.",
    "npx": "Install Node.js (includes npx) or fix PATH.",
}


def exec_command(
    command: str,
    *,
    cwd: str | Path | None = None,
    env: Optional[Dict[str, str]] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Run a shell command, preserving its output and failing on errors.

    Output is not captured: the command inherits our stdout/stderr so
    interactive tools (svn, git credential prompts) keep working.
    """
    console = console or get_console()
    console.print_command(command)

    run_env = None
    if env:
        run_env = os.environ.copy()
        run_env.update(env)

    proc = subprocess.run(
        command,
        shell=True,
        cwd=str(cwd) if cwd is not None else None,
        env=run_env,
    )

    if proc.returncode != 0:
        raise StepExecutionError(
            f"Command failed [exit code {proc.returncode}]: {command}",
            command=command,
            exit_code=proc.returncode,
        )


def command_succeeds(command: str, *, cwd: str | Path | None = None) -> bool:
    """Run a command quietly and report whether it exited with 0."""
    proc = subprocess.run(
        command,
        shell=True,
        cwd=str(cwd) if cwd is not None else None,
        capture_output=True,
        text=True,
    )
    return proc.returncode == 0


def tool_hint(command: str) -> Optional[str]:
    tool = command.strip().split(" ", 1)[0]
    return TOOL_HINTS.get(tool)
