# git.py
# Small wrapper around the Git CLI for read-only lookups. Commands that
# mutate a repository (commit, push) go through wpship.shell so their
# output is shown to the user.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


def _git(args: list[str], cwd: Optional[str | Path] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    Raises subprocess.CalledProcessError on a non-zero exit.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=str(cwd) if cwd is not None else None,
        stderr=subprocess.DEVNULL,
        text=True,
    )
    return out.strip()


def head_sha(cwd: Optional[str | Path] = None) -> str:
    return _git(["rev-parse", "HEAD"], cwd=cwd)


def status(cwd: Optional[str | Path] = None) -> str:
    """Human readable `git status` output."""
    return _git(["status"], cwd=cwd)
