from __future__ import annotations

from typing import Optional

from ..config import DeployConfig
from ..model import Options
from ..runner import TaskRunner
from ..ui.console import Console
from . import build, bump, deploy, integrations, scripts, shell


def build_runner(
    config: DeployConfig,
    options: Optional[Options] = None,
    *,
    console: Optional[Console] = None,
    max_workers: int | None = None,
) -> TaskRunner:
    """A fresh runner with every wpship task registered."""
    runner = TaskRunner(config, options, console=console, max_workers=max_workers)
    for module in (scripts, shell, build, bump, integrations, deploy):
        module.register(runner)
    return runner


__all__ = ["build_runner"]
