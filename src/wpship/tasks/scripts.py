# tasks/scripts.py
from __future__ import annotations

from typing import Optional

from ..dsl import series
from ..model import RunContext
from ..runner import TaskRunner
from ..shell import exec_command


def _command_task(attr: str, what: str):
    """Task running one of the configured Commands, or noting there is none."""
    def _task(ctx: RunContext) -> None:
        command: Optional[str] = getattr(ctx.config.commands, attr)
        if not command:
            ctx.console.print_info(f"No {what} command configured, skipping")
            return
        env = {"WPSHIP_MINIFY": "1"} if ctx.options.minify else None
        exec_command(command, cwd=ctx.config.src_path, env=env, console=ctx.console)

    _task.__name__ = attr
    return _task


def _lint_then_compile(kind: str):
    lint_task, compile_task = f"lint:{kind}", f"compile:{kind}"

    def _builder(ctx: RunContext):
        steps = [lint_task, compile_task]
        # don't lint again if already linted in this run, unless we're watching
        if not ctx.options.is_watching and ctx.runner.last_run(lint_task) is not None:
            steps.remove(lint_task)
        return series(*steps)

    _builder.__name__ = kind
    return _builder


def register(runner: TaskRunner) -> None:
    runner.register("lint:scripts", _command_task("lint_scripts", "script lint"), "Lint scripts")
    runner.register("compile:scripts", _command_task("compile_scripts", "script compile"), "Compile scripts")
    runner.register("lint:styles", _command_task("lint_styles", "style lint"), "Lint styles")
    runner.register("compile:styles", _command_task("compile_styles", "style compile"), "Compile styles")

    # main tasks for (optionally) linting and compiling
    runner.register("scripts", _lint_then_compile("scripts"), "Lint (once per run) and compile scripts")
    runner.register("styles", _lint_then_compile("styles"), "Lint (once per run) and compile styles")

    # aliases used by deploy preflight
    runner.register("scripts:lint", series("lint:scripts"), "Lint scripts")
    runner.register("styles:lint", series("lint:styles"), "Lint styles")
