# cli.py
from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Optional

import click

from wpship.config import DEFAULT_CONFIG_FILE, DeployConfig, load_config
from wpship.errors import PreconditionError, StepExecutionError, WpshipError
from wpship.git_facts import git
from wpship.model import Options
from wpship.shell import tool_hint
from wpship.tasks import build_runner
from wpship.ui.console import Console, get_console, set_console


def discover_config(config_arg: str | None) -> Path:
    """
    Resolve the config file from the --config argument or the default name.

    Raises:
        SystemExit: If the config file cannot be found
    """
    console = get_console()

    config_path = Path(config_arg) if config_arg else Path(DEFAULT_CONFIG_FILE)
    if not config_path.exists() and config_path.suffix != ".py":
        config_path = Path(str(config_path) + ".py")
    if not config_path.exists():
        console.print_error(
            "Config file not found",
            f"Could not find config file: {config_arg or DEFAULT_CONFIG_FILE}",
            suggestion=(
                f"Create {DEFAULT_CONFIG_FILE} defining CONFIG = DeployConfig(...) "
                "or specify a different path:\n  wpship run deploy --config my_config.py"
            ),
        )
        sys.exit(1)
    return config_path


def parse_options(pairs: tuple[str, ...]) -> Options:
    options = Options()
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="-o/--option")
        key, value = pair.split("=", 1)
        try:
            options.set(key.strip(), value.strip())
        except ValueError as e:
            raise click.BadParameter(f"invalid value for {key.strip()!r}: {e}", param_hint="-o/--option") from e
    return options


def _head_commit(cfg: DeployConfig) -> Optional[str]:
    try:
        return git.head_sha(cwd=cfg.root)
    except (subprocess.CalledProcessError, OSError):
        get_console().print_debug(f"{cfg.root} is not a git checkout")
        return None


def _load(ctx: click.Context, config: str | None) -> DeployConfig:
    console = get_console()
    config_path = discover_config(config)
    try:
        return load_config(config_path)
    except Exception as e:
        console.print_error(
            "Failed to load config",
            f"Could not load config from {config_path}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """wpship: build and deploy WordPress / WooCommerce plugins."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("task")
@click.option("--config", default=None, help=f"Config file path (defaults to {DEFAULT_CONFIG_FILE})")
@click.option("-o", "--option", "option_pairs", multiple=True, metavar="KEY=VALUE",
              help="Set a run option, e.g. -o version=1.2.3 -o deploy_assets=false")
@click.option("--workers", default=None, type=int, help="Max parallel workers per parallel group")
@click.pass_context
def run(ctx, task, config, option_pairs, workers):
    """Run TASK (and everything it depends on)."""
    console = get_console()
    cfg = _load(ctx, config)
    options = parse_options(option_pairs)

    try:
        runner = build_runner(cfg, options, console=console, max_workers=workers)
        console.print_run_started(
            plugin=cfg.plugin.name, task=task, deploy_type=cfg.deploy.type, commit=_head_commit(cfg)
        )
        outcome = runner.run(task)
        console.print_results(task, outcome.value)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except PreconditionError as e:
        console.print_error(
            "Precondition failed",
            str(e),
            suggestion="Fix the problem above and re-run; nothing was changed.",
        )
        sys.exit(1)
    except StepExecutionError as e:
        hint = tool_hint(e.command) if e.command and e.exit_code == 127 else None
        console.print_error(
            f"Task '{e.task}' failed" if e.task else "Task failed",
            e.message,
            details=[f"Caused by: {type(e.__cause__).__name__}: {e.__cause__}"] if e.__cause__ else None,
            suggestion=hint,
        )
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)
    except WpshipError as e:
        console.print_error("wpship error", str(e))
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
@click.option("--config", default=None, help=f"Config file path (defaults to {DEFAULT_CONFIG_FILE})")
@click.pass_context
def tasks(ctx, config):
    """List registered tasks."""
    console = get_console()
    cfg = _load(ctx, config)
    runner = build_runner(cfg, console=console)
    for name in runner.names():
        description = runner.get(name).description
        console.print_info(f"  {name:<36} {description}".rstrip())


if __name__ == "__main__":
    cli()
