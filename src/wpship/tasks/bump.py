# tasks/bump.py
from __future__ import annotations

import re
from pathlib import Path
from typing import List

import click

from .. import replace as rp
from ..changelog import plugin_version, prerelease_versions, version_bump
from ..dsl import parallel
from ..errors import BestEffortWarning, StepExecutionError
from ..model import SKIP, RunContext
from ..runner import TaskRunner
from ..versions import fetch_latest_wc_version, fetch_latest_wp_version
from .shell import release_version


SKIP_ANSWER = "skip"

_VERSION_RE = re.compile(r"^[0-9]+(\.[0-9]+){1,3}(-[0-9A-Za-z.\-]+)?$")

# files that carry version strings, relative to the source dir
VERSION_FILES = [
    "**/*.php",
    "readme.txt",
    "changelog.txt",
]
VERSION_EXCLUDES = [
    "lib/**",
    "vendor/**",
    "tests/**",
    "node_modules/**",
    "build/**",
    "*.min.js",
]


def changelog_path(ctx: RunContext) -> Path:
    return ctx.config.src_path / "changelog.txt"


def _asset_globs(ctx: RunContext) -> List[str]:
    js, css = ctx.config.paths.js, ctx.config.paths.css
    return [f"{js}/**/*.js", f"{js}/**/*.coffee", f"{css}/**/*.scss", f"{css}/**/*.css"]


def _is_release_notes(path: Path) -> bool:
    return path.name in ("readme.txt", "changelog.txt")


# ----------------------------------------------------------------------
# Task bodies
# ----------------------------------------------------------------------

def bump(ctx: RunContext) -> None:
    """Resolve the version being released from the top changelog entry."""
    bumped = version_bump(changelog_path(ctx))
    if not bumped:
        raise StepExecutionError(f"No version bump found in {changelog_path(ctx).name}")

    current = plugin_version(ctx.config.main_file_path())
    ctx.console.print_info(f"Version bump: {current} -> {bumped}")
    if not ctx.options.version:
        ctx.options.version = bumped


def bump_minreqs(ctx: RunContext) -> None:
    """Rewrite minimum-requirement and tested-up-to headers from options."""
    opts = ctx.options
    rules: List[rp.Rule] = []
    if opts.minimum_wp_version:
        rules += rp.minimum_wp_version(opts.minimum_wp_version)
    if opts.tested_up_to_wp_version:
        rules += rp.tested_up_to_wp_version(opts.tested_up_to_wp_version)
    if ctx.config.platform == "wc":
        if opts.minimum_wc_version:
            rules += rp.minimum_wc_version(opts.minimum_wc_version)
        if opts.tested_up_to_wc_version:
            rules += rp.tested_up_to_wc_version(opts.tested_up_to_wc_version)
    if opts.framework_version:
        rules += rp.framework_version(opts.framework_version)
    if opts.backwards_compatible:
        rules += rp.backwards_compatible(opts.backwards_compatible)

    if not rules:
        ctx.console.print_info("No requirement versions to bump")
        return

    targets = [p for p in (ctx.config.main_file_path(), ctx.config.src_path / "readme.txt") if p.exists()]
    modified = rp.rewrite_files(targets, rules)
    ctx.console.print_info(f"Updated requirement versions in {modified} file(s)")


def prompt_deploy(ctx: RunContext) -> None:
    default = ctx.options.version
    while True:
        answer = click.prompt(
            f"Version to deploy {ctx.config.plugin.name} as (or '{SKIP_ANSWER}')",
            default=default,
            show_default=default is not None,
        ).strip()
        if answer == SKIP_ANSWER or _VERSION_RE.match(answer):
            break
        ctx.console.print_warning(f"'{answer}' is not a valid version")
    ctx.options.version = answer


def stop_if_skipped(ctx: RunContext):
    if ctx.options.version == SKIP_ANSWER:
        ctx.console.print_warning("Deploy skipped! No changes were made.")
        return SKIP
    return None


def replace_version(ctx: RunContext) -> None:
    """
    Replace the prerelease version and release date placeholders.

    A plugin whose current version is already a release only gets its
    release headers bumped; that version string also names history.
    """
    bumped = release_version(ctx)
    src = ctx.config.src_path
    current = plugin_version(ctx.config.main_file_path())
    old = prerelease_versions(current)

    files = rp.collect_files(src, VERSION_FILES + _asset_globs(ctx), VERSION_EXCLUDES)
    if old:
        rules = rp.version_replacements(old, bumped)
    else:
        old = [current]
        rules = rp.release_headers(current, bumped)
    modified = rp.rewrite_files(files, rules)
    if modified == 0:
        raise StepExecutionError(
            f"No matching version pattern found: none of {', '.join(old)} occur in {len(files)} candidate file(s)"
        )

    rp.rewrite_files(files, rp.release_date(), only=_is_release_notes)
    ctx.console.print_info(f"Replaced {' / '.join(old)} with {bumped} in {modified} file(s)")


def _store_wp_version(ctx: RunContext) -> None:
    try:
        ctx.options.tested_up_to_wp_version = fetch_latest_wp_version()
    except BestEffortWarning as w:
        ctx.console.print_warning(f"An error occurred when fetching latest WP / WC versions: {w}")


def _store_wc_version(ctx: RunContext) -> None:
    try:
        ctx.options.tested_up_to_wc_version = fetch_latest_wc_version()
    except BestEffortWarning as w:
        ctx.console.print_warning(f"An error occurred when fetching latest WP / WC versions: {w}")


def fetch_latest_wp_wc_versions(ctx: RunContext):
    ctx.console.print_info("Fetching latest WP and WC versions")
    requests = [_store_wp_version]
    if ctx.config.platform == "wc":
        requests.append(_store_wc_version)
    return parallel(*requests)


def register(runner: TaskRunner) -> None:
    runner.register("bump", bump, "Resolve the release version from the changelog")
    runner.register("bump:minreqs", bump_minreqs, "Bump minimum requirement / tested up to versions")
    runner.register("prompt:deploy", prompt_deploy, "Ask which version to deploy as")
    runner.register("replace:version", replace_version, "Replace version numbers and release dates")
    runner.register("fetch_latest_wp_wc_versions", fetch_latest_wp_wc_versions,
                    "Fetch the latest WordPress / WooCommerce versions")
