# tasks/shell.py
from __future__ import annotations

import shlex

from ..errors import PreconditionError, StepExecutionError
from ..git_facts import git
from ..model import RunContext
from ..runner import TaskRunner
from ..shell import command_succeeds, exec_command


def release_version(ctx: RunContext) -> str:
    """The version being released; set by `bump` / `prompt:deploy`."""
    if not ctx.options.version:
        raise StepExecutionError("No version bump found, run 'bump' first or pass -o version=X.Y.Z")
    return ctx.options.version


def _q(value) -> str:
    return shlex.quote(str(value))


def _svn_add_and_commit(ctx: RunContext, subdir: str, message: str) -> None:
    """Stage additions and removals below subdir of the SVN checkout, then commit."""
    repo = ctx.config.wp_repo_path()
    command = " && ".join([
        f"cd {_q(repo)}",
        f"svn add --force {_q(subdir)} --auto-props --parents --depth infinity -q",
        # files deleted from the working copy show up as "!" and must be svn rm'd
        f"(svn status {_q(subdir)} | grep '^!' | sed 's/^! *//' | xargs -I% svn rm %@ || true)",
        f"svn commit {_q(subdir)} -m {_q(message)}",
    ])
    exec_command(command, console=ctx.console)


# ----------------------------------------------------------------------
# Task bodies
# ----------------------------------------------------------------------

def update_framework(ctx: RunContext) -> None:
    framework = ctx.config.src_path / ctx.config.paths.framework_base
    if framework.exists():
        branch = ctx.options.branch or "master"
        command = " && ".join([
            f"git fetch wc-plugin-framework {_q(branch)}",
            "git status",
            "echo subtree up to date!",
        ])
    else:
        command = "echo no subtree to update"
    exec_command(command, cwd=ctx.config.root, console=ctx.console)


def update_framework_commit(ctx: RunContext) -> None:
    framework = ctx.config.src_path / ctx.config.paths.framework_base
    plugin = ctx.config.plugin
    if framework.exists():
        fw_version = ctx.options.framework_version or plugin.framework_version
        message = f"{plugin.name}: Update framework to v{fw_version}"
    else:
        message = f"{plugin.name}: Update readme.txt"
    command = " && ".join([
        "git add -A",
        f"(git diff-index --quiet --cached HEAD || git commit -m {_q(message)})",
    ])
    exec_command(command, cwd=ctx.config.root, console=ctx.console)


def git_ensure_clean_working_copy(ctx: RunContext) -> None:
    if command_succeeds("git diff-index --quiet HEAD --", cwd=ctx.config.root):
        return
    try:
        ctx.console.print_info(git.status(cwd=ctx.config.root))
    except Exception as e:
        ctx.console.print_debug(f"git status failed: {e}")
    raise PreconditionError("Working copy is not clean!")


def git_push_update(ctx: RunContext) -> None:
    plugin = ctx.config.plugin
    commit = f"git commit -m {_q(f'{plugin.name}: {release_version(ctx)} Versioning')}"
    if ctx.options.release_issue_to_close:
        commit += f" -m {_q(f'Closes #{ctx.options.release_issue_to_close}')}"
    command = " && ".join(["git add -A", commit, "git push", "echo git up to date!"])
    exec_command(command, cwd=ctx.config.root, console=ctx.console)


def git_pull_wc_repo(ctx: RunContext) -> None:
    command = " && ".join([f"cd {_q(ctx.config.wc_repo_path())}", "git pull && git push"])
    exec_command(command, console=ctx.console)


def git_push_wc_repo(ctx: RunContext) -> None:
    message = f"Update {ctx.config.plugin.name} to {release_version(ctx)}"
    command = " && ".join([
        f"cd {_q(ctx.config.wc_repo_path())}",
        "git pull",
        "git add -A",
        f"git commit -m {_q(message)}",
        "git push",
    ])
    exec_command(command, console=ctx.console)


def git_update_wc_repo(ctx: RunContext) -> None:
    message = f"Updating {ctx.config.plugin.name}"
    command = " && ".join([
        f"cd {_q(ctx.config.wc_repo_path())}",
        "git pull",
        "git add -A",
        f"(git diff-index --quiet --cached HEAD || git commit -m {_q(message)})",
        "git push",
        "echo WooCommerce repo up to date!",
    ])
    exec_command(command, console=ctx.console)


def composer_install(ctx: RunContext) -> None:
    if (ctx.config.root / "composer.json").exists():
        exec_command("composer install", cwd=ctx.config.root, console=ctx.console)
    else:
        ctx.console.print_info("No composer.json found, skipping composer install")


def svn_checkout(ctx: RunContext) -> None:
    repo = ctx.config.wp_repo_path()
    if (repo / ".svn").exists():
        exec_command(f"svn update {_q(repo)}", console=ctx.console)
    else:
        repo.parent.mkdir(parents=True, exist_ok=True)
        exec_command(f"svn checkout {_q(ctx.config.plugin_svn_url)} {_q(repo)}", console=ctx.console)


def svn_commit_trunk(ctx: RunContext) -> None:
    _svn_add_and_commit(ctx, "trunk", f"Update {ctx.config.plugin.name} to {release_version(ctx)}")


def svn_commit_tag(ctx: RunContext) -> None:
    version = release_version(ctx)
    _svn_add_and_commit(ctx, f"tags/{version}", f"Tag {ctx.config.plugin.name} {version}")


def svn_commit_assets(ctx: RunContext) -> None:
    _svn_add_and_commit(ctx, "assets", f"Update {ctx.config.plugin.name} assets")


def register(runner: TaskRunner) -> None:
    runner.register("shell:update_framework", update_framework, "Fetch the plugin framework subtree")
    runner.register("shell:update_framework_commit", update_framework_commit, "Commit a framework update")
    runner.register("shell:git_ensure_clean_working_copy", git_ensure_clean_working_copy,
                    "Fail unless the git working copy has no uncommitted changes")
    runner.register("shell:git_push_update", git_push_update, "Commit and push the version bump")
    runner.register("shell:git_pull_wc_repo", git_pull_wc_repo, "Pull the WooCommerce repo clone")
    runner.register("shell:git_push_wc_repo", git_push_wc_repo, "Commit and push to the WooCommerce repo")
    runner.register("shell:git_update_wc_repo", git_update_wc_repo, "Push a general update to the WooCommerce repo")
    runner.register("shell:git_stash", lambda ctx: exec_command("git stash", cwd=ctx.config.root, console=ctx.console),
                    "Stash uncommitted changes")
    runner.register("shell:git_stash_apply",
                    lambda ctx: exec_command("git stash apply", cwd=ctx.config.root, console=ctx.console),
                    "Apply the latest stash")
    runner.register("shell:composer_install", composer_install, "Run composer install if composer.json exists")
    runner.register("shell:svn_checkout", svn_checkout, "Check out / update the WordPress.org SVN repo")
    runner.register("shell:svn_commit_trunk", svn_commit_trunk, "Commit trunk to WordPress.org")
    runner.register("shell:svn_commit_tag", svn_commit_tag, "Commit the release tag to WordPress.org")
    runner.register("shell:svn_commit_assets", svn_commit_assets, "Commit plugin assets to WordPress.org")
