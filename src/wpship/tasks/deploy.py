# tasks/deploy.py
from __future__ import annotations

import re

from ..changelog import changelog_errors, plugin_version
from ..config import validate_environment
from ..dsl import parallel, series, set_options
from ..errors import PreconditionError, StepExecutionError
from ..model import RunContext
from ..runner import TaskRunner
from .bump import changelog_path, stop_if_skipped


_WT_UPDATE_KEY_RE = re.compile(
    r"woothemes_queue_update\s*\(\s*plugin_basename\s*\(\s*__FILE__\s*\)\s*,\s*'(.+)'\s*,\s*'(\d+)'\s*\);",
    re.IGNORECASE,
)


# ----------------------------------------------------------------------
# Preconditions
# ----------------------------------------------------------------------

def validate_env(ctx: RunContext) -> None:
    # once per run; several deploy sub-tasks can be invoked on their own
    if ctx.session.get("validated_env"):
        return
    validate_environment(ctx.config.required_env())
    ctx.session["validated_env"] = True


def validate_changelog(ctx: RunContext) -> None:
    errors = changelog_errors(changelog_path(ctx), plugin_version(ctx.config.main_file_path()))
    if errors:
        raise PreconditionError("Plugin is not deployable: \n * " + "\n * ".join(errors))


def search_wt_update_key(ctx: RunContext) -> None:
    """Make sure the WooThemes updater keys have been set in the main file."""
    text = ctx.config.main_file_path().read_text(encoding="utf-8")
    if not _WT_UPDATE_KEY_RE.search(text):
        raise PreconditionError("WooThemes updater keys for the plugin have not been properly set ;(")


def preflight(ctx: RunContext):
    checks = [
        "shell:git_ensure_clean_working_copy",
        "scripts:lint",
        "styles:lint",
    ]
    if ctx.config.deploy.type == "wc":
        checks.insert(0, "search:wt_update_key")
    return parallel(*checks)


# ----------------------------------------------------------------------
# Deploy
# ----------------------------------------------------------------------

def deploy(ctx: RunContext):
    steps = [
        "validate:env",
        "validate:changelog",
        set_options(deploy=True, minify=True),
        # preflight checks, will fail the deploy on errors
        "deploy:preflight",
        "bump",
        # fetch the latest WP/WC versions & bump the "tested up to" values
        "fetch_latest_wp_wc_versions",
        "bump:minreqs",
        "prompt:deploy",
        stop_if_skipped,
        "replace:version",
        "clean:prerelease",
        "build",
        "github:get_rissue",
        "shell:git_push_update",
        "deploy_to_production_repo",
        # the zip is attached to the releases
        "compress",
        "deploy_create_releases",
    ]

    if ctx.config.trello_board and ctx.config.deploy.type == "wc":
        steps.append("trello:update_wc_card")

    steps.append("github:docs_issue")
    return series(*steps)


def deploy_create_releases(ctx: RunContext):
    """
    Create releases for a deploy. Also useful on its own when a deploy
    failed before the release step.
    """
    target = ctx.config.deploy
    if target.dev is None:
        raise StepExecutionError("deploy.dev is not configured, nowhere to create a release")

    steps = [set_options(owner=target.dev.owner, repo=target.dev.name), "github:create_release"]

    if target.type == "wc" and target.production is not None:
        steps += [
            set_options(owner=target.production.owner, repo=target.production.name),
            "github:create_release",
        ]

    return series(*steps)


def deploy_to_production_repo(ctx: RunContext):
    deploy_type = ctx.config.deploy.type
    if deploy_type == "wc":
        return series("deploy_to_wc_repo")
    if deploy_type == "wp":
        return series("deploy_to_wp_repo")
    ctx.console.print_warning("No deploy type set, skipping deploy to remote repo")
    return None


# ---- WooCommerce repo ----

def copy_to_wc_repo(ctx: RunContext):
    """Build, pull the WC repo clone, clean it and copy the build into it."""
    steps = [
        "validate:env",
        "build",
        "shell:git_pull_wc_repo",
        "clean:wc_repo",
        "copy:wc_repo",
    ]
    # already built as part of the deploy
    if ctx.options.deploy:
        steps.remove("build")
    return series(*steps)


# ---- WordPress.org ----

def deploy_to_wp_repo(ctx: RunContext):
    if ctx.options.deploy_tag is None:
        ctx.options.deploy_tag = True
    if ctx.options.deploy_assets is None:
        ctx.options.deploy_assets = True

    steps = ["copy_to_wp_repo", "shell:svn_commit_trunk"]
    if ctx.options.deploy_tag:
        steps += ["copy:wp_tag", "shell:svn_commit_tag"]
    if ctx.options.deploy_assets:
        steps += ["clean:wp_assets", "copy:wp_assets", "shell:svn_commit_assets"]
    return series(*steps)


def copy_to_wp_repo(ctx: RunContext):
    steps = ["build", "shell:svn_checkout", "clean:wp_trunk", "copy:wp_trunk"]
    if ctx.options.deploy:
        steps.remove("build")
    return series(*steps)


def register(runner: TaskRunner) -> None:
    runner.register("validate:env", validate_env, "Fail unless required environment variables are set")
    runner.register("validate:changelog", validate_changelog, "Fail unless the changelog has a new version entry")
    runner.register("search:wt_update_key", search_wt_update_key, "Fail unless WooThemes updater keys are set")
    runner.register("deploy:preflight", preflight, "Run deploy preflight checks")
    runner.register("deploy", deploy, "Deploy the plugin")
    runner.register("deploy_create_releases", deploy_create_releases, "Create GitHub releases for the deploy")
    runner.register("deploy_to_production_repo", deploy_to_production_repo,
                    "Deploy the build to the WooCommerce or WordPress.org repo")
    runner.register("deploy_to_wc_repo", series("validate:env", "copy_to_wc_repo", "shell:git_push_wc_repo"),
                    "Copy the build to the WooCommerce repo and push")
    runner.register("copy_to_wc_repo", copy_to_wc_repo, "Copy the build into the WooCommerce repo clone")
    runner.register("update_wc_repo", series("validate:env", "copy_to_wc_repo", "shell:git_update_wc_repo"),
                    "Copy the build to the WooCommerce repo and push a general update")
    runner.register("deploy_to_wp_repo", deploy_to_wp_repo, "Deploy the build to WordPress.org SVN")
    runner.register("copy_to_wp_repo", copy_to_wp_repo, "Copy the build into the SVN trunk checkout")
