# tasks/integrations.py
from __future__ import annotations

import os

import click

from ..errors import StepExecutionError
from ..github import APIError, GitHubClient
from ..model import RunContext
from ..runner import TaskRunner
from ..trello import TrelloClient
from .shell import release_version


def github_client() -> GitHubClient:
    return GitHubClient(os.environ.get("GITHUB_API_KEY", ""))


def trello_client() -> TrelloClient:
    return TrelloClient(os.environ.get("TRELLO_API_KEY", ""), os.environ.get("TRELLO_API_TOKEN", ""))


def get_release_issue(ctx: RunContext) -> None:
    """Find the open "Release X.Y.Z" issue so the version commit can close it."""
    dev = ctx.config.deploy.dev
    if dev is None:
        ctx.console.print_info("No dev repo configured, not looking for a release issue")
        return

    title = f"Release {release_version(ctx)}"
    try:
        issue = github_client().find_issue(dev.owner, dev.name, title)
    except APIError as e:
        raise StepExecutionError(f"Could not look up release issue in {dev.full_name}: {e}") from e

    if issue is None:
        ctx.console.print_info(f"No open '{title}' issue in {dev.full_name}")
        return
    ctx.options.release_issue_to_close = issue.number
    ctx.console.print_info(f"Commit will close #{issue.number} ({issue.title})")


def create_release(ctx: RunContext) -> None:
    """Create a release on options.owner/options.repo, attaching the zip if there is one."""
    owner, repo = ctx.options.owner, ctx.options.repo
    if not owner or not repo:
        raise StepExecutionError("No repo set for the release, set owner and repo options")

    version = release_version(ctx)
    client = github_client()
    try:
        release = client.create_release(
            owner, repo, version, name=f"{ctx.config.plugin.name} {version}"
        )
        if ctx.options.zip_path:
            client.upload_asset(release, ctx.options.zip_path)
    except APIError as e:
        raise StepExecutionError(f"Could not create release {version} on {owner}/{repo}: {e}") from e

    ctx.options.release_ids.append(release.id)
    ctx.console.print_info(f"Created release {version} on {owner}/{repo}: {release.html_url}")


def docs_issue(ctx: RunContext) -> None:
    docs = ctx.config.deploy.docs
    if docs is None:
        return
    if not click.confirm(f"Does {ctx.config.plugin.name} {release_version(ctx)} need a docs update?", default=False):
        return

    title = f"{ctx.config.plugin.name}: update docs for {release_version(ctx)}"
    try:
        issue = github_client().create_issue(docs.owner, docs.name, title)
    except APIError as e:
        raise StepExecutionError(f"Could not create docs issue in {docs.full_name}: {e}") from e
    ctx.console.print_info(f"Created docs issue #{issue.number}: {issue.html_url}")


def update_wc_card(ctx: RunContext) -> None:
    board = ctx.config.trello_board
    if not board:
        ctx.console.print_info("No Trello board configured")
        return

    client = trello_client()
    name = ctx.config.plugin.name
    try:
        card = client.find_card(board, name)
        if card is None:
            ctx.console.print_warning(f"No Trello card for {name} on board {board}")
            return
        client.comment_card(card.id, f"{name} {release_version(ctx)} deployed")
    except APIError as e:
        raise StepExecutionError(f"Could not update Trello card for {name}: {e}") from e
    ctx.console.print_info(f"Updated Trello card {card.url or card.id}")


def register(runner: TaskRunner) -> None:
    runner.register("github:get_rissue", get_release_issue, "Find the release issue to close with the commit")
    runner.register("github:create_release", create_release, "Create a GitHub release for options.owner/repo")
    runner.register("github:docs_issue", docs_issue, "Open a docs issue if the release needs one")
    runner.register("trello:update_wc_card", update_wc_card, "Comment the release on the plugin's Trello card")
