"""CLI command for merging open bot pull requests."""

import os
import sys

import click
from rich.markup import escape

from ...auth import resolve_github_token
from ...auto_merger import GitHubClient, MergeOrchestrator
from ...config import ConfigError, load_settings
from ...repo import RepositoryError, open_repository
from ...utils.logging import get_console, log_error, log_info, log_success
from ..utils import print_banner


@click.command("merge-bot-prs")
@click.pass_context
def merge_bot_prs(ctx: click.Context) -> None:
    r"""Merge open pull requests from the dependency-update bot.

    Run this inside a clone of the repository. It iterates over the bot's
    open pull requests against the default branch, oldest first, and tries
    to approve and squash merge them one by one. This will run for several
    minutes until all of them are merged or it gives up.

    \b
    Authentication (first match wins):
      GITHUB_TOKEN         GitHub token
      GH_TOKEN             GitHub token
      gh auth login        GitHub CLI session
    """
    obj = ctx.obj or {}
    if not obj.get("no_banner"):
        print_banner(get_console())
    config_path = obj.get("config_path")

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        log_error(f"Configuration error: {e}")
        sys.exit(1)

    token = resolve_github_token()
    if not token:
        log_error(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first."
        )
        sys.exit(1)

    client = GitHubClient(gh_token=token, timeout=settings.command_timeout)

    try:
        repo = open_repository(os.getcwd(), client)
    except RepositoryError as e:
        log_error(f"Unable to open GitHub repository: {escape(str(e))}")
        sys.exit(1)

    log_info(f"Merging {settings.bot_login} PRs in {repo.full_name}")
    summary = MergeOrchestrator(client, repo, settings).run()

    merged = ", ".join(f"#{number}" for number in summary.merged) or "none"
    if summary.ok:
        log_success(f"Done after {summary.iterations} iteration(s). Merged: {merged}")
        return

    log_error(
        f"Stopped ({summary.state.value}) after {summary.iterations} iteration(s). "
        f"Merged: {merged}"
    )
    if summary.last_error is not None:
        log_error(f"Last error: {escape(str(summary.last_error))}")
    sys.exit(1)
