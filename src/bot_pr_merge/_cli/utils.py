"""Shared helpers for CLI commands."""

import os
from importlib.metadata import PackageNotFoundError, version

from rich.console import Console

NO_BANNER_ENV = "BOT_PR_MERGE_NO_BANNER"


def get_version() -> str:
    """Get the installed version of the package.

    Returns
    -------
    str
        Version string from package metadata.

    """
    try:
        return version("bot-pr-merge")
    except PackageNotFoundError:
        return "unknown"


def print_banner(console: Console) -> None:
    """Print a one-line header with the tool name and version."""
    if os.environ.get(NO_BANNER_ENV):
        return
    console.rule(
        f"[bold cyan]bot-pr-merge[/bold cyan] [dim]{get_version()}[/dim]",
        style="cyan",
    )
