"""Main CLI entry point for bot-pr-merge."""

import click

from ..config import DEFAULT_CONFIG_PATH
from ..utils.logging import get_console
from .commands.merge import merge_bot_prs
from .utils import NO_BANNER_ENV, get_version, print_banner


@click.group(
    invoke_without_command=True,
    help="Approve and merge pull requests opened by a dependency-update bot",
)
@click.version_option(
    get_version(),
    "--version",
    prog_name="bot-pr-merge",
    message="%(prog)s %(version)s",
    help="Show version and exit",
)
@click.option(
    "--config",
    "config_path",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    envvar="BOT_PR_MERGE_CONFIG",
    help="Path to the YAML settings file.",
)
@click.option(
    "--no-banner",
    is_flag=True,
    help=f"Do not print the header (or set {NO_BANNER_ENV}).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str, no_banner: bool) -> None:
    """Entry group; subcommands read the settings path from ``ctx.obj``."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["no_banner"] = no_banner

    if ctx.invoked_subcommand is None:
        if not no_banner:
            print_banner(get_console())
        click.echo(ctx.get_help())


cli.add_command(merge_bot_prs)
