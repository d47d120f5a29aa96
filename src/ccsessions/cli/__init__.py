"""CLI commands for ccsessions (Claude Code session manager)."""

import logging

import click
from click_default_group import DefaultGroup

from ..config import ROOT_ENV_VAR, ClaudePaths, get_root_dir
from ..manager import SessionManager
from .browse import list_cmd, show_cmd
from .maintenance import orphans_cmd, prune_history_cmd
from .manage import delete_cmd, rename_cmd
from .utils import build_session_choices, format_session_for_display


@click.group(cls=DefaultGroup, default="list", default_if_no_args=True)
@click.version_option(None, "-v", "--version", package_name="ccsessions")
@click.option(
    "-r",
    "--root",
    type=click.Path(file_okay=False),
    envvar=ROOT_ENV_VAR,
    help="Claude data directory (default: $CLAUDE_CONFIG_DIR or ~/.claude).",
)
@click.option(
    "--cache-file",
    type=click.Path(dir_okay=False),
    help="Metadata cache file (default: <root>/sessions_tui_cache.json).",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Log cache and filesystem activity to stderr.",
)
@click.pass_context
def cli(ctx, root, cache_file, verbose):
    """Browse, rename and clean up local Claude Code sessions.

    Deleting a session also removes its debug dump, environment snapshot,
    file history, todo files, subagent transcripts and history entries.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )
    paths = ClaudePaths.from_root(get_root_dir(root), cache_file=cache_file)
    ctx.obj = SessionManager(paths)


cli.add_command(list_cmd, "list")
cli.add_command(show_cmd, "show")
cli.add_command(rename_cmd, "rename")
cli.add_command(delete_cmd, "delete")
cli.add_command(orphans_cmd, "orphans")
cli.add_command(prune_history_cmd, "prune-history")


def main():
    cli()


__all__ = [
    "cli",
    "main",
    "list_cmd",
    "show_cmd",
    "rename_cmd",
    "delete_cmd",
    "orphans_cmd",
    "prune_history_cmd",
    "build_session_choices",
    "format_session_for_display",
]
