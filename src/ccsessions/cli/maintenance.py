"""Cleanup commands for files left behind by deleted sessions."""

import click

from ..manager import OrphanPruneError
from .utils import confirm, get_manager


@click.command("orphans")
@click.option(
    "--prune",
    is_flag=True,
    help="Remove the orphaned files instead of only listing them.",
)
@click.option(
    "-y",
    "--yes",
    "assume_yes",
    is_flag=True,
    help="Remove without asking for confirmation.",
)
@click.pass_context
def orphans_cmd(ctx, prune, assume_yes):
    """List debug, env, file-history and todo files with no session."""
    manager = get_manager(ctx)
    orphans = manager.find_orphans()

    if not orphans:
        click.echo("No orphaned files found.")
        return

    for path in orphans:
        click.echo(manager.paths.relative(path))
    click.echo(f"Found {len(orphans)} orphaned file(s)")

    if not prune:
        return
    if not confirm(f"Remove {len(orphans)} orphaned file(s)?", assume_yes):
        click.echo("Aborted.")
        return

    try:
        deleted = manager.prune_orphans()
    except OrphanPruneError as e:
        click.echo(f"Removed {len(e.deleted)} file(s) before the error")
        raise click.ClickException(str(e))
    click.echo(f"Removed {len(deleted)} file(s)")


@click.command("prune-history")
@click.option(
    "-y",
    "--yes",
    "assume_yes",
    is_flag=True,
    help="Prune without asking for confirmation.",
)
@click.pass_context
def prune_history_cmd(ctx, assume_yes):
    """Drop history.jsonl entries whose session no longer exists."""
    manager = get_manager(ctx)
    if not confirm("Remove history entries of deleted sessions?", assume_yes):
        click.echo("Aborted.")
        return
    try:
        dropped = manager.prune_history_orphans()
    except OSError as e:
        raise click.ClickException(f"Failed to rewrite history: {e}")
    click.echo(f"Dropped {dropped} history entr{'y' if dropped == 1 else 'ies'}")
