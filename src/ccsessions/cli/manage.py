"""Commands that change sessions: rename and delete."""

import click
import questionary

from ..manager import SessionNotFoundError
from .utils import build_session_choices, confirm, get_manager


@click.command("rename")
@click.argument("session_id")
@click.argument("name")
@click.pass_context
def rename_cmd(ctx, session_id, name):
    """Give SESSION_ID a custom NAME shown instead of its first prompt."""
    manager = get_manager(ctx)
    try:
        manager.rename(session_id, name)
    except (SessionNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))
    except OSError as e:
        raise click.ClickException(f"Failed to rename session: {e}")
    click.echo(f"Renamed {session_id} to {name.strip()!r}")


@click.command("delete")
@click.argument("session_ids", nargs=-1)
@click.option(
    "-y",
    "--yes",
    "assume_yes",
    is_flag=True,
    help="Delete without asking for confirmation.",
)
@click.pass_context
def delete_cmd(ctx, session_ids, assume_yes):
    """Delete sessions together with their debug, env, todo and agent files.

    Without SESSION_IDS, pick sessions interactively (SPACE to select,
    ENTER to confirm).
    """
    manager = get_manager(ctx)
    sessions = manager.load_sessions()

    if session_ids:
        by_id = {s.id: s for s in sessions}
        missing = [sid for sid in session_ids if sid not in by_id]
        if missing:
            raise click.ClickException(f"Session not found: {', '.join(missing)}")
        selected = [by_id[sid] for sid in dict.fromkeys(session_ids)]
    else:
        if not sessions:
            click.echo("No local sessions found.")
            return
        selected = questionary.checkbox(
            "Select sessions to delete (SPACE to select, ENTER to confirm):",
            choices=build_session_choices(sessions),
        ).ask()
        if not selected:
            click.echo("No sessions selected.")
            return

    if not confirm(f"Delete {len(selected)} session(s)?", assume_yes):
        click.echo("Aborted.")
        return

    results = manager.delete_sessions(selected)
    failures = [r for r in results if not r.ok]
    for result in results:
        if result.ok:
            click.echo(f"Deleted {result.session_id} ({len(result.deleted)} files)")
        else:
            click.echo(f"Error: {result.error}", err=True)
        for name in result.deleted:
            click.echo(f"  {name}")

    if failures:
        raise click.ClickException(f"{len(failures)} session(s) could not be fully deleted")
