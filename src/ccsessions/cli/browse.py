"""Commands for listing sessions and reading their transcripts."""

import click

from ..manager import (
    DEFAULT_EXCERPT_MESSAGES,
    SessionNotFoundError,
    filter_sessions,
    sort_sessions,
)
from ..models import SortBy
from ..parsers import matches_project_filter
from .utils import format_session_for_display, get_manager


@click.command("list")
@click.option(
    "-s",
    "--sort",
    "sort_by",
    type=click.Choice([s.value for s in SortBy]),
    default=SortBy.DATE.value,
    help="Sort order: date (default), size, or messages.",
)
@click.option(
    "-f",
    "--filter",
    "query",
    help="Only show sessions whose name, first message or id contains this text.",
)
@click.option(
    "-p",
    "--project",
    "project_filter",
    help="Filter by project name (partial match, case-insensitive).",
)
@click.option(
    "--limit",
    default=100,
    help="Maximum number of sessions to show (default: 100).",
)
@click.pass_context
def list_cmd(ctx, sort_by, query, project_filter, limit):
    """List local Claude Code sessions, most recent first."""
    manager = get_manager(ctx)
    sessions = sort_sessions(manager.load_sessions(), sort_by)
    sessions = [s for s in sessions if matches_project_filter(s.project, project_filter)]
    sessions = filter_sessions(sessions, query)

    if not sessions:
        click.echo("No local sessions found.")
        return

    for session in sessions[:limit]:
        click.echo(format_session_for_display(session))

    if len(sessions) > limit:
        click.echo(f"... and {len(sessions) - limit} more")


@click.command("show")
@click.argument("session_id")
@click.option(
    "-n",
    "--max-messages",
    default=DEFAULT_EXCERPT_MESSAGES,
    help=f"Number of messages to show (default: {DEFAULT_EXCERPT_MESSAGES}).",
)
@click.option(
    "--all",
    "show_all",
    is_flag=True,
    help="Show the whole conversation.",
)
@click.pass_context
def show_cmd(ctx, session_id, max_messages, show_all):
    """Show a session's details and the start of its conversation."""
    manager = get_manager(ctx)
    session = next((s for s in manager.load_sessions() if s.id == session_id), None)
    if session is None:
        raise click.ClickException(f"Session not found: {session_id}")

    click.echo(f"ID: {session.id}")
    click.echo(f"Project: {session.project_display_name}")
    click.echo(f"Size: {session.size_str()}")
    click.echo(f"Messages: {session.message_count}")
    click.echo(f"Age: {session.formatted_age()}")
    if session.custom_name:
        click.echo(f"Name: {session.custom_name}")
    todos = session.get_todos()
    if todos:
        click.echo("Todos:")
        for todo in todos:
            click.echo(f"  - {todo}")
    for path in session.related_files:
        click.echo(f"Related: {manager.paths.relative(path)}")

    if show_all:
        click.echo(manager.read_log(session.path))
        return
    try:
        click.echo(manager.get_excerpt(session_id, max_messages))
    except SessionNotFoundError as e:
        raise click.ClickException(str(e))
    except OSError as e:
        raise click.ClickException(f"Failed to load conversation: {e}")
