"""Shared helpers for the CLI commands."""

import click
import questionary

from ..manager import SessionManager


def format_session_for_display(session, max_summary=50):
    """Format a single session as one line of a listing."""
    date_str = session.modified_at.strftime("%Y-%m-%d %H:%M")
    summary = session.display_name(max_length=max_summary)

    suffix = ""
    if session.related_files:
        suffix = f" (+{len(session.related_files)} files)"

    return (
        f"{session.id}  {date_str}  {session.size_str():>7}  "
        f"{session.message_count:4d} msgs  {summary}{suffix}"
    )


def build_session_choices(sessions):
    """Build questionary choices for sessions, grouped under project separators.

    Projects appear in the order of their first session in ``sessions``.
    """
    by_project = {}
    for session in sessions:
        by_project.setdefault(session.project, []).append(session)

    choices = []
    for project_sessions in by_project.values():
        name = project_sessions[0].project_display_name
        choices.append(questionary.Separator(f"--- {name} ---"))
        for session in project_sessions:
            choices.append(
                questionary.Choice(
                    title=format_session_for_display(session), value=session
                )
            )
    return choices


def confirm(message, assume_yes=False):
    """Ask for confirmation unless ``assume_yes`` is set."""
    if assume_yes:
        return True
    return bool(questionary.confirm(message, default=False).ask())


def get_manager(ctx) -> SessionManager:
    manager = ctx.find_object(SessionManager)
    if manager is None:
        raise click.ClickException("Session manager is not configured.")
    return manager
