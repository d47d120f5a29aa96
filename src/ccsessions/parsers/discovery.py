"""Session discovery and related-file utilities.

This module walks a Claude data directory: it enumerates session transcripts
across project directories, resolves the satellite files that belong to a
session, and finds satellite files whose session no longer exists.
"""

import logging
from pathlib import Path

from ..config import AGENT_PREFIX, DEBUG_SUFFIX, TRANSCRIPT_SUFFIX

logger = logging.getLogger(__name__)

# Satellite entries with this name are links maintained by the CLI, not sessions
LATEST_SENTINEL = "latest"


def _list_dir(directory):
    """Return the entries of a directory sorted by name, or [] if it is absent."""
    try:
        return sorted(Path(directory).iterdir(), key=lambda p: p.name)
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", directory, e)
        return []


def is_session_transcript(name):
    """True for ``<id>.jsonl`` names that are not subordinate agent transcripts."""
    return name.endswith(TRANSCRIPT_SUFFIX) and not name.startswith(AGENT_PREFIX)


def iter_session_transcripts(projects_dir):
    """Yield ``(project_dir, transcript_path, session_id)`` for every session.

    Only files directly inside each project directory are considered, and
    ``agent-*.jsonl`` files are skipped since agents are never sessions.
    """
    for project_dir in _list_dir(projects_dir):
        if not project_dir.is_dir():
            continue
        for path in _list_dir(project_dir):
            if not is_session_transcript(path.name) or not path.is_file():
                continue
            yield project_dir, path, path.name[: -len(TRANSCRIPT_SUFFIX)]


def collect_session_ids(projects_dir):
    """Return the set of session ids that currently have a transcript on disk."""
    ids = set()
    for project_dir in _list_dir(projects_dir):
        for path in _list_dir(project_dir):
            if is_session_transcript(path.name):
                ids.add(path.name[: -len(TRANSCRIPT_SUFFIX)])
    return ids


def find_session_transcript(projects_dir, session_id):
    """Locate the transcript of ``session_id`` in any project, or None."""
    for project_dir in _list_dir(projects_dir):
        candidate = project_dir / f"{session_id}{TRANSCRIPT_SUFFIX}"
        if candidate.is_file():
            return candidate
    return None


def todo_belongs_to(todo_name, session_id):
    """Decide whether a todo file belongs to a session.

    Todo files are named ``<sessionId>-agent-<agentId>.json``, so ownership is
    a plain string-prefix test on the file name. One session id that is a
    prefix of another therefore also claims the other's todo files; ids are
    UUIDs in practice so this does not happen, but callers should not rely
    on it for anything beyond cleanup.
    """
    return todo_name.startswith(session_id)


def agent_id_from_todo(todo_name, session_id):
    """Return ``<agentId>`` from ``<sessionId>-agent-<agentId>.json``, or None."""
    prefix = f"{session_id}-agent-"
    if not todo_name.startswith(prefix) or not todo_name.endswith(".json"):
        return None
    agent_id = todo_name[len(prefix) : -len(".json")]
    return agent_id or None


def find_related_files(paths, session_id, project_dir):
    """Find the satellite files of one session that exist right now.

    Args:
        paths: ClaudePaths of the data directory
        session_id: Session id (transcript file stem)
        project_dir: Project directory holding the session's transcript

    Returns:
        List of existing paths: the debug dump, the session-env and
        file-history entries, every todo file prefixed with the id, and the
        agent transcripts those todo files name.
    """
    candidates = [
        paths.debug_dir / f"{session_id}{DEBUG_SUFFIX}",
        paths.session_env_dir / session_id,
        paths.file_history_dir / session_id,
    ]

    for entry in _list_dir(paths.todos_dir):
        if not todo_belongs_to(entry.name, session_id):
            continue
        candidates.append(entry)
        agent_id = agent_id_from_todo(entry.name, session_id)
        if agent_id:
            candidates.append(
                Path(project_dir) / f"{AGENT_PREFIX}{agent_id}{TRANSCRIPT_SUFFIX}"
            )

    related = []
    for candidate in candidates:
        if candidate.exists() and candidate not in related:
            related.append(candidate)
    return related


def find_orphans(paths):
    """Find satellite files whose owning session transcript is gone.

    The set of live session ids is recomputed from disk on every call.
    Debug, session-env and file-history entries are matched on their exact
    stem (``latest`` is never an orphan); todo files are orphans only when
    no live id is a prefix of their name.

    Returns a flat list of paths across all satellite directories.
    """
    valid = collect_session_ids(paths.projects_dir)
    orphans = []

    for directory in (paths.debug_dir, paths.session_env_dir, paths.file_history_dir):
        for entry in _list_dir(directory):
            stem = Path(entry.name).stem
            if stem == LATEST_SENTINEL:
                continue
            if stem not in valid:
                orphans.append(entry)

    for entry in _list_dir(paths.todos_dir):
        if not any(todo_belongs_to(entry.name, session_id) for session_id in valid):
            orphans.append(entry)

    return orphans


# Encoded forms of home directories; the segment after one is the user name
HOME_PREFIXES = ("-mnt-c-users-", "-home-", "-users-")

# Directories that hold projects rather than being one
CONTAINER_DIRS = frozenset({"projects", "code", "repos", "src", "dev", "work", "documents"})


def get_project_display_name(folder_name):
    """Readable project name for an encoded project folder.

    Project folders are the working directory with ``/`` replaced by ``-``,
    so ``-home-user-projects-my-app`` becomes ``my-app``: the home prefix and
    user name are dropped, and so is everything up to the first run of
    container directories (``projects``, ``code``, ...).
    """
    rest = folder_name
    in_home = False
    for prefix in HOME_PREFIXES:
        if folder_name.lower().startswith(prefix):
            rest = folder_name[len(prefix) :]
            in_home = True
            break

    parts = [part for part in rest.split("-") if part]
    if not parts:
        return folder_name

    is_container = [part.lower() in CONTAINER_DIRS for part in parts]
    if any(is_container):
        start = is_container.index(True)
        while start < len(parts) and is_container[start]:
            start += 1
        # A folder that is only containers, e.g. ~/projects itself
        return "-".join(parts[start:]) or parts[-1]

    if in_home and len(parts) > 1:
        parts = parts[1:]
    return "-".join(parts)


def matches_project_filter(folder_name: str, project_filter: str | None) -> bool:
    """True when ``project_filter`` occurs (case-insensitively) in the folder
    name or its display name. An empty filter matches everything."""
    if not project_filter:
        return True
    needle = project_filter.lower()
    return any(
        needle in name.lower()
        for name in (folder_name, get_project_display_name(folder_name))
    )
