"""Session loading, renaming and deletion over a Claude data directory.

``SessionManager`` ties the scanner, the metadata cache, the related-file
resolver and the history log together. Every call is synchronous and
touches the filesystem directly; nothing is kept between calls except the
cache file on disk.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from datetime import datetime, timezone
from operator import attrgetter
from pathlib import Path

from .config import ClaudePaths
from .models import DeletionResult, Session, SortBy
from .parsers.discovery import (
    collect_session_ids,
    find_orphans,
    find_related_files,
    find_session_transcript,
    iter_session_transcripts,
)
from .parsers.session import read_log, render_conversation
from .store.cache import MetadataCache, mtime_seconds
from .store.history import HistoryLog

logger = logging.getLogger(__name__)

DEFAULT_EXCERPT_MESSAGES = 50

SORT_KEYS = {
    SortBy.DATE: "modified",
    SortBy.SIZE: "size",
    SortBy.MESSAGES: "message_count",
}


class SessionNotFoundError(Exception):
    """No transcript exists for the requested session id."""

    def __init__(self, session_id):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class SessionDeletionError(Exception):
    """Deleting a session stopped part way through.

    ``deleted`` lists the paths (relative to the data directory) removed
    before the failure; they are not restored.
    """

    def __init__(self, session_id, deleted, message=None):
        super().__init__(message or f"Failed to delete session {session_id}")
        self.session_id = session_id
        self.deleted = list(deleted)


class OrphanPruneError(Exception):
    """Removing orphaned files stopped part way through."""

    def __init__(self, deleted, message=None):
        super().__init__(message or "Failed to remove orphaned files")
        self.deleted = list(deleted)


def remove_path(path):
    """Remove a file, symlink or directory tree."""
    path = Path(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def sort_sessions(sessions, sort_by=SortBy.DATE):
    """Sort sessions newest, largest or longest first."""
    return sorted(sessions, key=attrgetter(SORT_KEYS[SortBy(sort_by)]), reverse=True)


def filter_sessions(sessions, query):
    """Keep sessions whose name, first message or id contains ``query``."""
    if not query:
        return list(sessions)
    query = query.lower()
    return [
        s
        for s in sessions
        if query in s.display_name().lower()
        or query in s.first_message.lower()
        or query in s.id.lower()
    ]


def _ends_with_newline(path):
    with open(path, "rb") as f:
        f.seek(0, os.SEEK_END)
        if f.tell() == 0:
            return True
        f.seek(-1, os.SEEK_END)
        return f.read(1) == b"\n"


class SessionManager:
    """Operations the interactive layer performs on local sessions."""

    def __init__(self, paths: ClaudePaths | None = None) -> None:
        self.paths = paths or ClaudePaths.default()
        self.cache = MetadataCache(self.paths.cache_file)
        self.history = HistoryLog(self.paths.history_file)

    def load_sessions(self, sort_by=SortBy.DATE) -> list[Session]:
        """Load every session, reusing cached metadata for unchanged files.

        The cache file is rewritten with exactly the sessions seen in this
        pass, so entries of vanished sessions fall out on their own.
        """
        if not self.paths.projects_dir.is_dir():
            return []

        cache = self.cache.load()
        new_cache = {}
        sessions = []

        for project_dir, path, session_id in iter_session_transcripts(self.paths.projects_dir):
            try:
                stat = path.stat()
            except FileNotFoundError:
                # Removed between listing and stat
                continue
            meta = self.cache.reconcile(
                path, session_id, mtime_seconds(stat), cache, new_cache
            )
            sessions.append(
                Session(
                    id=session_id,
                    path=path,
                    project=project_dir.name,
                    size=stat.st_size,
                    message_count=meta.message_count,
                    first_message=meta.first_message,
                    modified=stat.st_mtime,
                    custom_name=meta.custom_name,
                    related_files=find_related_files(self.paths, session_id, project_dir),
                )
            )

        self.cache.persist(new_cache)
        logger.debug("Loaded %d sessions (%d cached before)", len(sessions), len(cache))
        return sort_sessions(sessions, sort_by)

    def find_session(self, session_id: str) -> Path | None:
        return find_session_transcript(self.paths.projects_dir, session_id)

    def rename(self, session_id: str, new_name: str) -> Path:
        """Give a session a custom title by appending a rename record.

        Existing transcript lines are never modified; the scanner picks the
        last title in the file.
        """
        name = new_name.strip()
        if not name:
            raise ValueError("Session name must not be empty")
        path = self.find_session(session_id)
        if path is None:
            raise SessionNotFoundError(session_id)

        record = {
            "type": "rename",
            "customTitle": name,
            "timestamp": datetime.now(timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
        }
        prefix = "" if _ends_with_newline(path) else "\n"
        with open(path, "a", encoding="utf-8") as f:
            f.write(prefix + json.dumps(record) + "\n")
        logger.debug("Renamed %s to %r", session_id, name)
        return path

    def delete_session(self, session: Session) -> list[str]:
        """Delete a session's satellite files, transcript and history lines.

        Related files are resolved again and merged with the session's
        snapshot. The first failure stops the remaining steps and raises
        SessionDeletionError; files removed before it stay removed.

        Returns the removed paths relative to the data directory.
        """
        fresh = find_related_files(self.paths, session.id, session.path.parent)
        targets = list(session.related_files)
        for path in fresh:
            if path not in targets:
                targets.append(path)

        deleted = []
        try:
            for path in targets:
                if not os.path.lexists(path):
                    continue
                remove_path(path)
                deleted.append(self.paths.relative(path))
                logger.debug("Removed %s", path)

            if session.path.exists():
                session.path.unlink()
                deleted.append(self.paths.relative(session.path))
                logger.debug("Removed %s", session.path)

            self.cache.evict(session.id)
            self.history.remove_session(session.id)
        except OSError as e:
            raise SessionDeletionError(
                session.id, deleted, f"Failed to delete session {session.id}: {e}"
            ) from e

        return deleted

    def delete_sessions(self, sessions) -> list[DeletionResult]:
        """Delete several sessions, each independently of the others."""
        results = []
        for session in sessions:
            try:
                deleted = self.delete_session(session)
            except SessionDeletionError as e:
                results.append(
                    DeletionResult(session_id=session.id, deleted=e.deleted, error=e)
                )
            else:
                results.append(DeletionResult(session_id=session.id, deleted=deleted))
        return results

    def find_orphans(self) -> list[Path]:
        return find_orphans(self.paths)

    def prune_orphans(self) -> list[str]:
        """Remove every orphaned satellite file; stops at the first failure."""
        deleted = []
        for path in self.find_orphans():
            try:
                remove_path(path)
            except OSError as e:
                raise OrphanPruneError(
                    deleted, f"Failed to remove {self.paths.relative(path)}: {e}"
                ) from e
            deleted.append(self.paths.relative(path))
        return deleted

    def prune_history_orphans(self) -> int:
        """Drop history lines whose session transcript no longer exists."""
        if not self.paths.projects_dir.is_dir():
            return 0
        return self.history.prune(collect_session_ids(self.paths.projects_dir))

    def read_log(self, path) -> str:
        return read_log(path)

    def get_excerpt(self, session_id: str, max_messages=DEFAULT_EXCERPT_MESSAGES) -> str:
        """Render the first ``max_messages`` turns of a session."""
        path = self.find_session(session_id)
        if path is None:
            raise SessionNotFoundError(session_id)
        return render_conversation(path, max_messages=max_messages)
