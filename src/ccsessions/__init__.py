"""Index, cache and clean up local Claude Code session transcripts."""

from .config import ClaudePaths, get_root_dir

from .models import (
    CachedMetadata,
    DeletionResult,
    Session,
    SortBy,
)

# Session parsing and discovery
from .parsers import (
    collect_session_ids,
    extract_text_from_content,
    find_orphans,
    find_related_files,
    get_project_display_name,
    read_log,
    render_conversation,
    scan_session_file,
    todo_belongs_to,
)

# Cache and history log
from .store import (
    HistoryLog,
    MetadataCache,
    drop_session,
    drop_unknown_sessions,
)

from .manager import (
    OrphanPruneError,
    SessionDeletionError,
    SessionManager,
    SessionNotFoundError,
    filter_sessions,
    sort_sessions,
)

from .cli import cli, main

__all__ = [
    "ClaudePaths",
    "get_root_dir",
    "CachedMetadata",
    "DeletionResult",
    "Session",
    "SortBy",
    "collect_session_ids",
    "extract_text_from_content",
    "find_orphans",
    "find_related_files",
    "get_project_display_name",
    "read_log",
    "render_conversation",
    "scan_session_file",
    "todo_belongs_to",
    "HistoryLog",
    "MetadataCache",
    "drop_session",
    "drop_unknown_sessions",
    "OrphanPruneError",
    "SessionDeletionError",
    "SessionManager",
    "SessionNotFoundError",
    "filter_sessions",
    "sort_sessions",
    "cli",
    "main",
]
