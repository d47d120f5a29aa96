"""On-disk state owned by the session manager: metadata cache and history log."""

from .cache import MetadataCache, mtime_seconds
from .history import (
    HistoryLog,
    drop_session,
    drop_unknown_sessions,
    line_session_id,
)

__all__ = [
    "MetadataCache",
    "mtime_seconds",
    "HistoryLog",
    "drop_session",
    "drop_unknown_sessions",
    "line_session_id",
]
