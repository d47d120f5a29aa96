"""Session parsing and discovery utilities.

This package provides functions for parsing Claude Code session transcripts,
extracting content from messages, and walking the data directory for
sessions and their satellite files.
"""

from .session import (
    extract_text_from_content,
    get_message_text,
    is_synthetic_text,
    iter_jsonl_objects,
    read_log,
    render_conversation,
    scan_session_file,
    EMPTY_FIRST_MESSAGE,
    SYNTHETIC_PREFIXES,
)

from .discovery import (
    agent_id_from_todo,
    collect_session_ids,
    find_orphans,
    find_related_files,
    find_session_transcript,
    get_project_display_name,
    is_session_transcript,
    iter_session_transcripts,
    matches_project_filter,
    todo_belongs_to,
    LATEST_SENTINEL,
)

__all__ = [
    # Transcript parsing
    "extract_text_from_content",
    "get_message_text",
    "is_synthetic_text",
    "iter_jsonl_objects",
    "read_log",
    "render_conversation",
    "scan_session_file",
    "EMPTY_FIRST_MESSAGE",
    "SYNTHETIC_PREFIXES",
    # Discovery
    "agent_id_from_todo",
    "collect_session_ids",
    "find_orphans",
    "find_related_files",
    "find_session_transcript",
    "get_project_display_name",
    "is_session_transcript",
    "iter_session_transcripts",
    "matches_project_filter",
    "todo_belongs_to",
    "LATEST_SENTINEL",
]
