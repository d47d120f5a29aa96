"""Pruning of the global ``history.jsonl`` prompt log.

The log is append-only for the Claude CLI; this module only ever removes
whole lines from it. Lines that do not parse, or carry no ``sessionId``,
are never dropped by the standard predicates.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Iterable

logger = logging.getLogger(__name__)


def line_session_id(line: str) -> str | None:
    """Return the ``sessionId`` of a history line, or None if it has none."""
    try:
        obj = json.loads(line)
    except (ValueError, RecursionError):
        return None
    if not isinstance(obj, dict):
        return None
    session_id = obj.get("sessionId")
    return session_id if isinstance(session_id, str) else None


def drop_session(session_id: str) -> Callable[[str], bool]:
    """Predicate dropping the lines of one session."""

    def should_drop(line: str) -> bool:
        return line_session_id(line) == session_id

    return should_drop


def drop_unknown_sessions(valid_ids: Iterable[str]) -> Callable[[str], bool]:
    """Predicate dropping lines whose session is not in ``valid_ids``."""
    valid = frozenset(valid_ids)

    def should_drop(line: str) -> bool:
        session_id = line_session_id(line)
        return session_id is not None and session_id not in valid

    return should_drop


def _split_lines(content: str) -> list[str]:
    """Split on ``\\n`` only, keeping each line's own terminator."""
    parts = content.split("\n")
    tail = parts.pop()
    lines = [part + "\n" for part in parts]
    if tail:
        lines.append(tail)
    return lines


def _strip_terminator(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class HistoryLog:
    """Line-level rewriter for the history file."""

    def __init__(self, history_file: str | Path) -> None:
        self.history_file = Path(history_file)

    def rewrite(self, should_drop: Callable[[str], bool]) -> int:
        """Remove every line for which ``should_drop`` is true.

        Returns the number of dropped lines. The file is only written when at
        least one line was dropped, and an absent file is a no-op. Write
        errors propagate.
        """
        if not self.history_file.exists():
            return 0
        with open(self.history_file, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
            content = f.read()

        kept = []
        dropped = 0
        # Lines keep their own LF or CRLF ending, so mixed files survive
        for line in _split_lines(content):
            if should_drop(_strip_terminator(line)):
                dropped += 1
            else:
                kept.append(line)

        if dropped:
            text = "".join(kept)
            with open(
                self.history_file, "w", encoding="utf-8", errors="surrogateescape", newline=""
            ) as f:
                f.write(text)
            logger.debug("Dropped %d line(s) from %s", dropped, self.history_file)
        return dropped

    def remove_session(self, session_id: str) -> int:
        return self.rewrite(drop_session(session_id))

    def prune(self, valid_ids: Iterable[str]) -> int:
        return self.rewrite(drop_unknown_sessions(valid_ids))
