"""Records produced and consumed by the session manager."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .parsers.discovery import get_project_display_name

DISPLAY_NAME_MAX_LEN = 60
BYTES_PER_MB = 1024 * 1024


class SortBy(str, Enum):
    DATE = "date"
    SIZE = "size"
    MESSAGES = "messages"


@dataclass
class Session:
    """One transcript plus a snapshot of its satellite files.

    ``related_files`` only lists paths that existed when the session was
    loaded. Re-resolve before deleting anything.
    """

    id: str
    path: Path
    project: str
    size: int
    message_count: int
    first_message: str
    modified: float
    custom_name: str | None = None
    related_files: list[Path] = field(default_factory=list)

    @property
    def modified_at(self) -> datetime:
        return datetime.fromtimestamp(self.modified)

    @property
    def project_display_name(self) -> str:
        return get_project_display_name(self.project)

    def size_str(self) -> str:
        if self.size > BYTES_PER_MB:
            return f"{self.size / BYTES_PER_MB:.1f}MB"
        return f"{self.size // 1024}KB"

    def display_name(self, max_length=DISPLAY_NAME_MAX_LEN) -> str:
        if self.custom_name and self.custom_name.strip():
            return self.custom_name
        clean = self.first_message.replace("\n", " ")
        if len(clean) > max_length:
            return clean[:max_length] + "..."
        return clean

    def formatted_age(self, now=None) -> str:
        """Compact age: seconds, minutes and hours, then a calendar date."""
        now = time.time() if now is None else now
        elapsed = max(0, int(now - self.modified))
        if elapsed < 60:
            return f"{elapsed}s"
        if elapsed < 3600:
            return f"{elapsed // 60}m"
        if elapsed < 86400:
            return f"{elapsed // 3600}h"
        return self.modified_at.strftime("%d %b %y")

    def get_todos(self) -> list[str]:
        """Return todo item titles from the session's todo files."""
        todos = []
        for path in self.related_files:
            if path.parent.name != "todos":
                continue
            try:
                items = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError, RecursionError):
                continue
            if not isinstance(items, list):
                continue
            for item in items:
                if not isinstance(item, dict):
                    continue
                text = item.get("title") or item.get("content")
                if isinstance(text, str):
                    todos.append(text)
        return todos


@dataclass
class CachedMetadata:
    """Derived transcript fields, valid while ``modified_ts`` matches the file."""

    custom_name: str | None
    message_count: int
    first_message: str
    modified_ts: int

    def to_dict(self) -> dict:
        return {
            "custom_name": self.custom_name,
            "message_count": self.message_count,
            "first_message": self.first_message,
            "modified_ts": self.modified_ts,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CachedMetadata":
        custom_name = data.get("custom_name")
        message_count = data["message_count"]
        first_message = data["first_message"]
        modified_ts = data["modified_ts"]
        if custom_name is not None and not isinstance(custom_name, str):
            raise ValueError("custom_name must be a string or null")
        if not isinstance(first_message, str):
            raise ValueError("first_message must be a string")
        if isinstance(message_count, bool) or isinstance(modified_ts, bool):
            raise ValueError("counts must be integers")
        return cls(
            custom_name=custom_name,
            message_count=int(message_count),
            first_message=first_message,
            modified_ts=int(modified_ts),
        )


@dataclass
class DeletionResult:
    """Outcome of one session's deletion inside a batch."""

    session_id: str
    deleted: list[str] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
