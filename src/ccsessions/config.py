"""Filesystem locations of a Claude Code data directory.

All paths are resolved once and injected into the session manager, so the
whole engine can run against a temporary directory in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ROOT_ENV_VAR = "CLAUDE_CONFIG_DIR"
DEFAULT_ROOT = Path("~/.claude")

CACHE_FILENAME = "sessions_tui_cache.json"
HISTORY_FILENAME = "history.jsonl"

TRANSCRIPT_SUFFIX = ".jsonl"
DEBUG_SUFFIX = ".txt"
AGENT_PREFIX = "agent-"


def get_root_dir(root: str | Path | None = None) -> Path:
    """Return the Claude data directory.

    An explicit ``root`` wins, then ``$CLAUDE_CONFIG_DIR``, then ``~/.claude``.
    """
    candidate = root or os.getenv(ROOT_ENV_VAR) or DEFAULT_ROOT
    return Path(candidate).expanduser()


@dataclass(frozen=True)
class ClaudePaths:
    root: Path
    cache_file: Path
    history_file: Path

    @classmethod
    def from_root(
        cls,
        root: str | Path,
        cache_file: str | Path | None = None,
        history_file: str | Path | None = None,
    ) -> "ClaudePaths":
        root = Path(root).expanduser()
        return cls(
            root=root,
            cache_file=Path(cache_file).expanduser() if cache_file else root / CACHE_FILENAME,
            history_file=(
                Path(history_file).expanduser() if history_file else root / HISTORY_FILENAME
            ),
        )

    @classmethod
    def default(cls) -> "ClaudePaths":
        return cls.from_root(get_root_dir())

    @property
    def projects_dir(self) -> Path:
        return self.root / "projects"

    @property
    def debug_dir(self) -> Path:
        return self.root / "debug"

    @property
    def session_env_dir(self) -> Path:
        return self.root / "session-env"

    @property
    def file_history_dir(self) -> Path:
        return self.root / "file-history"

    @property
    def todos_dir(self) -> Path:
        return self.root / "todos"

    def relative(self, path: Path) -> str:
        """Render ``path`` relative to the root when it lives underneath it."""
        try:
            return str(Path(path).relative_to(self.root))
        except ValueError:
            return str(path)
