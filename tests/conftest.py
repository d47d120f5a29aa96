"""Pytest configuration and fixtures for ccsessions tests."""

import json
import os

import pytest
import questionary

from ccsessions import ClaudePaths, SessionManager

BASE_MTIME = 1_700_000_000


def user_line(text, **extra):
    return {"type": "user", "message": {"role": "user", "content": text}, **extra}


def assistant_line(text, **extra):
    return {
        "type": "assistant",
        "message": {"role": "assistant", "content": [{"type": "text", "text": text}]},
        **extra,
    }


class ClaudeHome:
    """Builder for a synthetic ~/.claude directory."""

    def __init__(self, root):
        self.root = root
        self.paths = ClaudePaths.from_root(root)

    def add_session(self, project, session_id, lines, mtime=BASE_MTIME):
        path = self.paths.projects_dir / project / f"{session_id}.jsonl"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            "".join(
                (line if isinstance(line, str) else json.dumps(line)) + "\n"
                for line in lines
            )
        )
        self.set_mtime(path, mtime)
        return path

    def add_agent(self, project, agent_id):
        path = self.paths.projects_dir / project / f"agent-{agent_id}.jsonl"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(user_line("Agent task", isSidechain=True)) + "\n")
        return path

    def add_debug(self, name):
        self.paths.debug_dir.mkdir(parents=True, exist_ok=True)
        path = self.paths.debug_dir / name
        path.write_text("debug output\n")
        return path

    def add_session_env(self, session_id):
        path = self.paths.session_env_dir / session_id
        path.mkdir(parents=True, exist_ok=True)
        (path / "env.sh").write_text("export FOO=1\n")
        return path

    def add_file_history(self, session_id):
        path = self.paths.file_history_dir / session_id
        path.mkdir(parents=True, exist_ok=True)
        (path / "snapshot@v1").write_text("contents\n")
        return path

    def add_todo(self, name, items=()):
        self.paths.todos_dir.mkdir(parents=True, exist_ok=True)
        path = self.paths.todos_dir / name
        path.write_text(json.dumps(list(items)))
        return path

    def write_history(self, lines):
        self.paths.history_file.write_text(
            "".join(
                (line if isinstance(line, str) else json.dumps(line)) + "\n"
                for line in lines
            )
        )
        return self.paths.history_file

    def read_history_lines(self):
        return self.paths.history_file.read_text().splitlines()

    @staticmethod
    def set_mtime(path, mtime):
        os.utime(path, (mtime, mtime))


@pytest.fixture
def claude_home(tmp_path):
    """An empty Claude data directory."""
    return ClaudeHome(tmp_path / ".claude")


@pytest.fixture
def manager(claude_home):
    return SessionManager(claude_home.paths)


@pytest.fixture(autouse=True)
def mock_questionary_confirm(monkeypatch):
    """Answer "no" to confirmation prompts and record what was asked."""
    asked = []

    class _Prompt:
        def __init__(self, message):
            self.message = message

        def ask(self):
            asked.append(self.message)
            return False

    def mock_confirm(message, default=False, **kwargs):
        return _Prompt(message)

    monkeypatch.setattr(questionary, "confirm", mock_confirm)
    return asked
