"""Tests for loading, renaming and deleting sessions."""

import json

import pytest

import ccsessions.manager
from ccsessions import (
    Session,
    SessionDeletionError,
    SessionNotFoundError,
    SortBy,
    filter_sessions,
    sort_sessions,
)

from conftest import BASE_MTIME, assistant_line, user_line


class TestLoadSessions:
    def test_loads_sorted_by_recency(self, claude_home, manager):
        claude_home.add_session("p1", "old", [user_line("Old prompt")], mtime=BASE_MTIME)
        claude_home.add_session(
            "p2", "new", [user_line("New prompt"), user_line("More")], mtime=BASE_MTIME + 60
        )
        claude_home.add_agent("p1", "xyz")

        sessions = manager.load_sessions()

        assert [s.id for s in sessions] == ["new", "old"]
        new = sessions[0]
        assert new.project == "p2"
        assert new.message_count == 2
        assert new.first_message == "New prompt"
        assert new.modified == BASE_MTIME + 60
        assert new.size == new.path.stat().st_size

    def test_missing_projects_dir(self, manager):
        assert manager.load_sessions() == []

    def test_idempotent(self, claude_home, manager):
        claude_home.add_session("p", "s1", [user_line("Hi")])
        claude_home.add_session("p", "s2", [user_line("Yo")], mtime=BASE_MTIME + 1)
        claude_home.add_debug("s1.txt")

        assert manager.load_sessions() == manager.load_sessions()

    def test_cache_is_mtime_gated_not_content_gated(self, claude_home, manager):
        path = claude_home.add_session("p", "s1", [user_line("Original")])
        assert manager.load_sessions()[0].message_count == 1

        claude_home.add_session(
            "p",
            "s1",
            [user_line("Rewritten"), user_line("Extra"), {"type": "rename", "customTitle": "T"}],
        )
        claude_home.set_mtime(path, BASE_MTIME)

        session = manager.load_sessions()[0]
        assert session.message_count == 1
        assert session.first_message == "Original"
        assert session.custom_name is None

    def test_mtime_change_forces_rescan(self, claude_home, manager):
        path = claude_home.add_session("p", "s1", [user_line("Original")])
        manager.load_sessions()

        claude_home.add_session(
            "p",
            "s1",
            [user_line("Rewritten"), user_line("Extra"), {"type": "rename", "customTitle": "T"}],
            mtime=BASE_MTIME + 10,
        )

        session = manager.load_sessions()[0]
        assert session.message_count == 2
        assert session.first_message == "Rewritten"
        assert session.custom_name == "T"

    def test_cache_rebuilt_without_vanished_sessions(self, claude_home, manager):
        claude_home.add_session("p", "keep", [user_line("Hi")])
        gone = claude_home.add_session("p", "gone", [user_line("Bye")])
        manager.load_sessions()
        assert set(manager.cache.load()) == {"keep", "gone"}

        gone.unlink()
        manager.load_sessions()

        assert set(manager.cache.load()) == {"keep"}

    def test_unreadable_cache_does_not_break_load(self, claude_home, manager):
        claude_home.add_session("p", "s1", [user_line("Hi")])
        claude_home.paths.cache_file.parent.mkdir(parents=True, exist_ok=True)
        claude_home.paths.cache_file.write_text("garbage")

        assert [s.id for s in manager.load_sessions()] == ["s1"]

    def test_deeply_nested_line_does_not_break_load(self, claude_home, manager):
        claude_home.add_session(
            "p", "s1", [user_line("Hi"), "[" * 100000, user_line("Two")]
        )

        session = manager.load_sessions()[0]

        assert session.message_count == 2
        assert session.first_message == "Hi"

    def test_related_files_snapshot(self, claude_home, manager):
        claude_home.add_session("p", "s1", [user_line("Hi")])
        debug = claude_home.add_debug("s1.txt")

        session = manager.load_sessions()[0]

        assert session.related_files == [debug]


class TestSortAndFilter:
    def make(self, session_id, size, count, modified, first="prompt"):
        return Session(
            id=session_id,
            path=None,
            project="p",
            size=size,
            message_count=count,
            first_message=first,
            modified=modified,
        )

    def test_sort_orders(self):
        a = self.make("a", size=10, count=5, modified=1)
        b = self.make("b", size=30, count=1, modified=2)
        c = self.make("c", size=20, count=9, modified=3)

        assert sort_sessions([a, b, c]) == [c, b, a]
        assert sort_sessions([a, b, c], SortBy.SIZE) == [b, c, a]
        assert sort_sessions([a, b, c], "messages") == [c, a, b]

    def test_filter_matches_name_message_and_id(self):
        a = self.make("abc", 1, 1, 1, first="Fix the parser")
        b = self.make("def", 1, 1, 1, first="Write docs")
        b.custom_name = "Release notes"

        assert filter_sessions([a, b], "PARSER") == [a]
        assert filter_sessions([a, b], "release") == [b]
        assert filter_sessions([a, b], "de") == [b]
        assert filter_sessions([a, b], "") == [a, b]


class TestRename:
    def test_appends_rename_record(self, claude_home, manager):
        path = claude_home.add_session("p", "s1", [user_line("Hi")])
        original = path.read_text()

        manager.rename("s1", "  My session  ")

        content = path.read_text()
        assert content.startswith(original)
        record = json.loads(content.splitlines()[-1])
        assert record["type"] == "rename"
        assert record["customTitle"] == "My session"
        assert record["timestamp"].endswith("Z")

    def test_rename_visible_after_reload(self, claude_home, manager):
        claude_home.add_session("p", "s1", [user_line("Hi")])
        manager.load_sessions()

        manager.rename("s1", "First")
        manager.rename("s1", "Second")

        session = manager.load_sessions()[0]
        assert session.custom_name == "Second"
        assert session.display_name() == "Second"

    def test_adds_missing_newline(self, claude_home, manager):
        path = claude_home.add_session("p", "s1", [user_line("Hi")])
        path.write_text(json.dumps(user_line("Hi")))

        manager.rename("s1", "Named")

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["customTitle"] == "Named"

    def test_unknown_session(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.rename("nope", "Name")

    def test_blank_name_rejected(self, claude_home, manager):
        claude_home.add_session("p", "s1", [user_line("Hi")])
        with pytest.raises(ValueError):
            manager.rename("s1", "   ")


class TestDeleteSession:
    @pytest.fixture
    def full_session(self, claude_home):
        transcript = claude_home.add_session("p", "abc123", [user_line("Hi")])
        related = [
            claude_home.add_debug("abc123.txt"),
            claude_home.add_session_env("abc123"),
            claude_home.add_file_history("abc123"),
            claude_home.add_todo("abc123-agent-xyz.json"),
            claude_home.add_agent("p", "xyz"),
        ]
        claude_home.add_session("p", "other", [user_line("Keep me")])
        claude_home.write_history(
            [
                {"sessionId": "abc123", "display": "one"},
                {"sessionId": "other", "display": "two"},
                {"sessionId": "abc123", "display": "three"},
                "not json",
            ]
        )
        return transcript, related

    def test_removes_related_transcript_and_history(self, claude_home, manager, full_session):
        transcript, related = full_session
        session = next(s for s in manager.load_sessions() if s.id == "abc123")

        deleted = manager.delete_session(session)

        assert len(deleted) == len(related) + 1
        assert "todos/abc123-agent-xyz.json" in deleted
        assert "projects/p/agent-xyz.jsonl" in deleted
        assert "projects/p/abc123.jsonl" in deleted
        for path in related + [transcript]:
            assert not path.exists()
        assert claude_home.read_history_lines() == [
            json.dumps({"sessionId": "other", "display": "two"}),
            "not json",
        ]
        assert "abc123" not in manager.cache.load()
        assert [s.id for s in manager.load_sessions()] == ["other"]

    def test_resolves_files_created_after_load(self, claude_home, manager):
        claude_home.add_session("p", "s1", [user_line("Hi")])
        session = manager.load_sessions()[0]
        late = claude_home.add_debug("s1.txt")

        deleted = manager.delete_session(session)

        assert not late.exists()
        assert "debug/s1.txt" in deleted

    def test_stale_snapshot_paths_are_skipped(self, claude_home, manager):
        claude_home.add_session("p", "s1", [user_line("Hi")])
        debug = claude_home.add_debug("s1.txt")
        session = manager.load_sessions()[0]
        debug.unlink()

        assert manager.delete_session(session) == ["projects/p/s1.jsonl"]

    def test_failure_aborts_remaining_steps(self, claude_home, manager, full_session, monkeypatch):
        transcript, _ = full_session
        session = next(s for s in manager.load_sessions() if s.id == "abc123")
        real_remove = ccsessions.manager.remove_path

        def failing_remove(path):
            if path.name == "abc123-agent-xyz.json":
                raise PermissionError("denied")
            real_remove(path)

        monkeypatch.setattr(ccsessions.manager, "remove_path", failing_remove)

        with pytest.raises(SessionDeletionError) as excinfo:
            manager.delete_session(session)

        assert excinfo.value.session_id == "abc123"
        assert excinfo.value.deleted == [
            "debug/abc123.txt",
            "session-env/abc123",
            "file-history/abc123",
        ]
        assert isinstance(excinfo.value.__cause__, PermissionError)
        # No rollback, and later steps never ran
        assert not (claude_home.paths.debug_dir / "abc123.txt").exists()
        assert transcript.exists()
        assert len(claude_home.read_history_lines()) == 4

    def test_batch_continues_after_failure(self, claude_home, manager, monkeypatch):
        claude_home.add_session("p", "bad", [user_line("Hi")], mtime=BASE_MTIME + 5)
        claude_home.add_session("p", "good", [user_line("Hi")])
        claude_home.add_debug("bad.txt")
        sessions = manager.load_sessions()
        real_remove = ccsessions.manager.remove_path

        def failing_remove(path):
            if path.name == "bad.txt":
                raise OSError("disk error")
            real_remove(path)

        monkeypatch.setattr(ccsessions.manager, "remove_path", failing_remove)

        results = manager.delete_sessions(sessions)

        assert [r.session_id for r in results] == ["bad", "good"]
        assert not results[0].ok
        assert isinstance(results[0].error, SessionDeletionError)
        assert results[1].ok
        assert results[1].deleted == ["projects/p/good.jsonl"]


class TestOrphanCleanup:
    def test_prune_orphans(self, claude_home, manager):
        claude_home.add_session("p", "s1", [user_line("Hi")])
        keep = claude_home.add_debug("s1.txt")
        latest = claude_home.add_debug("latest")
        orphan_env = claude_home.add_session_env("gone")
        orphan_todo = claude_home.add_todo("gone-agent-a.json")

        deleted = manager.prune_orphans()

        assert sorted(deleted) == ["session-env/gone", "todos/gone-agent-a.json"]
        assert keep.exists() and latest.exists()
        assert not orphan_env.exists() and not orphan_todo.exists()
        assert manager.find_orphans() == []

    def test_prune_history_orphans_idempotent(self, claude_home, manager):
        claude_home.add_session("p", "live", [user_line("Hi")])
        claude_home.write_history(
            [{"sessionId": "live"}, {"sessionId": "gone"}, {"display": "no id"}, "garbage"]
        )

        assert manager.prune_history_orphans() == 1
        assert manager.prune_history_orphans() == 0
        assert len(claude_home.read_history_lines()) == 3

    def test_prune_history_without_projects_dir(self, claude_home, manager):
        claude_home.root.mkdir(parents=True)
        claude_home.write_history([{"sessionId": "gone"}])

        assert manager.prune_history_orphans() == 0


class TestExcerpt:
    def test_bounded_excerpt(self, claude_home, manager):
        claude_home.add_session(
            "p",
            "s1",
            [user_line("Q1"), assistant_line("A1"), user_line("Q2"), assistant_line("A2")],
        )

        assert manager.get_excerpt("s1", 3) == (
            "\n[USER]\nQ1\n\n[ASSISTANT]\nA1\n\n[USER]\nQ2\n"
        )

    def test_unknown_session(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.get_excerpt("nope")

    def test_read_log(self, claude_home, manager):
        path = claude_home.add_session("p", "s1", [user_line("Q1"), assistant_line("A1")])
        assert manager.read_log(path) == "\n[USER]\nQ1\n\n[ASSISTANT]\nA1\n"
