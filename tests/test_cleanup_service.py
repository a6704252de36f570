"""Tests for the cleanup service and its maintenance tasks."""

from datetime import timedelta

import pytest

from clipedia.core.clipboard.models import ClipboardItem, utc_now
from clipedia.core.errors import StorageError
from clipedia.services.cleanup.cleanup_service import (
    CleanupService,
    DatabaseOptimizer,
    HistoryTrimmer,
    OldDataCleaner,
)


@pytest.fixture
def service():
    svc = CleanupService(interval_seconds=3600)
    yield svc
    if svc.is_running:
        svc.stop()


class TestCleanupService:
    def test_start_runs_tasks_once(self, service):
        calls = []
        service.add_task(lambda: calls.append("a"), "a")
        service.add_task(lambda: calls.append("b"), "b")

        service.start()

        assert calls == ["a", "b"]
        assert service.is_running
        assert service.get_next_run() is not None

    def test_failing_task_does_not_stop_others(self, service):
        calls = []

        def broken():
            raise RuntimeError("boom")

        service.add_task(broken)
        service.add_task(lambda: calls.append("ran"), "after")
        service.start()

        assert calls == ["ran"]

    def test_run_now_requires_running(self, service):
        calls = []
        service.add_task(lambda: calls.append(1), "count")

        service.run_now()
        assert calls == []

        service.start()
        service.run_now()
        assert calls == [1, 1]

    def test_stop(self, service):
        service.start()
        service.stop()
        assert not service.is_running
        assert service.get_next_run() is None


class TestHistoryTrimmer:
    def test_trims(self, repo, make_item):
        for n in range(5):
            repo.insert(make_item(f"item {n}"))

        assert HistoryTrimmer(repo, max_items=2).trim() == 3
        assert repo.total_count() == 2

    def test_storage_error_is_contained(self, repo, monkeypatch):
        def broken(max_items):
            raise StorageError("locked")

        monkeypatch.setattr(repo, "trim_to_size", broken)
        assert HistoryTrimmer(repo, 2).trim() == 0


class TestOldDataCleaner:
    def test_disabled_by_default(self, repo):
        repo.insert(ClipboardItem.create("ancient", timestamp=utc_now() - timedelta(days=999)))
        assert OldDataCleaner(repo).cleanup() == 0
        assert repo.total_count() == 1

    def test_removes_expired(self, repo):
        repo.insert(ClipboardItem.create("ancient", timestamp=utc_now() - timedelta(days=999)))
        repo.insert(ClipboardItem.create("fresh"))
        assert OldDataCleaner(repo, retention_days=30).cleanup() == 1
        assert [i.content for i in repo.list_all()] == ["fresh"]


class TestDatabaseOptimizer:
    def test_optimize(self, db_manager, repo, make_item):
        repo.insert(make_item("a"))
        assert DatabaseOptimizer(db_manager).optimize() is True
        assert repo.total_count() == 1

    def test_file_size(self, tmp_path):
        from clipedia.core.storage import DatabaseManager

        manager = DatabaseManager(str(tmp_path / "size.db"))
        try:
            assert DatabaseOptimizer(manager).optimize() is True
            assert manager.get_size() > 0
        finally:
            manager.close()
