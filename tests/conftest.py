"""Shared fixtures for Clipedia tests."""

from datetime import datetime, timedelta, timezone

import pyperclip
import pytest

from clipedia.core.clipboard.models import ClipboardItem, ClipboardItemType
from clipedia.core.storage import ClipboardRepository, DatabaseManager

BASE_TIME = datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


class FakeClipboard:
    """Stands in for the OS clipboard behind pyperclip.paste/copy."""

    def __init__(self):
        self.content = ""
        self.fail_reads = False
        self.fail_writes = False
        self.writes = []

    def paste(self):
        if self.fail_reads:
            raise pyperclip.PyperclipException("no clipboard mechanism")
        return self.content

    def copy(self, text):
        if self.fail_writes:
            raise pyperclip.PyperclipException("no clipboard mechanism")
        self.writes.append(text)
        self.content = text


@pytest.fixture
def db_manager():
    """In-memory database with schema and system tags initialized."""
    manager = DatabaseManager(":memory:")
    yield manager
    manager.close()


@pytest.fixture
def repo(db_manager):
    return ClipboardRepository(db_manager)


@pytest.fixture
def clipboard(monkeypatch):
    fake = FakeClipboard()
    monkeypatch.setattr(pyperclip, "paste", fake.paste)
    monkeypatch.setattr(pyperclip, "copy", fake.copy)
    return fake


@pytest.fixture
def make_item():
    """Build items with deterministic, increasing timestamps."""
    counter = {"n": 0}

    def _make(content, tags=(), minutes=None, pinned=False):
        if minutes is None:
            minutes = counter["n"]
            counter["n"] += 1
        item = ClipboardItem.create(
            content,
            ClipboardItemType.TEXT,
            timestamp=BASE_TIME + timedelta(minutes=minutes),
        )
        item.tags.update(tags)
        item.is_pinned = pinned
        return item

    return _make
