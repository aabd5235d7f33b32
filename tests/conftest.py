"""Shared fixtures for provider tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from notepad.data.notifications import ChangeNotifier
from notepad.data.provider import NotePadProvider
from notepad.data.storage import DatabaseHelper


class Recorder:
    """Observer callback that remembers every path it was told about."""

    def __init__(self) -> None:
        self.paths: list[str] = []

    def __call__(self, path: str) -> None:
        self.paths.append(path)


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "notes.db")


@pytest.fixture
def helper(db_path: str) -> Iterator[DatabaseHelper]:
    helper = DatabaseHelper(db_path)
    yield helper
    helper.close()


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture
def provider(helper: DatabaseHelper, notifier: ChangeNotifier) -> NotePadProvider:
    return NotePadProvider(helper, notifier)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
