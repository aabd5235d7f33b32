import logging

import pytest

from notepad.data.notifications import ChangeNotifier


class Recorder:
    def __init__(self) -> None:
        self.paths: list[str] = []

    def __call__(self, path: str) -> None:
        self.paths.append(path)


def test_observer_hears_its_own_path_and_descendants():
    notifier = ChangeNotifier()
    rec = Recorder()
    notifier.register("notes", rec)

    notifier.notify_change("notes")
    notifier.notify_change("notes/4")
    notifier.notify_change("categories")

    assert rec.paths == ["notes", "notes/4"]


def test_exact_observer_ignores_descendants():
    notifier = ChangeNotifier()
    rec = Recorder()
    notifier.register("notes", rec, notify_for_descendants=False)

    notifier.notify_change("notes/4")
    notifier.notify_change("/notes/")

    assert rec.paths == ["notes"]


def test_change_on_collection_reaches_item_observers():
    notifier = ChangeNotifier()
    rec = Recorder()
    notifier.register("notes/4", rec, notify_for_descendants=False)

    notifier.notify_change("notes")
    notifier.notify_change("notes/5")

    assert rec.paths == ["notes"]


def test_cancelled_subscription_stops_delivery():
    notifier = ChangeNotifier()
    rec = Recorder()
    sub = notifier.register("categories", rec)
    assert sub.active

    sub.cancel()
    assert not sub.active
    assert notifier.notify_change("categories") == 0
    assert rec.paths == []
    assert notifier.unregister(sub) is False


def test_failing_observer_does_not_block_others(caplog: pytest.LogCaptureFixture):
    notifier = ChangeNotifier()
    rec = Recorder()

    def broken(_path: str) -> None:
        raise RuntimeError("observer blew up")

    notifier.register("notes", broken)
    notifier.register("notes", rec)

    with caplog.at_level(logging.ERROR, logger="notepad.data.notifications"):
        delivered = notifier.notify_change("notes/1")

    assert delivered == 2
    assert rec.paths == ["notes/1"]
    assert any("failed handling change" in r.getMessage() for r in caplog.records)


def test_observer_count():
    notifier = ChangeNotifier()
    first = notifier.register("notes", Recorder())
    notifier.register("categories", Recorder())
    assert notifier.observer_count() == 2
    notifier.unregister(first)
    assert notifier.observer_count() == 1
