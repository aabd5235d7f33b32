from __future__ import annotations

import sqlite3
from collections.abc import Iterator

from notepad.data.notifications import ChangeCallback, ChangeNotifier, Subscription


class RowSet:
    """Result of a provider query.

    Rows are fetched eagerly, so holding or discarding a row set never keeps
    anything open in the database. Observers registered through the row set
    follow its notification path and are released by :meth:`close`.
    """

    def __init__(
        self,
        rows: list[sqlite3.Row],
        columns: list[str],
        notification_path: str,
        notifier: ChangeNotifier | None = None,
    ) -> None:
        self._rows = rows
        self._columns = columns
        self._notification_path = notification_path
        self._notifier = notifier
        self._subscriptions: list[Subscription] = []
        self._closed = False

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def notification_path(self) -> str:
        return self._notification_path

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[sqlite3.Row]:
        return iter(self._rows)

    def __getitem__(self, index: int) -> sqlite3.Row:
        return self._rows[index]

    def __enter__(self) -> RowSet:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def first(self) -> sqlite3.Row | None:
        return self._rows[0] if self._rows else None

    def to_dicts(self) -> list[dict]:
        return [dict(row) for row in self._rows]

    def register_observer(self, callback: ChangeCallback) -> Subscription:
        if self._closed:
            raise RuntimeError("Row set is closed")
        if self._notifier is None:
            raise RuntimeError("Row set has no change notifier")
        subscription = self._notifier.register(self._notification_path, callback)
        self._subscriptions.append(subscription)
        return subscription

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()
        self._rows = []
