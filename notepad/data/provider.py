from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, BinaryIO

from notepad.data.clock import now_millis
from notepad.data.contract import (
    CATEGORIES_TABLE,
    DEFAULT_CONTRACT,
    DEFAULT_UNTITLED_TITLE,
    NOTES_TABLE,
    NOTES_WITH_CATEGORY,
    READ_NOTE_PROJECTION,
    ProviderContract,
)
from notepad.data.errors import (
    InsertFailed,
    InvalidColumn,
    ResourceNotFound,
    UnsupportedOperation,
    ValidationError,
)
from notepad.data.export import filter_mime_types, open_pipe, write_note_text
from notepad.data.notifications import ChangeNotifier
from notepad.data.router import (
    CATEGORIES_PATH,
    NOTES_PATH,
    ResourceKind,
    Route,
    category_path,
    note_path,
    resolve,
)
from notepad.data.rowset import RowSet
from notepad.data.schema import CATEGORY_COLUMNS, NOTE_COLUMNS
from notepad.data.selection import qualify_note_columns
from notepad.data.storage import DatabaseHelper

logger = logging.getLogger(__name__)

Values = Mapping[str, Any]
SelectionArgs = Sequence[Any]


def _where(
    clauses: list[str],
    args: list[Any],
    selection: str | None,
    selection_args: SelectionArgs,
) -> tuple[str, list[Any]]:
    """AND the scoping clauses with the caller's selection."""
    clauses = list(clauses)
    params = list(args)
    if selection:
        clauses.append(selection)
    params.extend(selection_args or ())
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(f"({c})" for c in clauses), params


def _check_columns(values: Values, allowed: Iterable[str]) -> None:
    allowed = set(allowed)
    for column in values:
        if column not in allowed:
            raise InvalidColumn(column)


def _require_title(values: Values) -> None:
    title = values.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title required")


class NotePadProvider:
    """Reads and writes notes and categories addressed by resource paths.

    Every write commits before observers on the touched paths are notified.
    Errors from SQLite are passed through untouched.
    """

    def __init__(
        self,
        helper: DatabaseHelper,
        notifier: ChangeNotifier | None = None,
        contract: ProviderContract = DEFAULT_CONTRACT,
        untitled_title: str = DEFAULT_UNTITLED_TITLE,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self._helper = helper
        self._notifier = notifier if notifier is not None else ChangeNotifier()
        self._contract = contract
        self._untitled_title = untitled_title
        self._clock = clock

    @property
    def helper(self) -> DatabaseHelper:
        return self._helper

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def contract(self) -> ProviderContract:
        return self._contract

    def close(self) -> None:
        self._helper.close()

    # -- Reads --

    def query(
        self,
        path: str,
        projection: Sequence[str] | None = None,
        selection: str | None = None,
        selection_args: SelectionArgs = (),
        sort_order: str | None = None,
    ) -> RowSet:
        route = resolve(path)
        sql, params = self._build_query(
            route, projection, selection, selection_args, sort_order
        )
        logger.debug("query %s: %s %s", route.path, sql, params)
        conn = self._helper.open_for_read()
        cur = conn.execute(sql, params)
        try:
            rows = cur.fetchall()
            columns = [d[0] for d in cur.description]
        finally:
            cur.close()
        return RowSet(rows, columns, route.path, self._notifier)

    def get_type(self, path: str) -> str:
        route = resolve(path)
        c = self._contract
        if route.kind is ResourceKind.NOTE:
            return c.note_content_item_type
        if route.kind is ResourceKind.CATEGORY:
            return c.category_content_item_type
        if route.kind is ResourceKind.ALL_CATEGORIES:
            return c.categories_content_type
        return c.notes_content_type

    def get_stream_types(self, path: str, mime_filter: str) -> list[str] | None:
        route = resolve(path)
        if route.kind is ResourceKind.NOTE:
            return filter_mime_types(self._contract.note_stream_types, mime_filter)
        if route.kind in (ResourceKind.ALL_NOTES, ResourceKind.LIVE_FOLDER_NOTES):
            return None
        raise UnsupportedOperation(f"{route.path} cannot be opened as a stream")

    def open_note_stream(self, path: str, mime_filter: str = "text/plain") -> BinaryIO:
        """Return a byte stream holding the title, a blank line and the body."""
        mime_types = self.get_stream_types(path, mime_filter)
        if not mime_types:
            raise UnsupportedOperation(f"{path} cannot be streamed as {mime_filter}")

        route = resolve(path)
        sql, params = self._build_query(route, READ_NOTE_PROJECTION, None, (), None)
        conn = self._helper.open_for_read()
        cur = conn.execute(sql, params)
        try:
            row = cur.fetchone()
        except Exception:
            cur.close()
            raise
        if row is None:
            cur.close()
            raise ResourceNotFound(f"Unable to query {route.path}")

        logger.debug("Streaming %s as %s", route.path, mime_types[0])
        return open_pipe(cur, row, write_note_text, name=f"export-{route.path}")

    # -- Writes --

    def insert(self, path: str, values: Values | None = None) -> str:
        route = resolve(path)
        if route.kind not in (ResourceKind.ALL_NOTES, ResourceKind.ALL_CATEGORIES):
            raise UnsupportedOperation(f"Cannot insert into {route.path}")

        values = dict(values or {})
        if route.kind is ResourceKind.ALL_NOTES:
            _check_columns(values, NOTE_COLUMNS)
            now = self._clock()
            values.setdefault("created", now)
            values.setdefault("modified", now)
            values.setdefault("title", self._untitled_title)
            values.setdefault("note", "")
            values.setdefault("category_id", self._contract.default_category_id)
            row_id = self._insert_row(NOTES_TABLE, values)
            new_path = note_path(row_id)
            self._notify(new_path, NOTES_PATH)
        else:
            _require_title(values)
            _check_columns(values, CATEGORY_COLUMNS)
            row_id = self._insert_row(CATEGORIES_TABLE, values)
            new_path = category_path(row_id)
            # Note lists are grouped by category, so they refresh too.
            self._notify(new_path, CATEGORIES_PATH, NOTES_PATH)

        logger.info("Inserted %s", new_path)
        return new_path

    def update(
        self,
        path: str,
        values: Values | None,
        selection: str | None = None,
        selection_args: SelectionArgs = (),
    ) -> int:
        route = resolve(path)
        values = dict(values or {})
        if "_id" in values:
            raise ValidationError("_id cannot be changed")
        kind = route.kind
        scope: list[str] = []
        scope_args: list[Any] = []

        if kind.is_note_kind:
            _check_columns(values, NOTE_COLUMNS)
            values["modified"] = self._clock()
            table = NOTES_TABLE
            if kind is ResourceKind.NOTE:
                scope, scope_args = ["_id = ?"], [route.resource_id]
            elif kind is ResourceKind.NOTES_BY_CATEGORY:
                scope, scope_args = ["category_id = ?"], [route.resource_id]
        elif kind.is_category_kind:
            _check_columns(values, CATEGORY_COLUMNS)
            if not values:
                raise ValidationError("no values to update")
            table = CATEGORIES_TABLE
            default_id = self._contract.default_category_id
            if kind is ResourceKind.CATEGORY:
                if route.resource_id == default_id and "title" in values:
                    raise ValidationError("cannot change default category")
                scope, scope_args = ["_id = ?"], [route.resource_id]
            elif "title" in values:
                # A bulk rename never reaches the default category.
                scope, scope_args = ["_id <> ?"], [default_id]
            if "title" in values:
                _require_title(values)
        else:
            raise UnsupportedOperation(f"Cannot update {route.path}")

        where, params = _where(scope, scope_args, selection, selection_args)
        assignments = ", ".join(f"{column} = ?" for column in values)
        sql = f"UPDATE {table} SET {assignments}{where}"
        logger.debug("update %s: %s", route.path, sql)

        conn = self._helper.open_for_write()
        with conn:
            count = conn.execute(sql, [*values.values(), *params]).rowcount

        self._notify_fan_out(route)
        return count

    def delete(
        self,
        path: str,
        selection: str | None = None,
        selection_args: SelectionArgs = (),
    ) -> int:
        route = resolve(path)
        kind = route.kind

        if kind is ResourceKind.ALL_CATEGORIES:
            raise ValidationError("cannot delete all categories")
        if kind is ResourceKind.CATEGORY:
            count = self._delete_category(route, selection, selection_args)
        elif kind.is_note_kind:
            scope: list[str] = []
            scope_args: list[Any] = []
            if kind is ResourceKind.NOTE:
                scope, scope_args = ["_id = ?"], [route.resource_id]
            elif kind is ResourceKind.NOTES_BY_CATEGORY:
                scope, scope_args = ["category_id = ?"], [route.resource_id]
            where, params = _where(scope, scope_args, selection, selection_args)
            sql = f"DELETE FROM {NOTES_TABLE}{where}"
            logger.debug("delete %s: %s", route.path, sql)
            conn = self._helper.open_for_write()
            with conn:
                count = conn.execute(sql, params).rowcount
        else:
            raise UnsupportedOperation(f"Cannot delete {route.path}")

        if kind is ResourceKind.CATEGORY:
            # Its notes moved to the default category.
            self._notify_fan_out(route, NOTES_PATH)
        else:
            self._notify_fan_out(route)
        return count

    # -- Internals --

    def _delete_category(
        self, route: Route, selection: str | None, selection_args: SelectionArgs
    ) -> int:
        category_id = route.resource_id
        default_id = self._contract.default_category_id
        if category_id == default_id:
            raise ValidationError("cannot delete default category")

        where, params = _where(["_id = ?"], [category_id], selection, selection_args)
        conn = self._helper.open_for_write()
        with conn:
            target = conn.execute(
                f"SELECT _id FROM {CATEGORIES_TABLE}{where}", params
            ).fetchone()
            if target is None:
                return 0
            moved = conn.execute(
                f"UPDATE {NOTES_TABLE} SET category_id = ? WHERE category_id = ?",
                (default_id, category_id),
            ).rowcount
            count = conn.execute(
                f"DELETE FROM {CATEGORIES_TABLE}{where}", params
            ).rowcount

        logger.info(
            "Deleted category %d; moved %d note(s) to category %d",
            category_id,
            moved,
            default_id,
        )
        return count

    def _build_query(
        self,
        route: Route,
        projection: Sequence[str] | None,
        selection: str | None,
        selection_args: SelectionArgs,
        sort_order: str | None,
    ) -> tuple[str, list[Any]]:
        c = self._contract
        kind = route.kind
        scope: list[str] = []
        scope_args: list[Any] = []

        if kind.is_note_kind:
            tables = NOTES_WITH_CATEGORY
            projection_map = c.notes_projection
            default_columns = c.notes_default_columns
            default_order = c.notes_sort_order
            if kind is ResourceKind.NOTE:
                scope, scope_args = [f"{NOTES_TABLE}._id = ?"], [route.resource_id]
            elif kind is ResourceKind.NOTES_BY_CATEGORY:
                scope = [f"{NOTES_TABLE}.category_id = ?"]
                scope_args = [route.resource_id]
            selection = qualify_note_columns(selection)
        elif kind is ResourceKind.LIVE_FOLDER_NOTES:
            tables = NOTES_TABLE
            projection_map = c.live_folder_projection
            default_columns = c.live_folder_default_columns
            default_order = c.notes_sort_order
        else:
            tables = CATEGORIES_TABLE
            projection_map = c.categories_projection
            default_columns = c.categories_default_columns
            default_order = c.categories_sort_order
            if kind is ResourceKind.CATEGORY:
                scope, scope_args = ["_id = ?"], [route.resource_id]

        columns = []
        for name in projection or default_columns:
            try:
                columns.append(projection_map[name])
            except KeyError:
                raise InvalidColumn(name) from None

        where, params = _where(scope, scope_args, selection, selection_args)
        order = sort_order or default_order
        sql = f"SELECT {', '.join(columns)} FROM {tables}{where} ORDER BY {order}"
        return sql, params

    def _insert_row(self, table: str, values: dict[str, Any]) -> int:
        columns = list(values)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table}({', '.join(columns)}) VALUES ({placeholders})"
        conn = self._helper.open_for_write()
        with conn:
            row_id = conn.execute(sql, [values[c] for c in columns]).lastrowid
            # Raising inside the block rolls the row back.
            if row_id is None or row_id <= 0:
                raise InsertFailed(f"Failed to insert row into {table}")
        return int(row_id)

    def _notify_fan_out(self, route: Route, *extra: str) -> None:
        paths = [route.path]
        if NOTES_PATH in route.segments:
            paths.append(NOTES_PATH)
        if CATEGORIES_PATH in route.segments:
            paths.append(CATEGORIES_PATH)
        paths.extend(extra)
        self._notify(*paths)

    def _notify(self, *paths: str) -> None:
        for path in dict.fromkeys(paths):
            self._notifier.notify_change(path)
