"""Table names, projection maps, sort orders and type tags used by the provider.

Everything here is built once at import time and is read-only; the provider
receives a :class:`ProviderContract` instead of reaching for module globals.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from notepad.data.schema import DEFAULT_CATEGORY_ID, DEFAULT_CATEGORY_TITLE

NOTES_TABLE = "notes"
CATEGORIES_TABLE = "categories"
NOTES_WITH_CATEGORY = (
    "notes LEFT JOIN categories ON notes.category_id = categories._id"
)

DEFAULT_UNTITLED_TITLE = "Untitled"


def _frozen(entries: dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(entries))


def _notes_projection() -> Mapping[str, str]:
    entries = {}
    for column in ("_id", "title", "note", "created", "modified", "category_id"):
        qualified = f"{NOTES_TABLE}.{column}"
        entries[column] = f"{qualified} AS {column}"
        entries[qualified] = f"{qualified} AS {column}"
    entries["category_title"] = f"{CATEGORIES_TABLE}.title AS category_title"
    return _frozen(entries)


@dataclass(frozen=True)
class ProviderContract:
    notes_projection: Mapping[str, str] = field(default_factory=_notes_projection)
    notes_default_columns: tuple[str, ...] = (
        "_id",
        "title",
        "note",
        "created",
        "modified",
        "category_id",
        "category_title",
    )
    categories_projection: Mapping[str, str] = field(
        default_factory=lambda: _frozen({"_id": "_id", "title": "title"})
    )
    categories_default_columns: tuple[str, ...] = ("_id", "title")
    live_folder_projection: Mapping[str, str] = field(
        default_factory=lambda: _frozen({"_id": "_id AS _id", "name": "title AS name"})
    )
    live_folder_default_columns: tuple[str, ...] = ("_id", "name")

    notes_sort_order: str = "modified DESC"
    categories_sort_order: str = "title"

    default_category_id: int = DEFAULT_CATEGORY_ID
    default_category_title: str = DEFAULT_CATEGORY_TITLE

    notes_content_type: str = "vnd.android.cursor.dir/vnd.google.note"
    note_content_item_type: str = "vnd.android.cursor.item/vnd.google.note"
    categories_content_type: str = "vnd.android.cursor.dir/vnd.google.note_category"
    category_content_item_type: str = (
        "vnd.android.cursor.item/vnd.google.note_category"
    )
    note_stream_types: tuple[str, ...] = ("text/plain",)


DEFAULT_CONTRACT = ProviderContract()

# Columns the plain-text export reads for a single note.
READ_NOTE_PROJECTION = ("_id", "note", "title")
