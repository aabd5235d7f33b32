from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from notepad.data.errors import UnrecognizedResource

NOTES_PATH = "notes"
CATEGORIES_PATH = "categories"
NOTES_CATEGORIES_PATH = "notes/categories"
LIVE_FOLDER_NOTES_PATH = "live_folders/notes"

_ID = "#"
# Largest value a SQLite INTEGER column holds.
MAX_ROW_ID = 2**63 - 1


class ResourceKind(StrEnum):
    ALL_NOTES = "all_notes"
    NOTE = "note"
    LIVE_FOLDER_NOTES = "live_folder_notes"
    ALL_CATEGORIES = "all_categories"
    CATEGORY = "category"
    NOTES_BY_CATEGORY = "notes_by_category"

    @property
    def is_note_kind(self) -> bool:
        return self in _NOTE_KINDS

    @property
    def is_category_kind(self) -> bool:
        return self in (ResourceKind.ALL_CATEGORIES, ResourceKind.CATEGORY)


_NOTE_KINDS = frozenset(
    {ResourceKind.ALL_NOTES, ResourceKind.NOTE, ResourceKind.NOTES_BY_CATEGORY}
)


@dataclass(frozen=True)
class Route:
    kind: ResourceKind
    path: str
    resource_id: int | None = None

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.path.split("/"))


@dataclass(frozen=True)
class _Rule:
    pattern: tuple[str, ...]
    kind: ResourceKind
    id_offset: int | None = None

    def match(self, segments: list[str]) -> Route | None:
        if len(segments) != len(self.pattern):
            return None
        for expected, actual in zip(self.pattern, segments):
            if expected == _ID:
                if not (actual.isascii() and actual.isdigit()):
                    return None
                if len(actual.lstrip("0")) > 19 or int(actual) > MAX_ROW_ID:
                    return None
            elif expected != actual:
                return None
        resource_id = None
        if self.id_offset is not None:
            resource_id = int(segments[self.id_offset])
        return Route(self.kind, "/".join(segments), resource_id)


# Evaluated top-down; the first matching rule wins.
_RULES: tuple[_Rule, ...] = (
    _Rule(("notes",), ResourceKind.ALL_NOTES),
    _Rule(("notes", _ID), ResourceKind.NOTE, 1),
    _Rule(("live_folders", "notes"), ResourceKind.LIVE_FOLDER_NOTES),
    _Rule(("categories",), ResourceKind.ALL_CATEGORIES),
    _Rule(("categories", _ID), ResourceKind.CATEGORY, 1),
    _Rule(("categories", _ID, "notes"), ResourceKind.NOTES_BY_CATEGORY, 1),
    _Rule(("notes", "categories"), ResourceKind.ALL_CATEGORIES),
    _Rule(("notes", "categories", _ID, "notes"), ResourceKind.NOTES_BY_CATEGORY, 2),
)


def resolve(path: str) -> Route:
    """Classify a resource path such as ``notes/7`` or ``categories/2/notes``."""
    if not isinstance(path, str):
        raise UnrecognizedResource(repr(path))
    segments = path.strip().strip("/").split("/")
    if segments == [""] or any(not s for s in segments):
        raise UnrecognizedResource(path)
    for rule in _RULES:
        route = rule.match(segments)
        if route is not None:
            return route
    raise UnrecognizedResource(path)


def note_path(note_id: int) -> str:
    return f"{NOTES_PATH}/{int(note_id)}"


def category_path(category_id: int) -> str:
    return f"{CATEGORIES_PATH}/{int(category_id)}"


def category_notes_path(category_id: int) -> str:
    return f"{CATEGORIES_PATH}/{int(category_id)}/notes"
