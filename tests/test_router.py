import pytest

from notepad.data.errors import UnrecognizedResource
from notepad.data.router import (
    MAX_ROW_ID,
    ResourceKind,
    category_notes_path,
    category_path,
    note_path,
    resolve,
)


@pytest.mark.parametrize(
    ("path", "kind", "resource_id"),
    [
        ("notes", ResourceKind.ALL_NOTES, None),
        ("notes/7", ResourceKind.NOTE, 7),
        ("live_folders/notes", ResourceKind.LIVE_FOLDER_NOTES, None),
        ("categories", ResourceKind.ALL_CATEGORIES, None),
        ("categories/3", ResourceKind.CATEGORY, 3),
        ("categories/3/notes", ResourceKind.NOTES_BY_CATEGORY, 3),
        ("notes/categories", ResourceKind.ALL_CATEGORIES, None),
        ("notes/categories/4/notes", ResourceKind.NOTES_BY_CATEGORY, 4),
    ],
)
def test_resolve_known_paths(path, kind, resource_id):
    route = resolve(path)
    assert route.kind is kind
    assert route.resource_id == resource_id
    assert route.path == path


def test_resolve_ignores_surrounding_slashes():
    route = resolve("/notes/12/")
    assert route.kind is ResourceKind.NOTE
    assert route.resource_id == 12
    assert route.path == "notes/12"


def test_category_alias_reads_id_at_its_own_offset():
    direct = resolve("categories/5/notes")
    alias = resolve("notes/categories/5/notes")
    assert direct.kind is alias.kind is ResourceKind.NOTES_BY_CATEGORY
    assert direct.resource_id == alias.resource_id == 5


@pytest.mark.parametrize(
    "path",
    [
        "",
        "/",
        "bogus/path",
        "notes/abc",
        "notes/-1",
        "notes/1/2",
        "notes//1",
        "categories/1/notes/2",
        "notes/categories/x/notes",
        "live_folders",
    ],
)
def test_resolve_rejects_unknown_paths(path):
    with pytest.raises(UnrecognizedResource):
        resolve(path)


def test_resolve_rejects_ids_beyond_sqlite_integer_range():
    assert resolve(f"notes/{MAX_ROW_ID}").resource_id == MAX_ROW_ID
    for path in (f"notes/{MAX_ROW_ID + 1}", "categories/99999999999999999999/notes"):
        with pytest.raises(UnrecognizedResource):
            resolve(path)


def test_kind_families():
    assert ResourceKind.NOTES_BY_CATEGORY.is_note_kind
    assert not ResourceKind.LIVE_FOLDER_NOTES.is_note_kind
    assert ResourceKind.CATEGORY.is_category_kind
    assert not ResourceKind.NOTE.is_category_kind


def test_path_builders_round_trip_through_resolve():
    assert resolve(note_path(9)).resource_id == 9
    assert resolve(category_path(2)).kind is ResourceKind.CATEGORY
    assert resolve(category_notes_path(2)).kind is ResourceKind.NOTES_BY_CATEGORY
