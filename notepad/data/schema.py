DATABASE_NAME = "note_pad.db"
DATABASE_VERSION = 5

DEFAULT_CATEGORY_ID = 1
DEFAULT_CATEGORY_TITLE = "Default"

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS categories (
    _id INTEGER PRIMARY KEY,
    title TEXT NOT NULL
);

INSERT OR IGNORE INTO categories(_id, title)
    VALUES ({DEFAULT_CATEGORY_ID}, '{DEFAULT_CATEGORY_TITLE}');

CREATE TABLE IF NOT EXISTS notes (
    _id INTEGER PRIMARY KEY,
    title TEXT,
    note TEXT,
    created INTEGER,
    modified INTEGER,
    category_id INTEGER DEFAULT {DEFAULT_CATEGORY_ID},
    FOREIGN KEY(category_id) REFERENCES categories(_id)
);
"""

# Children first so the foreign key never points at a dropped table.
DROP_SQL = """
DROP TABLE IF EXISTS notes;
DROP TABLE IF EXISTS categories;
"""

NOTE_COLUMNS = frozenset({"_id", "title", "note", "created", "modified", "category_id"})
CATEGORY_COLUMNS = frozenset({"_id", "title"})
