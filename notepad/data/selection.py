"""Disambiguation of caller-supplied WHERE text against the notes/categories join.

Both tables have ``_id`` and ``title`` columns, so a bare reference is
ambiguous once categories are joined in. The rewrite below is textual and
only knows a few shapes: ``LOWER(col)``/``UPPER(col)`` and ``col`` directly
followed by a comparison operator. Column names inside string literals are
not protected. Callers that need anything fancier should qualify columns
themselves (``notes.title``).
"""

from __future__ import annotations

import re

from notepad.data.contract import NOTES_TABLE

AMBIGUOUS_NOTE_COLUMNS = ("_id", "title", "note")

_COLUMN_GROUP = "|".join(AMBIGUOUS_NOTE_COLUMNS)

_WRAPPED = re.compile(
    rf"\b(LOWER|UPPER)\(\s*({_COLUMN_GROUP})\s*\)",
    re.IGNORECASE,
)

_COMPARED = re.compile(
    rf"(^|[\s(,])({_COLUMN_GROUP})"
    r"(?=\s*(?:[=<>!]|(?:NOT\s+)?(?:LIKE|GLOB|IN|BETWEEN)\b|IS\b))",
    re.IGNORECASE,
)


def qualify_note_columns(selection: str | None, table: str = NOTES_TABLE) -> str | None:
    """Prefix bare ``_id``, ``title`` and ``note`` references with ``table``.

    >>> qualify_note_columns("LOWER(title) LIKE ? OR (_id = ?)")
    'LOWER(notes.title) LIKE ? OR (notes._id = ?)'
    """
    if not selection:
        return selection
    rewritten = _WRAPPED.sub(rf"\1({table}.\2)", selection)
    return _COMPARED.sub(rf"\1{table}.\2", rewritten)
