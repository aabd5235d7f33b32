"""Plain-text rendering of a single note, produced through an OS pipe.

The caller gets the read end of the pipe immediately; a worker thread
writes the note into the other end. A slow reader only blocks the worker.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from collections.abc import Callable, Iterable
from typing import BinaryIO, TextIO

logger = logging.getLogger(__name__)

PipeWriter = Callable[[TextIO, sqlite3.Row], None]


def mime_type_matches(mime_filter: str, mime_type: str) -> bool:
    """Match ``mime_type`` against a filter such as ``text/*`` or ``*/*``."""
    try:
        want_type, want_sub = mime_filter.strip().lower().split("/", 1)
        have_type, have_sub = mime_type.strip().lower().split("/", 1)
    except ValueError:
        return False
    if want_type not in ("*", have_type):
        return False
    return want_sub in ("*", have_sub)


def filter_mime_types(mime_types: Iterable[str], mime_filter: str) -> list[str] | None:
    matched = [m for m in mime_types if mime_type_matches(mime_filter, m)]
    return matched or None


def write_note_text(out: TextIO, row: sqlite3.Row) -> None:
    out.write(f"{row['title'] or ''}\n")
    out.write("\n")
    out.write(f"{row['note'] or ''}\n")


def open_pipe(
    cursor: sqlite3.Cursor,
    row: sqlite3.Row,
    writer: PipeWriter = write_note_text,
    name: str = "note-export",
) -> BinaryIO:
    """Start a producer thread that renders ``row`` and return the read end.

    The producer owns ``cursor`` and closes it when it is done, whether the
    write succeeded or not. The write end is flushed and closed on exit, so
    the reader always sees EOF.
    """
    read_fd, write_fd = os.pipe()
    try:
        reader = os.fdopen(read_fd, "rb")
    except Exception:
        os.close(read_fd)
        os.close(write_fd)
        cursor.close()
        raise

    def produce() -> None:
        try:
            with os.fdopen(write_fd, "w", encoding="utf-8", newline="\n") as out:
                writer(out, row)
        except BrokenPipeError:
            logger.info("Reader closed %s before the note was fully written", name)
        except Exception:
            logger.exception("Failed writing %s to pipe", name)
        finally:
            cursor.close()

    threading.Thread(target=produce, name=name, daemon=True).start()
    return reader
