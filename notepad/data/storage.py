import logging
import sqlite3
import threading
from pathlib import Path

from notepad.data.schema import DATABASE_VERSION, DROP_SQL, SCHEMA_SQL

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class DatabaseHelper:
    """Owns the note database file and its schema.

    Connections are opened lazily, one per thread, so concurrent writers are
    serialized by SQLite's own locking. The read and write handles of a
    thread are the same connection. An in-memory database has a single
    connection shared by every thread.

    Any difference between the stored ``user_version`` and the expected
    version drops both tables and recreates them; there is no column-level
    migration.
    """

    def __init__(
        self, db_path: str, version: int = DATABASE_VERSION, timeout: float = 5.0
    ) -> None:
        if version < 1:
            raise ValueError(f"Schema version must be positive, got {version}")
        self._db_path = db_path
        self._version = version
        self._timeout = timeout
        self._lock = threading.Lock()
        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []
        self._schema_ready = False

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def version(self) -> int:
        return self._version

    @property
    def is_open(self) -> bool:
        with self._lock:
            return bool(self._connections)

    def open_for_read(self) -> sqlite3.Connection:
        return self._open()

    def open_for_write(self) -> sqlite3.Connection:
        return self._open()

    def stored_version(self) -> int:
        conn = self._open()
        return int(conn.execute("PRAGMA user_version").fetchone()[0])

    def close(self) -> None:
        with self._lock:
            for conn in self._connections:
                conn.close()
            closed = len(self._connections)
            self._connections.clear()
            self._local = threading.local()
            self._schema_ready = False
        if closed:
            logger.debug("Closed %d connection(s) to %s", closed, self._db_path)

    def _open(self) -> sqlite3.Connection:
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        with self._lock:
            if self._db_path == MEMORY_DB and self._connections:
                conn = self._connections[0]
            else:
                conn = self._connect()
                self._connections.append(conn)
            self._local.conn = conn
        return conn

    def _connect(self) -> sqlite3.Connection:
        if self._db_path != MEMORY_DB:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(
            self._db_path, timeout=self._timeout, check_same_thread=False
        )
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            if not self._schema_ready:
                self._init_schema(conn)
                self._schema_ready = True
        except Exception:
            conn.close()
            raise
        logger.debug("Opened connection to %s", self._db_path)
        return conn

    def _init_schema(self, conn: sqlite3.Connection) -> None:
        stored = int(conn.execute("PRAGMA user_version").fetchone()[0])
        if stored == self._version:
            logger.debug("Database %s already at version %d", self._db_path, stored)
            return
        if stored == 0:
            logger.info(
                "Creating database schema version %d in %s", self._version, self._db_path
            )
            self._create(conn)
            return

        direction = "Upgrading" if stored < self._version else "Downgrading"
        logger.warning(
            "%s database from version %d to %d, which will destroy all old data",
            direction,
            stored,
            self._version,
        )
        self._create(conn, drop_existing=True)

    def _create(self, conn: sqlite3.Connection, drop_existing: bool = False) -> None:
        script = "BEGIN;\n"
        if drop_existing:
            script += DROP_SQL
        script += SCHEMA_SQL
        script += f"PRAGMA user_version = {int(self._version)};\nCOMMIT;\n"
        conn.executescript(script)
