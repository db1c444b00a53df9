import logging
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from flask import Flask

from app.domain.exceptions import StorageError
from infrastructure.database.ops.diagnostics import DiagnosticOperations

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class SQLiteDatabaseHandler(DiagnosticOperations):
    """Thread-safe SQLite handler decoupled from Flask globals.

    Each thread gets its own connection. Identity assignment is left to
    SQLite's AUTOINCREMENT, so concurrent inserts never race in Python.
    The handler is opened explicitly at startup and closed at shutdown,
    either through :meth:`close_all` or by using it as a context manager.
    """

    def __init__(self, database_path: str, *, cache_size_kb: int = 8_000) -> None:
        self._database_path = database_path
        self._cache_size_kb = cache_size_kb
        self._local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()

        # Ensure the directory for the database file exists
        if database_path != MEMORY_DATABASE:
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    @property
    def database_path(self) -> str:
        return self._database_path

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask | None = None) -> None:
        # An in-memory database lives only as long as its connection, so it is
        # kept open across requests instead of being closed on teardown.
        if app is not None and self._database_path != MEMORY_DATABASE:
            app.teardown_appcontext(self.close_db)
        self.create_tables()

    def __enter__(self) -> "SQLiteDatabaseHandler":
        self.create_tables()
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close_all()

    def get_db(self) -> sqlite3.Connection:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            try:
                connection = self._open_connection()
            except sqlite3.DatabaseError as exc:
                if self._is_corruption_error(exc):
                    logger.error("Database appears corrupt (%s). Recreating a fresh database.", exc)
                    self._quarantine_corrupt_db()
                    connection = self._open_connection()
                else:
                    raise
            self._local.connection = connection
            with self._connections_lock:
                self._connections.append(connection)
        return connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, check_same_thread=False)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _is_corruption_error(self, exc: sqlite3.Error) -> bool:
        message = str(exc).lower()
        return (
            "database disk image is malformed" in message
            or "file is not a database" in message
            or "file is encrypted or is not a database" in message
        )

    def _quarantine_corrupt_db(self) -> Optional[Path]:
        db_path = Path(self._database_path)
        if not db_path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        quarantine_dir = db_path.parent / "corrupt"
        quarantine_dir.mkdir(parents=True, exist_ok=True)

        suffix = db_path.suffix or ".db"
        quarantined = quarantine_dir / f"{db_path.stem}_corrupt_{timestamp}{suffix}"
        try:
            shutil.move(str(db_path), str(quarantined))
            for sidecar_suffix in ("-wal", "-shm"):
                sidecar = Path(f"{db_path}{sidecar_suffix}")
                if sidecar.exists():
                    shutil.move(str(sidecar), str(quarantine_dir / f"{sidecar.name}_{timestamp}"))
            logger.warning("Quarantined corrupt database to %s", quarantined)
            return quarantined
        except OSError as exc:
            logger.error("Failed to quarantine corrupt database %s: %s", db_path, exc)
            return None

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """Configure the SQLite connection.

        - WAL mode: readers do not block the writer
        - NORMAL synchronous: still durable with WAL
        - Memory temp store: avoids temp file creation
        """
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute(f"PRAGMA cache_size=-{int(self._cache_size_kb)}")  # negative = KB
        connection.execute("PRAGMA temp_store=MEMORY")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        """Close the calling thread's connection, if any."""
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            with self._connections_lock:
                if connection in self._connections:
                    self._connections.remove(connection)
            connection.close()
            delattr(self._local, "connection")

    def close_all(self) -> None:
        """Close every connection this handler opened (process shutdown)."""
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for connection in connections:
            try:
                connection.close()
            except sqlite3.Error as exc:
                logger.warning("Error closing database connection: %s", exc)
        self._local = threading.local()
        logger.info("Closed %d database connection(s)", len(connections))

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield the thread's connection; commit on success, roll back on error."""
        conn = self.get_db()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        else:
            conn.commit()

    def check_connection(self) -> None:
        """Round-trip a trivial query; raises StorageError when the store is unreachable."""
        try:
            self.get_db().execute("SELECT 1").fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Database unreachable: {exc}") from exc

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the diagnostics table and its indexes if they do not already exist."""
        self.create_diagnostics_table()
        logger.info("Diagnostics table ready (%s)", self._database_path)
