"""
Ledger Database

SQLite storage for the agreement ledger: five keyed tables plus the two
sequence counters. All writes of one operation happen inside a single
transaction so they commit or roll back together, counter advances included.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

from ..core.exceptions import StorageError


logger = logging.getLogger(__name__)


CONTRACT_NONCE = "contract_nonce"
EVENT_NONCE = "event_nonce"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS contracts (
        contract_id INTEGER PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        status TEXT NOT NULL,
        creator TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        updated_at INTEGER NOT NULL,
        required_signatures INTEGER NOT NULL
            CHECK (required_signatures BETWEEN 1 AND 8)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS versions (
        contract_id INTEGER NOT NULL,
        version_number INTEGER NOT NULL,
        content_hash BLOB NOT NULL CHECK (length(content_hash) = 32),
        author TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        metadata TEXT NOT NULL,
        PRIMARY KEY (contract_id, version_number),
        FOREIGN KEY (contract_id) REFERENCES contracts(contract_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS signatures (
        contract_id INTEGER NOT NULL,
        signer TEXT NOT NULL,
        signed_at INTEGER NOT NULL,
        signature_hash BLOB NOT NULL CHECK (length(signature_hash) = 64),
        version_number INTEGER NOT NULL,
        PRIMARY KEY (contract_id, signer),
        FOREIGN KEY (contract_id, version_number)
            REFERENCES versions(contract_id, version_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS access_entries (
        contract_id INTEGER NOT NULL,
        user TEXT NOT NULL,
        access_level INTEGER NOT NULL CHECK (access_level BETWEEN 0 AND 2),
        PRIMARY KEY (contract_id, user),
        FOREIGN KEY (contract_id) REFERENCES contracts(contract_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
        event_id INTEGER PRIMARY KEY,
        contract_id INTEGER NOT NULL,
        event_type TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        created_by TEXT NOT NULL,
        metadata TEXT NOT NULL,
        related_principal TEXT,
        related_value INTEGER,
        FOREIGN KEY (contract_id) REFERENCES contracts(contract_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS counters (
        name TEXT PRIMARY KEY,
        value INTEGER NOT NULL CHECK (value >= 0)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_contract_id ON events(contract_id)",
    "CREATE INDEX IF NOT EXISTS idx_signatures_order ON signatures(contract_id, signed_at)",
)


class LedgerDatabase:
    """
    SQLite backing store for the ledger.

    Uses autocommit mode with explicit BEGIN IMMEDIATE / COMMIT / ROLLBACK so
    that transaction boundaries are exactly the operation boundaries.
    transaction() is reentrant: only the outermost block commits.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the database.

        Args:
            db_path: Path to SQLite database (None for in-memory)
        """
        self.db_path = db_path
        self._lock = threading.RLock()
        self._connection: Optional[sqlite3.Connection] = None
        self._depth = 0

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def initialize(self) -> None:
        """
        Open the connection, create tables and seed the counters.

        Calling it again on an open database is a no-op.
        """
        if self.is_open:
            return
        db_str = str(self.db_path) if self.db_path else ":memory:"
        try:
            if self.db_path:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                db_str,
                check_same_thread=False,
                isolation_level=None,
            )
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA foreign_keys = ON")

            with self.transaction() as conn:
                for statement in _SCHEMA:
                    conn.execute(statement)
                for name in (CONTRACT_NONCE, EVENT_NONCE):
                    conn.execute(
                        "INSERT OR IGNORE INTO counters (name, value) VALUES (?, 0)",
                        (name,),
                    )
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize ledger database at {db_str}: {e}")
            self.close()
            raise StorageError(
                f"Failed to initialize ledger database: {e}",
                operation="initialize",
                original_error=e,
            ) from e

        logger.info(f"Ledger database initialized ({db_str})")

    def close(self) -> None:
        """Close the connection."""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None
            self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run a block as one atomic unit.

        Any exception raised inside the outermost block rolls back every
        write made within it, then propagates.
        """
        with self._lock:
            conn = self._require_connection()
            outermost = self._depth == 0
            if outermost:
                try:
                    conn.execute("BEGIN IMMEDIATE")
                except sqlite3.Error as e:
                    raise StorageError(
                        f"Could not begin transaction: {e}", operation="begin", original_error=e
                    ) from e
            self._depth += 1
            try:
                yield conn
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._rollback(conn)
                raise
            self._depth -= 1
            if outermost:
                try:
                    conn.execute("COMMIT")
                except sqlite3.Error as e:
                    self._rollback(conn)
                    raise StorageError(
                        f"Commit failed: {e}", operation="commit", original_error=e
                    ) from e

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """Execute one statement, mapping driver errors to StorageError."""
        with self._lock:
            conn = self._require_connection()
            try:
                return conn.execute(sql, tuple(params))
            except sqlite3.Error as e:
                raise StorageError(
                    f"Statement failed: {e}", operation="execute", original_error=e
                ) from e

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self.execute(sql, params).fetchone()

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            return self.execute(sql, params).fetchall()

    def read_counter(self, name: str) -> int:
        """Current value of a sequence counter, i.e. the next id to hand out."""
        row = self.fetch_one("SELECT value FROM counters WHERE name = ?", (name,))
        if row is None:
            raise StorageError(f"Unknown counter: {name}", operation="read_counter")
        return row["value"]

    def advance_counter(self, name: str, reserved: int) -> None:
        """
        Move a counter past an id that was just used.

        Must run inside the transaction that consumed the id; the update is
        conditional on the counter still holding the reserved value.
        """
        if self._depth == 0:
            raise StorageError(
                f"Counter {name} may only advance inside a transaction",
                operation="advance_counter",
            )
        cursor = self.execute(
            "UPDATE counters SET value = value + 1 WHERE name = ? AND value = ?",
            (name, reserved),
        )
        if cursor.rowcount != 1:
            raise StorageError(
                f"Counter {name} moved while reserving {reserved}",
                operation="advance_counter",
            )

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StorageError("Ledger database not initialized", operation="access")
        return self._connection

    def _rollback(self, conn: sqlite3.Connection) -> None:
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.error(f"Rollback failed: {e}")


def create_database(db_path: Optional[Path] = None) -> LedgerDatabase:
    """
    Factory function to create a ledger database.

    Args:
        db_path: Path to database (None for in-memory)

    Returns:
        Initialized LedgerDatabase
    """
    database = LedgerDatabase(db_path=db_path)
    database.initialize()
    return database
