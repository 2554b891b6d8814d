"""SQLite ledger store.

Tracks applied migrations in a table with one row per applied script:

    CREATE TABLE migrations (
        name TEXT NOT NULL,
        ran_at TEXT NOT NULL
    )

``name`` is deliberately not a primary key: removal deletes by predicate,
so duplicate rows left behind by a crashed run are cleaned up together.
"""

import logging
import re
import sqlite3
from datetime import timezone
from pathlib import Path

from ledger_migrate.errors import ConfigurationError, LedgerError
from ledger_migrate.migrations.models import LedgerEntry, LedgerFilter, SortOrder

logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SqliteLedgerStore:
    """Ledger stored in a SQLite database.

    Attributes:
        db_path: Database file path, or ":memory:".
        table: Name of the ledger table.
    """

    def __init__(self, db_path: Path | str, table: str = "migrations") -> None:
        if not _TABLE_NAME.match(table):
            raise ConfigurationError(f"Invalid ledger table name: {table!r}")
        self.db_path = db_path
        self.table = table
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Open the connection and ledger table on first use."""
        if self._conn is None:
            if str(self.db_path) != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            try:
                self._conn = sqlite3.connect(str(self.db_path))
                self._ensure_table()
            except sqlite3.Error as e:
                raise LedgerError(f"Failed to open ledger database {self.db_path}: {e}") from e
        return self._conn

    def _ensure_table(self) -> None:
        """Create the ledger table if it doesn't exist."""
        assert self._conn is not None
        self._conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                name TEXT NOT NULL,
                ran_at TEXT NOT NULL
            )
        """
        )
        self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "SqliteLedgerStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    async def find(self, filter: LedgerFilter | None = None) -> list[LedgerEntry]:
        filter = filter or LedgerFilter()
        clauses: list[str] = []
        params: list[str] = []
        if filter.gte is not None:
            clauses.append("name >= ?")
            params.append(filter.gte)
        if filter.lte is not None:
            clauses.append("name <= ?")
            params.append(filter.lte)

        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        order = "DESC" if filter.order == SortOrder.DESC else "ASC"
        query = f"SELECT name, ran_at FROM {self.table}{where} ORDER BY name {order}"

        try:
            rows = self.conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise LedgerError(f"Failed to query ledger: {e}") from e
        return [LedgerEntry(name=name, ran_at=ran_at) for name, ran_at in rows]

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        ran_at = entry.ran_at
        if ran_at.tzinfo is None:
            ran_at = ran_at.replace(tzinfo=timezone.utc)
        try:
            self.conn.execute(
                f"INSERT INTO {self.table} (name, ran_at) VALUES (?, ?)",
                (entry.name, ran_at.isoformat()),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise LedgerError(f"Failed to record {entry.name}: {e}") from e
        return entry

    async def destroy_all(self, name: str) -> int:
        try:
            cursor = self.conn.execute(f"DELETE FROM {self.table} WHERE name = ?", (name,))
            self.conn.commit()
        except sqlite3.Error as e:
            raise LedgerError(f"Failed to remove {name}: {e}") from e
        return cursor.rowcount
