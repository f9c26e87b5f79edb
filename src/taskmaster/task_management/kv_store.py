"""SQLite-backed key-value store for persisted task state."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import aiosqlite

from .config import DEFAULT_WAL_MODE, STORE_SCHEMA_VERSION
from .exceptions import SchemaError, StorageError
from .interfaces import KeyValueStore
from .logging_utils import get_logger

logger = get_logger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    """Flat key-value byte store kept in a single SQLite table."""

    def __init__(self, db_path: str, wal_mode: bool = DEFAULT_WAL_MODE) -> None:
        """
        Initialize store settings.

        Args:
            db_path: Path to SQLite database file (use ":memory:" for in-memory)
            wal_mode: Enable WAL mode for file databases
        """
        self.db_path = db_path
        self.wal_mode = wal_mode
        self._connection: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open the connection and create the schema if needed."""
        if self._connection is None:
            connection: aiosqlite.Connection | None = None
            try:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                connection = await aiosqlite.connect(self.db_path)

                # WAL is not supported for :memory:
                if self.wal_mode and self.db_path != ":memory:":
                    await connection.execute("PRAGMA journal_mode=WAL")
            except (OSError, aiosqlite.Error) as e:
                if connection is not None:
                    await connection.close()
                raise StorageError(f"Failed to open store at {self.db_path}: {e}") from e

            # Only a fully configured connection is kept
            self._connection = connection
            logger.debug(f"Opened key-value store at {self.db_path}")

        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create the key-value table and record the schema version."""
        try:
            async with self._get_connection() as conn:
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS schema_version (
                        version INTEGER PRIMARY KEY,
                        applied_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
                    )
                    """
                )

                cursor = await conn.execute("SELECT MAX(version) FROM schema_version")
                result = await cursor.fetchone()
                current_version = result[0] if result and result[0] is not None else 0

                if current_version < STORE_SCHEMA_VERSION:
                    await self._apply_migrations(conn, current_version)

                await conn.commit()
        except aiosqlite.Error as e:
            raise SchemaError(f"Failed to create store schema: {e}") from e

    async def _apply_migrations(
        self, conn: aiosqlite.Connection, from_version: int
    ) -> None:
        """
        Apply schema migrations.

        Args:
            conn: Database connection
            from_version: Current schema version
        """
        if from_version < 1:
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
                """
            )

        await conn.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (STORE_SCHEMA_VERSION,),
        )

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Get database connection context manager.

        Yields:
            Database connection

        Raises:
            StorageError: If connection is not initialized
        """
        if self._connection is None:
            raise StorageError("Key-value store not initialized")
        yield self._connection

    async def get_schema_version(self) -> int:
        """Return the applied schema version."""
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT MAX(version) FROM schema_version")
            result = await cursor.fetchone()
            return result[0] if result and result[0] is not None else 0

    async def get(self, key: str) -> bytes | None:
        async with self._get_connection() as conn:
            try:
                cursor = await conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                )
                row = await cursor.fetchone()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to read key {key!r}: {e}") from e

        if row is None:
            return None
        value = row[0]
        # TEXT values written by other tools come back as str
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)

    async def set(self, key: str, value: bytes) -> None:
        async with self._get_connection() as conn:
            try:
                await conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, datetime.now().isoformat()),
                )
                await conn.commit()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to write key {key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        async with self._get_connection() as conn:
            try:
                await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                await conn.commit()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to delete key {key!r}: {e}") from e

    async def keys(self) -> list[str]:
        async with self._get_connection() as conn:
            try:
                cursor = await conn.execute("SELECT key FROM kv_store ORDER BY key")
                rows = await cursor.fetchall()
            except aiosqlite.Error as e:
                raise StorageError(f"Failed to list keys: {e}") from e
        return [row[0] for row in rows]

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
