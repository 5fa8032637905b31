"""SQLiteStore — durable, single-file policy store using aiosqlite."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

import aiosqlite

from workload_admission.exceptions import StoreLookupError
from workload_admission.stores.base import PolicyStore

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS policy_config (
    config_key TEXT NOT NULL,
    namespace  TEXT NOT NULL,
    data       TEXT NOT NULL,
    PRIMARY KEY (config_key, namespace)
)
"""

_CREATE_KEYS = """
CREATE TABLE IF NOT EXISTS policy_config_keys (
    config_key TEXT PRIMARY KEY
)
"""


class SQLiteStore(PolicyStore):
    """Persistent policy store backed by a single SQLite file.

    A key exists once it has been written with :meth:`set`, even if its
    mapping is empty; reading an unknown key is a lookup failure.

    Parameters:
        db_path: Path to the SQLite database file.  Use ``":memory:"``
                 for an in-memory database (useful for testing).
    """

    def __init__(self, db_path: str = "policy_config.db") -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def _connect(self) -> aiosqlite.Connection:
        if self._db is None:
            self._db = await aiosqlite.connect(self._db_path)
            await self._db.execute(_CREATE_TABLE)
            await self._db.execute(_CREATE_KEYS)
            await self._db.commit()
        return self._db

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    # ── PolicyStore protocol ─────────────────────────────────

    async def get(self, key: str, *, timeout: float | None = None) -> dict[str, str]:
        try:
            return await asyncio.wait_for(self._read(key), timeout)
        except TimeoutError as exc:
            raise StoreLookupError("get", f"timed out after {timeout}s") from exc
        except aiosqlite.Error as exc:
            raise StoreLookupError("get", str(exc)) from exc

    async def _read(self, key: str) -> dict[str, str]:
        db = await self._connect()
        cursor = await db.execute(
            "SELECT 1 FROM policy_config_keys WHERE config_key = ?",
            (key,),
        )
        if await cursor.fetchone() is None:
            raise StoreLookupError("get", f"key '{key}' not found")

        cursor = await db.execute(
            "SELECT namespace, data FROM policy_config WHERE config_key = ?",
            (key,),
        )
        rows = await cursor.fetchall()
        return {row[0]: row[1] for row in rows}

    async def set(self, key: str, value: Mapping[str, str]) -> None:
        """Replace the whole mapping stored under *key*."""
        db = await self._connect()
        await db.execute("INSERT OR IGNORE INTO policy_config_keys (config_key) VALUES (?)", (key,))
        await db.execute("DELETE FROM policy_config WHERE config_key = ?", (key,))
        await db.executemany(
            "INSERT INTO policy_config (config_key, namespace, data) VALUES (?, ?, ?)",
            [(key, namespace, data) for namespace, data in value.items()],
        )
        await db.commit()

    async def delete(self, key: str) -> None:
        db = await self._connect()
        await db.execute("DELETE FROM policy_config WHERE config_key = ?", (key,))
        await db.execute("DELETE FROM policy_config_keys WHERE config_key = ?", (key,))
        await db.commit()
