# casetrack/infra/db/connection.py
from __future__ import annotations

import contextlib
from contextvars import ContextVar
from typing import Any, AsyncIterator, Iterable, Optional, Sequence

import aiosqlite

_tx_conn: ContextVar[Optional[aiosqlite.Connection]] = ContextVar("casetrack_tx_conn", default=None)


class Database:
    """
    Async SQLite helper:
    - opens a new connection per operation (simple + safe)
    - sets row_factory to aiosqlite.Row
    - enables WAL + foreign keys
    - inside `async with db.transaction():` every call on the same task
      shares one connection and commits once at the end
    """

    def __init__(self, path: str) -> None:
        self._path = path

    @contextlib.asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = _tx_conn.get()
        if conn is not None:
            yield conn
            return
        async with aiosqlite.connect(self._path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON;")
            yield db

    def in_transaction(self) -> bool:
        return _tx_conn.get() is not None

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if _tx_conn.get() is not None:
            # nested: join the outer transaction
            yield
            return

        async with aiosqlite.connect(self._path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON;")
            await db.execute("BEGIN;")
            token = _tx_conn.set(db)
            try:
                yield
            except BaseException:
                await db.rollback()
                raise
            else:
                await db.commit()
            finally:
                _tx_conn.reset(token)

    async def _maybe_commit(self, db: aiosqlite.Connection) -> None:
        if _tx_conn.get() is None:
            await db.commit()

    async def executescript(self, sql: str) -> None:
        async with aiosqlite.connect(self._path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute("PRAGMA foreign_keys=ON;")
            await db.executescript(sql)
            await db.commit()

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        async with self._connect() as db:
            cur = await db.execute(sql, params)
            await self._maybe_commit(db)
            return cur.rowcount

    async def executemany(self, sql: str, seq_of_params: Iterable[Sequence[Any]]) -> None:
        async with self._connect() as db:
            await db.executemany(sql, seq_of_params)
            await self._maybe_commit(db)

    async def fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[aiosqlite.Row]:
        async with self._connect() as db:
            cur = await db.execute(sql, params)
            return await cur.fetchone()

    async def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[aiosqlite.Row]:
        async with self._connect() as db:
            cur = await db.execute(sql, params)
            return list(await cur.fetchall())
