"""Async SQLite wrapper using stdlib sqlite3 + anyio.

Runs all blocking sqlite3 calls in a worker thread via ``anyio.to_thread``.
Each statement executes and fetches inside a single thread hop, so the
cursor never crosses threads.

Uses Python 3.12+ features:
    - ``check_same_thread=False``: safe for anyio's thread pool dispatch
    - ``autocommit=True``: every statement commits on its own
"""

import sqlite3
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import anyio


def _run_sync(func: Callable[..., Any], *args: Any) -> Any:
    """Run blocking call in anyio worker thread. Wrapper for ty compatibility."""
    return anyio.to_thread.run_sync(func, *args)  # type: ignore[union-attr]


@dataclass(frozen=True, slots=True)
class Outcome:
    """Everything a statement produced, captured in the worker thread."""

    rows: tuple[dict[str, Any], ...]
    rowcount: int
    lastrowid: int | None


class AsyncConnection:
    """Async wrapper around ``sqlite3.Connection``."""

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _run(self, sql: str, params: Sequence[Any]) -> Outcome:
        cursor = self._conn.execute(sql, params)
        try:
            rows: tuple[dict[str, Any], ...] = ()
            if cursor.description is not None:
                columns = [desc[0] for desc in cursor.description]
                rows = tuple(dict(zip(columns, row, strict=True)) for row in cursor.fetchall())
            return Outcome(rows=rows, rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)
        finally:
            cursor.close()

    async def run(self, sql: str, params: Sequence[Any] = ()) -> Outcome:
        """Execute one statement and collect its rows, rowcount and lastrowid."""
        return await _run_sync(self._run, sql, params)

    async def close(self) -> None:
        await _run_sync(self._conn.close)


async def connect(path: str) -> AsyncConnection:
    """Open an async SQLite connection with foreign keys enforced.

    Uses ``autocommit=True`` so individual statements commit immediately.
    Uses ``check_same_thread=False`` for safe use with anyio's thread pool.
    """

    def _open() -> sqlite3.Connection:
        conn = sqlite3.connect(path, autocommit=True, check_same_thread=False)
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    return AsyncConnection(await _run_sync(_open))
