"""Explicit query outcomes.

``Database.query()`` never raises for data-access failures; it returns
one of these instead. Pattern-match on the variant or check ``ok``::

    match await db.query("SELECT * FROM posts WHERE id = ?", 7):
        case Success(rows=[row]):
            ...
        case Success():
            ...  # no rows
        case Failure(error=error):
            log(error)
"""

from dataclasses import dataclass
from typing import Any

from inkpost.errors import QueryError

type Row = dict[str, Any]


@dataclass(frozen=True, slots=True)
class Success:
    """A statement that ran. ``rows`` is empty for statements without a result set."""

    rows: tuple[Row, ...] = ()
    rowcount: int = 0
    last_insert_id: int | None = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> list[Row]:
        return list(self.rows)


@dataclass(frozen=True, slots=True)
class Failure:
    """A statement that could not run (bad SQL, constraint, lost connection)."""

    error: QueryError
    sql: str = ""

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> list[Row]:
        raise self.error


type QueryResult = Success | Failure
