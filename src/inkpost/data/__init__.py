"""Async database gateway for inkpost.

SQL in, dict rows out. Not an ORM.

Basic usage::

    from inkpost.data import Database, Failure, Success

    db = Database("sqlite:///blog.db")

    match await db.query("SELECT * FROM posts WHERE id = ?", 42):
        case Success(rows=rows):
            ...
        case Failure(error=error):
            ...

SQLite works out of the box. PostgreSQL requires ``asyncpg``::

    pip install inkpost[pg]
"""

from inkpost.data.database import Database, DatabaseConfig, get_db
from inkpost.errors import ConnectionError, DataError, DriverNotInstalledError, QueryError
from inkpost.data.result import Failure, QueryResult, Success

__all__ = [
    "ConnectionError",
    "DataError",
    "Database",
    "DatabaseConfig",
    "DriverNotInstalledError",
    "Failure",
    "QueryError",
    "QueryResult",
    "Success",
    "get_db",
]
