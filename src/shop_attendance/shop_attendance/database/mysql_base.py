from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector

from ..core.constants import ROW_NOT_FOUND
from ..core.exceptions import DataAccessError
from .connection import DatabaseConnection


def _translate(exc: mysql.connector.Error) -> DataAccessError:
    code = str(exc.errno) if exc.errno is not None else "MYSQL_ERROR"
    return DataAccessError(exc.msg or str(exc), code=code)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cur)``; commit on success, rollback on error.

    Driver errors leave this block as ``DataAccessError`` carrying the MySQL errno.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise _translate(exc) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        raise _translate(exc) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def fetch_single(cur, *, what: str) -> Dict[str, Any]:
    """Exactly one row or ``DataAccessError(code=ROW_NOT_FOUND)``."""
    row = fetchone(cur)
    if row is None:
        raise DataAccessError(f"No {what} row found", code=ROW_NOT_FOUND)
    return row


def call_procedure(cur, name: str, args: Sequence[Any]) -> List[Dict[str, Any]]:
    """Run a stored procedure and collect the rows of its result sets."""
    cur.callproc(name, tuple(args))
    rows: list[dict] = []
    for result in cur.stored_results():
        for raw in result.fetchall():
            if isinstance(raw, dict):
                rows.append(raw)
            else:
                rows.append(dict(zip(result.column_names, raw)))
    return rows
