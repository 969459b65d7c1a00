from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection):
    """Dictionary cursor in its own transaction; rolled back if the block raises."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=True)
        try:
            yield cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def read_json_column(conn_factory: DatabaseConnection, sql: str, params: Sequence[Any], column: str) -> Optional[Any]:
    """Run a single-row SELECT and decode one JSON text column. None if no row."""

    with db_cursor(conn_factory) as cur:
        cur.execute(sql, tuple(params))
        row = cur.fetchone()
    if not row:
        return None
    return json.loads(row[column])


def write_json_column(conn_factory: DatabaseConnection, sql: str, params: Sequence[Any], value: Any) -> None:
    """Run an upsert whose last placeholder receives ``value`` as JSON text."""

    payload = json.dumps(value, ensure_ascii=False)
    with db_cursor(conn_factory) as cur:
        cur.execute(sql, (*params, payload))
