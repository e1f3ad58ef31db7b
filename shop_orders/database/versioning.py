# database/versioning.py
"""
Single-row schema_version table. `ensure_version` is called on every
connect: it stamps a fresh file, bumps an older one and refuses a file
written by a newer release.
"""
from __future__ import annotations

import sqlite3

from ..constants import TABLE_SCHEMA_VERSION
from ..utils.loggers import get_logger

_log = get_logger(__name__)


class SchemaVersionError(RuntimeError):
    pass


def _ensure_table(conn: sqlite3.Connection) -> None:
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id INTEGER PRIMARY KEY CHECK (id=1),
            version TEXT NOT NULL
        );
    """)


def _as_tuple(version: str) -> tuple[int, ...]:
    return tuple(int(p) for p in version.split(".") if p.isdigit())


def get_current_version(conn: sqlite3.Connection) -> str | None:
    _ensure_table(conn)
    row = conn.execute(f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;").fetchone()
    return row[0] if row else None


def set_current_version(conn: sqlite3.Connection, version: str) -> None:
    _ensure_table(conn)
    conn.execute(
        f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?) "
        f"ON CONFLICT(id) DO UPDATE SET version=excluded.version;",
        (version,),
    )
    conn.commit()


def ensure_version(conn: sqlite3.Connection, target: str) -> str | None:
    """Record `target` as the schema version; returns the previous one."""
    current = get_current_version(conn)
    if current == target:
        return current
    if current is not None and _as_tuple(current) > _as_tuple(target):
        raise SchemaVersionError(
            f"Database schema {current} is newer than this release ({target})."
        )
    set_current_version(conn, target)
    if current is None:
        _log.info("Schema version set to %s", target)
    else:
        _log.info("Schema version upgraded %s -> %s", current, target)
    return current
