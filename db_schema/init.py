# db_schema/init.py
"""Apply the league SQLite schema.

Each schema module exposes:
- TABLES: names of the tables it owns
- ddl(now=..., schema_version=...) -> SQL script
- migrate(cur, ensure_columns=...) (optional) for post-DDL column additions

apply_schema() runs every module's DDL in one executescript, then the
migrations in module order, then checks that every declared table exists.
"""

from __future__ import annotations

import logging
import sqlite3
from types import ModuleType
from typing import Iterable, List

from . import core, draft
from .core import EnsureColumnsFn

logger = logging.getLogger(__name__)


# core first: draft rows reference teams / players by id.
DEFAULT_MODULES = (
    core,
    draft,
)


def _missing_tables(cur: sqlite3.Cursor, modules: Iterable[ModuleType]) -> List[str]:
    rows = cur.execute("SELECT name FROM sqlite_master WHERE type='table';").fetchall()
    existing = {r[0] for r in rows}
    return [t for m in modules for t in getattr(m, "TABLES", ()) if t not in existing]


def apply_schema(
    cur: sqlite3.Cursor,
    *,
    now: str,
    schema_version: str,
    ensure_columns: EnsureColumnsFn,
    modules: Iterable[ModuleType] = DEFAULT_MODULES,
) -> None:
    modules = list(modules)
    cur.executescript("\n\n".join(m.ddl(now=now, schema_version=schema_version) for m in modules))

    for m in modules:
        migrate = getattr(m, "migrate", None)
        if migrate is not None:
            migrate(cur, ensure_columns=ensure_columns)

    missing = _missing_tables(cur, modules)
    if missing:
        raise RuntimeError(f"schema apply left tables missing: {missing}")
    logger.info(
        "DB_SCHEMA_APPLIED version=%s modules=%s",
        schema_version,
        [m.__name__.rsplit(".", 1)[-1] for m in modules],
    )
