"""SQLite SSOT schema: draft tables.

This module contains only DDL (and optional migrations) for the draft subsystem.

Tables:
- draft_picks: pick ownership records keyed by (season, round, original_team).
  Rows for a season are deleted once that season's order is generated, which makes
  those picks untradeable from then on.
- draft_order: the single remaining-picks queue of the active draft (one row, rid=0).

Design notes:
- draft_order is written in the same transaction as every pick resolution so the
  queue and the player rows can never disagree after a crash.
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Mapping


# Signature compatible with LeagueRepo._ensure_table_columns(cur, table, columns)
EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]

TABLES = ("draft_picks", "draft_order")


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for draft tables."""
    _ = (now, schema_version)
    return """
                -- Draft pick ownership (tradeable until the season's order is generated)
                CREATE TABLE IF NOT EXISTS draft_picks (
                    pick_id TEXT PRIMARY KEY,
                    season INTEGER NOT NULL,
                    round INTEGER NOT NULL,
                    original_team INTEGER NOT NULL,
                    owner_team INTEGER NOT NULL
                );

                -- Enforce one ownership record per (season, round, original_team)
                CREATE UNIQUE INDEX IF NOT EXISTS uq_draft_picks_season_round_team
                    ON draft_picks(season, round, original_team);

                CREATE INDEX IF NOT EXISTS idx_draft_picks_season
                    ON draft_picks(season);

                -- Remaining picks of the active draft (queue, head first)
                CREATE TABLE IF NOT EXISTS draft_order (
                    rid INTEGER PRIMARY KEY CHECK (rid = 0),
                    order_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
"""


def migrate(cur: sqlite3.Cursor, *, ensure_columns: EnsureColumnsFn) -> None:
    """Post-DDL migrations for draft tables (none yet)."""
    _ = (cur, ensure_columns)
    return
