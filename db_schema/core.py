# db_schema/core.py
"""SQLite SSOT schema: core league tables.

This module contains *only* DDL and schema migrations.
It must not import LeagueRepo (to avoid circular imports).

Tables:
- meta: schema version / creation stamp
- game_attributes: global game state (season, phase, user team, team count, ...)
- teams / team_seasons: team identity and per-season aggregates (standings, expenses)
- players: every player record (prospects, rostered players, free agents)
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Mapping


# Signature compatible with LeagueRepo._ensure_table_columns(cur, table, columns)
EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]

TABLES = ("meta", "game_attributes", "teams", "team_seasons", "players")


def ddl(*, now: str, schema_version: str) -> str:
    """Return DDL SQL for core tables (as a single executescript string)."""
    return f"""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );

                INSERT INTO meta(key, value) VALUES ('schema_version', '{schema_version}')
                ON CONFLICT(key) DO UPDATE SET value=excluded.value;
                INSERT OR IGNORE INTO meta(key, value) VALUES ('created_at', '{now}');

                -- Global game state (one row per key, JSON-encoded values)
                CREATE TABLE IF NOT EXISTS game_attributes (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS teams (
                    team_id INTEGER PRIMARY KEY,
                    conference_id INTEGER NOT NULL DEFAULT 0,
                    region TEXT NOT NULL DEFAULT '',
                    name TEXT NOT NULL DEFAULT ''
                );

                CREATE TABLE IF NOT EXISTS team_seasons (
                    team_id INTEGER NOT NULL,
                    season INTEGER NOT NULL,
                    won INTEGER NOT NULL DEFAULT 0,
                    lost INTEGER NOT NULL DEFAULT 0,
                    playoff_rounds_won INTEGER NOT NULL DEFAULT -1,
                    expense_scouting INTEGER NOT NULL DEFAULT 0,
                    PRIMARY KEY (team_id, season),
                    FOREIGN KEY(team_id) REFERENCES teams(team_id) ON DELETE CASCADE
                );

                -- Players: team_id / pool_tag / draft_year are first-class (queried);
                -- everything else lives in record_json.
                CREATE TABLE IF NOT EXISTS players (
                    player_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    team_id INTEGER,
                    pool_tag TEXT,
                    draft_year INTEGER,
                    name TEXT NOT NULL DEFAULT '',
                    record_json TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_players_team_id ON players(team_id);
                CREATE INDEX IF NOT EXISTS idx_players_pool_tag ON players(pool_tag);
"""


def migrate(cur: sqlite3.Cursor, *, ensure_columns: EnsureColumnsFn) -> None:
    """Apply post-DDL schema migrations.

    Older saves predate scouting expenses on team_seasons.
    """
    ensure_columns(
        cur,
        "team_seasons",
        {
            "expense_scouting": "INTEGER NOT NULL DEFAULT 0",
        },
    )
