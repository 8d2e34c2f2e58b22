# league_repo.py
# Developer note:
# - SQLite DB is the single source of truth (SSOT) for persisted league data (tables managed here).
# - team_id is an int 0..num_teams-1; FREE_AGENT_TEAM_ID (-1) marks free agents.
# - players.team_id / pool_tag are SSOT columns; record_json stores everything else.
"""
LeagueRepository: persisted-data SSOT (SQLite)

Goal:
- All persisted league-data reads/writes go through SQLite (via LeagueRepo).
- Every multi-row write goes through LeagueRepo.transaction() so draft steps
  are atomic (a pick is either fully applied or not at all).

Usage (CLI):
  python league_repo.py init --db <db_path>
  python league_repo.py seed-picks --db <db_path> --season 2025 --teams 30
  python league_repo.py set-pick-owner --db <db_path> --season 2025 --round 1 --original-team 5 --owner-team 20
  python league_repo.py init-classes --db <db_path> [--seed 7]
  python league_repo.py show-order --db <db_path>

Python:
  from league_repo import LeagueRepo
  repo = LeagueRepo("<db_path>")
  repo.init_db()
  ctx = repo.load_draft_context()
"""

from __future__ import annotations

import argparse
import contextlib
import datetime as _dt
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from config import DRAFT_PICK_YEARS_AHEAD, DRAFT_RNG_SEED, DRAFT_ROUNDS, SCHEMA_VERSION
from draft.errors import DRAFT_CONTEXT_MISSING, DRAFT_INVALID_ORDER, DataIntegrityError, NotFoundError
from draft.types import DraftContext, Player, PlayerId, PoolTag, TeamId, TeamStanding, norm_pool_tag


# ----------------------------
# Helpers
# ----------------------------

logger = logging.getLogger(__name__)
_WARN_COUNTS: Dict[str, int] = {}

_CONTEXT_KEYS = ("season", "starting_season", "phase", "user_team_id", "num_teams")


def _warn_limited(code: str, msg: str, *, limit: int = 5) -> None:
    n = _WARN_COUNTS.get(code, 0)
    if n < limit:
        logger.warning("%s %s", code, msg)
    _WARN_COUNTS[code] = n + 1


def _utc_now_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0).isoformat()


def _json_dumps(obj: Any) -> str:
    return json.dumps(
        obj,
        ensure_ascii=False,
        separators=(",", ":"),
        sort_keys=True,
        default=str,
    )


def _json_loads(value: Any, default: Any):
    """
    Safe JSON loader:
    - None -> default
    - already dict/list -> returns as-is
    - invalid JSON -> default
    """
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return value
    try:
        return json.loads(value)
    except (json.JSONDecodeError, TypeError):
        _warn_limited("JSON_DECODE_FAILED", f"value_preview={repr(str(value))[:120]}", limit=3)
        return default


def _pool_tag_value(tag: Any) -> Optional[str]:
    t = norm_pool_tag(tag)
    return None if t is None else t.value


# ----------------------------
# Repository
# ----------------------------

class LeagueRepo:
    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON;")
        self._conn.execute("PRAGMA journal_mode = WAL;")  # good safety for frequent writes
        # Nested transaction support (SAVEPOINT) for callers that compose repo methods.
        # (SQLite raises if BEGIN is issued while a transaction is already active.)
        self._savepoint_seq = 0

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error:
            _warn_limited("DB_CLOSE_FAILED", f"db_path={self.db_path}")

    @contextlib.contextmanager
    def transaction(self):
        """
        Atomic transaction helper.

        Supports nesting via SAVEPOINT:
        - outermost: BEGIN ... COMMIT/ROLLBACK
        - nested: SAVEPOINT ... RELEASE (or ROLLBACK TO + RELEASE on error)
        """
        cur = self._conn.cursor()
        nested = bool(getattr(self._conn, "in_transaction", False))
        sp_name = None
        try:
            if nested:
                self._savepoint_seq += 1
                sp_name = f"sp_{self._savepoint_seq}"
                cur.execute(f"SAVEPOINT {sp_name};")
            else:
                self._conn.execute("BEGIN;")

            yield cur

            if nested and sp_name:
                cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                self._conn.commit()
        except Exception:
            if nested and sp_name:
                # Roll back to the savepoint only; do NOT rollback the outer transaction here.
                try:
                    cur.execute(f"ROLLBACK TO SAVEPOINT {sp_name};")
                finally:
                    cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                self._conn.rollback()
            raise
        finally:
            cur.close()

    # ------------------------
    # Schema
    # ------------------------

    def _ensure_table_columns(self, cur: sqlite3.Cursor, table: str, columns: Mapping[str, str]) -> None:
        """SQLite has no ADD COLUMN IF NOT EXISTS; check PRAGMA table_info first."""
        rows = cur.execute(f"PRAGMA table_info({table});").fetchall()
        existing = {r["name"] for r in rows}
        for col, ddl in columns.items():
            if col in existing:
                continue
            cur.execute(f"ALTER TABLE {table} ADD COLUMN {col} {ddl};")

    def init_db(self) -> None:
        """Apply SQLite schema (DDL + migrations) via db_schema."""
        from db_schema import apply_schema

        now = _utc_now_iso()
        with self.transaction() as cur:
            apply_schema(
                cur,
                now=now,
                schema_version=SCHEMA_VERSION,
                ensure_columns=self._ensure_table_columns,
            )

    # ------------------------
    # Game attributes / draft context
    # ------------------------

    def get_game_attributes(self) -> Dict[str, Any]:
        rows = self._conn.execute("SELECT key, value_json FROM game_attributes;").fetchall()
        return {str(r["key"]): _json_loads(r["value_json"], None) for r in rows}

    def set_game_attributes(self, attrs: Mapping[str, Any]) -> None:
        if not attrs:
            return
        rows = [(str(k), _json_dumps(v)) for k, v in attrs.items()]
        rows.append(("last_db_change", _json_dumps(_utc_now_iso())))
        with self.transaction() as cur:
            cur.executemany(
                """
                INSERT INTO game_attributes(key, value_json) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value_json=excluded.value_json;
                """,
                rows,
            )

    def load_draft_context(self) -> DraftContext:
        """Build the immutable DraftContext from game_attributes."""
        attrs = self.get_game_attributes()
        missing = [k for k in _CONTEXT_KEYS if attrs.get(k) is None]
        if missing:
            raise NotFoundError(
                DRAFT_CONTEXT_MISSING,
                f"game attributes missing: {missing}",
                {"missing": missing},
            )
        try:
            return DraftContext(
                season=attrs["season"],
                starting_season=attrs["starting_season"],
                phase=attrs["phase"],
                user_team_id=attrs["user_team_id"],
                num_teams=attrs["num_teams"],
                next_phase=attrs.get("next_phase"),
            )
        except (TypeError, ValueError) as exc:
            raise DataIntegrityError(
                DRAFT_CONTEXT_MISSING,
                f"game attributes are malformed: {exc}",
                {k: attrs.get(k) for k in _CONTEXT_KEYS + ("next_phase",)},
            ) from exc

    # ------------------------
    # Teams / seasons
    # ------------------------

    def upsert_teams(self, teams: Iterable[Mapping[str, Any]]) -> None:
        rows = [
            (
                int(t["team_id"]),
                int(t.get("conference_id") or 0),
                str(t.get("region") or ""),
                str(t.get("name") or ""),
            )
            for t in teams
        ]
        if not rows:
            return
        with self.transaction() as cur:
            cur.executemany(
                """
                INSERT INTO teams(team_id, conference_id, region, name) VALUES (?, ?, ?, ?)
                ON CONFLICT(team_id) DO UPDATE SET
                    conference_id=excluded.conference_id,
                    region=excluded.region,
                    name=excluded.name;
                """,
                rows,
            )

    def list_team_ids(self) -> List[TeamId]:
        rows = self._conn.execute("SELECT team_id FROM teams ORDER BY team_id;").fetchall()
        return [int(r["team_id"]) for r in rows]

    def upsert_team_season(
        self,
        team_id: TeamId,
        season: int,
        *,
        won: int = 0,
        lost: int = 0,
        playoff_rounds_won: int = -1,
        expense_scouting: int = 0,
    ) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO team_seasons(team_id, season, won, lost, playoff_rounds_won, expense_scouting)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(team_id, season) DO UPDATE SET
                    won=excluded.won,
                    lost=excluded.lost,
                    playoff_rounds_won=excluded.playoff_rounds_won,
                    expense_scouting=excluded.expense_scouting;
                """,
                (int(team_id), int(season), int(won), int(lost), int(playoff_rounds_won), int(expense_scouting)),
            )

    def get_teams_with_standings(self, season: int) -> List[TeamStanding]:
        """Standings for every team (ordered by team_id; no season row -> 0-0, missed playoffs)."""
        rows = self._conn.execute(
            """
            SELECT t.team_id, t.conference_id,
                   COALESCE(s.won, 0) AS won,
                   COALESCE(s.lost, 0) AS lost,
                   COALESCE(s.playoff_rounds_won, -1) AS playoff_rounds_won
            FROM teams t
            LEFT JOIN team_seasons s ON s.team_id = t.team_id AND s.season = ?
            ORDER BY t.team_id;
            """,
            (int(season),),
        ).fetchall()
        return [
            TeamStanding.from_record(
                int(r["team_id"]),
                won=int(r["won"]),
                lost=int(r["lost"]),
                playoff_rounds_won=int(r["playoff_rounds_won"]),
                conference_id=int(r["conference_id"]),
            )
            for r in rows
        ]

    def get_scouting_rank(self, team_id: TeamId, season: int) -> int:
        """Rank (1 = biggest spender) of a team's scouting expense over the last three seasons."""
        rows = self._conn.execute(
            """
            SELECT t.team_id, COALESCE(AVG(s.expense_scouting), 0) AS avg_expense
            FROM teams t
            LEFT JOIN team_seasons s
              ON s.team_id = t.team_id AND s.season BETWEEN ? AND ?
            GROUP BY t.team_id
            ORDER BY avg_expense DESC, t.team_id ASC;
            """,
            (int(season) - 2, int(season)),
        ).fetchall()
        for i, r in enumerate(rows, start=1):
            if int(r["team_id"]) == int(team_id):
                return i
        _warn_limited("SCOUTING_RANK_TEAM_MISSING", f"team_id={team_id} season={season}")
        return max(1, (len(rows) + 1) // 2)

    # ------------------------
    # Players
    # ------------------------

    def _player_from_row(self, row: sqlite3.Row) -> Player:
        d = _json_loads(row["record_json"], {})
        d["player_id"] = int(row["player_id"])
        d["team_id"] = None if row["team_id"] is None else int(row["team_id"])
        d["pool_tag"] = row["pool_tag"]
        if row["draft_year"] is not None:
            d["draft_year"] = int(row["draft_year"])
        return Player.from_dict(d)

    def _player_columns(self, p: Player) -> tuple:
        record = p.to_dict()
        for k in ("player_id", "team_id", "pool_tag"):
            record.pop(k, None)
        return (
            None if p.team_id is None else int(p.team_id),
            _pool_tag_value(p.pool_tag),
            int(p.draft_year),
            str(p.name),
            _json_dumps(record),
        )

    def insert_player(self, p: Player) -> PlayerId:
        with self.transaction() as cur:
            cur.execute(
                "INSERT INTO players(team_id, pool_tag, draft_year, name, record_json) VALUES (?, ?, ?, ?, ?);",
                self._player_columns(p),
            )
            return int(cur.lastrowid)

    def update_player(self, p: Player) -> None:
        if p.player_id is None:
            raise ValueError("update_player requires player_id")
        with self.transaction() as cur:
            cur.execute(
                "UPDATE players SET team_id=?, pool_tag=?, draft_year=?, name=?, record_json=? WHERE player_id=?;",
                self._player_columns(p) + (int(p.player_id),),
            )
            if cur.rowcount != 1:
                raise KeyError(f"player not found: {p.player_id}")

    def get_player(self, player_id: PlayerId) -> Optional[Player]:
        row = self._conn.execute("SELECT * FROM players WHERE player_id=?;", (int(player_id),)).fetchone()
        return None if row is None else self._player_from_row(row)

    def list_players_in_pool(self, pool_tag: PoolTag) -> List[Player]:
        rows = self._conn.execute(
            "SELECT * FROM players WHERE pool_tag=? ORDER BY player_id;",
            (_pool_tag_value(pool_tag),),
        ).fetchall()
        return [self._player_from_row(r) for r in rows]

    def count_players_in_pool(self, pool_tag: PoolTag) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) AS n FROM players WHERE pool_tag=?;",
            (_pool_tag_value(pool_tag),),
        ).fetchone()
        return int(row["n"])

    def list_players_by_team(self, team_id: TeamId) -> List[Player]:
        rows = self._conn.execute(
            "SELECT * FROM players WHERE team_id=? AND pool_tag IS NULL ORDER BY player_id;",
            (int(team_id),),
        ).fetchall()
        return [self._player_from_row(r) for r in rows]

    def retag_pool(self, from_tag: PoolTag, to_tag: PoolTag) -> int:
        """Move every player in one pool to another; returns rows moved."""
        with self.transaction() as cur:
            cur.execute(
                "UPDATE players SET pool_tag=? WHERE pool_tag=?;",
                (_pool_tag_value(to_tag), _pool_tag_value(from_tag)),
            )
            return int(cur.rowcount)

    def move_active_players_to_pool(self, pool_tag: PoolTag) -> int:
        """Put every rostered player and free agent into a draft pool (team cleared)."""
        with self.transaction() as cur:
            cur.execute(
                "UPDATE players SET pool_tag=?, team_id=NULL WHERE pool_tag IS NULL AND team_id IS NOT NULL;",
                (_pool_tag_value(pool_tag),),
            )
            return int(cur.rowcount)

    # ------------------------
    # Draft pick ownership
    # ------------------------

    def seed_draft_picks(
        self,
        season: int,
        team_ids: Iterable[TeamId],
        *,
        years_ahead: int = DRAFT_PICK_YEARS_AHEAD,
        rounds: int = DRAFT_ROUNDS,
    ) -> int:
        """Create missing ownership records (owner = original team) for season..season+years_ahead."""
        team_ids = [int(t) for t in team_ids]
        inserted = 0
        with self.transaction() as cur:
            for year in range(int(season), int(season) + int(years_ahead) + 1):
                for rnd in range(1, int(rounds) + 1):
                    for tid in team_ids:
                        cur.execute(
                            """
                            INSERT OR IGNORE INTO draft_picks(pick_id, season, round, original_team, owner_team)
                            VALUES (?, ?, ?, ?, ?);
                            """,
                            (f"{year}_R{rnd}_T{tid}", year, rnd, tid, tid),
                        )
                        inserted += int(cur.rowcount)
        return inserted

    def get_draft_pick_records(self, season: int) -> List[Dict[str, Any]]:
        rows = self._conn.execute(
            """
            SELECT pick_id, season, round, original_team, owner_team
            FROM draft_picks
            WHERE season=?
            ORDER BY round, original_team;
            """,
            (int(season),),
        ).fetchall()
        return [dict(r) for r in rows]

    def set_draft_pick_owner(self, season: int, round_no: int, original_team: TeamId, owner_team: TeamId) -> None:
        with self.transaction() as cur:
            cur.execute(
                "UPDATE draft_picks SET owner_team=? WHERE season=? AND round=? AND original_team=?;",
                (int(owner_team), int(season), int(round_no), int(original_team)),
            )
            if cur.rowcount != 1:
                raise KeyError(f"draft pick not found: season={season} round={round_no} original_team={original_team}")

    def delete_draft_pick_records(self, season: int) -> int:
        with self.transaction() as cur:
            cur.execute("DELETE FROM draft_picks WHERE season=?;", (int(season),))
            return int(cur.rowcount)

    # ------------------------
    # Draft order (single row)
    # ------------------------

    def get_draft_order_rows(self) -> Optional[List[Dict[str, Any]]]:
        row = self._conn.execute("SELECT order_json FROM draft_order WHERE rid=0;").fetchone()
        if row is None:
            return None
        rows = _json_loads(row["order_json"], None)
        if not isinstance(rows, list):
            raise DataIntegrityError(DRAFT_INVALID_ORDER, "stored draft order is not a JSON list")
        return rows

    def set_draft_order_rows(self, rows: Sequence[Mapping[str, Any]]) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO draft_order(rid, order_json, updated_at) VALUES (0, ?, ?)
                ON CONFLICT(rid) DO UPDATE SET order_json=excluded.order_json, updated_at=excluded.updated_at;
                """,
                (_json_dumps([dict(r) for r in rows]), _utc_now_iso()),
            )

    # ------------------------
    # Convenience
    # ------------------------

    def __enter__(self) -> "LeagueRepo":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ----------------------------
# CLI
# ----------------------------

def _cmd_init(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.init_db()
    print(f"OK: initialized {args.db}")

def _cmd_seed_picks(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.init_db()
        team_ids = repo.list_team_ids() or list(range(int(args.teams)))
        n = repo.seed_draft_picks(args.season, team_ids, years_ahead=args.years_ahead)
    print(f"OK: seeded {n} draft pick records from season {args.season}")

def _cmd_show_order(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.init_db()
        rows = repo.get_draft_order_rows() or []
    for r in rows:
        print(f"R{r['round']} #{r['pick']:>2}  team={r['team_id']}  (orig {r['original_team_id']})")
    print(f"{len(rows)} picks remaining")

def _cmd_init_classes(args) -> None:
    from draft.pipeline import run_initial_classes, step_rng

    with LeagueRepo(args.db) as repo:
        repo.init_db()
        ctx = repo.load_draft_context()
        try:
            created = run_initial_classes(repo, rng=step_rng(ctx, "initial_classes", seed=args.seed))
        except ValueError as e:
            raise SystemExit(f"ERROR: {e}")
    print(f"OK: generated {len(created)} prospects for season {ctx.season}")

def _cmd_set_pick_owner(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.init_db()
        try:
            repo.set_draft_pick_owner(args.season, args.round, args.original_team, args.owner_team)
        except KeyError as e:
            raise SystemExit(f"ERROR: {e.args[0]}")
    print(f"OK: season {args.season} round {args.round} pick of team {args.original_team} -> team {args.owner_team}")

def main(argv: Optional[Sequence[str]] = None) -> None:
    p = argparse.ArgumentParser(description="LeagueRepo (SQLite single source of truth)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="initialize DB schema")
    p_init.add_argument("--db", required=True, help="path to sqlite db file")
    p_init.set_defaults(func=_cmd_init)

    p_seed = sub.add_parser("seed-picks", help="create draft pick ownership records")
    p_seed.add_argument("--db", required=True, help="path to sqlite db file")
    p_seed.add_argument("--season", required=True, type=int, help="first draft season")
    p_seed.add_argument("--teams", type=int, default=30, help="team count when the teams table is empty")
    p_seed.add_argument("--years-ahead", type=int, default=DRAFT_PICK_YEARS_AHEAD)
    p_seed.set_defaults(func=_cmd_seed_picks)

    p_owner = sub.add_parser("set-pick-owner", help="transfer a draft pick ownership record")
    p_owner.add_argument("--db", required=True, help="path to sqlite db file")
    p_owner.add_argument("--season", required=True, type=int)
    p_owner.add_argument("--round", required=True, type=int)
    p_owner.add_argument("--original-team", required=True, type=int)
    p_owner.add_argument("--owner-team", required=True, type=int)
    p_owner.set_defaults(func=_cmd_set_pick_owner)

    p_classes = sub.add_parser("init-classes", help="generate the three prospect classes of a new league")
    p_classes.add_argument("--db", required=True, help="path to sqlite db file")
    p_classes.add_argument("--seed", type=int, default=DRAFT_RNG_SEED, help="rng seed (default: DRAFT_RNG_SEED)")
    p_classes.set_defaults(func=_cmd_init_classes)

    p_show = sub.add_parser("show-order", help="print the remaining draft order")
    p_show.add_argument("--db", required=True, help="path to sqlite db file")
    p_show.set_defaults(func=_cmd_show_order)

    args = p.parse_args(argv)
    args.func(args)

if __name__ == "__main__":
    main()
