"""SQLite DDL + migrations for the league DB (used by league_repo.LeagueRepo.init_db).

Modules:
- core  : meta, game_attributes, teams, team_seasons, players
- draft : draft_picks ownership records, draft_order queue
"""

from .init import apply_schema  # noqa: F401

__all__ = ["apply_schema"]
