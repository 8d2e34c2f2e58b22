from __future__ import annotations

"""Draft standings utilities (pure).

Helpers for building the "worst -> best" rankings used by draft order:
  - round 1 (lottery seeding): ascending by (playoff_rounds_won, win_pct)
  - round 2: ascending by win_pct only

Both sorts are stable: teams that tie keep the order they were supplied in
(LeagueRepo returns standings ordered by team_id).
"""

from typing import Iterable, List, Sequence

from .errors import DRAFT_INVALID_ORDER, DataIntegrityError
from .types import TeamId, TeamStanding


def rank_for_lottery(teams: Iterable[TeamStanding]) -> List[TeamStanding]:
    """Worst -> best by (playoff rounds won, win%): playoff teams always sort after non-playoff teams."""
    return sorted(teams, key=lambda t: (int(t.playoff_rounds_won), float(t.win_pct)))


def rank_by_win_pct(teams: Iterable[TeamStanding]) -> List[TeamStanding]:
    """Worst -> best by win% only (playoff results ignored)."""
    return sorted(teams, key=lambda t: float(t.win_pct))


def require_complete_standings(teams: Sequence[TeamStanding], *, team_ids: Sequence[TeamId]) -> None:
    """Fail-loud guard: every team appears exactly once."""
    seen: List[TeamId] = [int(t.team_id) for t in teams]
    dupes = sorted({tid for tid in seen if seen.count(tid) > 1})
    missing = sorted(set(int(t) for t in team_ids) - set(seen))
    extra = sorted(set(seen) - set(int(t) for t in team_ids))
    if dupes or missing or extra:
        raise DataIntegrityError(
            DRAFT_INVALID_ORDER,
            "standings must list every team exactly once",
            {"duplicates": dupes, "missing": missing, "unexpected": extra},
        )
