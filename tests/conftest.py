"""
Pytest fixtures for the draft subsystem.

Provides:
- a temporary SQLite league (30 teams, standings, scouting expenses,
  pick ownership records, game attributes)
- scripted random sources (fixed uniform_int / gaussian sequences)
- small player factories with controllable ratings
"""

import random
from collections import deque
from typing import Any, Iterable, List, MutableSequence, Optional

import pytest

from draft.player_model import BasicPlayerModel
from draft.types import Phase, Player, PoolTag
from league_repo import LeagueRepo


SEASON = 2025
STARTING_SEASON = 2024
NUM_TEAMS = 30
USER_TEAM_ID = 0


# ============================================================================
# RANDOM SOURCES
# ============================================================================

class ScriptedRandom:
    """DraftRandom that replays scripted values, then falls back to a seeded stream."""

    def __init__(self, ints: Iterable[int] = (), gauss: Iterable[float] = (), seed: int = 0, shuffle: bool = True):
        self.ints = deque(ints)
        self.gauss = deque(gauss)
        self._rng = random.Random(seed)
        self._do_shuffle = shuffle
        self.shuffle_calls = 0
        self.int_calls = 0

    def uniform_int(self, lo: int, hi: int) -> int:
        self.int_calls += 1
        if self.ints:
            v = self.ints.popleft()
            assert lo <= v <= hi, f"scripted value {v} outside [{lo}, {hi}]"
            return v
        return self._rng.randint(lo, hi)

    def shuffle(self, seq: MutableSequence[Any]) -> None:
        self.shuffle_calls += 1
        if self._do_shuffle:
            self._rng.shuffle(seq)

    def gaussian(self, mean: float, std: float) -> float:
        if self.gauss:
            return self.gauss.popleft()
        return self._rng.gauss(mean, std)


@pytest.fixture
def scripted_rng():
    """Factory: scripted_rng(ints=[...], gauss=[...], seed=0, shuffle=True)."""
    return ScriptedRandom


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

def _playoff_rounds_for(team_id: int) -> int:
    # Teams are seeded worst -> best by id; the 14 worst miss the playoffs.
    if team_id < 14:
        return -1
    if team_id < 22:
        return 0
    if team_id < 26:
        return 1
    if team_id < 28:
        return 2
    return 3 if team_id == 28 else 4


def seed_league(
    repo: LeagueRepo,
    *,
    num_teams: int = NUM_TEAMS,
    season: int = SEASON,
    starting_season: int = STARTING_SEASON,
    phase: Phase = Phase.DRAFT,
    user_team_id: int = USER_TEAM_ID,
) -> None:
    repo.upsert_teams(
        {"team_id": t, "conference_id": t % 2, "region": f"City {t}", "name": f"Team {t}"}
        for t in range(num_teams)
    )
    for t in range(num_teams):
        won = 15 + 2 * t
        for s in (season - 2, season - 1, season):
            repo.upsert_team_season(
                t,
                s,
                won=won,
                lost=82 - won,
                playoff_rounds_won=_playoff_rounds_for(t),
                expense_scouting=1000 + 10 * t,
            )
    repo.set_game_attributes(
        {
            "season": season,
            "starting_season": starting_season,
            "phase": int(phase),
            "next_phase": None,
            "user_team_id": user_team_id,
            "num_teams": num_teams,
        }
    )
    repo.seed_draft_picks(season, range(num_teams))


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "league.sqlite3")


@pytest.fixture
def repo(db_path):
    """Initialized league DB seeded with 30 teams in the DRAFT phase."""
    r = LeagueRepo(db_path)
    r.init_db()
    seed_league(r)
    yield r
    r.close()


@pytest.fixture
def ctx(repo):
    return repo.load_draft_context()


# ============================================================================
# PLAYER FIXTURES
# ============================================================================

@pytest.fixture
def player_model():
    return BasicPlayerModel()


def make_player(
    *,
    ovr: int,
    pot: int,
    season: int = SEASON,
    age: int = 19,
    pool_tag: Optional[PoolTag] = PoolTag.UNDRAFTED,
    team_id: Optional[int] = None,
    name: str = "Test Prospect",
) -> Player:
    return Player(
        name=name,
        born_year=season - age,
        profile="Wing",
        draft_year=season,
        pool_tag=pool_tag,
        team_id=team_id,
        ratings=[{"season": season, "ovr": ovr, "pot": pot, "skills": ["3"]}],
    )


@pytest.fixture
def add_player(repo):
    """Factory: insert a player and return it with its player_id set."""

    def _add(**kwargs) -> Player:
        p = make_player(**kwargs)
        p.player_id = repo.insert_player(p)
        return p

    return _add


@pytest.fixture
def undrafted_pool(add_player) -> List[Player]:
    """80 prospects with strictly decreasing value (index 0 is the best)."""
    out = []
    for i in range(80):
        # pot steps down every other prospect, ovr alternates 40 / 39
        out.append(add_player(ovr=40 - i % 2, pot=90 - i // 2, name=f"Prospect {i}"))
    return out
