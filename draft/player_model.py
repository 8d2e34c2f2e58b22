from __future__ import annotations

"""Basic player model used by the draft.

This is the default PlayerModel (draft.collaborators) so a league can run a
full draft end-to-end. It is kept light:
  - ratings: ovr / pot / skills + a scouting fuzz per ratings row
  - develop: ages the player and moves ovr toward pot
  - value: pot-weighted for young players, ovr for veterans
  - contracts / stats rows / free agency: record-level bookkeeping only

Richer rating engines plug in by implementing the same protocol.
"""

from typing import Dict, List, Optional, Sequence, Set, Tuple

from config import DEFAULT_NUM_TEAMS, FREE_AGENT_TEAM_ID, ROOKIE_SALARY_FLOOR

from .collaborators import DraftRandom
from .types import Contract, Phase, Player, PoolTag


_FIRST_NAMES: Sequence[str] = (
    "Alex", "Jordan", "Taylor", "Chris", "Devin", "Cameron", "Morgan", "Jaden", "Casey", "Riley",
    "Marcus", "Darius", "Ethan", "Noah", "Liam", "Aiden", "Kai", "Miles", "Zion", "Logan",
    "Trevor", "Isaiah", "Aaron", "Damon", "Bryce", "Julian", "Cole", "Grant", "Reed", "Cyrus",
)

_LAST_NAMES: Sequence[str] = (
    "Walker", "Johnson", "Williams", "Brown", "Miller", "Davis", "Anderson", "Moore", "Taylor", "Thomas",
    "Jackson", "White", "Harris", "Martin", "Thompson", "Garcia", "Martinez", "Robinson", "Clark", "Lewis",
    "Young", "Allen", "King", "Wright", "Scott", "Green", "Baker", "Adams", "Nelson", "Carter",
)

# Skill tags unlocked per position profile once potential is high enough.
_PROFILE_SKILLS: Dict[str, Tuple[str, ...]] = {
    "Point": ("B", "Ps"),
    "Wing": ("3", "Di"),
    "Big": ("R", "Po"),
    "": (),
}
SKILL_POT_THRESHOLD = 60

# Yearly ovr gain by age (older -> slower); ovr never passes pot.
_DEVELOP_MEAN_BY_AGE: Dict[int, float] = {16: 5.0, 17: 5.0, 18: 4.5, 19: 4.0, 20: 3.5, 21: 3.0, 22: 2.0}
_DEVELOP_STD = 2.0

# Weight on pot when valuing young players.
_POT_WEIGHT_BY_AGE: Dict[int, float] = {19: 0.7, 20: 0.65, 21: 0.6, 22: 0.55}

# Worst scouting rank -> widest rating fuzz.
_FUZZ_STD_MIN = 1.0
_FUZZ_STD_MAX = 5.0


def _clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def _fuzz_std(scouting_rank: int, num_teams: int = DEFAULT_NUM_TEAMS) -> float:
    frac = _clamp((int(scouting_rank) - 1) / max(1, int(num_teams) - 1), 0.0, 1.0)
    return _FUZZ_STD_MIN + (_FUZZ_STD_MAX - _FUZZ_STD_MIN) * frac


def _skills_for(profile: str, pot: int) -> List[str]:
    if int(pot) < SKILL_POT_THRESHOLD:
        return []
    return list(_PROFILE_SKILLS.get(profile, ()))


class BasicPlayerModel:
    def __init__(self, *, used_names: Optional[Set[str]] = None):
        self._used_names: Set[str] = set(used_names or ())

    def _name(self, rng: DraftRandom) -> str:
        # Bounded retries; the last name is kept even if it is a duplicate.
        name = ""
        for _ in range(8):
            first = _FIRST_NAMES[rng.uniform_int(0, len(_FIRST_NAMES) - 1)]
            last = _LAST_NAMES[rng.uniform_int(0, len(_LAST_NAMES) - 1)]
            name = f"{first} {last}"
            if name.casefold() not in self._used_names:
                break
        self._used_names.add(name.casefold())
        return name

    def generate(
        self,
        *,
        pool_tag: PoolTag,
        base_age: int,
        profile: str,
        base_rating: int,
        pot: int,
        draft_year: int,
        season: int,
        scouting_rank: int,
        rng: DraftRandom,
        num_teams: int = DEFAULT_NUM_TEAMS,
    ) -> Player:
        ovr = int(base_rating)
        return Player(
            name=self._name(rng),
            born_year=int(season) - int(base_age),
            profile=str(profile),
            draft_year=int(draft_year),
            pool_tag=pool_tag,
            ratings=[
                {
                    "season": int(season),
                    "ovr": ovr,
                    "pot": max(int(pot), ovr),
                    "skills": _skills_for(profile, pot),
                    "fuzz": round(rng.gaussian(0.0, _fuzz_std(scouting_rank, num_teams)), 2),
                }
            ],
        )

    def develop(self, player: Player, years: int, *, season: int, rng: DraftRandom) -> Player:
        """Age the player by `years` and grow ovr for each of those years."""
        row = dict(player.current_ratings)
        ovr = int(row.get("ovr") or 0)
        pot = int(row.get("pot") or 0)
        age = player.age(season)
        for k in range(int(years)):
            mean = _DEVELOP_MEAN_BY_AGE.get(age + k, 1.0)
            ovr = int(round(_clamp(ovr + rng.gaussian(mean, _DEVELOP_STD), 0, max(pot, ovr))))
        row["ovr"] = ovr
        player.ratings[-1] = row
        player.born_year -= int(years)
        return player

    def value(self, player: Player) -> float:
        row = player.current_ratings
        season = int(row.get("season") or 0)
        age = player.age(season) if season else 25
        w = 0.8 if age < 19 else _POT_WEIGHT_BY_AGE.get(age, 0.0)
        return w * player.pot + (1.0 - w) * player.ovr

    def set_contract(self, player: Player, contract: Contract) -> Player:
        player.contract = contract
        return player

    def add_stats_row(self, player: Player, *, season: int) -> Player:
        player.stats.append({"season": int(season), "team_id": player.team_id, "gp": 0, "min": 0.0, "pts": 0})
        return player

    def add_to_free_agents(self, player: Player, *, phase: Phase, season: int) -> Player:
        # Contracts signed during/after free agency start next season.
        start = int(season) + 1 if phase >= Phase.RESIGN_PLAYERS else int(season)
        amount = max(ROOKIE_SALARY_FLOOR, int(round(self.value(player) * 50 / 10)) * 10)
        player.team_id = FREE_AGENT_TEAM_ID
        player.pool_tag = None
        player.contract = Contract(amount=amount, exp=start + 1)
        return player
