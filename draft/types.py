from __future__ import annotations

"""Draft domain types.

This module is dependency-light so it can be imported by:
- draft.standings / draft.lottery / draft.order (pure order computations)
- draft.fantasy                                  (snake order)
- draft.pool / draft.apply / draft.engine        (player records + resolution)
- league_repo                                    (row <-> record codecs)

Conventions aligned with this codebase:
- team_id is a non-negative int (0..num_teams-1); FREE_AGENT_TEAM_ID (-1) marks free agents
- pick numbers are per round (1..num_teams), NOT overall; overall_index() derives the flat index
- pool_tag is one of PoolTag while a player is undrafted, None once rostered / free agent
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Mapping, Optional, Tuple


TeamId = int
PlayerId = int


class Phase(IntEnum):
    FANTASY_DRAFT = -1
    PRESEASON = 0
    REGULAR_SEASON = 1
    PLAYOFFS = 2
    BEFORE_DRAFT = 3
    DRAFT = 4
    AFTER_DRAFT = 5
    RESIGN_PLAYERS = 6
    FREE_AGENCY = 7


class PoolTag(str, Enum):
    UNDRAFTED = "UNDRAFTED"
    UNDRAFTED_2 = "UNDRAFTED_2"
    UNDRAFTED_3 = "UNDRAFTED_3"
    UNDRAFTED_FANTASY_TEMP = "UNDRAFTED_FANTASY_TEMP"


def norm_pool_tag(v: Any) -> Optional[PoolTag]:
    """Normalize a stored/user-supplied pool tag (None stays None)."""
    if v is None or v == "":
        return None
    if isinstance(v, PoolTag):
        return v
    return PoolTag(str(v).upper())


@dataclass(frozen=True, slots=True)
class DraftContext:
    """Immutable snapshot of the global game state the draft reads.

    Built once (LeagueRepo.load_draft_context) and passed explicitly into every
    builder / generator / resolver call.
    """

    season: int
    starting_season: int
    phase: Phase
    user_team_id: TeamId
    num_teams: int
    next_phase: Optional[Phase] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "season", int(self.season))
        object.__setattr__(self, "starting_season", int(self.starting_season))
        object.__setattr__(self, "phase", Phase(int(self.phase)))
        object.__setattr__(self, "user_team_id", int(self.user_team_id))
        object.__setattr__(self, "num_teams", int(self.num_teams))
        if self.next_phase is not None:
            object.__setattr__(self, "next_phase", Phase(int(self.next_phase)))
        if self.num_teams < 2:
            raise ValueError(f"num_teams must be >= 2, got {self.num_teams}")

    @property
    def is_fantasy_draft(self) -> bool:
        return self.phase == Phase.FANTASY_DRAFT

    @property
    def is_league_inception(self) -> bool:
        """True while a brand-new league has not reached its first draft."""
        return self.season == self.starting_season and self.phase < Phase.DRAFT

    @property
    def team_ids(self) -> Tuple[TeamId, ...]:
        return tuple(range(self.num_teams))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "season": int(self.season),
            "starting_season": int(self.starting_season),
            "phase": int(self.phase),
            "phase_name": self.phase.name,
            "next_phase": None if self.next_phase is None else int(self.next_phase),
            "user_team_id": int(self.user_team_id),
            "num_teams": int(self.num_teams),
        }


@dataclass(frozen=True, slots=True)
class TeamStanding:
    """Season aggregate used for draft ordering.

    playoff_rounds_won is -1 for teams that missed the playoffs.
    """

    team_id: TeamId
    win_pct: float
    playoff_rounds_won: int = -1
    conference_id: int = 0

    @classmethod
    def from_record(
        cls,
        team_id: TeamId,
        *,
        won: int,
        lost: int,
        playoff_rounds_won: int = -1,
        conference_id: int = 0,
    ) -> "TeamStanding":
        gp = int(won) + int(lost)
        win_pct = float(won) / float(gp) if gp > 0 else 0.0
        return cls(
            team_id=int(team_id),
            win_pct=win_pct,
            playoff_rounds_won=int(playoff_rounds_won),
            conference_id=int(conference_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": int(self.team_id),
            "conference_id": int(self.conference_id),
            "win_pct": float(self.win_pct),
            "playoff_rounds_won": int(self.playoff_rounds_won),
        }


@dataclass(frozen=True, slots=True)
class Pick:
    """A single slot in the draft order."""

    round: int
    pick: int
    team_id: TeamId
    original_team_id: TeamId

    def __post_init__(self) -> None:
        object.__setattr__(self, "round", int(self.round))
        object.__setattr__(self, "pick", int(self.pick))
        object.__setattr__(self, "team_id", int(self.team_id))
        object.__setattr__(self, "original_team_id", int(self.original_team_id))

    @property
    def key(self) -> Tuple[int, int]:
        return (self.round, self.pick)

    def overall_index(self, num_teams: int) -> int:
        return (self.pick - 1) + int(num_teams) * (self.round - 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": int(self.round),
            "pick": int(self.pick),
            "team_id": int(self.team_id),
            "original_team_id": int(self.original_team_id),
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Pick":
        return cls(
            round=int(d["round"]),
            pick=int(d["pick"]),
            team_id=int(d["team_id"]),
            original_team_id=int(d["original_team_id"]),
        )


@dataclass(frozen=True, slots=True)
class DraftRecord:
    """Where/when a player was drafted, with ratings frozen at selection time."""

    round: int
    pick: int
    team_id: TeamId
    year: int
    original_team_id: TeamId
    pot: int
    ovr: int
    skills: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": int(self.round),
            "pick": int(self.pick),
            "team_id": int(self.team_id),
            "year": int(self.year),
            "original_team_id": int(self.original_team_id),
            "pot": int(self.pot),
            "ovr": int(self.ovr),
            "skills": list(self.skills),
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "DraftRecord":
        return cls(
            round=int(d["round"]),
            pick=int(d["pick"]),
            team_id=int(d["team_id"]),
            year=int(d["year"]),
            original_team_id=int(d["original_team_id"]),
            pot=int(d.get("pot") or 0),
            ovr=int(d.get("ovr") or 0),
            skills=tuple(str(s) for s in (d.get("skills") or ())),
        )


@dataclass(frozen=True, slots=True)
class Contract:
    amount: int
    exp: int
    rookie: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": int(self.amount), "exp": int(self.exp), "rookie": bool(self.rookie)}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Contract":
        return cls(amount=int(d["amount"]), exp=int(d["exp"]), rookie=bool(d.get("rookie") or False))


@dataclass(slots=True)
class Player:
    """A player record (prospect, rostered player or free agent).

    ratings is a per-season history; the last row is the current one and carries
    at least ovr / pot / skills.
    """

    name: str
    born_year: int
    profile: str
    draft_year: int
    ratings: List[Dict[str, Any]]
    player_id: Optional[PlayerId] = None
    team_id: Optional[TeamId] = None
    pool_tag: Optional[PoolTag] = None
    draft: Optional[DraftRecord] = None
    contract: Optional[Contract] = None
    stats: List[Dict[str, Any]] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.pool_tag = norm_pool_tag(self.pool_tag)
        if not self.ratings:
            raise ValueError("player record requires at least one ratings row")

    @property
    def current_ratings(self) -> Dict[str, Any]:
        return self.ratings[-1]

    @property
    def ovr(self) -> int:
        return int(self.current_ratings.get("ovr") or 0)

    @property
    def pot(self) -> int:
        return int(self.current_ratings.get("pot") or 0)

    @property
    def skills(self) -> Tuple[str, ...]:
        return tuple(str(s) for s in (self.current_ratings.get("skills") or ()))

    def age(self, season: int) -> int:
        return int(season) - int(self.born_year)

    @property
    def is_undrafted(self) -> bool:
        return self.pool_tag is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": None if self.player_id is None else int(self.player_id),
            "name": str(self.name),
            "born_year": int(self.born_year),
            "profile": str(self.profile),
            "draft_year": int(self.draft_year),
            "team_id": None if self.team_id is None else int(self.team_id),
            "pool_tag": None if self.pool_tag is None else self.pool_tag.value,
            "ratings": [dict(r) for r in self.ratings],
            "draft": None if self.draft is None else self.draft.to_dict(),
            "contract": None if self.contract is None else self.contract.to_dict(),
            "stats": [dict(s) for s in self.stats],
            "meta": dict(self.meta),
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Player":
        draft = d.get("draft")
        contract = d.get("contract")
        return cls(
            player_id=None if d.get("player_id") is None else int(d["player_id"]),
            name=str(d.get("name") or ""),
            born_year=int(d["born_year"]),
            profile=str(d.get("profile") or ""),
            draft_year=int(d["draft_year"]),
            team_id=None if d.get("team_id") is None else int(d["team_id"]),
            pool_tag=norm_pool_tag(d.get("pool_tag")),
            ratings=[dict(r) for r in (d.get("ratings") or [])],
            draft=DraftRecord.from_dict(draft) if isinstance(draft, Mapping) else None,
            contract=Contract.from_dict(contract) if isinstance(contract, Mapping) else None,
            stats=[dict(s) for s in (d.get("stats") or [])],
            meta=dict(d.get("meta") or {}),
        )
