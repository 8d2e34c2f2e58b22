from __future__ import annotations

"""Collaborator interfaces consumed by the draft core.

The draft never models ratings, aging or contract value itself. It talks to
these protocols instead; draft.player_model.BasicPlayerModel is the default
implementation and tests substitute their own.

Phase transitions and completion notifications are plain callables injected into
the autoplay engine so the draft never imports season logic.
"""

from typing import Any, Callable, List, MutableSequence, Protocol

from .types import Contract, Phase, Player, PlayerId, PoolTag


class DraftRandom(Protocol):
    def uniform_int(self, lo: int, hi: int) -> int:
        ...

    def shuffle(self, seq: MutableSequence[Any]) -> None:
        ...

    def gaussian(self, mean: float, std: float) -> float:
        ...


class PlayerModel(Protocol):
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
        num_teams: int = ...,
    ) -> Player:
        ...

    def develop(self, player: Player, years: int, *, season: int, rng: DraftRandom) -> Player:
        ...

    def value(self, player: Player) -> float:
        ...

    def set_contract(self, player: Player, contract: Contract) -> Player:
        ...

    def add_stats_row(self, player: Player, *, season: int) -> Player:
        ...

    def add_to_free_agents(self, player: Player, *, phase: Phase, season: int) -> Player:
        ...


AdvancePhaseFn = Callable[[Phase], None]
DraftCompleteFn = Callable[[List[PlayerId]], None]
ShouldStopFn = Callable[[], bool]
