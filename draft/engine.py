from __future__ import annotations

"""Draft autoplay engine.

Drains the stored draft order one pick at a time:
  - head owned by the user team      -> PAUSED_FOR_USER (pick stays queued)
  - otherwise autopick from the value-ranked pool and resolve
  - queue empty                      -> COMPLETE (end-of-draft cleanup)

Autopick: index floor(|N(0, AUTOPICK_GAUSS_STD)|) into the pool ranked best ->
worst, clamped to the last prospect. The ranking is computed once per run and
maintained by removal.

Each pick is its own DB transaction (resolve + order save), so an interrupted
run resumes from the stored order without double-drafting anyone.

Phase transitions and notifications are injected callables; this module never
imports season logic.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from config import AUTOPICK_GAUSS_STD

from .apply import resolve_pick
from .collaborators import AdvancePhaseFn, DraftCompleteFn, DraftRandom, PlayerModel, ShouldStopFn
from .errors import DRAFT_CONTEXT_MISSING, DRAFT_POOL_EXHAUSTED, DataIntegrityError
from .order_store import DraftOrder, DraftOrderStore
from .pool import load_ranked_pool
from .rookie_scale import compute_schedule
from .types import DraftContext, Phase, Player, PlayerId, PoolTag

logger = logging.getLogger(__name__)


class AutoplayState(str, Enum):
    RUNNING = "RUNNING"
    PAUSED_FOR_USER = "PAUSED_FOR_USER"
    COMPLETE = "COMPLETE"


@dataclass(slots=True)
class AutoplayResult:
    state: AutoplayState
    drafted_ids: List[PlayerId] = field(default_factory=list)
    remaining: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "drafted_ids": [int(x) for x in self.drafted_ids],
            "remaining": int(self.remaining),
        }


def autopick_index(rng: DraftRandom, pool_size: int, *, std: float = AUTOPICK_GAUSS_STD) -> int:
    """Mostly the best available, occasionally a reach a few spots down."""
    if pool_size <= 0:
        raise ValueError("pool_size must be positive")
    idx = int(math.floor(abs(rng.gaussian(0.0, std))))
    return min(idx, pool_size - 1)


class AutoplayEngine:
    """Run AI picks until the user is on the clock or the draft is over."""

    def __init__(
        self,
        repo: Any,
        ctx: DraftContext,
        *,
        player_model: PlayerModel,
        rng: DraftRandom,
        advance_phase: AdvancePhaseFn,
        on_draft_complete: Optional[DraftCompleteFn] = None,
        should_stop: Optional[ShouldStopFn] = None,
        max_picks: Optional[int] = None,
    ):
        if ctx.is_fantasy_draft and ctx.next_phase is None:
            raise DataIntegrityError(
                DRAFT_CONTEXT_MISSING,
                "fantasy draft in progress but next_phase is not set",
                ctx.to_dict(),
            )
        self.repo = repo
        self.ctx = ctx
        self.player_model = player_model
        self.rng = rng
        self.advance_phase = advance_phase
        self.on_draft_complete = on_draft_complete
        self.should_stop = should_stop
        self.max_picks = None if max_picks is None else max(0, int(max_picks))
        self.store = DraftOrderStore(repo)

    def run(self) -> AutoplayResult:
        ctx = self.ctx
        order = self.store.load()
        pool = load_ranked_pool(self.repo, PoolTag.UNDRAFTED, value_fn=self.player_model.value)
        schedule = None if ctx.is_fantasy_draft else compute_schedule(ctx.num_teams)
        drafted: List[PlayerId] = []

        logger.info(
            "DRAFT_AUTOPLAY_START season=%s remaining=%s pool=%s user_team_id=%s fantasy=%s",
            ctx.season,
            len(order),
            len(pool),
            ctx.user_team_id,
            ctx.is_fantasy_draft,
        )

        while not order.is_empty():
            if self.should_stop is not None and self.should_stop():
                logger.info("DRAFT_AUTOPLAY_STOPPED reason=should_stop drafted=%s remaining=%s", len(drafted), len(order))
                return AutoplayResult(AutoplayState.RUNNING, drafted, len(order))
            if self.max_picks is not None and len(drafted) >= self.max_picks:
                logger.info("DRAFT_AUTOPLAY_STOPPED reason=max_picks drafted=%s remaining=%s", len(drafted), len(order))
                return AutoplayResult(AutoplayState.RUNNING, drafted, len(order))

            head = order.peek()
            if head.team_id == ctx.user_team_id:
                return self._pause_for_user(order, drafted)

            if not pool:
                raise DataIntegrityError(
                    DRAFT_POOL_EXHAUSTED,
                    f"no undrafted prospects left with {len(order)} picks remaining",
                    {"remaining": len(order), "next_pick": head.to_dict()},
                )

            idx = autopick_index(self.rng, len(pool))
            selection = pool[idx]
            self._commit_pick(order, selection, schedule)
            del pool[idx]
            drafted.append(int(selection.player_id))

        return self._complete(drafted)

    def _commit_pick(self, order: DraftOrder, selection: Player, schedule: Optional[List[int]]) -> None:
        with self.repo.transaction():
            pick = order.pop_head()
            resolve_pick(
                self.repo,
                self.ctx,
                pick,
                int(selection.player_id),
                player_model=self.player_model,
                schedule=schedule,
            )
            self.store.save(order)

    def _pause_for_user(self, order: DraftOrder, drafted: List[PlayerId]) -> AutoplayResult:
        with self.repo.transaction():
            self.store.save(order)
        logger.info(
            "DRAFT_AUTOPLAY_PAUSED_FOR_USER drafted=%s remaining=%s on_the_clock=%s",
            len(drafted),
            len(order),
            order.peek().to_dict(),
        )
        if self.on_draft_complete is not None:
            self.on_draft_complete(list(drafted))
        return AutoplayResult(AutoplayState.PAUSED_FOR_USER, drafted, len(order))

    def _complete(self, drafted: List[PlayerId]) -> AutoplayResult:
        ctx = self.ctx
        if ctx.is_fantasy_draft:
            with self.repo.transaction():
                released = 0
                for p in self.repo.list_players_in_pool(PoolTag.UNDRAFTED):
                    p = self.player_model.add_to_free_agents(p, phase=Phase.FREE_AGENCY, season=ctx.season)
                    self.repo.update_player(p)
                    released += 1
                restored = self.repo.retag_pool(PoolTag.UNDRAFTED_FANTASY_TEMP, PoolTag.UNDRAFTED)
            logger.info(
                "FANTASY_DRAFT_COMPLETE drafted=%s released_to_fa=%s restored_class=%s next_phase=%s",
                len(drafted),
                released,
                restored,
                ctx.next_phase.name,
            )
            self.advance_phase(ctx.next_phase)
        else:
            logger.info("DRAFT_COMPLETE season=%s drafted=%s", ctx.season, len(drafted))
            self.advance_phase(Phase.AFTER_DRAFT)

        if self.on_draft_complete is not None:
            self.on_draft_complete(list(drafted))
        return AutoplayResult(AutoplayState.COMPLETE, drafted, 0)
