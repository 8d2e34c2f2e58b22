from __future__ import annotations

"""draft.pipeline

Stepwise draft orchestration used by the API (and scripts):
  0) run_initial_classes            -> prospect classes of a new league (CLI init-classes)
  1) run_lottery / run_fantasy_setup -> persist the order
  2) run_until_user_or_end           -> AI picks until the user is on the clock
  3) make_user_pick                  -> the user's selection
  4) finish_annual_draft             -> post-draft bookkeeping (via the phase hook)

Every step loads a fresh DraftContext from the repo; nothing here caches state
between calls. The phase hook given to the engine is built here so draft.engine
never imports season logic.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from config import DRAFT_RNG_SEED, FANTASY_DRAFT_ROUNDS

from .apply import draft_user_pick
from .collaborators import AdvancePhaseFn, DraftCompleteFn, DraftRandom, PlayerModel, ShouldStopFn
from .engine import AutoplayEngine, AutoplayResult
from .fantasy import start_fantasy_draft
from .lottery import LotteryResult
from .order import generate_lottery_order
from .order_store import DraftOrder, DraftOrderStore
from .player_model import BasicPlayerModel
from .pool import advance_draft_classes, generate_initial_classes
from .rng import make_draft_rng
from .types import DraftContext, Phase, Pick, Player, PlayerId, PoolTag

logger = logging.getLogger(__name__)


def step_rng(ctx: DraftContext, step: str, *, seed: Optional[int] = DRAFT_RNG_SEED) -> DraftRandom:
    """Per-step rng; with a configured seed each (season, step) gets a stable stream."""
    return make_draft_rng(seed, ctx.season, step)


def finish_annual_draft(
    repo: Any,
    ctx: DraftContext,
    *,
    player_model: PlayerModel,
    rng: DraftRandom,
) -> Dict[str, Any]:
    """Post-draft bookkeeping for a normal (non-fantasy) draft.

    - undrafted leftovers become free agents
    - draft classes move up one year, a new UNDRAFTED_3 class is generated
    - ownership records are topped up for the following seasons
    """
    with repo.transaction():
        released = 0
        for p in repo.list_players_in_pool(PoolTag.UNDRAFTED):
            p = player_model.add_to_free_agents(p, phase=Phase.AFTER_DRAFT, season=ctx.season)
            repo.update_player(p)
            released += 1
        created = advance_draft_classes(repo, ctx, player_model=player_model, rng=rng)
        seeded = repo.seed_draft_picks(ctx.season + 1, ctx.team_ids)

    logger.info(
        "DRAFT_FINALIZED season=%s released_to_fa=%s new_class=%s seeded_pick_records=%s",
        ctx.season,
        released,
        len(created),
        seeded,
    )
    return {"released_to_fa": released, "new_class": len(created), "seeded_pick_records": seeded}


def make_advance_phase(
    repo: Any,
    ctx: DraftContext,
    *,
    player_model: PlayerModel,
    rng: DraftRandom,
) -> AdvancePhaseFn:
    """Phase hook for AutoplayEngine: writes phase to game_attributes (next_phase cleared)."""

    def _advance(phase: Phase) -> None:
        with repo.transaction():
            if phase == Phase.AFTER_DRAFT and not ctx.is_fantasy_draft:
                finish_annual_draft(repo, ctx, player_model=player_model, rng=rng)
            repo.set_game_attributes({"phase": int(phase), "next_phase": None})
        logger.info("LEAGUE_PHASE_CHANGED season=%s from=%s to=%s", ctx.season, ctx.phase.name, Phase(phase).name)

    return _advance


def run_initial_classes(
    repo: Any,
    *,
    player_model: Optional[PlayerModel] = None,
    rng: Optional[DraftRandom] = None,
) -> List[Player]:
    """Create the three prospect classes of a new league (refuses if any class exists)."""
    ctx = repo.load_draft_context()
    existing = {
        tag.value: repo.count_players_in_pool(tag)
        for tag in (PoolTag.UNDRAFTED, PoolTag.UNDRAFTED_2, PoolTag.UNDRAFTED_3)
    }
    if any(existing.values()):
        raise ValueError(f"draft classes already exist: {existing}")
    return generate_initial_classes(
        repo,
        ctx,
        player_model=player_model or BasicPlayerModel(),
        rng=rng or step_rng(ctx, "initial_classes"),
    )


def run_lottery(repo: Any, *, rng: Optional[DraftRandom] = None) -> Tuple[DraftOrder, LotteryResult]:
    ctx = repo.load_draft_context()
    return generate_lottery_order(repo, ctx, rng or step_rng(ctx, "lottery"))


def run_fantasy_setup(
    repo: Any,
    *,
    preferred_slot: Optional[int] = None,
    rounds: int = FANTASY_DRAFT_ROUNDS,
    rng: Optional[DraftRandom] = None,
) -> DraftContext:
    ctx = repo.load_draft_context()
    return start_fantasy_draft(
        repo,
        ctx,
        rng or step_rng(ctx, "fantasy_order"),
        preferred_slot=preferred_slot,
        rounds=rounds,
    )


def run_until_user_or_end(
    repo: Any,
    *,
    player_model: Optional[PlayerModel] = None,
    rng: Optional[DraftRandom] = None,
    advance_phase: Optional[AdvancePhaseFn] = None,
    on_draft_complete: Optional[DraftCompleteFn] = None,
    should_stop: Optional[ShouldStopFn] = None,
    max_picks: Optional[int] = None,
) -> AutoplayResult:
    ctx = repo.load_draft_context()
    if ctx.phase not in (Phase.DRAFT, Phase.FANTASY_DRAFT):
        raise ValueError(f"no draft in progress (phase={ctx.phase.name})")
    model = player_model or BasicPlayerModel()
    remaining = len(DraftOrderStore(repo).load())
    # An empty queue with this season's ownership records intact means the lottery never ran.
    if ctx.phase == Phase.DRAFT and not remaining and repo.get_draft_pick_records(ctx.season):
        raise ValueError(f"draft order not generated for season {ctx.season}")
    # Offset by picks already made so a resumed draft does not replay the same stream.
    r = rng or step_rng(ctx, f"autoplay:{remaining}")
    engine = AutoplayEngine(
        repo,
        ctx,
        player_model=model,
        rng=r,
        advance_phase=advance_phase or make_advance_phase(repo, ctx, player_model=model, rng=r),
        on_draft_complete=on_draft_complete,
        should_stop=should_stop,
        max_picks=max_picks,
    )
    return engine.run()


def make_user_pick(
    repo: Any,
    player_id: PlayerId,
    *,
    player_model: Optional[PlayerModel] = None,
) -> Tuple[Pick, Player, DraftOrder]:
    ctx = repo.load_draft_context()
    return draft_user_pick(repo, ctx, player_id, player_model=player_model or BasicPlayerModel())


def get_draft_board(repo: Any) -> Dict[str, Any]:
    """Read-only view: context, remaining order and who is on the clock."""
    ctx = repo.load_draft_context()
    order = DraftOrderStore(repo).load()
    picks: List[Dict[str, Any]] = order.to_list()
    return {
        "context": ctx.to_dict(),
        "remaining": len(order),
        "on_the_clock": None if order.is_empty() else order.peek().to_dict(),
        "user_on_the_clock": (not order.is_empty()) and order.peek().team_id == ctx.user_team_id,
        "order": picks,
    }
