from __future__ import annotations

"""Apply a single draft pick to the DB (ownership, draft record, rookie contract).

Pick = one atomic DB transaction. resolve_pick() opens a (possibly nested)
transaction so callers can group it with the order save; a failure anywhere
rolls back the whole pick. There is no retry: replaying a
half-applied pick risks assigning the same prospect twice.
"""

import logging
from typing import Any, Optional, Sequence, Tuple

from .collaborators import PlayerModel
from .errors import (
    DRAFT_ALREADY_DRAFTED,
    DRAFT_NOT_YOUR_PICK,
    DRAFT_UNKNOWN_PROSPECT,
    AlreadyResolvedError,
    NotFoundError,
    NotYourPickError,
)
from .order_store import DraftOrder, DraftOrderStore
from .rookie_scale import amount_for_pick, compute_schedule, contract_years_for_round
from .types import Contract, DraftContext, DraftRecord, Phase, Pick, Player, PlayerId, PoolTag

logger = logging.getLogger(__name__)


def _require_draftable(player: Optional[Player], player_id: PlayerId) -> Player:
    if player is None:
        raise NotFoundError(
            DRAFT_UNKNOWN_PROSPECT,
            f"prospect not found: player_id={player_id}",
            {"player_id": int(player_id)},
        )
    if player.pool_tag != PoolTag.UNDRAFTED:
        raise AlreadyResolvedError(
            DRAFT_ALREADY_DRAFTED,
            f"player {player_id} is not in the draft pool (pool_tag={player.pool_tag}, team_id={player.team_id})",
            {"player_id": int(player_id), "team_id": player.team_id, "draft": None if player.draft is None else player.draft.to_dict()},
        )
    return player


def _needs_stats_row(ctx: DraftContext) -> bool:
    # Fantasy draft in an ongoing season: the league returns to a phase on or
    # before the playoffs, so stats must accrue from the next game on.
    return ctx.is_fantasy_draft and ctx.next_phase is not None and ctx.next_phase <= Phase.PLAYOFFS


def resolve_pick(
    repo: Any,
    ctx: DraftContext,
    pick: Pick,
    player_id: PlayerId,
    *,
    player_model: PlayerModel,
    schedule: Optional[Sequence[int]] = None,
) -> Player:
    """Commit `player_id` to `pick` (the pick must already be dequeued by the caller)."""
    with repo.transaction():
        p = _require_draftable(repo.get_player(int(player_id)), player_id)

        p.team_id = pick.team_id
        p.pool_tag = None

        if not ctx.is_fantasy_draft:
            # Snapshot: later rating changes never touch the draft record.
            p.draft = DraftRecord(
                round=pick.round,
                pick=pick.pick,
                team_id=pick.team_id,
                year=ctx.season,
                original_team_id=pick.original_team_id,
                pot=p.pot,
                ovr=p.ovr,
                skills=p.skills,
            )

            sched = list(schedule) if schedule is not None else compute_schedule(ctx.num_teams)
            amount = amount_for_pick(sched, pick.round, pick.pick, ctx.num_teams)
            exp = ctx.season + contract_years_for_round(pick.round)
            p = player_model.set_contract(p, Contract(amount=amount, exp=exp, rookie=True))

        if _needs_stats_row(ctx):
            p = player_model.add_stats_row(p, season=ctx.season)

        repo.update_player(p)

    logger.info(
        "DRAFT_PICK_RESOLVED season=%s round=%s pick=%s team_id=%s original_team_id=%s player_id=%s fantasy=%s",
        ctx.season,
        pick.round,
        pick.pick,
        pick.team_id,
        pick.original_team_id,
        p.player_id,
        ctx.is_fantasy_draft,
    )
    return p


def draft_user_pick(
    repo: Any,
    ctx: DraftContext,
    player_id: PlayerId,
    *,
    player_model: PlayerModel,
    schedule: Optional[Sequence[int]] = None,
) -> Tuple[Pick, Player, DraftOrder]:
    """User selection for the pick on the clock.

    Dequeue + resolve + order save happen in one transaction: on any failure the
    stored order still has the pick at its head.
    """
    store = DraftOrderStore(repo)
    with repo.transaction():
        order = store.load()
        head = order.peek()
        if head.team_id != ctx.user_team_id:
            raise NotYourPickError(
                DRAFT_NOT_YOUR_PICK,
                f"team {head.team_id} is on the clock, not user team {ctx.user_team_id}",
                {"on_the_clock": head.to_dict(), "user_team_id": ctx.user_team_id},
            )
        pick = order.pop_head()
        player = resolve_pick(repo, ctx, pick, player_id, player_model=player_model, schedule=schedule)
        store.save(order)
    return pick, player, order
