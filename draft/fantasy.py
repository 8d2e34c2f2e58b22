from __future__ import annotations

"""Fantasy draft: randomized snake order + league-wide re-draft setup.

A fantasy draft re-drafts every active player in the league:
  - the current draft class is parked under UNDRAFTED_FANTASY_TEMP
  - every rostered player and free agent joins the UNDRAFTED pool
  - the league enters Phase.FANTASY_DRAFT, remembering the phase to return to
  - the order is a random permutation of teams, snaked over FANTASY_DRAFT_ROUNDS

Cleanup when the queue drains lives in draft.engine (undrafted -> free agents,
parked class restored, phase restored).
"""

import logging
from typing import Any, List, Optional

from config import FANTASY_DRAFT_ROUNDS, FANTASY_SLOT_MAX_SHUFFLES

from .collaborators import DraftRandom
from .order_store import DraftOrder, DraftOrderStore, require_complete_rounds
from .types import DraftContext, Phase, Pick, PoolTag, TeamId

logger = logging.getLogger(__name__)


def shuffle_for_slot(
    team_ids: List[TeamId],
    rng: DraftRandom,
    *,
    user_team_id: TeamId,
    preferred_slot: Optional[int],
    max_shuffles: int = FANTASY_SLOT_MAX_SHUFFLES,
) -> int:
    """Shuffle team_ids in place, retrying until user_team_id sits at preferred_slot.

    Best effort: after max_shuffles retries the last permutation is kept.
    Returns the number of extra shuffles performed.
    """
    rng.shuffle(team_ids)
    n = len(team_ids)
    if preferred_slot is None or not (1 <= int(preferred_slot) <= n):
        return 0

    idx = int(preferred_slot) - 1
    tries = 0
    while team_ids[idx] != user_team_id and tries < int(max_shuffles):
        rng.shuffle(team_ids)
        tries += 1
    if team_ids[idx] != user_team_id:
        logger.warning(
            "FANTASY_SLOT_NOT_PLACED user_team_id=%s preferred_slot=%s shuffles=%s",
            user_team_id,
            preferred_slot,
            tries,
        )
    return tries


def build_fantasy_order(
    ctx: DraftContext,
    rng: DraftRandom,
    *,
    preferred_slot: Optional[int] = None,
    rounds: int = FANTASY_DRAFT_ROUNDS,
) -> DraftOrder:
    """Randomized snake order; every pick is owned by its original team."""
    if int(rounds) < 1:
        raise ValueError(f"rounds must be >= 1, got {rounds}")

    team_ids = list(ctx.team_ids)
    shuffle_for_slot(team_ids, rng, user_team_id=ctx.user_team_id, preferred_slot=preferred_slot)

    picks: List[Pick] = []
    for round_no in range(1, int(rounds) + 1):
        for slot, tid in enumerate(team_ids, start=1):
            picks.append(Pick(round=round_no, pick=slot, team_id=tid, original_team_id=tid))
        team_ids.reverse()  # snake

    order = DraftOrder(picks)
    require_complete_rounds(order, num_teams=ctx.num_teams, rounds=range(1, int(rounds) + 1))
    return order


def start_fantasy_draft(
    repo: Any,
    ctx: DraftContext,
    rng: DraftRandom,
    *,
    preferred_slot: Optional[int] = None,
    rounds: int = FANTASY_DRAFT_ROUNDS,
) -> DraftContext:
    """Put the whole league into the fantasy pool and persist the order.

    Returns the refreshed DraftContext (phase=FANTASY_DRAFT, next_phase=old phase).
    """
    if ctx.is_fantasy_draft:
        raise ValueError("a fantasy draft is already in progress")
    remaining = len(DraftOrderStore(repo).load())
    if remaining:
        raise ValueError(f"a draft is in progress ({remaining} picks remaining)")

    order = build_fantasy_order(ctx, rng, preferred_slot=preferred_slot, rounds=rounds)
    with repo.transaction():
        parked = repo.retag_pool(PoolTag.UNDRAFTED, PoolTag.UNDRAFTED_FANTASY_TEMP)
        pooled = repo.move_active_players_to_pool(PoolTag.UNDRAFTED)
        repo.set_game_attributes({"phase": int(Phase.FANTASY_DRAFT), "next_phase": int(ctx.phase)})
        DraftOrderStore(repo).save(order)

    logger.info(
        "FANTASY_DRAFT_STARTED season=%s parked=%s pooled=%s return_phase=%s picks=%s",
        ctx.season,
        parked,
        pooled,
        ctx.phase.name,
        len(order),
    )
    return repo.load_draft_context()
