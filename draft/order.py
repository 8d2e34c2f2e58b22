from __future__ import annotations

"""Lottery draft order construction.

Responsibilities:
  - 1st round:
      * teams ranked worst -> best by (playoff rounds won, win%)
      * slots 1..3 via lottery draw among the 14 worst (draft.lottery)
      * slots 4..N: every other team in ranked order, lottery winners skipped
  - 2nd round:
      * slots 1..N for all teams by win% only (no lottery)
  - owner resolution: each (original team, round) is looked up in the season's
    draft_picks ownership records (traded picks change hands)
  - retirement: once the order is saved, the season's ownership records are
    deleted so those picks can no longer be traded

build_lottery_order() is pure; generate_lottery_order() wraps it in a single
LeagueRepo transaction (read standings + ownership, write order, retire records).
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from config import DRAFT_ROUNDS

from .collaborators import DraftRandom
from .errors import DRAFT_DUPLICATE_PICK_SLOT, DRAFT_MISSING_OWNERSHIP_RECORD, DataIntegrityError
from .lottery import LotteryResult, draw_lottery_winners
from .order_store import DraftOrder, DraftOrderStore, require_complete_rounds
from .standings import rank_by_win_pct, rank_for_lottery, require_complete_standings
from .types import DraftContext, Pick, TeamId, TeamStanding

logger = logging.getLogger(__name__)


OwnershipIndex = Mapping[Tuple[TeamId, int], TeamId]


def index_ownership_records(rows: Iterable[Mapping[str, Any]]) -> Dict[Tuple[TeamId, int], TeamId]:
    """Reorganize draft_picks rows into {(original_team, round): owner_team}."""
    out: Dict[Tuple[TeamId, int], TeamId] = {}
    for row in rows:
        key = (int(row["original_team"]), int(row["round"]))
        if key in out:
            raise DataIntegrityError(
                DRAFT_DUPLICATE_PICK_SLOT,
                f"duplicate ownership record for original_team={key[0]} round={key[1]}",
                {"original_team": key[0], "round": key[1]},
            )
        out[key] = int(row["owner_team"])
    return out


def _resolve_owner(ownership: OwnershipIndex, *, original_team_id: TeamId, round_no: int, season: int) -> TeamId:
    owner = ownership.get((int(original_team_id), int(round_no)))
    if owner is None:
        raise DataIntegrityError(
            DRAFT_MISSING_OWNERSHIP_RECORD,
            f"no draft pick ownership record for team={original_team_id} round={round_no} season={season}",
            {"original_team": int(original_team_id), "round": int(round_no), "season": int(season)},
        )
    return int(owner)


def build_lottery_order(
    ctx: DraftContext,
    teams: Sequence[TeamStanding],
    ownership: OwnershipIndex,
    rng: DraftRandom,
    *,
    include_audit: bool = False,
) -> Tuple[DraftOrder, LotteryResult]:
    """Compute the two-round order for ctx.season (pure; no storage writes)."""
    require_complete_standings(teams, team_ids=ctx.team_ids)

    ranked = rank_for_lottery(teams)
    lottery = draw_lottery_winners(rng, num_teams=len(ranked), include_audit=include_audit)
    winners = list(lottery.winners)

    slot_teams_r1: List[TeamId] = [ranked[i].team_id for i in winners]
    slot_teams_r1 += [t.team_id for i, t in enumerate(ranked) if i not in winners]
    slot_teams_r2: List[TeamId] = [t.team_id for t in rank_by_win_pct(teams)]

    picks: List[Pick] = []
    for round_no, slot_teams in ((1, slot_teams_r1), (2, slot_teams_r2)):
        for slot, original in enumerate(slot_teams, start=1):
            owner = _resolve_owner(ownership, original_team_id=original, round_no=round_no, season=ctx.season)
            picks.append(Pick(round=round_no, pick=slot, team_id=owner, original_team_id=original))

    order = DraftOrder(picks)
    require_complete_rounds(order, num_teams=ctx.num_teams, rounds=range(1, DRAFT_ROUNDS + 1))
    return order, lottery


def generate_lottery_order(
    repo: Any,
    ctx: DraftContext,
    rng: DraftRandom,
    *,
    teams: Optional[Sequence[TeamStanding]] = None,
) -> Tuple[DraftOrder, LotteryResult]:
    """Build, persist and finalize the lottery order for ctx.season.

    One transaction: a missing ownership record aborts before anything is written.
    """
    with repo.transaction():
        standings = list(teams) if teams is not None else repo.get_teams_with_standings(ctx.season)
        ownership = index_ownership_records(repo.get_draft_pick_records(ctx.season))
        order, lottery = build_lottery_order(ctx, standings, ownership, rng)

        DraftOrderStore(repo).save(order)
        # Retired records make this season's picks untradeable from here on.
        retired = repo.delete_draft_pick_records(ctx.season)

    logger.info(
        "DRAFT_LOTTERY_ORDER_GENERATED season=%s winners=%s draws=%s forced=%s retired_records=%s",
        ctx.season,
        [order.picks[i].original_team_id for i in range(len(lottery.winners))],
        lottery.draws,
        lottery.forced,
        retired,
    )
    return order, lottery
