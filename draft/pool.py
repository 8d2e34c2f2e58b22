from __future__ import annotations

"""Draft prospect pool (DB-backed).

Three cohorts are tracked through pool tags on the players table:
  - UNDRAFTED   : eligible for this season's draft
  - UNDRAFTED_2 : eligible next season
  - UNDRAFTED_3 : eligible in two seasons

Lifecycle:
  - league inception: generate_initial_classes() creates all three cohorts
  - after every draft: advance_draft_classes() moves each cohort up one year and
    generates a fresh UNDRAFTED_3 class three years out

Rating / aging math is NOT modeled here; it is delegated to a PlayerModel
(draft.collaborators). This module only decides the distribution of inputs.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

from config import (
    POSITION_PROFILES,
    PROSPECT_AGING_YEARS_RANGE,
    PROSPECT_BASE_AGE,
    PROSPECT_BASE_RATING_RANGE,
    PROSPECT_POT_MAX,
    PROSPECT_POT_MEAN,
    PROSPECT_POT_STD,
    PROSPECTS_PER_30_TEAMS,
)

from .collaborators import DraftRandom, PlayerModel
from .types import DraftContext, Player, PoolTag, norm_pool_tag

logger = logging.getLogger(__name__)


def _clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def default_prospect_count(num_teams: int) -> int:
    """70 prospects per 30 teams, scaled to league size."""
    return int(round(PROSPECTS_PER_30_TEAMS * int(num_teams) / 30))


def base_age_and_draft_year(ctx: DraftContext, pool_tag: PoolTag) -> Tuple[int, int]:
    """(base age, eligible draft year) for a cohort generated right now."""
    tag = norm_pool_tag(pool_tag)
    base_age = PROSPECT_BASE_AGE
    draft_year = ctx.season

    if ctx.is_league_inception:
        # New league: classes for this draft and the following two
        if tag == PoolTag.UNDRAFTED_2:
            return base_age - 1, draft_year + 1
        if tag == PoolTag.UNDRAFTED_3:
            return base_age - 2, draft_year + 2
    elif tag == PoolTag.UNDRAFTED_3:
        # Generated after the draft ends, for the draft in 3 years
        return base_age - 3, draft_year + 3

    return base_age, draft_year


def _draw_prospect_inputs(rng: DraftRandom) -> Tuple[int, int, str, int]:
    lo, hi = PROSPECT_BASE_RATING_RANGE
    base_rating = rng.uniform_int(lo, hi)
    pot = int(round(_clamp(rng.gaussian(PROSPECT_POT_MEAN, PROSPECT_POT_STD), base_rating, PROSPECT_POT_MAX)))
    profile = POSITION_PROFILES[rng.uniform_int(0, len(POSITION_PROFILES) - 1)]
    aging_years = rng.uniform_int(*PROSPECT_AGING_YEARS_RANGE)
    return base_rating, pot, profile, aging_years


def generate_prospects(
    repo: Any,
    ctx: DraftContext,
    pool_tag: PoolTag,
    *,
    player_model: PlayerModel,
    rng: DraftRandom,
    scouting_rank: Optional[int] = None,
    count: Optional[int] = None,
) -> List[Player]:
    """Generate and insert one draft class.

    scouting_rank (1..num_teams) defaults to the user team's scouting expense rank
    over the last three seasons. Storage errors propagate (the caller's
    transaction rolls back the whole class).
    """
    tag = norm_pool_tag(pool_tag)
    if tag is None or tag == PoolTag.UNDRAFTED_FANTASY_TEMP:
        raise ValueError(f"cannot generate prospects for pool_tag={pool_tag!r}")

    n = default_prospect_count(ctx.num_teams) if count is None else int(count)
    if n < 0:
        raise ValueError(f"count must be >= 0, got {count}")

    if not scouting_rank:
        scouting_rank = repo.get_scouting_rank(ctx.user_team_id, ctx.season)

    base_age, draft_year = base_age_and_draft_year(ctx, tag)

    out: List[Player] = []
    with repo.transaction():
        for _ in range(n):
            base_rating, pot, profile, aging_years = _draw_prospect_inputs(rng)
            p = player_model.generate(
                pool_tag=tag,
                base_age=base_age,
                profile=profile,
                base_rating=base_rating,
                pot=pot,
                draft_year=draft_year,
                season=ctx.season,
                scouting_rank=int(scouting_rank),
                rng=rng,
                num_teams=ctx.num_teams,
            )
            p = player_model.develop(p, aging_years, season=ctx.season, rng=rng)
            p.pool_tag = tag
            p.team_id = None
            p.player_id = repo.insert_player(p)
            out.append(p)

    logger.info(
        "DRAFT_PROSPECTS_GENERATED pool_tag=%s count=%s base_age=%s draft_year=%s scouting_rank=%s",
        tag.value,
        len(out),
        base_age,
        draft_year,
        scouting_rank,
    )
    return out


def generate_initial_classes(
    repo: Any,
    ctx: DraftContext,
    *,
    player_model: PlayerModel,
    rng: DraftRandom,
    scouting_rank: Optional[int] = None,
) -> List[Player]:
    """Create the three draft classes of a brand-new league."""
    out: List[Player] = []
    with repo.transaction():
        for tag in (PoolTag.UNDRAFTED, PoolTag.UNDRAFTED_2, PoolTag.UNDRAFTED_3):
            out += generate_prospects(
                repo, ctx, tag, player_model=player_model, rng=rng, scouting_rank=scouting_rank
            )
    return out


def advance_draft_classes(
    repo: Any,
    ctx: DraftContext,
    *,
    player_model: PlayerModel,
    rng: DraftRandom,
    scouting_rank: Optional[int] = None,
) -> List[Player]:
    """Move every class up one year and generate the new UNDRAFTED_3 class.

    Must run after the draft has consumed (or released) the UNDRAFTED class.
    """
    with repo.transaction():
        leftover = repo.count_players_in_pool(PoolTag.UNDRAFTED)
        if leftover:
            logger.warning("DRAFT_CLASS_ADVANCE_WITH_LEFTOVERS pool_tag=UNDRAFTED count=%s", leftover)
        moved_2 = repo.retag_pool(PoolTag.UNDRAFTED_2, PoolTag.UNDRAFTED)
        moved_3 = repo.retag_pool(PoolTag.UNDRAFTED_3, PoolTag.UNDRAFTED_2)
        created = generate_prospects(
            repo, ctx, PoolTag.UNDRAFTED_3, player_model=player_model, rng=rng, scouting_rank=scouting_rank
        )

    logger.info(
        "DRAFT_CLASSES_ADVANCED season=%s moved_2_to_1=%s moved_3_to_2=%s created_3=%s",
        ctx.season,
        moved_2,
        moved_3,
        len(created),
    )
    return created


def load_ranked_pool(
    repo: Any,
    pool_tag: PoolTag = PoolTag.UNDRAFTED,
    *,
    value_fn: Callable[[Player], float],
) -> List[Player]:
    """Pool ordered best -> worst by value_fn (ties: lower player_id first)."""
    players = repo.list_players_in_pool(norm_pool_tag(pool_tag))
    return sorted(players, key=lambda p: (-float(value_fn(p)), int(p.player_id or 0)))
