from __future__ import annotations

"""Draft lottery (pure).

The 14 worst teams (after sorting by playoff rounds won, then win%) hold
lottery combinations out of 1000:

  seed:   1    2    3    4   5   6   7   8   9  10  11  12  13  14
  combos: 250  199  156  119  88  63  43  28  17  11   8   7   6   5

The top 3 picks are drawn without replacement by repeated rejection: draw
d in [1, 1000], map it to the seed whose cumulative bucket contains it
(cum[i-1] < d <= cum[i]) and accept it unless that seed already won.

Leagues with fewer than 14 teams use the first num_teams entries of the table
(the draw range shrinks to their total).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from config import LOTTERY_CHANCES, LOTTERY_MAX_DRAWS, LOTTERY_WINNERS

from .collaborators import DraftRandom

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LotteryResult:
    """Lottery outcome as indices into the lottery seed order (0 = worst team).

    Notes:
      - winners is ordered: [pick 1, pick 2, pick 3]
      - draws counts every draw including rejected repeats
      - forced is True when the redraw bound was hit and remaining slots were
        filled with the worst unchosen seeds
    """

    cumulative: Tuple[int, ...]
    winners: Tuple[int, ...]
    draws: int
    forced: bool = False
    audit: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cumulative": list(self.cumulative),
            "winners": list(self.winners),
            "draws": int(self.draws),
            "forced": bool(self.forced),
            "audit": dict(self.audit),
        }


def cumulative_chances(chances: Sequence[int] = LOTTERY_CHANCES, *, num_eligible: int | None = None) -> List[int]:
    """Running sum of the odds table, truncated to num_eligible seeds."""
    table = [int(c) for c in chances]
    if num_eligible is not None:
        table = table[: max(0, int(num_eligible))]
    cum: List[int] = []
    total = 0
    for c in table:
        total += c
        cum.append(total)
    return cum


def bucket_for_draw(cumulative: Sequence[int], draw: int) -> int:
    """Index i such that cumulative[i-1] < draw <= cumulative[i]."""
    d = int(draw)
    if not cumulative or d < 1 or d > int(cumulative[-1]):
        raise ValueError(f"draw must be in [1, {cumulative[-1] if cumulative else 0}], got {d}")
    # linear scan is fine (len <= 14)
    for i, c in enumerate(cumulative):
        if d <= int(c):
            return i
    return len(cumulative) - 1


def draw_lottery_winners(
    rng: DraftRandom,
    *,
    num_teams: int,
    chances: Sequence[int] = LOTTERY_CHANCES,
    num_winners: int = LOTTERY_WINNERS,
    max_draws: int = LOTTERY_MAX_DRAWS,
    include_audit: bool = False,
) -> LotteryResult:
    """Draw distinct lottery winners (indices into the worst -> best seed order)."""
    cum = cumulative_chances(chances, num_eligible=min(len(chances), int(num_teams)))
    if not cum:
        raise ValueError("lottery requires at least one eligible team")
    n_win = min(int(num_winners), len(cum))

    winners: List[int] = []
    audit: Dict[str, Any] = {}
    draws = 0
    while len(winners) < n_win and draws < int(max_draws):
        d = rng.uniform_int(1, cum[-1])
        draws += 1
        i = bucket_for_draw(cum, d)
        if include_audit:
            audit.setdefault("draws", []).append({"draw": int(d), "bucket": int(i), "accepted": i not in winners})
        if i not in winners:
            winners.append(i)

    forced = False
    if len(winners) < n_win:
        forced = True
        logger.warning(
            "DRAFT_LOTTERY_DRAW_BOUND_HIT draws=%s winners=%s filling_with_worst_remaining",
            draws,
            winners,
        )
        for i in range(len(cum)):
            if len(winners) >= n_win:
                break
            if i not in winners:
                winners.append(i)

    return LotteryResult(
        cumulative=tuple(cum),
        winners=tuple(winners),
        draws=draws,
        forced=forced,
        audit=audit,
    )
