from __future__ import annotations

"""Rookie scale (pure).

Salary (thousands of dollars / year) is fixed by draft position. The canonical
table covers 60 picks (2 rounds x 30 teams); other league sizes pad with the
minimum salary or drop the smallest salaries from the tail.
"""

from typing import List, Sequence

from config import DRAFT_ROUNDS, ROOKIE_SALARIES, ROOKIE_SALARY_FLOOR

from .errors import DRAFT_PICK_OUT_OF_RANGE, PickIndexOutOfRangeError


def compute_schedule(num_teams: int) -> List[int]:
    """Return the rookie salary schedule for a league of num_teams teams."""
    schedule = list(ROOKIE_SALARIES)
    target = DRAFT_ROUNDS * int(num_teams)
    while len(schedule) < target:
        schedule.append(ROOKIE_SALARY_FLOOR)
    while len(schedule) > target:
        schedule.pop()
    return schedule


def amount_for_pick(schedule: Sequence[int], round_no: int, pick_no: int, num_teams: int) -> int:
    """Rookie salary for (round, pick); only defined for rounds 1-2."""
    r = int(round_no)
    p = int(pick_no)
    n = int(num_teams)
    i = (p - 1) + n * (r - 1)
    if r < 1 or p < 1 or p > n or i >= len(schedule):
        raise PickIndexOutOfRangeError(
            DRAFT_PICK_OUT_OF_RANGE,
            f"no rookie scale entry for round={r} pick={p} num_teams={n}",
            {"round": r, "pick": p, "num_teams": n, "schedule_len": len(schedule)},
        )
    return int(schedule[i])


def contract_years_for_round(round_no: int) -> int:
    # 3 years for 1st round, 2 years for 2nd round
    return 4 - int(round_no)
