import pytest

from config import ROOKIE_SALARIES
from draft.errors import PickIndexOutOfRangeError
from draft.rookie_scale import amount_for_pick, compute_schedule, contract_years_for_round


def test_canonical_table_for_30_teams():
    schedule = compute_schedule(30)
    assert schedule == list(ROOKIE_SALARIES)
    assert amount_for_pick(schedule, 1, 1, 30) == 5000
    assert amount_for_pick(schedule, 1, 18, 30) == 1100
    assert amount_for_pick(schedule, 1, 30, 30) == 1000
    assert amount_for_pick(schedule, 2, 1, 30) == 500


@pytest.mark.parametrize("num_teams", [2, 7, 14, 29, 30, 31, 40])
def test_schedule_length_and_monotonic(num_teams):
    schedule = compute_schedule(num_teams)
    assert len(schedule) == 2 * num_teams

    amounts = [
        amount_for_pick(schedule, rnd, pick, num_teams)
        for rnd in (1, 2)
        for pick in range(1, num_teams + 1)
    ]
    assert all(a >= b for a, b in zip(amounts, amounts[1:]))


def test_large_league_pads_with_floor():
    schedule = compute_schedule(36)
    assert schedule[:60] == list(ROOKIE_SALARIES)
    assert schedule[60:] == [500] * 12


def test_small_league_drops_smallest_salaries():
    schedule = compute_schedule(10)
    assert schedule == list(ROOKIE_SALARIES[:20])
    # round 2 of a 10-team league starts at overall index 10
    assert amount_for_pick(schedule, 2, 1, 10) == 1800


@pytest.mark.parametrize("rnd,pick", [(3, 1), (0, 1), (1, 0), (1, 31), (-1, 5)])
def test_out_of_range_lookup_fails(rnd, pick):
    schedule = compute_schedule(30)
    with pytest.raises(PickIndexOutOfRangeError) as ei:
        amount_for_pick(schedule, rnd, pick, 30)
    assert ei.value.code == "DRAFT_PICK_OUT_OF_RANGE"
    assert isinstance(ei.value, IndexError)


def test_contract_years_by_round():
    assert contract_years_for_round(1) == 3
    assert contract_years_for_round(2) == 2
