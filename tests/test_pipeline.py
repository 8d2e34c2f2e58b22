import pytest

from draft.engine import AutoplayState
from draft.pipeline import (
    get_draft_board,
    make_user_pick,
    run_fantasy_setup,
    run_initial_classes,
    run_lottery,
    run_until_user_or_end,
    step_rng,
)
from draft.player_model import BasicPlayerModel
from draft.pool import load_ranked_pool
from draft.types import Phase, PoolTag


def _draft_to_completion(repo, rng, *, max_runs=10):
    model = BasicPlayerModel()
    user_picks = []
    for _ in range(max_runs):
        result = run_until_user_or_end(repo, rng=rng)
        if result.state == AutoplayState.COMPLETE:
            return user_picks
        best = load_ranked_pool(repo, value_fn=model.value)[0]
        _, player, _ = make_user_pick(repo, best.player_id)
        user_picks.append(player)
    pytest.fail("draft did not complete")


def test_step_rng_is_stable_per_step(ctx):
    a = step_rng(ctx, "lottery", seed=7)
    b = step_rng(ctx, "lottery", seed=7)
    c = step_rng(ctx, "autoplay:60", seed=7)
    draws_a = [a.uniform_int(1, 1000) for _ in range(5)]
    assert draws_a == [b.uniform_int(1, 1000) for _ in range(5)]
    assert draws_a != [c.uniform_int(1, 1000) for _ in range(5)]


def test_board_before_and_after_lottery(repo, scripted_rng):
    board = get_draft_board(repo)
    assert board["remaining"] == 0
    assert board["on_the_clock"] is None
    assert board["user_on_the_clock"] is False

    run_lottery(repo, rng=scripted_rng(ints=[1, 251, 450]))
    board = get_draft_board(repo)
    assert board["remaining"] == 60
    assert board["on_the_clock"]["team_id"] == 0
    assert board["user_on_the_clock"] is True
    assert board["context"]["phase_name"] == "DRAFT"


def test_annual_draft_end_to_end(repo, ctx, undrafted_pool, add_player, scripted_rng):
    next_class = [add_player(ovr=30, pot=60, pool_tag=PoolTag.UNDRAFTED_2) for _ in range(4)]
    far_class = [add_player(ovr=25, pot=55, pool_tag=PoolTag.UNDRAFTED_3) for _ in range(3)]

    run_lottery(repo, rng=scripted_rng(ints=[1, 251, 450]))
    assert repo.get_draft_pick_records(ctx.season) == []

    user_picks = _draft_to_completion(repo, scripted_rng(seed=23))
    assert [p.draft.pick for p in user_picks] == [1, 1]
    assert [p.draft.round for p in user_picks] == [1, 2]

    new_ctx = repo.load_draft_context()
    assert new_ctx.phase == Phase.AFTER_DRAFT
    assert new_ctx.next_phase is None

    # leftovers of this class became free agents
    free_agents = repo.list_players_by_team(-1)
    assert len(free_agents) == 20
    assert all(p.contract is not None for p in free_agents)

    # classes moved up one year and a new far class exists
    assert {p.player_id for p in repo.list_players_in_pool(PoolTag.UNDRAFTED)} == {p.player_id for p in next_class}
    assert {p.player_id for p in far_class} <= {p.player_id for p in repo.list_players_in_pool(PoolTag.UNDRAFTED_2)}
    assert repo.count_players_in_pool(PoolTag.UNDRAFTED_3) == 70

    # ownership records are kept four seasons ahead of next season's draft
    assert len(repo.get_draft_pick_records(ctx.season + 5)) == 60


def test_fantasy_draft_end_to_end(repo, ctx, add_player, scripted_rng):
    roster = [add_player(ovr=50 + i % 20, pot=60, age=27, pool_tag=None, team_id=i % 30) for i in range(35)]

    fctx = run_fantasy_setup(repo, preferred_slot=30, rounds=1, rng=scripted_rng(seed=9))
    assert fctx.phase == Phase.FANTASY_DRAFT
    assert fctx.next_phase == Phase.DRAFT
    assert repo.count_players_in_pool(PoolTag.UNDRAFTED) == 35

    first = run_until_user_or_end(repo, rng=scripted_rng(seed=1))
    assert first.state == AutoplayState.PAUSED_FOR_USER
    assert len(first.drafted_ids) == 29

    user_picks = _draft_to_completion(repo, scripted_rng(seed=2))
    assert len(user_picks) == 1
    assert user_picks[0].team_id == ctx.user_team_id
    assert user_picks[0].draft is None

    new_ctx = repo.load_draft_context()
    assert new_ctx.phase == Phase.DRAFT
    assert new_ctx.next_phase is None
    assert repo.count_players_in_pool(PoolTag.UNDRAFTED) == 0
    assert len(repo.list_players_by_team(-1)) == 5
    assert sum(len(repo.list_players_by_team(t)) for t in ctx.team_ids) == 30
    assert {p.player_id for p in roster} == {
        p.player_id for t in list(ctx.team_ids) + [-1] for p in repo.list_players_by_team(t)
    }


def test_autoplay_outside_a_draft_is_rejected(repo):
    repo.set_game_attributes({"phase": int(Phase.REGULAR_SEASON)})
    with pytest.raises(ValueError):
        run_until_user_or_end(repo)


def test_fantasy_setup_refuses_while_annual_order_remains(repo, ctx, scripted_rng):
    run_lottery(repo, rng=scripted_rng(ints=[1, 251, 450]))
    before = get_draft_board(repo)["order"]

    with pytest.raises(ValueError):
        run_fantasy_setup(repo, rounds=1, rng=scripted_rng(seed=3))

    assert get_draft_board(repo)["order"] == before
    assert repo.load_draft_context().phase == Phase.DRAFT


def test_autoplay_before_lottery_is_rejected(repo, ctx, undrafted_pool):
    with pytest.raises(ValueError):
        run_until_user_or_end(repo)

    assert repo.load_draft_context().phase == Phase.DRAFT
    assert repo.count_players_in_pool(PoolTag.UNDRAFTED) == len(undrafted_pool)
    assert repo.list_players_by_team(-1) == []


def test_run_initial_classes_once(repo, scripted_rng):
    created = run_initial_classes(repo, rng=scripted_rng(seed=5))
    assert {p.pool_tag for p in created} == {PoolTag.UNDRAFTED, PoolTag.UNDRAFTED_2, PoolTag.UNDRAFTED_3}
    with pytest.raises(ValueError):
        run_initial_classes(repo, rng=scripted_rng(seed=5))
