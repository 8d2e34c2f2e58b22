import pytest

from draft.errors import DataIntegrityError, NotFoundError
from draft.pool import default_prospect_count
from draft.types import Phase, PoolTag
from league_repo import LeagueRepo, main

from conftest import make_player


def test_context_from_game_attributes(ctx):
    assert ctx.season == 2025
    assert ctx.starting_season == 2024
    assert ctx.phase == Phase.DRAFT
    assert ctx.next_phase is None
    assert ctx.team_ids == tuple(range(30))


def test_missing_context(tmp_path):
    with LeagueRepo(tmp_path / "empty.sqlite3") as repo:
        repo.init_db()
        with pytest.raises(NotFoundError) as ei:
            repo.load_draft_context()
        assert ei.value.code == "DRAFT_CONTEXT_MISSING"


def test_malformed_context(repo):
    repo.set_game_attributes({"phase": 42})
    with pytest.raises(DataIntegrityError):
        repo.load_draft_context()


def test_init_db_is_idempotent(repo, ctx):
    repo.init_db()
    assert repo.load_draft_context() == ctx
    assert len(repo.list_team_ids()) == 30


def test_standings_without_season_row(repo, ctx):
    repo.upsert_teams([{"team_id": 30, "name": "Expansion"}])
    teams = repo.get_teams_with_standings(ctx.season)
    expansion = teams[-1]
    assert expansion.team_id == 30
    assert expansion.win_pct == 0.0
    assert expansion.playoff_rounds_won == -1


def test_player_columns_are_authoritative(repo):
    p = make_player(ovr=40, pot=60)
    pid = repo.insert_player(p)
    with repo.transaction() as cur:
        cur.execute("UPDATE players SET pool_tag=?, team_id=? WHERE player_id=?;", (None, 7, pid))
    stored = repo.get_player(pid)
    assert stored.team_id == 7
    assert stored.pool_tag is None


def test_update_unknown_player(repo):
    p = make_player(ovr=40, pot=60)
    with pytest.raises(ValueError):
        repo.update_player(p)
    p.player_id = 9999
    with pytest.raises(KeyError):
        repo.update_player(p)


def test_move_active_players_skips_prospects(repo, add_player):
    rostered = add_player(ovr=60, pot=60, age=26, pool_tag=None, team_id=1)
    fa = add_player(ovr=50, pot=50, age=31, pool_tag=None, team_id=-1)
    prospect = add_player(ovr=30, pot=70, pool_tag=PoolTag.UNDRAFTED_3)

    assert repo.move_active_players_to_pool(PoolTag.UNDRAFTED) == 2
    assert repo.get_player(rostered.player_id).pool_tag == PoolTag.UNDRAFTED
    assert repo.get_player(fa.player_id).team_id is None
    assert repo.get_player(prospect.player_id).pool_tag == PoolTag.UNDRAFTED_3


def test_seed_draft_picks_is_idempotent(repo, ctx):
    assert repo.seed_draft_picks(ctx.season, ctx.team_ids) == 0
    assert repo.seed_draft_picks(ctx.season + 1, ctx.team_ids) == 60
    records = repo.get_draft_pick_records(ctx.season + 5)
    assert len(records) == 60
    assert all(r["owner_team"] == r["original_team"] for r in records)


def test_set_owner_of_missing_pick(repo, ctx):
    with pytest.raises(KeyError):
        repo.set_draft_pick_owner(ctx.season + 20, 1, 0, 1)


def test_nested_transaction_rolls_back_inner_only(repo, add_player):
    p = add_player(ovr=40, pot=60)
    with repo.transaction():
        repo.retag_pool(PoolTag.UNDRAFTED, PoolTag.UNDRAFTED_2)
        with pytest.raises(RuntimeError):
            with repo.transaction():
                repo.retag_pool(PoolTag.UNDRAFTED_2, PoolTag.UNDRAFTED_3)
                raise RuntimeError("inner")
    assert repo.get_player(p.player_id).pool_tag == PoolTag.UNDRAFTED_2


def test_cli_seed_and_show(tmp_path, capsys):
    db = str(tmp_path / "cli.sqlite3")
    main(["init", "--db", db])
    main(["seed-picks", "--db", db, "--season", "2030", "--teams", "4", "--years-ahead", "1"])
    main(["show-order", "--db", db])
    out = capsys.readouterr().out
    assert "seeded 16 draft pick records" in out
    assert "0 picks remaining" in out


def test_cli_set_pick_owner(repo, ctx, db_path, capsys):
    main(["set-pick-owner", "--db", db_path, "--season", str(ctx.season), "--round", "1",
          "--original-team", "5", "--owner-team", "20"])
    assert "-> team 20" in capsys.readouterr().out
    owners = {(r["round"], r["original_team"]): r["owner_team"] for r in repo.get_draft_pick_records(ctx.season)}
    assert owners[(1, 5)] == 20
    assert owners[(2, 5)] == 5

    with pytest.raises(SystemExit):
        main(["set-pick-owner", "--db", db_path, "--season", str(ctx.season + 20), "--round", "1",
              "--original-team", "5", "--owner-team", "20"])


def test_cli_init_classes(repo, db_path, capsys):
    main(["init-classes", "--db", db_path, "--seed", "3"])
    assert "OK: generated" in capsys.readouterr().out
    counts = [repo.count_players_in_pool(t) for t in (PoolTag.UNDRAFTED, PoolTag.UNDRAFTED_2, PoolTag.UNDRAFTED_3)]
    assert counts == [default_prospect_count(30)] * 3

    # a league only gets its inception classes once
    with pytest.raises(SystemExit):
        main(["init-classes", "--db", db_path])
    assert repo.count_players_in_pool(PoolTag.UNDRAFTED) == counts[0]
