import pytest
from fastapi.testclient import TestClient

from draft.order_store import DraftOrder, DraftOrderStore
from draft.types import Phase, Pick


@pytest.fixture
def client(repo, db_path, monkeypatch):
    monkeypatch.setenv("LEAGUE_DB_PATH", db_path)
    from app.main import app

    with TestClient(app) as c:
        yield c


def _save_order(repo, team_ids):
    picks = [Pick(round=1, pick=i, team_id=t, original_team_id=t) for i, t in enumerate(team_ids, start=1)]
    DraftOrderStore(repo).save(DraftOrder(picks))


def test_order_board_empty(client):
    res = client.get("/api/draft/order")
    assert res.status_code == 200
    body = res.json()
    assert body["ok"] is True
    assert body["remaining"] == 0
    assert body["on_the_clock"] is None
    assert body["context"]["season"] == 2025


def test_lottery_endpoint_persists_order(client, repo):
    res = client.post("/api/draft/order/lottery", json={})
    assert res.status_code == 200
    body = res.json()
    assert len(body["order"]) == 60
    assert len(body["lottery"]["winners"]) == 3
    assert len(DraftOrderStore(repo).load()) == 60
    assert repo.get_draft_pick_records(2025) == []


def test_lottery_with_seed_is_reproducible(client, repo):
    first = client.post("/api/draft/order/lottery", json={"rng_seed": 7}).json()
    repo.seed_draft_picks(2025, range(30))
    second = client.post("/api/draft/order/lottery", json={"rng_seed": 7}).json()
    assert first["lottery"]["winners"] == second["lottery"]["winners"]
    assert first["order"] == second["order"]


def test_lottery_without_ownership_records_is_server_error(client, repo):
    repo.delete_draft_pick_records(2025)
    res = client.post("/api/draft/order/lottery", json={})
    assert res.status_code == 500
    assert res.json()["error"]["code"] == "DRAFT_MISSING_OWNERSHIP_RECORD"


def test_autoplay_then_user_pick(client, repo, undrafted_pool):
    _save_order(repo, [3, 0])

    res = client.post("/api/draft/until-user-or-end", json={})
    assert res.status_code == 200
    body = res.json()
    assert body["state"] == "PAUSED_FOR_USER"
    assert len(body["drafted_ids"]) == 1
    assert body["board"]["user_on_the_clock"] is True

    prospects = client.get("/api/draft/prospects", params={"limit": 3}).json()["prospects"]
    assert len(prospects) == 3
    values = [p["value"] for p in prospects]
    assert values == sorted(values, reverse=True)

    res = client.post("/api/draft/pick", json={"player_id": prospects[0]["player_id"]})
    assert res.status_code == 200
    body = res.json()
    assert body["pick"]["team_id"] == 0
    assert body["player"]["team_id"] == 0
    assert body["player"]["contract"]["amount"] == 4500
    assert body["remaining"] == 0


def test_pick_out_of_turn_is_conflict(client, repo, undrafted_pool):
    _save_order(repo, [3, 0])
    res = client.post("/api/draft/pick", json={"player_id": undrafted_pool[0].player_id})
    assert res.status_code == 409
    body = res.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "DRAFT_NOT_YOUR_PICK"


def test_pick_unknown_prospect_is_not_found(client, repo):
    _save_order(repo, [0])
    res = client.post("/api/draft/pick", json={"player_id": 123456})
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "DRAFT_UNKNOWN_PROSPECT"


def test_pool_exhausted_is_server_error(client, repo):
    _save_order(repo, [3, 4])
    res = client.post("/api/draft/until-user-or-end", json={})
    assert res.status_code == 500
    assert res.json()["error"]["code"] == "DRAFT_POOL_EXHAUSTED"


def test_max_picks(client, repo, undrafted_pool):
    _save_order(repo, [3, 4, 5])
    body = client.post("/api/draft/until-user-or-end", json={"max_picks": 2}).json()
    assert body["state"] == "RUNNING"
    assert body["remaining"] == 1


def test_generate_prospects(client, repo):
    res = client.post("/api/draft/prospects/generate", json={"pool_tag": "undrafted_2", "count": 5})
    assert res.status_code == 200
    body = res.json()
    assert body["pool_tag"] == "UNDRAFTED_2"
    assert body["count"] == 5
    listed = client.get("/api/draft/prospects", params={"pool_tag": "UNDRAFTED_2"}).json()["prospects"]
    assert sorted(p["player_id"] for p in listed) == sorted(body["player_ids"])


@pytest.mark.parametrize("pool_tag", ["NOPE", "UNDRAFTED_FANTASY_TEMP"])
def test_generate_prospects_bad_tag(client, pool_tag):
    res = client.post("/api/draft/prospects/generate", json={"pool_tag": pool_tag, "count": 1})
    assert res.status_code == 400


def test_fantasy_preview_writes_nothing(client, repo):
    res = client.get("/api/draft/order/fantasy/preview", params={"preferred_slot": 1, "rounds": 2})
    assert res.status_code == 200
    order = res.json()["order"]
    assert len(order) == 60
    assert order[0]["team_id"] == 0
    assert repo.get_draft_order_rows() is None

    assert client.get("/api/draft/order/fantasy/preview", params={"rounds": 0}).status_code == 400


def test_fantasy_setup(client, add_player):
    add_player(ovr=60, pot=62, age=28, pool_tag=None, team_id=2)
    res = client.post("/api/draft/order/fantasy", json={"rounds": 2})
    assert res.status_code == 200
    body = res.json()
    assert body["context"]["phase"] == -1
    assert body["context"]["next_phase"] == 4
    assert len(body["order"]) == 60

    again = client.post("/api/draft/order/fantasy", json={"rounds": 2})
    assert again.status_code == 400

    assert client.post("/api/draft/order/fantasy", json={"rounds": 0}).status_code == 422


def test_fantasy_setup_during_annual_draft_is_rejected(client, repo):
    client.post("/api/draft/order/lottery", json={"rng_seed": 3})
    res = client.post("/api/draft/order/fantasy", json={"rounds": 1})
    assert res.status_code == 400
    assert len(DraftOrderStore(repo).load()) == 60


def test_autoplay_before_lottery_is_rejected(client, repo):
    res = client.post("/api/draft/until-user-or-end", json={})
    assert res.status_code == 400
    assert repo.load_draft_context().phase == Phase.DRAFT


def test_autoplay_outside_draft_phase(client, repo):
    repo.set_game_attributes({"phase": 5})
    res = client.post("/api/draft/until-user-or-end", json={})
    assert res.status_code == 400
