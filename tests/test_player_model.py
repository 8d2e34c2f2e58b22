import pytest

from draft.player_model import BasicPlayerModel
from draft.types import Contract, Phase, PoolTag

from conftest import ScriptedRandom, make_player


class _StdRecorder(ScriptedRandom):
    def __init__(self):
        super().__init__()
        self.stds = []

    def gaussian(self, mean, std):
        self.stds.append(std)
        return 0.0


def test_generate_shapes_prospect(scripted_rng):
    model = BasicPlayerModel()
    p = model.generate(
        pool_tag=PoolTag.UNDRAFTED_2,
        base_age=18,
        profile="Big",
        base_rating=20,
        pot=65,
        draft_year=2026,
        season=2025,
        scouting_rank=1,
        rng=scripted_rng(seed=1),
    )
    assert p.age(2025) == 18
    assert p.draft_year == 2026
    assert p.pool_tag == PoolTag.UNDRAFTED_2
    assert (p.ovr, p.pot) == (20, 65)
    assert p.skills == ("R", "Po")
    assert p.name


def test_low_potential_has_no_skills(scripted_rng):
    p = BasicPlayerModel().generate(
        pool_tag=PoolTag.UNDRAFTED,
        base_age=19,
        profile="Point",
        base_rating=30,
        pot=25,
        draft_year=2025,
        season=2025,
        scouting_rank=30,
        rng=scripted_rng(),
    )
    assert p.skills == ()
    # pot never sits below ovr
    assert p.pot == 30


def test_develop_ages_and_caps_at_potential(scripted_rng):
    p = make_player(ovr=40, pot=45, age=19)
    BasicPlayerModel().develop(p, 3, season=2025, rng=scripted_rng(gauss=[4.0, 4.0, 4.0]))
    assert p.age(2025) == 22
    assert p.ovr == 45


def test_value_weights_potential_for_young_players():
    model = BasicPlayerModel()
    young = make_player(ovr=40, pot=80, age=19)
    vet = make_player(ovr=60, pot=62, age=28)
    assert model.value(young) == pytest.approx(68.0)
    assert model.value(vet) == 60
    assert model.value(make_player(ovr=40, pot=80, age=18)) > model.value(young)


def test_free_agent_contract():
    model = BasicPlayerModel()
    p = make_player(ovr=60, pot=62, age=28, team_id=4, pool_tag=None)
    model.add_to_free_agents(p, phase=Phase.FREE_AGENCY, season=2025)
    assert p.team_id == -1
    assert p.pool_tag is None
    assert p.contract == Contract(amount=3000, exp=2027)

    q = make_player(ovr=10, pot=20, age=30)
    model.add_to_free_agents(q, phase=Phase.AFTER_DRAFT, season=2025)
    assert q.contract == Contract(amount=500, exp=2026)


@pytest.mark.parametrize("num_teams, expected_std", [(10, 5.0), (30, 1.0 + 4.0 * 9 / 29)])
def test_worst_scouting_fuzz_scales_with_league_size(num_teams, expected_std):
    rng = _StdRecorder()
    p = BasicPlayerModel().generate(
        pool_tag=PoolTag.UNDRAFTED,
        base_age=19,
        profile="Wing",
        base_rating=40,
        pot=70,
        draft_year=2025,
        season=2025,
        scouting_rank=10,
        rng=rng,
        num_teams=num_teams,
    )
    assert rng.stds == [pytest.approx(expected_std)]
    assert p.current_ratings["fuzz"] == 0.0
