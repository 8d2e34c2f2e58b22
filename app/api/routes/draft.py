from __future__ import annotations

import os
from typing import Optional

from fastapi import APIRouter, HTTPException

from config import LEAGUE_DB_PATH
from league_repo import LeagueRepo
from draft.errors import DraftError
from draft.fantasy import build_fantasy_order
from draft.locks import draft_serial_lock
from draft.order_store import DraftOrderStore
from draft.pipeline import (
    get_draft_board,
    make_user_pick,
    run_fantasy_setup,
    run_lottery,
    run_until_user_or_end,
    step_rng,
)
from draft.player_model import BasicPlayerModel
from draft.pool import generate_prospects, load_ranked_pool
from draft.rng import make_draft_rng
from draft.types import PoolTag, norm_pool_tag
from app.schemas.draft import (
    DraftLotteryRequest,
    DraftFantasyOrderRequest,
    DraftGenerateProspectsRequest,
    DraftUntilUserOrEndRequest,
    DraftUserPickRequest,
)
from app.services.draft_facade import _draft_error_response

router = APIRouter()


def _db_path() -> str:
    db_path = os.environ.get("LEAGUE_DB_PATH") or LEAGUE_DB_PATH
    if not db_path:
        raise HTTPException(status_code=500, detail="LEAGUE_DB_PATH is required (no default db_path).")
    return str(db_path)


@router.get("/api/draft/order")
async def api_draft_order():
    """Remaining draft order + who is on the clock."""
    try:
        with LeagueRepo(_db_path()) as repo:
            return {"ok": True, **get_draft_board(repo)}
    except DraftError as exc:
        return _draft_error_response(exc)


@router.post("/api/draft/order/lottery")
async def api_draft_order_lottery(req: DraftLotteryRequest):
    """Run the lottery and persist the 2-round order for the current season."""
    try:
        with draft_serial_lock(reason="DRAFT_LOTTERY"), LeagueRepo(_db_path()) as repo:
            rng = None if req.rng_seed is None else make_draft_rng(req.rng_seed, "lottery")
            order, lottery = run_lottery(repo, rng=rng)
            return {"ok": True, "lottery": lottery.to_dict(), "order": order.to_list()}
    except DraftError as exc:
        return _draft_error_response(exc)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/api/draft/order/fantasy")
async def api_draft_order_fantasy(req: DraftFantasyOrderRequest):
    """Start a fantasy draft: whole league into the pool + snake order."""
    try:
        with draft_serial_lock(reason="DRAFT_FANTASY_SETUP"), LeagueRepo(_db_path()) as repo:
            ctx = run_fantasy_setup(repo, preferred_slot=req.preferred_slot, rounds=req.rounds)
            order = DraftOrderStore(repo).load()
            return {"ok": True, "context": ctx.to_dict(), "order": order.to_list()}
    except DraftError as exc:
        return _draft_error_response(exc)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/api/draft/order/fantasy/preview")
async def api_draft_order_fantasy_preview(preferred_slot: Optional[int] = None, rounds: int = 12):
    """Fantasy order preview (nothing is written)."""
    try:
        with LeagueRepo(_db_path()) as repo:
            ctx = repo.load_draft_context()
        order = build_fantasy_order(ctx, step_rng(ctx, "fantasy_preview"), preferred_slot=preferred_slot, rounds=rounds)
        return {"ok": True, "order": order.to_list()}
    except DraftError as exc:
        return _draft_error_response(exc)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/api/draft/prospects/generate")
async def api_draft_prospects_generate(req: DraftGenerateProspectsRequest):
    try:
        tag = norm_pool_tag(req.pool_tag)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid pool_tag: {req.pool_tag}")
    try:
        with draft_serial_lock(reason="DRAFT_PROSPECTS_GENERATE"), LeagueRepo(_db_path()) as repo:
            ctx = repo.load_draft_context()
            created = generate_prospects(
                repo,
                ctx,
                tag,
                player_model=BasicPlayerModel(),
                rng=step_rng(ctx, f"prospects:{tag.value if tag else ''}"),
                scouting_rank=req.scouting_rank,
                count=req.count,
            )
            return {
                "ok": True,
                "pool_tag": tag.value,
                "count": len(created),
                "player_ids": [int(p.player_id) for p in created],
            }
    except DraftError as exc:
        return _draft_error_response(exc)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/api/draft/prospects")
async def api_draft_prospects(pool_tag: str = "UNDRAFTED", limit: Optional[int] = None):
    """Pool ranked best -> worst (the order the autopick draws from)."""
    try:
        tag = norm_pool_tag(pool_tag) or PoolTag.UNDRAFTED
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid pool_tag: {pool_tag}")
    model = BasicPlayerModel()
    with LeagueRepo(_db_path()) as repo:
        ranked = load_ranked_pool(repo, tag, value_fn=model.value)
    if limit is not None:
        ranked = ranked[: max(0, int(limit))]
    return {
        "ok": True,
        "pool_tag": tag.value,
        "prospects": [{**p.to_dict(), "value": round(model.value(p), 2)} for p in ranked],
    }


@router.post("/api/draft/pick")
async def api_draft_pick(req: DraftUserPickRequest):
    """User selection for the pick on the clock."""
    try:
        with draft_serial_lock(reason="DRAFT_USER_PICK"), LeagueRepo(_db_path()) as repo:
            pick, player, order = make_user_pick(repo, req.player_id)
            return {
                "ok": True,
                "pick": pick.to_dict(),
                "player": player.to_dict(),
                "remaining": len(order),
            }
    except DraftError as exc:
        return _draft_error_response(exc)


@router.post("/api/draft/until-user-or-end")
async def api_draft_until_user_or_end(req: DraftUntilUserOrEndRequest):
    """AI picks until the user team is on the clock or the draft ends."""
    try:
        with draft_serial_lock(reason="DRAFT_AUTOPLAY"), LeagueRepo(_db_path()) as repo:
            result = run_until_user_or_end(repo, max_picks=req.max_picks)
            return {"ok": True, **result.to_dict(), "board": get_draft_board(repo)}
    except DraftError as exc:
        return _draft_error_response(exc)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
