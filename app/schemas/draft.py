from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class DraftLotteryRequest(BaseModel):
    # Fixed seed for a reproducible lottery (default: DRAFT_RNG_SEED / entropy)
    rng_seed: Optional[int] = None


class DraftFantasyOrderRequest(BaseModel):
    # 1-indexed slot the user team would like in round 1 (best effort)
    preferred_slot: Optional[int] = None
    rounds: int = Field(12, ge=1)


class DraftGenerateProspectsRequest(BaseModel):
    pool_tag: str = "UNDRAFTED"
    count: Optional[int] = Field(None, ge=0)  # default: 70 per 30 teams
    scouting_rank: Optional[int] = Field(None, ge=1)  # default: user team's 3-season rank


class DraftUserPickRequest(BaseModel):
    player_id: int


class DraftUntilUserOrEndRequest(BaseModel):
    max_picks: Optional[int] = Field(None, ge=0)
