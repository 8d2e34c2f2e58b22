"""Draft system package.

Modules:
  - types        : core domain dataclasses (DraftContext, Pick, Player, ...)
  - errors       : structured DraftError hierarchy + stable error codes
  - collaborators: PlayerModel / DraftRandom protocols and callback signatures
  - rng          : seeded random primitives (uniform_int / shuffle / gaussian)
  - rookie_scale : salary by draft slot (pure)
  - standings    : worst -> best rankings for the order (pure)
  - lottery      : weighted top-3 lottery among the 14 worst teams (pure)
  - order        : lottery order build + persist (retires ownership records)
  - fantasy      : randomized snake order + league-wide re-draft setup
  - order_store  : remaining-picks queue and its persisted form
  - pool         : prospect generation, class advancement, ranked pool
  - player_model : default PlayerModel implementation
  - apply        : resolve one pick into the DB (atomic)
  - engine       : autoplay loop until the user is on the clock or the draft ends
  - pipeline     : stepwise orchestration used by the API
  - locks        : process-local lock serializing draft mutations
"""

from __future__ import annotations

from .errors import DraftError
from .types import DraftContext, Phase, Pick, Player, PoolTag

__all__ = [
    "DraftError",
    "DraftContext",
    "Phase",
    "Pick",
    "Player",
    "PoolTag",
]
