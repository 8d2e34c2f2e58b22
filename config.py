"""League-wide constants for the draft subsystem.

Values that depend on the running process (db path, rng seed) come from the
environment; everything else is a plain module-level constant.
"""

from __future__ import annotations

import os
from typing import Optional, Tuple


BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Process configuration
LEAGUE_DB_PATH: Optional[str] = os.environ.get("LEAGUE_DB_PATH") or None
_seed_raw = (os.environ.get("DRAFT_RNG_SEED") or "").strip()
DRAFT_RNG_SEED: Optional[int] = int(_seed_raw) if _seed_raw.lstrip("-").isdigit() else None

# League shape
DEFAULT_NUM_TEAMS = 30
FREE_AGENT_TEAM_ID = -1
DRAFT_ROUNDS = 2

# Rookie scale (thousands of dollars / year), canonical 60-pick table.
ROOKIE_SALARY_FLOOR = 500
ROOKIE_SALARIES: Tuple[int, ...] = (
    5000, 4500, 4000, 3500, 3000, 2750, 2500, 2250, 2000, 1900,
    1800, 1700, 1600, 1500, 1400, 1300, 1200, 1100, 1000, 1000,
    1000, 1000, 1000, 1000, 1000, 1000, 1000, 1000, 1000, 1000,
    500, 500, 500, 500, 500, 500, 500, 500, 500, 500,
    500, 500, 500, 500, 500, 500, 500, 500, 500, 500,
    500, 500, 500, 500, 500, 500, 500, 500, 500, 500,
)

# Lottery: combinations out of 1000 for the 14 worst teams (worst first).
LOTTERY_CHANCES: Tuple[int, ...] = (250, 199, 156, 119, 88, 63, 43, 28, 17, 11, 8, 7, 6, 5)
LOTTERY_WINNERS = 3
LOTTERY_MAX_DRAWS = 10_000

# Fantasy draft
FANTASY_DRAFT_ROUNDS = 12
FANTASY_SLOT_MAX_SHUFFLES = 1000

# Prospect generation
PROSPECTS_PER_30_TEAMS = 70
PROSPECT_BASE_RATING_RANGE: Tuple[int, int] = (8, 31)
PROSPECT_POT_MEAN = 48.0
PROSPECT_POT_STD = 17.0
PROSPECT_POT_MAX = 90
PROSPECT_AGING_YEARS_RANGE: Tuple[int, int] = (0, 3)
PROSPECT_BASE_AGE = 19
# "" is the generalist profile; Big is listed twice on purpose.
POSITION_PROFILES: Tuple[str, ...] = ("Point", "Wing", "Big", "Big", "")

# Autopick: index into the value-ranked pool ~ floor(|N(0, std)|)
AUTOPICK_GAUSS_STD = 2.0

# Persistence
SCHEMA_VERSION = "1"
# Ownership records are kept this many seasons ahead of the current draft.
DRAFT_PICK_YEARS_AHEAD = 4
