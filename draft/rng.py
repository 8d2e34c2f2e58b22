from __future__ import annotations

"""Random primitives used by the draft.

The draft only consumes three primitives (see draft.collaborators.DraftRandom):
  - uniform_int(lo, hi)  inclusive on both ends
  - shuffle(seq)         in place, uniform permutation
  - gaussian(mean, std)

SeededDraftRandom is the production implementation (random.Random underneath).
"""

import hashlib
import random
from typing import Any, MutableSequence, Optional


def stable_seed(*parts: Any) -> int:
    """Cross-process stable seed (python hash() is randomized per process)."""
    raw = "|".join(str(p) for p in parts)
    h = hashlib.sha256(raw.encode("utf-8")).digest()
    return int.from_bytes(h[:8], "big", signed=False)


class SeededDraftRandom:
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def uniform_int(self, lo: int, hi: int) -> int:
        return self._rng.randint(int(lo), int(hi))

    def shuffle(self, seq: MutableSequence[Any]) -> None:
        self._rng.shuffle(seq)

    def gaussian(self, mean: float, std: float) -> float:
        return self._rng.gauss(float(mean), float(std))


def make_draft_rng(seed: Optional[int] = None, *salt: Any) -> SeededDraftRandom:
    """Build a draft rng; with a seed, salt parts derive a stable per-step stream."""
    if seed is None:
        return SeededDraftRandom(None)
    if salt:
        return SeededDraftRandom(stable_seed(seed, *salt))
    return SeededDraftRandom(int(seed))
