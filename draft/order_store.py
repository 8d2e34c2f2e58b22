from __future__ import annotations

"""Draft order queue (in-memory) + its persisted form.

- DraftOrder: the remaining picks of the active draft, head first (FIFO)
- DraftOrderStore: load/save the single draft_order row through LeagueRepo

The queue is owned by whoever runs the draft (AutoplayEngine / draft_user_pick);
nothing else mutates it while a draft is in progress.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from .errors import DRAFT_DUPLICATE_PICK_SLOT, DRAFT_INVALID_ORDER, DRAFT_ORDER_EMPTY, DataIntegrityError, NotFoundError
from .types import Pick

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DraftOrder:
    picks: List[Pick] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.picks = list(self.picks or [])
        seen: Set[Tuple[int, int]] = set()
        for p in self.picks:
            if p.key in seen:
                raise DataIntegrityError(
                    DRAFT_DUPLICATE_PICK_SLOT,
                    f"duplicate pick slot round={p.round} pick={p.pick}",
                    {"round": p.round, "pick": p.pick},
                )
            seen.add(p.key)

    def __len__(self) -> int:
        return len(self.picks)

    def __iter__(self) -> Iterator[Pick]:
        return iter(self.picks)

    def is_empty(self) -> bool:
        return not self.picks

    def peek(self) -> Pick:
        if not self.picks:
            raise NotFoundError(DRAFT_ORDER_EMPTY, "draft order is empty")
        return self.picks[0]

    def pop_head(self) -> Pick:
        if not self.picks:
            raise NotFoundError(DRAFT_ORDER_EMPTY, "draft order is empty")
        return self.picks.pop(0)

    def to_list(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.picks]

    @classmethod
    def from_list(cls, rows: Iterable[Mapping[str, Any]]) -> "DraftOrder":
        picks: List[Pick] = []
        for row in rows or []:
            if not isinstance(row, Mapping):
                raise DataIntegrityError(DRAFT_INVALID_ORDER, f"draft order row is not an object: {row!r}")
            try:
                picks.append(Pick.from_dict(row))
            except (KeyError, TypeError, ValueError) as exc:
                raise DataIntegrityError(DRAFT_INVALID_ORDER, f"malformed draft order row: {row!r}") from exc
        return cls(picks)


def require_complete_rounds(order: DraftOrder, *, num_teams: int, rounds: Sequence[int]) -> None:
    """Fail-loud guard for freshly generated orders.

    Each round must hold exactly num_teams picks numbered 1..num_teams.
    """
    n = int(num_teams)
    by_round: Dict[int, List[int]] = {}
    for p in order:
        by_round.setdefault(p.round, []).append(p.pick)
    if sorted(by_round.keys()) != sorted(int(r) for r in rounds):
        raise DataIntegrityError(
            DRAFT_INVALID_ORDER,
            f"unexpected rounds in draft order: {sorted(by_round.keys())}",
        )
    for r, picks in by_round.items():
        if sorted(picks) != list(range(1, n + 1)):
            raise DataIntegrityError(
                DRAFT_INVALID_ORDER,
                f"round {r} picks are not contiguous 1..{n}",
                {"round": r, "picks": sorted(picks)},
            )


class DraftOrderStore:
    """Persistence for the single remaining-picks queue."""

    def __init__(self, repo: Any):
        self.repo = repo

    def load(self) -> DraftOrder:
        rows: Optional[List[Dict[str, Any]]] = self.repo.get_draft_order_rows()
        if rows is None:
            return DraftOrder([])
        return DraftOrder.from_list(rows)

    def save(self, order: DraftOrder) -> None:
        self.repo.set_draft_order_rows(order.to_list())
        logger.debug("DRAFT_ORDER_SAVED remaining=%s", len(order))
