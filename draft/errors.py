from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(eq=False)
class DraftError(Exception):
    """Structured error for draft flows.

    The server layer maps these to HTTP 4xx/5xx while keeping a stable
    machine-readable code for client/UI.
    """

    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class DataIntegrityError(DraftError):
    """Persisted draft data is inconsistent; the operation is aborted with no partial writes."""


class NotFoundError(DraftError):
    """A referenced prospect / pick does not exist; draft state is unchanged."""


class AlreadyResolvedError(DraftError):
    """A prospect or pick was resolved twice (queue-discipline violation upstream)."""


class PickIndexOutOfRangeError(DraftError, IndexError):
    """Rookie scale lookup outside the schedule (only rounds 1-2 have a scale)."""


class NotYourPickError(DraftError):
    """The user team tried to pick while another team is on the clock."""


# Error codes (stable API surface)
DRAFT_MISSING_OWNERSHIP_RECORD = "DRAFT_MISSING_OWNERSHIP_RECORD"
DRAFT_DUPLICATE_PICK_SLOT = "DRAFT_DUPLICATE_PICK_SLOT"
DRAFT_INVALID_ORDER = "DRAFT_INVALID_ORDER"
DRAFT_POOL_EXHAUSTED = "DRAFT_POOL_EXHAUSTED"
DRAFT_CONTEXT_MISSING = "DRAFT_CONTEXT_MISSING"
DRAFT_UNKNOWN_PROSPECT = "DRAFT_UNKNOWN_PROSPECT"
DRAFT_ORDER_EMPTY = "DRAFT_ORDER_EMPTY"
DRAFT_ALREADY_DRAFTED = "DRAFT_ALREADY_DRAFTED"
DRAFT_PICK_OUT_OF_RANGE = "DRAFT_PICK_OUT_OF_RANGE"
DRAFT_NOT_YOUR_PICK = "DRAFT_NOT_YOUR_PICK"
