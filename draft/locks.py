from __future__ import annotations

"""draft.locks

Process-local lock that serializes draft mutations (order generation, picks,
autoplay runs). Picks must resolve strictly one at a time in queue order; two
concurrent requests would otherwise both read the same head pick.

- SQLite (league_repo.py) stays the SSOT; this lock only orders writers.
- threading.RLock based: no cross-process synchronization (one uvicorn worker).
- Lock order: draft_serial_lock -> repo.transaction(...)
"""

from contextlib import contextmanager
from threading import RLock
from typing import Iterator

_DRAFT_SERIAL_LOCK = RLock()


@contextmanager
def draft_serial_lock(*, reason: str = "", timeout_s: float | None = None) -> Iterator[None]:
    """Serialize draft critical sections within a single process.

    Raises:
        TimeoutError: the lock was not acquired within timeout_s.
        ValueError: timeout_s is not a number.
    """
    if timeout_s is None:
        acquired = _DRAFT_SERIAL_LOCK.acquire()
    else:
        try:
            timeout = float(timeout_s)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"timeout_s must be a float seconds value, got: {timeout_s!r}") from exc
        acquired = _DRAFT_SERIAL_LOCK.acquire(timeout=max(0.0, timeout))

    if not acquired:
        msg = f"draft_serial_lock timeout (timeout_s={timeout_s})"
        if reason:
            msg += f": {reason}"
        raise TimeoutError(msg)

    try:
        yield
    finally:
        _DRAFT_SERIAL_LOCK.release()


__all__ = [
    "draft_serial_lock",
]
