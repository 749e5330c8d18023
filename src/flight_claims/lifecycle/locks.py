"""
Per-claim locking.
Serializes concurrent work on the same claim while unrelated claims
proceed in parallel; optimistic version conflicts are retried.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from ..core.errors import StaleClaimError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STALE_RETRIES = 3


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.holders = 0


class ClaimLocks:
    """
    Reentrant lock per claim identifier.

    A claim's lock exists only while some thread holds or waits on it.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, claim_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(claim_id)
            if entry is None:
                entry = self._entries[claim_id] = _Entry()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[claim_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


def retry_on_stale(operation: Callable[[], T], attempts: int = DEFAULT_STALE_RETRIES) -> T:
    """
    Run a read-modify-save operation, re-running it on version conflicts.

    The operation must re-read the claim on every attempt.

    Raises:
        StaleClaimError: If every attempt conflicted
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except StaleClaimError as exc:
            if attempt == attempts:
                raise
            logger.warning("%s; retrying (%d/%d)", exc, attempt, attempts)
    raise AssertionError("unreachable")
